"""
MapCompare 공유 상수 정의

외부 API 엔드포인트, 좌표계 코드, 경로 옵션 코드 등
프로젝트 전역에서 사용되는 불변 값들을 중앙 관리합니다.
"""

# ─── 좌표계 (Coordinate Reference Systems) ────────────────
EPSG_WGS84 = "EPSG:4326"          # 카카오/T맵 응답 기본 좌표계
EPSG_KOREA_TM = "EPSG:5179"       # 한국 GRS80 중부원점 (T맵 noorLon/noorLat)
TMAP_COORD_WGS84 = "WGS84GEO"     # T맵 API 표기
TMAP_COORD_KOREA_TM = "EPSG5179"

# ─── 거리 계산 ─────────────────────────────────────────────
EARTH_RADIUS_M = 6_371_000

# ─── Kakao ────────────────────────────────────────────────
KAKAO_ADDRESS_URL = "https://dapi.kakao.com/v2/local/search/address.json"
KAKAO_KEYWORD_URL = "https://dapi.kakao.com/v2/local/search/keyword.json"
KAKAO_DIRECTIONS_URL = "https://apis-navi.kakaomobility.com/v1/directions"
KAKAO_PRIORITY_RECOMMEND = "RECOMMEND"
# priority 파라미터 거부 시 재시도 순서 (None = 파라미터 생략)
KAKAO_PRIORITY_FALLBACKS = (None, "DISTANCE", "SHORTEST")

# ─── Tmap ─────────────────────────────────────────────────
TMAP_FULL_ADDR_URL = "https://apis.openapi.sk.com/tmap/geo/fullAddrGeo"
TMAP_POI_URL = "https://apis.openapi.sk.com/tmap/pois"
TMAP_TRANSCOORD_URL = "https://apis.openapi.sk.com/tmap/geo/transcoord"
TMAP_ROUTES_URL = "https://apis.openapi.sk.com/tmap/routes"
TMAP_SEARCH_OPTION_SHORTEST = 2   # 최단거리
TMAP_FRONT_MAX_GAP_M = 500        # 주소 좌표와 POI 진입 좌표 허용 간격

# ─── LLM 후보 ─────────────────────────────────────────────
MAX_LLM_CANDIDATES = 5
