"""
MapCompare: Tmap Provider

지오코딩:
    1차 fullAddrGeo (WGS84 좌표, 없으면 noorLon/noorLat(EPSG5179) 변환)
        + 같은 문자열로 POI를 조회해 진입(front) 좌표가 근처면 front 좌표 우선
    2차 POI 키워드 검색 (front → WGS84 → 변환 좌표 순)

경로:
    최단거리(searchOption=2), 교통정보 미반영으로 계산하고,
    지오코딩 편차를 보정하기 위해 카카오 좌표 조합도 시도해 가장 짧은 경로를 채택합니다.
"""

import logging
import math
from typing import Any, List, Optional, Tuple

from engine.metrics import haversine_m
from engine.transform import transform_5179_to_4326
from shared.constants import (
    TMAP_COORD_KOREA_TM,
    TMAP_COORD_WGS84,
    TMAP_FRONT_MAX_GAP_M,
    TMAP_FULL_ADDR_URL,
    TMAP_POI_URL,
    TMAP_ROUTES_URL,
    TMAP_SEARCH_OPTION_SHORTEST,
    TMAP_TRANSCOORD_URL,
)
from shared.models import Coordinate, RouteSummary
from .http import HttpClient, dig, is_number

logger = logging.getLogger("TmapClient")


def coord_from(obj: Any, lon_key: str, lat_key: str) -> Optional[Coordinate]:
    """obj[lon_key], obj[lat_key]가 모두 유효한 숫자일 때만 좌표 생성"""
    if not isinstance(obj, dict) or obj.get(lon_key) is None or obj.get(lat_key) is None:
        return None
    try:
        lon = float(obj[lon_key])
        lat = float(obj[lat_key])
    except (TypeError, ValueError):
        return None
    if math.isnan(lon) or math.isnan(lat):
        return None
    return Coordinate(lon=lon, lat=lat)


def parse_distance_and_time(data: Any) -> RouteSummary:
    """
    routes 응답의 features에서 총 거리/시간 추출.
    totalDistance/totalTime을 가진 첫 feature를 쓰고, 없으면 구간별 distance/time을 합산.
    """
    features = dig(data, "features")
    if not isinstance(features, list) or not features:
        return RouteSummary()

    for feature in features:
        props = dig(feature, "properties") or {}
        total_distance = props.get("totalDistance")
        total_time = props.get("totalTime")
        if is_number(total_distance) or is_number(total_time):
            return RouteSummary(
                distance=total_distance if is_number(total_distance) else None,
                duration=total_time if is_number(total_time) else None,
            )

    distances = [dig(f, "properties", "distance") for f in features]
    times = [dig(f, "properties", "time") for f in features]
    distances = [d for d in distances if is_number(d)]
    times = [t for t in times if is_number(t)]
    return RouteSummary(
        distance=sum(distances) if distances else None,
        duration=sum(times) if times else None,
    )


def pick_shortest(attempts: List[RouteSummary]) -> RouteSummary:
    """최소 distance 시도 선택 (동률이면 먼저 시도한 쪽), 숫자 distance가 없으면 첫 시도"""
    if not attempts:
        return RouteSummary()
    measured = [a for a in attempts if is_number(a.distance)]
    if not measured:
        return attempts[0]
    return min(measured, key=lambda a: a.distance)


class TmapClient:
    def __init__(self, http: HttpClient, app_key: str,
                 front_max_gap_m: float = TMAP_FRONT_MAX_GAP_M,
                 local_transform_fallback: bool = False):
        self.http = http
        self.app_key = app_key
        self.front_max_gap_m = front_max_gap_m
        self.local_transform_fallback = local_transform_fallback

    # ─── 좌표 변환 ──────────────────────────────────────────
    async def convert_to_wgs84(self, x: float, y: float,
                               source: str = TMAP_COORD_KOREA_TM) -> Optional[Coordinate]:
        coord = None
        try:
            data = await self.http.get_json(
                TMAP_TRANSCOORD_URL,
                params={
                    "version": 1,
                    "format": "json",
                    "appKey": self.app_key,
                    "coordType": source,
                    "toCoordType": TMAP_COORD_WGS84,
                    "x": str(x),
                    "y": str(y),
                },
            )
            coord = coord_from(dig(data, "coordinate"), "lon", "lat")
        except Exception as e:
            logger.warning(f"[Tmap] transcoord failed for ({x}, {y}): {e}")

        if coord is None and self.local_transform_fallback and source == TMAP_COORD_KOREA_TM:
            try:
                lon, lat = transform_5179_to_4326(float(x), float(y))
                coord = Coordinate(lon=lon, lat=lat)
            except Exception as e:
                logger.error(f"PyProj fallback failed: {e}")
        return coord

    async def _convert_noor(self, obj: Any) -> Optional[Coordinate]:
        if not isinstance(obj, dict) or obj.get("noorLon") is None or obj.get("noorLat") is None:
            return None
        try:
            x, y = float(obj["noorLon"]), float(obj["noorLat"])
        except (TypeError, ValueError):
            return None
        return await self.convert_to_wgs84(x, y, TMAP_COORD_KOREA_TM)

    # ─── 지오코딩 ──────────────────────────────────────────
    async def _search_poi(self, keyword: str) -> Optional[dict]:
        data = await self.http.get_json(
            TMAP_POI_URL,
            params={
                "version": 1,
                "format": "json",
                "count": 1,
                "searchKeyword": keyword,
                "appKey": self.app_key,
            },
        )
        poi = dig(data, "searchPoiInfo", "pois", "poi", 0)
        return poi if isinstance(poi, dict) else None

    async def poi_front_coord(self, keyword: str) -> Optional[Coordinate]:
        try:
            return coord_from(await self._search_poi(keyword), "frontLon", "frontLat")
        except Exception as e:
            logger.warning(f"[Tmap] POI front lookup failed for '{keyword}': {e}")
            return None

    async def _geocode_full_address(self, query: str) -> Optional[Coordinate]:
        data = await self.http.get_json(
            TMAP_FULL_ADDR_URL,
            params={
                "version": 1,
                "format": "json",
                "appKey": self.app_key,
                "coordType": TMAP_COORD_WGS84,
                "fullAddr": query,
            },
        )
        item = dig(data, "coordinateInfo", "coordinate", 0)
        if not isinstance(item, dict):
            return None

        addr_coord = coord_from(item, "lon", "lat") or await self._convert_noor(item)

        front = await self.poi_front_coord(query)
        if front and addr_coord:
            gap = haversine_m(addr_coord.lat, addr_coord.lon, front.lat, front.lon)
            if gap <= self.front_max_gap_m:
                return front
        return addr_coord

    async def _geocode_poi(self, query: str) -> Optional[Coordinate]:
        poi = await self._search_poi(query)
        if poi is None:
            return None
        # 도로 진입 좌표(front)가 라우팅 일치도가 가장 높다
        return (
            coord_from(poi, "frontLon", "frontLat")
            or coord_from(poi, "lon", "lat")
            or await self._convert_noor(poi)
        )

    async def geocode(self, query: str) -> Optional[Coordinate]:
        if not query:
            return None
        try:
            coord = await self._geocode_full_address(query)
            if coord:
                return coord
        except Exception as e:
            logger.warning(f"[Tmap] fullAddrGeo failed for '{query}': {e}")
        try:
            return await self._geocode_poi(query)
        except Exception as e:
            logger.warning(f"[Tmap] POI search failed for '{query}': {e}")
            return None

    # ─── 경로 ──────────────────────────────────────────────
    async def route_option_summary(self, origin: Coordinate, destination: Coordinate,
                                   search_option: int = TMAP_SEARCH_OPTION_SHORTEST) -> RouteSummary:
        request = {
            "startX": str(origin.lon),
            "startY": str(origin.lat),
            "endX": str(destination.lon),
            "endY": str(destination.lat),
            "reqCoordType": TMAP_COORD_WGS84,
            "resCoordType": TMAP_COORD_WGS84,
            "searchOption": search_option,
            "trafficInfo": "N",
            "tollgateFareOption": 0,
        }
        base_params = {"version": 1, "format": "json"}

        try:
            data = await self.http.post_json(
                TMAP_ROUTES_URL, body=request, params=base_params,
                headers={"appKey": self.app_key},
            )
            summary = parse_distance_and_time(data)
            if not summary.is_empty:
                return summary
        except Exception as e:
            logger.warning(f"[Tmap] routes POST failed, retrying via GET: {e}")

        try:
            data = await self.http.get_json(
                TMAP_ROUTES_URL, params={**base_params, **request},
                headers={"appKey": self.app_key},
            )
            return parse_distance_and_time(data)
        except Exception as e:
            logger.warning(f"[Tmap] routes GET failed: {e}")
            return RouteSummary()

    async def shortest_route(self, origin: Coordinate, destination: Coordinate,
                             alt_origin: Optional[Coordinate] = None,
                             alt_destination: Optional[Coordinate] = None) -> RouteSummary:
        """
        T맵 좌표 쌍과 (있으면) 카카오 좌표를 섞은 조합을 순서대로 시도해 최단거리 채택.
        시도 순서: T→T, K→T, T→K, K→K (동률 판정이 이 순서에 의존)
        """
        pairs: List[Tuple[Coordinate, Coordinate]] = [(origin, destination)]
        if alt_origin:
            pairs.append((alt_origin, destination))
        if alt_destination:
            pairs.append((origin, alt_destination))
        if alt_origin and alt_destination:
            pairs.append((alt_origin, alt_destination))

        attempts = []
        for start, end in pairs:
            attempts.append(await self.route_option_summary(start, end, TMAP_SEARCH_OPTION_SHORTEST))
        return pick_shortest(attempts)
