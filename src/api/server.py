import logging
import os
from typing import Any, Optional

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from engine.compare import build_normalizer, run_comparison
from shared.config import settings
from shared.errors import DestinationGeocodingError

logger = logging.getLogger("api")

if not settings.KAKAO_REST_KEY or not settings.TMAP_APP_KEY:
    logger.warning("환경변수 KAKAO_REST_KEY, TMAP_APP_KEY 를 .env 에 설정하세요.")
if not settings.kakao_mobility_key:
    logger.warning("KAKAO_MOBILITY_REST_KEY 가 없으면 Kakao Directions 호출이 실패할 수 있습니다.")
if not settings.GEMINI_API_KEY:
    logger.warning("GEMINI_API_KEY 가 없으면 주소 전처리를 건너뜁니다.")

normalizer = build_normalizer(settings)

app = FastAPI(title="MapCompare Route Comparison API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health_check():
    return {"ok": True}


@app.post("/api/compare")
async def compare_endpoint(payload: Optional[Any] = Body(None)):
    """
    도착지 1건 + 출발지 여러 건 → 카카오/T맵 거리·시간 비교

    Request: { "destinationAddress": "서울역", "rows": [{ "address": "강남역" }] }
    """
    if not isinstance(payload, dict):
        payload = {}
    destination = payload.get("destinationAddress") or payload.get("destination")
    rows = payload.get("rows")

    if not isinstance(destination, str) or not destination.strip() or not isinstance(rows, list):
        raise HTTPException(status_code=400, detail="destinationAddress 와 rows 필요")

    try:
        results = await run_comparison(settings, normalizer, destination.strip(), rows)
    except DestinationGeocodingError as e:
        raise HTTPException(status_code=400, detail={"message": str(e), **e.detail})
    except Exception as e:
        logger.error(f"Compare Error: {e}")
        raise HTTPException(status_code=500, detail=f"서버 에러: {str(e)}")

    return {"results": results}


# 프론트 정적 파일 (있을 때만)
_public_dir = os.path.join(os.path.dirname(__file__), "..", "..", "public")
if os.path.isdir(_public_dir):
    app.mount("/", StaticFiles(directory=_public_dir, html=True), name="public")
