"""
MapCompare: Kakao Provider

1. Kakao Local 주소 검색 → 실패 시 키워드(POI) 검색으로 WGS84 좌표 조회
2. Kakao Mobility 길찾기(추천 경로)로 최소 소요시간 경로의 거리/시간 계산

지오코딩 단계의 오류는 "결과 없음"으로 처리하고,
경로 계산 오류는 RouteFailure로 올려 행 단위에서 기록합니다.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from shared.constants import (
    KAKAO_ADDRESS_URL,
    KAKAO_DIRECTIONS_URL,
    KAKAO_KEYWORD_URL,
    KAKAO_PRIORITY_FALLBACKS,
    KAKAO_PRIORITY_RECOMMEND,
)
from shared.errors import ProviderHTTPError, RouteFailure
from shared.models import Coordinate, RouteSummary
from .http import HttpClient, dig, is_number

logger = logging.getLogger("KakaoClient")


def _document_coord(data: Any) -> Optional[Coordinate]:
    doc = dig(data, "documents", 0)
    if not doc:
        return None
    try:
        return Coordinate(lon=float(doc["x"]), lat=float(doc["y"]))
    except (KeyError, TypeError, ValueError):
        return None


def pick_fastest_route(routes: List[Dict]) -> RouteSummary:
    """
    최소 duration 경로 선택 (동률이면 앞선 경로), 숫자 duration이 하나도 없으면 첫 경로.
    duration은 밀리초 → 초, .5는 올림.
    """
    if not routes:
        return RouteSummary()

    best = None
    for route in routes:
        duration = dig(route, "summary", "duration")
        if is_number(duration) and (best is None or duration < best["summary"]["duration"]):
            best = route
    if best is None:
        best = routes[0]

    distance = dig(best, "summary", "distance")
    duration_ms = dig(best, "summary", "duration")
    return RouteSummary(
        distance=distance if is_number(distance) else None,
        duration=math.floor(duration_ms / 1000 + 0.5) if is_number(duration_ms) else None,
    )


class KakaoClient:
    def __init__(self, http: HttpClient, rest_key: str, mobility_key: str = ""):
        self.http = http
        self.rest_key = rest_key
        self.mobility_key = mobility_key or rest_key

    async def _search(self, url: str, query: str) -> Optional[Coordinate]:
        try:
            data = await self.http.get_json(
                url,
                params={"query": query},
                headers={"Authorization": f"KakaoAK {self.rest_key}"},
            )
        except Exception as e:
            logger.warning(f"[Kakao] search failed for '{query}': {e}")
            return None
        return _document_coord(data)

    async def geocode(self, query: str) -> Optional[Coordinate]:
        """주소 지오코딩 → 키워드(POI) 검색 순으로 좌표 조회"""
        if not query:
            return None
        coord = await self._search(KAKAO_ADDRESS_URL, query)
        if coord is None:
            coord = await self._search(KAKAO_KEYWORD_URL, query)
        return coord

    async def _directions(self, origin: Coordinate, destination: Coordinate,
                          priority: Optional[str]) -> RouteSummary:
        data = await self.http.get_json(
            KAKAO_DIRECTIONS_URL,
            params={
                "origin": f"{origin.lon},{origin.lat}",
                "destination": f"{destination.lon},{destination.lat}",
                "priority": priority,
            },
            headers={"Authorization": f"KakaoAK {self.mobility_key}"},
        )
        routes = dig(data, "routes")
        return pick_fastest_route(routes if isinstance(routes, list) else [])

    async def route_summary(self, origin: Coordinate, destination: Coordinate) -> RouteSummary:
        try:
            return await self._directions(origin, destination, KAKAO_PRIORITY_RECOMMEND)
        except ProviderHTTPError as e:
            # 계정에서 priority 파라미터를 지원하지 않는 경우에만 다른 옵션으로 재시도
            if "priority" in e.message.lower():
                for priority in KAKAO_PRIORITY_FALLBACKS:
                    try:
                        return await self._directions(origin, destination, priority)
                    except Exception as retry_error:
                        logger.warning(f"[Kakao] directions retry (priority={priority}) failed: {retry_error}")
            raise RouteFailure(e.message or str(e)) from e
        except Exception as e:
            raise RouteFailure(str(e) or type(e).__name__) from e
