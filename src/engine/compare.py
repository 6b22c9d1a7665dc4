"""
MapCompare: Route Comparison Pipeline

도착지 1건과 출발지 여러 건에 대해:
1. 도착지를 카카오/T맵 각각의 캐스케이드로 한 번씩 지오코딩
2. 출발지 행들을 동시에 처리 (결과 순서는 입력 순서 유지)
3. 행 안에서는 두 제공자의 지오코딩 → 경로 계산을 서로 독립적으로 동시 실행

실패는 가장 작은 범위(호출 1건, 제공자 1개, 행 1개)에 가둬 두고,
두 제공자 모두 도착지를 찾지 못한 경우에만 요청 전체가 실패합니다.
"""

import asyncio
import logging
from typing import Any, List, Optional, Tuple

import aiohttp

from providers.http import HttpClient
from providers.kakao import KakaoClient
from providers.tmap import TmapClient
from shared.config import Settings
from shared.errors import DestinationGeocodingError, GeocodingFailure, MissingCredential
from shared.models import ComparisonRow, PriorityList, ResolvedCoordinate, RouteSummary
from .ai import AddressNormalizer
from .cascade import robust_geocode

logger = logging.getLogger("Comparator")

KAKAO_LABEL = "카카오"
TMAP_LABEL = "T맵"
EMPTY_ADDRESS_ERROR = "빈 주소"


async def settle(*aws) -> List[Any]:
    """Run awaitables concurrently; a failed one yields its exception instead of cancelling siblings."""
    return await asyncio.gather(*aws, return_exceptions=True)


def _value_or_none(outcome: Any, what: str) -> Any:
    if isinstance(outcome, BaseException):
        logger.warning(f"{what} failed: {outcome}")
        return None
    return outcome


def _row_address(row: Any) -> Optional[str]:
    address = row.get("address") if isinstance(row, dict) else None
    return address if isinstance(address, str) else None


class Comparator:
    def __init__(self, normalizer: AddressNormalizer,
                 kakao: Optional[KakaoClient] = None,
                 tmap: Optional[TmapClient] = None):
        self.normalizer = normalizer
        self.kakao = kakao
        self.tmap = tmap

    async def _resolve(self, client, raw: str, preferred: Optional[List[str]] = None) -> Optional[ResolvedCoordinate]:
        if client is None:
            return None
        return await robust_geocode(raw, client.geocode, self.normalizer, preferred)

    async def resolve_destination(self, destination: str) -> Tuple[PriorityList, Optional[ResolvedCoordinate], Optional[ResolvedCoordinate]]:
        priority = await self.normalizer.priority_list(destination)
        kakao_out, tmap_out = await settle(
            self._resolve(self.kakao, priority.primary),
            self._resolve(self.tmap, priority.primary),
        )
        kakao_dest = _value_or_none(kakao_out, "Kakao destination geocoding")
        tmap_dest = _value_or_none(tmap_out, "Tmap destination geocoding")

        if not kakao_dest and not tmap_dest:
            raise DestinationGeocodingError({
                "kakao": "KAKAO_REST_KEY 미설정" if self.kakao is None else "fail",
                "tmap": "TMAP_APP_KEY 미설정" if self.tmap is None else "fail",
            })
        return priority, kakao_dest, tmap_dest

    async def _kakao_route(self, origin, destination) -> Optional[RouteSummary]:
        if not (self.kakao and origin and destination):
            return None
        return await self.kakao.route_summary(origin, destination)

    async def _tmap_route(self, origin, destination, kakao_origin, kakao_destination) -> Optional[RouteSummary]:
        if not (self.tmap and origin and destination):
            return None
        return await self.tmap.shortest_route(origin, destination, kakao_origin, kakao_destination)

    async def compare_row(self, row: Any, normalized_destination: str,
                          kakao_dest: Optional[ResolvedCoordinate],
                          tmap_dest: Optional[ResolvedCoordinate]) -> ComparisonRow:
        raw_address = _row_address(row)
        address = raw_address.strip() if raw_address else ""
        if not address:
            return ComparisonRow(address=raw_address, error=EMPTY_ADDRESS_ERROR)

        priority = await self.normalizer.priority_list(address)
        kakao_out, tmap_out = await settle(
            self._resolve(self.kakao, priority.primary, priority.items),
            self._resolve(self.tmap, priority.primary, priority.items),
        )
        kakao_origin = _value_or_none(kakao_out, f"Kakao geocoding of '{address}'")
        tmap_origin = _value_or_none(tmap_out, f"Tmap geocoding of '{address}'")

        result = ComparisonRow(
            address=address,
            kakao_type=priority.primary_type,
            tmap_type=priority.primary_type,
            kakao_used=kakao_origin.used if kakao_origin else None,
            tmap_used=tmap_origin.used if tmap_origin else None,
            normalized_origin=priority.primary,
            normalized_destination=normalized_destination,
        )

        # 지오코딩 실패도 행에 명확히 남긴다
        if self.kakao is None:
            result.kakao_error = str(MissingCredential(KAKAO_LABEL))
        elif not (kakao_origin and kakao_dest):
            result.kakao_error = str(GeocodingFailure(KAKAO_LABEL))
        if self.tmap is None:
            result.tmap_error = str(MissingCredential(TMAP_LABEL))
        elif not (tmap_origin and tmap_dest):
            result.tmap_error = str(GeocodingFailure(TMAP_LABEL))

        kakao_route, tmap_route = await settle(
            self._kakao_route(kakao_origin, kakao_dest),
            self._tmap_route(tmap_origin, tmap_dest, kakao_origin, kakao_dest),
        )

        if isinstance(kakao_route, BaseException):
            result.kakao_error = str(kakao_route) or type(kakao_route).__name__
        elif kakao_route is not None:
            result.kakao = kakao_route.distance
            result.kakao_time = kakao_route.duration
            if kakao_route.is_empty:
                result.kakao_error = f"{KAKAO_LABEL} 경로 없음"

        if isinstance(tmap_route, BaseException):
            result.tmap_error = str(tmap_route) or type(tmap_route).__name__
        elif tmap_route is not None:
            result.tmap = tmap_route.distance
            result.tmap_time = tmap_route.duration
            if tmap_route.is_empty:
                result.tmap_error = f"{TMAP_LABEL} 경로 없음"

        result.error = result.kakao_error or result.tmap_error
        return result

    async def compare(self, destination: str, rows: List[Any]) -> List[dict]:
        priority, kakao_dest, tmap_dest = await self.resolve_destination(destination)

        outcomes = await settle(*(
            self.compare_row(row, priority.primary, kakao_dest, tmap_dest) for row in rows
        ))

        results = []
        for row, outcome in zip(rows, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Row comparison error: {outcome}")
                outcome = ComparisonRow(address=_row_address(row), error=str(outcome) or type(outcome).__name__)
            results.append(outcome.to_response())
        return results


def build_normalizer(settings: Settings) -> AddressNormalizer:
    """프로세스 시작 시 한 번만 생성해 모든 요청이 공유"""
    normalizer = AddressNormalizer(
        api_key=settings.GEMINI_API_KEY,
        model_name=settings.GEMINI_MODEL,
        timeout_s=settings.timeout_s,
    )
    if normalizer.enabled:
        normalizer.prepare()
    return normalizer


def build_comparator(settings: Settings, http: HttpClient, normalizer: AddressNormalizer) -> Comparator:
    kakao = None
    if settings.KAKAO_REST_KEY:
        kakao = KakaoClient(http, settings.KAKAO_REST_KEY, settings.kakao_mobility_key)
    tmap = None
    if settings.TMAP_APP_KEY:
        tmap = TmapClient(
            http,
            settings.TMAP_APP_KEY,
            front_max_gap_m=settings.TMAP_FRONT_MAX_GAP_M,
            local_transform_fallback=settings.TMAP_LOCAL_TRANSFORM_FALLBACK,
        )
    return Comparator(normalizer, kakao, tmap)


async def run_comparison(settings: Settings, normalizer: AddressNormalizer,
                         destination: str, rows: List[Any]) -> List[dict]:
    timeout = aiohttp.ClientTimeout(total=settings.timeout_s)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        comparator = build_comparator(settings, HttpClient(session), normalizer)
        return await comparator.compare(destination, rows)
