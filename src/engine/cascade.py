"""
MapCompare: Robust Geocoding Cascade

하나의 지오코더(카카오 또는 T맵)에 대해 아래 순서로 후보를 시도하고,
처음 성공한 좌표를 어떤 후보로 얻었는지(used)와 함께 돌려줍니다.

    0. 호출자가 준 우선순위 리스트
    1. 원문
    2. Gemini 우선순위 리스트 (도로명 → 지번)
    3. Gemini 단일 정규화 (원문과 다를 때만)
    4. Gemini 후보 목록
각 단계는 앞 단계가 실패했을 때만 진행되므로 순차 실행입니다.
"""

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from shared.models import Coordinate, ResolvedCoordinate
from .ai import AddressNormalizer

logger = logging.getLogger("Cascade")

Geocoder = Callable[[str], Awaitable[Optional[Coordinate]]]


async def _first_hit(geocode: Geocoder, candidates: Iterable[str], step: str) -> Optional[ResolvedCoordinate]:
    for candidate in candidates:
        coord = await geocode(candidate)
        if coord:
            logger.info(f"Geocoded via {step}: '{candidate}'")
            return ResolvedCoordinate(lon=coord.lon, lat=coord.lat, used=candidate)
    return None


async def robust_geocode(
    raw: str,
    geocode: Geocoder,
    normalizer: AddressNormalizer,
    preferred: Optional[List[str]] = None,
) -> Optional[ResolvedCoordinate]:
    if preferred:
        hit = await _first_hit(geocode, preferred, "priority list")
        if hit:
            return hit

    hit = await _first_hit(geocode, [raw], "raw text")
    if hit:
        return hit

    priority = await normalizer.priority_list(raw)
    hit = await _first_hit(geocode, priority.items, "LLM priority list")
    if hit:
        return hit

    normalized = await normalizer.normalize(raw)
    if normalized and normalized != raw:
        hit = await _first_hit(geocode, [normalized], "LLM normalization")
        if hit:
            return hit

    hit = await _first_hit(geocode, await normalizer.candidates(raw), "LLM candidates")
    if hit:
        return hit

    logger.warning(f"All geocoding steps exhausted for '{raw}'")
    return None
