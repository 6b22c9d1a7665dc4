"""
Gemini Address Normalizer.

Four independent calls help the geocoding cascade when a raw address fails:
plain normalization, type-classified normalization, a road/lot priority list
and a free-form candidate list. Every call degrades to a pass-through value
on any failure (missing key, timeout, malformed output) and never raises.
"""

import json
import logging
import re
from typing import Any, List, Optional, Tuple

import google.generativeai as genai

from shared.constants import MAX_LLM_CANDIDATES
from shared.models import AddressType, NormalizationResult, PriorityList
from .address import extract_lot, extract_road, strip_decorations
from .prompt import (
    CANDIDATES_PROMPT,
    CLASSIFY_PROMPT,
    NORMALIZE_PROMPT,
    PRIORITY_PROMPT,
    format_prompt,
)

logger = logging.getLogger(__name__)

FENCE_RE = re.compile(r"^```[^\n]*\n|\n?```\s*$")
QUOTE_RE = re.compile(r'^"|"$')

_TYPE_LABELS = {
    "도로명": AddressType.ROAD,
    "road": AddressType.ROAD,
    "지번": AddressType.LOT,
    "lot": AddressType.LOT,
    "jibun": AddressType.LOT,
    "구주소": AddressType.LEGACY,
    "legacy": AddressType.LEGACY,
    "poi": AddressType.POI,
}


def _strip_fences(text: str) -> str:
    return FENCE_RE.sub("", text.strip()).strip()


def parse_model_json(text: Optional[str], expected: type) -> Tuple[bool, Any]:
    """
    Strict parser for model output.

    Returns:
        (parsed, value)
        parsed is False when the text is not JSON or the top-level value is not
        an instance of `expected`; value is then None. A parsed-but-empty
        payload ({} or []) comes back as (True, {}) / (True, []).
    """
    if not text:
        return False, None
    try:
        value = json.loads(_strip_fences(text))
    except (TypeError, ValueError):
        return False, None
    if not isinstance(value, expected):
        return False, None
    return True, value


def parse_address_type(label: Any) -> Optional[AddressType]:
    if not isinstance(label, str):
        return None
    key = label.strip().lower()
    if key in _TYPE_LABELS:
        return _TYPE_LABELS[key]
    if "지번" in key:
        return AddressType.LOT
    return None


class AddressNormalizer:
    """LLM-assisted address normalization (Gemini)."""

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash",
                 timeout_s: float = 8.0, model: Any = None):
        self.api_key = api_key or ""
        self.model_name = model_name
        self.timeout_s = timeout_s
        self._model = model

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def prepare(self):
        """Configure the SDK and build the Gemini model once."""
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    async def _generate(self, template: str, address: str, json_mode: bool = False) -> str:
        kwargs = {"request_options": {"timeout": self.timeout_s}}
        if json_mode:
            kwargs["generation_config"] = {"response_mime_type": "application/json"}
        response = await self.prepare().generate_content_async(
            format_prompt(template, address), **kwargs
        )
        return (response.text or "").strip()

    async def normalize(self, raw: str) -> str:
        text = str(raw or "").strip()
        if not self.enabled or not text:
            return text
        try:
            answer = await self._generate(NORMALIZE_PROMPT, text)
        except Exception as e:
            logger.warning(f"Gemini normalize degraded for '{text}': {e}")
            return text
        answer = QUOTE_RE.sub("", _strip_fences(answer)).strip()
        return answer or text

    async def classify_and_normalize(self, raw: str) -> NormalizationResult:
        text = str(raw or "").strip()
        if not self.enabled or not text:
            return NormalizationResult(normalized=text)
        try:
            answer = await self._generate(CLASSIFY_PROMPT, text, json_mode=True)
        except Exception as e:
            logger.warning(f"Gemini classify degraded for '{text}': {e}")
            return NormalizationResult(normalized=text)

        parsed, obj = parse_model_json(answer, dict)
        if not parsed:
            logger.warning(f"Gemini classify returned non-JSON for '{text}'")
            return NormalizationResult(normalized=text)
        return NormalizationResult(
            normalized=str(obj.get("normalized") or text).strip(),
            type=parse_address_type(obj.get("type")),
        )

    async def priority_list(self, raw: str) -> PriorityList:
        """
        도로명 우선, 지번 차선의 후보 리스트.

        Gemini가 돌려준 road/jibun과 로컬 정규식 추출 결과를 합쳐
        (Gemini 도로명, 로컬 도로명, Gemini 지번, 로컬 지번) 순서로 중복 제거합니다.
        """
        text = str(raw or "").strip()
        if not text:
            return PriorityList()
        if not self.enabled:
            return PriorityList(items=[text], primary=text)

        try:
            answer = await self._generate(PRIORITY_PROMPT, text, json_mode=True)
        except Exception as e:
            logger.warning(f"Gemini priority list degraded for '{text}': {e}")
            return PriorityList(items=[text], primary=text)

        parsed, obj = parse_model_json(answer, dict)
        if parsed:
            road = extract_road(str(obj.get("road") or "").strip())
            lot = extract_lot(str(obj.get("jibun") or "").strip())
        else:
            # 파싱 실패 시 유형 분석 결과로 한 가지 값이라도 건진다
            analyzed = await self.classify_and_normalize(text)
            road = extract_road(analyzed.normalized) if analyzed.type == AddressType.ROAD else ""
            lot = extract_lot(analyzed.normalized) if analyzed.type == AddressType.LOT else ""

        local_road = extract_road(text)
        local_lot = extract_lot(text)

        items: List[str] = []
        for candidate in (road, local_road, lot, local_lot):
            if candidate and candidate not in items:
                items.append(candidate)
        if not items:
            items.append(strip_decorations(text) or text)

        primary = items[0]
        primary_type = AddressType.ROAD if primary in (road, local_road) else AddressType.LOT
        return PriorityList(items=items, primary=primary, primary_type=primary_type)

    async def candidates(self, raw: str) -> List[str]:
        text = str(raw or "").strip()
        if not self.enabled or not text:
            return []
        try:
            answer = await self._generate(CANDIDATES_PROMPT, text, json_mode=True)
        except Exception as e:
            logger.warning(f"Gemini candidates degraded for '{text}': {e}")
            return []

        parsed, arr = parse_model_json(answer, list)
        if not parsed:
            return []
        cleaned = [str(s if s is not None else "").strip() for s in arr]
        return [s for s in cleaned if s][:MAX_LLM_CANDIDATES]
