"""
MapCompare: Local Address Extractor

정규식만으로 주소 문자열을 다듬는 순수 함수 모음입니다.
LLM 호출이 실패하거나 키가 없을 때도 항상 동작해야 하므로 외부 의존성이 없습니다.

- strip_decorations: 괄호/건물명/동·호·층 제거
- extract_road: "…로|길 123-4" 형태의 도로명 주소 추출
- extract_lot: "…동|리|가 (산)123-4" 형태의 지번 주소 추출
"""

import re

PAREN_RE = re.compile(r"\([^)]*\)")
SPACE_RE = re.compile(r"\s+")
UNIT_RE = re.compile(r"\b\d+\s*(?:동|호|층)\b")

# 이 토큰(앞에 공백) 이후는 건물/단지명으로 보고 잘라낸다
BUILDING_TOKENS = (
    "아파트", "오피스텔", "빌딩", "빌라", "단지", "프라자", "타워", "시티", "상가",
    "주공", "자이", "힐스테이트", "래미안", "e편한세상", "롯데캐슬",
)

ROAD_RE = re.compile(r"(.+(?:로|길|대로|거리|가)\s*\d+(?:-\d+)?)")
LOT_RE = re.compile(r"(.+(?:동|리|가)\s*(?:산\s*)?\d+(?:-\d+)?)")


def _strip_once(text: str) -> str:
    s = PAREN_RE.sub(" ", text)
    s = SPACE_RE.sub(" ", s).strip()

    cut = min((idx for idx in (s.find(f" {t}") for t in BUILDING_TOKENS) if idx > -1), default=-1)
    if cut > -1:
        s = s[:cut].strip()

    s = UNIT_RE.sub("", s)
    return SPACE_RE.sub(" ", s).strip()


def strip_decorations(text: str) -> str:
    """건물명/부가설명/동·호·층을 제거한 핵심 주소. 재적용해도 결과가 같다."""
    if not text:
        return text
    s = str(text)
    while True:
        stripped = _strip_once(s)
        if stripped == s:
            return s
        s = stripped


def extract_road(text: str) -> str:
    if not text:
        return text
    s = strip_decorations(text)
    m = ROAD_RE.search(s)
    return m.group(1).strip() if m else s


def extract_lot(text: str) -> str:
    if not text:
        return text
    s = strip_decorations(text)
    m = LOT_RE.search(s)
    return m.group(1).strip() if m else s
