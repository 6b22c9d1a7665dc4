"""
Gemini Address Normalization Prompt Definitions

This module defines the four prompt templates the address normalizer sends
to Gemini. Three of them demand strict JSON output; the plain normalization
prompt asks for a single line of text.
"""

NORMALIZE_PROMPT = """다음 입력을 한국 지도 API 지오코딩이 이해하기 좋은 형태로 정규화하세요.
지침:
- 불필요한 설명/따옴표/코드블록 없이 한 줄만 출력
- 도로명 주소가 있으면 도로명으로, 없으면 지번/명칭 유지
- 역/관광지 등 POI는 일반적으로 많이 쓰는 명칭으로 간결하게
입력: {address}"""

CLASSIFY_PROMPT = """다음 문자열의 주소 유형을 판별하고 지도 API 지오코딩에 적합한 형태로 정규화하세요.
반드시 아래 JSON 형식으로만 출력하세요.
{{"type":"도로명|지번|구주소|POI","normalized":"정규화된 한 줄 주소 또는 명칭"}}
규칙:
- 상세동/호수/층/동호수 등은 제거
- 도로명/지번이 모두 있는 경우 도로명 우선
- POI(역/건물/학교 등)는 일반적으로 통용되는 명칭으로 간결하게
입력:
{address}"""

PRIORITY_PROMPT = """아래 문자열을 지도 API용 주소로 전처리하세요.
반드시 다음 JSON만 출력합니다(설명/코드블록 금지):
{{"road":"도로명 주소(없으면 빈문자열)","jibun":"지번 주소(없으면 빈문자열)"}}
규칙:
1) 도로명 주소를 최우선으로 추출합니다. 도로명 + 건물번호만 남기고 아파트/건물명/상세(동/호/층/호수/단지/상가 등) 제거
2) 도로명 주소가 불가하면 지번 주소를 추출합니다. (동/리/가 + (산)번지 형태)
3) 공백은 한 칸으로 정규화, 행정구역은 유지
입력:
{address}"""

CANDIDATES_PROMPT = """다음 입력을 지도 API 지오코딩 성공 확률을 높이기 위한 후보 주소 목록으로 변환하세요.
규칙:
1) JSON 배열 형식만 출력 (문자 설명 금지)
2) 도로명/지번/POI를 간결하게 정규화
3) 불필요한 동/호수/블록/상세호수는 제거
4) 가능한 경우 행정구역 + 도로명 + 번지 형태 제공
입력:
{address}"""


def format_prompt(template: str, address: str) -> str:
    return template.format(address=address)
