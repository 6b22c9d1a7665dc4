"""
MapCompare 오류 종류

외부 호출 실패는 호출 지점에서 None/빈 값으로 바뀌므로, 여기 정의된 예외가
컴포넌트 경계를 넘는 경우는 카카오 경로 실패(RouteFailure)와
도착지 지오코딩 실패(DestinationGeocodingError) 두 가지뿐입니다.
"""

from typing import Any, Dict, Optional


class CompareError(Exception):
    """Base class for comparison pipeline errors."""


class MissingCredential(CompareError):
    def __init__(self, provider_label: str):
        self.provider_label = provider_label
        super().__init__(f"{provider_label} 키 미설정")


class GeocodingFailure(CompareError):
    def __init__(self, provider_label: str):
        self.provider_label = provider_label
        super().__init__(f"{provider_label} 지오코딩 실패")


class DestinationGeocodingError(CompareError):
    """Neither provider could resolve the destination address."""

    def __init__(self, detail: Dict[str, str]):
        self.detail = detail
        super().__init__("도착지 지오코딩 실패")


class RouteFailure(CompareError):
    """A route request errored or returned nothing usable."""


class ProviderHTTPError(CompareError):
    """Non-2xx response from a mapping provider."""

    def __init__(self, status: int, payload: Optional[Any] = None):
        self.status = status
        self.payload = payload
        super().__init__(f"HTTP {status}: {self.message or 'no message'}")

    @property
    def message(self) -> str:
        # Kakao는 msg, 그 외 일부 API는 message 필드에 사유를 담는다
        if isinstance(self.payload, dict):
            return str(self.payload.get("msg") or self.payload.get("message") or "")
        if isinstance(self.payload, str):
            return self.payload
        return ""
