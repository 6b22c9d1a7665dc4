from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AddressType(str, Enum):
    ROAD = "road"      # 도로명
    LOT = "lot"        # 지번
    LEGACY = "legacy"  # 구주소
    POI = "poi"


class Coordinate(BaseModel):
    """WGS84 경위도 (도 단위)"""

    model_config = ConfigDict(frozen=True)

    lon: float
    lat: float


class ResolvedCoordinate(Coordinate):
    used: str


class NormalizationResult(BaseModel):
    normalized: str
    type: Optional[AddressType] = None


class PriorityList(BaseModel):
    items: List[str] = []
    primary: str = ""
    primary_type: Optional[AddressType] = None


class RouteSummary(BaseModel):
    distance: Optional[float] = None  # meters
    duration: Optional[float] = None  # seconds

    @property
    def is_empty(self) -> bool:
        return self.distance is None and self.duration is None


class ComparisonRow(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    address: Optional[str] = None
    kakao: Optional[float] = None
    tmap: Optional[float] = None
    kakao_time: Optional[float] = None
    tmap_time: Optional[float] = None
    kakao_type: Optional[AddressType] = None
    tmap_type: Optional[AddressType] = None
    kakao_used: Optional[str] = None
    tmap_used: Optional[str] = None
    normalized_origin: Optional[str] = None
    normalized_destination: Optional[str] = None
    kakao_error: Optional[str] = None
    tmap_error: Optional[str] = None
    error: Optional[str] = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
