"""지도 데이터(Overpass)에서 찾은 장소 모델."""

from pydantic import BaseModel, Field

from sidequest.core.geo import GeoPoint
from sidequest.schemas.enums import HotelType


class DiscoveredPOI(BaseModel):
    """경로 주변에서 발견한 장소. ID는 호출 간 중복될 수 있습니다."""

    id: int = Field(..., description="OSM 요소 ID")
    lat: float = Field(..., ge=-90, le=90, description="위도")
    lng: float = Field(..., ge=-180, le=180, description="경도")
    name: str = Field(..., description="장소 이름")
    type: str = Field(default="unknown", description="장소 유형 (tourism/historic/natural/amenity 값)")
    tags: dict[str, str] = Field(default_factory=dict, description="OSM 태그")

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


class LodgingCandidate(BaseModel):
    """요금 추정 전 숙소 후보."""

    name: str = Field(..., description="숙소 이름")
    lat: float = Field(..., ge=-90, le=90, description="위도")
    lng: float = Field(..., ge=-180, le=180, description="경도")
    type: HotelType = Field(default=HotelType.HOTEL, description="숙소 유형")
    stars: int | None = Field(default=None, description="성급")
