"""경로 계산 요청/응답 스키마."""

from typing import Annotated, List

from pydantic import BaseModel, Field, field_validator

from sidequest.core.geo import GeoPoint

MAX_WAYPOINTS = 25

Latitude = Annotated[float, Field(ge=-90, le=90, allow_inf_nan=False)]
Longitude = Annotated[float, Field(ge=-180, le=180, allow_inf_nan=False)]
LatLngPair = tuple[Latitude, Longitude]


class Coordinate(BaseModel):
    """검증된 위경도 좌표."""

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False, description="위도")
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False, description="경도")

    def to_geo_point(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


class RoutePoint(Coordinate):
    """이름이 붙은 좌표 (출발지, 목적지, 숙박지)."""

    name: str = Field(default="", max_length=200, description="표시 이름")

    @field_validator("name", mode="before")
    @classmethod
    def _truncate_name(cls, value: object) -> str:
        return str(value or "").strip()[:200]


class RouteRequest(BaseModel):
    """경유지를 포함한 경로 계산 요청."""

    origin: Coordinate = Field(..., description="출발지")
    destination: Coordinate = Field(..., description="목적지")
    waypoints: List[Coordinate] = Field(
        default_factory=list,
        max_length=MAX_WAYPOINTS,
        description="경유지 목록",
    )


class RouteResponse(BaseModel):
    """경로 계산 결과.

    Fields:
        `geometry`: [lat, lng] 쌍 목록 (진행 순서)
        `distance`: 총 거리 (m)
        `duration`: 총 소요 시간 (s)
    """

    geometry: list[tuple[float, float]] = Field(..., description="경로 폴리라인 [lat, lng]")
    distance: float = Field(..., ge=0, description="총 거리(m)")
    duration: float = Field(..., ge=0, description="총 소요 시간(s)")
