"""여행 일정 요청/응답 스키마."""

from typing import List

from pydantic import BaseModel, Field, computed_field, field_validator

from sidequest.schemas.enums import (
    FuelType,
    HotelType,
    QuestCategory,
    TransportMode,
    TripPhase,
    parse_categories,
    parse_fuel_type,
    parse_transport_mode,
)
from sidequest.schemas.quest import Quest
from sidequest.schemas.route import LatLngPair, RoutePoint

MAX_TRIP_DAYS = 14


class Hotel(BaseModel):
    """숙박 제안."""

    name: str = Field(..., description="숙소 이름")
    lat: float = Field(..., description="위도")
    lng: float = Field(..., description="경도")
    type: HotelType = Field(default=HotelType.HOTEL, description="숙소 유형")
    stars: int | None = Field(default=None, description="성급")
    estimated_price: float = Field(..., ge=0, description="1박 예상 요금")


class ItineraryDay(BaseModel):
    """일자별 일정.

    Fields:
        `day`: 1부터 시작하는 연속 일자
        `phase`: 가는 길 / 목적지 체류 / 돌아오는 길
        `overnight_location`: 마지막 날을 제외한 숙박 좌표
        `hotel`: 숙소 제안 (조회 실패 시 None)
    """

    day: int = Field(..., ge=1, description="여행 N일차")
    label: str = Field(default="", description="일정 라벨")
    phase: TripPhase = Field(default=TripPhase.OUTBOUND, description="여행 구간")
    quests: List[Quest] = Field(default_factory=list, description="경로 순서대로 정렬된 퀘스트")
    overnight_location: RoutePoint | None = Field(default=None, description="숙박 위치")
    hotel: Hotel | None = Field(default=None, description="숙소 제안")
    distance_km: float = Field(default=0, ge=0, description="이동 거리(km)")
    duration_minutes: float = Field(default=0, ge=0, description="이동 시간(분)")
    is_return_leg: bool = Field(default=False, description="귀환 구간 여부")


class CostBreakdown(BaseModel):
    """교통비/숙박비 추정."""

    transport_cost: float = Field(default=0, ge=0, description="교통비")
    accommodation_cost: float = Field(default=0, ge=0, description="숙박비")

    @computed_field
    @property
    def total_cost(self) -> float:
        return self.transport_cost + self.accommodation_cost


class TripItineraryRequest(BaseModel):
    """다일 여행 일정 생성 요청."""

    origin: RoutePoint = Field(..., description="출발지")
    destination: RoutePoint = Field(..., description="목적지")
    days: int = Field(default=3, description="총 여행 일수 (1~14)")
    interests: List[QuestCategory] = Field(default_factory=list, description="관심 카테고리 (비면 전체)")
    transport_mode: TransportMode = Field(default=TransportMode.CAR, description="이동 수단")
    fuel_type: FuelType = Field(default=FuelType.PETROL, description="연료 종류")
    has_unlimited_rail_pass: bool = Field(default=False, description="무제한 철도 패스 보유 여부")
    is_round_trip: bool = Field(default=True, description="왕복 여부")

    @field_validator("days", mode="before")
    @classmethod
    def _clamp_days(cls, value: object) -> int:
        try:
            numeric = round(float(value)) if value is not None else 3
        except (TypeError, ValueError):
            numeric = 3
        return min(MAX_TRIP_DAYS, max(1, int(numeric)))

    @field_validator("interests", mode="before")
    @classmethod
    def _filter_interests(cls, value: object) -> list[QuestCategory]:
        return parse_categories(value)

    @field_validator("transport_mode", mode="before")
    @classmethod
    def _normalize_transport_mode(cls, value: object) -> TransportMode:
        return parse_transport_mode(value)

    @field_validator("fuel_type", mode="before")
    @classmethod
    def _normalize_fuel_type(cls, value: object) -> FuelType:
        return parse_fuel_type(value)


class PlannedTrip(BaseModel):
    """완성된 다일 여행 일정."""

    id: str = Field(..., description="일정 ID")
    title: str = Field(..., description="일정 제목")
    origin: RoutePoint = Field(..., description="출발지")
    destination: RoutePoint = Field(..., description="목적지")
    days: int = Field(..., ge=1, description="일정 일수")
    itinerary: List[ItineraryDay] = Field(..., description="일자별 일정")
    outbound_geometry: list[tuple[float, float]] = Field(default_factory=list, description="가는 길 폴리라인")
    return_geometry: list[tuple[float, float]] = Field(default_factory=list, description="돌아오는 길 폴리라인")
    total_distance_km: float = Field(..., ge=0, description="총 이동 거리(km)")
    total_duration_minutes: float = Field(..., ge=0, description="총 이동 시간(분)")
    cost: CostBreakdown = Field(..., description="비용 추정")
    transport_mode: TransportMode = Field(..., description="이동 수단")
    is_round_trip: bool = Field(..., description="왕복 여부")


class ItineraryRecalculateRequest(BaseModel):
    """기존 경로와 퀘스트 목록으로 일자를 다시 나누는 요청."""

    origin: RoutePoint = Field(..., description="출발지")
    destination: RoutePoint = Field(..., description="목적지")
    days: int = Field(default=1, ge=1, le=MAX_TRIP_DAYS, description="일수")
    quests: List[Quest] = Field(default_factory=list, description="선택된 퀘스트")
    route_geometry: list[LatLngPair] = Field(default_factory=list, description="경로 폴리라인 [lat, lng]")


class ItineraryRecalculateResponse(BaseModel):
    """일자 재분할 결과."""

    itinerary: List[ItineraryDay] = Field(..., description="일자별 일정")
