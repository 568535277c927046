"""목적지 추천(여행 계획) 스키마."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from sidequest.schemas.enums import (
    FuelType,
    QuestCategory,
    TransportMode,
    parse_categories,
    parse_fuel_type,
    parse_transport_mode,
)
from sidequest.schemas.route import RoutePoint


class TripIdeaRequest(BaseModel):
    """출발지, 예산, 일수, 관심사로 여행 아이디어를 묻는 요청."""

    start_location: str = Field(..., min_length=1, max_length=200, description="출발지 검색어")
    budget: float = Field(default=500, description="총 예산 (1~100000)")
    days: int = Field(default=3, description="여행 일수 (1~30)")
    interests: List[QuestCategory] = Field(default_factory=list, description="관심 카테고리")

    @field_validator("start_location", mode="before")
    @classmethod
    def _strip_start_location(cls, value: object) -> str:
        return str(value or "").strip()

    @field_validator("budget", mode="before")
    @classmethod
    def _clamp_budget(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 500.0
        except (TypeError, ValueError):
            numeric = 500.0
        return min(100000.0, max(1.0, numeric))

    @field_validator("days", mode="before")
    @classmethod
    def _clamp_days(cls, value: object) -> int:
        try:
            numeric = round(float(value)) if value is not None else 3
        except (TypeError, ValueError):
            numeric = 3
        return min(30, max(1, int(numeric)))

    @field_validator("interests", mode="before")
    @classmethod
    def _filter_interests(cls, value: object) -> list[QuestCategory]:
        return parse_categories(value)


class TripPlanRequest(TripIdeaRequest):
    """예산과 일수로 목적지 후보를 고르는 요청. 비용 계산용 이동 수단 정보를 더합니다."""

    transport_mode: TransportMode = Field(default=TransportMode.CAR, description="이동 수단")
    fuel_type: FuelType = Field(default=FuelType.PETROL, description="연료 종류")
    has_unlimited_rail_pass: bool = Field(default=False, description="무제한 철도 패스 보유 여부")

    @field_validator("transport_mode", mode="before")
    @classmethod
    def _normalize_transport_mode(cls, value: object) -> TransportMode:
        return parse_transport_mode(value)

    @field_validator("fuel_type", mode="before")
    @classmethod
    def _normalize_fuel_type(cls, value: object) -> FuelType:
        return parse_fuel_type(value)


class TripSuggestion(BaseModel):
    """추천 목적지."""

    title: str = Field(..., description="추천 제목")
    destination: str = Field(..., description="목적지 지역 이름")
    description: str = Field(..., description="추천 설명")
    quest_count: int = Field(..., ge=0, description="관심사에 맞는 퀘스트 수")
    total_xp: int = Field(..., ge=0, description="획득 가능한 총 XP")
    estimated_cost: float = Field(..., ge=0, description="예상 총 비용")
    transport_cost: float = Field(..., ge=0, description="예상 교통비")
    accommodation_cost: float = Field(..., ge=0, description="예상 숙박비")
    highlights: list[str] = Field(default_factory=list, description="대표 퀘스트 제목")
    center: tuple[float, float] = Field(..., description="지역 중심 [lat, lng]")


class TripPlanResponse(BaseModel):
    """목적지 추천 결과."""

    suggestions: List[TripSuggestion] = Field(..., description="점수 내림차순 추천")
    start_point: RoutePoint = Field(..., description="지오코딩된 출발지")


class TripIdea(BaseModel):
    """LLM이 제안한 여행 아이디어."""

    title: str = Field(..., description="여행 이름")
    description: str = Field(default="", description="추천 이유")
    destination: str = Field(..., description="주요 목적지")
    estimated_cost: float = Field(..., ge=0, description="예상 총 비용")
    highlights: list[str] = Field(default_factory=list, description="주요 방문지/활동")
    daily_plan: list[str] = Field(default_factory=list, description="일자별 요약")


class TripIdeaResponse(BaseModel):
    """LLM 여행 아이디어 목록. 생성에 실패하면 빈 목록."""

    suggestions: List[TripIdea] = Field(default_factory=list, description="여행 아이디어")
