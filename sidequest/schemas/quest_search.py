"""경로 기반 퀘스트 검색 요청/응답 스키마."""

from typing import List

from pydantic import BaseModel, Field, field_validator

from sidequest.schemas.enums import QuestCategory, parse_categories
from sidequest.schemas.quest import Quest
from sidequest.schemas.route import RoutePoint

DEFAULT_MAX_DETOUR_MINUTES = 30


class QuestSearchRequest(BaseModel):
    """출발지/목적지 사이 경로를 따라 퀘스트를 찾는 요청."""

    origin: RoutePoint = Field(..., description="출발지")
    destination: RoutePoint = Field(..., description="목적지")
    interests: List[QuestCategory] = Field(default_factory=list, description="관심 카테고리 (비면 전체)")
    max_detour_minutes: int = Field(default=DEFAULT_MAX_DETOUR_MINUTES, description="최대 우회 시간 (1~120분)")

    @field_validator("interests", mode="before")
    @classmethod
    def _filter_interests(cls, value: object) -> list[QuestCategory]:
        return parse_categories(value)

    @field_validator("max_detour_minutes", mode="before")
    @classmethod
    def _clamp_max_detour(cls, value: object) -> int:
        try:
            numeric = int(float(value)) if value is not None else DEFAULT_MAX_DETOUR_MINUTES
        except (TypeError, ValueError):
            numeric = DEFAULT_MAX_DETOUR_MINUTES
        return min(120, max(1, numeric))


class QuestSearchResponse(BaseModel):
    """경로와 경로 주변 퀘스트."""

    quests: List[Quest] = Field(..., description="우회 시간 오름차순 퀘스트")
    route_geometry: list[tuple[float, float]] = Field(default_factory=list, description="경로 폴리라인 [lat, lng]")
    distance: float = Field(default=0, ge=0, description="총 거리(m)")
    duration: float = Field(default=0, ge=0, description="총 소요 시간(s)")
