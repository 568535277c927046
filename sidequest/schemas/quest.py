"""퀘스트(관심 지점) 모델."""

from pydantic import BaseModel, ConfigDict, Field

from sidequest.core.geo import GeoPoint
from sidequest.schemas.enums import QuestCategory


class PointOfInterest(BaseModel):
    """큐레이션 카탈로그 또는 AI가 만든 관심 지점."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="퀘스트 고유 ID")
    title: str = Field(..., description="퀘스트 제목")
    description: str = Field(default="", description="퀘스트 설명")
    category: QuestCategory = Field(..., description="퀘스트 카테고리")
    lat: float = Field(..., ge=-90, le=90, description="위도")
    lng: float = Field(..., ge=-180, le=180, description="경도")
    reward_points: int = Field(default=0, ge=0, description="완료 보상 XP")

    @property
    def location(self) -> GeoPoint:
        return GeoPoint(self.lat, self.lng)


class Quest(PointOfInterest):
    """특정 경로 기준으로 우회 시간이 붙은 퀘스트."""

    detour_minutes: int = Field(default=0, ge=0, description="예상 우회 시간(분)")
    address: str | None = Field(default=None, description="주소")
