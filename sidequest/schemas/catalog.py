"""카탈로그 지역과 탐험 진행률 스키마."""

from pydantic import BaseModel, ConfigDict, Field

from sidequest.schemas.quest import PointOfInterest


class CatalogRegion(BaseModel):
    """큐레이션 퀘스트를 묶는 지역."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="지역 ID")
    name: str = Field(..., description="지역 이름")
    center: tuple[float, float] = Field(..., description="지역 중심 [lat, lng]")
    quests: tuple[PointOfInterest, ...] = Field(default_factory=tuple, description="지역 퀘스트")


class ExplorationProgress(BaseModel):
    """완료 퀘스트 기준 탐험 진행률."""

    completed: int = Field(..., ge=0, description="완료한 퀘스트 수")
    total: int = Field(..., ge=0, description="전체 퀘스트 수")
    percentage: int = Field(..., ge=0, le=100, description="진행률(%)")
    label: str = Field(..., description="진행 단계 라벨")


class RegionProgress(ExplorationProgress):
    """지역별 진행률."""

    region_id: str = Field(..., description="지역 ID")
    region_name: str = Field(..., description="지역 이름")


class ProgressResponse(BaseModel):
    """전체 및 지역별 진행률."""

    overall: ExplorationProgress = Field(..., description="전체 진행률")
    regions: list[RegionProgress] = Field(default_factory=list, description="지역별 진행률")
