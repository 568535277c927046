"""큐레이션 퀘스트 카탈로그 로딩과 탐험 진행률 계산."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping

from sidequest.core.config import get_settings
from sidequest.core.logger import get_logger
from sidequest.schemas.catalog import CatalogRegion, ExplorationProgress, RegionProgress
from sidequest.schemas.quest import PointOfInterest

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "catalog.json"

_PROGRESS_LABELS = (
    (75, "Veteran"),
    (50, "Explorer"),
    (25, "Adventurer"),
)


class QuestCatalog:
    """읽기 전용 큐레이션 퀘스트 카탈로그.

    지역 순서와 지역 내 퀘스트 순서가 곧 카탈로그 순서이며,
    근접 중복 판정에서 동률이면 이 순서가 우선합니다.
    """

    __slots__ = ("_regions", "_quests", "_by_id")

    def __init__(self, regions: Iterable[CatalogRegion]) -> None:
        self._regions: tuple[CatalogRegion, ...] = tuple(regions)
        self._quests: tuple[PointOfInterest, ...] = tuple(
            quest for region in self._regions for quest in region.quests
        )

        by_id: dict[str, PointOfInterest] = {}
        for quest in self._quests:
            if quest.id in by_id:
                raise ValueError(f"카탈로그 퀘스트 ID가 중복되었습니다: {quest.id}")
            by_id[quest.id] = quest
        self._by_id: Mapping[str, PointOfInterest] = MappingProxyType(by_id)

    @classmethod
    def from_quests(cls, quests: Iterable[PointOfInterest], region_name: str = "Catalog") -> QuestCatalog:
        """지역 구분 없이 퀘스트 목록만으로 카탈로그를 만듭니다."""
        items = tuple(quests)
        if items:
            center = (
                sum(quest.lat for quest in items) / len(items),
                sum(quest.lng for quest in items) / len(items),
            )
        else:
            center = (0.0, 0.0)
        region = CatalogRegion(id="default", name=region_name, center=center, quests=items)
        return cls([region])

    @property
    def regions(self) -> tuple[CatalogRegion, ...]:
        return self._regions

    @property
    def quests(self) -> tuple[PointOfInterest, ...]:
        return self._quests

    def get(self, quest_id: str) -> PointOfInterest | None:
        return self._by_id.get(quest_id)

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._by_id

    def __len__(self) -> int:
        return len(self._quests)

    def __iter__(self):
        return iter(self._quests)


def load_catalog(path: str | Path | None = None) -> QuestCatalog:
    """JSON 파일에서 카탈로그를 읽어옵니다."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    with catalog_path.open(encoding="utf-8") as file:
        raw = json.load(file)

    regions = [CatalogRegion.model_validate(item) for item in raw.get("regions", [])]
    catalog = QuestCatalog(regions)
    logger.info(
        "Quest catalog loaded: path=%s regions=%d quests=%d",
        catalog_path,
        len(catalog.regions),
        len(catalog),
    )
    return catalog


@lru_cache(maxsize=1)
def get_quest_catalog() -> QuestCatalog:
    """프로세스 단위 카탈로그 인스턴스를 반환합니다."""
    return load_catalog(get_settings().CATALOG_PATH)


def progress_label(percentage: int) -> str:
    """진행률을 단계 라벨로 변환합니다."""
    if percentage <= 0:
        return "Undiscovered"
    if percentage >= 100:
        return "Mastered"
    for threshold, label in _PROGRESS_LABELS:
        if percentage >= threshold:
            return label
    return "Newcomer"


def _build_progress(completed: int, total: int) -> ExplorationProgress:
    percentage = round(completed / total * 100) if total > 0 else 0
    return ExplorationProgress(
        completed=completed,
        total=total,
        percentage=percentage,
        label=progress_label(percentage),
    )


def calculate_region_progress(
    catalog: QuestCatalog,
    region_id: str,
    completed_quest_ids: Iterable[str],
) -> RegionProgress | None:
    """지역 하나의 진행률을 계산합니다. 지역이 없으면 None."""
    region = next((item for item in catalog.regions if item.id == region_id), None)
    if region is None:
        return None

    completed_ids = set(completed_quest_ids)
    completed = sum(1 for quest in region.quests if quest.id in completed_ids)
    progress = _build_progress(completed, len(region.quests))
    return RegionProgress(region_id=region.id, region_name=region.name, **progress.model_dump())


def calculate_overall_progress(catalog: QuestCatalog, completed_quest_ids: Iterable[str]) -> ExplorationProgress:
    """카탈로그 전체 진행률을 계산합니다. 카탈로그에 없는 ID는 무시합니다."""
    completed_ids = set(completed_quest_ids)
    completed = sum(1 for quest in catalog.quests if quest.id in completed_ids)
    return _build_progress(completed, len(catalog))
