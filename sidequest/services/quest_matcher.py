"""경로 주변 퀘스트 선택과 AI 퀘스트의 카탈로그 ID 통합."""

from __future__ import annotations

import math
from typing import Collection, Iterable, Sequence

from sidequest.core.geo import (
    GeoPoint,
    GeoRectangle,
    RoutePolyline,
    haversine_distance_km,
    sample_route_points,
)
from sidequest.core.logger import get_logger
from sidequest.schemas.enums import QuestCategory
from sidequest.schemas.quest import PointOfInterest, Quest
from sidequest.services.catalog import QuestCatalog

logger = get_logger(__name__)

# 직선 근접 1km를 우회 1분으로 보는 거친 추정치
MINUTES_PER_KM = 1.0
MATCH_SAMPLE_INTERVAL_KM = 5.0
CATALOG_MATCH_THRESHOLD_KM = 0.5
DESTINATION_RADIUS_KM = 20.0


def detour_km_for_minutes(max_detour_minutes: float) -> float:
    """우회 시간 예산을 근접 거리(km)로 환산합니다."""
    return max(0.0, float(max_detour_minutes)) / MINUTES_PER_KM


def estimate_detour_minutes(distance_km: float) -> int:
    """경로까지의 직선 거리를 우회 시간(분)으로 환산합니다."""
    return int(math.floor(distance_km * MINUTES_PER_KM + 0.5))


def _matches_interests(category: QuestCategory, interests: Collection[QuestCategory]) -> bool:
    return not interests or category in interests


def _to_quest(poi: PointOfInterest, detour_minutes: int) -> Quest:
    return Quest(**poi.model_dump(), detour_minutes=detour_minutes)


def match_quests_along_route(
    polyline: RoutePolyline,
    candidates: Iterable[PointOfInterest],
    max_detour_minutes: float,
    interests: Collection[QuestCategory] = (),
    sample_interval_km: float = MATCH_SAMPLE_INTERVAL_KM,
) -> list[Quest]:
    """경로 주변 후보를 골라 우회 시간을 붙이고 오름차순 정렬합니다.

    1. 폴리라인 외접 사각형을 예산만큼 넓혀 후보를 1차로 거릅니다.
    2. 관심 카테고리로 거릅니다 (비어 있으면 전체).
    3. 샘플 지점 중 가장 가까운 곳까지의 거리를 우회 시간으로 환산합니다.
    4. 예산을 넘는 후보를 버리고 우회 시간 순으로 안정 정렬합니다.
    """
    if not polyline:
        return []

    max_detour_km = detour_km_for_minutes(max_detour_minutes)
    bbox = GeoRectangle.from_points_with_margin_km(polyline, max_detour_km)
    if bbox is None:
        return []

    samples = list(sample_route_points(polyline, sample_interval_km))
    interest_set = frozenset(interests)

    matched: list[Quest] = []
    for poi in candidates:
        location = poi.location
        if not bbox.contains(location):
            continue
        if not _matches_interests(poi.category, interest_set):
            continue

        nearest_km = min(haversine_distance_km(location, sample) for sample in samples)
        detour_minutes = estimate_detour_minutes(nearest_km)
        if detour_minutes > max_detour_minutes:
            continue
        matched.append(_to_quest(poi, detour_minutes))

    matched.sort(key=lambda quest: quest.detour_minutes)
    return matched


def match_catalog_quests(
    polyline: RoutePolyline,
    catalog: QuestCatalog,
    max_detour_minutes: float,
    interests: Collection[QuestCategory] = (),
) -> list[Quest]:
    """카탈로그 퀘스트 중 경로를 따라 우회 예산 안에 있는 것을 반환합니다."""
    matched = match_quests_along_route(polyline, catalog.quests, max_detour_minutes, interests)
    logger.info(
        "Catalog quests matched: route_points=%d max_detour_minutes=%s interests=%s matched=%d",
        len(polyline),
        max_detour_minutes,
        [interest.value for interest in interests],
        len(matched),
    )
    return matched


def find_catalog_match(point: GeoPoint, catalog: QuestCatalog, threshold_km: float) -> PointOfInterest | None:
    """threshold_km 안에 있는 첫 번째 카탈로그 퀘스트를 카탈로그 순서로 찾습니다."""
    for candidate in catalog.quests:
        if haversine_distance_km(point, candidate.location) <= threshold_km:
            return candidate
    return None


def unify_with_catalog(
    quests: Sequence[Quest],
    catalog: QuestCatalog,
    threshold_km: float = CATALOG_MATCH_THRESHOLD_KM,
) -> list[Quest]:
    """카탈로그 퀘스트와 근접한 AI 퀘스트가 카탈로그 ID를 쓰도록 바꿉니다."""
    unified: list[Quest] = []
    adopted = 0
    for quest in quests:
        match = find_catalog_match(quest.location, catalog, threshold_km)
        if match is not None and match.id != quest.id:
            unified.append(quest.model_copy(update={"id": match.id}))
            adopted += 1
        else:
            unified.append(quest)

    if adopted:
        logger.info("AI quests unified with catalog ids: adopted=%d total=%d", adopted, len(quests))
    return unified


def filter_ai_quests(quests: Iterable[Quest], max_detour_minutes: float) -> list[Quest]:
    """AI가 추정한 우회 시간으로 예산 초과 퀘스트를 버리고 안정 정렬합니다."""
    kept = [quest for quest in quests if quest.detour_minutes <= max_detour_minutes]
    kept.sort(key=lambda quest: quest.detour_minutes)
    return kept


def quests_near_point(
    point: GeoPoint,
    catalog: QuestCatalog,
    radius_km: float = DESTINATION_RADIUS_KM,
    interests: Collection[QuestCategory] = (),
    exclude_ids: Collection[str] = (),
) -> list[Quest]:
    """한 지점 반경 안의 카탈로그 퀘스트를 카탈로그 순서로 반환합니다 (우회 0분)."""
    excluded = frozenset(exclude_ids)
    interest_set = frozenset(interests)
    return [
        _to_quest(poi, 0)
        for poi in catalog.quests
        if poi.id not in excluded
        and _matches_interests(poi.category, interest_set)
        and haversine_distance_km(point, poi.location) <= radius_km
    ]
