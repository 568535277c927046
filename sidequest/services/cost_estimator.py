"""교통비/숙박비 추정과 예산 기반 목적지 순위."""

from __future__ import annotations

import math
from enum import StrEnum
from typing import Sequence

from sidequest.core.geo import GeoPoint, haversine_distance_km
from sidequest.core.logger import get_logger
from sidequest.schemas.catalog import CatalogRegion
from sidequest.schemas.enums import FuelType, QuestCategory, TransportMode
from sidequest.schemas.itinerary import CostBreakdown
from sidequest.schemas.trip_plan import TripSuggestion

logger = get_logger(__name__)

# 100km당 소비량 (L 또는 kWh)
FUEL_CONSUMPTION_PER_100KM: dict[FuelType, float] = {
    FuelType.PETROL: 7.0,
    FuelType.DIESEL: 5.5,
    FuelType.ELECTRIC: 20.0,
}
# 단위(L 또는 kWh)당 가격
FUEL_PRICE_PER_UNIT: dict[FuelType, float] = {
    FuelType.PETROL: 1.75,
    FuelType.DIESEL: 1.65,
    FuelType.ELECTRIC: 0.35,
}
TRAIN_COST_PER_KM = 0.15
DEFAULT_NIGHTLY_COST = 60
MAX_SUGGESTIONS = 5
MAX_HIGHLIGHTS = 4


class AccommodationPolicy(StrEnum):
    """숙박비 합산 방식.

    `FALLBACK`: 숙소가 정해지지 않은 밤은 기본 요금으로 채움 (목적지 비교용)
    `EXACT`: 실제 배정된 숙소 요금만 합산 (확정 일정용)
    """

    FALLBACK = "fallback"
    EXACT = "exact"


def round_half_up(value: float) -> int:
    """0.5를 항상 올림하는 반올림 (36.5 -> 37)."""
    return math.floor(value + 0.5)


def transport_cost(
    total_distance_km: float,
    transport_mode: TransportMode,
    fuel_type: FuelType = FuelType.PETROL,
    has_unlimited_rail_pass: bool = False,
) -> int:
    distance = max(0.0, total_distance_km)
    if transport_mode == TransportMode.TRAIN:
        return 0 if has_unlimited_rail_pass else round_half_up(distance * TRAIN_COST_PER_KM)

    consumption = FUEL_CONSUMPTION_PER_100KM.get(fuel_type, FUEL_CONSUMPTION_PER_100KM[FuelType.PETROL])
    price = FUEL_PRICE_PER_UNIT.get(fuel_type, FUEL_PRICE_PER_UNIT[FuelType.PETROL])
    return round_half_up(distance * (consumption / 100) * price)


def accommodation_cost(
    nights: int,
    per_night_hotel_costs: Sequence[float | None],
    policy: AccommodationPolicy,
) -> float:
    if policy == AccommodationPolicy.EXACT:
        return float(sum(cost for cost in per_night_hotel_costs if cost is not None))

    total = 0.0
    for night in range(max(0, nights)):
        cost = per_night_hotel_costs[night] if night < len(per_night_hotel_costs) else None
        total += DEFAULT_NIGHTLY_COST if cost is None else cost
    return total


def estimate_cost(
    total_distance_km: float,
    transport_mode: TransportMode,
    fuel_type: FuelType,
    has_unlimited_rail_pass: bool,
    nights: int,
    per_night_hotel_costs: Sequence[float | None],
    policy: AccommodationPolicy,
) -> CostBreakdown:
    """여행 전체 비용을 교통비와 숙박비로 나눠 추정합니다.

    Args:
        total_distance_km: 왕복이면 양방향을 합친 총 거리
        nights: 숙박 일수
        per_night_hotel_costs: 밤별 숙소 요금. 숙소가 없으면 None
        policy: 누락된 숙소 요금을 채울지 여부
    """
    return CostBreakdown(
        transport_cost=transport_cost(total_distance_km, transport_mode, fuel_type, has_unlimited_rail_pass),
        accommodation_cost=accommodation_cost(nights, per_night_hotel_costs, policy),
    )


def estimate_with_fallback(
    total_distance_km: float,
    transport_mode: TransportMode,
    fuel_type: FuelType,
    has_unlimited_rail_pass: bool,
    nights: int,
    per_night_hotel_costs: Sequence[float | None] = (),
) -> CostBreakdown:
    """숙소가 없는 밤을 기본 요금(60)으로 채우는 추정. 목적지 순위 계산에 씁니다."""
    return estimate_cost(
        total_distance_km,
        transport_mode,
        fuel_type,
        has_unlimited_rail_pass,
        nights,
        per_night_hotel_costs,
        AccommodationPolicy.FALLBACK,
    )


def estimate_exact(
    total_distance_km: float,
    transport_mode: TransportMode,
    fuel_type: FuelType,
    has_unlimited_rail_pass: bool,
    per_night_hotel_costs: Sequence[float | None],
) -> CostBreakdown:
    """실제 배정된 숙소 요금만 합산하는 추정. 확정 일정에 씁니다."""
    return estimate_cost(
        total_distance_km,
        transport_mode,
        fuel_type,
        has_unlimited_rail_pass,
        len(per_night_hotel_costs),
        per_night_hotel_costs,
        AccommodationPolicy.EXACT,
    )


def _describe_region(region: CatalogRegion, quest_count: int, top_titles: list[str]) -> str:
    if quest_count == 0:
        return f"Explore {region.name} and uncover its hidden treasures."
    noun = "quest" if quest_count == 1 else "quests"
    return f"Discover {quest_count} {noun} in {region.name}. Highlights include {' and '.join(top_titles[:2])}."


def rank_destinations(
    start: GeoPoint,
    budget: float,
    days: int,
    interests: Sequence[QuestCategory],
    transport_mode: TransportMode,
    fuel_type: FuelType,
    has_unlimited_rail_pass: bool,
    regions: Sequence[CatalogRegion],
) -> list[TripSuggestion]:
    """예산 안에 들어오는 지역을 점수순으로 최대 5개 추천합니다.

    점수 = 퀘스트 수 * 10 + 총 XP / 10 - 직선거리(km) / 50.
    비용은 왕복 직선거리와 (days - 1)박 기본 숙박비로 계산합니다.
    """
    wanted = set(interests)
    nights = max(0, days - 1)
    scored: list[tuple[float, TripSuggestion]] = []

    for region in regions:
        matching = [quest for quest in region.quests if not wanted or quest.category in wanted]
        if not matching:
            continue

        center = GeoPoint(region.center[0], region.center[1])
        distance_km = haversine_distance_km(start, center)
        cost = estimate_with_fallback(distance_km * 2, transport_mode, fuel_type, has_unlimited_rail_pass, nights)
        if cost.total_cost > budget:
            continue

        total_xp = sum(quest.reward_points for quest in matching)
        top_titles = [quest.title for quest in sorted(matching, key=lambda q: -q.reward_points)[:MAX_HIGHLIGHTS]]
        score = len(matching) * 10 + total_xp / 10 - distance_km / 50

        scored.append(
            (
                score,
                TripSuggestion(
                    title=f"Explore {region.name}",
                    destination=region.name,
                    description=_describe_region(region, len(matching), top_titles),
                    quest_count=len(matching),
                    total_xp=total_xp,
                    estimated_cost=cost.total_cost,
                    transport_cost=cost.transport_cost,
                    accommodation_cost=cost.accommodation_cost,
                    highlights=top_titles,
                    center=region.center,
                ),
            )
        )

    scored.sort(key=lambda item: item[0], reverse=True)
    suggestions = [suggestion for _, suggestion in scored[:MAX_SUGGESTIONS]]
    logger.info(
        "Destinations ranked: regions=%d affordable=%d returned=%d budget=%.0f",
        len(regions),
        len(scored),
        len(suggestions),
        budget,
    )
    return suggestions
