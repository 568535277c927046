"""비용 추정과 목적지 순위 테스트."""

import pytest

from sidequest.core.geo import GeoPoint
from sidequest.schemas.enums import FuelType, QuestCategory, TransportMode
from sidequest.services.catalog import load_catalog
from sidequest.services.cost_estimator import (
    AccommodationPolicy,
    estimate_cost,
    estimate_exact,
    estimate_with_fallback,
    rank_destinations,
    transport_cost,
)

BERLIN = GeoPoint(52.52, 13.405)


def test_petrol_car_300km_costs_37() -> None:
    assert transport_cost(300, TransportMode.CAR, FuelType.PETROL) == 37


@pytest.mark.parametrize(
    ("fuel_type", "expected"),
    [
        (FuelType.DIESEL, 27),  # 300 * 0.055 * 1.65 = 27.225
        (FuelType.ELECTRIC, 21),  # 300 * 0.20 * 0.35 = 21.0
    ],
)
def test_car_fuel_types(fuel_type: FuelType, expected: int) -> None:
    assert transport_cost(300, TransportMode.CAR, fuel_type) == expected


def test_train_cost_and_rail_pass() -> None:
    assert transport_cost(300, TransportMode.TRAIN) == 45
    assert transport_cost(300, TransportMode.TRAIN, has_unlimited_rail_pass=True) == 0
    assert transport_cost(12345, TransportMode.TRAIN, has_unlimited_rail_pass=True) == 0


def test_fallback_policy_fills_missing_nights() -> None:
    cost = estimate_with_fallback(0, TransportMode.CAR, FuelType.PETROL, False, 3, [80])

    assert cost.accommodation_cost == 80 + 60 + 60
    assert cost.total_cost == 200


def test_exact_policy_counts_only_assigned_hotels() -> None:
    cost = estimate_exact(300, TransportMode.CAR, FuelType.PETROL, False, [80, None, 55])

    assert cost.transport_cost == 37
    assert cost.accommodation_cost == 135
    assert cost.total_cost == 172


def test_estimate_cost_policies_differ_only_on_missing_hotels() -> None:
    args = (100, TransportMode.TRAIN, FuelType.PETROL, False, 2, [None, None])

    assert estimate_cost(*args, AccommodationPolicy.FALLBACK).accommodation_cost == 120
    assert estimate_cost(*args, AccommodationPolicy.EXACT).accommodation_cost == 0


def test_rank_destinations_filters_by_budget() -> None:
    catalog = load_catalog()

    suggestions = rank_destinations(BERLIN, 1, 1, [], TransportMode.CAR, FuelType.PETROL, False, catalog.regions)

    assert [suggestion.destination for suggestion in suggestions] == ["Berlin"]
    assert suggestions[0].estimated_cost == 0
    assert suggestions[0].quest_count == 4


def test_rank_destinations_top_five_with_interest_filter() -> None:
    catalog = load_catalog()

    suggestions = rank_destinations(
        BERLIN,
        100000,
        3,
        [QuestCategory.HISTORY],
        TransportMode.CAR,
        FuelType.PETROL,
        False,
        catalog.regions,
    )

    assert 0 < len(suggestions) <= 5
    for suggestion in suggestions:
        assert suggestion.quest_count > 0
        assert suggestion.accommodation_cost == 120
        assert len(suggestion.highlights) <= 4
