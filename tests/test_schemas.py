"""요청 스키마 정규화 테스트."""

import pytest
from pydantic import ValidationError

from sidequest.schemas.enums import FuelType, QuestCategory, TransportMode
from sidequest.schemas.itinerary import ItineraryRecalculateRequest, TripItineraryRequest
from sidequest.schemas.quest_search import QuestSearchRequest
from sidequest.schemas.route import RoutePoint
from sidequest.schemas.trip_plan import TripPlanRequest

ORIGIN = {"lat": 50.0, "lng": 10.0}
DESTINATION = {"lat": 51.0, "lng": 10.0}


@pytest.mark.parametrize(("raw", "expected"), [(0, 1), (3.6, 4), (99, 14), ("abc", 3), (None, 3)])
def test_itinerary_days_are_clamped(raw, expected) -> None:
    request = TripItineraryRequest(origin=ORIGIN, destination=DESTINATION, days=raw)

    assert request.days == expected


def test_itinerary_request_normalizes_enums() -> None:
    request = TripItineraryRequest(
        origin=ORIGIN,
        destination=DESTINATION,
        interests=["History", "shopping", "food", "history"],
        transport_mode="bus",
        fuel_type="hydrogen",
    )

    assert request.interests == [QuestCategory.HISTORY, QuestCategory.FOOD]
    assert request.transport_mode == TransportMode.CAR
    assert request.fuel_type == FuelType.PETROL


@pytest.mark.parametrize(("raw", "expected"), [(0, 1), (500, 120), ("15", 15), ("soon", 30)])
def test_quest_search_detour_is_clamped(raw, expected) -> None:
    request = QuestSearchRequest(origin=ORIGIN, destination=DESTINATION, max_detour_minutes=raw)

    assert request.max_detour_minutes == expected


def test_trip_plan_request_clamps_budget_and_days() -> None:
    request = TripPlanRequest(start_location="  Munich  ", budget=-5, days=100, transport_mode="TRAIN")

    assert request.start_location == "Munich"
    assert request.budget == 1
    assert request.days == 30
    assert request.transport_mode == TransportMode.TRAIN


def test_route_point_validates_coordinates_and_truncates_name() -> None:
    point = RoutePoint(lat=50.0, lng=10.0, name="x" * 250)

    assert len(point.name) == 200
    with pytest.raises(ValidationError):
        RoutePoint(lat=91.0, lng=10.0)
    with pytest.raises(ValidationError):
        RoutePoint(lat=50.0, lng=float("nan"))


@pytest.mark.parametrize("pair", [[95.0, 10.0], [50.0, 181.0], [50.0, float("inf")]])
def test_recalculate_geometry_rejects_invalid_pairs(pair) -> None:
    with pytest.raises(ValidationError):
        ItineraryRecalculateRequest(origin=ORIGIN, destination=DESTINATION, route_geometry=[pair, [50.0, 10.0]])
