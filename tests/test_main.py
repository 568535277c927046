"""애플리케이션 진입점과 API 라우터 테스트."""

from __future__ import annotations

import importlib

from fastapi.testclient import TestClient

from sidequest.api.dependencies import (
    provide_catalog,
    provide_geocoding_service,
    provide_lodging_service,
    provide_routing_service,
)
from sidequest.core.config import get_settings
from sidequest.schemas.route import RoutePoint
from sidequest.schemas.trip_plan import TripIdea
from sidequest.services.catalog import load_catalog
from sidequest.services.geocode_service import GeocodingError
from sidequest.services.routing_service import RouteNotFoundError, RoutingServiceError
from tests.mocks.fake_services import FakeLodgingService, FakeRoutingService

FULDA = {"lat": 50.0, "lng": 10.0, "name": "Fulda"}
EISENACH = {"lat": 51.0, "lng": 10.0, "name": "Eisenach"}


class _FakeGeocoder:
    def __init__(self, results: list[RoutePoint] | None = None, error: Exception | None = None) -> None:
        self.results = results or []
        self.error = error

    async def search(self, query: str) -> list[RoutePoint]:
        if self.error is not None:
            raise self.error
        return self.results


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


def _load_main_module():
    import sidequest.main as main_module

    return importlib.reload(main_module)


def _client(monkeypatch, routing: FakeRoutingService | None = None, geocoder: _FakeGeocoder | None = None):
    _set_required_env(monkeypatch)
    main_module = _load_main_module()
    catalog = load_catalog()
    overrides = main_module.app.dependency_overrides
    overrides[provide_routing_service] = lambda: routing or FakeRoutingService()
    overrides[provide_lodging_service] = lambda: FakeLodgingService(price=60)
    overrides[provide_catalog] = lambda: catalog
    overrides[provide_geocoding_service] = lambda: geocoder or _FakeGeocoder()
    return TestClient(main_module.app)


def test_health_check_endpoint(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "message": "SideQuest Server is running"}
    assert response.headers["X-Content-Type-Options"] == "nosniff"


def test_readiness_returns_503_when_not_ready(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    main_module = _load_main_module()

    async def _not_ready():
        return {"status": "not_ready", "checks": {}}

    monkeypatch.setattr(main_module, "collect_readiness_status", _not_ready)
    response = TestClient(main_module.app).get("/health/ready")

    assert response.status_code == 503


def test_route_endpoint_returns_geometry(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post("/api/v1/route", json={"origin": FULDA, "destination": EISENACH})

    assert response.status_code == 200
    body = response.json()
    assert body["geometry"][0] == [50.0, 10.0]
    assert body["geometry"][-1] == [51.0, 10.0]
    assert body["distance"] > 0


def test_route_endpoint_maps_routing_errors(monkeypatch) -> None:
    not_found = _client(monkeypatch, routing=FakeRoutingService(error=RouteNotFoundError("none")))
    assert not_found.post("/api/v1/route", json={"origin": FULDA, "destination": EISENACH}).status_code == 404

    unavailable = _client(monkeypatch, routing=FakeRoutingService(error=RoutingServiceError("down")))
    assert unavailable.post("/api/v1/route", json={"origin": FULDA, "destination": EISENACH}).status_code == 502


def test_route_endpoint_rejects_invalid_coordinates(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post("/api/v1/route", json={"origin": {"lat": 95, "lng": 10}, "destination": EISENACH})

    assert response.status_code == 422


def test_quest_search_returns_route_quests(monkeypatch) -> None:
    client = _client(monkeypatch)
    berlin = {"lat": 52.52, "lng": 13.405, "name": "Berlin"}
    potsdam = {"lat": 52.39, "lng": 13.06, "name": "Potsdam"}

    response = client.post(
        "/api/v1/quests",
        json={"origin": berlin, "destination": potsdam, "max_detour_minutes": 60},
    )

    assert response.status_code == 200
    body = response.json()
    detours = [quest["detour_minutes"] for quest in body["quests"]]
    assert detours == sorted(detours)
    assert all(detour <= 60 for detour in detours)
    assert len(body["route_geometry"]) > 0


def test_itinerary_endpoint_builds_trip(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post(
        "/api/v1/itinerary",
        json={"origin": FULDA, "destination": EISENACH, "days": 3, "is_round_trip": True},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["days"] == 3
    assert [day["day"] for day in body["itinerary"]] == [1, 2, 3]
    assert body["cost"]["accommodation_cost"] == 120


def test_itinerary_recalculate_splits_days(monkeypatch) -> None:
    client = _client(monkeypatch)
    geometry = [[50.0 + index * 0.01, 10.0] for index in range(101)]
    quests = [
        {"id": "a", "title": "A", "category": "history", "lat": 50.1, "lng": 10.0},
        {"id": "b", "title": "B", "category": "food", "lat": 50.9, "lng": 10.0},
    ]

    response = client.post(
        "/api/v1/itinerary/recalculate",
        json={"origin": FULDA, "destination": EISENACH, "days": 2, "quests": quests, "route_geometry": geometry},
    )

    assert response.status_code == 200
    itinerary = response.json()["itinerary"]
    assert [[quest["id"] for quest in day["quests"]] for day in itinerary] == [["a"], ["b"]]



def test_itinerary_recalculate_rejects_out_of_range_geometry(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.post(
        "/api/v1/itinerary/recalculate",
        json={"origin": FULDA, "destination": EISENACH, "days": 1, "route_geometry": [[95.0, 10.0], [50.0, 10.0]]},
    )

    assert response.status_code == 422


def test_trip_plan_unknown_location_is_bad_request(monkeypatch) -> None:
    client = _client(monkeypatch, geocoder=_FakeGeocoder())

    response = client.post("/api/v1/trip-plan", json={"start_location": "Atlantis"})

    assert response.status_code == 400


def test_trip_plan_suggests_destinations(monkeypatch) -> None:
    geocoder = _FakeGeocoder([RoutePoint(lat=52.52, lng=13.405, name="Berlin, Germany")])
    client = _client(monkeypatch, geocoder=geocoder)

    response = client.post("/api/v1/trip-plan", json={"start_location": "Berlin", "budget": 1, "days": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["start_point"]["name"] == "Berlin, Germany"
    assert [suggestion["destination"] for suggestion in body["suggestions"]] == ["Berlin"]


def test_geocode_endpoint_errors(monkeypatch) -> None:
    client = _client(monkeypatch, geocoder=_FakeGeocoder(error=GeocodingError("down")))

    assert client.get("/api/v1/geocode", params={"q": "   "}).status_code == 400
    assert client.get("/api/v1/geocode", params={"q": "Berlin"}).status_code == 502


def test_progress_endpoint(monkeypatch) -> None:
    client = _client(monkeypatch)

    response = client.get("/api/v1/progress", params=[("completed", "be-teufelsberg"), ("completed", "unknown")])

    assert response.status_code == 200
    body = response.json()
    assert body["overall"]["completed"] == 1
    assert body["overall"]["total"] == 27
    berlin = next(region for region in body["regions"] if region["region_id"] == "berlin")
    assert berlin["label"] == "Adventurer"


def test_trip_suggest_returns_generated_ideas(monkeypatch) -> None:
    client = _client(monkeypatch)
    captured: dict = {}

    async def _fake_generate(start_location, budget, days, interests):
        captured.update(start=start_location, budget=budget, days=days, interests=interests)
        return [TripIdea(title="Harz Hike", destination="Goslar", estimated_cost=250)]

    monkeypatch.setattr("sidequest.api.trip_plan.generate_trip_ideas", _fake_generate)

    response = client.post(
        "/api/v1/trip-suggest",
        json={"start_location": "  Hannover ", "budget": 999999, "days": 2.6, "interests": ["nature", "spa"]},
    )

    assert response.status_code == 200
    assert [idea["destination"] for idea in response.json()["suggestions"]] == ["Goslar"]
    assert captured == {"start": "Hannover", "budget": 100000, "days": 3, "interests": ["nature"]}
