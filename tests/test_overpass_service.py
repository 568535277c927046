"""Overpass 장소 조회 테스트."""

from __future__ import annotations

import asyncio

from sidequest.core.geo import GeoPoint
from sidequest.core.retry import RetryOutcome, RetryStatus
from sidequest.schemas.enums import HotelType
from sidequest.schemas.poi import DiscoveredPOI
from sidequest.services.overpass_service import (
    OverpassService,
    build_overpass_query,
    detect_poi_type,
    parse_overpass_elements,
)


class _FakeResponse:
    def __init__(self, payload: object) -> None:
        self._payload = payload

    def json(self) -> object:
        return self._payload


def test_parse_overpass_elements_keeps_named_located_elements() -> None:
    data = {
        "elements": [
            {"id": 1, "lat": 50.1, "lon": 10.1, "tags": {"name": "Castle", "historic": "castle"}},
            {"id": 2, "center": {"lat": 50.2, "lon": 10.2}, "tags": {"name": "Museum", "tourism": "museum"}},
            {"id": 3, "lat": 50.3, "lon": 10.3, "tags": {"tourism": "viewpoint"}},
            {"id": 4, "tags": {"name": "Nowhere"}},
            {"id": 5, "lat": 0, "lon": 10.5, "tags": {"name": "Zero"}},
        ]
    }

    parsed = parse_overpass_elements(data)

    assert parsed.ok
    assert [element["id"] for element in parsed.value] == [1, 2]
    assert parsed.value[1]["lat"] == 50.2


def test_parse_overpass_elements_rejects_non_object() -> None:
    assert not parse_overpass_elements([]).ok
    assert not parse_overpass_elements({"remark": "timeout"}).ok


def test_detect_poi_type_prefers_tourism() -> None:
    assert detect_poi_type({"tourism": "museum", "historic": "castle"}) == "museum"
    assert detect_poi_type({"natural": "waterfall"}) == "waterfall"
    assert detect_poi_type({"name": "Somewhere"}) == "unknown"


def test_build_overpass_query_wraps_statements() -> None:
    query = build_overpass_query(["node(1);", "way(2);"], timeout_seconds=25, limit=30)

    assert query.startswith("[out:json][timeout:25];")
    assert "node(1);\nway(2);" in query
    assert query.endswith("out center 30;")


def test_find_pois_along_route_batches_and_deduplicates(monkeypatch) -> None:
    service = OverpassService("https://overpass.test", batch_size=5, batch_pause_seconds=0.5)
    queried: list[GeoPoint] = []
    sleeps: list[float] = []

    async def _fake_near(point, radius_meters=10000):
        queried.append(point)
        return [
            DiscoveredPOI(id=1, lat=50.0, lng=10.0, name="Shared"),
            DiscoveredPOI(id=100 + len(queried), lat=point.lat, lng=point.lng, name="Local"),
        ]

    async def _fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr(service, "find_pois_near_point", _fake_near)
    monkeypatch.setattr("sidequest.services.overpass_service.asyncio.sleep", _fake_sleep)
    points = [GeoPoint(50.0 + index / 100, 10.0) for index in range(1, 8)]

    pois = asyncio.run(service.find_pois_along_route(points, 5000))

    assert len(queried) == 7
    assert sleeps == [0.5]
    assert len(pois) == 8
    assert [poi.id for poi in pois].count(1) == 1


def test_find_pois_near_point_returns_empty_on_failure(monkeypatch) -> None:
    async def _fake_request(method, url, **kwargs):
        return RetryOutcome(status=RetryStatus.RETRYABLE_EXHAUSTED, attempts=3, error=RuntimeError("429"))

    monkeypatch.setattr("sidequest.services.overpass_service.request_with_retry", _fake_request)
    service = OverpassService("https://overpass.test")

    assert asyncio.run(service.find_pois_near_point(GeoPoint(50.0, 10.0))) == []


def test_find_lodging_near_parses_candidates(monkeypatch) -> None:
    payload = {
        "elements": [
            {"id": 1, "lat": 50.0, "lon": 10.0, "tags": {"name": "Hotel Post", "tourism": "hotel", "stars": "4S"}},
            {"id": 2, "lat": 50.1, "lon": 10.1, "tags": {"name": "Backpackers", "tourism": "hostel"}},
        ]
    }
    captured: dict = {}

    async def _fake_request(method, url, **kwargs):
        captured.update(method=method, url=url, **kwargs)
        return RetryOutcome(status=RetryStatus.SUCCEEDED, attempts=1, value=_FakeResponse(payload))

    monkeypatch.setattr("sidequest.services.overpass_service.request_with_retry", _fake_request)
    service = OverpassService("https://overpass.test")

    lodging = asyncio.run(service.find_lodging_near(GeoPoint(50.0, 10.0)))

    assert captured["method"] == "POST"
    assert "around:5000,50.0,10.0" in captured["data"]["data"]
    assert [(item.name, item.type, item.stars) for item in lodging] == [
        ("Hotel Post", HotelType.HOTEL, 4),
        ("Backpackers", HotelType.HOSTEL, None),
    ]
