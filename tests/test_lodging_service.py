"""숙소 조회와 요금 추정 테스트."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

from sidequest.core.llm import LLMNotConfiguredError
from sidequest.schemas.enums import HotelType
from sidequest.schemas.poi import LodgingCandidate
from sidequest.services.lodging_service import (
    OverpassLodgingService,
    apply_prices,
    choose_best_hotel,
    fallback_price,
)

CANDIDATES = [
    LodgingCandidate(name="Grand", lat=50.0, lng=10.0, type=HotelType.HOTEL, stars=4),
    LodgingCandidate(name="Pension Rosa", lat=50.01, lng=10.0, type=HotelType.GUEST_HOUSE),
    LodgingCandidate(name="Bunk", lat=50.02, lng=10.0, type=HotelType.HOSTEL),
]


class _FakeOverpass:
    def __init__(self, candidates: list[LodgingCandidate]) -> None:
        self.candidates = candidates
        self.calls: list[tuple] = []

    async def find_lodging_near(self, point, radius_meters=5000):
        self.calls.append((point, radius_meters))
        return self.candidates


class _FakeLLM:
    def __init__(self, content: str) -> None:
        self.content = content

    async def ainvoke(self, messages):
        return SimpleNamespace(content=self.content)


def test_fallback_price_by_type() -> None:
    assert fallback_price(HotelType.HOTEL) == 80
    assert fallback_price("guest_house") == 55
    assert fallback_price(HotelType.HOSTEL) == 30
    assert fallback_price("castle") == 70


def test_apply_prices_replaces_invalid_values() -> None:
    hotels = apply_prices(CANDIDATES, [95.5, 0, "cheap"])

    assert [hotel.estimated_price for hotel in hotels] == [96, 55, 30]


def test_choose_best_hotel_prefers_proper_hotels() -> None:
    hotels = apply_prices(CANDIDATES, [120, 40, 20])

    assert choose_best_hotel(hotels).name == "Grand"
    assert choose_best_hotel(hotels[1:]).name == "Bunk"
    assert choose_best_hotel([]) is None


def test_find_best_hotel_near_uses_llm_prices(monkeypatch) -> None:
    overpass = _FakeOverpass(CANDIDATES)
    monkeypatch.setattr("sidequest.services.lodging_service.get_llm", lambda: _FakeLLM("```json\n[88, 50, 25]\n```"))
    service = OverpassLodgingService(overpass, price_timeout_seconds=5)

    hotel = asyncio.run(service.find_best_hotel_near(50.0, 10.0, "Hesse"))

    assert hotel is not None
    assert (hotel.name, hotel.estimated_price) == ("Grand", 88)
    assert overpass.calls[0][1] == 5000


def test_find_best_hotel_near_falls_back_without_llm(monkeypatch) -> None:
    def _not_configured():
        raise LLMNotConfiguredError("missing key")

    monkeypatch.setattr("sidequest.services.lodging_service.get_llm", _not_configured)
    service = OverpassLodgingService(_FakeOverpass(CANDIDATES), price_timeout_seconds=5)

    hotel = asyncio.run(service.find_best_hotel_near(50.0, 10.0, "Hesse"))

    assert hotel is not None
    assert (hotel.name, hotel.estimated_price) == ("Grand", 80)


def test_find_best_hotel_near_returns_none_without_candidates() -> None:
    service = OverpassLodgingService(_FakeOverpass([]))

    assert asyncio.run(service.find_best_hotel_near(50.0, 10.0, "Hesse")) is None
