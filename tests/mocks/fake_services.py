"""외부 호출 없이 쓰는 라우팅/숙소 Fake 서비스."""

from __future__ import annotations

from typing import Sequence

from sidequest.core.geo import GeoPoint, Route
from sidequest.schemas.enums import HotelType
from sidequest.schemas.itinerary import Hotel
from sidequest.services.lodging_service import LodgingServiceProtocol
from sidequest.services.routing_service import RoutingServiceProtocol


def straight_route(start: GeoPoint, end: GeoPoint, points: int = 51) -> Route:
    """두 점을 잇는 직선 폴리라인 경로. 거리/시간은 폴리라인 길이와 80km/h로 계산합니다."""
    steps = max(2, points)
    pairs = [
        (
            start.lat + (end.lat - start.lat) * index / (steps - 1),
            start.lng + (end.lng - start.lng) * index / (steps - 1),
        )
        for index in range(steps)
    ]
    return Route.from_pairs(pairs)


def meridian_route(start_lat: float = 50.0, lng: float = 10.0, points: int = 101, step_deg: float = 0.01) -> Route:
    """경도가 고정된 남북 방향 경로. 0.01도는 약 1.11km입니다."""
    return Route.from_pairs([(start_lat + index * step_deg, lng) for index in range(points)])


class FakeRoutingService(RoutingServiceProtocol):
    """요청마다 직선 경로를 돌려주고 호출 기록을 남깁니다."""

    def __init__(self, error: Exception | None = None, points: int = 51) -> None:
        self.error = error
        self.points = points
        self.calls: list[tuple[GeoPoint, GeoPoint, tuple[GeoPoint, ...]]] = []

    async def get_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> Route:
        self.calls.append((origin, destination, tuple(waypoints)))
        if self.error is not None:
            raise self.error
        return straight_route(origin, destination, self.points)


class FakeLodgingService(LodgingServiceProtocol):
    """모든 좌표에 같은 요금의 호텔을 돌려줍니다. fail_at 좌표에서는 예외를 냅니다."""

    def __init__(self, price: float = 50, fail_at: set[tuple[float, float]] | None = None) -> None:
        self.price = price
        self.fail_at = fail_at or set()
        self.calls: list[tuple[float, float, str]] = []

    async def find_best_hotel_near(self, lat: float, lng: float, region_name: str) -> Hotel | None:
        self.calls.append((lat, lng, region_name))
        if (lat, lng) in self.fail_at:
            raise RuntimeError("lodging lookup failed")
        return Hotel(name=f"Hotel {len(self.calls)}", lat=lat, lng=lng, type=HotelType.HOTEL, estimated_price=self.price)
