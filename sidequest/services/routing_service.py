"""OSRM 기반 경로 계산 서비스."""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Any, Sequence

from sidequest.core.config import get_settings
from sidequest.core.geo import GeoPoint, Route
from sidequest.core.logger import get_logger
from sidequest.core.parsing import ParseResult
from sidequest.core.retry import http_status_of, request_with_retry
from sidequest.core.timeout_policy import get_timeout_policy

logger = get_logger(__name__)


class RoutingServiceError(RuntimeError):
    """라우팅 서비스 호출 자체가 실패했을 때 발생하는 예외."""


class RouteNotFoundError(RoutingServiceError):
    """두 지점 사이에 경로가 없을 때 발생하는 예외."""


class RoutingServiceProtocol(ABC):
    """경로 계산 서비스 인터페이스."""

    @abstractmethod
    async def get_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> Route:
        """출발지에서 목적지까지(경유지 포함) 주행 경로를 반환합니다.

        Raises:
            RouteNotFoundError: 경로가 없을 때
            RoutingServiceError: 서비스 호출이 실패했을 때
        """
        raise NotImplementedError


def parse_route_response(data: Any) -> ParseResult[Route]:
    """OSRM route 응답을 검증해 Route로 변환합니다.

    좌표는 GeoJSON 순서([lng, lat])로 들어오므로 뒤집어 저장합니다.
    """
    if not isinstance(data, dict):
        return ParseResult.failure("response is not an object")

    routes = data.get("routes")
    if not isinstance(routes, list) or not routes:
        return ParseResult.failure(f"no route found (code={data.get('code')})")

    route = routes[0]
    if not isinstance(route, dict):
        return ParseResult.failure("route entry is not an object")

    coordinates = (route.get("geometry") or {}).get("coordinates")
    if not isinstance(coordinates, list) or not coordinates:
        return ParseResult.failure("route geometry is missing")

    try:
        polyline = tuple(GeoPoint(float(pair[1]), float(pair[0])) for pair in coordinates)
        distance = float(route.get("distance", 0))
        duration = float(route.get("duration", 0))
    except (TypeError, ValueError, IndexError) as exc:
        return ParseResult.failure(f"invalid route geometry: {exc}")

    if distance < 0 or duration < 0:
        return ParseResult.failure("negative distance or duration")

    return ParseResult.success(Route(polyline=polyline, distance_meters=distance, duration_seconds=duration))


class OsrmRoutingService(RoutingServiceProtocol):
    """OSRM HTTP API 기반 라우팅 서비스."""

    _ROUTE_PATH = "/route/v1/driving"

    def __init__(self, base_url: str, timeout_seconds: int = 15, profile_path: str | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._route_path = profile_path or self._ROUTE_PATH

    @classmethod
    def from_settings(cls) -> OsrmRoutingService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        return cls(
            base_url=settings.OSRM_BASE_URL,
            timeout_seconds=get_timeout_policy(settings).routing_timeout_seconds,
        )

    async def get_route(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        waypoints: Sequence[GeoPoint] = (),
    ) -> Route:
        points = [origin, *waypoints, destination]
        coordinates = ";".join(f"{point.lng},{point.lat}" for point in points)
        url = f"{self._base_url}{self._route_path}/{coordinates}"

        outcome = await request_with_retry(
            "GET",
            url,
            timeout_seconds=self._timeout_seconds,
            params={"overview": "full", "geometries": "geojson"},
            context={"service": "osrm", "waypoints": len(waypoints)},
        )
        if not outcome.ok:
            status_code = http_status_of(outcome.error) if outcome.error else None
            if status_code == 400:
                raise RouteNotFoundError("No route found between the given points") from outcome.error
            raise RoutingServiceError(f"Failed to fetch route from OSRM: {outcome.error}") from outcome.error

        try:
            data = outcome.value.json()
        except ValueError as exc:
            raise RoutingServiceError(f"OSRM response parse failed: {exc}") from exc

        parsed = parse_route_response(data)
        if not parsed.ok:
            logger.warning("OSRM route rejected: %s", parsed.error)
            raise RouteNotFoundError(f"No route found between the given points: {parsed.error}")

        route = parsed.value
        logger.info(
            "Route fetched: points=%d distance_km=%.1f duration_min=%.0f",
            len(route.polyline),
            route.distance_km,
            route.duration_minutes,
        )
        return route


@lru_cache(maxsize=1)
def get_routing_service() -> OsrmRoutingService:
    """프로세스 단위 라우팅 서비스를 반환합니다."""
    return OsrmRoutingService.from_settings()
