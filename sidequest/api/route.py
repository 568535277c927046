"""경로 계산 API."""

from fastapi import APIRouter, Depends

from sidequest.api.dependencies import provide_routing_service, routing_http_exception
from sidequest.core.logger import get_logger
from sidequest.schemas.route import RouteRequest, RouteResponse
from sidequest.services.routing_service import RoutingServiceError, RoutingServiceProtocol

router = APIRouter(prefix="/api/v1", tags=["route"])
logger = get_logger(__name__)


@router.post("/route", response_model=RouteResponse)
async def calculate_route(
    request: RouteRequest,
    routing: RoutingServiceProtocol = Depends(provide_routing_service),  # noqa: B008
) -> RouteResponse:
    """출발지에서 경유지를 거쳐 목적지까지의 주행 경로를 계산합니다."""
    logger.info("Route request received: waypoints=%d", len(request.waypoints))
    try:
        route = await routing.get_route(
            request.origin.to_geo_point(),
            request.destination.to_geo_point(),
            [waypoint.to_geo_point() for waypoint in request.waypoints],
        )
    except RoutingServiceError as exc:
        raise routing_http_exception(exc) from exc

    return RouteResponse(
        geometry=route.geometry_pairs(),
        distance=route.distance_meters,
        duration=route.duration_seconds,
    )
