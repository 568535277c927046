"""가는 길/돌아오는 길 경로 조회 노드."""

from __future__ import annotations

import asyncio

from langchain_core.runnables import RunnableConfig

from sidequest.core.logger import get_logger
from sidequest.graph.itinerary.state import ItineraryState
from sidequest.schemas.itinerary import TripItineraryRequest
from sidequest.services.routing_service import RoutingServiceProtocol, get_routing_service

logger = get_logger(__name__)


async def fetch_routes(state: ItineraryState, config: RunnableConfig) -> ItineraryState:
    """왕복이면 두 경로를 동시에 조회합니다.

    경로가 없으면 일정을 만들 수 없으므로 RoutingServiceError를 그대로 전파합니다.
    """
    if state.get("error"):
        return state

    raw_request = state.get("trip_request")
    if not raw_request:
        return {**state, "error": "fetch_routes에는 trip_request가 필요합니다."}

    try:
        request = TripItineraryRequest.model_validate(raw_request)
    except Exception as exc:
        return {**state, "error": f"trip_request 형식이 올바르지 않습니다: {exc}"}

    routing: RoutingServiceProtocol | None = config.get("configurable", {}).get("routing_service")
    if routing is None:
        routing = get_routing_service()

    origin = request.origin.to_geo_point()
    destination = request.destination.to_geo_point()

    if request.is_round_trip:
        outbound, return_route = await asyncio.gather(
            routing.get_route(origin, destination),
            routing.get_route(destination, origin),
        )
    else:
        outbound = await routing.get_route(origin, destination)
        return_route = None

    logger.info(
        "Trip routes fetched: outbound_km=%.1f return_km=%s",
        outbound.distance_km,
        f"{return_route.distance_km:.1f}" if return_route else "-",
    )
    return {**state, "outbound_route": outbound, "return_route": return_route}
