"""비용 추정과 최종 일정 합성 노드."""

from __future__ import annotations

import uuid

from sidequest.core.geo import Route
from sidequest.core.logger import get_logger
from sidequest.graph.itinerary.state import ItineraryState
from sidequest.schemas.itinerary import PlannedTrip, TripItineraryRequest
from sidequest.services.cost_estimator import estimate_exact, round_half_up

logger = get_logger(__name__)


async def estimate_trip_cost(state: ItineraryState) -> ItineraryState:
    """실제 배정된 숙소 요금만 합산해 비용을 계산하고 최종 일정을 만듭니다."""
    if state.get("error"):
        return state

    itinerary = state.get("itinerary")
    outbound: Route | None = state.get("outbound_route")
    if not itinerary or outbound is None:
        return {**state, "error": "estimate_trip_cost에는 itinerary와 outbound_route가 필요합니다."}

    request = TripItineraryRequest.model_validate(state["trip_request"])
    return_route: Route | None = state.get("return_route")

    total_distance_km = round_half_up(outbound.distance_km + (return_route.distance_km if return_route else 0))
    total_duration_minutes = round_half_up(
        outbound.duration_minutes + (return_route.duration_minutes if return_route else 0)
    )
    cost = estimate_exact(
        total_distance_km,
        request.transport_mode,
        request.fuel_type,
        request.has_unlimited_rail_pass,
        [day.hotel.estimated_price for day in itinerary if day.hotel is not None],
    )

    planned = PlannedTrip(
        id=str(uuid.uuid4()),
        title=f"{request.origin.name or 'Start'} → {request.destination.name or 'Destination'}",
        origin=request.origin,
        destination=request.destination,
        days=len(itinerary),
        itinerary=itinerary,
        outbound_geometry=outbound.geometry_pairs(),
        return_geometry=return_route.geometry_pairs() if return_route else [],
        total_distance_km=total_distance_km,
        total_duration_minutes=total_duration_minutes,
        cost=cost,
        transport_mode=request.transport_mode,
        is_round_trip=request.is_round_trip,
    )
    logger.info(
        "Trip planned: days=%d distance_km=%d total_cost=%.0f",
        planned.days,
        total_distance_km,
        cost.total_cost,
    )
    return {**state, "planned_trip": planned.model_dump(mode="json")}
