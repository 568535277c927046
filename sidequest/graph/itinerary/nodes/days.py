"""일자 분할 노드."""

from __future__ import annotations

from sidequest.core.config import get_settings
from sidequest.core.logger import get_logger
from sidequest.graph.itinerary.state import ItineraryState
from sidequest.schemas.enums import DayDistancePolicy
from sidequest.schemas.itinerary import TripItineraryRequest
from sidequest.services.itinerary_builder import allocate_trip_days, build_trip_days

logger = get_logger(__name__)


async def build_days(state: ItineraryState) -> ItineraryState:
    if state.get("error"):
        return state

    outbound = state.get("outbound_route")
    if outbound is None:
        return {**state, "error": "build_days에는 outbound_route가 필요합니다."}

    request = TripItineraryRequest.model_validate(state["trip_request"])
    allocation = allocate_trip_days(request.days, request.is_round_trip)

    try:
        itinerary = build_trip_days(
            allocation=allocation,
            origin=request.origin,
            destination=request.destination,
            outbound=outbound,
            outbound_quests=state.get("outbound_quests", []),
            return_route=state.get("return_route"),
            return_quests=state.get("return_quests", []),
            destination_quests=state.get("destination_quests", []),
            policy=DayDistancePolicy(get_settings().ITINERARY_DAY_DISTANCE_POLICY),
        )
    except Exception as exc:
        logger.exception("Itinerary day split failed")
        return {**state, "error": f"일자 분할에 실패했습니다: {exc}"}

    logger.info(
        "Itinerary days built: outbound=%d destination=%d return=%d",
        allocation.outbound_days,
        allocation.destination_days,
        allocation.return_days,
    )
    return {**state, "itinerary": itinerary}
