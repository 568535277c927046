"""숙소 배정 노드."""

from __future__ import annotations

from langchain_core.runnables import RunnableConfig

from sidequest.core.config import get_settings
from sidequest.core.logger import get_logger
from sidequest.graph.itinerary.state import ItineraryState
from sidequest.schemas.itinerary import TripItineraryRequest
from sidequest.services.itinerary_builder import assign_hotels
from sidequest.services.lodging_service import LodgingServiceProtocol, get_lodging_service

logger = get_logger(__name__)


async def assign_day_hotels(state: ItineraryState, config: RunnableConfig) -> ItineraryState:
    """숙박이 있는 날마다 숙소를 붙입니다. 조회 실패는 숙소 없음으로 처리합니다."""
    if state.get("error"):
        return state

    itinerary = state.get("itinerary")
    if not itinerary:
        return {**state, "error": "assign_day_hotels에는 itinerary가 필요합니다."}

    lodging: LodgingServiceProtocol | None = config.get("configurable", {}).get("lodging_service")
    if lodging is None:
        try:
            lodging = get_lodging_service()
        except Exception as exc:
            logger.error("LodgingService initialization failed, skipping hotels: %s", exc)
            return state

    request = TripItineraryRequest.model_validate(state["trip_request"])
    region_name = request.destination.name or get_settings().DEFAULT_REGION_NAME
    return {**state, "itinerary": await assign_hotels(itinerary, lodging, region_name)}
