"""경로별 퀘스트 매칭 노드."""

from __future__ import annotations

from langchain_core.runnables import RunnableConfig

from sidequest.core.config import get_settings
from sidequest.core.geo import Route
from sidequest.core.logger import get_logger
from sidequest.graph.itinerary.state import ItineraryState
from sidequest.schemas.itinerary import TripItineraryRequest
from sidequest.services.catalog import QuestCatalog, get_quest_catalog
from sidequest.services.itinerary_builder import allocate_trip_days, select_destination_quests
from sidequest.services.quest_matcher import match_catalog_quests

logger = get_logger(__name__)


async def match_route_quests(state: ItineraryState, config: RunnableConfig) -> ItineraryState:
    """가는 길, 돌아오는 길, 목적지 주변 퀘스트를 겹치지 않게 고릅니다."""
    if state.get("error"):
        return state

    outbound: Route | None = state.get("outbound_route")
    if outbound is None:
        return {**state, "error": "match_route_quests에는 outbound_route가 필요합니다."}

    request = TripItineraryRequest.model_validate(state["trip_request"])
    catalog: QuestCatalog | None = config.get("configurable", {}).get("catalog")
    if catalog is None:
        catalog = get_quest_catalog()

    max_detour = get_settings().ITINERARY_MAX_DETOUR_MINUTES
    outbound_quests = match_catalog_quests(outbound.polyline, catalog, max_detour, request.interests)
    used_ids = {quest.id for quest in outbound_quests}

    return_quests = []
    return_route: Route | None = state.get("return_route")
    if return_route is not None:
        return_quests = [
            quest
            for quest in match_catalog_quests(return_route.polyline, catalog, max_detour, request.interests)
            if quest.id not in used_ids
        ]
        used_ids.update(quest.id for quest in return_quests)

    destination_quests = []
    if allocate_trip_days(request.days, request.is_round_trip).destination_days > 0:
        destination_quests = select_destination_quests(
            request.destination.to_geo_point(),
            catalog,
            interests=request.interests,
            exclude_ids=used_ids,
        )

    logger.info(
        "Trip quests matched: outbound=%d return=%d destination=%d",
        len(outbound_quests),
        len(return_quests),
        len(destination_quests),
    )
    return {
        **state,
        "outbound_quests": outbound_quests,
        "return_quests": return_quests,
        "destination_quests": destination_quests,
    }
