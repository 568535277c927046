"""퀘스트 검색, 여행 일정, 목적지 추천 파이프라인."""

from __future__ import annotations

import asyncio
from typing import Iterable

from sidequest.core.config import get_settings
from sidequest.core.geo import GeoPoint, sample_route_points
from sidequest.core.logger import get_logger
from sidequest.core.timeout_policy import get_timeout_policy
from sidequest.graph.itinerary.workflow import compiled_itinerary_graph
from sidequest.schemas.catalog import ProgressResponse
from sidequest.schemas.enums import DayDistancePolicy
from sidequest.schemas.itinerary import (
    ItineraryRecalculateRequest,
    ItineraryRecalculateResponse,
    PlannedTrip,
    TripItineraryRequest,
)
from sidequest.schemas.quest_search import QuestSearchRequest, QuestSearchResponse
from sidequest.schemas.trip_plan import TripPlanRequest, TripPlanResponse
from sidequest.services.catalog import (
    QuestCatalog,
    calculate_overall_progress,
    calculate_region_progress,
    get_quest_catalog,
)
from sidequest.services.cost_estimator import rank_destinations
from sidequest.services.geocode_service import NominatimGeocodingService, get_geocoding_service
from sidequest.services.itinerary_builder import build_route_itinerary
from sidequest.services.lodging_service import LodgingServiceProtocol
from sidequest.services.overpass_service import OverpassService, get_overpass_service
from sidequest.services.quest_generation_service import generate_quests
from sidequest.services.quest_matcher import filter_ai_quests, match_catalog_quests, unify_with_catalog
from sidequest.services.routing_service import RoutingServiceProtocol, get_routing_service

logger = get_logger(__name__)


class LocationNotFoundError(LookupError):
    """출발지 검색 결과가 없을 때 발생하는 예외."""


async def find_route_quests(
    request: QuestSearchRequest,
    *,
    routing: RoutingServiceProtocol | None = None,
    catalog: QuestCatalog | None = None,
) -> QuestSearchResponse:
    """경로를 계산하고 우회 예산 안의 카탈로그 퀘스트를 반환합니다."""
    if routing is None:
        routing = get_routing_service()
    if catalog is None:
        catalog = get_quest_catalog()

    route = await routing.get_route(request.origin.to_geo_point(), request.destination.to_geo_point())
    quests = match_catalog_quests(route.polyline, catalog, request.max_detour_minutes, request.interests)

    return QuestSearchResponse(
        quests=quests,
        route_geometry=route.geometry_pairs(),
        distance=route.distance_meters,
        duration=route.duration_seconds,
    )


async def generate_ai_quests_for_route(
    request: QuestSearchRequest,
    *,
    routing: RoutingServiceProtocol | None = None,
    overpass: OverpassService | None = None,
    catalog: QuestCatalog | None = None,
) -> QuestSearchResponse:
    """경로 주변 장소로 LLM 퀘스트를 만들고 카탈로그 ID로 통합합니다.

    장소 조회나 LLM이 실패하면 퀘스트 없이 경로만 반환합니다. 경로 조회 실패는 전파합니다.
    """
    settings = get_settings()
    if routing is None:
        routing = get_routing_service()
    if overpass is None:
        overpass = get_overpass_service()
    if catalog is None:
        catalog = get_quest_catalog()

    route = await routing.get_route(request.origin.to_geo_point(), request.destination.to_geo_point())
    sample_points = list(sample_route_points(route.polyline, settings.AI_QUEST_SAMPLE_INTERVAL_KM))
    pois = await overpass.find_pois_along_route(sample_points, settings.AI_QUEST_POI_RADIUS_METERS)

    generated = await generate_quests(
        pois,
        request.interests,
        request.origin.name or "Origin",
        request.destination.name or "Destination",
    )
    quests = unify_with_catalog(filter_ai_quests(generated, request.max_detour_minutes), catalog)
    logger.info(
        "AI quests for route: samples=%d pois=%d generated=%d kept=%d",
        len(sample_points),
        len(pois),
        len(generated),
        len(quests),
    )

    return QuestSearchResponse(
        quests=quests,
        route_geometry=route.geometry_pairs(),
        distance=route.distance_meters,
        duration=route.duration_seconds,
    )


async def run_itinerary_pipeline(
    request: TripItineraryRequest,
    *,
    routing: RoutingServiceProtocol | None = None,
    lodging: LodgingServiceProtocol | None = None,
    catalog: QuestCatalog | None = None,
) -> PlannedTrip:
    """여행 일정 그래프를 실행하고 결과를 반환합니다."""
    configurable: dict[str, object] = {}
    if routing is not None:
        configurable["routing_service"] = routing
    if lodging is not None:
        configurable["lodging_service"] = lodging
    if catalog is not None:
        configurable["catalog"] = catalog

    result = await compiled_itinerary_graph.ainvoke(
        {"trip_request": request.model_dump(mode="json")},
        config={"configurable": configurable},
    )

    if error := result.get("error"):
        raise RuntimeError(error)

    planned = result.get("planned_trip")
    if not planned:
        raise RuntimeError("planned_trip 결과가 없습니다.")

    return PlannedTrip.model_validate(planned)


async def plan_trip_itinerary(
    request: TripItineraryRequest,
    *,
    routing: RoutingServiceProtocol | None = None,
    lodging: LodgingServiceProtocol | None = None,
    catalog: QuestCatalog | None = None,
) -> PlannedTrip:
    """요청 타임아웃 안에서 여행 일정 파이프라인을 실행합니다.

    Raises:
        asyncio.TimeoutError: 전체 요청 시간이 초과되었을 때
        RoutingServiceError: 경로를 계산하지 못했을 때
    """
    timeout_policy = get_timeout_policy(get_settings())
    return await asyncio.wait_for(
        run_itinerary_pipeline(request, routing=routing, lodging=lodging, catalog=catalog),
        timeout=timeout_policy.request_timeout_seconds,
    )


def recalculate_itinerary(request: ItineraryRecalculateRequest) -> ItineraryRecalculateResponse:
    """선택한 퀘스트와 기존 경로로 일자를 다시 나눕니다."""
    polyline = [GeoPoint(lat, lng) for lat, lng in request.route_geometry]
    itinerary = build_route_itinerary(
        request.quests,
        request.days,
        polyline,
        DayDistancePolicy(get_settings().ITINERARY_DAY_DISTANCE_POLICY),
    )
    return ItineraryRecalculateResponse(itinerary=itinerary)


async def suggest_destinations(
    request: TripPlanRequest,
    *,
    geocoder: NominatimGeocodingService | None = None,
    catalog: QuestCatalog | None = None,
) -> TripPlanResponse:
    """출발지를 지오코딩하고 예산 안의 추천 지역을 점수순으로 반환합니다.

    Raises:
        LocationNotFoundError: 출발지를 찾지 못했을 때
        GeocodingError: 지오코딩 호출이 실패했을 때
    """
    if geocoder is None:
        geocoder = get_geocoding_service()
    if catalog is None:
        catalog = get_quest_catalog()

    locations = await geocoder.search(request.start_location)
    if not locations:
        raise LocationNotFoundError("Could not find that location. Try a different search.")

    start = locations[0]
    suggestions = rank_destinations(
        start.to_geo_point(),
        request.budget,
        request.days,
        request.interests,
        request.transport_mode,
        request.fuel_type,
        request.has_unlimited_rail_pass,
        catalog.regions,
    )
    return TripPlanResponse(suggestions=suggestions, start_point=start)


def build_progress_report(completed_quest_ids: Iterable[str], catalog: QuestCatalog | None = None) -> ProgressResponse:
    """완료 퀘스트 ID로 전체/지역별 탐험 진행률을 계산합니다."""
    if catalog is None:
        catalog = get_quest_catalog()
    completed_ids = set(completed_quest_ids)
    regions = [calculate_region_progress(catalog, region.id, completed_ids) for region in catalog.regions]
    return ProgressResponse(
        overall=calculate_overall_progress(catalog, completed_ids),
        regions=[region for region in regions if region is not None],
    )
