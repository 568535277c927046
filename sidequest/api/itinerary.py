"""여행 일정 생성/재계산 API."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException, status

from sidequest.api.dependencies import (
    provide_catalog,
    provide_lodging_service,
    provide_routing_service,
    routing_http_exception,
)
from sidequest.core.logger import get_logger
from sidequest.schemas.itinerary import (
    ItineraryRecalculateRequest,
    ItineraryRecalculateResponse,
    PlannedTrip,
    TripItineraryRequest,
)
from sidequest.services.catalog import QuestCatalog
from sidequest.services.lodging_service import LodgingServiceProtocol
from sidequest.services.routing_service import RoutingServiceError, RoutingServiceProtocol
from sidequest.services.trip_service import plan_trip_itinerary, recalculate_itinerary

router = APIRouter(prefix="/api/v1", tags=["itinerary"])
logger = get_logger(__name__)


@router.post("/itinerary", response_model=PlannedTrip)
async def create_itinerary(
    request: TripItineraryRequest,
    routing: RoutingServiceProtocol = Depends(provide_routing_service),  # noqa: B008
    lodging: LodgingServiceProtocol = Depends(provide_lodging_service),  # noqa: B008
    catalog: QuestCatalog = Depends(provide_catalog),  # noqa: B008
) -> PlannedTrip:
    """가는 길, 목적지 체류, 돌아오는 길로 나눈 다일 여행 일정을 만듭니다."""
    logger.info(
        "Itinerary request received: days=%d round_trip=%s transport=%s",
        request.days,
        request.is_round_trip,
        request.transport_mode,
    )
    try:
        return await plan_trip_itinerary(request, routing=routing, lodging=lodging, catalog=catalog)
    except RoutingServiceError as exc:
        raise routing_http_exception(exc) from exc
    except asyncio.TimeoutError as exc:
        logger.warning("Itinerary generation timed out")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="일정 생성 시간이 초과되었습니다.",
        ) from exc


@router.post("/itinerary/recalculate", response_model=ItineraryRecalculateResponse)
def recalculate(request: ItineraryRecalculateRequest) -> ItineraryRecalculateResponse:
    """선택한 퀘스트를 기존 경로 기준으로 다시 일자별로 나눕니다."""
    logger.info("Itinerary recalculate request received: days=%d quests=%d", request.days, len(request.quests))
    return recalculate_itinerary(request)
