"""예산 기반 목적지 추천 API."""

from fastapi import APIRouter, Depends, HTTPException, status

from sidequest.api.dependencies import provide_catalog, provide_geocoding_service
from sidequest.core.logger import get_logger
from sidequest.schemas.trip_plan import TripIdeaRequest, TripIdeaResponse, TripPlanRequest, TripPlanResponse
from sidequest.services.catalog import QuestCatalog
from sidequest.services.geocode_service import GeocodingError, NominatimGeocodingService
from sidequest.services.trip_idea_service import generate_trip_ideas
from sidequest.services.trip_service import LocationNotFoundError, suggest_destinations

router = APIRouter(prefix="/api/v1", tags=["trip-plan"])
logger = get_logger(__name__)


@router.post("/trip-plan", response_model=TripPlanResponse)
async def plan_trip(
    request: TripPlanRequest,
    geocoder: NominatimGeocodingService = Depends(provide_geocoding_service),  # noqa: B008
    catalog: QuestCatalog = Depends(provide_catalog),  # noqa: B008
) -> TripPlanResponse:
    """출발지, 예산, 일수, 관심사로 갈 만한 지역을 추천합니다."""
    logger.info("Trip plan request received: budget=%.0f days=%d", request.budget, request.days)
    try:
        return await suggest_destinations(request, geocoder=geocoder, catalog=catalog)
    except LocationNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except GeocodingError as exc:
        logger.error("Trip plan geocoding failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="지오코딩에 실패했습니다.") from exc


@router.post("/trip-suggest", response_model=TripIdeaResponse)
async def suggest_trip_ideas(request: TripIdeaRequest) -> TripIdeaResponse:
    """LLM으로 자유 형식 여행 아이디어를 제안합니다. 생성 실패 시 빈 목록을 반환합니다."""
    logger.info("Trip idea request received: budget=%.0f days=%d", request.budget, request.days)
    ideas = await generate_trip_ideas(request.start_location, request.budget, request.days, request.interests)
    return TripIdeaResponse(suggestions=ideas)
