"""경로 주변 퀘스트 검색 API."""

from fastapi import APIRouter, Depends

from sidequest.api.dependencies import (
    provide_catalog,
    provide_overpass_service,
    provide_routing_service,
    routing_http_exception,
)
from sidequest.core.logger import get_logger
from sidequest.schemas.quest_search import QuestSearchRequest, QuestSearchResponse
from sidequest.services.catalog import QuestCatalog
from sidequest.services.overpass_service import OverpassService
from sidequest.services.routing_service import RoutingServiceError, RoutingServiceProtocol
from sidequest.services.trip_service import find_route_quests, generate_ai_quests_for_route

router = APIRouter(prefix="/api/v1", tags=["quests"])
logger = get_logger(__name__)


@router.post("/quests", response_model=QuestSearchResponse)
async def search_route_quests(
    request: QuestSearchRequest,
    routing: RoutingServiceProtocol = Depends(provide_routing_service),  # noqa: B008
    catalog: QuestCatalog = Depends(provide_catalog),  # noqa: B008
) -> QuestSearchResponse:
    """경로를 따라 우회 예산 안의 카탈로그 퀘스트를 찾습니다."""
    logger.info(
        "Quest search request received: interests=%s max_detour=%d",
        [str(interest) for interest in request.interests],
        request.max_detour_minutes,
    )
    try:
        response = await find_route_quests(request, routing=routing, catalog=catalog)
    except RoutingServiceError as exc:
        raise routing_http_exception(exc) from exc

    logger.info("Quest search completed: %d quests", len(response.quests))
    return response


@router.post("/quests/ai", response_model=QuestSearchResponse)
async def generate_route_quests(
    request: QuestSearchRequest,
    routing: RoutingServiceProtocol = Depends(provide_routing_service),  # noqa: B008
    overpass: OverpassService = Depends(provide_overpass_service),  # noqa: B008
    catalog: QuestCatalog = Depends(provide_catalog),  # noqa: B008
) -> QuestSearchResponse:
    """경로 주변 장소로 AI 퀘스트를 생성합니다. 생성 실패 시 빈 목록을 반환합니다."""
    try:
        return await generate_ai_quests_for_route(request, routing=routing, overpass=overpass, catalog=catalog)
    except RoutingServiceError as exc:
        raise routing_http_exception(exc) from exc
