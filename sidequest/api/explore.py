"""지명 검색과 탐험 진행률 API."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from sidequest.api.dependencies import provide_catalog, provide_geocoding_service
from sidequest.core.logger import get_logger
from sidequest.schemas.catalog import ProgressResponse
from sidequest.schemas.route import RoutePoint
from sidequest.services.catalog import QuestCatalog
from sidequest.services.geocode_service import GeocodingError, NominatimGeocodingService
from sidequest.services.trip_service import build_progress_report

router = APIRouter(prefix="/api/v1", tags=["explore"])
logger = get_logger(__name__)


@router.get("/geocode", response_model=list[RoutePoint])
async def geocode(
    q: Annotated[str, Query(min_length=1, max_length=200, description="검색어")],
    geocoder: NominatimGeocodingService = Depends(provide_geocoding_service),  # noqa: B008
) -> list[RoutePoint]:
    """지명을 검색해 최대 5개 후보 좌표를 반환합니다."""
    query = q.strip()
    if not query:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="검색어가 비어 있습니다.")
    try:
        return await geocoder.search(query)
    except GeocodingError as exc:
        logger.error("Geocoding failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="지오코딩에 실패했습니다.") from exc


@router.get("/progress", response_model=ProgressResponse)
def exploration_progress(
    completed: Annotated[list[str], Query(description="완료한 퀘스트 ID")] = [],  # noqa: B006
    catalog: QuestCatalog = Depends(provide_catalog),  # noqa: B008
) -> ProgressResponse:
    """완료한 퀘스트 ID로 전체/지역별 탐험 진행률을 계산합니다."""
    return build_progress_report(completed, catalog)
