"""API 의존성 모음."""

from fastapi import HTTPException, status

from sidequest.core.logger import get_logger
from sidequest.services.catalog import QuestCatalog, get_quest_catalog
from sidequest.services.geocode_service import NominatimGeocodingService, get_geocoding_service
from sidequest.services.lodging_service import LodgingServiceProtocol, get_lodging_service
from sidequest.services.overpass_service import OverpassService, get_overpass_service
from sidequest.services.routing_service import (
    RouteNotFoundError,
    RoutingServiceError,
    RoutingServiceProtocol,
    get_routing_service,
)

logger = get_logger(__name__)


def provide_routing_service() -> RoutingServiceProtocol:
    return get_routing_service()


def provide_overpass_service() -> OverpassService:
    return get_overpass_service()


def provide_lodging_service() -> LodgingServiceProtocol:
    return get_lodging_service()


def provide_geocoding_service() -> NominatimGeocodingService:
    return get_geocoding_service()


def provide_catalog() -> QuestCatalog:
    return get_quest_catalog()


def routing_http_exception(exc: RoutingServiceError) -> HTTPException:
    """라우팅 예외를 HTTP 응답으로 변환합니다. 경로 없음은 404, 그 외 실패는 502."""
    if isinstance(exc, RouteNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="두 지점 사이의 경로를 찾을 수 없습니다.")
    logger.error("Routing service failed: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="경로 계산 서비스 호출에 실패했습니다.")
