"""Nominatim 기반 지명 검색."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from sidequest.core.config import get_settings
from sidequest.core.logger import get_logger
from sidequest.core.retry import request_with_retry
from sidequest.core.timeout_policy import get_timeout_policy
from sidequest.schemas.route import RoutePoint

logger = get_logger(__name__)

MAX_GEOCODE_RESULTS = 5


class GeocodingError(RuntimeError):
    """지명 검색 서비스 호출이 실패했을 때 발생하는 예외."""


def short_place_name(display_name: str) -> str:
    """'Marienplatz, Altstadt, München, Bayern, ...' -> 'Marienplatz, Altstadt'."""
    return ",".join(display_name.split(",")[:2]).strip()


def parse_search_results(data: Any) -> list[RoutePoint]:
    """좌표가 올바른 결과만 RoutePoint로 변환합니다."""
    if not isinstance(data, list):
        return []

    points: list[RoutePoint] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            points.append(
                RoutePoint(
                    lat=float(item["lat"]),
                    lng=float(item["lon"]),
                    name=short_place_name(str(item.get("display_name", ""))),
                )
            )
        except (KeyError, TypeError, ValueError):
            continue
    return points


class NominatimGeocodingService:
    def __init__(self, base_url: str, user_agent: str, timeout_seconds: int = 10) -> None:
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls) -> NominatimGeocodingService:
        settings = get_settings()
        return cls(
            base_url=settings.NOMINATIM_BASE_URL,
            user_agent=settings.HTTP_USER_AGENT,
            timeout_seconds=get_timeout_policy(settings).geocoding_timeout_seconds,
        )

    async def search(self, query: str) -> list[RoutePoint]:
        """지명을 검색해 최대 5개 후보를 반환합니다.

        Raises:
            GeocodingError: 서비스 호출이 실패했을 때
        """
        outcome = await request_with_retry(
            "GET",
            f"{self._base_url}/search",
            timeout_seconds=self._timeout_seconds,
            params={"q": query, "format": "json", "limit": MAX_GEOCODE_RESULTS, "addressdetails": 0},
            headers={"User-Agent": self._user_agent},
            context={"service": "nominatim"},
        )
        if not outcome.ok:
            raise GeocodingError(f"Geocoding failed: {outcome.error}") from outcome.error

        try:
            data = outcome.value.json()
        except ValueError as exc:
            raise GeocodingError(f"Geocoding response parse failed: {exc}") from exc

        points = parse_search_results(data)[:MAX_GEOCODE_RESULTS]
        logger.info("Geocoded query: results=%d", len(points))
        return points


@lru_cache(maxsize=1)
def get_geocoding_service() -> NominatimGeocodingService:
    return NominatimGeocodingService.from_settings()
