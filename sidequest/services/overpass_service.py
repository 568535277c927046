"""Overpass API 기반 경로 주변 장소 조회."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any, Iterable, Sequence

from sidequest.core.config import get_settings
from sidequest.core.geo import GeoPoint
from sidequest.core.logger import get_logger
from sidequest.core.parsing import ParseResult
from sidequest.core.retry import request_with_retry
from sidequest.core.timeout_policy import get_timeout_policy
from sidequest.schemas.enums import HotelType
from sidequest.schemas.poi import DiscoveredPOI, LodgingCandidate

logger = get_logger(__name__)

_POI_QUERIES = (
    'nwr["tourism"~"viewpoint|museum|castle|artwork|attraction"](around:{radius},{lat},{lng});',
    'nwr["amenity"~"restaurant|cafe|pub"]["cuisine"](around:{radius},{lat},{lng});',
    'nwr["natural"~"peak|waterfall|spring|cave_entrance|beach"](around:{radius},{lat},{lng});',
    'nwr["historic"~"castle|monument|memorial|ruins|archaeological_site"](around:{radius},{lat},{lng});',
    'nwr["amenity"~"theatre|arts_centre|library"]["name"](around:{radius},{lat},{lng});',
)
_HOTEL_QUERY = 'nwr["tourism"~"hotel|hostel|guest_house"](around:{radius},{lat},{lng});'
_TYPE_TAG_KEYS = ("tourism", "historic", "natural", "amenity")


def build_overpass_query(statements: Iterable[str], *, timeout_seconds: int, limit: int) -> str:
    """Overpass QL 유니언 쿼리를 구성합니다."""
    body = "\n".join(statements)
    return f"[out:json][timeout:{timeout_seconds}];\n(\n{body}\n);\nout center {limit};"


def detect_poi_type(tags: dict[str, str]) -> str:
    """OSM 태그에서 대표 유형을 고릅니다."""
    for key in _TYPE_TAG_KEYS:
        if tags.get(key):
            return tags[key]
    return "unknown"


def _element_location(element: dict[str, Any]) -> tuple[float, float] | None:
    center = element.get("center") or {}
    lat = element.get("lat", center.get("lat"))
    lng = element.get("lon", center.get("lon"))
    if lat is None or lng is None:
        return None
    try:
        lat_value = float(lat)
        lng_value = float(lng)
    except (TypeError, ValueError):
        return None
    if lat_value == 0 or lng_value == 0:
        return None
    return lat_value, lng_value


def parse_overpass_elements(data: Any) -> ParseResult[list[dict[str, Any]]]:
    """이름과 좌표가 있는 Overpass 요소만 남깁니다."""
    if not isinstance(data, dict):
        return ParseResult.failure("response is not an object")

    elements = data.get("elements")
    if not isinstance(elements, list):
        return ParseResult.failure("elements is missing")

    valid: list[dict[str, Any]] = []
    for element in elements:
        if not isinstance(element, dict):
            continue
        tags = element.get("tags")
        if not isinstance(tags, dict) or not tags.get("name"):
            continue
        location = _element_location(element)
        if location is None:
            continue
        valid.append(
            {
                "id": element.get("id"),
                "lat": location[0],
                "lng": location[1],
                "tags": {str(key): str(value) for key, value in tags.items()},
            }
        )
    return ParseResult.success(valid)


def _to_poi(element: dict[str, Any]) -> DiscoveredPOI | None:
    try:
        return DiscoveredPOI(
            id=int(element["id"]),
            lat=element["lat"],
            lng=element["lng"],
            name=element["tags"]["name"],
            type=detect_poi_type(element["tags"]),
            tags=element["tags"],
        )
    except (KeyError, TypeError, ValueError):
        return None


def _to_lodging(element: dict[str, Any]) -> LodgingCandidate | None:
    tags = element["tags"]
    try:
        hotel_type = HotelType(tags.get("tourism", HotelType.HOTEL))
    except ValueError:
        hotel_type = HotelType.HOTEL

    stars_raw = tags.get("stars") or tags.get("star_rating")
    try:
        stars = int(str(stars_raw).strip()[:1]) if stars_raw else None
    except ValueError:
        stars = None

    try:
        return LodgingCandidate(
            name=tags["name"],
            lat=element["lat"],
            lng=element["lng"],
            type=hotel_type,
            stars=stars,
        )
    except ValueError:
        return None


class OverpassService:
    """Overpass interpreter 호출 클라이언트."""

    def __init__(
        self,
        api_url: str,
        timeout_seconds: int = 25,
        batch_size: int = 5,
        batch_pause_seconds: float = 0.5,
    ) -> None:
        self._api_url = api_url
        self._timeout_seconds = timeout_seconds
        self._batch_size = max(1, batch_size)
        self._batch_pause_seconds = max(0.0, batch_pause_seconds)

    @classmethod
    def from_settings(cls) -> OverpassService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        return cls(
            api_url=settings.OVERPASS_API_URL,
            timeout_seconds=get_timeout_policy(settings).overpass_timeout_seconds,
            batch_size=settings.POI_BATCH_SIZE,
            batch_pause_seconds=settings.POI_BATCH_PAUSE_SECONDS,
        )

    async def _query(self, query: str, context: dict[str, Any]) -> list[dict[str, Any]] | None:
        outcome = await request_with_retry(
            "POST",
            self._api_url,
            timeout_seconds=self._timeout_seconds,
            data={"data": query},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            context={"service": "overpass", **context},
        )
        if not outcome.ok:
            logger.error("Overpass request failed: status=%s error=%s", outcome.status, outcome.error)
            return None

        try:
            data = outcome.value.json()
        except ValueError as exc:
            logger.error("Overpass response parse failed: %s", exc)
            return None

        parsed = parse_overpass_elements(data)
        if not parsed.ok:
            logger.warning("Overpass response rejected: %s", parsed.error)
            return []
        return parsed.value

    async def find_pois_near_point(self, point: GeoPoint, radius_meters: int = 10000) -> list[DiscoveredPOI]:
        """한 지점 반경 안의 관광/음식/자연/역사/문화 장소를 조회합니다. 실패 시 빈 목록."""
        statements = [
            template.format(radius=int(radius_meters), lat=point.lat, lng=point.lng) for template in _POI_QUERIES
        ]
        query = build_overpass_query(statements, timeout_seconds=25, limit=30)
        elements = await self._query(query, {"lat": point.lat, "lng": point.lng})
        if not elements:
            return []
        return [poi for poi in (_to_poi(element) for element in elements) if poi is not None]

    async def find_pois_along_route(
        self,
        sample_points: Sequence[GeoPoint],
        radius_meters: int = 10000,
    ) -> list[DiscoveredPOI]:
        """샘플 지점들을 배치 단위로 동시에 조회하고 ID 기준으로 중복을 제거합니다.

        배치 사이에는 외부 API 속도 제한을 위해 잠시 쉽니다.
        """
        collected: list[DiscoveredPOI] = []
        seen_ids: set[int] = set()

        for start in range(0, len(sample_points), self._batch_size):
            batch = sample_points[start : start + self._batch_size]
            results = await asyncio.gather(
                *(self.find_pois_near_point(point, radius_meters) for point in batch),
            )
            for pois in results:
                for poi in pois:
                    if poi.id not in seen_ids:
                        seen_ids.add(poi.id)
                        collected.append(poi)

            if start + self._batch_size < len(sample_points):
                await asyncio.sleep(self._batch_pause_seconds)

        logger.info(
            "POIs discovered along route: sample_points=%d unique_pois=%d",
            len(sample_points),
            len(collected),
        )
        return collected

    async def find_lodging_near(self, point: GeoPoint, radius_meters: int = 5000) -> list[LodgingCandidate]:
        """반경 안의 호텔/호스텔/게스트하우스를 조회합니다. 실패 시 빈 목록."""
        statement = _HOTEL_QUERY.format(radius=int(radius_meters), lat=point.lat, lng=point.lng)
        query = build_overpass_query([statement], timeout_seconds=10, limit=15)
        elements = await self._query(query, {"lat": point.lat, "lng": point.lng, "kind": "lodging"})
        if not elements:
            return []
        return [lodging for lodging in (_to_lodging(element) for element in elements) if lodging is not None]


@lru_cache(maxsize=1)
def get_overpass_service() -> OverpassService:
    """프로세스 단위 Overpass 서비스를 반환합니다."""
    return OverpassService.from_settings()
