"""숙소 조회와 1박 요금 추정."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from functools import lru_cache

from langchain_core.prompts import ChatPromptTemplate

from sidequest.core.config import get_settings
from sidequest.core.geo import GeoPoint
from sidequest.core.llm import get_llm, strip_code_fence
from sidequest.core.logger import get_logger
from sidequest.core.timeout_policy import get_timeout_policy
from sidequest.schemas.enums import HotelType
from sidequest.schemas.itinerary import Hotel
from sidequest.schemas.poi import LodgingCandidate
from sidequest.services.overpass_service import OverpassService, get_overpass_service

logger = get_logger(__name__)

LODGING_SEARCH_RADIUS_METERS = 5000
MAX_PRICED_HOTELS = 10
FALLBACK_NIGHTLY_PRICES: dict[HotelType, float] = {
    HotelType.HOTEL: 80,
    HotelType.GUEST_HOUSE: 55,
    HotelType.HOSTEL: 30,
}
DEFAULT_FALLBACK_PRICE = 70


def fallback_price(hotel_type: HotelType | str) -> float:
    """LLM 추정이 불가능할 때 쓰는 유형별 기본 요금."""
    try:
        return FALLBACK_NIGHTLY_PRICES[HotelType(hotel_type)]
    except (KeyError, ValueError):
        return DEFAULT_FALLBACK_PRICE


def apply_prices(candidates: list[LodgingCandidate], prices: object) -> list[Hotel]:
    """추정 요금 배열을 후보에 순서대로 붙입니다. 양수가 아닌 값은 기본 요금으로 대체합니다."""
    price_list = prices if isinstance(prices, list) else []
    hotels: list[Hotel] = []
    for index, candidate in enumerate(candidates):
        raw = price_list[index] if index < len(price_list) else None
        if isinstance(raw, (int, float)) and not isinstance(raw, bool) and raw > 0:
            price = float(int(raw + 0.5))
        else:
            price = fallback_price(candidate.type)
        hotels.append(Hotel(**candidate.model_dump(), estimated_price=price))
    return hotels


def choose_best_hotel(hotels: list[Hotel]) -> Hotel | None:
    """가장 저렴한 호텔을 우선하고, 호텔이 없으면 전체 중 가장 저렴한 숙소를 고릅니다."""
    if not hotels:
        return None
    proper_hotels = [hotel for hotel in hotels if hotel.type == HotelType.HOTEL]
    pool = proper_hotels or hotels
    return min(pool, key=lambda hotel: hotel.estimated_price)


class LodgingServiceProtocol(ABC):
    """숙소 제안 서비스 인터페이스."""

    @abstractmethod
    async def find_best_hotel_near(self, lat: float, lng: float, region_name: str) -> Hotel | None:
        """좌표 주변에서 추천할 숙소 하나를 반환합니다. 찾지 못하면 None."""
        raise NotImplementedError


class OverpassLodgingService(LodgingServiceProtocol):
    """Overpass 숙소 조회 + LLM 요금 추정."""

    def __init__(self, overpass: OverpassService, price_timeout_seconds: int = 15) -> None:
        self._overpass = overpass
        self._price_timeout_seconds = price_timeout_seconds

    @classmethod
    def from_settings(cls) -> OverpassLodgingService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        return cls(
            overpass=get_overpass_service(),
            price_timeout_seconds=get_timeout_policy(get_settings()).hotel_price_llm_timeout_seconds,
        )

    async def find_hotels_near(self, lat: float, lng: float) -> list[LodgingCandidate]:
        return await self._overpass.find_lodging_near(GeoPoint(lat, lng), LODGING_SEARCH_RADIUS_METERS)

    async def estimate_hotel_prices(self, candidates: list[LodgingCandidate], region_name: str) -> list[Hotel]:
        """최대 10개 숙소의 1박 요금을 LLM으로 추정합니다.

        LLM 미설정, 시간 초과, 응답 형식 오류 시 유형별 기본 요금을 씁니다.
        """
        priced = candidates[:MAX_PRICED_HOTELS]
        if not priced:
            return []

        hotel_lines = "\n".join(
            f'{index}. "{candidate.name}" ({candidate.type}'
            f'{f", {candidate.stars} stars" if candidate.stars else ""}) in {region_name}'
            for index, candidate in enumerate(priced, start=1)
        )
        prompt = ChatPromptTemplate.from_messages(
            [
                (
                    "system",
                    "You estimate nightly accommodation prices in EUR for travellers in Germany. "
                    "Consider the accommodation type, star rating and region.",
                ),
                (
                    "human",
                    "{hotels}\n\nReturn ONLY a JSON array of numbers (estimated price per night in EUR), "
                    "one per accommodation, in the same order. Example: [75, 45, 90]",
                ),
            ]
        )
        messages = prompt.format_messages(hotels=hotel_lines)

        try:
            llm = get_llm()
            response = await asyncio.wait_for(llm.ainvoke(messages), timeout=self._price_timeout_seconds)
            raw_content = response.content if isinstance(response.content, str) else str(response.content)
            prices = json.loads(strip_code_fence(raw_content))
        except asyncio.TimeoutError:
            logger.warning("Hotel price estimation timed out: timeout=%s", self._price_timeout_seconds)
            prices = None
        except Exception as exc:
            logger.warning("Hotel price estimation failed, using fallback prices: %s", exc)
            prices = None

        return apply_prices(priced, prices)

    async def find_best_hotel_near(self, lat: float, lng: float, region_name: str) -> Hotel | None:
        candidates = await self.find_hotels_near(lat, lng)
        if not candidates:
            logger.info("No lodging found near: lat=%.4f lng=%.4f", lat, lng)
            return None

        hotels = await self.estimate_hotel_prices(candidates, region_name)
        best = choose_best_hotel(hotels)
        if best is not None:
            logger.info("Lodging selected: name=%s type=%s price=%.0f", best.name, best.type, best.estimated_price)
        return best


@lru_cache(maxsize=1)
def get_lodging_service() -> OverpassLodgingService:
    """프로세스 단위 숙소 서비스를 반환합니다."""
    return OverpassLodgingService.from_settings()
