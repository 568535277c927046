"""경로와 퀘스트를 여행 일자로 나누는 일정 생성기."""

from __future__ import annotations

import asyncio
import math
from dataclasses import dataclass
from typing import Collection, Sequence

from sidequest.core.geo import (
    GeoPoint,
    Route,
    RoutePolyline,
    nearest_polyline_index,
    polyline_length_km,
    polyline_segment_distance_km,
)
from sidequest.core.logger import get_logger
from sidequest.schemas.enums import DayDistancePolicy, QuestCategory, TripPhase
from sidequest.schemas.itinerary import Hotel, ItineraryDay
from sidequest.schemas.quest import Quest
from sidequest.schemas.route import RoutePoint
from sidequest.services.catalog import QuestCatalog
from sidequest.services.lodging_service import LodgingServiceProtocol
from sidequest.services.quest_matcher import DESTINATION_RADIUS_KM, quests_near_point

logger = get_logger(__name__)

AVERAGE_SPEED_KMH = 80.0


@dataclass(frozen=True, slots=True)
class DayAllocation:
    """구간별 일수 배분."""

    outbound_days: int
    destination_days: int
    return_days: int

    @property
    def total_days(self) -> int:
        return self.outbound_days + self.destination_days + self.return_days


@dataclass(frozen=True, slots=True)
class PhaseDay:
    """한 구간(가는 길/돌아오는 길) 안의 하루."""

    quests: tuple[Quest, ...]
    start_index: int
    end_index: int
    distance_km: float
    duration_minutes: float
    overnight: RoutePoint | None


def allocate_trip_days(days: int, is_round_trip: bool) -> DayAllocation:
    """총 일수를 가는 길 / 목적지 체류 / 돌아오는 길로 나눕니다.

    왕복이면 가는 길과 돌아오는 길에 각각 floor(D/3)일(최소 1일),
    편도면 가는 길에 floor(D/2)일(최소 1일)을 배정하고 나머지를 체류일로 씁니다.
    체류일이 음수가 되면 0으로 맞추므로 3일 미만 왕복은 체류일 없이 구성됩니다.
    """
    total = max(1, int(days))
    if is_round_trip:
        outbound_days = max(1, total // 3)
        return_days = max(1, total // 3)
    else:
        outbound_days = max(1, total // 2)
        return_days = 0
    destination_days = max(0, total - outbound_days - return_days)
    return DayAllocation(
        outbound_days=outbound_days,
        destination_days=destination_days,
        return_days=return_days,
    )


def _duration_for_distance(distance_km: float) -> float:
    return distance_km / AVERAGE_SPEED_KMH * 60


def _overnight_from_day(
    day_quests: Sequence[Quest],
    polyline: RoutePolyline,
    end_index: int,
    day_number: int,
) -> RoutePoint | None:
    if day_quests:
        last_quest = day_quests[-1]
        return RoutePoint(lat=last_quest.lat, lng=last_quest.lng, name=last_quest.title)
    if not polyline:
        return None
    stop = polyline[min(max(0, end_index), len(polyline) - 1)]
    return RoutePoint(lat=stop.lat, lng=stop.lng, name=f"Day {day_number} stop")


def partition_phase(
    polyline: RoutePolyline,
    quests: Sequence[Quest],
    phase_days: int,
    *,
    policy: DayDistancePolicy = DayDistancePolicy.SEGMENT_SUM,
    total_distance_km: float | None = None,
    total_duration_minutes: float | None = None,
    first_day_number: int = 1,
) -> list[PhaseDay]:
    """한 구간의 폴리라인과 퀘스트를 phase_days일로 나눕니다.

    폴리라인 인덱스를 ceil(n / phase_days)개씩 연속 구간으로 자르고,
    각 퀘스트는 가장 가까운 정점 인덱스가 속한 날에 정확히 한 번 배정됩니다.
    마지막 날을 제외하면 그날 마지막 퀘스트(없으면 구간 끝 정점)가 숙박지입니다.
    마지막 날의 숙박지는 호출자가 정합니다.
    """
    day_count = max(1, int(phase_days))
    point_count = len(polyline)
    route_km = polyline_length_km(polyline)
    if total_distance_km is None:
        total_distance_km = route_km
    if total_duration_minutes is None:
        total_duration_minutes = _duration_for_distance(total_distance_km)

    indexed = sorted(
        ((nearest_polyline_index(quest.location, polyline), quest) for quest in quests),
        key=lambda item: item[0],
    )

    if point_count == 0:
        logger.warning("Partitioning phase without route geometry: days=%d quests=%d", day_count, len(quests))

    points_per_day = math.ceil(point_count / day_count)
    days: list[PhaseDay] = []
    for offset in range(day_count):
        is_last = offset == day_count - 1
        start_index = offset * points_per_day
        window_end = point_count if is_last else (offset + 1) * points_per_day
        end_index = min((offset + 1) * points_per_day, max(0, point_count - 1))

        if point_count == 0:
            day_quests = tuple(quest for _, quest in indexed) if offset == 0 else ()
        else:
            day_quests = tuple(quest for index, quest in indexed if start_index <= index < window_end)

        if policy == DayDistancePolicy.EQUAL_SPLIT:
            distance_km = total_distance_km / day_count
            duration_minutes = total_duration_minutes / day_count
        else:
            distance_km = polyline_segment_distance_km(polyline, start_index, end_index)
            duration_minutes = _duration_for_distance(distance_km)

        overnight = None
        if not is_last:
            overnight = _overnight_from_day(day_quests, polyline, end_index, first_day_number + offset)

        days.append(
            PhaseDay(
                quests=day_quests,
                start_index=start_index,
                end_index=end_index,
                distance_km=round(distance_km, 1),
                duration_minutes=round(duration_minutes),
                overnight=overnight,
            )
        )
    return days


def select_destination_quests(
    destination: GeoPoint,
    catalog: QuestCatalog,
    interests: Collection[QuestCategory] = (),
    exclude_ids: Collection[str] = (),
    radius_km: float = DESTINATION_RADIUS_KM,
) -> list[Quest]:
    """목적지 반경 안에서 가는 길에 쓰지 않은 카탈로그 퀘스트를 고릅니다."""
    return quests_near_point(destination, catalog, radius_km, interests, exclude_ids)


def _chunk_evenly(quests: Sequence[Quest], day_count: int) -> list[tuple[Quest, ...]]:
    if day_count <= 0:
        return []
    per_day = math.ceil(len(quests) / day_count)
    return [tuple(quests[index * per_day : (index + 1) * per_day]) for index in range(day_count)]


def build_trip_days(
    *,
    allocation: DayAllocation,
    origin: RoutePoint,
    destination: RoutePoint,
    outbound: Route,
    outbound_quests: Sequence[Quest],
    return_route: Route | None = None,
    return_quests: Sequence[Quest] = (),
    destination_quests: Sequence[Quest] = (),
    policy: DayDistancePolicy = DayDistancePolicy.SEGMENT_SUM,
) -> list[ItineraryDay]:
    """가는 길, 목적지 체류, 돌아오는 길을 이어 1일차부터 연속된 일정을 만듭니다."""
    total_days = allocation.outbound_days + allocation.destination_days
    if return_route is not None:
        total_days += allocation.return_days
    destination_name = destination.name or "destination"
    itinerary: list[ItineraryDay] = []

    outbound_days = partition_phase(
        outbound.polyline,
        outbound_quests,
        allocation.outbound_days,
        policy=policy,
        total_distance_km=outbound.distance_km,
        total_duration_minutes=outbound.duration_minutes,
        first_day_number=1,
    )
    for offset, phase_day in enumerate(outbound_days):
        day_number = offset + 1
        overnight = phase_day.overnight
        if offset == len(outbound_days) - 1:
            overnight = destination if day_number < total_days else None
        itinerary.append(
            ItineraryDay(
                day=day_number,
                label="Travel to destination" if allocation.outbound_days == 1 else f"Outbound day {offset + 1}",
                phase=TripPhase.OUTBOUND,
                quests=list(phase_day.quests),
                overnight_location=overnight,
                distance_km=phase_day.distance_km,
                duration_minutes=phase_day.duration_minutes,
                is_return_leg=False,
            )
        )

    for offset, day_quests in enumerate(_chunk_evenly(destination_quests, allocation.destination_days)):
        day_number = len(itinerary) + 1
        itinerary.append(
            ItineraryDay(
                day=day_number,
                label=f"Exploring {destination_name}",
                phase=TripPhase.DESTINATION,
                quests=list(day_quests),
                overnight_location=destination if day_number < total_days else None,
                distance_km=0,
                duration_minutes=0,
                is_return_leg=False,
            )
        )

    if return_route is not None and allocation.return_days > 0:
        first_return_day = len(itinerary) + 1
        return_days = partition_phase(
            return_route.polyline,
            return_quests,
            allocation.return_days,
            policy=policy,
            total_distance_km=return_route.distance_km,
            total_duration_minutes=return_route.duration_minutes,
            first_day_number=first_return_day,
        )
        for offset, phase_day in enumerate(return_days):
            day_number = first_return_day + offset
            is_final = day_number == total_days
            itinerary.append(
                ItineraryDay(
                    day=day_number,
                    label="Return home" if is_final else f"Return day {offset + 1}",
                    phase=TripPhase.RETURN,
                    quests=list(phase_day.quests),
                    overnight_location=None if is_final else phase_day.overnight,
                    distance_km=phase_day.distance_km,
                    duration_minutes=phase_day.duration_minutes,
                    is_return_leg=True,
                )
            )

    logger.info(
        "Trip days built: origin=%s destination=%s days=%d outbound=%d destination_stay=%d return=%d",
        origin.name,
        destination.name,
        len(itinerary),
        allocation.outbound_days,
        allocation.destination_days,
        allocation.return_days if return_route is not None else 0,
    )
    return itinerary


def build_route_itinerary(
    quests: Sequence[Quest],
    days: int,
    polyline: RoutePolyline,
    policy: DayDistancePolicy = DayDistancePolicy.SEGMENT_SUM,
) -> list[ItineraryDay]:
    """이미 정해진 경로 하나를 days일로 다시 나눕니다 (퀘스트 재계산용)."""
    day_count = max(1, int(days))
    phase_days = partition_phase(polyline, quests, day_count, policy=policy)
    return [
        ItineraryDay(
            day=offset + 1,
            label=f"Day {offset + 1}",
            phase=TripPhase.OUTBOUND,
            quests=list(phase_day.quests),
            overnight_location=phase_day.overnight,
            distance_km=phase_day.distance_km,
            duration_minutes=phase_day.duration_minutes,
            is_return_leg=False,
        )
        for offset, phase_day in enumerate(phase_days)
    ]


async def _lookup_hotel(
    lodging: LodgingServiceProtocol,
    day: ItineraryDay,
    region_name: str,
) -> Hotel | None:
    location = day.overnight_location
    if location is None:
        return None
    try:
        return await lodging.find_best_hotel_near(location.lat, location.lng, region_name)
    except Exception:
        logger.exception("Hotel lookup failed: day=%d lat=%s lng=%s", day.day, location.lat, location.lng)
        return None


async def assign_hotels(
    days: Sequence[ItineraryDay],
    lodging: LodgingServiceProtocol,
    region_name: str,
) -> list[ItineraryDay]:
    """마지막 날을 제외한 각 날의 숙박지 근처 숙소를 동시에 조회해 붙입니다.

    조회가 실패하거나 결과가 없으면 그날의 hotel은 None으로 남습니다.
    """
    if not days:
        return []

    last_day = max(day.day for day in days)
    targets = [day for day in days if day.day < last_day and day.overnight_location is not None]
    hotels = await asyncio.gather(*(_lookup_hotel(lodging, day, region_name) for day in targets))
    hotel_by_day = {day.day: hotel for day, hotel in zip(targets, hotels)}

    logger.info(
        "Hotels assigned: requested=%d found=%d",
        len(targets),
        sum(1 for hotel in hotels if hotel is not None),
    )
    return [day.model_copy(update={"hotel": hotel_by_day.get(day.day)}) for day in days]
