"""여행 일정 그래프 상태 정의."""

from typing import TypedDict

from sidequest.core.geo import Route
from sidequest.schemas.itinerary import ItineraryDay
from sidequest.schemas.quest import Quest


class ItineraryState(TypedDict, total=False):
    """여행 일정 생성 그래프 상태.

    Keys:
        trip_request: 요청 페이로드 (TripItineraryRequest JSON)
        outbound_route: 가는 길 경로
        return_route: 돌아오는 길 경로 (편도면 None)
        outbound_quests: 가는 길 퀘스트
        return_quests: 돌아오는 길 퀘스트
        destination_quests: 목적지 체류 퀘스트
        itinerary: 일자별 일정 (ItineraryDay 목록)
        planned_trip: 최종 일정 응답
        error: 오류 메시지
    """

    trip_request: dict
    outbound_route: Route
    return_route: Route | None
    outbound_quests: list[Quest]
    return_quests: list[Quest]
    destination_quests: list[Quest]
    itinerary: list[ItineraryDay]
    planned_trip: dict | None
    error: str | None
