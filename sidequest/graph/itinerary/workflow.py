"""여행 일정 그래프 워크플로우 구성."""

from langgraph.graph import END, StateGraph

from sidequest.graph.itinerary.nodes import (
    assign_day_hotels,
    build_days,
    estimate_trip_cost,
    fetch_routes,
    match_route_quests,
)
from sidequest.graph.itinerary.state import ItineraryState


def _create_itinerary_workflow() -> StateGraph:
    """여행 일정 그래프 워크플로우를 생성합니다."""
    workflow = StateGraph(ItineraryState)

    workflow.add_node("fetch_routes", fetch_routes)
    workflow.add_node("match_route_quests", match_route_quests)
    workflow.add_node("build_days", build_days)
    workflow.add_node("assign_day_hotels", assign_day_hotels)
    workflow.add_node("estimate_trip_cost", estimate_trip_cost)

    workflow.set_entry_point("fetch_routes")
    workflow.add_edge("fetch_routes", "match_route_quests")
    workflow.add_edge("match_route_quests", "build_days")
    workflow.add_edge("build_days", "assign_day_hotels")
    workflow.add_edge("assign_day_hotels", "estimate_trip_cost")
    workflow.add_edge("estimate_trip_cost", END)

    return workflow


compiled_itinerary_graph = _create_itinerary_workflow().compile()
