"""여행 일정 그래프 노드 모음."""

from sidequest.graph.itinerary.nodes.costs import estimate_trip_cost
from sidequest.graph.itinerary.nodes.days import build_days
from sidequest.graph.itinerary.nodes.hotels import assign_day_hotels
from sidequest.graph.itinerary.nodes.quests import match_route_quests
from sidequest.graph.itinerary.nodes.routes import fetch_routes

__all__ = ["fetch_routes", "match_route_quests", "build_days", "assign_day_hotels", "estimate_trip_cost"]
