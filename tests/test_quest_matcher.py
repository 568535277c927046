"""경로 주변 퀘스트 매칭과 카탈로그 ID 통합 테스트."""

from sidequest.core.geo import GeoPoint
from sidequest.schemas.enums import QuestCategory
from sidequest.schemas.quest import PointOfInterest, Quest
from sidequest.services.catalog import QuestCatalog
from sidequest.services.quest_matcher import (
    estimate_detour_minutes,
    filter_ai_quests,
    match_catalog_quests,
    match_quests_along_route,
    quests_near_point,
    unify_with_catalog,
)
from tests.mocks.fake_services import meridian_route


def _poi(poi_id: str, lat: float, lng: float, category: QuestCategory = QuestCategory.SCENIC) -> PointOfInterest:
    return PointOfInterest(id=poi_id, title=poi_id, category=category, lat=lat, lng=lng, reward_points=50)


def _quest(quest_id: str, lat: float, lng: float, detour: int) -> Quest:
    return Quest(
        id=quest_id,
        title=quest_id,
        category=QuestCategory.FOOD,
        lat=lat,
        lng=lng,
        reward_points=40,
        detour_minutes=detour,
    )


def _five_poi_catalog() -> QuestCatalog:
    # 경로(경도 10.0)에서 동쪽으로 약 10km, 5km, 30km 떨어진 지점들
    return QuestCatalog.from_quests(
        [
            _poi("near-10km", 50.5, 10.14),
            _poi("far-a", 50.2, 10.42),
            _poi("near-5km", 50.25, 10.07),
            _poi("far-b", 50.6, 10.42),
            _poi("far-c", 50.8, 10.42),
        ]
    )


def test_estimate_detour_minutes_rounds_half_up() -> None:
    assert estimate_detour_minutes(2.5) == 3
    assert estimate_detour_minutes(2.49) == 2
    assert estimate_detour_minutes(0) == 0


def test_matcher_returns_only_nearby_pois_sorted_by_detour() -> None:
    route = meridian_route()

    quests = match_catalog_quests(route.polyline, _five_poi_catalog(), max_detour_minutes=20)

    assert [quest.id for quest in quests] == ["near-5km", "near-10km"]
    assert [quest.detour_minutes for quest in quests] == [5, 10]


def test_matcher_respects_budget_and_interests() -> None:
    route = meridian_route()
    candidates = [
        _poi("food", 50.3, 10.0, QuestCategory.FOOD),
        _poi("history", 50.4, 10.0, QuestCategory.HISTORY),
        _poi("scenic-far", 50.4, 10.14, QuestCategory.SCENIC),
    ]

    interests = [QuestCategory.FOOD, QuestCategory.SCENIC]
    quests = match_quests_along_route(route.polyline, candidates, 8, interests=interests)

    assert [quest.id for quest in quests] == ["food"]
    assert all(quest.detour_minutes <= 8 for quest in quests)


def test_matcher_with_empty_polyline_returns_empty() -> None:
    assert match_quests_along_route([], [_poi("a", 50.0, 10.0)], 30) == []


def test_unify_adopts_catalog_id_within_half_km() -> None:
    catalog = QuestCatalog.from_quests([_poi("catalog-castle", 50.0, 10.0), _poi("catalog-lake", 50.0, 10.005)])
    ai_quests = [
        _quest("quest-111", 50.002, 10.0, 5),  # 약 0.22km
        _quest("quest-222", 50.02, 10.0, 7),  # 약 2.2km
    ]

    unified = unify_with_catalog(ai_quests, catalog)

    # 두 카탈로그 퀘스트가 모두 0.5km 안이면 카탈로그 순서상 앞선 것이 이깁니다.
    assert [quest.id for quest in unified] == ["catalog-castle", "quest-222"]
    assert unified[0].title == "quest-111"
    assert unified[0].detour_minutes == 5


def test_filter_ai_quests_drops_over_budget_and_keeps_stable_order() -> None:
    quests = [
        _quest("a", 50.0, 10.0, 20),
        _quest("b", 50.0, 10.0, 10),
        _quest("c", 50.0, 10.0, 45),
        _quest("d", 50.0, 10.0, 10),
    ]

    assert [quest.id for quest in filter_ai_quests(quests, 30)] == ["b", "d", "a"]


def test_quests_near_point_excludes_used_ids() -> None:
    catalog = QuestCatalog.from_quests(
        [_poi("in-1", 50.0, 10.05), _poi("in-2", 50.1, 10.0), _poi("out", 51.0, 10.0)]
    )

    quests = quests_near_point(GeoPoint(50.0, 10.0), catalog, radius_km=20, exclude_ids={"in-2"})

    assert [quest.id for quest in quests] == ["in-1"]
    assert quests[0].detour_minutes == 0
