"""LLM 여행 아이디어 서비스 테스트."""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace

from sidequest.schemas.enums import QuestCategory
from sidequest.services.trip_idea_service import GeneratedTripIdea, generate_trip_ideas, to_trip_ideas


class _FakeLLM:
    def __init__(self, content: str = "", error: Exception | None = None, delay: float = 0) -> None:
        self.content = content
        self.error = error
        self.delay = delay
        self.messages = None

    async def ainvoke(self, messages):
        self.messages = messages
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


def test_to_trip_ideas_fills_defaults() -> None:
    raw = [
        GeneratedTripIdea(),
        GeneratedTripIdea(
            title="Castles of the Rhine",
            destination="Koblenz",
            estimatedCost="320",
            highlights=["Marksburg", 7],
            dailyPlan="not a list",
        ),
        GeneratedTripIdea(title="Free", destination="Harz", estimatedCost=-10),
    ]

    ideas = to_trip_ideas(raw, budget=400)

    assert (ideas[0].title, ideas[0].destination, ideas[0].estimated_cost) == ("Unnamed Trip", "Unknown", 400)
    assert ideas[1].estimated_cost == 320
    assert ideas[1].highlights == ["Marksburg", "7"]
    assert ideas[1].daily_plan == []
    assert ideas[2].estimated_cost == 400


def test_generate_trip_ideas_parses_bare_array(monkeypatch) -> None:
    payload = [
        {
            "title": "Black Forest Loop",
            "description": "Cake and cuckoo clocks.",
            "destination": "Freiburg",
            "estimatedCost": 450,
            "highlights": ["Triberg Falls"],
            "dailyPlan": ["Drive", "Hike", "Return"],
        }
    ]
    llm = _FakeLLM(content=f"```json\n{json.dumps(payload)}\n```")
    monkeypatch.setattr("sidequest.services.trip_idea_service.get_llm", lambda: llm)

    ideas = asyncio.run(generate_trip_ideas("Stuttgart", 500, 3, [QuestCategory.NATURE], timeout_seconds=5))

    assert [idea.destination for idea in ideas] == ["Freiburg"]
    assert ideas[0].daily_plan == ["Drive", "Hike", "Return"]
    assert "Stuttgart" in llm.messages[1].content
    assert "nature" in llm.messages[1].content


def test_generate_trip_ideas_returns_empty_on_failures(monkeypatch) -> None:
    for llm in (
        _FakeLLM(content="{not json"),
        _FakeLLM(error=RuntimeError("quota")),
        _FakeLLM(content="[]", delay=2),
    ):
        monkeypatch.setattr("sidequest.services.trip_idea_service.get_llm", lambda llm=llm: llm)
        assert asyncio.run(generate_trip_ideas("Berlin", 300, 2, [], timeout_seconds=1)) == []
