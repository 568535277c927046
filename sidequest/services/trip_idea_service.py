"""출발지와 예산으로 LLM 여행 아이디어를 만드는 서비스."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Sequence

from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field, ValidationError

from sidequest.core.config import get_settings
from sidequest.core.llm import get_llm, strip_code_fence
from sidequest.core.logger import get_logger
from sidequest.core.timeout_policy import get_timeout_policy
from sidequest.schemas.enums import QuestCategory
from sidequest.schemas.trip_plan import TripIdea

logger = get_logger(__name__)

IDEA_COUNT = 3


class GeneratedTripIdea(BaseModel):
    """LLM이 돌려주는 여행 아이디어 한 건. 값 정리는 변환 단계에서 합니다."""

    title: Any = Field(default=None, description="Catchy trip name")
    description: Any = Field(default=None, description="2-3 sentences about why this trip is great")
    destination: Any = Field(default=None, description="Main destination city or region")
    estimatedCost: Any = Field(default=None, description="Estimated total cost in EUR")
    highlights: Any = Field(default=None, description="3-5 highlight stops or activities")
    dailyPlan: Any = Field(default=None, description="One summary string per day")


class GeneratedTripIdeaList(BaseModel):
    suggestions: list[GeneratedTripIdea] = Field(default_factory=list)


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


def to_trip_ideas(raw_ideas: Sequence[GeneratedTripIdea], budget: float) -> list[TripIdea]:
    """LLM 출력을 TripIdea로 정리합니다. 비용이 양수가 아니면 예산으로 채웁니다."""
    ideas: list[TripIdea] = []
    for raw in raw_ideas:
        cost = raw.estimatedCost
        if isinstance(cost, str):
            try:
                cost = float(cost)
            except ValueError:
                cost = None
        if isinstance(cost, bool) or not isinstance(cost, (int, float)) or not cost > 0:
            cost = budget

        ideas.append(
            TripIdea(
                title=str(raw.title or "Unnamed Trip"),
                description=str(raw.description or ""),
                destination=str(raw.destination or "Unknown"),
                estimated_cost=float(cost),
                highlights=_string_list(raw.highlights),
                daily_plan=_string_list(raw.dailyPlan),
            )
        )
    return ideas


def _extract_raw_ideas(content: str, parser: PydanticOutputParser) -> list[GeneratedTripIdea]:
    cleaned = strip_code_fence(content)
    try:
        return parser.parse(cleaned).suggestions
    except Exception:
        data = json.loads(cleaned)
        if not isinstance(data, list):
            raise ValueError("trip idea payload is not a list")
        items: list[GeneratedTripIdea] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                items.append(GeneratedTripIdea.model_validate(item))
            except ValidationError:
                continue
        return items


async def generate_trip_ideas(
    start_location: str,
    budget: float,
    days: int,
    interests: Sequence[QuestCategory],
    *,
    timeout_seconds: int | None = None,
) -> list[TripIdea]:
    """여행 아이디어 3개를 생성합니다. 시간 초과나 형식 오류면 빈 목록을 반환합니다."""
    timeout = timeout_seconds or get_timeout_policy(get_settings()).quest_llm_timeout_seconds
    parser = PydanticOutputParser(pydantic_object=GeneratedTripIdeaList)
    interest_text = ", ".join(str(interest) for interest in interests) if interests else "varied activities"

    prompt = ChatPromptTemplate.from_messages(
        [
            ("system", "You are a creative travel planner. Return JSON only."),
            (
                "human",
                "A traveller wants a trip with these details:\n"
                "- Starting from: {start}\n- Budget: {budget} EUR total\n- Duration: {days} days\n"
                "- Interests: {interests}\n\n"
                "Suggest {count} different trip ideas. Estimated cost covers fuel, accommodation and food. "
                "dailyPlan has exactly {days} entries.\n\n{format_instructions}",
            ),
        ]
    )
    messages = prompt.format_messages(
        start=start_location,
        budget=f"{budget:.0f}",
        days=days,
        interests=interest_text,
        count=IDEA_COUNT,
        format_instructions=parser.get_format_instructions(),
    )

    try:
        llm = get_llm()
        response = await asyncio.wait_for(llm.ainvoke(messages), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Trip idea generation timed out: timeout=%s", timeout)
        return []
    except Exception:
        logger.exception("Trip idea generation call failed")
        return []

    try:
        raw_content = response.content if isinstance(response.content, str) else str(response.content)
        raw_ideas = _extract_raw_ideas(raw_content, parser)
    except Exception:
        logger.exception("Trip idea generation parse failed")
        return []

    ideas = to_trip_ideas(raw_ideas, budget)
    logger.info("Trip ideas generated: count=%d days=%d", len(ideas), days)
    return ideas
