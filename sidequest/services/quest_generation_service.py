"""경로 주변 장소로 LLM 퀘스트를 생성하는 서비스."""

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
from sidequest.schemas.poi import DiscoveredPOI
from sidequest.schemas.quest import Quest

logger = get_logger(__name__)

MAX_PROMPT_POIS = 30
DEFAULT_DETOUR_MINUTES = 15
MIN_DETOUR_MINUTES = 5
MAX_DETOUR_MINUTES = 60
DEFAULT_XP = 50
MIN_XP = 10
MAX_XP = 100


class GeneratedQuest(BaseModel):
    """LLM이 돌려주는 퀘스트 한 건. 값 검증은 변환 단계에서 합니다."""

    poiIndex: Any = Field(default=None, description="1-based index into the POI list")
    title: Any = Field(default="", description="Catchy short quest title")
    description: Any = Field(default="", description="2-3 sentences that make the traveller want to stop")
    category: Any = Field(default=None, description="One of the allowed categories")
    detourMinutes: Any = Field(default=None, description="Extra minutes needed (5-60)")
    xp: Any = Field(default=None, description="Reward points (10-100)")


class GeneratedQuestList(BaseModel):
    quests: list[GeneratedQuest] = Field(default_factory=list)


def _clamped_int(value: Any, *, default: int, minimum: int, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return min(maximum, max(minimum, int(value + 0.5)))


def _poi_address(poi: DiscoveredPOI) -> str | None:
    street = poi.tags.get("addr:street")
    if not street:
        return None
    house_number = poi.tags.get("addr:housenumber", "")
    city = poi.tags.get("addr:city", "")
    return f"{street} {house_number}, {city}".strip()


def format_poi_list(pois: Sequence[DiscoveredPOI]) -> str:
    """프롬프트에 넣을 번호 붙은 장소 목록을 만듭니다."""
    lines = []
    for index, poi in enumerate(pois, start=1):
        extras = ""
        if poi.tags.get("cuisine"):
            extras += f", cuisine: {poi.tags['cuisine']}"
        if poi.tags.get("description"):
            extras += f", info: {poi.tags['description']}"
        lines.append(f'{index}. "{poi.name}" (type: {poi.type}, lat: {poi.lat}, lng: {poi.lng}{extras})')
    return "\n".join(lines)


def _extract_raw_quests(content: str, parser: PydanticOutputParser) -> list[GeneratedQuest]:
    """객체 형식({"quests": [...]})과 배열 형식을 모두 받아들입니다."""
    cleaned = strip_code_fence(content)
    try:
        return parser.parse(cleaned).quests
    except Exception:
        data = json.loads(cleaned)
        if not isinstance(data, list):
            raise ValueError("quest payload is not a list")
        items: list[GeneratedQuest] = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                items.append(GeneratedQuest.model_validate(item))
            except ValidationError:
                continue
        return items


def to_quests(raw_quests: Sequence[GeneratedQuest], pois: Sequence[DiscoveredPOI]) -> list[Quest]:
    """신뢰할 수 없는 LLM 출력을 검증해 Quest로 변환합니다.

    잘못된 인덱스, 알 수 없는 카테고리, 빈 제목은 버리고 우회 시간과 XP는 허용 범위로 자릅니다.
    """
    quests: list[Quest] = []
    seen_ids: set[str] = set()
    for raw in raw_quests:
        index = raw.poiIndex
        if isinstance(index, bool) or not isinstance(index, (int, float)) or int(index) != index:
            continue
        index = int(index)
        if index < 1 or index > len(pois):
            continue

        try:
            category = QuestCategory(str(raw.category).strip().lower())
        except ValueError:
            continue

        title = str(raw.title or "").strip()
        if not title:
            continue

        poi = pois[index - 1]
        quest_id = f"quest-{poi.id}"
        if quest_id in seen_ids:
            continue
        seen_ids.add(quest_id)

        quests.append(
            Quest(
                id=quest_id,
                title=title,
                description=str(raw.description or "").strip(),
                category=category,
                lat=poi.lat,
                lng=poi.lng,
                reward_points=_clamped_int(raw.xp, default=DEFAULT_XP, minimum=MIN_XP, maximum=MAX_XP),
                detour_minutes=_clamped_int(
                    raw.detourMinutes,
                    default=DEFAULT_DETOUR_MINUTES,
                    minimum=MIN_DETOUR_MINUTES,
                    maximum=MAX_DETOUR_MINUTES,
                ),
                address=_poi_address(poi),
            )
        )
    return quests


async def generate_quests(
    pois: Sequence[DiscoveredPOI],
    interests: Sequence[QuestCategory],
    origin_name: str,
    destination_name: str,
    *,
    timeout_seconds: int | None = None,
) -> list[Quest]:
    """장소 목록(최대 30개)으로 퀘스트를 생성합니다. 실패하면 빈 목록을 반환합니다."""
    if not pois:
        return []

    sliced = list(pois[:MAX_PROMPT_POIS])
    timeout = timeout_seconds or get_timeout_policy(get_settings()).quest_llm_timeout_seconds
    parser = PydanticOutputParser(pydantic_object=GeneratedQuestList)
    interest_text = ", ".join(str(interest) for interest in interests) if interests else "all categories"

    system_prompt = (
        "You are a creative travel guide. Turn interesting places along a road trip into engaging side quests.\n"
        "Use only the numbered places given. Never invent places.\n"
        "category must be one of: " + ", ".join(category.value for category in QuestCategory) + ".\n"
        "detourMinutes is the extra time needed (5-60). xp is 10-100 based on how unique the stop is.\n"
        "Return JSON only."
    )
    user_prompt = (
        "A traveller is driving from {origin} to {destination}.\n"
        "Places along the route:\n{pois}\n\n"
        "Focus on: {interests}. Generate 5-15 quests from the best places.\n\n{format_instructions}"
    )
    prompt = ChatPromptTemplate.from_messages([("system", system_prompt), ("human", user_prompt)])
    messages = prompt.format_messages(
        origin=origin_name,
        destination=destination_name,
        pois=format_poi_list(sliced),
        interests=interest_text,
        format_instructions=parser.get_format_instructions(),
    )

    try:
        llm = get_llm()
        response = await asyncio.wait_for(llm.ainvoke(messages), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Quest generation timed out: timeout=%s pois=%d", timeout, len(sliced))
        return []
    except Exception:
        logger.exception("Quest generation call failed: pois=%d", len(sliced))
        return []

    try:
        raw_content = response.content if isinstance(response.content, str) else str(response.content)
        raw_quests = _extract_raw_quests(raw_content, parser)
    except Exception:
        logger.exception("Quest generation parse failed")
        return []

    quests = to_quests(raw_quests, sliced)
    logger.info("Quests generated: raw=%d accepted=%d", len(raw_quests), len(quests))
    return quests
