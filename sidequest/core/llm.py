"""LLM 인스턴스 관리."""

from __future__ import annotations

from functools import lru_cache

from langchain_openai import ChatOpenAI

from sidequest.core.config import get_settings
from sidequest.core.timeout_policy import get_timeout_policy


class LLMNotConfiguredError(RuntimeError):
    """OPENAI_API_KEY가 설정되지 않았을 때 발생하는 예외."""


@lru_cache
def get_llm() -> ChatOpenAI:
    """퀘스트 생성/숙소 요금 추정에 쓰는 ChatOpenAI 인스턴스를 반환합니다."""
    settings = get_settings()
    if not settings.OPENAI_API_KEY:
        raise LLMNotConfiguredError("OPENAI_API_KEY is not configured.")

    timeout_policy = get_timeout_policy(settings)
    return ChatOpenAI(
        model=settings.LLM_MODEL_NAME,
        temperature=settings.LLM_TEMPERATURE,
        api_key=settings.OPENAI_API_KEY,
        request_timeout=timeout_policy.quest_llm_timeout_seconds,
    )


def strip_code_fence(text: str) -> str:
    """응답 본문을 감싼 ``` 코드 펜스를 제거합니다."""
    content = (text or "").strip()
    if content.startswith("```"):
        parts = content.split("```")
        if len(parts) > 1:
            content = parts[1].strip()
            if content.startswith("json"):
                content = content[4:].strip()
    return content.strip()
