"""외부 응답 파싱 결과 타입."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ParseResult(Generic[T]):
    """외부 JSON 응답을 검증한 결과.

    성공이면 value, 실패면 error 메시지를 가집니다.
    """

    value: T | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> ParseResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> ParseResult[T]:
        return cls(error=error)
