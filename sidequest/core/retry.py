"""외부 HTTP 호출 재시도 유틸리티."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Awaitable, Callable, Generic, TypeVar

import requests

from sidequest.core.config import get_settings
from sidequest.core.logger import get_logger
from sidequest.core.timeout_policy import to_requests_timeout

logger = get_logger(__name__)

T = TypeVar("T")


class RetryStatus(StrEnum):
    """재시도 실행 결과 상태."""

    SUCCEEDED = "SUCCEEDED"
    RETRYABLE_EXHAUSTED = "RETRYABLE_EXHAUSTED"
    NON_RETRYABLE = "NON_RETRYABLE"


@dataclass(slots=True)
class RetryOutcome(Generic[T]):
    """재시도 실행 결과.

    성공 값 또는 마지막 예외와 시도 횟수를 함께 담습니다.
    """

    status: RetryStatus
    attempts: int
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.status == RetryStatus.SUCCEEDED

    def unwrap(self) -> T:
        """성공 값을 반환하고, 실패면 마지막 예외를 다시 발생시킵니다."""
        if self.ok:
            return self.value  # type: ignore[return-value]
        if self.error is not None:
            raise self.error
        raise RuntimeError(f"retry failed: status={self.status}")


def http_status_of(exc: Exception) -> int | None:
    """requests 예외에서 HTTP 상태 코드를 꺼냅니다."""
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return exc.response.status_code
    return None


def is_retryable_http_error(exc: Exception) -> bool:
    """타임아웃, 연결 오류, 429, 5xx만 재시도 대상으로 판별합니다."""
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True

    if isinstance(exc, requests.HTTPError):
        status_code = http_status_of(exc)
        return status_code is None or status_code == 429 or status_code >= 500

    return False


async def retry_with_backoff(
    fn: Callable[[], Awaitable[T]],
    *,
    is_retryable: Callable[[Exception], bool] = is_retryable_http_error,
    max_retries: int | None = None,
    base_delay_seconds: float | None = None,
    max_delay_seconds: float | None = None,
    context: dict[str, Any] | None = None,
) -> RetryOutcome[T]:
    """fn을 실행하고 재시도 가능한 실패면 지수 백오프로 다시 시도합니다."""
    settings = get_settings()
    retries = max(0, int(settings.HTTP_MAX_RETRIES if max_retries is None else max_retries))
    max_attempts = 1 + retries
    if base_delay_seconds is None:
        base_delay_seconds = settings.HTTP_BACKOFF_BASE_SECONDS
    if max_delay_seconds is None:
        max_delay_seconds = settings.HTTP_BACKOFF_MAX_SECONDS
    base_delay = max(0.0, float(base_delay_seconds))
    max_delay = max(base_delay, float(max_delay_seconds))
    call_context = context or {}

    for attempt in range(1, max_attempts + 1):
        try:
            value = await fn()
            if attempt > 1:
                logger.info(
                    "Call succeeded after retry: attempt=%d/%d context=%s",
                    attempt,
                    max_attempts,
                    call_context,
                )
            return RetryOutcome(status=RetryStatus.SUCCEEDED, attempts=attempt, value=value)
        except Exception as exc:
            retryable = is_retryable(exc)
            if not retryable:
                logger.warning(
                    "Call failed with non-retryable error: attempt=%d status_code=%s error=%s context=%s",
                    attempt,
                    http_status_of(exc),
                    exc,
                    call_context,
                )
                return RetryOutcome(status=RetryStatus.NON_RETRYABLE, attempts=attempt, error=exc)

            if attempt >= max_attempts:
                logger.error(
                    "Call failed after retries: attempts=%d status_code=%s error=%s context=%s",
                    attempt,
                    http_status_of(exc),
                    exc,
                    call_context,
                )
                return RetryOutcome(status=RetryStatus.RETRYABLE_EXHAUSTED, attempts=attempt, error=exc)

            delay = min(max_delay, base_delay * (2 ** (attempt - 1)))
            logger.warning(
                "Call failed, retrying: attempt=%d/%d delay=%.2fs status_code=%s error=%s context=%s",
                attempt,
                max_attempts,
                delay,
                http_status_of(exc),
                exc,
                call_context,
            )
            await asyncio.sleep(delay)

    return RetryOutcome(status=RetryStatus.RETRYABLE_EXHAUSTED, attempts=max_attempts)


async def request_with_retry(
    method: str,
    url: str,
    *,
    timeout_seconds: int,
    params: dict[str, Any] | None = None,
    data: dict[str, Any] | str | None = None,
    headers: dict[str, str] | None = None,
    context: dict[str, Any] | None = None,
) -> RetryOutcome[requests.Response]:
    """requests 호출을 워커 스레드에서 실행하고 재시도 정책을 적용합니다."""
    request_timeout = to_requests_timeout(timeout_seconds)

    def _send() -> requests.Response:
        response = requests.request(
            method=method,
            url=url,
            params=params,
            data=data,
            headers=headers,
            timeout=request_timeout,
        )
        response.raise_for_status()
        return response

    async def _call() -> requests.Response:
        return await asyncio.to_thread(_send)

    return await retry_with_backoff(_call, context={"url": url, **(context or {})})
