"""외부 HTTP 재시도 유틸 테스트."""

from __future__ import annotations

import asyncio

import pytest
import requests

from sidequest.core.config import get_settings
from sidequest.core.retry import RetryStatus, is_retryable_http_error, request_with_retry, retry_with_backoff


class _FakeResponse:
    def __init__(self, status_code: int, payload: object = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self) -> object:
        return self._payload


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    async def _sleep(_delay):
        return None

    monkeypatch.setattr("sidequest.core.retry.asyncio.sleep", _sleep)
    monkeypatch.setenv("HTTP_MAX_RETRIES", "2")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def _patch_requests(monkeypatch, responses: list[_FakeResponse]) -> list[dict]:
    calls: list[dict] = []

    def _request(**kwargs):
        calls.append(kwargs)
        return responses[min(len(calls), len(responses)) - 1]

    monkeypatch.setattr("sidequest.core.retry.requests.request", _request)
    return calls


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (requests.Timeout(), True),
        (requests.ConnectionError(), True),
        (requests.HTTPError(response=_FakeResponse(429)), True),
        (requests.HTTPError(response=_FakeResponse(503)), True),
        (requests.HTTPError(response=_FakeResponse(400)), False),
        (ValueError("bad"), False),
    ],
)
def test_is_retryable_http_error(exc: Exception, expected: bool) -> None:
    assert is_retryable_http_error(exc) is expected


def test_request_with_retry_succeeds_after_transient_failure(monkeypatch) -> None:
    calls = _patch_requests(monkeypatch, [_FakeResponse(503), _FakeResponse(200, {"ok": True})])

    outcome = asyncio.run(request_with_retry("GET", "https://example.com", timeout_seconds=10))

    assert outcome.ok
    assert outcome.attempts == 2
    assert outcome.value.json() == {"ok": True}
    assert calls[0]["timeout"] == (3.0, 7.0)


def test_request_with_retry_exhausts_retryable_errors(monkeypatch) -> None:
    calls = _patch_requests(monkeypatch, [_FakeResponse(503)])

    outcome = asyncio.run(request_with_retry("GET", "https://example.com", timeout_seconds=10))

    assert outcome.status == RetryStatus.RETRYABLE_EXHAUSTED
    assert outcome.attempts == 3
    assert len(calls) == 3


def test_request_with_retry_stops_on_client_error(monkeypatch) -> None:
    calls = _patch_requests(monkeypatch, [_FakeResponse(404)])

    outcome = asyncio.run(request_with_retry("GET", "https://example.com", timeout_seconds=10))

    assert outcome.status == RetryStatus.NON_RETRYABLE
    assert len(calls) == 1
    with pytest.raises(requests.HTTPError):
        outcome.unwrap()


def test_retry_with_backoff_respects_explicit_max_retries() -> None:
    attempts = 0

    async def _always_timeout():
        nonlocal attempts
        attempts += 1
        raise requests.Timeout("slow")

    outcome = asyncio.run(retry_with_backoff(_always_timeout, max_retries=0))

    assert outcome.status == RetryStatus.RETRYABLE_EXHAUSTED
    assert attempts == 1
