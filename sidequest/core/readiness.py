"""애플리케이션 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import socket
from urllib.parse import urlparse

from sidequest.core.config import Settings, get_settings
from sidequest.core.timeout_policy import TimeoutPolicy, get_timeout_policy

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _skip(detail: str, *, required: bool = False) -> ReadinessCheck:
    return {"status": "skip", "ok": True, "required": required, "detail": detail}


def _resolve_host_port(url: str) -> tuple[str, int] | None:
    parsed = urlparse(url)
    host = parsed.hostname
    if not host:
        return None
    default_port = 443 if parsed.scheme.lower() == "https" else 80
    return host, int(parsed.port or default_port)


async def _check_tcp_connectivity(
    host: str,
    port: int,
    timeout_seconds: int,
    label: str,
    *,
    required: bool = True,
) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} 연결 가능 ({host}:{port})", required=required)
    except Exception as exc:
        return _fail(f"{label} 연결 실패 ({host}:{port}): {exc}", required=required)


async def _check_url_readiness(
    url: str,
    timeout_policy: TimeoutPolicy,
    label: str,
    *,
    required: bool = True,
) -> ReadinessCheck:
    host_port = _resolve_host_port(url)
    if host_port is None:
        return _fail(f"{label} URL에서 호스트를 파싱할 수 없습니다: {url}", required=required)

    host, port = host_port
    return await _check_tcp_connectivity(
        host=host,
        port=port,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label=label,
        required=required,
    )


async def _check_openai_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.OPENAI_API_KEY:
        return _skip("OPENAI_API_KEY 미설정으로 AI 퀘스트/숙소 요금 추정이 비활성화됩니다.")

    return await _check_tcp_connectivity(
        host="api.openai.com",
        port=443,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label="OpenAI API",
        required=False,
    )


async def collect_readiness_status() -> dict[str, object]:
    """라우팅(필수)과 장소/LLM(선택) 외부 의존성 준비 상태를 점검합니다."""
    settings = get_settings()
    timeout_policy = get_timeout_policy(settings)

    osrm_check, overpass_check, openai_check = await asyncio.gather(
        _check_url_readiness(settings.OSRM_BASE_URL, timeout_policy, "OSRM"),
        _check_url_readiness(settings.OVERPASS_API_URL, timeout_policy, "Overpass API", required=False),
        _check_openai_readiness(settings, timeout_policy),
    )

    checks: dict[str, ReadinessCheck] = {
        "osrm": osrm_check,
        "overpass": overpass_check,
        "openai": openai_check,
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
