# salesops/adapters/clients/http_resilience.py
"""
Outbound HTTP for the company registries.

Each registry host gets its own circuit: the keyed registry failing must not
block the public fallback registry.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any

import httpx

from ...config import settings

log = logging.getLogger(__name__)

RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_BACKOFF_S = 5.0


class CircuitOpen(httpx.HTTPError):
    pass


@dataclass
class HostCircuit:
    consecutive_failures: int = 0
    opened_at: float | None = None

    def is_open(self, now: float) -> bool:
        if self.opened_at is None:
            return False
        if now - self.opened_at >= float(settings.HTTP_CIRCUIT_RESET_S):
            # half-open: let the next call through, one more failure re-opens
            self.opened_at = None
            self.consecutive_failures = int(settings.HTTP_CIRCUIT_FAIL_THRESHOLD) - 1
            return False
        return True

    def record_failure(self, host: str) -> None:
        self.consecutive_failures += 1
        if self.opened_at is None and self.consecutive_failures >= int(settings.HTTP_CIRCUIT_FAIL_THRESHOLD):
            self.opened_at = time.monotonic()
            log.warning("circuit for %s opened after %d failures", host, self.consecutive_failures)

    def record_success(self) -> None:
        self.consecutive_failures = 0
        self.opened_at = None


_circuits: dict[str, HostCircuit] = {}
_pace_lock = asyncio.Lock()
_last_call_at = 0.0


def circuit_for(host: str) -> HostCircuit:
    return _circuits.setdefault(host, HostCircuit())


def reset_circuit(host: str | None = None) -> None:
    if host is None:
        _circuits.clear()
    else:
        _circuits.pop(host, None)


async def _pace() -> None:
    """Spaces calls out to HTTP_RATE_LIMIT_RPS across the whole process."""
    global _last_call_at
    rps = float(settings.HTTP_RATE_LIMIT_RPS)
    if rps <= 0:
        return
    async with _pace_lock:
        gap = _last_call_at + 1.0 / rps - time.monotonic()
        if gap > 0:
            await asyncio.sleep(gap)
        _last_call_at = time.monotonic()


def _is_retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS
    return isinstance(exc, (httpx.TimeoutException, httpx.NetworkError))


async def resilient_request(
    method: str,
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    json: Any | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.Response:
    """
    Retries timeouts, network errors, 429 and 5xx with exponential backoff.
    Other 4xx responses raise right away and do not count against the circuit.
    """
    host = httpx.URL(url).host
    circuit = circuit_for(host)
    if circuit.is_open(time.monotonic()):
        raise CircuitOpen(f"circuit open for {host}")

    retries = int(settings.HTTP_MAX_RETRIES)
    base_delay = float(settings.HTTP_BACKOFF_BASE_S)

    async with httpx.AsyncClient(timeout=float(settings.HTTP_TIMEOUT_S), transport=transport) as client:
        attempt = 0
        while True:
            await _pace()
            try:
                resp = await client.request(method, url, headers=headers, params=params, json=json)
                resp.raise_for_status()
            except httpx.HTTPError as e:
                if not _is_retryable(e):
                    raise
                circuit.record_failure(host)
                if attempt >= retries:
                    raise
                delay = min(MAX_BACKOFF_S, base_delay * 2**attempt)
                log.info("%s %s failed (%s); retry %d in %.2fs", method, url, e, attempt + 1, delay)
                await asyncio.sleep(delay)
                attempt += 1
                continue

            circuit.record_success()
            return resp
