"""Retrying JSON GETs guarded by a per-host circuit breaker.

Breaker behaviour is read from the environment on every call:
``TOKENMOLD_HTTP_CIRCUIT_BREAKER_ENABLED`` (default on),
``TOKENMOLD_HTTP_CIRCUIT_FAILURE_THRESHOLD`` (default 3) and
``TOKENMOLD_HTTP_CIRCUIT_RESET_SECONDS`` (default 120).
"""

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict

import httpx

TRANSIENT_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})

_logger = logging.getLogger(__name__)


class CircuitOpenError(RuntimeError):
    pass


@dataclass(frozen=True)
class BreakerPolicy:
    enabled: bool = True
    failure_threshold: int = 3
    reset_seconds: float = 120.0

    @classmethod
    def from_env(cls) -> "BreakerPolicy":
        flag = os.getenv("TOKENMOLD_HTTP_CIRCUIT_BREAKER_ENABLED", "1").strip().lower()
        return cls(
            enabled=flag in {"1", "true", "yes"},
            failure_threshold=max(1, int(os.getenv("TOKENMOLD_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3"))),
            reset_seconds=max(0.0, float(os.getenv("TOKENMOLD_HTTP_CIRCUIT_RESET_SECONDS", "120"))),
        )


@dataclass
class _HostCircuit:
    failures: int = 0
    open_until: float = 0.0


class CircuitBreaker:
    """Counts transient failures per base URL and refuses calls while open."""

    def __init__(self) -> None:
        self._hosts: Dict[str, _HostCircuit] = {}

    def check(self, host: str) -> None:
        circuit = self._hosts.get(host)
        if circuit is None:
            return
        if circuit.open_until > time.time():
            raise CircuitOpenError(f"HTTP circuit open for {host} until {int(circuit.open_until)}")
        if circuit.open_until:
            # Reset window elapsed: the next attempt starts a fresh count.
            del self._hosts[host]

    def record_success(self, host: str) -> None:
        self._hosts.pop(host, None)

    def record_failure(self, host: str, policy: BreakerPolicy) -> None:
        circuit = self._hosts.setdefault(host, _HostCircuit())
        circuit.failures += 1
        if circuit.failures >= policy.failure_threshold:
            circuit.open_until = time.time() + policy.reset_seconds
            _logger.warning("HTTP circuit opened", extra={"base_url": host, "failures": circuit.failures})

    def reset(self) -> None:
        self._hosts.clear()


_BREAKER = CircuitBreaker()


def reset_circuit_breakers() -> None:
    _BREAKER.reset()


def _host_key(client: httpx.Client) -> str:
    return str(getattr(client, "base_url", "") or "unknown")


def _is_transient(exc: httpx.HTTPError) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in TRANSIENT_STATUS_CODES
    return isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError))


def get_json_with_retry(
    client: httpx.Client,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    retries: int = 0,
    backoff_seconds: float = 0.2,
) -> Any:
    """GET ``path`` and decode its JSON body, whatever its shape.

    Timeouts, network errors and transient statuses are retried up to
    ``retries`` times with exponential backoff; anything else is raised at
    once.
    """
    policy = BreakerPolicy.from_env()
    host = _host_key(client)
    attempts = max(0, int(retries)) + 1

    for attempt in range(1, attempts + 1):
        if policy.enabled:
            _BREAKER.check(host)
        try:
            response = client.get(path, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            if not _is_transient(exc):
                raise
            if policy.enabled:
                _BREAKER.record_failure(host, policy)
            if attempt == attempts:
                raise
            delay = max(0.0, backoff_seconds) * (2 ** (attempt - 1))
            _logger.debug("Retrying HTTP request", extra={"path": path, "attempt": attempt, "delay": delay})
            if delay > 0:
                time.sleep(delay)
            continue

        if policy.enabled:
            _BREAKER.record_success(host)
        return response.json()

    return None
