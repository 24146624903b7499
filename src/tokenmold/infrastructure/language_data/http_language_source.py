from __future__ import annotations

import logging
from typing import Any, List, Mapping, Sequence

import httpx

from tokenmold.domain.repositories import LanguageSource
from tokenmold.infrastructure.content_cache import FileContentCache
from tokenmold.infrastructure.resilient_http import get_json_with_retry


class HttpLanguageSource(LanguageSource):
    """Fetches ``/<key>.json`` dictionaries, with an optional on-disk cache.

    The key list comes from ``/index.json`` (a JSON list, or an object with a
    ``languages`` list) unless given explicitly. A failed fetch falls back to
    a stale cached copy before raising.
    """

    def __init__(
        self,
        base_url: str,
        *,
        keys: Sequence[str] | None = None,
        cache: FileContentCache | None = None,
        cache_ttl_seconds: int = 7 * 86400,
        timeout: float = 5.0,
        retries: int = 1,
        backoff_seconds: float = 0.2,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._keys = sorted(keys) if keys is not None else None
        self.cache = cache
        self.cache_ttl_seconds = cache_ttl_seconds
        self._retries = retries
        self._backoff_seconds = backoff_seconds
        self.client = http_client or httpx.Client(base_url=base_url, timeout=timeout)
        self._logger = logging.getLogger(__name__)

    def _get(self, path: str) -> Any:
        return get_json_with_retry(
            self.client,
            path,
            headers={"Accept": "application/json"},
            retries=self._retries,
            backoff_seconds=self._backoff_seconds,
        )

    def available_keys(self) -> List[str]:
        if self._keys is None:
            payload = self._get("/index.json")
            if isinstance(payload, Mapping):
                payload = payload.get("languages", [])
            self._keys = sorted(str(key) for key in payload or [])
        return list(self._keys)

    def load(self, key: str) -> Mapping[str, Any]:
        cache_key = f"language:{key}"
        if self.cache is not None:
            cached = self.cache.get(cache_key, ttl_seconds=self.cache_ttl_seconds)
            if cached is not None:
                return cached

        try:
            payload = self._get(f"/{key}.json")
        except Exception:
            stale = self.cache.get(cache_key, ttl_seconds=None, allow_stale=True) if self.cache is not None else None
            if stale is None:
                raise
            self._logger.warning("Using stale cached language after fetch failure", extra={"language": key})
            return stale

        if self.cache is not None and isinstance(payload, dict):
            try:
                self.cache.set(cache_key, payload)
            except OSError:
                self._logger.warning("Could not write language cache", extra={"language": key})
        return payload

    def close(self) -> None:
        self.client.close()
