import json
import os
import shutil
import time
from hashlib import sha1
from pathlib import Path
from typing import Any, Iterator


DEFAULT_LANGUAGE_CACHE_VERSION = "1"
MANIFEST_FILENAME = "manifest.json"


def _now() -> int:
    return int(time.time())


def _load_object(path: Path) -> dict[str, Any] | None:
    try:
        decoded = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return decoded if isinstance(decoded, dict) else None


def _dump_object(path: Path, payload: dict[str, Any]) -> None:
    staging = path.with_suffix(".tmp")
    staging.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    os.replace(staging, path)


def _stored_at(envelope: dict[str, Any] | None) -> int | None:
    if envelope is None:
        return None
    try:
        return int(envelope.get("stored_at"))
    except (TypeError, ValueError):
        return None


class FileContentCache:
    """Downloaded JSON documents (language dictionaries) kept on disk.

    Each entry is ``{"stored_at": epoch, "payload": {...}}`` in a file named
    after the SHA-1 of its key. The directory carries a manifest with the
    data version; opening it with another version wipes every entry.
    """

    def __init__(self, root_dir: str | Path, *, data_version: str | None = None) -> None:
        self.root_dir = Path(root_dir)
        requested = data_version or os.getenv("TOKENMOLD_LANGUAGE_CACHE_VERSION", DEFAULT_LANGUAGE_CACHE_VERSION)
        self.data_version = str(requested).strip() or DEFAULT_LANGUAGE_CACHE_VERSION
        self._manifest_path = self.root_dir / MANIFEST_FILENAME
        self._open()

    def _open(self) -> None:
        manifest = _load_object(self._manifest_path) if self.root_dir.exists() else None
        if manifest is not None and str(manifest.get("data_version", "")).strip() == self.data_version:
            return
        shutil.rmtree(self.root_dir, ignore_errors=True)
        self.root_dir.mkdir(parents=True, exist_ok=True)
        _dump_object(self._manifest_path, {"data_version": self.data_version, "updated_at": _now()})

    def _path_for_key(self, cache_key: str) -> Path:
        return self.root_dir / f"{sha1(cache_key.encode('utf-8')).hexdigest()}.json"

    def _entries(self) -> Iterator[Path]:
        return (path for path in self.root_dir.glob("*.json") if path != self._manifest_path)

    def set(self, cache_key: str, payload: dict[str, Any]) -> None:
        _dump_object(self._path_for_key(cache_key), {"stored_at": _now(), "payload": payload})

    def get(
        self,
        cache_key: str,
        *,
        ttl_seconds: int | None,
        allow_stale: bool = False,
    ) -> dict[str, Any] | None:
        """Payload for ``cache_key`` if present and younger than ``ttl_seconds``.

        ``ttl_seconds=None`` or ``allow_stale=True`` returns the entry regardless of age.
        """
        envelope = _load_object(self._path_for_key(cache_key))
        payload = envelope.get("payload") if envelope is not None else None
        if not isinstance(payload, dict):
            return None
        if allow_stale or ttl_seconds is None:
            return payload
        stored_at = _stored_at(envelope)
        if stored_at is None or _now() - stored_at > max(0, int(ttl_seconds)):
            return None
        return payload

    def sweep_expired(self, *, max_age_seconds: int) -> int:
        cutoff = _now() - max(0, int(max_age_seconds))
        removed = 0
        for path in list(self._entries()):
            if (_stored_at(_load_object(path)) or 0) < cutoff:
                path.unlink(missing_ok=True)
                removed += 1
        return removed
