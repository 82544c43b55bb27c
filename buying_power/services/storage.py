# This project was developed with assistance from AI tools.
"""Local key-value storage.

Backs the rate cache slot and feature flag overrides. Values are raw
strings; callers own (de)serialization. Two backends: an in-memory dict
for tests and single-process use, and a JSON file for persistence across
restarts. The module exposes a singleton initialised at app startup via
``init_storage_service()``.
"""

import json
import logging
from pathlib import Path
from typing import Protocol

from ..core.config import Settings

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Dict-backed store."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """Store persisted as one JSON object on disk.

    A missing file reads as empty. A corrupt file is moved aside to
    ``<name>.corrupt`` and also reads as empty, so its contents survive the
    next ``set``.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = None
        if isinstance(data, dict):
            return data
        self._quarantine()
        return {}

    def _quarantine(self) -> None:
        aside = self._path.with_suffix(self._path.suffix + ".corrupt")
        self._path.replace(aside)
        logger.error("Unreadable key-value file %s moved to %s", self._path, aside)

    def _save(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


def build_store(path: str | None) -> KeyValueStore:
    """Return a file-backed store when a path is configured, else in-memory."""
    if path:
        return JsonFileKeyValueStore(path)
    return InMemoryKeyValueStore()


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_cache_store: KeyValueStore | None = None
_flag_store: KeyValueStore | None = None


def init_storage_service(cfg: Settings) -> None:
    """Initialise the cache and flag stores (called once from app lifespan)."""
    global _cache_store, _flag_store  # noqa: PLW0603
    _cache_store = build_store(cfg.RATE_CACHE_PATH)
    _flag_store = build_store(cfg.FEATURE_FLAGS_PATH)
    logger.info(
        "Key-value storage initialised (cache=%s, flags=%s)",
        cfg.RATE_CACHE_PATH or "memory",
        cfg.FEATURE_FLAGS_PATH or "memory",
    )


def get_cache_store() -> KeyValueStore:
    if _cache_store is None:
        raise RuntimeError("Storage not initialised -- call init_storage_service() first")
    return _cache_store


def get_flag_store() -> KeyValueStore:
    if _flag_store is None:
        raise RuntimeError("Storage not initialised -- call init_storage_service() first")
    return _flag_store
