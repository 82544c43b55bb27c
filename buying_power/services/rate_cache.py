# This project was developed with assistance from AI tools.
"""Single-slot cache for the most recently fetched rate bundle.

The slot holds one entry for the most recently viewed location; writing
for a new location overwrites it. An entry is served only while it is
younger than the TTL and belongs to the location being asked about.
"""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from pydantic import ValidationError

from ..core.errors import MalformedCacheEntryError
from ..schemas.location import LocationKey
from ..schemas.rates import CachedEntry, RateBundle
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

CACHE_KEY = "mortgage_data_cache"
DEFAULT_TTL = timedelta(hours=4)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RateDataStore:
    """Rate cache with an injected clock and explicit location scoping."""

    def __init__(
        self,
        store: KeyValueStore,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._store = store
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def now(self) -> datetime:
        return self._clock()

    @staticmethod
    def _parse(raw: str) -> CachedEntry:
        try:
            return CachedEntry.model_validate_json(raw)
        except (ValidationError, ValueError) as exc:
            raise MalformedCacheEntryError(str(exc)) from exc

    def _load(self) -> CachedEntry | None:
        raw = self._store.get(CACHE_KEY)
        if raw is None:
            return None
        try:
            return self._parse(raw)
        except MalformedCacheEntryError as exc:
            logger.warning("Discarding malformed rate cache entry: %s", exc)
            return None

    def peek(self) -> CachedEntry | None:
        """Return whatever is in the slot, regardless of location or age."""
        return self._load()

    def read(self, key: LocationKey) -> CachedEntry | None:
        """Return the entry for ``key`` if one is stored and still fresh.

        Never raises: a missing, unparseable, expired or other-location slot
        all read as ``None``. An expired slot is cleared on the way out.
        """
        entry = self._load()
        if entry is None:
            return None
        if entry.location != key:
            logger.info("Cached rate data is for %s, not %s", entry.location, key)
            return None
        if not self.is_fresh(entry, key):
            logger.info("Cached rate data for %s is expired", key)
            self.invalidate()
            return None
        return entry

    def write(self, key: LocationKey, bundle: RateBundle) -> CachedEntry:
        """Replace the slot with ``bundle`` for ``key``."""
        entry = CachedEntry(location=key, bundle=bundle, timestamp=self.now())
        self._store.set(CACHE_KEY, entry.model_dump_json())
        logger.info("Rate data cached for %s", key)
        return entry

    def is_fresh(
        self,
        entry: CachedEntry,
        current: LocationKey,
        now: datetime | None = None,
    ) -> bool:
        """True iff the entry is younger than the TTL and for ``current``."""
        now = now or self.now()
        timestamp = entry.timestamp
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=UTC)
        return (now - timestamp) < self._ttl and entry.location == current

    def invalidate(self) -> None:
        """Clear the slot."""
        self._store.delete(CACHE_KEY)
        logger.info("Rate data cache invalidated")
