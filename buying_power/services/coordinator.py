# This project was developed with assistance from AI tools.
"""Data acquisition coordinator.

Decides, per location, whether to serve the cached bundle, run the fetch
chain, or clear stale data. State flow::

    IDLE -> CHECKING -> CACHE_HIT -> READY
                     -> FETCHING  -> READY
                                  -> ERROR -> IDLE

ERROR is left as soon as the failure is recorded; ``last_error`` keeps it
visible until the next successful fetch.

Every fetch cycle carries the generation number current when it started.
A location change bumps the generation, so a completion from an older
cycle is discarded instead of overwriting data for the new location.
Concurrent triggers for the same location share one in-flight fetch.
"""

import asyncio
import enum
import logging
from collections.abc import Callable

from ..core.errors import LocationMissingError, RateDataError
from ..schemas.location import LocationKey
from ..schemas.rates import FetchProgressState, RateBundle
from .rate_cache import RateDataStore
from .rate_fetcher import RateDataFetcher

logger = logging.getLogger(__name__)


class AcquisitionState(str, enum.Enum):
    IDLE = "idle"
    CHECKING = "checking"
    CACHE_HIT = "cache_hit"
    FETCHING = "fetching"
    READY = "ready"
    ERROR = "error"


class DataAcquisitionCoordinator:
    """Owns the cache slot and the single in-flight fetch."""

    def __init__(
        self,
        store: RateDataStore,
        fetcher: RateDataFetcher,
        on_update: Callable[[RateBundle], None] | None = None,
        on_clear: Callable[[], None] | None = None,
    ):
        self._store = store
        self._fetcher = fetcher
        self._on_update = on_update
        self._on_clear = on_clear

        self._state = AcquisitionState.IDLE
        self._location: LocationKey | None = None
        self._generation = 0
        self._bundle: RateBundle | None = None
        self._last_error: RateDataError | None = None
        self._inflight: asyncio.Task | None = None
        self._inflight_generation = -1

    # -- read-only views --

    @property
    def state(self) -> AcquisitionState:
        return self._state

    @property
    def location(self) -> LocationKey | None:
        return self._location

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def bundle(self) -> RateBundle | None:
        return self._bundle

    @property
    def last_error(self) -> RateDataError | None:
        return self._last_error

    @property
    def progress(self) -> FetchProgressState:
        return self._fetcher.progress

    # -- shared-state callbacks --

    def _apply(self, bundle: RateBundle) -> None:
        self._bundle = bundle
        self._last_error = None
        if self._on_update is not None:
            self._on_update(bundle)

    def _clear(self) -> None:
        self._bundle = None
        if self._on_clear is not None:
            self._on_clear()

    def _switch_location(self, location: LocationKey) -> None:
        if self._location == location:
            return
        self._generation += 1
        previous = self._location
        self._location = location
        cached = self._store.peek()
        if cached is not None and cached.location != location:
            self._store.invalidate()
        if previous is not None:
            logger.info("Location changed from %s to %s", previous, location)
            self._clear()

    # -- triggers --

    async def acquire(self, location: LocationKey, silent: bool = True) -> RateBundle | None:
        """Make rate data available for ``location``.

        Returns the bundle now in effect, or None when the location is
        incomplete, every source failed, or the result went stale because
        the location changed while fetching.
        """
        if not location.is_complete:
            logger.info("Missing state/county, not fetching rate data")
            self._generation += 1
            self._location = None
            self._state = AcquisitionState.IDLE
            self._last_error = LocationMissingError("State and county are required")
            self._clear()
            return None

        self._switch_location(location)
        self._state = AcquisitionState.CHECKING

        entry = self._store.read(location)
        if entry is not None:
            logger.info("Using cached rate data for %s", location)
            self._state = AcquisitionState.CACHE_HIT
            self._apply(entry.bundle)
            self._state = AcquisitionState.READY
            return entry.bundle

        return await self._fetch(location, silent)

    async def refresh(self, silent: bool = False) -> RateBundle | None:
        """User-triggered refresh: bypass the cache for the current location."""
        if self._location is None:
            self._last_error = LocationMissingError("State and county are required")
            return None
        return await self._fetch(self._location, silent)

    async def _fetch(self, location: LocationKey, silent: bool) -> RateBundle | None:
        inflight = self._inflight
        if (
            inflight is not None
            and not inflight.done()
            and self._inflight_generation == self._generation
        ):
            logger.info("Joining in-flight rate fetch for %s", location)
            self._state = AcquisitionState.FETCHING
            return await asyncio.shield(inflight)

        self._state = AcquisitionState.FETCHING
        generation = self._generation
        task = asyncio.create_task(self._run_fetch(location, generation, silent))
        self._inflight = task
        self._inflight_generation = generation
        return await asyncio.shield(task)

    async def _run_fetch(
        self, location: LocationKey, generation: int, silent: bool
    ) -> RateBundle | None:
        def is_current() -> bool:
            return generation == self._generation

        try:
            result = await self._fetcher.fetch(location, silent=silent, is_current=is_current)

            if not is_current():
                logger.warning(
                    "Discarding rate data for %s; location is now %s",
                    location,
                    self._location,
                )
                return None

            if result.success:
                self._store.write(location, result.bundle)
                self._apply(result.bundle)
                self._state = AcquisitionState.READY
                return result.bundle

            self._fail(result.error)
            return None
        except Exception as exc:
            logger.exception("Rate fetch for %s raised unexpectedly", location)
            if is_current():
                self._fail(RateDataError(f"Rate fetch failed: {exc}"))
            raise
        finally:
            if self._inflight_generation == generation:
                self._inflight = None
                self._inflight_generation = -1

    def _fail(self, error: RateDataError) -> None:
        self._state = AcquisitionState.ERROR
        self._store.invalidate()
        self._clear()
        self._last_error = error
        logger.info("Rate acquisition for %s failed, back to idle", self._location)
        self._state = AcquisitionState.IDLE
