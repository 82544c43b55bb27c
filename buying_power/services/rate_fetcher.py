# This project was developed with assistance from AI tools.
"""Fallback-chain rate fetcher.

Sources are tried in order and the first success wins. A failed step is
logged and the next one runs; only exhaustion of every step is an error.
Each step is bounded by a timeout so a hung source fails over instead of
stalling the chain.

Progress is published at every transition. ``silent=True`` (background
revalidation) suppresses user-facing notifications but still updates
progress.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field

from ..core.config import settings
from ..core.errors import AllSourcesExhaustedError, LocationMissingError, RateDataError
from ..schemas.location import LocationKey
from ..schemas.rates import FetchProgressState, RateBundle, RateSourceResult
from .property_data import PropertyCosts, PropertyDataProvider
from .rate_sources import RateSource

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[FetchProgressState], None]
Notifier = Callable[[str, str], None]
Step = Callable[[], Awaitable[RateSourceResult]]


@dataclass(frozen=True)
class FetchResult:
    """Either a bundle or the terminal error that ended the chain."""

    bundle: RateBundle | None = None
    error: RateDataError | None = None
    attempts: list[RateSourceResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.bundle is not None


async def first_success(
    steps: Sequence[Step],
    on_result: Callable[[int, RateSourceResult], None] | None = None,
) -> tuple[RateSourceResult | None, list[RateSourceResult]]:
    """Await ``steps`` in order, stopping at the first successful result.

    Returns the winning result (or None) and every result produced,
    including the winner.
    """
    results: list[RateSourceResult] = []
    for index, step in enumerate(steps):
        result = await step()
        results.append(result)
        if on_result is not None:
            on_result(index, result)
        if result.success:
            return result, results
    return None, results


class RateDataFetcher:
    """Run the rate fallback chain for a location."""

    def __init__(
        self,
        sources: Sequence[RateSource],
        property_provider: PropertyDataProvider,
        step_timeout: float = settings.FETCH_STEP_TIMEOUT_SECONDS,
        on_progress: ProgressCallback | None = None,
        notifier: Notifier | None = None,
    ):
        self._sources = list(sources)
        self._property_provider = property_provider
        self._step_timeout = step_timeout
        self._on_progress = on_progress
        self._notifier = notifier
        self._progress = FetchProgressState()

    @property
    def progress(self) -> FetchProgressState:
        return self._progress

    @property
    def source_names(self) -> list[str]:
        return [source.name for source in self._sources]

    def _publish(self, is_current: Callable[[], bool] | None = None, **changes) -> None:
        if is_current is not None and not is_current():
            return
        self._progress = self._progress.model_copy(update=changes)
        if self._on_progress is not None:
            self._on_progress(self._progress)

    def _notify(
        self, level: str, message: str, silent: bool, is_current: Callable[[], bool] | None = None
    ) -> None:
        if silent or self._notifier is None:
            return
        if is_current is not None and not is_current():
            return
        self._notifier(level, message)

    async def _property_costs(self, location: LocationKey) -> PropertyCosts:
        try:
            return await asyncio.wait_for(
                self._property_provider.lookup(location), self._step_timeout
            )
        except TimeoutError:
            logger.warning(
                "Property cost lookup for %s timed out after %gs, using defaults",
                location,
                self._step_timeout,
            )
        except Exception:
            logger.warning(
                "Property cost lookup for %s failed, using defaults", location, exc_info=True
            )
        return self._property_provider.defaults()

    def _step(self, source: RateSource, location: LocationKey) -> Step:
        async def run() -> RateSourceResult:
            try:
                return await asyncio.wait_for(source.fetch(location), self._step_timeout)
            except TimeoutError:
                return RateSourceResult.fail(
                    f"timed out after {self._step_timeout:g}s", source=source.name
                )

        return run

    def _step_percent(self, index: int) -> int:
        return 10 + int(80 * index / max(len(self._sources), 1))

    async def fetch(
        self,
        location: LocationKey,
        silent: bool = False,
        is_current: Callable[[], bool] | None = None,
    ) -> FetchResult:
        """Obtain a rate bundle for ``location`` from the first source that works.

        ``is_current`` is checked before every progress update and
        notification. Once it returns False the cycle keeps running but
        stops writing user-facing state.
        """
        if not location.is_complete:
            error = LocationMissingError("State and county are required before fetching rates")
            self._publish(
                is_current,
                is_loading=False,
                is_error=True,
                error_message="Location data missing",
                has_attempted_fetch=True,
                progress=0,
                message="Please set your location first",
            )
            self._notify("error", "Please set your location first", silent, is_current)
            return FetchResult(error=error)

        logger.info("Fetching rate data for %s (silent=%s)", location, silent)
        first = self._sources[0].name if self._sources else "rate sources"
        self._publish(
            is_current,
            is_loading=True,
            is_error=False,
            error_message=None,
            has_attempted_fetch=True,
            progress=self._step_percent(0),
            message=f"Checking {first}",
        )

        def on_result(index: int, result: RateSourceResult) -> None:
            if result.success:
                logger.info("Rate source %s succeeded for %s", result.source, location)
                return
            logger.warning("Rate source %s failed: %s", result.source, result.error)
            if index + 1 < len(self._sources):
                self._publish(
                    is_current,
                    progress=self._step_percent(index + 1),
                    message=f"{result.source} unavailable, trying {self._sources[index + 1].name}",
                )

        winner, attempts = await first_success(
            [self._step(source, location) for source in self._sources], on_result
        )

        if winner is None:
            error = AllSourcesExhaustedError([f"{r.source}: {r.error}" for r in attempts])
            logger.error("Rate data unavailable for %s: %s", location, error)
            self._publish(
                is_current,
                is_loading=False,
                is_error=True,
                error_message=str(error),
                progress=100,
                message="Failed to fetch mortgage data",
            )
            self._notify("error", "Failed to fetch mortgage data", silent, is_current)
            return FetchResult(error=error, attempts=attempts)

        costs = await self._property_costs(location)
        bundle = winner.data.model_copy(update=costs.as_bundle_fields())
        self._publish(
            is_current,
            is_loading=False,
            is_error=False,
            error_message=None,
            progress=100,
            message=f"Rates loaded from {winner.source}",
        )
        self._notify("success", "Mortgage data updated", silent, is_current)
        return FetchResult(bundle=bundle, attempts=attempts)
