# This project was developed with assistance from AI tools.
"""Tests for the data acquisition coordinator."""

import asyncio
from datetime import timedelta

import pytest

from buying_power.core.config import Settings
from buying_power.core.errors import AllSourcesExhaustedError, LocationMissingError, RateDataError
from buying_power.schemas.location import LocationKey
from buying_power.schemas.rates import FetchProgressState, RateBundle, RateSourceResult
from buying_power.services.coordinator import AcquisitionState, DataAcquisitionCoordinator
from buying_power.services.property_data import PropertyDataProvider
from buying_power.services.rate_cache import RateDataStore
from buying_power.services.rate_fetcher import FetchResult, RateDataFetcher
from buying_power.services.storage import InMemoryKeyValueStore


class FakeFetcher:
    """Fetcher whose completions can be held back per location."""

    def __init__(self, bundle, fail=False):
        self.bundle = bundle
        self.fail = fail
        self.calls: list[tuple[LocationKey, bool]] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.progress = FetchProgressState()

    def hold(self, location: LocationKey) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[location.county] = gate
        return gate

    async def fetch(self, location, silent=False, is_current=None):
        self.calls.append((location, silent))
        gate = self.gates.get(location.county)
        if gate is not None:
            await gate.wait()
        if self.fail:
            return FetchResult(error=AllSourcesExhaustedError(["database: down"]))
        return FetchResult(bundle=self.bundle.model_copy(update={"source": location.county}))


def _coordinator(clock, bundle, fail=False):
    cache = RateDataStore(InMemoryKeyValueStore(), clock=clock)
    fetcher = FakeFetcher(bundle, fail=fail)
    updates, clears = [], []
    coordinator = DataAcquisitionCoordinator(
        cache, fetcher, on_update=updates.append, on_clear=lambda: clears.append(True)
    )
    return coordinator, cache, fetcher, updates, clears


@pytest.mark.asyncio
async def test_fresh_cache_hit_never_fetches(clock, travis, bundle):
    """should serve a fresh slot for the same location without any fetch."""
    coordinator, cache, fetcher, updates, _ = _coordinator(clock, bundle)
    cache.write(travis, bundle)

    result = await coordinator.acquire(travis)

    assert result == bundle
    assert fetcher.calls == []
    assert coordinator.state is AcquisitionState.READY
    assert updates == [bundle]


@pytest.mark.asyncio
async def test_cache_miss_fetches_and_writes(clock, travis, bundle):
    coordinator, cache, fetcher, _, _ = _coordinator(clock, bundle)

    result = await coordinator.acquire(travis)

    assert result.source == "Travis"
    assert len(fetcher.calls) == 1
    assert cache.read(travis).bundle == result
    assert coordinator.state is AcquisitionState.READY


@pytest.mark.asyncio
async def test_expired_cache_refetches(clock, travis, bundle):
    coordinator, cache, fetcher, _, _ = _coordinator(clock, bundle)
    cache.write(travis, bundle)
    clock.now += timedelta(hours=5)

    await coordinator.acquire(travis)

    assert len(fetcher.calls) == 1


@pytest.mark.asyncio
async def test_concurrent_triggers_share_one_fetch(clock, travis, bundle):
    """should run the chain once when two triggers race for the same location."""
    coordinator, _, fetcher, _, _ = _coordinator(clock, bundle)
    gate = fetcher.hold(travis)

    first = asyncio.create_task(coordinator.acquire(travis))
    second = asyncio.create_task(coordinator.acquire(travis))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert coordinator.state is AcquisitionState.FETCHING
    gate.set()
    a, b = await asyncio.gather(first, second)

    assert len(fetcher.calls) == 1
    assert a == b
    assert a.source == "Travis"


@pytest.mark.asyncio
async def test_stale_completion_discarded_after_location_change(clock, travis, king, bundle):
    """should drop county A's late result once the user has moved to county B."""
    coordinator, cache, fetcher, updates, _ = _coordinator(clock, bundle)
    gate_a = fetcher.hold(travis)

    task_a = asyncio.create_task(coordinator.acquire(travis))
    await asyncio.sleep(0)
    result_b = await coordinator.acquire(king)
    gate_a.set()
    result_a = await task_a

    assert result_a is None
    assert result_b.source == "King"
    assert coordinator.bundle.source == "King"
    assert coordinator.location == king
    assert cache.read(king) is not None
    assert cache.read(travis) is None
    assert [u.source for u in updates] == ["King"]


class GatedSource:
    """Database source that fails for Travis and succeeds elsewhere, held per county."""

    name = "database"

    def __init__(self):
        self.gates: dict[str, asyncio.Event] = {}

    async def fetch(self, location):
        gate = self.gates.get(location.county)
        if gate is not None:
            await gate.wait()
        if location.county == "Travis":
            return RateSourceResult.fail("down", source=self.name)
        return RateSourceResult.ok(
            RateBundle(conventional_rate=6.5, fha_rate=6.0, source=self.name), source=self.name
        )


@pytest.mark.asyncio
async def test_stale_failure_leaves_progress_and_notifications_alone(clock, travis, king):
    """should keep showing the new county's success when the old county fails late."""
    source = GatedSource()
    notes = []
    fetcher = RateDataFetcher(
        [source],
        PropertyDataProvider(cfg=Settings()),
        step_timeout=1.0,
        notifier=lambda level, message: notes.append((level, message)),
    )
    cache = RateDataStore(InMemoryKeyValueStore(), clock=clock)
    coordinator = DataAcquisitionCoordinator(cache, fetcher)
    gate_a = asyncio.Event()
    source.gates["Travis"] = gate_a

    task_a = asyncio.create_task(coordinator.acquire(travis, silent=False))
    await asyncio.sleep(0)
    result_b = await coordinator.acquire(king, silent=False)
    gate_a.set()
    result_a = await task_a

    assert result_a is None
    assert result_b is not None
    assert coordinator.state is AcquisitionState.READY
    assert not coordinator.progress.is_error
    assert coordinator.progress.message == "Rates loaded from database"
    assert notes == [("success", "Mortgage data updated")]


@pytest.mark.asyncio
async def test_unexpected_fetch_error_returns_to_idle(clock, travis, bundle):
    coordinator, _, fetcher, _, _ = _coordinator(clock, bundle)

    async def boom(location, silent=False, is_current=None):
        raise OSError("socket closed")

    fetcher.fetch = boom
    with pytest.raises(OSError):
        await coordinator.acquire(travis)

    assert coordinator.state is AcquisitionState.IDLE
    assert isinstance(coordinator.last_error, RateDataError)
    assert "socket closed" in str(coordinator.last_error)
    assert coordinator.bundle is None


@pytest.mark.asyncio
async def test_location_change_bumps_generation_and_clears(clock, travis, king, bundle):
    coordinator, _, _, _, clears = _coordinator(clock, bundle)
    await coordinator.acquire(travis)
    generation = coordinator.generation

    await coordinator.acquire(king)

    assert coordinator.generation == generation + 1
    assert clears == [True]


@pytest.mark.asyncio
async def test_failure_clears_data_and_returns_to_idle(clock, travis, bundle):
    """should never leave a partial or zero rate behind after exhaustion."""
    coordinator, cache, _, _, clears = _coordinator(clock, bundle, fail=True)

    result = await coordinator.acquire(travis)

    assert result is None
    assert coordinator.bundle is None
    assert coordinator.state is AcquisitionState.IDLE
    assert isinstance(coordinator.last_error, AllSourcesExhaustedError)
    assert cache.peek() is None
    assert clears == [True]


@pytest.mark.asyncio
async def test_error_state_retries_on_next_trigger(clock, travis, bundle):
    coordinator, _, fetcher, _, _ = _coordinator(clock, bundle, fail=True)
    await coordinator.acquire(travis)
    fetcher.fail = False

    result = await coordinator.acquire(travis)

    assert result is not None
    assert coordinator.state is AcquisitionState.READY
    assert coordinator.last_error is None


@pytest.mark.asyncio
async def test_incomplete_location_goes_idle(clock, bundle):
    coordinator, _, fetcher, _, clears = _coordinator(clock, bundle)

    result = await coordinator.acquire(LocationKey(state="TX", county=""))

    assert result is None
    assert coordinator.state is AcquisitionState.IDLE
    assert isinstance(coordinator.last_error, LocationMissingError)
    assert fetcher.calls == []
    assert clears == [True]


@pytest.mark.asyncio
async def test_refresh_bypasses_fresh_cache(clock, travis, bundle):
    """should re-run the chain with notifications even when the slot is fresh."""
    coordinator, _, fetcher, _, _ = _coordinator(clock, bundle)
    await coordinator.acquire(travis)

    await coordinator.refresh()

    assert len(fetcher.calls) == 2
    assert fetcher.calls[0][1] is True
    assert fetcher.calls[1][1] is False


@pytest.mark.asyncio
async def test_refresh_without_location(clock, bundle):
    coordinator, _, fetcher, _, _ = _coordinator(clock, bundle)
    assert await coordinator.refresh() is None
    assert isinstance(coordinator.last_error, LocationMissingError)
    assert fetcher.calls == []
