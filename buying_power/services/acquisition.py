# This project was developed with assistance from AI tools.
"""App-wide rate acquisition wiring.

Builds the cache, fallback sources, fetcher and coordinator once at
startup. The module exposes a singleton initialised from the app lifespan
via ``init_acquisition()``.
"""

import logging
from datetime import timedelta

from ..core.config import Settings
from ..db.database import SessionLocal
from .coordinator import DataAcquisitionCoordinator
from .property_data import PropertyDataProvider
from .rate_cache import RateDataStore
from .rate_fetcher import RateDataFetcher
from .rate_sources import InferenceRateSource, ScrapedRateSource, SnapshotRateSource
from .storage import get_cache_store

logger = logging.getLogger(__name__)


def log_notification(level: str, message: str) -> None:
    """Default notifier: user-facing fetch notifications go to the log."""
    if level == "error":
        logger.warning("Notification: %s", message)
    else:
        logger.info("Notification: %s", message)


def build_coordinator(cfg: Settings, session_factory=SessionLocal) -> DataAcquisitionCoordinator:
    store = RateDataStore(get_cache_store(), ttl=timedelta(seconds=cfg.RATE_CACHE_TTL_SECONDS))
    fetcher = RateDataFetcher(
        sources=[
            SnapshotRateSource(session_factory),
            ScrapedRateSource(cfg),
            InferenceRateSource(cfg=cfg),
        ],
        property_provider=PropertyDataProvider(session_factory, cfg=cfg),
        step_timeout=cfg.FETCH_STEP_TIMEOUT_SECONDS,
        notifier=log_notification,
    )
    logger.info(
        "Rate acquisition ready (sources=%s, ttl=%ss, step_timeout=%ss)",
        " -> ".join(fetcher.source_names),
        cfg.RATE_CACHE_TTL_SECONDS,
        cfg.FETCH_STEP_TIMEOUT_SECONDS,
    )
    return DataAcquisitionCoordinator(store, fetcher)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_coordinator: DataAcquisitionCoordinator | None = None


def init_acquisition(cfg: Settings) -> DataAcquisitionCoordinator:
    """Initialise the coordinator singleton (called once from app lifespan)."""
    global _coordinator  # noqa: PLW0603
    _coordinator = build_coordinator(cfg)
    return _coordinator


def get_coordinator() -> DataAcquisitionCoordinator:
    """Return the initialised coordinator (also used as a FastAPI dependency)."""
    if _coordinator is None:
        raise RuntimeError("Coordinator not initialised -- call init_acquisition() first")
    return _coordinator
