# This project was developed with assistance from AI tools.
"""Rate data sources, in fallback order.

1. ``SnapshotRateSource`` -- latest stored daily rate row (authoritative).
2. ``ScrapedRateSource`` -- public rate-index page, sanity-band checked.
3. ``InferenceRateSource`` -- best-effort LLM estimate.

Each source's ``fetch`` never raises: any failure comes back as a failed
``RateSourceResult`` so the fetcher can move to the next step.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime
from typing import Any

import httpx
from bs4 import BeautifulSoup
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings, settings
from ..core.errors import InvalidRateValueError, SourceUnavailableError
from ..db.models import DailyMortgageRate
from ..inference.client import get_json_completion
from ..schemas.location import LocationKey
from ..schemas.rates import RateBundle, RateSourceResult

logger = logging.getLogger(__name__)

_USER_AGENT = "Mozilla/5.0 (compatible; buying-power/0.1)"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RateSource:
    """Base class: subclasses implement ``_fetch`` and may raise freely."""

    name = "unknown"

    async def _fetch(self, location: LocationKey) -> RateBundle:
        raise NotImplementedError

    async def fetch(self, location: LocationKey) -> RateSourceResult:
        try:
            bundle = await self._fetch(location)
        except SourceUnavailableError as exc:
            return RateSourceResult.fail(str(exc), source=self.name)
        except Exception as exc:
            logger.debug("Rate source %s raised", self.name, exc_info=True)
            return RateSourceResult.fail(f"{type(exc).__name__}: {exc}", source=self.name)
        if not bundle.is_usable:
            return RateSourceResult.fail("no usable interest rate", source=self.name)
        return RateSourceResult.ok(bundle, source=self.name)


# ---------------------------------------------------------------------------
# 1. Stored daily snapshot
# ---------------------------------------------------------------------------


def _as_float(value: Any) -> float | None:
    return float(value) if value is not None else None


class SnapshotRateSource(RateSource):
    """Most recent ``daily_mortgage_rates`` row dated today or earlier."""

    name = "database"

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        today: Callable[[], date] = lambda: _utcnow().date(),
    ):
        self._session_factory = session_factory
        self._today = today

    async def _fetch(self, location: LocationKey) -> RateBundle:
        stmt = (
            select(DailyMortgageRate)
            .where(DailyMortgageRate.rate_date <= self._today())
            .order_by(DailyMortgageRate.rate_date.desc())
            .limit(1)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()

        if row is None:
            raise SourceUnavailableError("no stored rate snapshot")

        return RateBundle(
            conventional_rate=_as_float(row.conventional),
            fha_rate=_as_float(row.fha),
            source=self.name,
            fetched_at=_utcnow(),
            rate_date=row.rate_date,
        )


# ---------------------------------------------------------------------------
# 2. Scraped public rate index
# ---------------------------------------------------------------------------


def parse_rate_table(html: str, label: str) -> float | None:
    """Return the rate in the second cell of the first table row containing ``label``."""
    soup = BeautifulSoup(html, "html.parser")
    for row in soup.find_all("tr"):
        if label not in row.get_text(" ", strip=True):
            continue
        cells = row.find_all("td")
        if len(cells) < 2:
            continue
        text = cells[1].get_text(strip=True).replace("%", "").strip()
        try:
            return float(text)
        except ValueError:
            return None
    return None


class ScrapedRateSource(RateSource):
    """Scrape the current 30-year rates from a public rate-index page."""

    name = "scraped"

    def __init__(
        self,
        cfg: Settings = settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._cfg = cfg
        self._transport = transport

    def _check_band(self, kind: str, rate: float) -> None:
        if not self._cfg.SCRAPED_RATE_MIN <= rate <= self._cfg.SCRAPED_RATE_MAX:
            raise InvalidRateValueError(
                f"scraped {kind} rate {rate} outside "
                f"{self._cfg.SCRAPED_RATE_MIN}-{self._cfg.SCRAPED_RATE_MAX}%"
            )

    async def _scrape(self, client: httpx.AsyncClient, url: str, label: str) -> float | None:
        response = await client.get(url)
        response.raise_for_status()
        return parse_rate_table(response.text, label)

    async def _fetch(self, location: LocationKey) -> RateBundle:
        cfg = self._cfg
        async with httpx.AsyncClient(
            transport=self._transport,
            headers={"User-Agent": _USER_AGENT},
            follow_redirects=True,
        ) as client:
            conventional = await self._scrape(
                client, cfg.SCRAPE_CONVENTIONAL_URL, cfg.SCRAPE_CONVENTIONAL_LABEL
            )
            if conventional is None:
                raise SourceUnavailableError("conventional rate not found on page")
            self._check_band("conventional", conventional)

            fha = None
            if cfg.SCRAPE_FHA_URL:
                fha = await self._scrape(client, cfg.SCRAPE_FHA_URL, cfg.SCRAPE_FHA_LABEL)

        if fha is not None:
            self._check_band("fha", fha)
            spread_bps = round((conventional - fha) * 100)
            if not cfg.SCRAPED_SPREAD_MIN_BPS <= spread_bps <= cfg.SCRAPED_SPREAD_MAX_BPS:
                raise InvalidRateValueError(f"conventional/FHA spread {spread_bps} bps implausible")
        else:
            logger.info("FHA rate not scraped; continuing with conventional only")

        return RateBundle(
            conventional_rate=conventional,
            fha_rate=fha,
            source=self.name,
            fetched_at=_utcnow(),
            rate_date=_utcnow().date(),
        )


# ---------------------------------------------------------------------------
# 3. LLM estimate
# ---------------------------------------------------------------------------

RATE_ESTIMATE_MESSAGES = [
    {
        "role": "system",
        "content": (
            "You provide current average US mortgage interest rates. "
            "Return ONLY a JSON object."
        ),
    },
    {
        "role": "user",
        "content": (
            "What are today's average 30-year fixed mortgage interest rates for "
            "conventional and FHA loans? Return ONLY a JSON object with two numeric "
            "properties, conventionalInterestRate and fhaInterestRate, each with two "
            "decimal places."
        ),
    },
]


class InferenceRateSource(RateSource):
    """Ask an OpenAI-compatible model for a rate estimate."""

    name = "inference"

    def __init__(
        self,
        completion: Callable[..., Awaitable[dict[str, Any]]] = get_json_completion,
        cfg: Settings = settings,
    ):
        self._completion = completion
        self._cfg = cfg

    def _in_range(self, value: Any) -> float | None:
        try:
            rate = float(value)
        except (TypeError, ValueError):
            return None
        if not self._cfg.INFERRED_RATE_MIN <= rate <= self._cfg.INFERRED_RATE_MAX:
            logger.warning("Discarding inferred rate %s outside plausible range", rate)
            return None
        return rate

    async def _fetch(self, location: LocationKey) -> RateBundle:
        data = await self._completion(RATE_ESTIMATE_MESSAGES)
        return RateBundle(
            conventional_rate=self._in_range(data.get("conventionalInterestRate")),
            fha_rate=self._in_range(data.get("fhaInterestRate")),
            source=self.name,
            fetched_at=_utcnow(),
        )
