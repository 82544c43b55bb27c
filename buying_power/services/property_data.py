# This project was developed with assistance from AI tools.
"""County property-cost lookup.

Reads ``county_property_data`` for the location. Rows older than the TTL or
with implausible values are ignored and the configured defaults are used.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings, settings
from ..db.models import CountyPropertyData
from ..schemas.location import LocationKey

logger = logging.getLogger(__name__)

MIN_TAX_RATE = 0.1
MAX_TAX_RATE = 5.0
MIN_INSURANCE = 300.0
MAX_INSURANCE = 10_000.0


@dataclass(frozen=True)
class PropertyCosts:
    property_tax_rate: float
    property_insurance: float
    upfront_mip: float
    ongoing_mip: float | None
    from_county_data: bool = False

    def as_bundle_fields(self) -> dict[str, float | None]:
        return {
            "property_tax_rate": self.property_tax_rate,
            "property_insurance": self.property_insurance,
            "upfront_mip": self.upfront_mip,
            "ongoing_mip": self.ongoing_mip,
        }


def _plausible(row: CountyPropertyData) -> bool:
    tax = row.property_tax_rate
    insurance = row.insurance_annual_premium
    return (
        tax is not None
        and insurance is not None
        and MIN_TAX_RATE <= tax <= MAX_TAX_RATE
        and MIN_INSURANCE <= insurance <= MAX_INSURANCE
    )


class PropertyDataProvider:
    """Resolve property tax, insurance and MIP for a location."""

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] | None = None,
        cfg: Settings = settings,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ):
        self._session_factory = session_factory
        self._cfg = cfg
        self._clock = clock

    def defaults(self) -> PropertyCosts:
        return PropertyCosts(
            property_tax_rate=self._cfg.DEFAULT_PROPERTY_TAX_RATE,
            property_insurance=self._cfg.DEFAULT_PROPERTY_INSURANCE,
            upfront_mip=self._cfg.DEFAULT_UPFRONT_MIP,
            ongoing_mip=self._cfg.DEFAULT_ONGOING_MIP,
        )

    async def lookup(self, location: LocationKey) -> PropertyCosts:
        """Return county figures when a fresh, plausible row exists, else defaults."""
        fallback = self.defaults()
        if self._session_factory is None:
            return fallback

        stmt = select(CountyPropertyData).where(
            func.lower(CountyPropertyData.state) == (location.state or "").strip().lower(),
            func.lower(CountyPropertyData.county) == (location.county or "").strip().lower(),
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.warning("County property lookup failed for %s, using defaults", location, exc_info=True)
            return fallback

        if row is None:
            logger.info("No county property data for %s, using defaults", location)
            return fallback

        last_fetched = row.last_fetched
        if last_fetched.tzinfo is None:
            last_fetched = last_fetched.replace(tzinfo=UTC)
        if self._clock() - last_fetched > timedelta(days=self._cfg.COUNTY_DATA_TTL_DAYS):
            logger.info("County property data for %s is stale, using defaults", location)
            return fallback
        if not _plausible(row):
            logger.warning(
                "County property data for %s out of range (tax=%s, insurance=%s)",
                location,
                row.property_tax_rate,
                row.insurance_annual_premium,
            )
            return fallback

        return PropertyCosts(
            property_tax_rate=row.property_tax_rate,
            property_insurance=row.insurance_annual_premium,
            upfront_mip=fallback.upfront_mip,
            ongoing_mip=fallback.ongoing_mip,
            from_county_data=True,
        )
