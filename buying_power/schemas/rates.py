# This project was developed with assistance from AI tools.
"""Rate bundle, cache entry and fetch progress schemas."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from .location import LocationKey


class RateBundle(BaseModel):
    """Normalized rate and property-cost data for one location.

    Every rate field is nullable. ``None`` means the source had no value and
    is propagated as-is; it is never replaced with zero.
    """

    model_config = ConfigDict(frozen=True)

    conventional_rate: float | None = Field(default=None, description="30-year fixed, percent.")
    fha_rate: float | None = Field(default=None, description="30-year FHA, percent.")
    property_tax_rate: float | None = Field(
        default=None, description="Annual property tax as a percent of price."
    )
    property_insurance: float | None = Field(
        default=None, description="Annual homeowner's insurance premium in dollars."
    )
    upfront_mip: float | None = Field(default=None, description="FHA upfront MIP, percent.")
    ongoing_mip: float | None = Field(default=None, description="FHA annual MIP, percent.")
    source: str | None = None
    fetched_at: datetime | None = None
    rate_date: date | None = None

    @property
    def is_usable(self) -> bool:
        """A bundle is usable only when at least one interest rate is known."""
        return self.conventional_rate is not None or self.fha_rate is not None


class CachedEntry(BaseModel):
    """The single persisted cache slot."""

    location: LocationKey
    bundle: RateBundle
    timestamp: datetime


class RateSourceResult(BaseModel):
    """Tagged result of one data source: ``success`` with data, or an error."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: RateBundle | None = None
    error: str | None = None
    source: str | None = None

    @classmethod
    def ok(cls, data: RateBundle, source: str | None = None) -> "RateSourceResult":
        return cls(success=True, data=data, source=source or data.source)

    @classmethod
    def fail(cls, error: str, source: str | None = None) -> "RateSourceResult":
        return cls(success=False, error=error, source=source)


class FetchProgressState(BaseModel):
    """Progress snapshot published to the UI at each fallback transition."""

    is_loading: bool = False
    is_error: bool = False
    error_message: str | None = None
    has_attempted_fetch: bool = False
    progress: int = Field(default=0, ge=0, le=100)
    message: str = ""


class RatesResponse(BaseModel):
    """Rate data currently in effect for a location."""

    location: LocationKey
    rates: RateBundle
    state: str
    progress: FetchProgressState
