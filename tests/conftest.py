# This project was developed with assistance from AI tools.
"""Shared fixtures: fixed clocks, sample borrowers and mocked DB sessions."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from buying_power.schemas.borrower import BorrowerProfile
from buying_power.schemas.location import LocationKey
from buying_power.schemas.rates import RateBundle

NOW = datetime(2026, 3, 2, 15, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock injected wherever a service asks for ``now``."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_session_factory(row=None, error: Exception | None = None):
    """Return (session_factory, session) usable as ``async with factory() as s``."""
    session = AsyncMock()
    if error is not None:
        session.execute.side_effect = error
    else:
        result = MagicMock()
        result.scalar_one_or_none.return_value = row
        session.execute.return_value = result

    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=session)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return MagicMock(return_value=ctx), session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def travis():
    return LocationKey(state="TX", county="Travis", zip_code="78701")


@pytest.fixture
def king():
    return LocationKey(state="WA", county="King", zip_code="98101")


@pytest.fixture
def bundle():
    return RateBundle(
        conventional_rate=6.5,
        fha_rate=6.0,
        property_tax_rate=1.1,
        property_insurance=1200,
        upfront_mip=1.75,
        ongoing_mip=0.55,
        source="database",
    )


@pytest.fixture
def profile():
    """Borrower with no strong compensating factors."""
    return BorrowerProfile(annual_income=90_000, fico_score=630, monthly_debts=900)


@pytest.fixture
def session_factory():
    """Factory fixture: build a mocked ``async_sessionmaker`` returning ``row``."""
    return make_session_factory
