# This project was developed with assistance from AI tools.
"""Request/response schemas for the rate-backed buying power endpoint."""

from pydantic import BaseModel, Field

from .borrower import BorrowerProfile, LoanType
from .calculator import ImprovementScenario
from .location import LocationKey
from .rates import FetchProgressState, RateBundle


class BuyingPowerRequest(BaseModel):
    """Borrower, location and loan settings for one evaluation."""

    location: LocationKey
    borrower: BorrowerProfile
    loan_type: LoanType = LoanType.CONVENTIONAL
    ltv: float = Field(default=80, gt=0, le=100)
    user_id: str | None = Field(
        default=None,
        description="Used only to look up feature flag overrides.",
    )


class BuyingPowerResponse(BaseModel):
    """Rate bundle used, rounded result, and optional improvement scenarios."""

    rates: RateBundle | None = None
    result: dict
    scenarios: list[ImprovementScenario] | None = None
    progress: FetchProgressState
