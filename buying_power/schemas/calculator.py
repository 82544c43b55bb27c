# This project was developed with assistance from AI tools.
"""Affordability calculator schemas."""

from pydantic import BaseModel, ConfigDict, Field

from .borrower import LoanType


class DTILimits(BaseModel):
    """Front-end and back-end DTI ceilings, in percent."""

    model_config = ConfigDict(frozen=True)

    front_end: float
    back_end: float


class PaymentBreakdown(BaseModel):
    """Monthly housing payment split into its components."""

    model_config = ConfigDict(frozen=True)

    principal_and_interest: float
    property_tax: float
    insurance: float
    mortgage_insurance: float

    @property
    def total(self) -> float:
        return (
            self.principal_and_interest
            + self.property_tax
            + self.insurance
            + self.mortgage_insurance
        )


class AffordabilityResult(BaseModel):
    """Outcome of one full affordability evaluation.

    Amounts are kept at full precision; round only for display. When
    ``available`` is False the amounts are ``None`` and ``unavailable_reason``
    says which input was missing.
    """

    model_config = ConfigDict(frozen=True)

    available: bool
    unavailable_reason: str | None = None
    loan_type: LoanType
    ltv: float
    max_loan_amount: float | None = None
    max_home_price: float | None = None
    max_monthly_payment: float | None = None
    remaining_monthly_payment: float | None = None
    dti_ratio: float | None = None
    front_end_ratio: float | None = None
    monthly_payment: PaymentBreakdown | None = None
    adjusted_rate: float | None = None
    dti_limits: DTILimits | None = None
    strong_factor_count: int = 0

    def display(self) -> dict:
        """Return a dict with currency amounts rounded to the nearest dollar."""
        data = self.model_dump(mode="json")
        for key in (
            "max_loan_amount",
            "max_home_price",
            "max_monthly_payment",
            "remaining_monthly_payment",
        ):
            if data[key] is not None:
                data[key] = round(data[key])
        if self.monthly_payment is not None:
            data["monthly_payment"] = {
                k: round(v) for k, v in data["monthly_payment"].items()
            }
            data["monthly_payment"]["total"] = round(self.monthly_payment.total)
        return data


class ImprovementScenario(BaseModel):
    """One single-dimension perturbation of the baseline inputs."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    fico_change: int = 0
    ltv_change: float = 0
    loan_type: LoanType
    max_home_price: float | None = None
    monthly_payment: float | None = None
    increase: float | None = Field(
        default=None,
        description="Change in max home price versus baseline. None when either side is unavailable.",
    )

    @property
    def is_improvement(self) -> bool:
        return self.increase is not None and self.increase > 0


class AffordabilityRequest(BaseModel):
    """Input for the explicit-rate affordability calculator."""

    gross_annual_income: float = Field(gt=0)
    monthly_debts: float = Field(ge=0)
    down_payment: float = Field(ge=0)
    interest_rate: float | None = Field(default=6.5, ge=0, le=15)
    max_dti: float = Field(default=45, gt=0, le=65)
    loan_type: LoanType = LoanType.CONVENTIONAL
    loan_term_years: int = Field(default=30, ge=10, le=40)


class AffordabilityResponse(BaseModel):
    """Affordability calculation results."""

    available: bool
    max_loan_amount: float | None = None
    estimated_monthly_payment: float | None = None
    estimated_purchase_price: float | None = None
    dti_ratio: float | None = None
    dti_warning: str | None = None
    unavailable_reason: str | None = None
