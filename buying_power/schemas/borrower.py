# This project was developed with assistance from AI tools.
"""Borrower profile schemas."""

import enum

from pydantic import BaseModel, Field, model_validator


class LoanType(str, enum.Enum):
    CONVENTIONAL = "conventional"
    FHA = "fha"

    @property
    def alternative(self) -> "LoanType":
        return LoanType.FHA if self is LoanType.CONVENTIONAL else LoanType.CONVENTIONAL


class DebtItem(BaseModel):
    """A single recurring monthly obligation."""

    name: str
    monthly_payment: float = Field(ge=0)


class BorrowerProfile(BaseModel):
    """Income, credit and debt inputs for one evaluation."""

    annual_income: float = Field(ge=0)
    fico_score: int = Field(ge=300, le=850)
    monthly_debts: float | None = Field(
        default=None,
        ge=0,
        description="Total monthly debt payments. Summed from debt_items when omitted.",
    )
    debt_items: list[DebtItem] = Field(default_factory=list)
    selected_factors: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_monthly_debts(self) -> "BorrowerProfile":
        if self.monthly_debts is None:
            self.monthly_debts = sum(item.monthly_payment for item in self.debt_items)
        return self

    @property
    def monthly_income(self) -> float:
        return self.annual_income / 12
