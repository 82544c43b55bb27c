# This project was developed with assistance from AI tools.
"""Compensating factors and DTI limits.

A factor is "strong" when the selected option is anything other than that
factor's weakest option. Two or more strong factors raise the back-end DTI
ceiling. Credit history and non-housing DTI are derived from the numbers
rather than chosen, and override any user selection for those ids.
"""

import logging
from dataclasses import dataclass

from ..schemas.borrower import BorrowerProfile, LoanType
from ..schemas.calculator import DTILimits

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FactorDefinition:
    label: str
    options: tuple[str, ...]
    weakest: str
    description: str = ""
    derived: bool = False


FACTORS: dict[str, FactorDefinition] = {
    "cashReserves": FactorDefinition(
        "Cash Reserves",
        ("none", "1-2 months", "3-5 months", "6+ months"),
        weakest="none",
        description="Cash reserves available after closing",
    ),
    "residualIncome": FactorDefinition(
        "Residual Income",
        ("does not meet", "meets VA guidelines"),
        weakest="does not meet",
        description="Income remaining after all expenses",
    ),
    "housingPaymentIncrease": FactorDefinition(
        "Housing Payment Increase",
        ("none", "<10%", "10-20%", ">20%"),
        weakest=">20%",
        description="Increase in housing payment compared to current rent",
    ),
    "employmentHistory": FactorDefinition(
        "Employment History",
        ("<2 years", "2-5 years", "5+ years"),
        weakest="<2 years",
        description="Stability of employment",
    ),
    "creditUtilization": FactorDefinition(
        "Credit Utilization",
        ("none", "<10%", "10-30%", ">30%"),
        weakest=">30%",
        description="Percentage of available revolving credit in use",
    ),
    "downPayment": FactorDefinition(
        "Down Payment",
        ("<5%", "5-10%", "10-20%", "20%+"),
        weakest="<5%",
        description="Down payment percentage",
    ),
    "creditHistory": FactorDefinition(
        "Credit History",
        ("<640", "640-679", "680-719", "720-759", "760+"),
        weakest="<640",
        derived=True,
    ),
    "nonHousingDTI": FactorDefinition(
        "Non-Housing DTI",
        (">10%", "5-10%", "<5%"),
        weakest=">10%",
        derived=True,
    ),
}

STRONG_FACTOR_THRESHOLD = 2

# loan type -> (front-end default, back-end default, back-end with strong factors)
_DTI_LIMITS: dict[LoanType, tuple[float, float, float]] = {
    LoanType.CONVENTIONAL: (36, 45, 50),
    LoanType.FHA: (31, 43, 57),
}


def credit_history_option(fico_score: int) -> str:
    if fico_score >= 760:
        return "760+"
    if fico_score >= 720:
        return "720-759"
    if fico_score >= 680:
        return "680-719"
    if fico_score >= 640:
        return "640-679"
    return "<640"


def non_housing_dti_option(monthly_debt: float, monthly_income: float) -> str:
    if monthly_income <= 0:
        return ">10%"
    pct = monthly_debt / monthly_income * 100
    if pct < 5:
        return "<5%"
    if pct <= 10:
        return "5-10%"
    return ">10%"


def enhance_factors(
    selected: dict[str, str],
    fico_score: int,
    monthly_debt: float,
    monthly_income: float,
) -> dict[str, str]:
    """Fill unselected factors with their weakest option and add the derived ones."""
    enhanced = {
        factor_id: selected.get(factor_id) or definition.weakest
        for factor_id, definition in FACTORS.items()
        if not definition.derived
    }
    enhanced["creditHistory"] = credit_history_option(fico_score)
    enhanced["nonHousingDTI"] = non_housing_dti_option(monthly_debt, monthly_income)
    return enhanced


def is_strong_factor(factor_id: str, option: str) -> bool:
    definition = FACTORS.get(factor_id)
    if definition is None:
        return False
    if option not in definition.options:
        logger.warning("Unknown option %r for factor %r", option, factor_id)
        return False
    return option != definition.weakest


def count_strong_factors(factors: dict[str, str]) -> int:
    return sum(1 for factor_id, option in factors.items() if is_strong_factor(factor_id, option))


def dti_limits(loan_type: LoanType, has_strong_factors: bool = False) -> DTILimits:
    front_end, back_end, raised = _DTI_LIMITS[LoanType(loan_type)]
    return DTILimits(front_end=front_end, back_end=raised if has_strong_factors else back_end)


@dataclass(frozen=True)
class FactorAssessment:
    factors: dict[str, str]
    strong_count: int

    @property
    def has_strong_factors(self) -> bool:
        return self.strong_count >= STRONG_FACTOR_THRESHOLD


def assess(profile: BorrowerProfile) -> FactorAssessment:
    """Enhance the profile's selected factors and count the strong ones."""
    factors = enhance_factors(
        profile.selected_factors,
        profile.fico_score,
        profile.monthly_debts,
        profile.monthly_income,
    )
    return FactorAssessment(factors=factors, strong_count=count_strong_factors(factors))
