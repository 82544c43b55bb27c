# This project was developed with assistance from AI tools.
"""Tests for compensating factors and DTI limits."""

import pytest

from buying_power.schemas.borrower import BorrowerProfile, LoanType
from buying_power.services import compensating_factors as cf


@pytest.mark.parametrize(
    "fico,expected",
    [(780, "760+"), (760, "760+"), (740, "720-759"), (700, "680-719"), (650, "640-679"), (639, "<640")],
)
def test_credit_history_option(fico, expected):
    assert cf.credit_history_option(fico) == expected


@pytest.mark.parametrize(
    "debt,income,expected",
    [(300, 7500, "<5%"), (600, 7500, "5-10%"), (750, 7500, "5-10%"), (900, 7500, ">10%"), (0, 0, ">10%")],
)
def test_non_housing_dti_option(debt, income, expected):
    assert cf.non_housing_dti_option(debt, income) == expected


def test_enhance_fills_weakest_and_derives_synthetic_factors():
    """should default unselected factors to their weakest option."""
    factors = cf.enhance_factors({}, 630, 900, 7500)
    assert factors["cashReserves"] == "none"
    assert factors["employmentHistory"] == "<2 years"
    assert factors["creditHistory"] == "<640"
    assert factors["nonHousingDTI"] == ">10%"
    assert cf.count_strong_factors(factors) == 0


def test_derived_factors_override_user_selection():
    factors = cf.enhance_factors({"creditHistory": "760+"}, 630, 900, 7500)
    assert factors["creditHistory"] == "<640"


def test_strong_factor_is_anything_but_weakest():
    assert cf.is_strong_factor("cashReserves", "1-2 months")
    assert cf.is_strong_factor("housingPaymentIncrease", "none")
    assert not cf.is_strong_factor("housingPaymentIncrease", ">20%")
    assert not cf.is_strong_factor("downPayment", "<5%")


def test_unknown_factor_or_option_is_not_strong():
    assert not cf.is_strong_factor("petOwnership", "yes")
    assert not cf.is_strong_factor("cashReserves", "a lot")


@pytest.mark.parametrize(
    "loan_type,strong,front,back",
    [
        (LoanType.CONVENTIONAL, False, 36, 45),
        (LoanType.CONVENTIONAL, True, 36, 50),
        (LoanType.FHA, False, 31, 43),
        (LoanType.FHA, True, 31, 57),
    ],
)
def test_dti_limits(loan_type, strong, front, back):
    limits = cf.dti_limits(loan_type, strong)
    assert (limits.front_end, limits.back_end) == (front, back)


def test_one_strong_factor_is_not_enough(profile):
    weak = profile.model_copy(update={"selected_factors": {"cashReserves": "6+ months"}})
    assessment = cf.assess(weak)
    assert assessment.strong_count == 1
    assert not assessment.has_strong_factors


def test_two_selected_strong_factors_raise_limit(profile):
    """should raise the back-end ceiling once two strong factors are present."""
    strong = profile.model_copy(
        update={"selected_factors": {"cashReserves": "6+ months", "employmentHistory": "5+ years"}}
    )
    assessment = cf.assess(strong)
    assert assessment.has_strong_factors
    assert cf.dti_limits(LoanType.CONVENTIONAL, assessment.has_strong_factors).back_end == 50


def test_derived_factors_count_toward_strength():
    """should count excellent credit and low debt as two strong factors."""
    borrower = BorrowerProfile(annual_income=90_000, fico_score=770, monthly_debts=300)
    assessment = cf.assess(borrower)
    assert assessment.factors["creditHistory"] == "760+"
    assert assessment.factors["nonHousingDTI"] == "<5%"
    assert assessment.strong_count == 2


def test_strong_factors_never_lower_back_end_limit():
    for loan_type in LoanType:
        assert cf.dti_limits(loan_type, True).back_end >= cf.dti_limits(loan_type, False).back_end
