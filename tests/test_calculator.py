# This project was developed with assistance from AI tools.
"""Tests for the affordability calculator."""

import pytest

from buying_power.schemas.borrower import BorrowerProfile, LoanType
from buying_power.schemas.calculator import AffordabilityRequest
from buying_power.services import calculator


def _reference_annuity(payment: float, annual_rate: float, months: int = 360) -> float:
    r = annual_rate / 100 / 12
    return payment * (1 - (1 + r) ** -months) / r


# ---------------------------------------------------------------------------
# max_loan_amount
# ---------------------------------------------------------------------------


def test_max_loan_matches_reference_amortization():
    """$90k income, $300 debts, 45% DTI at 6.5% -> annuity on a $3,075 payment."""
    loan = calculator.max_loan_amount(90_000, 300, 45, 6.5, LoanType.CONVENTIONAL)
    assert round(loan) == round(_reference_annuity(90_000 / 12 * 0.45 - 300, 6.5))
    assert loan == pytest.approx(486_500, abs=100)


def test_max_loan_missing_rate_is_unavailable_not_zero():
    assert calculator.max_loan_amount(90_000, 300, 45, None) is None


def test_max_loan_zero_rate():
    assert calculator.max_loan_amount(90_000, 300, 45, 0) == pytest.approx(3075 * 360)


def test_max_loan_decreases_as_rate_rises():
    loans = [calculator.max_loan_amount(90_000, 300, 45, rate) for rate in (4, 5, 6, 7, 8)]
    assert loans == sorted(loans, reverse=True)


def test_max_loan_monotonic_in_debt_and_income():
    """should never grow with more debt or shrink with more income."""
    debts = (0, 300, 900, 2_000, 4_000)
    incomes = (10_000, 50_000, 90_000, 200_000)
    by_debt = [calculator.max_loan_amount(90_000, debt, 45, 6.5) for debt in debts]
    by_income = [calculator.max_loan_amount(income, 300, 45, 6.5) for income in incomes]
    assert by_debt == sorted(by_debt, reverse=True)
    assert by_income == sorted(by_income)


def test_max_loan_debts_exceed_capacity():
    assert calculator.max_loan_amount(36_000, 2_000, 45, 6.5) == 0


def test_max_loan_keeps_full_precision():
    loan = calculator.max_loan_amount(90_000, 300, 45, 6.5)
    assert loan != round(loan)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def test_dti_ratio():
    assert calculator.dti_ratio(3375, 7500) == 45.0
    assert calculator.dti_ratio(1000, 3000) == 33.33
    assert calculator.dti_ratio(1000, 0) == 0.0


def test_monthly_payment_breakdown():
    payment = calculator.monthly_payment(
        200_000, 6.0, annual_property_tax=3_600, annual_insurance=1_200, mortgage_insurance_rate=0.6
    )
    assert payment.principal_and_interest == pytest.approx(1199.10, abs=0.01)
    assert payment.property_tax == 300
    assert payment.insurance == 100
    assert payment.mortgage_insurance == pytest.approx(100)
    assert payment.total == pytest.approx(1699.10, abs=0.01)


def test_max_purchase_price_spends_exactly_the_budget():
    """should pick the price whose full PITI+MI payment equals the DTI budget."""
    price = calculator.max_purchase_price(
        90_000, 900, 45, 7.0, property_tax_rate=1.2, annual_insurance=1500, ltv=90,
        mortgage_insurance_rate=0.5,
    )
    payment = calculator.monthly_payment(
        price * 0.9, 7.0, annual_property_tax=price * 0.012, annual_insurance=1500,
        mortgage_insurance_rate=0.5,
    )
    assert payment.total == pytest.approx(90_000 / 12 * 0.45 - 900)


def test_max_purchase_price_never_negative():
    assert calculator.max_purchase_price(20_000, 2_000, 45, 7.0, 1.1, 1200, 80) == 0


# ---------------------------------------------------------------------------
# evaluate
# ---------------------------------------------------------------------------


def test_evaluate_full_pipeline(profile, bundle):
    result = calculator.evaluate(profile, bundle, LoanType.CONVENTIONAL, 80)
    assert result.available
    assert result.adjusted_rate == pytest.approx(7.625)
    assert result.dti_limits.back_end == 45
    assert result.strong_factor_count == 0
    assert result.max_loan_amount == pytest.approx(result.max_home_price * 0.8)
    assert result.dti_ratio == pytest.approx(45.0, abs=0.01)
    assert result.remaining_monthly_payment == pytest.approx(7500 * 0.55, abs=0.01)
    assert result.monthly_payment.mortgage_insurance == 0


def test_evaluate_missing_rate_is_unavailable(profile, bundle):
    """should report unavailable, never a zero-dollar result, when the rate is missing."""
    result = calculator.evaluate(profile, bundle.model_copy(update={"conventional_rate": None}))
    assert not result.available
    assert result.max_home_price is None
    assert result.max_loan_amount is None
    assert "conventional rate" in result.unavailable_reason


def test_evaluate_without_bundle_is_unavailable(profile):
    assert not calculator.evaluate(profile, None).available


def test_evaluate_missing_property_costs_is_unavailable(profile, bundle):
    result = calculator.evaluate(profile, bundle.model_copy(update={"property_tax_rate": None}))
    assert not result.available
    assert "property cost" in result.unavailable_reason


def test_evaluate_fico_below_conventional_floor(bundle):
    borrower = BorrowerProfile(annual_income=90_000, fico_score=600, monthly_debts=900)
    result = calculator.evaluate(borrower, bundle, LoanType.CONVENTIONAL)
    assert not result.available
    assert "FICO 600" in result.unavailable_reason
    assert calculator.evaluate(borrower, bundle, LoanType.FHA).available


def test_evaluate_fha_uses_fha_rate_and_mip(profile, bundle):
    result = calculator.evaluate(profile, bundle, LoanType.FHA, 96.5)
    assert result.available
    assert result.adjusted_rate == pytest.approx(6.0 + 0.25 + 0.5)
    assert result.dti_limits.back_end == 43
    assert result.monthly_payment.mortgage_insurance == pytest.approx(
        0.55 / 100 * result.max_loan_amount / 12
    )


def test_strong_factors_raise_buying_power(profile, bundle):
    strong = profile.model_copy(
        update={"selected_factors": {"cashReserves": "6+ months", "residualIncome": "meets VA guidelines"}}
    )
    base = calculator.evaluate(profile, bundle)
    raised = calculator.evaluate(strong, bundle)
    assert raised.dti_limits.back_end == 50
    assert raised.max_home_price > base.max_home_price


def test_debts_from_items_when_total_omitted(bundle):
    borrower = BorrowerProfile(
        annual_income=90_000,
        fico_score=630,
        debt_items=[{"name": "car", "monthly_payment": 400}, {"name": "card", "monthly_payment": 500}],
    )
    assert borrower.monthly_debts == 900
    assert calculator.evaluate(borrower, bundle).available


def test_display_rounds_currency(profile, bundle):
    shown = calculator.evaluate(profile, bundle).display()
    assert isinstance(shown["max_home_price"], int)
    assert isinstance(shown["monthly_payment"]["total"], int)


# ---------------------------------------------------------------------------
# calculate_affordability
# ---------------------------------------------------------------------------


def test_calculate_affordability_happy_path():
    resp = calculator.calculate_affordability(
        AffordabilityRequest(gross_annual_income=90_000, monthly_debts=300, down_payment=50_000)
    )
    assert resp.available
    assert resp.max_loan_amount == pytest.approx(486_500, abs=100)
    assert resp.estimated_monthly_payment == 3075
    assert resp.estimated_purchase_price == resp.max_loan_amount + 50_000
    assert resp.dti_ratio == pytest.approx(45.0)
    assert resp.dti_warning is None


def test_calculate_affordability_without_rate():
    resp = calculator.calculate_affordability(
        AffordabilityRequest(
            gross_annual_income=90_000, monthly_debts=300, down_payment=0, interest_rate=None
        )
    )
    assert not resp.available
    assert resp.max_loan_amount is None
    assert resp.unavailable_reason


def test_calculate_affordability_debts_exceed_capacity():
    resp = calculator.calculate_affordability(
        AffordabilityRequest(gross_annual_income=36_000, monthly_debts=2_000, down_payment=5_000)
    )
    assert resp.max_loan_amount == 0
    assert resp.estimated_monthly_payment == 0
    assert resp.dti_warning is not None
