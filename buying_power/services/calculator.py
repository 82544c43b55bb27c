# This project was developed with assistance from AI tools.
"""Affordability calculation logic.

Pure math, no I/O. Shared by the public API routes and the scenario
generator. Amounts are returned at full precision; round only for display.

A missing interest rate makes the result *unavailable* (``None`` or
``available=False``), never zero, so callers can tell "you can borrow $0"
apart from "we have no rate data".
"""

import logging

from ..schemas.borrower import BorrowerProfile, LoanType
from ..schemas.calculator import (
    AffordabilityRequest,
    AffordabilityResponse,
    AffordabilityResult,
    PaymentBreakdown,
)
from ..schemas.rates import RateBundle
from . import compensating_factors, pricing

logger = logging.getLogger(__name__)

LOAN_TERM_YEARS = 30


def payment_per_dollar(annual_rate: float, term_years: int = LOAN_TERM_YEARS) -> float:
    """Monthly payment per dollar borrowed: r(1+r)^n / ((1+r)^n - 1)."""
    monthly_rate = annual_rate / 12 / 100
    n_payments = term_years * 12
    if monthly_rate == 0:
        return 1 / n_payments
    compound = (1 + monthly_rate) ** n_payments
    return monthly_rate * compound / (compound - 1)


def max_housing_payment(annual_income: float, monthly_debt: float, max_dti: float) -> float:
    """Largest monthly housing payment the DTI ceiling leaves room for."""
    return max(annual_income / 12 * max_dti / 100 - monthly_debt, 0.0)


def max_loan_amount(
    annual_income: float,
    monthly_debt: float,
    max_dti: float,
    annual_rate: float | None,
    loan_type: LoanType | str = LoanType.CONVENTIONAL,
    term_years: int = LOAN_TERM_YEARS,
) -> float | None:
    """Principal whose level payment equals the DTI-bounded housing payment.

    Returns None when ``annual_rate`` is unknown.
    """
    loan_type = LoanType(loan_type)
    if annual_rate is None:
        logger.info("No %s rate available, max loan amount unavailable", loan_type.value)
        return None
    payment = max_housing_payment(annual_income, monthly_debt, max_dti)
    return payment / payment_per_dollar(annual_rate, term_years)


def dti_ratio(payment: float, monthly_income: float) -> float:
    """Monthly obligations as a percent of monthly income, two decimals."""
    if monthly_income <= 0:
        return 0.0
    return round(payment / monthly_income * 100, 2)


def monthly_payment(
    loan_amount: float,
    annual_rate: float,
    term_years: int = LOAN_TERM_YEARS,
    annual_property_tax: float = 0.0,
    annual_insurance: float = 0.0,
    mortgage_insurance_rate: float = 0.0,
) -> PaymentBreakdown:
    """Split the monthly housing payment into P&I, tax, insurance and MI."""
    return PaymentBreakdown(
        principal_and_interest=loan_amount * payment_per_dollar(annual_rate, term_years),
        property_tax=annual_property_tax / 12,
        insurance=annual_insurance / 12,
        mortgage_insurance=mortgage_insurance_rate / 100 * loan_amount / 12,
    )


def max_purchase_price(
    annual_income: float,
    monthly_debt: float,
    max_dti: float,
    annual_rate: float,
    property_tax_rate: float,
    annual_insurance: float,
    ltv: float,
    mortgage_insurance_rate: float = 0.0,
    term_years: int = LOAN_TERM_YEARS,
) -> float:
    """Highest price whose full housing payment fits under the DTI ceiling.

    Tax scales with price, P&I and mortgage insurance scale with the loan
    (``price * ltv``), insurance is a flat premium.
    """
    budget = max_housing_payment(annual_income, monthly_debt, max_dti)
    loan_fraction = ltv / 100
    per_dollar_of_price = (
        payment_per_dollar(annual_rate, term_years) * loan_fraction
        + property_tax_rate / 100 / 12
        + mortgage_insurance_rate / 100 * loan_fraction / 12
    )
    return max((budget - annual_insurance / 12) / per_dollar_of_price, 0.0)


def _unavailable(loan_type: LoanType, ltv: float, reason: str, **extra) -> AffordabilityResult:
    return AffordabilityResult(
        available=False, unavailable_reason=reason, loan_type=loan_type, ltv=ltv, **extra
    )


def base_rate_for(bundle: RateBundle | None, loan_type: LoanType) -> float | None:
    if bundle is None:
        return None
    return bundle.fha_rate if loan_type is LoanType.FHA else bundle.conventional_rate


def evaluate(
    profile: BorrowerProfile,
    bundle: RateBundle | None,
    loan_type: LoanType = LoanType.CONVENTIONAL,
    ltv: float = 80,
    term_years: int = LOAN_TERM_YEARS,
) -> AffordabilityResult:
    """Run the full pipeline: factors -> DTI limits -> pricing -> max price -> payment."""
    loan_type = LoanType(loan_type)
    assessment = compensating_factors.assess(profile)
    limits = compensating_factors.dti_limits(loan_type, assessment.has_strong_factors)
    context = {"dti_limits": limits, "strong_factor_count": assessment.strong_count}

    base_rate = base_rate_for(bundle, loan_type)
    if base_rate is None:
        return _unavailable(loan_type, ltv, f"{loan_type.value} rate data unavailable", **context)
    if bundle.property_tax_rate is None or bundle.property_insurance is None:
        return _unavailable(loan_type, ltv, "property cost data unavailable", **context)

    rate = pricing.adjusted_rate(base_rate, profile.fico_score, ltv, loan_type)
    if rate is None:
        return _unavailable(
            loan_type, ltv, f"FICO {profile.fico_score} below {loan_type.value} minimum", **context
        )

    mi_rate = pricing.mortgage_insurance_rate(loan_type, ltv, bundle.ongoing_mip, term_years)
    price = max_purchase_price(
        profile.annual_income,
        profile.monthly_debts,
        limits.back_end,
        rate,
        bundle.property_tax_rate,
        bundle.property_insurance,
        ltv,
        mi_rate,
        term_years,
    )
    loan_amount = price * ltv / 100
    payment = monthly_payment(
        loan_amount,
        rate,
        term_years,
        annual_property_tax=bundle.property_tax_rate / 100 * price,
        annual_insurance=bundle.property_insurance if price > 0 else 0.0,
        mortgage_insurance_rate=mi_rate,
    )
    monthly_income = profile.monthly_income

    return AffordabilityResult(
        available=True,
        loan_type=loan_type,
        ltv=ltv,
        max_loan_amount=loan_amount,
        max_home_price=price,
        max_monthly_payment=max_housing_payment(
            profile.annual_income, profile.monthly_debts, limits.back_end
        ),
        remaining_monthly_payment=monthly_income - profile.monthly_debts - payment.total,
        dti_ratio=dti_ratio(profile.monthly_debts + payment.total, monthly_income),
        front_end_ratio=dti_ratio(payment.total, monthly_income),
        monthly_payment=payment,
        adjusted_rate=rate,
        **context,
    )


def calculate_affordability(req: AffordabilityRequest) -> AffordabilityResponse:
    """Estimate maximum loan amount and payment for an explicit rate."""
    gross_monthly_income = req.gross_annual_income / 12
    loan = max_loan_amount(
        req.gross_annual_income,
        req.monthly_debts,
        req.max_dti,
        req.interest_rate,
        req.loan_type,
        req.loan_term_years,
    )
    if loan is None:
        return AffordabilityResponse(
            available=False,
            dti_ratio=dti_ratio(req.monthly_debts, gross_monthly_income),
            unavailable_reason="Interest rate data unavailable.",
        )

    payment = max_housing_payment(req.gross_annual_income, req.monthly_debts, req.max_dti)
    ratio = dti_ratio(req.monthly_debts + payment, gross_monthly_income)

    dti_warning = None
    if payment <= 0:
        dti_warning = f"Your existing debts already exceed {req.max_dti:g}% of gross income."

    return AffordabilityResponse(
        available=True,
        max_loan_amount=round(loan),
        estimated_monthly_payment=round(payment),
        estimated_purchase_price=round(loan + req.down_payment),
        dti_ratio=ratio,
        dti_warning=dti_warning,
    )
