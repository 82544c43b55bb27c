# This project was developed with assistance from AI tools.
"""Improvement scenario generation.

Each scenario perturbs exactly one input of the baseline (FICO band, LTV
band, or loan type) and re-runs the full affordability evaluation. The
list is ranked by the change in max home price; scenarios that do not
improve anything are kept so the user can see why.
"""

import logging

from ..schemas.borrower import BorrowerProfile, LoanType
from ..schemas.calculator import AffordabilityResult, ImprovementScenario
from ..schemas.rates import RateBundle
from . import pricing
from .calculator import LOAN_TERM_YEARS, evaluate

logger = logging.getLogger(__name__)


def _direction(increase: float | None) -> str:
    return "increase" if increase is not None and increase > 0 else "decrease"


def _delta(baseline: AffordabilityResult, candidate: AffordabilityResult) -> float | None:
    if not (baseline.available and candidate.available):
        return None
    return candidate.max_home_price - baseline.max_home_price


def _scenario(
    name: str,
    description: str,
    baseline: AffordabilityResult,
    candidate: AffordabilityResult,
    fico_change: int = 0,
    ltv_change: float = 0,
) -> ImprovementScenario:
    return ImprovementScenario(
        name=name,
        description=description,
        fico_change=fico_change,
        ltv_change=ltv_change,
        loan_type=candidate.loan_type,
        max_home_price=candidate.max_home_price,
        monthly_payment=candidate.monthly_payment.total if candidate.monthly_payment else None,
        increase=_delta(baseline, candidate),
    )


def _rank_key(scenario: ImprovementScenario) -> tuple[bool, float]:
    # available deltas first, largest first; unavailable keep their order
    if scenario.increase is None:
        return (True, 0.0)
    return (False, -scenario.increase)


def generate_scenarios(
    profile: BorrowerProfile,
    bundle: RateBundle | None,
    loan_type: LoanType = LoanType.CONVENTIONAL,
    ltv: float = 80,
    baseline: AffordabilityResult | None = None,
    term_years: int = LOAN_TERM_YEARS,
) -> list[ImprovementScenario]:
    """Return single-change scenarios ranked by buying power delta.

    Deterministic: the same inputs always produce the same list in the
    same order.
    """
    loan_type = LoanType(loan_type)
    if baseline is None:
        baseline = evaluate(profile, bundle, loan_type, ltv, term_years)

    scenarios: list[ImprovementScenario] = []

    next_fico = pricing.next_fico_band(profile.fico_score, loan_type)
    if next_fico is not None:
        better = profile.model_copy(update={"fico_score": next_fico})
        candidate = evaluate(better, bundle, loan_type, ltv, term_years)
        fico_change = next_fico - profile.fico_score
        scenarios.append(
            _scenario(
                f"Improve your FICO score by {fico_change} points",
                f"Increasing your FICO score to {next_fico} could "
                f"{_direction(_delta(baseline, candidate))} your buying power",
                baseline,
                candidate,
                fico_change=fico_change,
            )
        )

    lower_ltv = pricing.lower_ltv_band(ltv)
    if lower_ltv is not None:
        candidate = evaluate(profile, bundle, loan_type, lower_ltv, term_years)
        scenarios.append(
            _scenario(
                f"Increase down payment by {ltv - lower_ltv:g}%",
                f"A {100 - lower_ltv:g}% down payment could "
                f"{_direction(_delta(baseline, candidate))} your buying power",
                baseline,
                candidate,
                ltv_change=lower_ltv - ltv,
            )
        )

    alternative = loan_type.alternative
    candidate = evaluate(profile, bundle, alternative, ltv, term_years)
    label = alternative.value.upper()
    scenarios.append(
        _scenario(
            f"Switch to {label} loan",
            f"Using a {label} loan could {_direction(_delta(baseline, candidate))} your buying power",
            baseline,
            candidate,
        )
    )

    ranked = sorted(scenarios, key=_rank_key)
    logger.debug(
        "Generated %d scenarios for fico=%s ltv=%s loan_type=%s",
        len(ranked),
        profile.fico_score,
        ltv,
        loan_type.value,
    )
    return ranked
