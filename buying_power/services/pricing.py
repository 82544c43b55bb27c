# This project was developed with assistance from AI tools.
"""Loan-level pricing adjustments and mortgage insurance rates.

Pure lookups, no I/O. All rates and adjustments are in percentage points.
"""

from ..schemas.borrower import LoanType

# (minimum FICO, adjustment), checked top-down
_FICO_ADJUSTMENTS: dict[LoanType, list[tuple[int, float]]] = {
    LoanType.CONVENTIONAL: [
        (740, 0.0),
        (720, 0.125),
        (700, 0.25),
        (680, 0.375),
        (660, 0.5),
        (640, 0.75),
        (620, 1.0),
    ],
    LoanType.FHA: [
        (740, 0.0),
        (720, 0.0),
        (700, 0.125),
        (680, 0.25),
        (660, 0.25),
        (640, 0.25),
        (620, 0.25),
        (580, 0.5),
        (500, 0.75),
    ],
}

# (LTV upper bound, adjustment, inclusive bound)
_LTV_ADJUSTMENTS: list[tuple[float, float, bool]] = [
    (60, -0.25, False),
    (70, -0.125, False),
    (75, 0.0, False),
    (80, 0.0, False),
    (85, 0.125, False),
    (90, 0.25, False),
    (95, 0.375, False),
    (97, 0.5, True),
]
_LTV_ABOVE_97 = 0.75

# Score a borrower moves up to in the "better FICO" scenario
FICO_BANDS: dict[LoanType, list[int]] = {
    LoanType.CONVENTIONAL: [620, 640, 660, 680, 700, 720, 740],
    LoanType.FHA: [580, 620, 640, 660, 680, 700, 720, 740],
}
FHA_MINIMUM_FICO = 500

LTV_BANDS = [97, 95, 90, 85, 80, 75, 70, 60]

FHA_UPFRONT_MIP = 1.75
_FHA_ANNUAL_MIP = {
    (True, True): 0.45,  # (term <= 15, ltv <= 90)
    (True, False): 0.70,
    (False, True): 0.50,
    (False, False): 0.55,
}

PMI_FREE_LTV = 80


def fico_rate_adjustment(fico_score: int, loan_type: LoanType) -> float | None:
    """Rate add-on for a FICO score, or None when the loan type is unavailable."""
    for minimum, adjustment in _FICO_ADJUSTMENTS[loan_type]:
        if fico_score >= minimum:
            return adjustment
    if loan_type is LoanType.FHA:
        # below 500 priced at the lowest tier
        return _FICO_ADJUSTMENTS[LoanType.FHA][-1][1]
    return None


def ltv_rate_adjustment(ltv: float) -> float:
    for bound, adjustment, inclusive in _LTV_ADJUSTMENTS:
        if ltv < bound or (inclusive and ltv == bound):
            return adjustment
    return _LTV_ABOVE_97


def adjusted_rate(
    base_rate: float, fico_score: int, ltv: float, loan_type: LoanType
) -> float | None:
    """Quoted base rate plus FICO and LTV adjustments."""
    fico_adj = fico_rate_adjustment(fico_score, loan_type)
    if fico_adj is None:
        return None
    return base_rate + fico_adj + ltv_rate_adjustment(ltv)


def fha_mip_rates(ltv: float, term_years: int = 30) -> tuple[float, float]:
    """Return (upfront MIP %, annual MIP %) for an FHA loan."""
    return FHA_UPFRONT_MIP, _FHA_ANNUAL_MIP[(term_years <= 15, ltv <= 90)]


def conventional_pmi_rate(ltv: float) -> float:
    if ltv <= PMI_FREE_LTV:
        return 0.0
    if ltv > 95:
        return 1.1
    if ltv > 90:
        return 0.8
    if ltv > 85:
        return 0.5
    return 0.3


def mortgage_insurance_rate(
    loan_type: LoanType,
    ltv: float,
    ongoing_mip: float | None = None,
    term_years: int = 30,
) -> float:
    """Annual mortgage insurance as a percent of the loan amount."""
    if loan_type is LoanType.FHA:
        if ongoing_mip is not None:
            return ongoing_mip
        return fha_mip_rates(ltv, term_years)[1]
    return conventional_pmi_rate(ltv)


def next_fico_band(fico_score: int, loan_type: LoanType) -> int | None:
    """Next score threshold that improves pricing, or None at the top band."""
    if loan_type is LoanType.FHA and fico_score < FHA_MINIMUM_FICO:
        return None
    for band in FICO_BANDS[loan_type]:
        if fico_score < band:
            return band
    return None


def lower_ltv_band(ltv: float) -> float | None:
    """Next lower LTV threshold, or None when already in the lowest band."""
    for band in LTV_BANDS:
        if ltv > band:
            return band
    return None
