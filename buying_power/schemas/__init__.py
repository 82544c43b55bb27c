# This project was developed with assistance from AI tools.
"""Shared schema components."""

from .borrower import BorrowerProfile, DebtItem, LoanType
from .calculator import (
    AffordabilityResult,
    DTILimits,
    ImprovementScenario,
    PaymentBreakdown,
)
from .location import LocationKey
from .rates import CachedEntry, FetchProgressState, RateBundle, RateSourceResult

__all__ = [
    "AffordabilityResult",
    "BorrowerProfile",
    "CachedEntry",
    "DTILimits",
    "DebtItem",
    "FetchProgressState",
    "ImprovementScenario",
    "LoanType",
    "LocationKey",
    "PaymentBreakdown",
    "RateBundle",
    "RateSourceResult",
]
