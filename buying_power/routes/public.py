# This project was developed with assistance from AI tools.
"""Public API routes -- no authentication required."""

import logging

from fastapi import APIRouter, Depends

from ..core.errors import AllSourcesExhaustedError, LocationMissingError
from ..schemas.buying_power import BuyingPowerRequest, BuyingPowerResponse
from ..schemas.calculator import AffordabilityRequest, AffordabilityResponse
from ..schemas.location import LocationKey
from ..schemas.rates import FetchProgressState, RateBundle, RatesResponse
from ..services import calculator, scenarios
from ..services.acquisition import get_coordinator
from ..services.coordinator import DataAcquisitionCoordinator
from ..services.feature_flags import get_feature_flags
from ..services.storage import KeyValueStore, get_flag_store

logger = logging.getLogger(__name__)

router = APIRouter()


def _rates_or_raise(
    coordinator: DataAcquisitionCoordinator, bundle: RateBundle | None
) -> RatesResponse:
    if bundle is None:
        error = coordinator.last_error
        if isinstance(error, (LocationMissingError, AllSourcesExhaustedError)):
            raise error
        raise AllSourcesExhaustedError([str(error)] if error else [])
    return RatesResponse(
        location=coordinator.location,
        rates=bundle,
        state=coordinator.state.value,
        progress=coordinator.progress,
    )


@router.get("/rates", response_model=RatesResponse)
async def get_rates(
    state: str | None = None,
    county: str | None = None,
    zip_code: str | None = None,
    coordinator: DataAcquisitionCoordinator = Depends(get_coordinator),
) -> RatesResponse:
    """Return rate data for a location, from cache when fresh."""
    location = LocationKey(state=state, county=county, zip_code=zip_code)
    bundle = await coordinator.acquire(location)
    return _rates_or_raise(coordinator, bundle)


@router.post("/rates/refresh", response_model=RatesResponse)
async def refresh_rates(
    coordinator: DataAcquisitionCoordinator = Depends(get_coordinator),
) -> RatesResponse:
    """Re-run the fallback chain for the current location, bypassing the cache."""
    bundle = await coordinator.refresh(silent=False)
    return _rates_or_raise(coordinator, bundle)


@router.get("/rates/progress", response_model=FetchProgressState)
async def rates_progress(
    coordinator: DataAcquisitionCoordinator = Depends(get_coordinator),
) -> FetchProgressState:
    return coordinator.progress


@router.post("/buying-power", response_model=BuyingPowerResponse)
async def buying_power(
    req: BuyingPowerRequest,
    coordinator: DataAcquisitionCoordinator = Depends(get_coordinator),
    flag_store: KeyValueStore = Depends(get_flag_store),
) -> BuyingPowerResponse:
    """Acquire rates for the location and evaluate the borrower against them.

    When every rate source fails the result is marked unavailable rather
    than reported as zero buying power.
    """
    if not req.location.is_complete:
        raise LocationMissingError("State and county are required")

    bundle = await coordinator.acquire(req.location)
    result = calculator.evaluate(req.borrower, bundle, req.loan_type, req.ltv)

    flags = get_feature_flags(flag_store, req.user_id)
    improvement = None
    if flags.scenarios_enabled:
        improvement = scenarios.generate_scenarios(
            req.borrower, bundle, req.loan_type, req.ltv, baseline=result
        )

    return BuyingPowerResponse(
        rates=bundle,
        result=result.display(),
        scenarios=improvement,
        progress=coordinator.progress,
    )


@router.post("/calculate-affordability", response_model=AffordabilityResponse)
async def calculate_affordability(req: AffordabilityRequest) -> AffordabilityResponse:
    """Estimate maximum loan amount and monthly payment for an explicit rate."""
    return calculator.calculate_affordability(req)
