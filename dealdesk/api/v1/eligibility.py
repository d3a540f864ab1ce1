"""POST /v1/eligibility - match a priced deal against lender programs"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from dealdesk.api.dependencies import get_dealer_settings, get_max_workers, get_request_id
from dealdesk.api.v1.desk import priced_vehicle_schema
from dealdesk.api.v1.schemas import (
    EligibilityRequest,
    EligibilityResponse,
    EligibilityStatusSchema,
    combine_deal,
)
from dealdesk.domain.calculator import calculate_financials
from dealdesk.domain.exceptions import InvalidDealInputError, TierConfigurationError
from dealdesk.domain.lender_matcher import evaluate_lenders, sort_by_eligibility
from dealdesk.domain.models import DealerSettings
from dealdesk.domain.validation import ensure_valid_deal
from dealdesk.infrastructure.observability.logging import log_desk_calculation, log_eligibility
from dealdesk.infrastructure.observability.metrics import record_calculation, record_eligibility

router = APIRouter()


@router.post("/eligibility", response_model=EligibilityResponse)
def check_eligibility(
    request_body: EligibilityRequest,
    request: Request,
    defaults: DealerSettings = Depends(get_dealer_settings),
    max_workers: int = Depends(get_max_workers),
):
    """
    Price the deal, then evaluate every lender's tiers against it.

    Flow:
    1. Validate deal and customer inputs
    2. Build lender profiles (inverted tier bounds are a configuration error)
    3. Price the vehicle once
    4. Match the priced deal against each lender
    """
    start_time = time.time()
    request_id = get_request_id(request)

    dealer = request_body.settings.to_domain(defaults) if request_body.settings else defaults
    deal = combine_deal(request_body.deal, request_body.filters, dealer)
    try:
        ensure_valid_deal(deal)
    except InvalidDealInputError as e:
        logging.warning(f"Rejected deal input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=e.errors)

    try:
        lenders = [lender.to_domain() for lender in request_body.lenders]
    except TierConfigurationError as e:
        logging.error(f"Lender tier configuration error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    calculated = calculate_financials(request_body.vehicle.to_domain(), deal, dealer)

    statuses = evaluate_lenders(calculated, deal, lenders, max_workers=max_workers)
    if request_body.eligible_first:
        statuses = sort_by_eligibility(statuses)

    duration_ms = (time.time() - start_time) * 1000
    record_calculation(calculated)
    record_eligibility(statuses)
    log_desk_calculation(request_id, calculated, duration_ms)
    log_eligibility(request_id, calculated.vin, statuses, duration_ms)

    return EligibilityResponse(
        vehicle=priced_vehicle_schema(calculated, dealer),
        lenders=[EligibilityStatusSchema.from_domain(status) for status in statuses],
        eligible_count=sum(1 for status in statuses if status.eligible),
    )
