"""POST /v1/desk - price a vehicle for a deal structure"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from dealdesk.api.dependencies import get_dealer_settings, get_request_id
from dealdesk.api.v1.schemas import (
    CalculatedVehicleSchema,
    DeskRequest,
    DeskResponse,
    LoanAmountRequest,
    LoanAmountResponse,
    figure_out,
)
from dealdesk.domain.calculator import calculate_financials, calculate_loan_amount, classify_ltv
from dealdesk.domain.exceptions import InvalidDealInputError
from dealdesk.domain.models import CalculatedVehicle, DealerSettings
from dealdesk.domain.validation import ensure_valid_deal
from dealdesk.infrastructure.observability.logging import log_desk_calculation
from dealdesk.infrastructure.observability.metrics import record_calculation

router = APIRouter()


def priced_vehicle_schema(vehicle: CalculatedVehicle, dealer: DealerSettings) -> CalculatedVehicleSchema:
    """Serialize a priced vehicle with its LTV display flags"""
    return CalculatedVehicleSchema.from_domain(
        vehicle,
        front_end_ltv_flag=classify_ltv(vehicle.front_end_ltv, dealer.ltv_thresholds),
        otd_ltv_flag=classify_ltv(vehicle.otd_ltv, dealer.ltv_thresholds),
    )


@router.post("/desk", response_model=DeskResponse)
def price_deal(
    request_body: DeskRequest,
    request: Request,
    defaults: DealerSettings = Depends(get_dealer_settings),
):
    """
    Price a deal: taxes, fees, amount financed, LTV, and payment.

    Figures that cannot be computed come back as "N/A" (missing input)
    or "Error" (undefined arithmetic) rather than failing the request.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    dealer = request_body.settings.to_domain(defaults) if request_body.settings else defaults
    deal = request_body.deal.to_domain(dealer)
    try:
        ensure_valid_deal(deal)
    except InvalidDealInputError as e:
        logging.warning(f"Rejected deal input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=e.errors)

    calculated = calculate_financials(request_body.vehicle.to_domain(), deal, dealer)

    duration_ms = (time.time() - start_time) * 1000
    record_calculation(calculated)
    log_desk_calculation(request_id, calculated, duration_ms)

    return DeskResponse(vehicle=priced_vehicle_schema(calculated, dealer))


@router.post("/desk/loan-amount", response_model=LoanAmountResponse)
def loan_amount(request_body: LoanAmountRequest):
    """Payment-first desking: principal supported by a target monthly payment"""
    principal = calculate_loan_amount(
        request_body.monthly_payment, request_body.interest_rate, request_body.loan_term
    )
    return LoanAmountResponse(principal=figure_out(principal))
