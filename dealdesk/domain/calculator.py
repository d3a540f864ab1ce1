"""Deal financial calculator - prices a vehicle deal from desk inputs"""

import math
from dataclasses import fields
from typing import Dict, Mapping, Optional, Tuple

from dealdesk.domain.models import (
    COMPUTATION_ERROR,
    UNAVAILABLE,
    BookValueSource,
    CalculatedVehicle,
    DealData,
    DealerSettings,
    Figure,
    LtvFlag,
    LtvThresholds,
    Sentinel,
    Vehicle,
    is_number,
)

# LTV percentages are rounded so exact-cap deals compare equal to the cap
LTV_PRECISION = 9

# Dealership home state; out-of-state deals collect tax at most at this rate
HOME_STATE = "MI"

STATE_TAX_RATES: Dict[str, float] = {
    "MI": 0.06,
    "OH": 0.0575,
    "IN": 0.07,
}


def calculate_monthly_payment(principal: float, annual_rate: float, term_months: int) -> Figure:
    """
    Standard amortized payment.

    payment = P * r(1+r)^n / ((1+r)^n - 1), with r = APR / 12 / 100.
    Zero rate pays the principal down evenly; a zero principal pays nothing.
    Negative principal, non-positive term, or negative rate have no defined payment.
    """
    if principal < 0 or term_months <= 0 or annual_rate < 0:
        return COMPUTATION_ERROR
    if principal == 0:
        return 0.0
    if annual_rate == 0:
        return principal / term_months

    monthly_rate = annual_rate / 100 / 12
    growth = (1 + monthly_rate) ** term_months
    return principal * (monthly_rate * growth) / (growth - 1)


def calculate_loan_amount(monthly_payment: float, annual_rate: float, term_months: int) -> Figure:
    """Inverse of calculate_monthly_payment: principal supported by a target payment"""
    if term_months <= 0 or annual_rate < 0:
        return COMPUTATION_ERROR
    if monthly_payment <= 0:
        return 0.0
    if annual_rate == 0:
        return monthly_payment * term_months

    monthly_rate = annual_rate / 100 / 12
    principal = monthly_payment * (1 - (1 + monthly_rate) ** -term_months) / monthly_rate

    if not math.isfinite(principal):
        return COMPUTATION_ERROR
    return principal


def resolve_tax_rate(
    settings: DealerSettings,
    tax_rates: Mapping[str, float] = STATE_TAX_RATES,
) -> Tuple[Optional[float], float]:
    """
    Collected tax rate (as a fraction) and extra fees for the deal's state.

    A custom rate (percent) overrides the table. Out-of-state deals are
    capped at the home-state rate and pay the transit permit fee.
    Returns (None, fees) when no rate is known for the state.
    """
    state = (settings.default_state or "").strip().upper()
    out_of_state = state != HOME_STATE
    extra_fees = settings.out_of_state_transit_fee if out_of_state else 0.0

    if settings.custom_tax_rate is not None:
        return settings.custom_tax_rate / 100, extra_fees

    state_rate = tax_rates.get(state)
    if state_rate is None:
        return None, extra_fees

    if out_of_state and HOME_STATE in tax_rates:
        state_rate = min(tax_rates[HOME_STATE], state_rate)

    return state_rate, extra_fees


def calculate_sales_tax(
    price: Figure,
    trade_in_value: float,
    settings: DealerSettings,
    tax_rates: Mapping[str, float] = STATE_TAX_RATES,
) -> Tuple[Figure, float]:
    """
    Sales tax on the deal plus any extra (non-taxed) fees.

    Taxable amount = max(0, price - trade-in value) + doc fee + CVR fee.
    Trade-in payoff never reduces the tax base.
    """
    rate, extra_fees = resolve_tax_rate(settings, tax_rates)
    if not is_number(price) or rate is None:
        return UNAVAILABLE, extra_fees

    taxable_amount = max(0.0, price - trade_in_value) + settings.doc_fee + settings.cvr_fee
    return taxable_amount * rate, extra_fees


def select_book_value(vehicle: Vehicle, source: Optional[BookValueSource] = None) -> Figure:
    """
    Book value used as the LTV denominator.

    Without a source the trade book is preferred with retail as fallback.
    Retail lenders fall back to trade; trade lenders use trade only.
    """
    trade = vehicle.jd_power if is_number(vehicle.jd_power) and vehicle.jd_power > 0 else None
    retail = (
        vehicle.jd_power_retail
        if is_number(vehicle.jd_power_retail) and vehicle.jd_power_retail > 0
        else None
    )

    if source == BookValueSource.TRADE:
        candidates = (trade,)
    elif source == BookValueSource.RETAIL:
        candidates = (retail, trade)
    else:
        candidates = (trade, retail)

    for value in candidates:
        if value is not None:
            return value
    return UNAVAILABLE


def calculate_ltv(amount: Figure, book_value: Figure) -> Figure:
    """Amount financed as a percent of book value; negative amounts read as 0%"""
    if isinstance(amount, Sentinel):
        return amount
    if not is_number(book_value) or book_value <= 0:
        return COMPUTATION_ERROR
    if amount < 0:
        return 0.0
    return round(amount * 100 / book_value, LTV_PRECISION)


def classify_ltv(ltv: Figure, thresholds: LtvThresholds) -> LtvFlag:
    """Display band for an LTV; lower bounds are inclusive"""
    if not is_number(ltv):
        return LtvFlag.UNAVAILABLE
    if ltv >= thresholds.critical:
        return LtvFlag.CRITICAL
    if ltv >= thresholds.danger:
        return LtvFlag.DANGER
    if ltv >= thresholds.warn:
        return LtvFlag.WARN
    return LtvFlag.OK


def calculate_financials(vehicle: Vehicle, deal: DealData, settings: DealerSettings) -> CalculatedVehicle:
    """
    Main entry point: price a vehicle for the given deal structure.

    Flow:
    1. Net trade equity (may be negative)
    2. Sales tax on price less trade-in value plus taxable fees
    3. Out-the-door price
    4. Front-end amount to finance (no backend products)
    5. Amount to finance (with backend products) and monthly payment
    6. Front-end and OTD LTV against book value

    Unavailable inputs leave dependent figures Unavailable; undefined
    arithmetic yields ComputationError. Neither is ever turned into zero.
    """
    price = vehicle.price
    net_trade_equity = deal.trade_in_value - deal.trade_in_payoff

    sales_tax, extra_fees = calculate_sales_tax(price, deal.trade_in_value, settings)

    if is_number(price) and is_number(sales_tax):
        out_the_door = (
            price + settings.doc_fee + settings.cvr_fee + deal.state_fees + sales_tax + extra_fees
        )
        front_end_amount = out_the_door - deal.down_payment - net_trade_equity
        amount_to_finance = front_end_amount + deal.backend_products
        monthly_payment = calculate_monthly_payment(
            amount_to_finance, deal.interest_rate, deal.loan_term
        )
    else:
        out_the_door = front_end_amount = amount_to_finance = monthly_payment = UNAVAILABLE

    if is_number(price) and is_number(vehicle.unit_cost):
        front_end_gross = price - vehicle.unit_cost
    else:
        front_end_gross = UNAVAILABLE

    book_value = select_book_value(vehicle)

    base = {f.name: getattr(vehicle, f.name) for f in fields(Vehicle)}
    return CalculatedVehicle(
        **base,
        sales_tax=sales_tax,
        base_out_the_door_price=out_the_door,
        front_end_amount_to_finance=front_end_amount,
        amount_to_finance=amount_to_finance,
        front_end_ltv=calculate_ltv(front_end_amount, book_value),
        front_end_gross=front_end_gross,
        otd_ltv=calculate_ltv(amount_to_finance, book_value),
        monthly_payment=monthly_payment,
    )
