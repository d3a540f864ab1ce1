"""Lender eligibility matching - evaluates a priced deal against lender tiers"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Iterable, List, Optional

from dealdesk.domain.calculator import calculate_ltv, select_book_value
from dealdesk.domain.models import (
    CalculatedVehicle,
    DealData,
    LenderEligibilityStatus,
    LenderProfile,
    LenderTier,
    VehicleType,
    is_number,
)
from dealdesk.utils.numbers import format_currency_safe, format_percentage_safe

INVALID_PROFILE_REASON = "Invalid bank profile data."
INVALID_DEAL_REASON = "Invalid deal data."
INVALID_TIERS_REASON = "Bank profile has invalid tiers structure."
INACTIVE_LENDER_REASON = "Lender is inactive."
NO_MATCHING_TIER_REASON = "No eligible lending tier found for this deal structure and vehicle."


def _within(value, low, high) -> bool:
    """Inclusive range check; unset bounds pass, non-numeric values fail a set bound"""
    if low is None and high is None:
        return True
    if not is_number(value):
        return False
    if low is not None and value < low:
        return False
    if high is not None and value > high:
        return False
    return True


def _check_lender_limits(
    vehicle: CalculatedVehicle, deal: DealData, lender: LenderProfile
) -> List[str]:
    """Income and PTI limits, evaluated once per lender regardless of tier"""
    reasons = []
    monthly_income = getattr(deal, "monthly_income", None)
    has_income = is_number(monthly_income)

    if lender.min_income and (not has_income or monthly_income < lender.min_income):
        income = format_currency_safe(monthly_income, decimals=0)
        minimum = format_currency_safe(lender.min_income, decimals=0)
        reasons.append(f"Income too low ({income} < {minimum})")

    payment = vehicle.monthly_payment
    if lender.max_pti and has_income and monthly_income > 0 and is_number(payment) and payment > 0:
        pti = payment / monthly_income * 100
        if pti > lender.max_pti:
            reasons.append(f"PTI too high ({format_percentage_safe(pti)} > {lender.max_pti:g}%)")

    return reasons


def _makes_allowed(make: Optional[str], tier: LenderTier) -> bool:
    normalized = make.strip().lower() if make else None

    if tier.included_makes:
        if normalized is None:
            return False
        if normalized not in {m.strip().lower() for m in tier.included_makes}:
            return False

    if tier.excluded_makes and normalized is not None:
        if normalized in {m.strip().lower() for m in tier.excluded_makes}:
            return False

    return True


def _vehicle_type_allowed(vehicle: CalculatedVehicle, tier: LenderTier) -> bool:
    if tier.vehicle_type is None or tier.vehicle_type == VehicleType.ALL:
        return True
    return vehicle.condition == tier.vehicle_type


def _ltv_allowed(vehicle: CalculatedVehicle, lender: LenderProfile, tier: LenderTier) -> bool:
    """LTV caps measured against the lender's book value source"""
    if tier.max_ltv is None and tier.front_end_ltv is None and tier.otd_ltv is None:
        return True

    book_value = select_book_value(vehicle, lender.book_value_source)
    if not is_number(book_value):
        return False

    otd_ltv = calculate_ltv(vehicle.amount_to_finance, book_value)
    if tier.max_ltv is not None and not _within(otd_ltv, None, tier.max_ltv):
        return False
    if tier.otd_ltv is not None and not _within(otd_ltv, None, tier.otd_ltv):
        return False

    if tier.front_end_ltv is not None:
        front_end_ltv = calculate_ltv(vehicle.front_end_amount_to_finance, book_value)
        if not _within(front_end_ltv, None, tier.front_end_ltv):
            return False

    return True


def _backend_allowed(vehicle: CalculatedVehicle, deal: DealData, tier: LenderTier) -> bool:
    backend = deal.backend_products
    if tier.max_backend is not None and backend > tier.max_backend:
        return False

    if tier.max_backend_percent is not None and backend > 0:
        front_end_amount = vehicle.front_end_amount_to_finance
        if not is_number(front_end_amount) or front_end_amount <= 0:
            return False
        if backend / front_end_amount * 100 > tier.max_backend_percent:
            return False

    return True


def tier_matches(
    vehicle: CalculatedVehicle,
    deal: DealData,
    lender: LenderProfile,
    tier: LenderTier,
    reference_year: int,
) -> bool:
    """True only if every populated constraint on the tier passes"""
    credit_score = getattr(deal, "credit_score", None)

    if not _within(credit_score, tier.min_fico, tier.max_fico):
        return False
    if not _within(vehicle.model_year, tier.min_year, tier.max_year):
        return False
    if tier.max_age is not None:
        if not is_number(vehicle.model_year) or reference_year - vehicle.model_year > tier.max_age:
            return False
    if not _within(vehicle.mileage, tier.min_mileage, tier.max_mileage):
        return False
    if not _within(vehicle.amount_to_finance, tier.min_amount_financed, tier.max_amount_financed):
        return False
    if not _within(deal.loan_term, tier.min_term, tier.max_term):
        return False
    if not _ltv_allowed(vehicle, lender, tier):
        return False
    if not _backend_allowed(vehicle, deal, tier):
        return False
    if not _vehicle_type_allowed(vehicle, tier):
        return False
    if not _makes_allowed(vehicle.make, tier):
        return False

    return True


def check_bank_eligibility(
    vehicle: CalculatedVehicle,
    deal: DealData,
    lender: LenderProfile,
    reference_year: Optional[int] = None,
) -> LenderEligibilityStatus:
    """
    Decide whether a lender would approve this priced deal.

    Tiers are walked in declared order and the first fully matching tier
    wins; tiers are never scored against each other. Lender-level income
    and PTI limits can reject the lender even when a tier would match.

    Never raises for bad business data: malformed arguments come back as
    an ineligible status with a reason.
    """
    if not isinstance(lender, LenderProfile):
        return LenderEligibilityStatus(
            name=getattr(lender, "name", "") or "", eligible=False, reasons=[INVALID_PROFILE_REASON]
        )

    if not isinstance(deal, DealData) or not isinstance(vehicle, CalculatedVehicle):
        return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=[INVALID_DEAL_REASON])

    tiers = lender.tiers
    if tiers is not None and not isinstance(tiers, (list, tuple)):
        return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=[INVALID_TIERS_REASON])
    if not tiers:
        return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=[NO_MATCHING_TIER_REASON])

    if not lender.active:
        return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=[INACTIVE_LENDER_REASON])

    reasons = _check_lender_limits(vehicle, deal, lender)
    if reasons:
        return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=reasons)

    if reference_year is None:
        reference_year = date.today().year

    for tier in tiers:
        if not isinstance(tier, LenderTier):
            continue
        if tier_matches(vehicle, deal, lender, tier, reference_year):
            return LenderEligibilityStatus(name=lender.name, eligible=True, reasons=[], matched_tier=tier)

    return LenderEligibilityStatus(name=lender.name, eligible=False, reasons=[NO_MATCHING_TIER_REASON])


def evaluate_lenders(
    vehicle: CalculatedVehicle,
    deal: DealData,
    lenders: Iterable[LenderProfile],
    max_workers: Optional[int] = None,
    reference_year: Optional[int] = None,
) -> List[LenderEligibilityStatus]:
    """
    Match one priced deal against every lender, preserving lender order.

    Each lender is independent; with max_workers > 1 the checks fan out
    over a thread pool, otherwise they run sequentially.
    """
    lenders = list(lenders)
    if reference_year is None:
        reference_year = date.today().year

    if max_workers and max_workers > 1 and len(lenders) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(
                pool.map(
                    lambda lender: check_bank_eligibility(vehicle, deal, lender, reference_year),
                    lenders,
                )
            )

    return [check_bank_eligibility(vehicle, deal, lender, reference_year) for lender in lenders]


def sort_by_eligibility(statuses: Iterable[LenderEligibilityStatus]) -> List[LenderEligibilityStatus]:
    """Eligible lenders first; relative order within each group is kept"""
    return sorted(statuses, key=lambda status: not status.eligible)
