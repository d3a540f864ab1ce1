"""Unit tests for lender eligibility matching"""

import dataclasses

import pytest

from dealdesk.domain.exceptions import TierConfigurationError
from dealdesk.domain.lender_matcher import (
    INACTIVE_LENDER_REASON,
    INVALID_DEAL_REASON,
    INVALID_PROFILE_REASON,
    INVALID_TIERS_REASON,
    NO_MATCHING_TIER_REASON,
    check_bank_eligibility,
    evaluate_lenders,
    sort_by_eligibility,
)
from dealdesk.domain.models import (
    UNAVAILABLE,
    BookValueSource,
    CalculatedVehicle,
    DealAndFilters,
    DealData,
    LenderEligibilityStatus,
    LenderProfile,
    LenderTier,
    VehicleType,
)


def test_prime_customer_matches_prime_tier(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, amount_to_finance=22000)
    result = check_bank_eligibility(vehicle, customer_deal, test_bank)

    assert result.eligible is True
    assert result.name == "Test Bank"
    assert result.matched_tier.name == "Prime"
    assert result.reasons == []


def test_near_prime_customer_matches_near_prime_tier(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(
        priced_vehicle, model_year=2020, mileage=50000, amount_to_finance=20000, jd_power=22000
    )
    deal = dataclasses.replace(customer_deal, credit_score=650, loan_term=48)

    result = check_bank_eligibility(vehicle, deal, test_bank)

    assert result.eligible is True
    assert result.matched_tier.name == "Near Prime"


def test_credit_score_below_all_tiers(priced_vehicle, customer_deal, test_bank):
    deal = dataclasses.replace(customer_deal, credit_score=550)
    result = check_bank_eligibility(priced_vehicle, deal, test_bank)

    assert result.eligible is False
    assert result.reasons == [NO_MATCHING_TIER_REASON]
    assert result.matched_tier is None


def test_missing_credit_score_fails_fico_tiers(priced_vehicle, customer_deal, test_bank):
    deal = dataclasses.replace(customer_deal, credit_score=None)
    result = check_bank_eligibility(priced_vehicle, deal, test_bank)

    assert result.eligible is False


def test_vehicle_too_old(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, model_year=2015)
    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is False


def test_vehicle_too_many_miles(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, mileage=150000)
    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is False


def test_term_above_ceiling(priced_vehicle, customer_deal, test_bank):
    deal = dataclasses.replace(customer_deal, loan_term=84)
    assert check_bank_eligibility(priced_vehicle, deal, test_bank).eligible is False


def test_ltv_above_cap_rejected(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, amount_to_finance=30000, jd_power=20000)  # 150%
    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is False


def test_ltv_cap_is_inclusive(priced_vehicle, customer_deal, test_bank):
    """27,500 over a 22,000 book is exactly 125%"""
    at_cap = dataclasses.replace(priced_vehicle, amount_to_finance=27500)
    over_cap = dataclasses.replace(priced_vehicle, amount_to_finance=27501)

    assert check_bank_eligibility(at_cap, customer_deal, test_bank).eligible is True
    assert check_bank_eligibility(over_cap, customer_deal, test_bank).eligible is False


def test_ltv_cap_inclusive_for_inexact_division(priced_vehicle, customer_deal):
    """11,000 over a 10,000 book is exactly 110%"""
    lender = LenderProfile(name="Cap Bank", tiers=[LenderTier(name="Capped", max_ltv=110)])
    at_cap = dataclasses.replace(priced_vehicle, amount_to_finance=11000, jd_power=10000)

    result = check_bank_eligibility(at_cap, customer_deal, lender)

    assert result.eligible is True
    assert result.matched_tier.name == "Capped"


def test_ltv_without_book_value_skips_tier(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, jd_power=UNAVAILABLE, jd_power_retail=UNAVAILABLE)
    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is False


def test_fico_range_selects_tier():
    range_bank = LenderProfile(
        name="Range Bank",
        tiers=[
            LenderTier(name="Deep", min_fico=700),
            LenderTier(name="Mid", min_fico=600, max_fico=699),
        ],
    )
    vehicle = CalculatedVehicle(amount_to_finance=15000, monthly_payment=300)

    low = check_bank_eligibility(vehicle, DealAndFilters(credit_score=550), range_bank)
    mid = check_bank_eligibility(vehicle, DealAndFilters(credit_score=650), range_bank)

    assert low.eligible is False
    assert low.reasons == [NO_MATCHING_TIER_REASON]
    assert mid.eligible is True
    assert mid.matched_tier.name == "Mid"


def test_first_matching_tier_wins(priced_vehicle, customer_deal):
    loose = LenderTier(name="Loose", max_ltv=150)
    strict = LenderTier(name="Strict", max_ltv=120, min_fico=700)

    strict_first = LenderProfile(name="Bank", tiers=[strict, loose])
    loose_first = LenderProfile(name="Bank", tiers=[loose, strict])

    assert check_bank_eligibility(priced_vehicle, customer_deal, strict_first).matched_tier is strict
    assert check_bank_eligibility(priced_vehicle, customer_deal, loose_first).matched_tier is loose


def test_unconstrained_tier_matches_anything(priced_vehicle, customer_deal):
    lender = LenderProfile(name="Anything Goes", tiers=[LenderTier(name="Open")])
    result = check_bank_eligibility(priced_vehicle, customer_deal, lender)

    assert result.eligible is True
    assert result.matched_tier.name == "Open"


def test_income_below_minimum(priced_vehicle, customer_deal, test_bank):
    deal = dataclasses.replace(customer_deal, monthly_income=1500)
    lender = dataclasses.replace(test_bank, min_income=2000)

    result = check_bank_eligibility(priced_vehicle, deal, lender)

    assert result.eligible is False
    assert result.reasons == ["Income too low ($1,500 < $2,000)"]


def test_missing_income_with_minimum(priced_vehicle, customer_deal, test_bank):
    deal = dataclasses.replace(customer_deal, monthly_income=None)
    lender = dataclasses.replace(test_bank, min_income=2000)

    result = check_bank_eligibility(priced_vehicle, deal, lender)

    assert result.eligible is False
    assert "Income too low" in result.reasons[0]


def test_pti_above_maximum_rejects_despite_tier_match(priced_vehicle, customer_deal, test_bank):
    vehicle = dataclasses.replace(priced_vehicle, monthly_payment=800)
    deal = dataclasses.replace(customer_deal, monthly_income=2000)
    lender = dataclasses.replace(test_bank, max_pti=25)  # PTI 40%

    result = check_bank_eligibility(vehicle, deal, lender)

    assert result.eligible is False
    assert result.reasons == ["PTI too high (40.0% > 25%)"]
    assert result.matched_tier is None


def test_pti_within_maximum(priced_vehicle, customer_deal, test_bank):
    lender = dataclasses.replace(test_bank, max_pti=15, min_income=3000)  # 450 / 5000 = 9%
    assert check_bank_eligibility(priced_vehicle, customer_deal, lender).eligible is True


def test_null_bank_profile(priced_vehicle, customer_deal):
    result = check_bank_eligibility(priced_vehicle, customer_deal, None)

    assert result.eligible is False
    assert result.reasons == [INVALID_PROFILE_REASON]


def test_malformed_bank_profile(priced_vehicle, customer_deal):
    result = check_bank_eligibility(priced_vehicle, customer_deal, {"name": "Dict Bank"})

    assert result.eligible is False
    assert result.reasons == [INVALID_PROFILE_REASON]


def test_null_deal_data(priced_vehicle, test_bank):
    result = check_bank_eligibility(priced_vehicle, None, test_bank)

    assert result.eligible is False
    assert result.reasons == [INVALID_DEAL_REASON]


def test_empty_and_missing_tiers(priced_vehicle, customer_deal):
    empty = LenderProfile(name="Empty Bank", tiers=[])
    missing = LenderProfile(name="Bad Bank", tiers=None)

    for lender in (empty, missing):
        result = check_bank_eligibility(priced_vehicle, customer_deal, lender)
        assert result.eligible is False
        assert result.reasons == [NO_MATCHING_TIER_REASON]


def test_malformed_tiers_structure(priced_vehicle, customer_deal):
    lender = LenderProfile(name="Bad Bank", tiers="Prime")
    result = check_bank_eligibility(priced_vehicle, customer_deal, lender)

    assert result.reasons == [INVALID_TIERS_REASON]


def test_non_tier_entries_are_skipped(priced_vehicle, customer_deal):
    lender = LenderProfile(name="Bank", tiers=[None, {"name": "raw"}, LenderTier(name="Real")])
    result = check_bank_eligibility(priced_vehicle, customer_deal, lender)

    assert result.eligible is True
    assert result.matched_tier.name == "Real"


def test_inactive_lender(priced_vehicle, customer_deal, test_bank):
    lender = dataclasses.replace(test_bank, active=False)
    result = check_bank_eligibility(priced_vehicle, customer_deal, lender)

    assert result.eligible is False
    assert result.reasons == [INACTIVE_LENDER_REASON]


def test_trade_book_value_source(priced_vehicle, customer_deal, test_bank):
    """24,000 over a 20,000 trade book is 120%, within the 125% cap"""
    vehicle = dataclasses.replace(
        priced_vehicle, jd_power=20000, jd_power_retail=25000, amount_to_finance=24000
    )
    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is True


def test_retail_book_value_source(priced_vehicle, customer_deal, test_bank):
    """28,000 is 140% of trade but 112% of retail"""
    vehicle = dataclasses.replace(
        priced_vehicle, jd_power=20000, jd_power_retail=25000, amount_to_finance=28000
    )
    retail_bank = dataclasses.replace(test_bank, book_value_source=BookValueSource.RETAIL)

    assert check_bank_eligibility(vehicle, customer_deal, test_bank).eligible is False
    assert check_bank_eligibility(vehicle, customer_deal, retail_bank).eligible is True


def test_split_front_end_and_otd_caps(priced_vehicle, customer_deal):
    lender = LenderProfile(
        name="Split Bank",
        tiers=[LenderTier(name="Split", front_end_ltv=100, otd_ltv=120)],
    )
    within = dataclasses.replace(
        priced_vehicle, front_end_amount_to_finance=21000, amount_to_finance=24000
    )
    front_heavy = dataclasses.replace(
        priced_vehicle, front_end_amount_to_finance=23000, amount_to_finance=24000
    )
    otd_heavy = dataclasses.replace(
        priced_vehicle, front_end_amount_to_finance=21000, amount_to_finance=27000
    )

    assert check_bank_eligibility(within, customer_deal, lender).eligible is True
    assert check_bank_eligibility(front_heavy, customer_deal, lender).eligible is False
    assert check_bank_eligibility(otd_heavy, customer_deal, lender).eligible is False


def test_amount_financed_range(priced_vehicle, customer_deal):
    lender = LenderProfile(
        name="Bank",
        tiers=[LenderTier(name="Mid", min_amount_financed=10000, max_amount_financed=24000)],
    )
    assert check_bank_eligibility(priced_vehicle, customer_deal, lender).eligible is False

    smaller = dataclasses.replace(priced_vehicle, amount_to_finance=24000)
    assert check_bank_eligibility(smaller, customer_deal, lender).eligible is True


def test_unavailable_amount_fails_amount_constraint(priced_vehicle, customer_deal):
    lender = LenderProfile(name="Bank", tiers=[LenderTier(name="Capped", max_amount_financed=40000)])
    vehicle = dataclasses.replace(priced_vehicle, amount_to_finance=UNAVAILABLE)

    assert check_bank_eligibility(vehicle, customer_deal, lender).eligible is False


def test_unavailable_mileage_only_matters_when_constrained(priced_vehicle, customer_deal):
    vehicle = dataclasses.replace(priced_vehicle, mileage=UNAVAILABLE)
    capped = LenderProfile(name="Bank", tiers=[LenderTier(name="Capped", max_mileage=90000)])
    open_tier = LenderProfile(name="Bank", tiers=[LenderTier(name="Open", max_term=72)])

    assert check_bank_eligibility(vehicle, customer_deal, capped).eligible is False
    assert check_bank_eligibility(vehicle, customer_deal, open_tier).eligible is True


def test_minimum_term(priced_vehicle, customer_deal):
    lender = LenderProfile(name="Bank", tiers=[LenderTier(name="Long", min_term=72)])
    assert check_bank_eligibility(priced_vehicle, customer_deal, lender).eligible is False


def test_max_vehicle_age(priced_vehicle, customer_deal):
    """2021 model evaluated in 2026 is five years old"""
    five = LenderProfile(name="Bank", tiers=[LenderTier(name="Five", max_age=5)])
    four = LenderProfile(name="Bank", tiers=[LenderTier(name="Four", max_age=4)])

    assert check_bank_eligibility(priced_vehicle, customer_deal, five, reference_year=2026).eligible is True
    assert check_bank_eligibility(priced_vehicle, customer_deal, four, reference_year=2026).eligible is False


def test_backend_caps(priced_vehicle, customer_deal):
    """Backend of 3000 on a 25,000 front end is 12%"""
    deal = dataclasses.replace(customer_deal, backend_products=3000)
    dollar_cap = LenderProfile(name="Bank", tiers=[LenderTier(name="Cap", max_backend=2500)])
    percent_ok = LenderProfile(name="Bank", tiers=[LenderTier(name="Pct", max_backend_percent=15)])
    percent_low = LenderProfile(name="Bank", tiers=[LenderTier(name="Pct", max_backend_percent=10)])

    assert check_bank_eligibility(priced_vehicle, deal, dollar_cap).eligible is False
    assert check_bank_eligibility(priced_vehicle, deal, percent_ok).eligible is True
    assert check_bank_eligibility(priced_vehicle, deal, percent_low).eligible is False


def test_vehicle_type(priced_vehicle, customer_deal):
    used_only = LenderProfile(name="Bank", tiers=[LenderTier(name="Used", vehicle_type=VehicleType.USED)])
    any_type = LenderProfile(name="Bank", tiers=[LenderTier(name="All", vehicle_type=VehicleType.ALL)])
    used = dataclasses.replace(priced_vehicle, condition=VehicleType.USED)
    new = dataclasses.replace(priced_vehicle, condition=VehicleType.NEW)

    assert check_bank_eligibility(used, customer_deal, used_only).eligible is True
    assert check_bank_eligibility(new, customer_deal, used_only).eligible is False
    assert check_bank_eligibility(priced_vehicle, customer_deal, used_only).eligible is False
    assert check_bank_eligibility(new, customer_deal, any_type).eligible is True


def test_make_inclusion_and_exclusion(priced_vehicle, customer_deal):
    japanese = LenderProfile(
        name="Bank", tiers=[LenderTier(name="Imports", included_makes=["toyota", "Honda"])]
    )
    no_toyota = LenderProfile(name="Bank", tiers=[LenderTier(name="No T", excluded_makes=["TOYOTA"])])
    ford = dataclasses.replace(priced_vehicle, make="Ford")

    assert check_bank_eligibility(priced_vehicle, customer_deal, japanese).eligible is True
    assert check_bank_eligibility(ford, customer_deal, japanese).eligible is False
    assert check_bank_eligibility(priced_vehicle, customer_deal, no_toyota).eligible is False
    assert check_bank_eligibility(ford, customer_deal, no_toyota).eligible is True


def test_plain_deal_without_filters(priced_vehicle):
    """A deal with no customer facts can still match tiers without FICO bounds"""
    lender = LenderProfile(name="Bank", tiers=[LenderTier(name="Open", max_term=72)])
    result = check_bank_eligibility(priced_vehicle, DealData(loan_term=60), lender)

    assert result.eligible is True


@pytest.mark.parametrize(
    "low_field,high_field",
    [
        ("min_fico", "max_fico"),
        ("min_year", "max_year"),
        ("min_mileage", "max_mileage"),
        ("min_term", "max_term"),
        ("min_amount_financed", "max_amount_financed"),
    ],
)
def test_inverted_tier_bounds_raise(low_field, high_field):
    with pytest.raises(TierConfigurationError):
        LenderTier(name="Broken", **{low_field: 700, high_field: 600})


def test_tier_display_name():
    assert LenderTier(name="t1", tier_name="Gold").display_name == "Gold"
    assert LenderTier(name="t1").display_name == "t1"


def test_evaluate_lenders_preserves_order(priced_vehicle, customer_deal, test_bank):
    lenders = [
        test_bank,
        LenderProfile(name="Empty Bank", tiers=[]),
        LenderProfile(name="Open Bank", tiers=[LenderTier(name="Open")]),
    ]

    sequential = evaluate_lenders(priced_vehicle, customer_deal, lenders)
    parallel = evaluate_lenders(priced_vehicle, customer_deal, lenders, max_workers=4)

    assert [s.name for s in sequential] == ["Test Bank", "Empty Bank", "Open Bank"]
    assert [s.eligible for s in sequential] == [True, False, True]
    assert sequential == parallel


def test_sort_by_eligibility_is_stable():
    statuses = [
        LenderEligibilityStatus(name="A", eligible=False),
        LenderEligibilityStatus(name="B", eligible=True),
        LenderEligibilityStatus(name="C", eligible=False),
        LenderEligibilityStatus(name="D", eligible=True),
    ]

    assert [s.name for s in sort_by_eligibility(statuses)] == ["B", "D", "A", "C"]
