"""Pytest fixtures for testing"""

import pytest
from fastapi.testclient import TestClient

from dealdesk.api.main import create_app
from dealdesk.domain.models import (
    BookValueSource,
    CalculatedVehicle,
    DealAndFilters,
    DealData,
    DealerSettings,
    LenderProfile,
    LenderTier,
    LtvThresholds,
    Vehicle,
)


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    return TestClient(create_app())


@pytest.fixture
def dealer_settings() -> DealerSettings:
    """Michigan dealer with $250 doc fee and $25 CVR fee"""
    return DealerSettings(
        doc_fee=250,
        cvr_fee=25,
        out_of_state_transit_fee=0,
        default_state="MI",
        custom_tax_rate=None,
        ltv_thresholds=LtvThresholds(warn=115, danger=125, critical=135),
        default_term=60,
        default_apr=7.99,
        default_state_fees=200,
    )


@pytest.fixture
def sample_vehicle() -> Vehicle:
    return Vehicle(
        vin="1HGCM82633A004352",
        stock="123",
        description="2023 Test Car",
        make="Honda",
        model_year=2023,
        mileage=10000,
        price=30000,
        jd_power=28000,
        jd_power_retail=32000,
        unit_cost=25000,
    )


@pytest.fixture
def sample_deal() -> DealData:
    """$30k cash-price deal at 5% for 60 months, no trade"""
    return DealData(
        down_payment=0,
        trade_in_value=0,
        trade_in_payoff=0,
        backend_products=0,
        loan_term=60,
        interest_rate=5,
        state_fees=200,
    )


@pytest.fixture
def priced_vehicle() -> CalculatedVehicle:
    """Already-priced 2021 Camry: $25k financed against $22k trade book"""
    return CalculatedVehicle(
        vin="TEST123",
        stock="123",
        description="2021 Toyota Camry",
        make="Toyota",
        model_year=2021,
        mileage=25000,
        price=25000,
        jd_power=22000,
        jd_power_retail=24000,
        unit_cost=20000,
        base_out_the_door_price=27000,
        sales_tax=1500,
        front_end_amount_to_finance=25000,
        amount_to_finance=25000,
        front_end_ltv=113.6,
        front_end_gross=5000,
        otd_ltv=113.6,
        monthly_payment=450,
    )


@pytest.fixture
def customer_deal() -> DealAndFilters:
    return DealAndFilters(
        down_payment=2000,
        loan_term=60,
        interest_rate=6.99,
        state_fees=200,
        credit_score=720,
        monthly_income=5000,
    )


@pytest.fixture
def test_bank() -> LenderProfile:
    """Two-tier trade-book lender, most restrictive tier first"""
    return LenderProfile(
        id="test-lender",
        name="Test Bank",
        book_value_source=BookValueSource.TRADE,
        tiers=[
            LenderTier(
                name="Prime",
                min_fico=700,
                max_fico=850,
                max_ltv=125,
                max_term=72,
                min_year=2018,
                max_mileage=100000,
            ),
            LenderTier(
                name="Near Prime",
                min_fico=600,
                max_fico=699,
                max_ltv=110,
                max_term=60,
                min_year=2019,
                max_mileage=80000,
            ),
        ],
    )
