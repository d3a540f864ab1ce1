"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from dealdesk.config import settings
from dealdesk.domain.models import DealerSettings, LtvThresholds


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_dealer_settings() -> DealerSettings:
    """Dealer defaults from application configuration"""
    return DealerSettings(
        doc_fee=settings.default_doc_fee,
        cvr_fee=settings.default_cvr_fee,
        out_of_state_transit_fee=settings.default_out_of_state_transit_fee,
        default_state=settings.default_state,
        custom_tax_rate=settings.default_custom_tax_rate,
        ltv_thresholds=LtvThresholds(
            warn=settings.ltv_warn,
            danger=settings.ltv_danger,
            critical=settings.ltv_critical,
        ),
        default_term=settings.default_term,
        default_apr=settings.default_apr,
        default_state_fees=settings.default_state_fees,
    )


def get_max_workers() -> int:
    return settings.eligibility_max_workers
