"""Field rules for desk inputs, shared by the form and the API boundary"""

from dataclasses import fields
from typing import Dict, Optional

from dealdesk.domain.exceptions import InvalidDealInputError
from dealdesk.domain.models import CustomerFilters, DealData

MAX_LOAN_TERM = 120
MAX_INTEREST_RATE = 50
MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850

NON_NEGATIVE_FIELDS = {
    "down_payment",
    "trade_in_value",
    "trade_in_payoff",
    "backend_products",
    "state_fees",
    "monthly_income",
    "max_price",
    "max_payment",
}


def validate_input(field_name: str, value: Optional[float]) -> Optional[str]:
    """
    Validate a single desk field.

    Returns an error message, or None when the value is acceptable.
    Empty values are allowed since they clear a filter.
    """
    if value is None:
        return None

    if field_name in NON_NEGATIVE_FIELDS:
        if value < 0:
            return "Value cannot be negative."

    elif field_name == "loan_term":
        if isinstance(value, bool) or value != int(value) or value <= 0:
            return "Term must be a positive whole number."
        if value > MAX_LOAN_TERM:
            return f"Term is unusually high (max {MAX_LOAN_TERM} mo)."

    elif field_name == "interest_rate":
        if value < 0:
            return "Interest rate cannot be negative."
        if value > MAX_INTEREST_RATE:
            return f"Interest rate seems high (max {MAX_INTEREST_RATE}%)."

    elif field_name == "credit_score":
        # 0 means "no score filter"
        if value == 0:
            return None
        if value != int(value):
            return "Score must be a whole number."
        if value < MIN_CREDIT_SCORE or value > MAX_CREDIT_SCORE:
            return f"Credit score must be between {MIN_CREDIT_SCORE} and {MAX_CREDIT_SCORE}."

    return None


def validate_deal(deal: DealData, filters: Optional[CustomerFilters] = None) -> Dict[str, str]:
    """Run every field rule; returns {field: message} for the failures"""
    errors = {}
    for source in (deal, filters):
        if source is None:
            continue
        for f in fields(source):
            value = getattr(source, f.name)
            if isinstance(value, str):
                continue
            message = validate_input(f.name, value)
            if message:
                errors[f.name] = message
    return errors


def ensure_valid_deal(deal: DealData, filters: Optional[CustomerFilters] = None) -> None:
    """
    Boundary check before pricing or matching.

    Raises:
        InvalidDealInputError: when any field rule fails
    """
    errors = validate_deal(deal, filters)
    if errors:
        raise InvalidDealInputError(errors)
