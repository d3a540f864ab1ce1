"""Display formatting for money and percentages"""

from typing import Any

from dealdesk.domain.models import Sentinel, is_number


def format_currency_safe(value: Any, decimals: int = 2) -> str:
    """$1,234.56 for numbers; sentinels render as their label"""
    if isinstance(value, Sentinel):
        return value.value
    if not is_number(value):
        return Sentinel.UNAVAILABLE.value

    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def format_percentage_safe(value: Any, decimals: int = 1) -> str:
    if isinstance(value, Sentinel):
        return value.value
    if not is_number(value):
        return Sentinel.UNAVAILABLE.value
    return f"{value:.{decimals}f}%"
