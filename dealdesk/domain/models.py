"""Domain models - pure Python dataclasses representing desking entities"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union

from dealdesk.domain.exceptions import TierConfigurationError


class Sentinel(Enum):
    """Non-numeric outcome of a figure on a priced deal"""

    UNAVAILABLE = "N/A"  # source data absent
    COMPUTATION_ERROR = "Error"  # arithmetic has no defined result


UNAVAILABLE = Sentinel.UNAVAILABLE
COMPUTATION_ERROR = Sentinel.COMPUTATION_ERROR

# A figure is either a real number or one of the two sentinels, never both
Figure = Union[float, Sentinel]


def is_number(value: object) -> bool:
    """True for finite int/float values; bools and sentinels are not numbers"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class BookValueSource(str, Enum):
    """Which book value a lender measures LTV against"""

    TRADE = "Trade"
    RETAIL = "Retail"


class VehicleType(str, Enum):
    NEW = "new"
    USED = "used"
    CERTIFIED = "certified"
    ALL = "all"


class LtvFlag(str, Enum):
    """Display band for an LTV figure"""

    OK = "ok"
    WARN = "warn"
    DANGER = "danger"
    CRITICAL = "critical"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class Vehicle:
    """Inventory unit with identifying and valuation facts"""

    vin: str = ""
    stock: str = ""
    description: str = ""
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    condition: Optional[VehicleType] = None
    model_year: Figure = UNAVAILABLE
    mileage: Figure = UNAVAILABLE
    price: Figure = UNAVAILABLE
    jd_power: Figure = UNAVAILABLE  # trade book value
    jd_power_retail: Figure = UNAVAILABLE  # retail book value
    unit_cost: Figure = UNAVAILABLE


@dataclass(frozen=True)
class CalculatedVehicle(Vehicle):
    """Vehicle extended with the priced deal figures.

    Built fresh on every recalculation and never mutated.
    """

    sales_tax: Figure = UNAVAILABLE
    base_out_the_door_price: Figure = UNAVAILABLE
    front_end_amount_to_finance: Figure = UNAVAILABLE
    amount_to_finance: Figure = UNAVAILABLE
    front_end_ltv: Figure = UNAVAILABLE
    front_end_gross: Figure = UNAVAILABLE
    otd_ltv: Figure = UNAVAILABLE
    monthly_payment: Figure = UNAVAILABLE


@dataclass(frozen=True)
class DealData:
    """Deal structure entered on the desk"""

    down_payment: float = 0.0
    trade_in_value: float = 0.0
    trade_in_payoff: float = 0.0
    backend_products: float = 0.0
    loan_term: int = 60
    interest_rate: float = 0.0  # APR, percent
    state_fees: float = 0.0
    notes: str = ""


@dataclass(frozen=True)
class CustomerFilters:
    """Customer facts evaluated against lender tiers"""

    credit_score: Optional[int] = None
    monthly_income: Optional[float] = None


@dataclass(frozen=True)
class DealAndFilters(DealData):
    """Deal structure combined with the customer's credit facts"""

    credit_score: Optional[int] = None
    monthly_income: Optional[float] = None

    @classmethod
    def combine(cls, deal: DealData, filters: CustomerFilters) -> "DealAndFilters":
        return cls(
            down_payment=deal.down_payment,
            trade_in_value=deal.trade_in_value,
            trade_in_payoff=deal.trade_in_payoff,
            backend_products=deal.backend_products,
            loan_term=deal.loan_term,
            interest_rate=deal.interest_rate,
            state_fees=deal.state_fees,
            notes=deal.notes,
            credit_score=filters.credit_score,
            monthly_income=filters.monthly_income,
        )


@dataclass(frozen=True)
class LtvThresholds:
    """LTV percentages used only for display flagging"""

    warn: float = 115.0
    danger: float = 125.0
    critical: float = 135.0


@dataclass(frozen=True)
class DealerSettings:
    """Dealer-level pricing configuration"""

    doc_fee: float = 0.0
    cvr_fee: float = 0.0
    out_of_state_transit_fee: float = 0.0
    default_state: str = "MI"
    custom_tax_rate: Optional[float] = None  # percent, overrides the state table
    ltv_thresholds: LtvThresholds = field(default_factory=LtvThresholds)
    default_term: int = 60
    default_apr: float = 0.0
    default_state_fees: float = 0.0


# (min field, max field) pairs that must not be inverted on a tier
_TIER_RANGES: Tuple[Tuple[str, str], ...] = (
    ("min_fico", "max_fico"),
    ("min_year", "max_year"),
    ("min_mileage", "max_mileage"),
    ("min_term", "max_term"),
    ("min_amount_financed", "max_amount_financed"),
)


@dataclass
class LenderTier:
    """One credit bracket of a lender program. Unset bounds are unconstrained."""

    name: str
    tier_name: Optional[str] = None
    min_fico: Optional[int] = None
    max_fico: Optional[int] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    max_age: Optional[int] = None  # years, relative to the reference year
    min_mileage: Optional[int] = None
    max_mileage: Optional[int] = None
    min_term: Optional[int] = None
    max_term: Optional[int] = None
    max_ltv: Optional[float] = None
    front_end_ltv: Optional[float] = None
    otd_ltv: Optional[float] = None
    min_amount_financed: Optional[float] = None
    max_amount_financed: Optional[float] = None
    base_interest_rate: Optional[float] = None
    rate_adder: Optional[float] = None
    max_backend: Optional[float] = None
    max_backend_percent: Optional[float] = None
    vehicle_type: Optional[VehicleType] = None
    included_makes: List[str] = field(default_factory=list)
    excluded_makes: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        for low_name, high_name in _TIER_RANGES:
            low = getattr(self, low_name)
            high = getattr(self, high_name)
            if low is not None and high is not None and low > high:
                raise TierConfigurationError(
                    f"Tier '{self.name}': {low_name} ({low}) is greater than {high_name} ({high})"
                )

    @property
    def display_name(self) -> str:
        return self.tier_name or self.name


@dataclass
class LenderProfile:
    """Named lender with lender-level limits and ordered tiers"""

    name: str
    tiers: List[LenderTier] = field(default_factory=list)
    id: Optional[str] = None
    active: bool = True
    book_value_source: BookValueSource = BookValueSource.TRADE
    min_income: Optional[float] = None
    max_pti: Optional[float] = None
    effective_date: Optional[str] = None


@dataclass
class LenderEligibilityStatus:
    """Outcome of matching one deal against one lender"""

    name: str
    eligible: bool
    reasons: List[str] = field(default_factory=list)
    matched_tier: Optional[LenderTier] = None


@dataclass
class VinValidationResult:
    """Detailed VIN check; a checksum mismatch is only a warning"""

    is_valid: bool = False
    format_valid: bool = False
    checksum_valid: bool = False
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
