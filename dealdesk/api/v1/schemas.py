"""Pydantic schemas for API request/response validation

Request schemas are the boundary where untrusted JSON becomes the strict
domain types the calculator and matcher consume.
"""

from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from dealdesk.domain.models import (
    UNAVAILABLE,
    BookValueSource,
    CalculatedVehicle,
    CustomerFilters,
    DealAndFilters,
    DealData,
    DealerSettings,
    Figure,
    LenderEligibilityStatus,
    LenderProfile,
    LenderTier,
    LtvFlag,
    LtvThresholds,
    Sentinel,
    Vehicle,
    VehicleType,
    VinValidationResult,
)

# Vehicle figures arrive as a number, null, or the "N/A" marker
FigureIn = Union[float, Literal["N/A"], None]
FigureOut = Union[float, str]


def figure_in(value: FigureIn) -> Figure:
    if value is None or value == Sentinel.UNAVAILABLE.value:
        return UNAVAILABLE
    return value


def figure_out(value: Figure) -> FigureOut:
    return value.value if isinstance(value, Sentinel) else value


class VehicleSchema(BaseModel):
    """Vehicle as supplied by inventory"""

    model_config = ConfigDict(protected_namespaces=())

    vin: str = ""
    stock: str = ""
    description: str = ""
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None
    condition: Optional[VehicleType] = None
    model_year: FigureIn = None
    mileage: FigureIn = None
    price: FigureIn = None
    jd_power: FigureIn = Field(None, description="Trade book value")
    jd_power_retail: FigureIn = Field(None, description="Retail book value")
    unit_cost: FigureIn = None

    def to_domain(self) -> Vehicle:
        return Vehicle(
            vin=self.vin,
            stock=self.stock,
            description=self.description,
            make=self.make,
            model=self.model,
            trim=self.trim,
            condition=self.condition,
            model_year=figure_in(self.model_year),
            mileage=figure_in(self.mileage),
            price=figure_in(self.price),
            jd_power=figure_in(self.jd_power),
            jd_power_retail=figure_in(self.jd_power_retail),
            unit_cost=figure_in(self.unit_cost),
        )


class DealSchema(BaseModel):
    """Deal structure from the desk"""

    down_payment: float = 0.0
    trade_in_value: float = 0.0
    trade_in_payoff: float = 0.0
    backend_products: float = 0.0
    loan_term: Optional[int] = Field(None, description="Months; dealer default when omitted")
    interest_rate: Optional[float] = Field(None, description="APR, percent; dealer default when omitted")
    state_fees: Optional[float] = Field(None, description="Dealer default when omitted")
    notes: str = ""

    def to_domain(self, defaults: DealerSettings) -> DealData:
        return DealData(
            down_payment=self.down_payment,
            trade_in_value=self.trade_in_value,
            trade_in_payoff=self.trade_in_payoff,
            backend_products=self.backend_products,
            loan_term=self.loan_term if self.loan_term is not None else defaults.default_term,
            interest_rate=self.interest_rate if self.interest_rate is not None else defaults.default_apr,
            state_fees=self.state_fees if self.state_fees is not None else defaults.default_state_fees,
            notes=self.notes,
        )


class CustomerFiltersSchema(BaseModel):
    credit_score: Optional[int] = None
    monthly_income: Optional[float] = None

    def to_domain(self) -> CustomerFilters:
        return CustomerFilters(credit_score=self.credit_score, monthly_income=self.monthly_income)


class LtvThresholdsSchema(BaseModel):
    warn: float
    danger: float
    critical: float


class DealerSettingsSchema(BaseModel):
    """Dealer settings; omitted fields fall back to configured defaults"""

    doc_fee: Optional[float] = Field(None, ge=0)
    cvr_fee: Optional[float] = Field(None, ge=0)
    out_of_state_transit_fee: Optional[float] = Field(None, ge=0)
    default_state: Optional[str] = None
    custom_tax_rate: Optional[float] = Field(None, ge=0, le=100, description="Percent")
    ltv_thresholds: Optional[LtvThresholdsSchema] = None

    def to_domain(self, defaults: DealerSettings) -> DealerSettings:
        thresholds = (
            LtvThresholds(**self.ltv_thresholds.model_dump())
            if self.ltv_thresholds
            else defaults.ltv_thresholds
        )
        return DealerSettings(
            doc_fee=self.doc_fee if self.doc_fee is not None else defaults.doc_fee,
            cvr_fee=self.cvr_fee if self.cvr_fee is not None else defaults.cvr_fee,
            out_of_state_transit_fee=(
                self.out_of_state_transit_fee
                if self.out_of_state_transit_fee is not None
                else defaults.out_of_state_transit_fee
            ),
            default_state=(self.default_state or defaults.default_state).strip().upper(),
            custom_tax_rate=(
                self.custom_tax_rate if self.custom_tax_rate is not None else defaults.custom_tax_rate
            ),
            ltv_thresholds=thresholds,
            default_term=defaults.default_term,
            default_apr=defaults.default_apr,
            default_state_fees=defaults.default_state_fees,
        )


class LenderTierSchema(BaseModel):
    """One lender tier; unset bounds are unconstrained"""

    name: str = Field(..., min_length=1)
    tier_name: Optional[str] = None
    min_fico: Optional[int] = Field(None, ge=300, le=850)
    max_fico: Optional[int] = Field(None, ge=300, le=850)
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    max_age: Optional[int] = Field(None, ge=0, le=50)
    min_mileage: Optional[int] = Field(None, ge=0)
    max_mileage: Optional[int] = Field(None, ge=0)
    min_term: Optional[int] = Field(None, gt=0)
    max_term: Optional[int] = Field(None, gt=0)
    max_ltv: Optional[float] = Field(None, ge=0)
    front_end_ltv: Optional[float] = Field(None, ge=0)
    otd_ltv: Optional[float] = Field(None, ge=0)
    min_amount_financed: Optional[float] = Field(None, ge=0)
    max_amount_financed: Optional[float] = Field(None, ge=0)
    base_interest_rate: Optional[float] = Field(None, ge=0)
    rate_adder: Optional[float] = None
    max_backend: Optional[float] = Field(None, ge=0)
    max_backend_percent: Optional[float] = Field(None, ge=0, le=100)
    vehicle_type: Optional[VehicleType] = None
    included_makes: List[str] = []
    excluded_makes: List[str] = []

    def to_domain(self) -> LenderTier:
        """Raises TierConfigurationError for inverted bounds"""
        return LenderTier(**self.model_dump())

    @classmethod
    def from_domain(cls, tier: LenderTier) -> "LenderTierSchema":
        return cls.model_validate(tier, from_attributes=True)


class LenderProfileSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    id: Optional[str] = None
    active: bool = True
    book_value_source: BookValueSource = BookValueSource.TRADE
    min_income: Optional[float] = Field(None, ge=0)
    max_pti: Optional[float] = Field(None, ge=0, le=100)
    effective_date: Optional[str] = None
    tiers: List[LenderTierSchema] = []

    def to_domain(self) -> LenderProfile:
        return LenderProfile(
            name=self.name,
            id=self.id,
            active=self.active,
            book_value_source=self.book_value_source,
            min_income=self.min_income,
            max_pti=self.max_pti,
            effective_date=self.effective_date,
            tiers=[tier.to_domain() for tier in self.tiers],
        )


class DeskRequest(BaseModel):
    """Request body for POST /v1/desk"""

    vehicle: VehicleSchema
    deal: DealSchema = Field(default_factory=DealSchema)
    settings: Optional[DealerSettingsSchema] = None


class CalculatedVehicleSchema(BaseModel):
    """Priced vehicle; figures are numbers or "N/A" / "Error" """

    model_config = ConfigDict(protected_namespaces=())

    vin: str
    stock: str
    description: str
    make: Optional[str]
    model: Optional[str]
    condition: Optional[VehicleType]
    model_year: FigureOut
    mileage: FigureOut
    price: FigureOut
    jd_power: FigureOut
    jd_power_retail: FigureOut
    unit_cost: FigureOut
    sales_tax: FigureOut
    base_out_the_door_price: FigureOut
    front_end_amount_to_finance: FigureOut
    amount_to_finance: FigureOut
    front_end_ltv: FigureOut
    front_end_gross: FigureOut
    otd_ltv: FigureOut
    monthly_payment: FigureOut
    front_end_ltv_flag: LtvFlag
    otd_ltv_flag: LtvFlag

    @classmethod
    def from_domain(
        cls, vehicle: CalculatedVehicle, front_end_ltv_flag: LtvFlag, otd_ltv_flag: LtvFlag
    ) -> "CalculatedVehicleSchema":
        return cls(
            vin=vehicle.vin,
            stock=vehicle.stock,
            description=vehicle.description,
            make=vehicle.make,
            model=vehicle.model,
            condition=vehicle.condition,
            model_year=figure_out(vehicle.model_year),
            mileage=figure_out(vehicle.mileage),
            price=figure_out(vehicle.price),
            jd_power=figure_out(vehicle.jd_power),
            jd_power_retail=figure_out(vehicle.jd_power_retail),
            unit_cost=figure_out(vehicle.unit_cost),
            sales_tax=figure_out(vehicle.sales_tax),
            base_out_the_door_price=figure_out(vehicle.base_out_the_door_price),
            front_end_amount_to_finance=figure_out(vehicle.front_end_amount_to_finance),
            amount_to_finance=figure_out(vehicle.amount_to_finance),
            front_end_ltv=figure_out(vehicle.front_end_ltv),
            front_end_gross=figure_out(vehicle.front_end_gross),
            otd_ltv=figure_out(vehicle.otd_ltv),
            monthly_payment=figure_out(vehicle.monthly_payment),
            front_end_ltv_flag=front_end_ltv_flag,
            otd_ltv_flag=otd_ltv_flag,
        )


class DeskResponse(BaseModel):
    """Response for POST /v1/desk"""

    vehicle: CalculatedVehicleSchema


class LoanAmountRequest(BaseModel):
    """Request body for POST /v1/desk/loan-amount"""

    monthly_payment: float
    interest_rate: float
    loan_term: int


class LoanAmountResponse(BaseModel):
    principal: FigureOut


class EligibilityRequest(BaseModel):
    """Request body for POST /v1/eligibility"""

    vehicle: VehicleSchema
    deal: DealSchema = Field(default_factory=DealSchema)
    filters: CustomerFiltersSchema = Field(default_factory=CustomerFiltersSchema)
    settings: Optional[DealerSettingsSchema] = None
    lenders: List[LenderProfileSchema]
    eligible_first: bool = False


class EligibilityStatusSchema(BaseModel):
    name: str
    eligible: bool
    reasons: List[str]
    matched_tier: Optional[LenderTierSchema] = None

    @classmethod
    def from_domain(cls, status: LenderEligibilityStatus) -> "EligibilityStatusSchema":
        return cls(
            name=status.name,
            eligible=status.eligible,
            reasons=list(status.reasons),
            matched_tier=(
                LenderTierSchema.from_domain(status.matched_tier) if status.matched_tier else None
            ),
        )


class EligibilityResponse(BaseModel):
    """Response for POST /v1/eligibility"""

    vehicle: CalculatedVehicleSchema
    lenders: List[EligibilityStatusSchema]
    eligible_count: int


class VinResponse(BaseModel):
    """Response for GET /v1/vin/{vin}"""

    vin: str
    is_valid: bool
    format_valid: bool
    checksum_valid: bool
    warnings: List[str]
    errors: List[str]

    @classmethod
    def from_domain(cls, vin: str, result: VinValidationResult) -> "VinResponse":
        return cls(
            vin=vin,
            is_valid=result.is_valid,
            format_valid=result.format_valid,
            checksum_valid=result.checksum_valid,
            warnings=result.warnings,
            errors=result.errors,
        )


def combine_deal(
    deal: DealSchema, filters: CustomerFiltersSchema, defaults: DealerSettings
) -> DealAndFilters:
    return DealAndFilters.combine(deal.to_domain(defaults), filters.to_domain())
