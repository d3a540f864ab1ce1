"""Prometheus metrics for lender approval rates, deal LTVs, and request latency"""

from prometheus_client import Counter, Histogram

from dealdesk.domain.models import CalculatedVehicle, LenderEligibilityStatus, Sentinel, is_number

# Eligibility metrics
eligibility_counter = Counter(
    "dealdesk_eligibility_total",
    "Lender eligibility checks",
    ["lender", "outcome"],  # eligible | ineligible
)

# Calculator metrics
calculation_counter = Counter(
    "dealdesk_calculations_total",
    "Deals priced by the financial calculator",
)

sentinel_field_counter = Counter(
    "dealdesk_sentinel_fields_total",
    "Priced deal figures that came out Unavailable or ComputationError",
    ["field", "sentinel"],
)

otd_ltv_histogram = Histogram(
    "dealdesk_otd_ltv_percent",
    "OTD loan-to-value of priced deals",
    buckets=[80, 100, 110, 115, 120, 125, 130, 135, 150, 175, 200],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)

_PRICED_FIELDS = (
    "sales_tax",
    "base_out_the_door_price",
    "amount_to_finance",
    "front_end_ltv",
    "front_end_gross",
    "otd_ltv",
    "monthly_payment",
)


def record_calculation(vehicle: CalculatedVehicle) -> None:
    """Record one priced deal, counting figures that did not resolve to numbers"""
    calculation_counter.inc()

    for name in _PRICED_FIELDS:
        value = getattr(vehicle, name)
        if isinstance(value, Sentinel):
            sentinel_field_counter.labels(field=name, sentinel=value.name.lower()).inc()

    if is_number(vehicle.otd_ltv):
        otd_ltv_histogram.observe(vehicle.otd_ltv)


def record_eligibility(statuses: list[LenderEligibilityStatus]) -> None:
    for status in statuses:
        outcome = "eligible" if status.eligible else "ineligible"
        eligibility_counter.labels(lender=status.name, outcome=outcome).inc()
