"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from pythonjsonlogger import jsonlogger

from dealdesk.domain.models import CalculatedVehicle, LenderEligibilityStatus, Sentinel


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args: Any, service_name: str = "dealdesk-gateway", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "dealdesk-gateway") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def _figure(value: Any) -> Any:
    return value.value if isinstance(value, Sentinel) else value


def log_desk_calculation(request_id: str, vehicle: CalculatedVehicle, duration_ms: float) -> None:
    """Log one priced deal"""
    logging.info(
        "Deal priced",
        extra={
            "request_id": request_id,
            "step": "desk_calculation",
            "vin": vehicle.vin,
            "amount_to_finance": _figure(vehicle.amount_to_finance),
            "otd_ltv": _figure(vehicle.otd_ltv),
            "monthly_payment": _figure(vehicle.monthly_payment),
            "duration_ms": duration_ms,
        },
    )


def log_eligibility(
    request_id: str,
    vin: str,
    statuses: List[LenderEligibilityStatus],
    duration_ms: float,
) -> None:
    """Log lender matching outcome for analysis"""
    logging.info(
        "Eligibility completed",
        extra={
            "request_id": request_id,
            "step": "eligibility_complete",
            "vin": vin,
            "lenders_checked": len(statuses),
            "eligible_lenders": [s.name for s in statuses if s.eligible],
            "duration_ms": duration_ms,
        },
    )
