"""GET /v1/vin/{vin} - VIN format and check-digit validation"""

from fastapi import APIRouter

from dealdesk.api.v1.schemas import VinResponse
from dealdesk.domain.vin import validate_vin

router = APIRouter()


@router.get("/vin/{vin}", response_model=VinResponse)
def check_vin(vin: str):
    """
    Validate a VIN.

    Always 200: a bad format is reported in `errors`, a wrong check digit
    only in `warnings`.
    """
    return VinResponse.from_domain(vin, validate_vin(vin))
