"""VIN format and check-digit validation

A VIN is 17 characters with no I, O, or Q. Position 9 is a check digit
computed from the other positions; many VINs on rate sheets carry typos
there, so a mismatch is reported as a warning rather than an error.
"""

import re
from typing import Optional

from dealdesk.domain.models import VinValidationResult

VIN_LENGTH = 17
CHECK_DIGIT_INDEX = 8

VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")

VIN_TRANSLITERATIONS = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
    **{str(digit): digit for digit in range(10)},
}

VIN_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)


def is_valid_vin_format(vin: str) -> bool:
    """17 characters, alphanumeric, no I/O/Q (case-insensitive)"""
    if not isinstance(vin, str):
        return False
    return bool(VIN_PATTERN.match(vin.upper()))


def calculate_vin_check_digit(vin: str) -> Optional[str]:
    """Expected check character for position 9, or None for a malformed VIN"""
    if not is_valid_vin_format(vin):
        return None

    total = sum(
        VIN_TRANSLITERATIONS[char] * weight
        for char, weight in zip(vin.upper(), VIN_WEIGHTS)
    )
    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def validate_vin_check_digit(vin: str) -> bool:
    if not is_valid_vin_format(vin):
        return False
    return calculate_vin_check_digit(vin) == vin.upper()[CHECK_DIGIT_INDEX]


def validate_vin(vin: str) -> VinValidationResult:
    """
    Full VIN validation with detailed results.

    The VIN is valid when its format is valid; a wrong check digit only
    adds a warning.
    """
    result = VinValidationResult()

    if not vin:
        result.errors.append("VIN is required")
        return result

    if not isinstance(vin, str):
        result.errors.append("VIN must be a string")
        return result

    normalized = vin.strip().upper()

    if len(normalized) != VIN_LENGTH:
        result.errors.append(f"VIN must be {VIN_LENGTH} characters (got {len(normalized)})")
        return result

    if re.search(r"[IOQ]", normalized):
        result.errors.append("VIN cannot contain letters I, O, or Q")
        return result

    if not is_valid_vin_format(normalized):
        result.errors.append("VIN contains invalid characters")
        return result

    result.format_valid = True
    result.checksum_valid = validate_vin_check_digit(normalized)

    if not result.checksum_valid:
        result.warnings.append("VIN check digit may be incorrect (position 9)")

    result.is_valid = result.format_valid
    return result


def is_valid_vin(vin: str) -> bool:
    """Format-only check for quick form validation"""
    return is_valid_vin_format(vin)


def is_valid_vin_strict(vin: str) -> bool:
    result = validate_vin(vin)
    return result.format_valid and result.checksum_valid
