"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class TierConfigurationError(DomainException):
    """Lender tier defines contradictory bounds (e.g. min_fico > max_fico)"""

    pass


class InvalidDealInputError(DomainException):
    """Deal or customer input failed boundary validation"""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        detail = "; ".join(f"{field}: {message}" for field, message in errors.items())
        super().__init__(f"Invalid deal input - {detail}")
