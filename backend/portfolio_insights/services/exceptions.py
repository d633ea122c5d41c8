# backend/portfolio_insights/services/exceptions.py
"""
Service layer exceptions.

The calculation core does not raise for routine data gaps (missing quotes,
missing FX rates, empty portfolios); those are reported through the
`excluded` and `warnings` fields of the results. These exceptions cover
invalid input, the opt-in strict FX policy, and failing collaborators.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidCurrencyError
    ├── FXRateError
    │   └── FXConversionError
    └── DataSourceError
"""


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when programmatic input validation fails.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidCurrencyError(ValidationError):
    """Raised when a currency code is not a 3-letter ISO 4217 code."""

    def __init__(self, currency: str, field: str = "currency") -> None:
        self.currency = currency
        super().__init__(
            f"Invalid currency: '{currency}'. Currency must be a 3-letter ISO code (e.g., USD, EUR)",
            field=field,
        )


# =============================================================================
# FX ERRORS
# =============================================================================


class FXRateError(ServiceError):
    """Base exception for FX rate problems."""


class FXConversionError(FXRateError):
    """
    Raised when an amount cannot be converted and the strict policy is active.

    Attributes:
        from_currency: Currency of the amount
        to_currency: Requested target currency
    """

    def __init__(self, from_currency: str, to_currency: str, reason: str | None = None) -> None:
        self.from_currency = from_currency
        self.to_currency = to_currency
        message = f"Cannot convert {from_currency} to {to_currency}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


# =============================================================================
# COLLABORATOR ERRORS
# =============================================================================


class DataSourceError(ServiceError):
    """
    Raised when an external collaborator (holdings, prices, FX) fails.

    Attributes:
        source: Name of the failing collaborator
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        self.source = source
        super().__init__(message)
