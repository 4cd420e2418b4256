"""
Error Taxonomy

Named failure conditions shared by the calculator and the quote workflow.

Every error carries a user-facing message (str(error)). The calling layer
decides how to surface it; nothing here is retried or silently defaulted.

    ValidationError     - caller input fails shape/positivity checks
    RateNotFoundError   - no priced agreement for the lane and rate type
    ConfigurationError  - agreement found but its pricing fields are unusable
    GuardViolation      - workflow event whose guard is unmet
"""


class FreightError(Exception):
    """Base class for all freight quoting errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FreightError, ValueError):
    """Caller-supplied input failed validation. Fix the input and retry."""


class RateNotFoundError(FreightError, LookupError):
    """No active, approved agreement exists for the requested lane."""

    def __init__(
        self,
        message: str,
        origin: str | None = None,
        destination: str | None = None,
        rate_type: str | None = None,
    ):
        super().__init__(message)
        self.origin = origin
        self.destination = destination
        self.rate_type = rate_type


class ConfigurationError(FreightError):
    """An agreement record has invalid or missing pricing fields."""

    def __init__(self, message: str, agreement_id: str | None = None):
        super().__init__(message)
        self.agreement_id = agreement_id


class GuardViolation(FreightError):
    """A state transition was attempted but its guard is not satisfied."""

    def __init__(self, message: str, event: str | None = None, state: str | None = None):
        super().__init__(message)
        self.event = event
        self.state = state


__all__ = [
    "FreightError",
    "ValidationError",
    "RateNotFoundError",
    "ConfigurationError",
    "GuardViolation",
]
