"""
Shared

Error taxonomy and unit conversion used by the calculator and the workflow.
"""

from .errors import (
    FreightError,
    ValidationError,
    RateNotFoundError,
    ConfigurationError,
    GuardViolation,
)

__all__ = [
    "FreightError",
    "ValidationError",
    "RateNotFoundError",
    "ConfigurationError",
    "GuardViolation",
]
