"""
Pricing Modes

One class per shipping mode. calculate_quote() selects the mode once with
get_mode() and delegates every mode-specific decision to it.
"""

from shared.errors import ValidationError

from .base import PricingMode
from .air import AIR
from .sea_lcl import SEA_LCL
from .sea_fcl import SEA_FCL
from ..data.reference.rate_types import RATE_TYPES


# All modes
ALL = [AIR, SEA_LCL, SEA_FCL]

BY_NAME = {m.name: m for m in ALL}

MODE_NAMES = tuple(BY_NAME)


# =============================================================================
# HELPERS
# =============================================================================

def get_mode(name: str) -> type[PricingMode]:
    """Get the pricing mode class for a mode discriminator."""
    try:
        return BY_NAME[name]
    except KeyError:
        raise ValidationError(
            f"Unknown shipping mode '{name}'. Expected one of: {', '.join(MODE_NAMES)}"
        ) from None


# =============================================================================
# VALIDATION
# =============================================================================

def validate_modes() -> None:
    """
    Validate pricing mode configuration integrity.

    Raises ValueError if any configuration issues are found.
    Called at import time to fail fast on configuration errors.
    """
    errors = []

    if len(BY_NAME) != len(ALL):
        errors.append("duplicate mode names in ALL")

    for m in ALL:
        # Fixed rate type must be a known one; container modes resolve per quote
        if m.rate_type is None and not m.requires_container:
            errors.append(f"{m.name}: rate_type=None requires requires_container=True")
        if m.rate_type is not None and m.rate_type not in RATE_TYPES:
            errors.append(f"{m.name}: unknown rate_type '{m.rate_type}'")

        # Scaled modes need items to scale by
        if m.billing_field is not None and not m.requires_items:
            errors.append(f"{m.name}: billing_field requires requires_items=True")

        # Flat modes never apply a min charge
        if m.billing_field is None and m.applies_min_charge:
            errors.append(f"{m.name}: flat pricing should not apply min charge")

    if errors:
        raise ValueError("Pricing mode configuration errors:\n  " + "\n  ".join(errors))


# Run validation at import time
validate_modes()

__all__ = [
    "PricingMode",
    "AIR",
    "SEA_LCL",
    "SEA_FCL",
    "ALL",
    "BY_NAME",
    "MODE_NAMES",
    "get_mode",
    "validate_modes",
]
