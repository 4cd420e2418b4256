"""
Sea Less-than-Container-Load (SEA_LCL)

Billed per cubic meter of cargo in a shared container.
"""

from .base import PricingMode
from ..data.reference.rate_types import SEA_CBM


class SEA_LCL(PricingMode):
    """
    Sea LCL

    price = total_cbm * sell_price, floored at min_charge
    """

    name = "sea_lcl"
    label = "Sea LCL"

    rate_type = SEA_CBM
    billing_field = "total_cbm"

    @classmethod
    def calculation(cls, summary: dict, container: str | None) -> dict:
        return {
            "total_cbm": summary["total_cbm"],
            "total_weight": summary["actual_weight"],
            # Informational, never billed
            "sea_volumetric_weight": summary["sea_volumetric_weight"],
        }
