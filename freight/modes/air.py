"""
Air Freight (AIR)

Billed per kilogram of chargeable weight.
"""

from .base import PricingMode
from ..data.reference.rate_types import AIR_KG


class AIR(PricingMode):
    """
    Air Freight

    chargeable_weight = max(actual_weight, volumetric_weight)
    price = chargeable_weight * sell_price, floored at min_charge
    """

    name = "air"
    label = "Air Freight"

    rate_type = AIR_KG
    billing_field = "chargeable_weight"

    @classmethod
    def calculation(cls, summary: dict, container: str | None) -> dict:
        return {
            "actual_weight": summary["actual_weight"],
            "volumetric_weight": summary["volumetric_weight"],
            "chargeable_weight": summary["chargeable_weight"],
            "uses_volumetric_weight": summary["volumetric_weight"] > summary["actual_weight"],
        }
