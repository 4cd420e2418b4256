"""
Sea Full-Container-Load (SEA_FCL)

Flat rate per container. Items are not billed, so an empty item list is
allowed; when valid items are present the quote also reports how full the
container would be.
"""

from shared.errors import ValidationError

from .base import PricingMode
from ..data.reference.containers import CONTAINER_DIMENSIONS, SELECTABLE_CONTAINERS
from ..data.reference.rate_types import RATE_TYPE_LABELS
from ..utilization import container_utilization


class SEA_FCL(PricingMode):
    """
    Sea FCL

    The rate type is the selected container (SEA_CONTAINER_*).
    price = sell_price (no scaling, no min charge)
    """

    name = "sea_fcl"
    label = "Sea FCL"

    rate_type = None
    billing_field = None
    applies_min_charge = False

    requires_items = False
    requires_container = True

    @classmethod
    def validate_inputs(cls, summary: dict, container: str | None) -> None:
        if not container:
            raise ValidationError("Please select a container type")
        if container not in SELECTABLE_CONTAINERS:
            raise ValidationError(
                f"Unsupported container type '{container}'. "
                f"Expected one of: {', '.join(SELECTABLE_CONTAINERS)}"
            )

    @classmethod
    def resolve_rate_type(cls, container: str | None) -> str:
        return container

    @classmethod
    def lane_label(cls, rate_type: str) -> str:
        return f"{rate_type.replace('SEA_CONTAINER_', '')} container"

    @classmethod
    def calculation(cls, summary: dict, container: str | None) -> dict:
        dims = CONTAINER_DIMENSIONS[container]
        detail = {
            "container_type": container,
            "container_label": RATE_TYPE_LABELS[container],
            "capacity_cbm": dims["capacity_cbm"],
            "dimensions": f"{dims['length_m']}m × {dims['width_m']}m × {dims['height_m']}m",
        }
        if summary["item_count"] > 0:
            detail["utilization"] = container_utilization(summary, container)
        if summary.get("items_error"):
            detail["items_error"] = summary["items_error"]
        return detail
