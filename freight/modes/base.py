"""
Pricing Mode Base Class

One subclass per shipping mode. The mode is selected once per quote and
owns everything that differs between modes: which rate type to look up,
what quantity is billed, whether the min charge floor applies, and which
figures go into the calculation detail.
"""

from abc import ABC

from shared.errors import ValidationError

from ..agreements import RateAgreement


class PricingMode(ABC):
    """
    Base class for all pricing modes.

    Attributes:
        IDENTITY
            name                - Mode discriminator ("air", "sea_lcl", "sea_fcl")
            label               - Human-readable name used in messages

        RATE LOOKUP
            rate_type           - Agreement rate type (None if chosen per quote)

        BILLING
            billing_field       - Summary field billed against (None = flat)
            applies_min_charge  - True if agreement.min_charge floors the price

        INPUT REQUIREMENTS
            requires_items      - At least one valid item must be present
            requires_container  - A container type must be selected
    """

    # -------------------------------------------------------------------------
    # IDENTITY
    # -------------------------------------------------------------------------
    name: str
    label: str

    # -------------------------------------------------------------------------
    # RATE LOOKUP
    # -------------------------------------------------------------------------
    rate_type: str | None = None

    # -------------------------------------------------------------------------
    # BILLING
    # -------------------------------------------------------------------------
    billing_field: str | None = None
    applies_min_charge: bool = True

    # -------------------------------------------------------------------------
    # INPUT REQUIREMENTS
    # -------------------------------------------------------------------------
    requires_items: bool = True
    requires_container: bool = False

    # -------------------------------------------------------------------------
    # METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def validate_inputs(cls, summary: dict, container: str | None) -> None:
        """Raise ValidationError if the inputs cannot be priced in this mode."""
        if cls.requires_items and summary["item_count"] == 0:
            raise ValidationError("Please add at least one complete item")

    @classmethod
    def resolve_rate_type(cls, container: str | None) -> str:
        """Rate type to look up for this quote."""
        return cls.rate_type

    @classmethod
    def lane_label(cls, rate_type: str) -> str:
        """Mode name used in 'no active rate' messages."""
        return cls.label

    @classmethod
    def billing_quantity(cls, summary: dict) -> float:
        """Quantity multiplied by the agreement's sell price."""
        if cls.billing_field is None:
            return 1.0
        return summary[cls.billing_field]

    @classmethod
    def price(cls, summary: dict, agreement: RateAgreement, sell_price: float) -> tuple[float, bool]:
        """
        Compute the total price.

        Returns:
            (total_price, min_charge_applied)
        """
        total = cls.billing_quantity(summary) * sell_price

        min_charge = agreement.min_charge
        if cls.applies_min_charge and min_charge and total < min_charge:
            return min_charge, True
        return total, False

    @classmethod
    def calculation(cls, summary: dict, container: str | None) -> dict:
        """Mode-specific calculation detail for the quote."""
        return {}
