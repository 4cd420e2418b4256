"""
Quote Records

Place identifies an origin or destination; Quote is the priced result of
one calculation.
"""

from pydantic import BaseModel, ConfigDict

from .agreements import RateAgreement


class Place(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    name: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


class Quote(BaseModel):
    """
    Computed commercial result for one request.

    total_price is never below agreement.min_charge for modes that apply
    the floor (see min_charge_applied).
    """

    mode: str
    rate_type: str
    agreement: RateAgreement
    calculation: dict
    total_price: float
    min_charge_applied: bool = False
    calculator_version: str

    @property
    def agreement_reference(self) -> str | None:
        return self.agreement.id

    @property
    def currency(self) -> str:
        return self.agreement.currency

    def to_record(self) -> dict:
        """Shape handed to the persistence layer when a request is submitted."""
        return {
            "agreement_reference": self.agreement_reference,
            "mode": self.mode,
            "rate_type": self.rate_type,
            "currency": self.currency,
            "calculation": dict(self.calculation),
            "totalPrice": self.total_price,
            "calculator_version": self.calculator_version,
        }


__all__ = [
    "Place",
    "Quote",
]
