"""
Freight

Rate & dimensional calculator: converts cargo items into billable
quantities and prices them against a rate agreement.
"""

from .calculate_quote import calculate_quote, price_quote, supplement_items, summarize_items
from .agreements import AgreementBook, RateAgreement, load_agreements
from .items import ShipmentItem
from .quote import Place, Quote
from .version import VERSION

__all__ = [
    "calculate_quote",
    "price_quote",
    "supplement_items",
    "summarize_items",
    "AgreementBook",
    "RateAgreement",
    "load_agreements",
    "ShipmentItem",
    "Place",
    "Quote",
    "VERSION",
]
