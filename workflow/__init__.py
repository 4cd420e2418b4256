"""
Quote Workflow

Lifecycle of a shipment's commercial terms: system estimate, partner
counter-quote, optional document exchange, customer decision.

Usage:
    from workflow import submit_partner_quote, approve_quote, Actor

    result = submit_partner_quote(shipment, Actor(user_id="partner-1"), 115.0,
                                  adjustment_reason="fuel surcharge")
"""

from .states import (
    QuoteState,
    QuoteStatus,
    ShipmentStatus,
    DocumentStatus,
    Event,
    AMOUNT_EPSILON,
    TERMINAL_STATES,
)
from .records import (
    Actor,
    DocumentRequest,
    PartnerShippingQuote,
    Shipment,
    Notification,
    WorkflowResult,
    amount_changed,
)
from .quote_workflow import (
    submit_partner_quote,
    approve_quote,
    reject_quote,
    upload_document,
    document_storage_path,
)

__all__ = [
    "QuoteState",
    "QuoteStatus",
    "ShipmentStatus",
    "DocumentStatus",
    "Event",
    "AMOUNT_EPSILON",
    "TERMINAL_STATES",
    "Actor",
    "DocumentRequest",
    "PartnerShippingQuote",
    "Shipment",
    "Notification",
    "WorkflowResult",
    "amount_changed",
    "submit_partner_quote",
    "approve_quote",
    "reject_quote",
    "upload_document",
    "document_storage_path",
]
