"""
Workflow States

Status values for the quote workflow, the partner quote record, the
shipment record, and document requests.

QUOTE STATES
------------
    estimated ──submit──> auto_accepted              (no delta, no documents)
        │
        └──submit──> partner_quote_submitted ──approve──> customer_approved
                            │
                            └──reject──> customer_rejected ──submit──> ...

customer_rejected loops back: the partner resubmits and the same
submission rules apply as from estimated.
"""

from enum import Enum


class QuoteState(str, Enum):
    ESTIMATED = "estimated"
    PARTNER_QUOTE_SUBMITTED = "partner_quote_submitted"
    CUSTOMER_APPROVED = "customer_approved"
    CUSTOMER_REJECTED = "customer_rejected"
    AUTO_ACCEPTED = "auto_accepted"


class QuoteStatus(str, Enum):
    """Status stored on a PartnerShippingQuote record."""

    SUBMITTED = "submitted"
    CUSTOMER_APPROVED = "customer_approved"
    CUSTOMER_REJECTED = "customer_rejected"
    AUTO_ACCEPTED = "auto_accepted"


class ShipmentStatus(str, Enum):
    PENDING_PARTNER_ACCEPTANCE = "pending_partner_acceptance"
    PENDING_CUSTOMER_APPROVAL = "pending_customer_approval"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


class DocumentStatus(str, Enum):
    PENDING = "pending"
    UPLOADED = "uploaded"


class Event(str, Enum):
    PARTNER_SUBMITS = "partner_submits"
    CUSTOMER_APPROVES = "customer_approves"
    CUSTOMER_REJECTS = "customer_rejects"


# Currency-unit granularity for "amount changed"
AMOUNT_EPSILON = 0.01

TERMINAL_STATES = (QuoteState.CUSTOMER_APPROVED, QuoteState.AUTO_ACCEPTED)


__all__ = [
    "QuoteState",
    "QuoteStatus",
    "ShipmentStatus",
    "DocumentStatus",
    "Event",
    "AMOUNT_EPSILON",
    "TERMINAL_STATES",
]
