"""
Workflow Records

Shapes the workflow reads and writes at the persistence boundary. The
storage layer owns the schema; these models only carry the fields the
transition rules need.

Records are treated as values: transitions return updated copies and never
mutate their inputs.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .states import (
    AMOUNT_EPSILON,
    DocumentStatus,
    QuoteState,
    QuoteStatus,
    ShipmentStatus,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def amount_changed(original: float, quoted: float) -> bool:
    """
    True if the quoted amount differs by more than AMOUNT_EPSILON.

    The difference is rounded first so a one-cent change stays within it.
    """
    return round(abs(quoted - original), 9) > AMOUNT_EPSILON


class Actor(BaseModel):
    """Who performs an action. Passed explicitly, never read from a session."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: str | None = None


class DocumentRequest(BaseModel):
    """A supporting document the partner asks the customer to upload."""

    id: str = Field(default_factory=_new_id)
    quote_id: str | None = None
    document_type: str
    description: str = ""
    is_required: bool = True
    status: DocumentStatus = DocumentStatus.PENDING
    uploaded_file_path: str | None = None
    uploaded_at: datetime | None = None

    @property
    def is_blocking(self) -> bool:
        return self.is_required and self.status == DocumentStatus.PENDING


class PartnerShippingQuote(BaseModel):
    """The partner's counter-offer against the system-computed amount."""

    id: str = Field(default_factory=_new_id)
    shipment_id: str
    original_amount: float
    partner_quoted_amount: float
    adjustment_reason: str | None = None
    storage_location: str | None = None
    estimated_delivery_days: int | None = None
    shipping_details: dict = Field(default_factory=dict)
    status: QuoteStatus = QuoteStatus.SUBMITTED
    partner_user_id: str | None = None
    submitted_at: datetime | None = None
    customer_notes: str | None = None
    customer_responded_at: datetime | None = None
    document_requests: list[DocumentRequest] = Field(default_factory=list)

    @property
    def amount_difference(self) -> float:
        return self.partner_quoted_amount - self.original_amount

    @property
    def has_adjustment(self) -> bool:
        return amount_changed(self.original_amount, self.partner_quoted_amount)

    @property
    def requires_customer_approval(self) -> bool:
        return self.has_adjustment or bool(self.document_requests)

    def missing_required_documents(self) -> list[DocumentRequest]:
        return [d for d in self.document_requests if d.is_blocking]


class Shipment(BaseModel):
    """The parts of a shipment the quote workflow reads and writes."""

    id: str
    tracking_number: str | None = None
    customer_id: str | None = None
    partner_id: str | None = None
    status: ShipmentStatus = ShipmentStatus.PENDING_PARTNER_ACCEPTANCE
    quote_state: QuoteState = QuoteState.ESTIMATED
    estimated_amount: float
    final_agreed_amount: float | None = None
    partner_quote_id: str | None = None
    customer_approved_quote_at: datetime | None = None

    @property
    def reference(self) -> str:
        return self.tracking_number or self.id


class Notification(BaseModel):
    """In-app notification for the transport layer to deliver."""

    recipient_id: str
    title: str
    message: str
    kind: str = "quote"
    reference_id: str | None = None


class WorkflowResult(BaseModel):
    """Updated records produced by one transition."""

    shipment: Shipment
    quote: PartnerShippingQuote
    notifications: list[Notification] = Field(default_factory=list)


__all__ = [
    "amount_changed",
    "Actor",
    "DocumentRequest",
    "PartnerShippingQuote",
    "Shipment",
    "Notification",
    "WorkflowResult",
]
