"""
Quote Workflow

Partner counter-quotes against the system estimate, customer decisions, and
document uploads.

PIPELINE
--------
Each action follows the same steps:
    1. Validate caller input              -> ValidationError
    2. Build the candidate records (copies, inputs are never mutated)
    3. Resolve the transition             -> GuardViolation
    4. Apply the transition's side effects to the copies
    5. Return a WorkflowResult with any notifications to deliver

Nothing is written unless all steps succeed. Persisting the returned records
is the caller's job.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Iterable, Mapping

from shared.errors import GuardViolation, ValidationError

from .records import (
    Actor,
    DocumentRequest,
    PartnerShippingQuote,
    Shipment,
    WorkflowResult,
    amount_changed,
)
from .states import DocumentStatus, Event, QuoteStatus, QuoteState
from .transitions import Transition, TransitionContext, resolve

logger = logging.getLogger(__name__)

DOCUMENT_STORAGE_PREFIX = "quote-documents"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def document_storage_path(quote_id: str, document_id: str, file_name: str) -> str:
    """Object storage key for an uploaded document."""
    return f"{DOCUMENT_STORAGE_PREFIX}/{quote_id}/{document_id}/{file_name}"


# =============================================================================
# PARTNER ACTIONS
# =============================================================================

def submit_partner_quote(
    shipment: Shipment,
    actor: Actor,
    quoted_amount: float,
    adjustment_reason: str | None = None,
    document_requests: Iterable[DocumentRequest | Mapping] = (),
    storage_location: str | None = None,
    estimated_delivery_days: int | None = None,
    shipping_details: dict | None = None,
    quote_id: str | None = None,
    at: datetime | None = None,
) -> WorkflowResult:
    """
    Partner submits a quote for a shipment.

    With no amount change and no document requests the quote is accepted
    immediately; otherwise it waits for the customer.

    Args:
        shipment: Shipment in estimated or customer_rejected state
        actor: Partner user submitting the quote
        quoted_amount: Partner's amount, in the estimate's currency
        adjustment_reason: Required when the amount differs from the estimate
        document_requests: Documents the customer must supply
        storage_location: Where the goods are held
        estimated_delivery_days: Partner's delivery estimate
        shipping_details: Free-form partner notes
        quote_id: Id for the new quote record (generated if omitted)
        at: Submission time (defaults to now, UTC)

    Returns:
        WorkflowResult with the updated shipment, the new quote, and the
        customer notification when approval is needed
    """
    at = at or _now()
    quoted_amount = _validate_amount(quoted_amount)

    if amount_changed(shipment.estimated_amount, quoted_amount) \
            and not (adjustment_reason and adjustment_reason.strip()):
        raise ValidationError("Please provide a reason for the price adjustment")

    fields = dict(
        shipment_id=shipment.id,
        original_amount=shipment.estimated_amount,
        partner_quoted_amount=quoted_amount,
        adjustment_reason=adjustment_reason.strip() if adjustment_reason else None,
        storage_location=storage_location,
        estimated_delivery_days=estimated_delivery_days,
        shipping_details=shipping_details or {},
        partner_user_id=actor.user_id,
        submitted_at=at,
    )
    if quote_id:
        fields["id"] = quote_id
    quote = PartnerShippingQuote(**fields)

    quote = quote.model_copy(update={
        "document_requests": _build_document_requests(document_requests, quote.id),
    })

    return _fire(Event.PARTNER_SUBMITS, shipment, quote, actor, at)


def _validate_amount(amount) -> float:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise ValidationError("Please enter a valid quote amount") from None
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Please enter a valid quote amount")
    return value


def _build_document_requests(
    requests: Iterable[DocumentRequest | Mapping],
    quote_id: str,
) -> list[DocumentRequest]:
    built = []
    for i, request in enumerate(requests, start=1):
        if isinstance(request, DocumentRequest):
            data = request.model_dump()
        else:
            data = dict(request)

        document_type = str(data.get("document_type") or "").strip()
        if not document_type:
            raise ValidationError(f"Document request {i}: please specify the document type")

        data.update(
            document_type=document_type,
            quote_id=quote_id,
            status=DocumentStatus.PENDING,
            uploaded_file_path=None,
            uploaded_at=None,
        )
        built.append(DocumentRequest(**data))
    return built


# =============================================================================
# CUSTOMER ACTIONS
# =============================================================================

def approve_quote(
    shipment: Shipment,
    quote: PartnerShippingQuote,
    actor: Actor,
    notes: str | None = None,
    at: datetime | None = None,
) -> WorkflowResult:
    """
    Customer approves a submitted partner quote.

    Every required document must be uploaded first. On success the shipment
    moves to in_transit and the partner's amount becomes the final agreed
    amount.
    """
    at = at or _now()
    _check_current(shipment, quote, Event.CUSTOMER_APPROVES)
    quote = quote.model_copy(update={
        "customer_notes": notes or None,
        "customer_responded_at": at,
    })
    return _fire(Event.CUSTOMER_APPROVES, shipment, quote, actor, at)


def reject_quote(
    shipment: Shipment,
    quote: PartnerShippingQuote,
    actor: Actor,
    reason: str | None,
    at: datetime | None = None,
) -> WorkflowResult:
    """
    Customer rejects a submitted partner quote.

    A reason is required. The shipment returns to pending_partner_acceptance
    so the partner can submit a new quote.
    """
    at = at or _now()
    _check_current(shipment, quote, Event.CUSTOMER_REJECTS)
    quote = quote.model_copy(update={
        "customer_notes": reason.strip() if reason else None,
        "customer_responded_at": at,
    })
    return _fire(Event.CUSTOMER_REJECTS, shipment, quote, actor, at, reason=reason)


def upload_document(
    quote: PartnerShippingQuote,
    document_id: str,
    file_name: str,
    at: datetime | None = None,
) -> PartnerShippingQuote:
    """
    Record an uploaded file against a document request.

    Only allowed while the quote awaits the customer's decision.

    Returns:
        Copy of the quote with the request marked uploaded
    """
    at = at or _now()

    if quote.status != QuoteStatus.SUBMITTED:
        raise GuardViolation(
            f"Documents can only be uploaded while the quote awaits approval (status: {quote.status.value})",
            state=quote.status.value,
        )
    if not file_name or not file_name.strip():
        raise ValidationError("Please choose a file to upload")

    requests = []
    found = False
    for request in quote.document_requests:
        if request.id == document_id:
            found = True
            request = request.model_copy(update={
                "status": DocumentStatus.UPLOADED,
                "uploaded_file_path": document_storage_path(quote.id, document_id, file_name.strip()),
                "uploaded_at": at,
            })
        requests.append(request)

    if not found:
        raise ValidationError(f"Unknown document request: {document_id}")

    logger.info("Document %s uploaded for quote %s", document_id, quote.id)
    return quote.model_copy(update={"document_requests": requests})


# =============================================================================
# TRANSITION APPLICATION
# =============================================================================

def _check_current(shipment: Shipment, quote: PartnerShippingQuote, event: Event) -> None:
    """The customer can only decide on the shipment's current, undecided quote."""
    if quote.shipment_id != shipment.id:
        raise ValidationError(f"Quote {quote.id} does not belong to shipment {shipment.id}")

    if quote.id != shipment.partner_quote_id or quote.status != QuoteStatus.SUBMITTED:
        logger.warning(
            "%s refused for shipment %s: quote %s is %s, current quote is %s",
            event.value, shipment.id, quote.id, quote.status.value, shipment.partner_quote_id,
        )
        raise GuardViolation(
            "This quote is no longer awaiting your decision",
            event=event.value,
            state=quote.status.value,
        )


def _fire(
    event: Event,
    shipment: Shipment,
    quote: PartnerShippingQuote,
    actor: Actor,
    at: datetime,
    reason: str | None = None,
) -> WorkflowResult:
    ctx = TransitionContext(shipment=shipment, quote=quote, reason=reason)
    try:
        transition = resolve(event, ctx)
    except GuardViolation as e:
        logger.warning("%s refused for shipment %s: %s", event.value, shipment.id, e.message)
        raise

    result = _apply(transition, shipment, quote, at)
    logger.info(
        "Shipment %s: %s -> %s (%s, by %s)",
        shipment.id, shipment.quote_state.value, transition.target.value,
        transition.name, actor.user_id,
    )
    return result


def _apply(
    transition: type[Transition],
    shipment: Shipment,
    quote: PartnerShippingQuote,
    at: datetime,
) -> WorkflowResult:
    quote = quote.model_copy(update={"status": transition.quote_status})

    updates = {
        "status": transition.shipment_status,
        "quote_state": transition.target,
        "partner_quote_id": quote.id,
    }
    if transition.records_final_amount:
        updates["final_agreed_amount"] = quote.partner_quoted_amount
    if transition.target == QuoteState.CUSTOMER_APPROVED:
        updates["customer_approved_quote_at"] = at
    shipment = shipment.model_copy(update=updates)

    notifications = transition.notify(shipment, quote) if transition.notify else []
    return WorkflowResult(shipment=shipment, quote=quote, notifications=notifications)


__all__ = [
    "submit_partner_quote",
    "approve_quote",
    "reject_quote",
    "upload_document",
    "document_storage_path",
    "DOCUMENT_STORAGE_PREFIX",
]
