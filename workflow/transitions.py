"""
Quote Workflow Transitions

The transition table. Each row is a class: the event that triggers it, the
states it can fire from, its guard, and the state it leads to with the
shipment status written alongside.

RESOLUTION
----------
For an event in a given state, candidate transitions are checked in
priority order (1 = first). The first whose guard holds fires. If the event
has no row for the current state, or no candidate's guard holds, the
attempt raises GuardViolation and nothing is written.
"""

from abc import ABC
from dataclasses import dataclass
from typing import Callable

from shared.errors import GuardViolation

from . import notifications
from .records import PartnerShippingQuote, Shipment
from .states import Event, QuoteState, QuoteStatus, ShipmentStatus


@dataclass(frozen=True)
class TransitionContext:
    """Inputs a guard may look at."""

    shipment: Shipment
    quote: PartnerShippingQuote
    reason: str | None = None


# =============================================================================
# BASE CLASS
# =============================================================================

class Transition(ABC):
    """
    Base class for all transitions.

    Attributes:
        IDENTITY
            name            - Short code (e.g., "APPROVE")
            event           - Event that triggers it

        ROUTING
            sources         - States it can fire from
            target          - State it leads to
            priority        - Rank among transitions on the same event (1 = first)

        GUARD
            violation       - Message raised when the guard fails

        SIDE EFFECTS
            quote_status         - Status written to the partner quote
            shipment_status      - Status written to the shipment
            records_final_amount - Write partner_quoted_amount as final_agreed_amount
            notify               - Builds notifications for the new records
    """

    # -------------------------------------------------------------------------
    # IDENTITY
    # -------------------------------------------------------------------------
    name: str
    event: Event

    # -------------------------------------------------------------------------
    # ROUTING
    # -------------------------------------------------------------------------
    sources: tuple[QuoteState, ...]
    target: QuoteState
    priority: int = 1

    # -------------------------------------------------------------------------
    # GUARD
    # -------------------------------------------------------------------------
    violation: str | None = None

    # -------------------------------------------------------------------------
    # SIDE EFFECTS
    # -------------------------------------------------------------------------
    quote_status: QuoteStatus
    shipment_status: ShipmentStatus
    records_final_amount: bool = False
    notify: Callable | None = None

    # -------------------------------------------------------------------------
    # METHODS
    # -------------------------------------------------------------------------

    @classmethod
    def guard(cls, ctx: TransitionContext) -> bool:
        """
        True when the transition may fire.

        Default returns True. Override for guarded transitions.
        """
        return True


# =============================================================================
# TRANSITIONS
# =============================================================================

RESUBMITTABLE = (QuoteState.ESTIMATED, QuoteState.CUSTOMER_REJECTED)


class AUTO_ACCEPT(Transition):
    """Partner quote matches the estimate and asks for no documents."""

    name = "AUTO_ACCEPT"
    event = Event.PARTNER_SUBMITS

    sources = RESUBMITTABLE
    target = QuoteState.AUTO_ACCEPTED
    priority = 1

    quote_status = QuoteStatus.AUTO_ACCEPTED
    shipment_status = ShipmentStatus.IN_TRANSIT
    records_final_amount = True

    @classmethod
    def guard(cls, ctx: TransitionContext) -> bool:
        return not ctx.quote.requires_customer_approval


class SUBMIT_FOR_APPROVAL(Transition):
    """Amount changed or documents requested: the customer must decide."""

    name = "SUBMIT_FOR_APPROVAL"
    event = Event.PARTNER_SUBMITS

    sources = RESUBMITTABLE
    target = QuoteState.PARTNER_QUOTE_SUBMITTED
    priority = 2

    quote_status = QuoteStatus.SUBMITTED
    shipment_status = ShipmentStatus.PENDING_CUSTOMER_APPROVAL
    notify = staticmethod(notifications.quote_ready)

    @classmethod
    def guard(cls, ctx: TransitionContext) -> bool:
        return ctx.quote.requires_customer_approval


class APPROVE(Transition):
    """Customer accepts the partner quote once required documents are in."""

    name = "APPROVE"
    event = Event.CUSTOMER_APPROVES

    sources = (QuoteState.PARTNER_QUOTE_SUBMITTED,)
    target = QuoteState.CUSTOMER_APPROVED

    violation = "Please upload all required documents before approving"

    quote_status = QuoteStatus.CUSTOMER_APPROVED
    shipment_status = ShipmentStatus.IN_TRANSIT
    records_final_amount = True
    notify = staticmethod(notifications.quote_approved)

    @classmethod
    def guard(cls, ctx: TransitionContext) -> bool:
        return not ctx.quote.missing_required_documents()


class REJECT(Transition):
    """Customer rejects; the shipment goes back to the partner for re-quoting."""

    name = "REJECT"
    event = Event.CUSTOMER_REJECTS

    sources = (QuoteState.PARTNER_QUOTE_SUBMITTED,)
    target = QuoteState.CUSTOMER_REJECTED

    violation = "Please provide a reason for rejection"

    quote_status = QuoteStatus.CUSTOMER_REJECTED
    shipment_status = ShipmentStatus.PENDING_PARTNER_ACCEPTANCE
    notify = staticmethod(notifications.quote_rejected)

    @classmethod
    def guard(cls, ctx: TransitionContext) -> bool:
        return bool(ctx.reason and ctx.reason.strip())


# All transitions
ALL = [AUTO_ACCEPT, SUBMIT_FOR_APPROVAL, APPROVE, REJECT]


# =============================================================================
# HELPERS
# =============================================================================

def get_candidates(event: Event, state: QuoteState) -> list[type[Transition]]:
    """Transitions for an event that can fire from a state, sorted by priority."""
    return sorted(
        [t for t in ALL if t.event == event and state in t.sources],
        key=lambda t: t.priority,
    )


def resolve(event: Event, ctx: TransitionContext) -> type[Transition]:
    """
    Pick the transition that fires for an event.

    Raises:
        GuardViolation: no transition for the current state, or every
            candidate's guard failed
    """
    state = ctx.shipment.quote_state
    candidates = get_candidates(event, state)

    if not candidates:
        raise GuardViolation(
            f"Cannot {event.value.replace('_', ' ')} while quote is {state.value}",
            event=event.value,
            state=state.value,
        )

    for transition in candidates:
        if transition.guard(ctx):
            return transition

    message = next(
        (t.violation for t in candidates if t.violation),
        f"Guard failed for {event.value} in state {state.value}",
    )
    raise GuardViolation(message, event=event.value, state=state.value)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_transitions() -> None:
    """
    Validate transition table integrity.

    Raises ValueError if any configuration issues are found.
    Called at import time to fail fast on configuration errors.
    """
    errors = []
    names = [t.name for t in ALL]
    if len(set(names)) != len(names):
        errors.append("duplicate transition names in ALL")

    seen = set()
    for t in ALL:
        if not t.sources:
            errors.append(f"{t.name}: sources must not be empty")

        if t.target in t.sources:
            errors.append(f"{t.name}: target '{t.target.value}' is also a source")

        # Same event from the same state must be ordered unambiguously
        for state in t.sources:
            key = (t.event, state, t.priority)
            if key in seen:
                errors.append(f"{t.name}: duplicate priority {t.priority} for {t.event.value} from {state.value}")
            seen.add(key)

    # Every event/state pair with a single candidate needs a violation message
    for event in Event:
        for state in QuoteState:
            candidates = get_candidates(event, state)
            if len(candidates) == 1 and candidates[0].violation is None \
                    and "guard" in vars(candidates[0]):
                errors.append(f"{candidates[0].name}: guarded transition requires violation message")

    if errors:
        raise ValueError("Transition configuration errors:\n  " + "\n  ".join(errors))


# Run validation at import time
validate_transitions()

__all__ = [
    "TransitionContext",
    "Transition",
    "AUTO_ACCEPT",
    "SUBMIT_FOR_APPROVAL",
    "APPROVE",
    "REJECT",
    "ALL",
    "get_candidates",
    "resolve",
    "validate_transitions",
]
