"""
Quote Notifications

Messages sent when a quote changes hands. Built here, delivered by the
notification service outside this package.
"""

from .records import Notification, PartnerShippingQuote, Shipment


def quote_ready(shipment: Shipment, quote: PartnerShippingQuote) -> list[Notification]:
    """Tell the customer a partner quote is waiting for review."""
    if not shipment.customer_id:
        return []
    return [Notification(
        recipient_id=shipment.customer_id,
        title="Shipping Quote Ready",
        message=(
            f"Your shipping partner has submitted a quote for order {shipment.reference}. "
            "Please review and approve."
        ),
        reference_id=quote.id,
    )]


def quote_approved(shipment: Shipment, quote: PartnerShippingQuote) -> list[Notification]:
    """Tell the partner the customer approved."""
    if not quote.partner_user_id:
        return []
    return [Notification(
        recipient_id=quote.partner_user_id,
        title="Quote Approved",
        message=(
            f"Customer approved your quote for order {shipment.reference}. "
            "You can now proceed with delivery."
        ),
        reference_id=quote.id,
    )]


def quote_rejected(shipment: Shipment, quote: PartnerShippingQuote) -> list[Notification]:
    """Tell the partner the customer rejected and a new quote is needed."""
    if not quote.partner_user_id:
        return []
    return [Notification(
        recipient_id=quote.partner_user_id,
        title="Quote Rejected",
        message=(
            f"Customer rejected your quote for order {shipment.reference}. "
            "Please review and submit a new quote."
        ),
        reference_id=quote.id,
    )]


__all__ = [
    "quote_ready",
    "quote_approved",
    "quote_rejected",
]
