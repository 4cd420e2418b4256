"""
Rate Agreements

An agreement prices one lane (origin, destination, rate type), optionally
for a single shipping partner. It is usable only while approved, active,
and inside its validity window.

Records arrive from the transport layer with numeric fields that may be
string-encoded ("4.00", "" for empty). coerce_agreement() is the single
boundary where they are parsed; nothing downstream sees raw values.

LOOKUP
------
AgreementBook holds agreements in a Polars DataFrame and returns the one
agreement for a lane:
    1. Filter by origin, destination, rate type
    2. Keep usable rows (approved, active, valid on the date)
    3. Partner-specific rows before global rows
    4. Most recent valid_from first
"""

import logging
import math
from collections.abc import Mapping, Iterable
from datetime import date, datetime, timezone
from pathlib import Path

import polars as pl
import pydantic
from pydantic import BaseModel, ConfigDict, field_validator

from shared.errors import ConfigurationError, GuardViolation, ValidationError

from .data.reference import DEFAULT_CURRENCY, RATE_TYPES


logger = logging.getLogger(__name__)


APPROVED = "approved"
PENDING_ADMIN = "pending_admin"
PENDING_PARTNER = "pending_partner"
REJECTED = "rejected"

APPROVAL_STATUSES = (APPROVED, PENDING_ADMIN, PENDING_PARTNER, REJECTED)

INVALID_SELL_PRICE = "Rate configuration error: Invalid or missing sell price"


# =============================================================================
# RECORD
# =============================================================================

class RateAgreement(BaseModel):
    """A priced lane record after boundary coercion."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    id: str | None = None
    partner_id: str | None = None
    origin_id: str | None = None
    origin_name: str | None = None
    destination_id: str | None = None
    destination_name: str | None = None
    rate_type: str
    currency: str = DEFAULT_CURRENCY

    buy_price: float | None = None
    sell_price: float | None = None
    margin_percent: float | None = None
    min_charge: float | None = None

    valid_from: date | None = None
    valid_to: date | None = None
    approval_status: str = APPROVED
    active: bool = True

    notes: str | None = None
    rejection_reason: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None

    @field_validator(
        "buy_price", "sell_price", "margin_percent", "min_charge",
        "valid_from", "valid_to", "partner_id", "notes",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("currency", mode="before")
    @classmethod
    def _default_currency(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_CURRENCY
        return value

    @property
    def is_partner_specific(self) -> bool:
        return self.partner_id is not None

    def is_usable(self, on_date: date | None = None) -> bool:
        """Approved, active, and inside the validity window on `on_date`."""
        on_date = on_date or date.today()
        if self.approval_status != APPROVED or not self.active:
            return False
        if self.valid_from is not None and on_date < self.valid_from:
            return False
        if self.valid_to is not None and on_date > self.valid_to:
            return False
        return True


def coerce_agreement(record: Mapping | RateAgreement) -> RateAgreement:
    """
    Parse a raw agreement record into a RateAgreement.

    Accepts joined relation shapes ({"origins": {"name": ...}}) for the
    place names. Unparseable pricing fields raise ConfigurationError.
    """
    if isinstance(record, RateAgreement):
        return record

    data = dict(record)
    for relation, field in (("origins", "origin_name"), ("destinations", "destination_name")):
        joined = data.pop(relation, None)
        if isinstance(joined, Mapping) and not data.get(field):
            data[field] = joined.get("name")

    try:
        return RateAgreement.model_validate(data)
    except pydantic.ValidationError as e:
        agreement_id = data.get("id")
        fields = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
        logger.error(
            "Agreement %s has unparseable fields: %s", agreement_id, ", ".join(fields)
        )
        raise ConfigurationError(
            f"Rate configuration error: invalid field(s) {', '.join(fields)}",
            agreement_id=str(agreement_id) if agreement_id is not None else None,
        ) from e


def require_valid_sell_price(agreement: RateAgreement) -> float:
    """
    Return the agreement's sell price, or raise ConfigurationError.

    Missing, non-finite, and non-positive prices are data-entry defects
    upstream and are logged for follow-up.
    """
    price = agreement.sell_price
    if price is None or not math.isfinite(price) or price <= 0:
        logger.error(
            "Agreement %s (%s %s -> %s) has invalid sell_price %r",
            agreement.id, agreement.rate_type,
            agreement.origin_name or agreement.origin_id,
            agreement.destination_name or agreement.destination_id,
            price,
        )
        raise ConfigurationError(INVALID_SELL_PRICE, agreement_id=agreement.id)
    return price


# =============================================================================
# CREATION AND APPROVAL
# =============================================================================

REQUIRED_FIELDS = ["origin_id", "destination_id", "rate_type", "buy_price", "sell_price", "valid_from"]


def validate_new_agreement(data: Mapping, by_partner: bool = False) -> RateAgreement:
    """
    Validate an agreement submitted through the admin or partner form.

    Admin-created agreements are approved on creation; partner-created
    ones wait for an admin (pending_admin).

    Raises:
        ValidationError: listing the first failed rule
    """
    data = dict(data)
    missing = [
        f for f in REQUIRED_FIELDS
        if data.get(f) is None or (isinstance(data.get(f), str) and not data[f].strip())
    ]
    if missing:
        raise ValidationError(f"Please fill in all required fields: {', '.join(missing)}")

    if data["rate_type"] not in RATE_TYPES:
        raise ValidationError(f"Unknown rate type '{data['rate_type']}'")

    buy_price = _parse_number(data["buy_price"])
    sell_price = _parse_number(data["sell_price"])
    margin_percent = _parse_number(data.get("margin_percent", 0) or 0)
    raw_min_charge = data.get("min_charge")
    has_min_charge = raw_min_charge is not None and str(raw_min_charge).strip() != ""
    min_charge = _parse_number(raw_min_charge) if has_min_charge else None

    if buy_price is None or buy_price <= 0:
        raise ValidationError("Buy price must be a positive number")
    if sell_price is None or sell_price <= 0:
        raise ValidationError("Sell price must be a positive number")
    if sell_price <= buy_price:
        raise ValidationError("Sell price must be greater than buy price")
    if margin_percent is None or margin_percent < 0:
        raise ValidationError("Margin must be a non-negative number")
    if has_min_charge and (min_charge is None or min_charge <= 0):
        raise ValidationError("Minimum charge must be a positive number")

    data.update(
        buy_price=buy_price,
        sell_price=sell_price,
        margin_percent=margin_percent,
        min_charge=min_charge,
        approval_status=PENDING_ADMIN if by_partner else APPROVED,
    )

    try:
        agreement = RateAgreement.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid agreement: {e.errors()[0]['msg']}") from e

    if agreement.valid_to is not None and agreement.valid_to < agreement.valid_from:
        raise ValidationError("Valid-to date must not be before valid-from date")

    return agreement


def _parse_number(value) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def approve_agreement(
    agreement: RateAgreement,
    actor_id: str,
    at: datetime | None = None,
) -> RateAgreement:
    """Pass an agreement through the approval gate."""
    if agreement.approval_status not in (PENDING_ADMIN, PENDING_PARTNER):
        raise GuardViolation(
            f"Agreement is {agreement.approval_status}, only pending agreements can be approved",
            event="approve_agreement",
            state=agreement.approval_status,
        )
    logger.info("Agreement %s approved by %s", agreement.id, actor_id)
    return agreement.model_copy(update={
        "approval_status": APPROVED,
        "approved_by": actor_id,
        "approved_at": at or datetime.now(timezone.utc),
        "rejection_reason": None,
    })


def reject_agreement(
    agreement: RateAgreement,
    actor_id: str,
    reason: str,
    at: datetime | None = None,
) -> RateAgreement:
    """Reject a pending agreement. A reason is required."""
    if not reason or not reason.strip():
        raise GuardViolation("Rejection reason is required", event="reject_agreement",
                             state=agreement.approval_status)
    if agreement.approval_status not in (PENDING_ADMIN, PENDING_PARTNER):
        raise GuardViolation(
            f"Agreement is {agreement.approval_status}, only pending agreements can be rejected",
            event="reject_agreement",
            state=agreement.approval_status,
        )
    logger.info("Agreement %s rejected by %s: %s", agreement.id, actor_id, reason)
    return agreement.model_copy(update={
        "approval_status": REJECTED,
        "rejection_reason": reason.strip(),
        "approved_by": actor_id,
        "approved_at": at or datetime.now(timezone.utc),
    })


# =============================================================================
# LOOKUP
# =============================================================================

AGREEMENT_COLUMNS = {
    "id": pl.Utf8,
    "partner_id": pl.Utf8,
    "origin_id": pl.Utf8,
    "origin_name": pl.Utf8,
    "destination_id": pl.Utf8,
    "destination_name": pl.Utf8,
    "rate_type": pl.Utf8,
    "currency": pl.Utf8,
    "buy_price": pl.Utf8,
    "sell_price": pl.Utf8,
    "margin_percent": pl.Utf8,
    "min_charge": pl.Utf8,
    "valid_from": pl.Date,
    "valid_to": pl.Date,
    "approval_status": pl.Utf8,
    "active": pl.Boolean,
    "notes": pl.Utf8,
}

TRUTHY = ["true", "t", "1", "yes", "y"]


def load_agreements(path: Path | str | None = None) -> "AgreementBook":
    """
    Load agreements from CSV.

    Defaults to the sample lanes in data/reference/agreements.csv.
    Every column is read as text; prices are coerced at lookup time.
    """
    if path is None:
        from .data import REFERENCE_DIR
        path = REFERENCE_DIR / "agreements.csv"

    df = pl.read_csv(path, infer_schema_length=0)
    return AgreementBook(df)


class AgreementBook:
    """In-memory agreement table implementing the lookup contract."""

    def __init__(self, agreements: pl.DataFrame | Iterable[Mapping]):
        rows = agreements.to_dicts() if isinstance(agreements, pl.DataFrame) else agreements
        self.df = pl.DataFrame(
            [_normalize_row(r) for r in rows],
            schema=AGREEMENT_COLUMNS,
        )

    def __len__(self) -> int:
        return len(self.df)

    def __call__(self, *args, **kwargs) -> RateAgreement | None:
        return self.find(*args, **kwargs)

    def find(
        self,
        origin_id: str,
        destination_id: str,
        rate_type: str,
        partner_id: str | None = None,
        on_date: date | None = None,
    ) -> RateAgreement | None:
        """
        Return the single usable agreement for a lane, or None.

        Args:
            origin_id: Origin place id
            destination_id: Destination place id
            rate_type: One of RATE_TYPES
            partner_id: Restrict to this partner's rates plus global rates
            on_date: Date the agreement must be valid on (default: today)
        """
        on_date = on_date or date.today()

        candidates = self.df.filter(
            (pl.col("origin_id") == str(origin_id)) &
            (pl.col("destination_id") == str(destination_id)) &
            (pl.col("rate_type") == rate_type) &
            (pl.col("approval_status") == APPROVED) &
            pl.col("active") &
            (pl.col("valid_from").is_null() | (pl.col("valid_from") <= on_date)) &
            (pl.col("valid_to").is_null() | (pl.col("valid_to") >= on_date))
        )

        if partner_id is not None:
            candidates = candidates.filter(
                pl.col("partner_id").is_null() | (pl.col("partner_id") == str(partner_id))
            )

        if candidates.is_empty():
            logger.debug("No usable agreement for %s -> %s (%s)", origin_id, destination_id, rate_type)
            return None

        best = (
            candidates
            .with_columns(pl.col("partner_id").is_null().alias("_is_global"))
            .sort(["_is_global", "valid_from"], descending=[False, True], nulls_last=True)
            .drop("_is_global")
            .row(0, named=True)
        )
        return coerce_agreement(best)


def _normalize_row(record: Mapping) -> dict:
    """Normalize one raw record to the AGREEMENT_COLUMNS types."""
    record = dict(record)
    for relation, field in (("origins", "origin_name"), ("destinations", "destination_name")):
        joined = record.get(relation)
        if isinstance(joined, Mapping) and not record.get(field):
            record[field] = joined.get("name")

    row = {}
    for col, dtype in AGREEMENT_COLUMNS.items():
        value = record.get(col)
        if dtype == pl.Date:
            row[col] = _parse_date(value)
        elif dtype == pl.Boolean:
            row[col] = _parse_bool(value)
        else:
            row[col] = _as_text(value)

    row["approval_status"] = row["approval_status"] or APPROVED
    return row


def _as_text(value) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_bool(value) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    return not text or text in TRUTHY


def _parse_date(value) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ConfigurationError(f"Rate configuration error: invalid date '{text}'") from None


__all__ = [
    "RateAgreement",
    "AgreementBook",
    "coerce_agreement",
    "require_valid_sell_price",
    "validate_new_agreement",
    "approve_agreement",
    "reject_agreement",
    "load_agreements",
    "APPROVED",
    "PENDING_ADMIN",
    "PENDING_PARTNER",
    "REJECTED",
    "APPROVAL_STATUSES",
    "INVALID_SELL_PRICE",
]
