"""
Freight Quote Calculator

Items in, Quote out. Items can come from any source (form records, CSV,
manual creation) as long as they carry the required fields. Internally the
items become a DataFrame that is supplemented column by column, summarized,
and priced against one rate agreement.

REQUIRED ITEM FIELDS
--------------------
    length, width, height   - Dimensions in dimension_unit
    dimension_unit          - "cm", "m", or "in"
    weight                  - Weight per unit in weight_unit
    weight_unit             - "kg" or "lb"
    quantity                - Units of this item (>= 1)

OUTPUT COLUMNS ADDED
--------------------
    supplement_items() adds:
        - length_cm, width_cm, height_cm, weight_kg_per_unit
        - volume_cm3, cbm_per_unit, total_cbm, total_ft3
        - total_weight_kg
        - volumetric_weight_kg_per_unit, total_volumetric_weight
        - sea_volumetric_weight_kg (informational)
        - is_valid

PRICING
-------
    air      chargeable_weight * sell_price, floored at min_charge
    sea_lcl  total_cbm * sell_price, floored at min_charge
    sea_fcl  sell_price (flat per container)

USAGE
-----
    from freight.calculate_quote import calculate_quote
    from freight.agreements import load_agreements

    book = load_agreements()
    quote = calculate_quote(items, "air", origin, destination, book)
"""

import logging
from collections.abc import Callable, Iterable, Mapping

import polars as pl

from shared.errors import RateNotFoundError, ValidationError
from shared.units import CBM_TO_FT3, check_units, to_cm_expr, to_kg_expr

from .agreements import RateAgreement, coerce_agreement, require_valid_sell_price
from .data import CBM_DIVISOR, IATA_DIVISOR, SEA_VOLUMETRIC_KG_PER_CBM
from .items import ITEM_SCHEMA, ShipmentItem, items_to_frame
from .modes import PricingMode, get_mode
from .quote import Place, Quote
from .version import VERSION


logger = logging.getLogger(__name__)

MEASURE_COLUMNS = ["length", "width", "height", "weight"]

EMPTY_SUMMARY = {
    "item_count": 0,
    "total_quantity": 0,
    "actual_weight": 0.0,
    "volumetric_weight": 0.0,
    "total_cbm": 0.0,
    "total_ft3": 0.0,
    "sea_volumetric_weight": 0.0,
    "chargeable_weight": 0.0,
}

AgreementLookup = Callable[[str, str, str], RateAgreement | Mapping | None]


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def calculate_quote(
    items: Iterable[ShipmentItem | Mapping] | pl.DataFrame,
    mode: str,
    origin: Place | Mapping | str,
    destination: Place | Mapping | str,
    find_agreement: AgreementLookup,
    container: str | None = None,
) -> Quote:
    """
    Calculate a quote for a set of items on a lane.

    This is the main entry point. Validates the inputs for the mode, looks
    up the single active agreement, and prices the items against it.

    Args:
        items: Shipment items (records, ShipmentItem, or item DataFrame)
        mode: "air", "sea_lcl", or "sea_fcl"
        origin: Origin place (id and display name)
        destination: Destination place (id and display name)
        find_agreement: Lookup (origin_id, destination_id, rate_type) -> agreement or None
        container: Container type for sea_fcl (SEA_CONTAINER_20/40/40HC)

    Returns:
        Quote

    Raises:
        ValidationError: no valid items, no/unsupported container, bad unit
        RateNotFoundError: no agreement for the lane and rate type
        ConfigurationError: agreement has an invalid sell price
    """
    origin = _as_place(origin)
    destination = _as_place(destination)

    pricing_mode, summary = _prepare(items, mode, container)
    rate_type = pricing_mode.resolve_rate_type(container)

    record = find_agreement(origin.id, destination.id, rate_type)
    if record is None:
        logger.warning(
            "No active %s rate for %s (%s) -> %s (%s)",
            rate_type, origin.display_name, origin.id, destination.display_name, destination.id,
        )
        raise RateNotFoundError(
            f"No active rate found for {pricing_mode.lane_label(rate_type)} "
            f"from {origin.display_name} to {destination.display_name}",
            origin=origin.display_name,
            destination=destination.display_name,
            rate_type=rate_type,
        )

    agreement = coerce_agreement(record)
    if agreement.origin_name is None or agreement.destination_name is None:
        agreement = agreement.model_copy(update={
            "origin_name": agreement.origin_name or origin.name,
            "destination_name": agreement.destination_name or destination.name,
        })

    return _price(pricing_mode, summary, container, agreement, rate_type)


def price_quote(
    items: Iterable[ShipmentItem | Mapping] | pl.DataFrame,
    mode: str,
    agreement: RateAgreement | Mapping,
    container: str | None = None,
) -> Quote:
    """
    Price items against an agreement that is already in hand.

    Same validation and pricing as calculate_quote(), without the lookup.
    """
    pricing_mode, summary = _prepare(items, mode, container)
    rate_type = pricing_mode.resolve_rate_type(container)
    return _price(pricing_mode, summary, container, coerce_agreement(agreement), rate_type)


def _as_place(place: Place | Mapping | str) -> Place:
    if isinstance(place, str):
        return Place(id=place)
    return Place.model_validate(place)


def _prepare(items, mode: str, container: str | None) -> tuple[type[PricingMode], dict]:
    """
    Select the mode, supplement and summarize items, validate inputs.

    Modes that do not bill items (FCL) check the container first; bad item
    data there only drops the utilization detail and is reported under
    items_error instead of failing the quote.
    """
    pricing_mode = get_mode(mode)

    if pricing_mode.requires_items:
        summary = _summarize(items)
    else:
        pricing_mode.validate_inputs(EMPTY_SUMMARY, container)
        try:
            summary = _summarize(items)
        except ValidationError as e:
            logger.warning("Item detail skipped for %s quote: %s", pricing_mode.name, e.message)
            summary = dict(EMPTY_SUMMARY, items_error=e.message)

    pricing_mode.validate_inputs(summary, container)
    return pricing_mode, summary


def _summarize(items) -> dict:
    df = items if isinstance(items, pl.DataFrame) else items_to_frame(items)
    return summarize_items(supplement_items(df))


def _price(
    pricing_mode: type[PricingMode],
    summary: dict,
    container: str | None,
    agreement: RateAgreement,
    rate_type: str,
) -> Quote:
    """Apply the agreement's sell price and build the Quote."""
    sell_price = require_valid_sell_price(agreement)
    total_price, min_charge_applied = pricing_mode.price(summary, agreement, sell_price)

    calculation = pricing_mode.calculation(summary, container)
    calculation.update(
        billing_quantity=pricing_mode.billing_quantity(summary),
        sell_price=sell_price,
        min_charge=agreement.min_charge if pricing_mode.applies_min_charge else None,
        min_charge_applied=min_charge_applied,
    )

    logger.info(
        "Quoted %s %s via agreement %s: %.3f %s%s",
        pricing_mode.name, rate_type, agreement.id, total_price, agreement.currency,
        " (min charge)" if min_charge_applied else "",
    )

    return Quote(
        mode=pricing_mode.name,
        rate_type=rate_type,
        agreement=agreement,
        calculation=calculation,
        total_price=total_price,
        min_charge_applied=min_charge_applied,
        calculator_version=VERSION,
    )


# =============================================================================
# SUPPLEMENT ITEMS
# =============================================================================

def supplement_items(df: pl.DataFrame) -> pl.DataFrame:
    """
    Supplement item data with metric dimensions, volumes, and weights.

    Units are normalized to cm/kg first; every later column is built from
    the normalized columns only.

    Args:
        df: Item DataFrame with the required fields (see module docstring)

    Returns:
        DataFrame with added columns (see module docstring)
    """
    _check_columns(df)
    _check_finite(df)
    check_units(df)

    df = _add_metric_dimensions(df)
    df = _add_volumes(df)
    df = _add_weights(df)
    df = _flag_valid(df)

    return df


def _check_columns(df: pl.DataFrame) -> None:
    required = [c for c in ITEM_SCHEMA if c not in ("item_id", "product_name")]
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise ValidationError(f"Item data is missing column(s): {', '.join(missing)}")


def _check_finite(df: pl.DataFrame) -> None:
    """NaN and infinite measurements are errors, never skipped or priced."""
    bad = [
        c for c in MEASURE_COLUMNS
        if df.select((~pl.col(c).cast(pl.Float64).is_finite()).fill_null(False).any()).item()
    ]
    if bad:
        raise ValidationError(f"Item data has non-finite value(s) in: {', '.join(bad)}")


def _add_metric_dimensions(df: pl.DataFrame) -> pl.DataFrame:
    """Convert dimensions to cm and unit weight to kg."""
    return df.with_columns([
        to_cm_expr("length").alias("length_cm"),
        to_cm_expr("width").alias("width_cm"),
        to_cm_expr("height").alias("height_cm"),
        to_kg_expr("weight").alias("weight_kg_per_unit"),
    ])


def _add_volumes(df: pl.DataFrame) -> pl.DataFrame:
    """Add volume, CBM, and air volumetric weight per unit and per row."""
    df = df.with_columns(
        (pl.col("length_cm") * pl.col("width_cm") * pl.col("height_cm"))
        .alias("volume_cm3")
    )
    df = df.with_columns([
        (pl.col("volume_cm3") / CBM_DIVISOR).alias("cbm_per_unit"),
        (pl.col("volume_cm3") / IATA_DIVISOR).alias("volumetric_weight_kg_per_unit"),
    ])
    return df.with_columns([
        (pl.col("cbm_per_unit") * pl.col("quantity")).alias("total_cbm"),
        (pl.col("volumetric_weight_kg_per_unit") * pl.col("quantity")).alias("total_volumetric_weight"),
        (pl.col("cbm_per_unit") * pl.col("quantity") * CBM_TO_FT3).alias("total_ft3"),
        (pl.col("cbm_per_unit") * pl.col("quantity") * SEA_VOLUMETRIC_KG_PER_CBM)
        .alias("sea_volumetric_weight_kg"),
    ])


def _add_weights(df: pl.DataFrame) -> pl.DataFrame:
    """Add total actual weight per row."""
    return df.with_columns(
        (pl.col("weight_kg_per_unit") * pl.col("quantity")).alias("total_weight_kg")
    )


def _flag_valid(df: pl.DataFrame) -> pl.DataFrame:
    """
    Flag rows that count toward totals.

    A row is valid when every dimension and the weight are finite and
    positive and quantity is at least 1. Incomplete form rows are skipped,
    not errors.
    """
    return df.with_columns(
        (
            pl.all_horizontal([pl.col(c).cast(pl.Float64).is_finite() for c in MEASURE_COLUMNS]) &
            (pl.col("length") > 0) &
            (pl.col("width") > 0) &
            (pl.col("height") > 0) &
            (pl.col("weight") > 0) &
            (pl.col("quantity") >= 1)
        )
        .fill_null(False)
        .alias("is_valid")
    )


# =============================================================================
# SUMMARY
# =============================================================================

def summarize_items(df: pl.DataFrame) -> dict:
    """
    Aggregate supplemented items into billing quantities.

    Only valid rows count. chargeable_weight is the greater of actual and
    volumetric weight.

    Returns:
        dict with item_count, total_quantity, actual_weight,
        volumetric_weight, chargeable_weight, total_cbm, total_ft3,
        sea_volumetric_weight
    """
    totals = (
        df
        .filter(pl.col("is_valid"))
        .select([
            pl.len().alias("item_count"),
            pl.col("quantity").sum().alias("total_quantity"),
            pl.col("total_weight_kg").sum().alias("actual_weight"),
            pl.col("total_volumetric_weight").sum().alias("volumetric_weight"),
            pl.col("total_cbm").sum().alias("total_cbm"),
            pl.col("total_ft3").sum().alias("total_ft3"),
            pl.col("sea_volumetric_weight_kg").sum().alias("sea_volumetric_weight"),
        ])
        .row(0, named=True)
    )

    summary = {
        "item_count": int(totals["item_count"]),
        "total_quantity": int(totals["total_quantity"] or 0),
        "actual_weight": float(totals["actual_weight"] or 0.0),
        "volumetric_weight": float(totals["volumetric_weight"] or 0.0),
        "total_cbm": float(totals["total_cbm"] or 0.0),
        "total_ft3": float(totals["total_ft3"] or 0.0),
        "sea_volumetric_weight": float(totals["sea_volumetric_weight"] or 0.0),
    }
    summary["chargeable_weight"] = max(summary["actual_weight"], summary["volumetric_weight"])
    return summary


__all__ = [
    "calculate_quote",
    "price_quote",
    "supplement_items",
    "summarize_items",
]
