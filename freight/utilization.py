"""
Container Utilization

How full a container would be for a set of items, and how many units of a
single item fit. Used for FCL quote detail and for the per-item display;
none of these figures affect pricing.
"""

import math

import polars as pl

from shared.errors import ValidationError

from .data.reference.containers import (
    CONTAINER_DIMENSIONS,
    CONTAINER_MAX_PAYLOAD_KG,
    SELECTABLE_CONTAINERS,
)


def _container(container: str) -> tuple[float, float]:
    if container not in CONTAINER_DIMENSIONS:
        raise ValidationError(f"Unknown container type '{container}'")
    return float(CONTAINER_DIMENSIONS[container]["capacity_cbm"]), float(CONTAINER_MAX_PAYLOAD_KG[container])


def container_utilization(summary: dict, container: str) -> dict:
    """
    Volume and weight fill of one container.

    Percentages are capped at 100 for display; `fits` and
    `containers_needed` use the uncapped figures.

    Args:
        summary: Output of summarize_items()
        container: Container type (SEA_CONTAINER_*)
    """
    capacity_cbm, max_payload_kg = _container(container)
    filled_cbm = summary["total_cbm"]
    filled_kg = summary["actual_weight"]

    volume_ratio = filled_cbm / capacity_cbm
    weight_ratio = filled_kg / max_payload_kg

    containers_needed = max(math.ceil(volume_ratio), math.ceil(weight_ratio)) if (filled_cbm or filled_kg) else 0

    return {
        "filled_cbm": filled_cbm,
        "filled_weight_kg": filled_kg,
        "capacity_cbm": capacity_cbm,
        "max_payload_kg": max_payload_kg,
        "volume_percent": min(volume_ratio * 100, 100.0),
        "weight_percent": min(weight_ratio * 100, 100.0),
        "fits": volume_ratio <= 1 and weight_ratio <= 1,
        "containers_needed": containers_needed,
    }


def units_per_container(
    cbm_per_unit: float,
    container: str,
    weight_kg_per_unit: float | None = None,
) -> int:
    """
    Whole units of one item that fit in a container.

    Limited by volume, and by payload when a unit weight is given.
    """
    capacity_cbm, max_payload_kg = _container(container)
    if cbm_per_unit <= 0:
        raise ValidationError("Unit volume must be positive")

    units = math.floor(capacity_cbm / cbm_per_unit)
    if weight_kg_per_unit:
        units = min(units, math.floor(max_payload_kg / weight_kg_per_unit))
    return units


def add_container_fit(df: pl.DataFrame) -> pl.DataFrame:
    """
    Add units-per-container columns to a supplemented item DataFrame.

    Adds fit_<container_type> (lowercase) for each selectable container,
    null for rows that are not valid items.
    """
    exprs = []
    for container in SELECTABLE_CONTAINERS:
        capacity_cbm, max_payload_kg = _container(container)
        by_volume = (pl.lit(capacity_cbm) / pl.col("cbm_per_unit")).floor()
        by_weight = (pl.lit(max_payload_kg) / pl.col("weight_kg_per_unit")).floor()
        exprs.append(
            pl.when(pl.col("is_valid"))
            .then(pl.min_horizontal(by_volume, by_weight))
            .otherwise(None)
            .cast(pl.Int64, strict=False)
            .alias(f"fit_{container.lower()}")
        )
    return df.with_columns(exprs)


__all__ = [
    "container_utilization",
    "units_per_container",
    "add_container_fit",
]
