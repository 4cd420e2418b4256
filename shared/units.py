"""
Unit Conversion

All dimensional and weight fields are normalized to a metric basis
(centimeters, kilograms) before any volume or weight aggregation.

Scalar helpers work on single values; the *_expr helpers build Polars
expressions for converting a whole column using a per-row unit column.
"""

import polars as pl

from .errors import ValidationError


# =============================================================================
# CONVERSION FACTORS
# =============================================================================

# Multiply by factor to get centimeters
DIMENSION_CONVERSIONS = {
    "cm": 1.0,
    "m": 100.0,
    "in": 2.54,
}

# Multiply by factor to get kilograms
WEIGHT_CONVERSIONS = {
    "kg": 1.0,
    "lb": 0.453592,
}

DIMENSION_UNITS = tuple(DIMENSION_CONVERSIONS)
WEIGHT_UNITS = tuple(WEIGHT_CONVERSIONS)

CBM_TO_FT3 = 35.3147


# =============================================================================
# SCALAR CONVERSIONS
# =============================================================================

def _factor(table: dict[str, float], unit: str, kind: str) -> float:
    try:
        return table[unit]
    except KeyError:
        raise ValidationError(
            f"Unknown {kind} unit '{unit}'. Expected one of: {', '.join(table)}"
        ) from None


def convert_to_cm(value: float, unit: str) -> float:
    """Convert a length in `unit` to centimeters."""
    return value * _factor(DIMENSION_CONVERSIONS, unit, "dimension")


def convert_from_cm(value: float, unit: str) -> float:
    """Convert a length in centimeters back to `unit`."""
    return value / _factor(DIMENSION_CONVERSIONS, unit, "dimension")


def convert_to_kg(value: float, unit: str) -> float:
    """Convert a weight in `unit` to kilograms."""
    return value * _factor(WEIGHT_CONVERSIONS, unit, "weight")


def convert_from_kg(value: float, unit: str) -> float:
    """Convert a weight in kilograms back to `unit`."""
    return value / _factor(WEIGHT_CONVERSIONS, unit, "weight")


def convert_kg_to_lb(kg: float) -> float:
    return convert_from_kg(kg, "lb")


def convert_cbm_to_ft3(cbm: float) -> float:
    return cbm * CBM_TO_FT3


# =============================================================================
# POLARS EXPRESSIONS
# =============================================================================

def to_cm_expr(value_col: str, unit_col: str = "dimension_unit") -> pl.Expr:
    """Expression converting `value_col` to cm using the unit in `unit_col`."""
    factor = pl.col(unit_col).replace_strict(DIMENSION_CONVERSIONS, return_dtype=pl.Float64)
    return pl.col(value_col).cast(pl.Float64) * factor


def to_kg_expr(value_col: str, unit_col: str = "weight_unit") -> pl.Expr:
    """Expression converting `value_col` to kg using the unit in `unit_col`."""
    factor = pl.col(unit_col).replace_strict(WEIGHT_CONVERSIONS, return_dtype=pl.Float64)
    return pl.col(value_col).cast(pl.Float64) * factor


def check_units(df: pl.DataFrame) -> None:
    """
    Raise ValidationError if any row carries an unsupported unit.

    Checked up front so the conversion expressions never see an unknown key.
    """
    errors = []

    bad_dims = (
        df.filter(~pl.col("dimension_unit").is_in(DIMENSION_UNITS))
        ["dimension_unit"].unique().to_list()
    )
    if bad_dims:
        errors.append(f"dimension unit(s) {sorted(map(str, bad_dims))}")

    bad_weights = (
        df.filter(~pl.col("weight_unit").is_in(WEIGHT_UNITS))
        ["weight_unit"].unique().to_list()
    )
    if bad_weights:
        errors.append(f"weight unit(s) {sorted(map(str, bad_weights))}")

    if errors:
        raise ValidationError("Unsupported " + " and ".join(errors))


__all__ = [
    "DIMENSION_CONVERSIONS",
    "WEIGHT_CONVERSIONS",
    "DIMENSION_UNITS",
    "WEIGHT_UNITS",
    "CBM_TO_FT3",
    "convert_to_cm",
    "convert_from_cm",
    "convert_to_kg",
    "convert_from_kg",
    "convert_kg_to_lb",
    "convert_cbm_to_ft3",
    "to_cm_expr",
    "to_kg_expr",
    "check_units",
]
