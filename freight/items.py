"""
Shipment Items

One ShipmentItem per physical cargo piece type. Items are collected from a
form, so incomplete rows (zero dimensions or weight) are allowed here and
filtered out as invalid during supplementing rather than rejected.
"""

from collections.abc import Iterable, Mapping
from typing import Literal

import polars as pl
import pydantic
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from shared.errors import ValidationError


class ShipmentItem(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, allow_inf_nan=False)

    id: str | None = None
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0
    dimension_unit: Literal["cm", "m", "in"] = Field(
        "cm", validation_alias=AliasChoices("dimension_unit", "dimensionUnit")
    )
    weight: float = 0.0
    weight_unit: Literal["kg", "lb"] = Field(
        "kg", validation_alias=AliasChoices("weight_unit", "weightUnit")
    )
    quantity: int = Field(1, ge=1)

    product_name: str | None = Field(
        None, validation_alias=AliasChoices("product_name", "productName")
    )
    product_image: str | None = Field(
        None, validation_alias=AliasChoices("product_image", "productImage")
    )
    supplier_id: str | None = Field(
        None, validation_alias=AliasChoices("supplier_id", "supplierId")
    )


ITEM_SCHEMA = {
    "item_id": pl.Utf8,
    "length": pl.Float64,
    "width": pl.Float64,
    "height": pl.Float64,
    "dimension_unit": pl.Utf8,
    "weight": pl.Float64,
    "weight_unit": pl.Utf8,
    "quantity": pl.Int64,
    "product_name": pl.Utf8,
}


def coerce_items(items: Iterable[ShipmentItem | Mapping]) -> list[ShipmentItem]:
    """Parse raw item records. Raises ValidationError naming the bad row."""
    parsed = []
    for index, item in enumerate(items or []):
        if isinstance(item, ShipmentItem):
            parsed.append(item)
            continue
        try:
            parsed.append(ShipmentItem.model_validate(item))
        except pydantic.ValidationError as e:
            err = e.errors()[0]
            field = ".".join(str(part) for part in err["loc"])
            raise ValidationError(f"Item {index + 1}: {field}: {err['msg']}") from e
    return parsed


def items_to_frame(items: Iterable[ShipmentItem | Mapping]) -> pl.DataFrame:
    """
    Build the item DataFrame consumed by supplement_items().

    Row order follows input order.
    """
    rows = [
        {
            "item_id": item.id,
            "length": item.length,
            "width": item.width,
            "height": item.height,
            "dimension_unit": item.dimension_unit,
            "weight": item.weight,
            "weight_unit": item.weight_unit,
            "quantity": item.quantity,
            "product_name": item.product_name,
        }
        for item in coerce_items(items)
    ]
    return pl.DataFrame(rows, schema=ITEM_SCHEMA)


__all__ = [
    "ShipmentItem",
    "ITEM_SCHEMA",
    "coerce_items",
    "items_to_frame",
]
