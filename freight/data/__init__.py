"""
Freight Data

Reference data and loaders for containers, volumetric weight, and rate types.

Structure:
    - reference/: Static reference data (divisors, containers, rate types,
      sample agreements.csv)
"""

import polars as pl
from pathlib import Path

from .reference.volumetric import IATA_DIVISOR, CBM_DIVISOR, SEA_VOLUMETRIC_KG_PER_CBM
from .reference.containers import (
    CONTAINER_DIMENSIONS,
    CONTAINER_MAX_PAYLOAD_KG,
    SELECTABLE_CONTAINERS,
)
from .reference.rate_types import (
    RATE_TYPE_LABELS,
    RATE_TYPES,
    DEFAULT_CURRENCY,
    AIR_KG,
    SEA_CBM,
)


REFERENCE_DIR = Path(__file__).parent / "reference"


def load_containers() -> pl.DataFrame:
    """
    Load container reference data as a DataFrame.

    Returns:
        DataFrame with columns:
            - container_type: Rate type identifier (SEA_CONTAINER_*)
            - label: Human-readable name
            - length_m, width_m, height_m: Internal dimensions
            - capacity_cbm: Usable volume
            - max_payload_kg: Max cargo weight
            - selectable: True if offered for FCL quotes
    """
    return pl.DataFrame([
        {
            "container_type": container_type,
            "label": RATE_TYPE_LABELS[container_type],
            **dims,
            "max_payload_kg": CONTAINER_MAX_PAYLOAD_KG[container_type],
            "selectable": container_type in SELECTABLE_CONTAINERS,
        }
        for container_type, dims in CONTAINER_DIMENSIONS.items()
    ]).with_columns(pl.col("capacity_cbm").cast(pl.Float64))


__all__ = [
    "load_containers",
    "REFERENCE_DIR",
    # Volumetric config
    "IATA_DIVISOR",
    "CBM_DIVISOR",
    "SEA_VOLUMETRIC_KG_PER_CBM",
    # Containers
    "CONTAINER_DIMENSIONS",
    "CONTAINER_MAX_PAYLOAD_KG",
    "SELECTABLE_CONTAINERS",
    # Rate types
    "RATE_TYPE_LABELS",
    "RATE_TYPES",
    "DEFAULT_CURRENCY",
    "AIR_KG",
    "SEA_CBM",
]
