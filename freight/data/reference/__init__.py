"""
Reference Data

Static configuration for volumetric weight, containers, and rate types.
"""

from .volumetric import IATA_DIVISOR, CBM_DIVISOR, SEA_VOLUMETRIC_KG_PER_CBM
from .containers import CONTAINER_DIMENSIONS, CONTAINER_MAX_PAYLOAD_KG, SELECTABLE_CONTAINERS
from .rate_types import RATE_TYPE_LABELS, RATE_TYPES, DEFAULT_CURRENCY

__all__ = [
    "IATA_DIVISOR",
    "CBM_DIVISOR",
    "SEA_VOLUMETRIC_KG_PER_CBM",
    "CONTAINER_DIMENSIONS",
    "CONTAINER_MAX_PAYLOAD_KG",
    "SELECTABLE_CONTAINERS",
    "RATE_TYPE_LABELS",
    "RATE_TYPES",
    "DEFAULT_CURRENCY",
]
