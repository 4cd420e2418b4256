"""
Container Reference Dimensions

Internal dimensions in meters and usable capacity in CBM.
Last updated: 2025-11-20

Only SELECTABLE_CONTAINERS can be quoted as FCL. The 45' High Cube has a
rate type and reference dimensions but is not offered for selection.
"""

from .rate_types import (
    SEA_CONTAINER_20,
    SEA_CONTAINER_40,
    SEA_CONTAINER_40HC,
    SEA_CONTAINER_45HC,
)


CONTAINER_DIMENSIONS = {
    #                       length_m, width_m, height_m, capacity_cbm
    SEA_CONTAINER_20:   {"length_m": 5.90,  "width_m": 2.35, "height_m": 2.39, "capacity_cbm": 33},
    SEA_CONTAINER_40:   {"length_m": 12.03, "width_m": 2.35, "height_m": 2.39, "capacity_cbm": 67},
    SEA_CONTAINER_40HC: {"length_m": 12.03, "width_m": 2.35, "height_m": 2.69, "capacity_cbm": 76},
    SEA_CONTAINER_45HC: {"length_m": 13.56, "width_m": 2.35, "height_m": 2.69, "capacity_cbm": 86},
}

# Max payload in kg
CONTAINER_MAX_PAYLOAD_KG = {
    SEA_CONTAINER_20: 21770,
    SEA_CONTAINER_40: 26680,
    SEA_CONTAINER_40HC: 26680,
    SEA_CONTAINER_45HC: 26680,
}

SELECTABLE_CONTAINERS = (SEA_CONTAINER_20, SEA_CONTAINER_40, SEA_CONTAINER_40HC)
