"""
Rate Types

Identifiers used on agreement records, and the labels shown to users.
"""

AIR_KG = "AIR_KG"
SEA_CBM = "SEA_CBM"
SEA_CONTAINER_20 = "SEA_CONTAINER_20"
SEA_CONTAINER_40 = "SEA_CONTAINER_40"
SEA_CONTAINER_40HC = "SEA_CONTAINER_40HC"
SEA_CONTAINER_45HC = "SEA_CONTAINER_45HC"

RATE_TYPE_LABELS = {
    AIR_KG: "Air Freight (per kg)",
    SEA_CBM: "Sea LCL (per CBM)",
    SEA_CONTAINER_20: "20' Standard Container",
    SEA_CONTAINER_40: "40' Standard Container",
    SEA_CONTAINER_40HC: "40' High Cube Container",
    SEA_CONTAINER_45HC: "45' High Cube Container",
}

RATE_TYPES = tuple(RATE_TYPE_LABELS)

DEFAULT_CURRENCY = "OMR"
