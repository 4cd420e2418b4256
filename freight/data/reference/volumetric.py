"""
Volumetric Weight Configuration

Last updated: 2025-11-20

HOW VOLUMETRIC WEIGHT WORKS
---------------------------
Air carriers bill the greater of actual weight and volumetric weight:
    volumetric_weight_kg = volume_cm3 / IATA_DIVISOR
    chargeable_weight    = max(actual_weight, volumetric_weight)

Sea LCL bills by volume (CBM). The sea volumetric weight (1 CBM = 1000 kg)
is shown next to each item for reference only and never enters pricing.
"""

IATA_DIVISOR = 6000               # cm3 per kg, air freight
CBM_DIVISOR = 1_000_000           # cm3 per m3

SEA_VOLUMETRIC_KG_PER_CBM = 1000  # Informational only
