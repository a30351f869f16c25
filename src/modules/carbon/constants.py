"""Land-cover classes and the constants of the carbon estimation model."""

from enum import Enum


class LandCoverClass(str, Enum):
    MANGROVE = "mangrove"
    SEAGRASS = "seagrass"
    SALTMARSH = "saltmarsh"
    TROPICAL_FOREST = "tropical_forest"
    TEMPERATE_FOREST = "temperate_forest"
    MIXED_FOREST = "mixed_forest"
    DEFAULT = "default"


# Classes the vision model may report; "default" is engine-only
MODEL_LAND_COVER_CLASSES: tuple[LandCoverClass, ...] = (
    LandCoverClass.MANGROVE,
    LandCoverClass.SEAGRASS,
    LandCoverClass.SALTMARSH,
    LandCoverClass.TROPICAL_FOREST,
    LandCoverClass.TEMPERATE_FOREST,
    LandCoverClass.MIXED_FOREST,
)

# Tons of carbon per hectare
CARBON_DENSITY: dict[LandCoverClass, float] = {
    LandCoverClass.MANGROVE: 150.0,
    LandCoverClass.SEAGRASS: 50.0,
    LandCoverClass.SALTMARSH: 80.0,
    LandCoverClass.TROPICAL_FOREST: 120.0,
    LandCoverClass.TEMPERATE_FOREST: 100.0,
    LandCoverClass.MIXED_FOREST: 90.0,
    LandCoverClass.DEFAULT: 75.0,
}

# Molecular weight ratio CO2 / C
CO2_CONVERSION_FACTOR = 3.67

AVG_TREE_SPACING_SQM = 25.0  # 5m x 5m canopy spacing
SQM_PER_HECTARE = 10_000.0

# Relative half-widths of the uniform variance multipliers
AREA_MEASUREMENT_VARIANCE = 0.01
TREE_SPACING_VARIANCE = 0.01
DENSITY_VARIANCE = 0.01
PRECISION_VARIANCE = 0.005

AREA_DECIMALS = 4
VALUE_DECIMALS = 2
