"""Carbon stock and CO2-equivalent estimation.

The estimate is intentionally not bit-reproducible: three independent uniform
multipliers model survey imprecision (area or tree spacing), environmental
heterogeneity (carbon density) and reporting precision (final CO2 figure).
The random source is injected so callers can seed it.
"""

import random
from dataclasses import asdict, dataclass
from enum import Enum

from src.api.core.exceptions.base import InvalidInputError
from src.modules.carbon.constants import (
    AREA_DECIMALS,
    AREA_MEASUREMENT_VARIANCE,
    AVG_TREE_SPACING_SQM,
    CARBON_DENSITY,
    CO2_CONVERSION_FACTOR,
    DENSITY_VARIANCE,
    PRECISION_VARIANCE,
    SQM_PER_HECTARE,
    TREE_SPACING_VARIANCE,
    VALUE_DECIMALS,
    LandCoverClass,
)

_system_random = random.SystemRandom()


class AreaSource(str, Enum):
    MEASURED_AREA = "measured_area"
    TREE_COUNT = "tree_count"


@dataclass
class CarbonCalculationInput:
    tree_count: int | None = None
    area_hectares: float | None = None
    land_cover_class: str | None = None


@dataclass
class CarbonCalculationResult:
    area_hectares: float
    carbon_density: float
    carbon_stock_tons: float
    co2_equivalent_tons: float
    land_cover_class: LandCoverClass
    area_source: AreaSource

    def as_dict(self) -> dict:
        data = asdict(self)
        data["land_cover_class"] = self.land_cover_class.value
        data["area_source"] = self.area_source.value
        return data


def normalize_land_cover_class(value: str | None) -> LandCoverClass:
    """Lower-case the class name, falling back to DEFAULT when unknown."""
    if not value:
        return LandCoverClass.DEFAULT
    try:
        return LandCoverClass(value.strip().lower())
    except ValueError:
        return LandCoverClass.DEFAULT


def _jitter(rng: random.Random, spread: float) -> float:
    return 1 + rng.uniform(-spread, spread)


def tree_spacing_sqm(rng: random.Random) -> float:
    """Per-tree ground area around the 25 m² baseline."""
    return AVG_TREE_SPACING_SQM * _jitter(rng, TREE_SPACING_VARIANCE)


def _area_hectares(
    data: CarbonCalculationInput, rng: random.Random
) -> tuple[float, AreaSource]:
    # A zero measured area defers to a supplied tree count
    if data.area_hectares is not None and (
        data.area_hectares > 0 or data.tree_count is None
    ):
        measured = data.area_hectares * _jitter(rng, AREA_MEASUREMENT_VARIANCE)
        return measured, AreaSource.MEASURED_AREA
    if data.tree_count is not None:
        area_sqm = data.tree_count * tree_spacing_sqm(rng)
        return area_sqm / SQM_PER_HECTARE, AreaSource.TREE_COUNT
    raise InvalidInputError("Either tree_count or area_hectares must be provided")


def calculate_carbon(
    data: CarbonCalculationInput, rng: random.Random | None = None
) -> CarbonCalculationResult:
    """
    Estimate the carbon stock and CO2-equivalent offset of a planted area.

    When both ``area_hectares`` and ``tree_count`` are given a positive measured
    area wins. A tree count derives the area when no area was measured or the
    measured area is zero; a zero area on its own still yields a zero estimate.

    Args:
        data: Tree count and/or measured area plus the land-cover class
        rng: Random source for the variance multipliers (system entropy if None)

    Returns:
        CarbonCalculationResult rounded to 4 decimals for area, 2 for the rest

    Raises:
        InvalidInputError: If neither tree_count nor area_hectares is provided
    """
    rng = rng or _system_random

    land_cover_class = normalize_land_cover_class(data.land_cover_class)
    base_density = CARBON_DENSITY[land_cover_class]

    area_hectares, area_source = _area_hectares(data, rng)

    adjusted_density = base_density * _jitter(rng, DENSITY_VARIANCE)
    carbon_stock_tons = area_hectares * adjusted_density

    co2_equivalent_tons = carbon_stock_tons * CO2_CONVERSION_FACTOR
    co2_equivalent_tons *= _jitter(rng, PRECISION_VARIANCE)

    return CarbonCalculationResult(
        area_hectares=round(area_hectares, AREA_DECIMALS),
        carbon_density=round(adjusted_density, VALUE_DECIMALS),
        carbon_stock_tons=round(carbon_stock_tons, VALUE_DECIMALS),
        co2_equivalent_tons=round(co2_equivalent_tons, VALUE_DECIMALS),
        land_cover_class=land_cover_class,
        area_source=area_source,
    )
