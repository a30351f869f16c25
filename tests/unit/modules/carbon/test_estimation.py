"""Tests for the carbon estimation engine."""

import random

import pytest

from src.api.core.exceptions.base import InvalidInputError
from src.modules.carbon.constants import (
    CARBON_DENSITY,
    CO2_CONVERSION_FACTOR,
    LandCoverClass,
)
from src.modules.carbon.estimation import (
    AreaSource,
    CarbonCalculationInput,
    calculate_carbon,
    normalize_land_cover_class,
)


def test_mangrove_area_stays_within_variance_envelope():
    """10 ha of mangrove: 10 * 150 * 3.67 = 5505 with at most ~2.5% jitter."""
    rng = random.Random(7)
    for _ in range(200):
        result = calculate_carbon(
            CarbonCalculationInput(area_hectares=10, land_cover_class="mangrove"),
            rng=rng,
        )
        assert 9.9 <= result.area_hectares <= 10.1
        assert 148.5 <= result.carbon_density <= 151.5
        assert 5340.0 <= result.co2_equivalent_tons <= 5672.0
        assert result.land_cover_class is LandCoverClass.MANGROVE
        assert result.area_source is AreaSource.MEASURED_AREA


def test_tree_count_derives_area_from_spacing():
    """100 trees at ~25 m² each cover ~0.25 ha."""
    result = calculate_carbon(
        CarbonCalculationInput(tree_count=100, land_cover_class="tropical_forest"),
        rng=random.Random(3),
    )

    assert 0.2475 <= result.area_hectares <= 0.2525
    assert result.area_source is AreaSource.TREE_COUNT
    assert 118.8 <= result.carbon_density <= 121.2


def test_measured_area_wins_over_tree_count():
    result = calculate_carbon(
        CarbonCalculationInput(tree_count=4, area_hectares=2.0),
        rng=random.Random(11),
    )

    assert result.area_source is AreaSource.MEASURED_AREA
    assert 1.98 <= result.area_hectares <= 2.02


def test_zero_tree_count_is_valid_input():
    result = calculate_carbon(
        CarbonCalculationInput(tree_count=0), rng=random.Random(5)
    )

    assert result.area_hectares == 0
    assert result.carbon_stock_tons == 0
    assert result.co2_equivalent_tons == 0


def test_zero_area_is_valid_input():
    result = calculate_carbon(
        CarbonCalculationInput(area_hectares=0.0), rng=random.Random(5)
    )

    assert result.area_source is AreaSource.MEASURED_AREA
    assert result.co2_equivalent_tons == 0


def test_zero_area_defers_to_tree_count():
    result = calculate_carbon(
        CarbonCalculationInput(tree_count=5, area_hectares=0.0),
        rng=random.Random(5),
    )

    assert result.area_source is AreaSource.TREE_COUNT
    assert 0.0123 <= result.area_hectares <= 0.0127
    assert result.co2_equivalent_tons > 0


def test_missing_tree_count_and_area_raises():
    with pytest.raises(InvalidInputError) as exc_info:
        calculate_carbon(CarbonCalculationInput(land_cover_class="mangrove"))

    assert exc_info.value.status_code == 400
    assert "tree_count" in exc_info.value.details["description"]


@pytest.mark.parametrize("value", [None, "", "desert", "rainforest"])
def test_unknown_land_cover_class_uses_default_density(value):
    result = calculate_carbon(
        CarbonCalculationInput(area_hectares=1.0, land_cover_class=value),
        rng=random.Random(2),
    )

    assert result.land_cover_class is LandCoverClass.DEFAULT
    assert 74.25 <= result.carbon_density <= 75.75


def test_land_cover_class_is_case_insensitive():
    assert normalize_land_cover_class(" Mixed_Forest ") is LandCoverClass.MIXED_FOREST
    assert normalize_land_cover_class("SEAGRASS") is LandCoverClass.SEAGRASS


def test_results_are_rounded():
    result = calculate_carbon(
        CarbonCalculationInput(tree_count=37, land_cover_class="saltmarsh"),
        rng=random.Random(17),
    )

    assert result.area_hectares == round(result.area_hectares, 4)
    for value in (
        result.carbon_density,
        result.carbon_stock_tons,
        result.co2_equivalent_tons,
    ):
        assert value == round(value, 2)


def test_co2_tracks_carbon_stock_times_conversion_factor():
    """Only the precision multiplier (±0.5%) separates CO2 from stock * 3.67."""
    rng = random.Random(23)
    for land_cover_class in CARBON_DENSITY:
        result = calculate_carbon(
            CarbonCalculationInput(
                area_hectares=25.0, land_cover_class=land_cover_class.value
            ),
            rng=rng,
        )
        expected = result.carbon_stock_tons * CO2_CONVERSION_FACTOR
        assert abs(result.co2_equivalent_tons - expected) <= expected * 0.0051


def test_same_seed_gives_same_result():
    data = CarbonCalculationInput(tree_count=20, land_cover_class="mangrove")

    first = calculate_carbon(data, rng=random.Random(42))
    second = calculate_carbon(data, rng=random.Random(42))

    assert first == second


def test_as_dict_uses_plain_values():
    result = calculate_carbon(
        CarbonCalculationInput(area_hectares=1.0, land_cover_class="seagrass"),
        rng=random.Random(1),
    )

    data = result.as_dict()
    assert data["land_cover_class"] == "seagrass"
    assert data["area_source"] == "measured_area"
    assert set(data) == {
        "area_hectares",
        "carbon_density",
        "carbon_stock_tons",
        "co2_equivalent_tons",
        "land_cover_class",
        "area_source",
    }


def test_ten_mangrove_trees_end_to_end():
    """0.025 ha at 150 t C/ha; every multiplier stays inside its band."""
    base = 0.025 * 150 * CO2_CONVERSION_FACTOR
    lower = base * 0.995 * 0.99 * 0.99 - 0.005
    upper = base * 1.005 * 1.01 * 1.01 + 0.005

    rng = random.Random(10)
    for _ in range(200):
        result = calculate_carbon(
            CarbonCalculationInput(tree_count=10, land_cover_class="mangrove"),
            rng=rng,
        )
        assert 0.0247 <= result.area_hectares <= 0.0253
        assert lower <= result.co2_equivalent_tons <= upper


def test_structural_fields_are_stable_across_calls():
    data = CarbonCalculationInput(tree_count=15, land_cover_class="Saltmarsh")

    results = [calculate_carbon(data) for _ in range(5)]

    assert {r.land_cover_class for r in results} == {LandCoverClass.SALTMARSH}
    assert {r.area_source for r in results} == {AreaSource.TREE_COUNT}
    assert all(r.co2_equivalent_tons >= 0 for r in results)
