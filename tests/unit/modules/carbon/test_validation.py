"""Tests for the carbon engine validation harness."""

import random

import pytest

from src.api.core.constants import DEFAULT_VALIDATION_TRIALS
from src.api.core.exceptions.base import InvalidInputError
from src.modules.carbon.estimation import CarbonCalculationInput
from src.modules.carbon.validation import (
    MAX_AREA_HECTARES,
    MAX_TREE_COUNT,
    MIN_AREA_HECTARES,
    MIN_TREE_COUNT,
    VALIDATION_LAND_COVER_CLASSES,
    ValidationMode,
    coefficient_of_variation,
    generate_trial_input,
    run_validation,
)


def test_default_run_has_twenty_trials():
    result = run_validation(rng=random.Random(8))

    assert len(result.runs) == 20
    assert [run.run_number for run in result.runs] == list(range(1, 21))
    assert result.mode is ValidationMode.VARIED_INPUTS
    assert result.threshold_percent == 10.0
    assert result.variance_percent >= 0
    assert result.passed == (result.variance_percent <= 10.0)


def test_trial_inputs_stay_in_range():
    rng = random.Random(99)
    for _ in range(100):
        trial = generate_trial_input(rng)
        assert MIN_TREE_COUNT <= trial.tree_count <= MAX_TREE_COUNT
        assert MIN_AREA_HECTARES <= trial.area_hectares <= MAX_AREA_HECTARES
        assert trial.area_hectares == round(trial.area_hectares, 2)
        assert trial.land_cover_class in VALIDATION_LAND_COVER_CLASSES


def test_runs_record_their_inputs():
    result = run_validation(trials=5, rng=random.Random(4))

    for run in result.runs:
        assert run.tree_count is not None
        assert run.area_hectares is not None
        assert run.co2_tons > 0


def test_fixed_inputs_isolate_engine_jitter():
    """With one input repeated only the ~2.5% engine jitter remains."""
    result = run_validation(
        trials=50,
        rng=random.Random(12),
        fixed_input=CarbonCalculationInput(
            area_hectares=10.0, land_cover_class="mangrove"
        ),
    )

    assert result.mode is ValidationMode.FIXED_INPUTS
    assert result.passed is True
    assert result.variance_percent < 3.0
    assert all(run.land_cover_class == "mangrove" for run in result.runs)


def test_custom_threshold_is_applied():
    result = run_validation(
        trials=10,
        rng=random.Random(12),
        fixed_input=CarbonCalculationInput(area_hectares=5.0),
        threshold_percent=0.0,
    )

    assert result.threshold_percent == 0.0
    assert result.passed is (result.variance_percent == 0.0)


def test_single_trial_has_zero_variance():
    result = run_validation(trials=1, rng=random.Random(1))

    assert len(result.runs) == 1
    assert result.variance_percent == 0.0
    assert result.passed is True


@pytest.mark.parametrize("trials", [0, -3])
def test_trials_below_one_raise(trials):
    with pytest.raises(InvalidInputError):
        run_validation(trials=trials)


def test_engine_error_aborts_run():
    with pytest.raises(InvalidInputError):
        run_validation(
            trials=3, rng=random.Random(1), fixed_input=CarbonCalculationInput()
        )


def test_coefficient_of_variation_uses_population_std():
    mean, cv = coefficient_of_variation([2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0])

    assert mean == pytest.approx(5.0)
    assert cv == pytest.approx(40.0)


def test_coefficient_of_variation_zero_mean():
    assert coefficient_of_variation([0.0, 0.0]) == (0.0, 0.0)


def test_zero_mean_run_is_degenerate_and_not_passed():
    result = run_validation(
        trials=5,
        rng=random.Random(3),
        fixed_input=CarbonCalculationInput(tree_count=0, land_cover_class="mangrove"),
    )

    assert result.mean == 0.0
    assert result.degenerate is True
    assert result.passed is False


def test_nonzero_run_is_not_degenerate():
    result = run_validation(trials=5, rng=random.Random(3))

    assert result.degenerate is False


def test_default_trial_count_matches_api_default():
    assert len(run_validation(rng=random.Random(8)).runs) == DEFAULT_VALIDATION_TRIALS
