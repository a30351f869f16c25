"""Statistical self-test of the carbon estimation engine.

Runs the engine repeatedly and reports the coefficient of variation of the
CO2 figures. In the default ``varied_inputs`` mode every trial draws fresh
tree counts, areas and land-cover classes, so the reported spread mixes input
diversity with the engine's own jitter and is a review aid rather than a
correctness gate. ``fixed_inputs`` mode repeats one input to isolate the
engine's internal variance.
"""

import random
from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from src.api.core.constants import DEFAULT_VALIDATION_TRIALS
from src.api.core.exceptions.base import InvalidInputError
from src.modules.carbon.estimation import CarbonCalculationInput, calculate_carbon
from src.utils.logger import get_logger

logger = get_logger(__name__)

VARIANCE_THRESHOLD_PERCENT = 10.0

MIN_TREE_COUNT = 1
MAX_TREE_COUNT = 20
MIN_AREA_HECTARES = 1.0
MAX_AREA_HECTARES = 30.0

VALIDATION_LAND_COVER_CLASSES = (
    "tropical_forest",
    "temperate_forest",
    "mixed_forest",
    "mangrove",
    "default",
)


class ValidationMode(str, Enum):
    VARIED_INPUTS = "varied_inputs"
    FIXED_INPUTS = "fixed_inputs"


@dataclass
class ValidationRun:
    run_number: int
    tree_count: int | None
    land_cover_class: str | None
    area_hectares: float | None
    co2_tons: float


@dataclass
class ValidationResult:
    passed: bool
    variance_percent: float
    mean: float
    runs: list[ValidationRun] = field(default_factory=list)
    threshold_percent: float = VARIANCE_THRESHOLD_PERCENT
    mode: ValidationMode = ValidationMode.VARIED_INPUTS
    # Every trial produced zero CO2, so no spread can be measured
    degenerate: bool = False


def generate_trial_input(rng: random.Random) -> CarbonCalculationInput:
    """Draw one randomized engine input from the fixed validation ranges."""
    return CarbonCalculationInput(
        tree_count=rng.randint(MIN_TREE_COUNT, MAX_TREE_COUNT),
        land_cover_class=rng.choice(VALIDATION_LAND_COVER_CLASSES),
        area_hectares=round(rng.uniform(MIN_AREA_HECTARES, MAX_AREA_HECTARES), 2),
    )


def coefficient_of_variation(values: list[float]) -> tuple[float, float]:
    """Return (mean, population std / mean * 100).

    The ratio is undefined for a zero mean; 0% is returned and callers must
    treat the run as degenerate.
    """
    arr = np.asarray(values, dtype=np.float64)
    mean = float(np.mean(arr))
    if mean == 0:
        return mean, 0.0
    return mean, float(np.std(arr) / mean * 100)


def run_validation(
    trials: int = DEFAULT_VALIDATION_TRIALS,
    rng: random.Random | None = None,
    fixed_input: CarbonCalculationInput | None = None,
    threshold_percent: float = VARIANCE_THRESHOLD_PERCENT,
) -> ValidationResult:
    """
    Drive the estimation engine ``trials`` times and grade the CO2 spread.

    The engine is called directly; the analysis cache is never involved. Any
    engine error aborts the whole run and no partial result is returned.

    Args:
        trials: Number of engine invocations (must be >= 1)
        rng: Random source shared by input generation and the engine
        fixed_input: When given, every trial reuses this input
        threshold_percent: Pass when the coefficient of variation is at most this

    Returns:
        ValidationResult with one ValidationRun per trial
    """
    if trials < 1:
        raise InvalidInputError("trials must be at least 1")

    rng = rng or random.SystemRandom()
    mode = (
        ValidationMode.FIXED_INPUTS if fixed_input else ValidationMode.VARIED_INPUTS
    )

    runs: list[ValidationRun] = []
    for run_number in range(1, trials + 1):
        params = fixed_input or generate_trial_input(rng)
        result = calculate_carbon(params, rng=rng)
        runs.append(
            ValidationRun(
                run_number=run_number,
                tree_count=params.tree_count,
                land_cover_class=params.land_cover_class,
                area_hectares=params.area_hectares,
                co2_tons=result.co2_equivalent_tons,
            )
        )

    mean, variance_percent = coefficient_of_variation([r.co2_tons for r in runs])
    degenerate = mean == 0
    passed = not degenerate and variance_percent <= threshold_percent

    logger.info(
        "Carbon validation finished",
        trials=trials,
        mode=mode.value,
        mean=round(mean, 4),
        variance_percent=round(variance_percent, 4),
        passed=passed,
        degenerate=degenerate,
    )

    return ValidationResult(
        passed=passed,
        variance_percent=variance_percent,
        mean=mean,
        runs=runs,
        threshold_percent=threshold_percent,
        mode=mode,
        degenerate=degenerate,
    )
