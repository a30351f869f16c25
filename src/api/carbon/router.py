from fastapi import APIRouter, Query

from src.api.carbon.schemas import (
    CarbonCalculationAPIResponse,
    CarbonCalculationRequest,
    CarbonCalculationResponse,
    CarbonInputFields,
    ValidationAPIResponse,
    ValidationReport,
)
from src.api.core.constants import DEFAULT_VALIDATION_TRIALS, MAX_VALIDATION_TRIALS
from src.api.core.dependencies import AsyncSessionDep, RandomSourceDep
from src.api.core.messages import APIResponse, MessageCode
from src.modules.carbon.use_cases import calculate_and_persist
from src.modules.carbon.validation import run_validation

router = APIRouter(prefix="/carbon", tags=["carbon"])


@router.post("/calculate", response_model=CarbonCalculationAPIResponse)
async def calculate_carbon_offset(
    body: CarbonCalculationRequest,
    db: AsyncSessionDep,
    rng: RandomSourceDep,
) -> APIResponse[CarbonCalculationResponse]:
    """Estimate carbon stock and CO2-equivalent offset.

    Supply tree_count or area_hectares (area wins when both are present).
    With an upload_id the CO2 figure is also stored as that upload's offset.
    """
    result = await calculate_and_persist(
        body.to_input(), db=db, upload_id=body.upload_id, rng=rng
    )

    return APIResponse.success(
        message_code=MessageCode.CARBON_CALCULATED,
        data=CarbonCalculationResponse.from_result(result),
    )


@router.post("/validate", response_model=ValidationAPIResponse)
async def validate_carbon_engine(
    rng: RandomSourceDep,
    fixed_input: CarbonInputFields | None = None,
    trials: int = Query(
        default=DEFAULT_VALIDATION_TRIALS, ge=1, le=MAX_VALIDATION_TRIALS
    ),
) -> APIResponse[ValidationReport]:
    """Run the estimation engine repeatedly and report the CO2 spread.

    Without a body every trial uses fresh random inputs, so the variance mixes
    input diversity with engine jitter. Posting fixed inputs isolates the jitter.
    """
    result = run_validation(
        trials=trials,
        rng=rng,
        fixed_input=fixed_input.to_input() if fixed_input else None,
    )

    if result.degenerate:
        message_code = MessageCode.VALIDATION_DEGENERATE
    elif result.passed:
        message_code = MessageCode.VALIDATION_PASSED
    else:
        message_code = MessageCode.VALIDATION_VARIANCE_EXCEEDED

    return APIResponse.success(
        message_code=message_code,
        data=ValidationReport.from_result(result),
    )
