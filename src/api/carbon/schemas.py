"""Carbon calculation and validation API schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse
from src.modules.carbon.constants import LandCoverClass
from src.modules.carbon.estimation import (
    AreaSource,
    CarbonCalculationInput,
    CarbonCalculationResult,
)
from src.modules.carbon.validation import ValidationMode, ValidationResult


class CarbonInputFields(BaseModel):
    tree_count: int | None = Field(default=None, ge=0)
    area_hectares: float | None = Field(default=None, ge=0)
    land_cover_class: str | None = None

    def to_input(self) -> CarbonCalculationInput:
        return CarbonCalculationInput(
            tree_count=self.tree_count,
            area_hectares=self.area_hectares,
            land_cover_class=self.land_cover_class,
        )


class CarbonCalculationRequest(CarbonInputFields):
    # When set, the result is written onto this tree upload
    upload_id: UUID | None = None


class CarbonCalculationResponse(BaseModel):
    area_hectares: float
    carbon_density: float
    carbon_stock_tons: float
    co2_equivalent_tons: float
    land_cover_class: LandCoverClass
    area_source: AreaSource

    @classmethod
    def from_result(
        cls, result: CarbonCalculationResult
    ) -> "CarbonCalculationResponse":
        return cls(**result.as_dict())


class ValidationRunRecord(BaseModel):
    run_number: int
    tree_count: int | None
    land_cover_class: str | None
    area_hectares: float | None
    co2_tons: float


class ValidationReport(BaseModel):
    passed: bool
    variance_percent: float
    mean: float
    threshold_percent: float
    mode: ValidationMode
    degenerate: bool
    runs: list[ValidationRunRecord]

    @classmethod
    def from_result(cls, result: ValidationResult) -> "ValidationReport":
        return cls(
            passed=result.passed,
            variance_percent=result.variance_percent,
            mean=result.mean,
            threshold_percent=result.threshold_percent,
            mode=result.mode,
            degenerate=result.degenerate,
            runs=[
                ValidationRunRecord(
                    run_number=run.run_number,
                    tree_count=run.tree_count,
                    land_cover_class=run.land_cover_class,
                    area_hectares=run.area_hectares,
                    co2_tons=run.co2_tons,
                )
                for run in result.runs
            ],
        )


CarbonCalculationAPIResponse = APIResponse[CarbonCalculationResponse]
ValidationAPIResponse = APIResponse[ValidationReport]
