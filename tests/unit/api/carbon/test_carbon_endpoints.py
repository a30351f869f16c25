"""Carbon calculation and validation endpoint tests."""

from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient

from src.api.core.messages import MessageCode
from src.modules.carbon.use_cases import create_tree_upload, get_tree_upload
from tests.utils.assertions import (
    assert_error_response,
    assert_success_response,
    assert_validation_error,
)
from tests.utils.fakes import TREE_IMAGE_URL


@pytest.mark.asyncio
async def test_calculate_from_area(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate",
        json={"area_hectares": 10, "land_cover_class": "mangrove"},
    )

    data = assert_success_response(
        response,
        MessageCode.CARBON_CALCULATED,
        data_assertions={
            "land_cover_class": "mangrove",
            "area_source": "measured_area",
        },
    )
    assert 5340.0 <= data["co2_equivalent_tons"] <= 5672.0


@pytest.mark.asyncio
async def test_calculate_from_tree_count(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate", json={"tree_count": 400}
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["area_source"] == "tree_count"
    assert data["land_cover_class"] == "default"
    assert 0.99 <= data["area_hectares"] <= 1.01


@pytest.mark.asyncio
async def test_calculate_zero_area_with_tree_count(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate", json={"tree_count": 5, "area_hectares": 0}
    )

    data = assert_success_response(
        response,
        MessageCode.CARBON_CALCULATED,
        data_assertions={"area_source": "tree_count"},
    )
    assert data["co2_equivalent_tons"] > 0


@pytest.mark.asyncio
async def test_calculate_without_size_is_bad_request(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate", json={"land_cover_class": "mangrove"}
    )

    assert_error_response(
        response, MessageCode.INVALID_INPUT, status.HTTP_400_BAD_REQUEST
    )


@pytest.mark.asyncio
async def test_calculate_rejects_negative_counts(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate", json={"tree_count": -1}
    )

    assert_validation_error(response, fields=["tree_count"])


@pytest.mark.asyncio
async def test_calculate_persists_offset_on_upload(
    public_client: AsyncClient, db_session
):
    upload = await create_tree_upload(db_session, image_url=TREE_IMAGE_URL)

    response = await public_client.post(
        "/v1/carbon/calculate",
        json={"tree_count": 25, "upload_id": str(upload.id)},
    )

    assert response.status_code == status.HTTP_200_OK
    await db_session.refresh(upload)
    stored = await get_tree_upload(db_session, upload.id)
    assert stored.co2_offset == response.json()["data"]["co2_equivalent_tons"]


@pytest.mark.asyncio
async def test_calculate_unknown_upload_is_not_found(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/calculate", json={"tree_count": 5, "upload_id": str(uuid4())}
    )

    assert_error_response(
        response, MessageCode.UPLOAD_NOT_FOUND, status.HTTP_404_NOT_FOUND
    )


@pytest.mark.asyncio
async def test_validate_runs_twenty_trials_by_default(public_client: AsyncClient):
    response = await public_client.post("/v1/carbon/validate")

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    data = body["data"]
    assert len(data["runs"]) == 20
    assert data["mode"] == "varied_inputs"
    assert data["threshold_percent"] == 10.0
    assert data["variance_percent"] >= 0
    assert body["message_code"] == (
        "VALIDATION_PASSED" if data["passed"] else "VALIDATION_VARIANCE_EXCEEDED"
    )


@pytest.mark.asyncio
async def test_validate_with_fixed_inputs(public_client: AsyncClient):
    response = await public_client.post(
        "/v1/carbon/validate",
        params={"trials": 30},
        json={"area_hectares": 12.5, "land_cover_class": "tropical_forest"},
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message_code"] == "VALIDATION_PASSED"
    data = body["data"]
    assert data["mode"] == "fixed_inputs"
    assert data["passed"] is True
    assert len(data["runs"]) == 30
    assert {run["land_cover_class"] for run in data["runs"]} == {"tropical_forest"}


@pytest.mark.asyncio
async def test_validate_zero_output_is_reported_as_degenerate(
    public_client: AsyncClient,
):
    response = await public_client.post(
        "/v1/carbon/validate", params={"trials": 5}, json={"tree_count": 0}
    )

    assert_success_response(
        response,
        MessageCode.VALIDATION_DEGENERATE,
        data_assertions={"passed": False, "degenerate": True, "mean": 0.0},
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("trials", [0, 1001])
async def test_validate_rejects_out_of_range_trials(
    public_client: AsyncClient, trials
):
    response = await public_client.post(
        "/v1/carbon/validate", params={"trials": trials}
    )

    assert_validation_error(response, fields=["trials"])
