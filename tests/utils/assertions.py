"""Test utilities for asserting API responses and message codes."""

from typing import Any

from httpx import Response

from src.api.core.exceptions.base import CarbonApiException
from src.api.core.messages import MessageCode


def assert_success_response(
    response: Response,
    expected_message_code: MessageCode = MessageCode.SUCCESS,
    expected_status: int = 200,
    data_assertions: dict[str, Any] | None = None,
) -> Any:
    """Assert that response is successful with expected message code.

    Args:
        response: HTTP response to check
        expected_message_code: Expected message code
        expected_status: Expected HTTP status code
        data_assertions: Optional dict of assertions on response data; dotted
            keys such as "upload.status" reach into nested objects

    Returns:
        Response data for further assertions
    """
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )

    json_data = response.json()
    assert json_data.get("message_code") == expected_message_code.value, (
        f"Expected message_code {expected_message_code.value}, "
        f"got {json_data.get('message_code')}"
    )
    assert "message" in json_data, "Success response should have message"

    data = json_data.get("data")
    for field, expected_value in (data_assertions or {}).items():
        current = data
        for part in field.split("."):
            current = current[part]
        assert (
            current == expected_value
        ), f"Expected {field} to be {expected_value}, got {current}"

    return data


def assert_error_response(
    response: Response,
    expected_message_code: MessageCode,
    expected_status: int,
    expected_message: str | None = None,
) -> dict[str, Any]:
    """Assert that response is an error with expected message code.

    Returns:
        The full error body (message_code, message, details)
    """
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )

    json_data = response.json()
    assert json_data.get("message_code") == expected_message_code.value, (
        f"Expected message_code {expected_message_code.value}, "
        f"got {json_data.get('message_code')}"
    )

    if expected_message:
        assert json_data.get("message") == expected_message, (
            f"Expected message '{expected_message}', "
            f"got '{json_data.get('message')}'"
        )

    return json_data


def assert_validation_error(
    response: Response, fields: list[str] | None = None
) -> dict[str, Any]:
    """Assert that response is a request validation error.

    Args:
        response: HTTP response to check
        fields: Optional field names that must appear in the error locations
    """
    json_data = assert_error_response(response, MessageCode.INVALID_INPUT, 422)

    if fields:
        validation_errors = json_data["details"]["validation_errors"]
        failing_fields = {str(err["loc"][-1]) for err in validation_errors}
        for field in fields:
            assert (
                field in failing_fields
            ), f"Expected validation error for field '{field}', got {failing_fields}"

    return json_data


def assert_api_exception(
    exception: CarbonApiException,
    expected_message_code: MessageCode,
    expected_status: int | None = None,
) -> None:
    """Assert that a CarbonApiException has expected properties."""
    assert exception.message_code == expected_message_code, (
        f"Expected message_code {expected_message_code}, "
        f"got {exception.message_code}"
    )

    if expected_status:
        assert exception.status_code == expected_status, (
            f"Expected status_code {expected_status}, got {exception.status_code}"
        )
