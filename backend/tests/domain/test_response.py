"""Tests for the response envelope."""

from dataclasses import FrozenInstanceError
from http import HTTPStatus

import pytest
from bill.domain.errors import ErrorCode
from bill.domain.response import ErrorResponse, SuccessResponse, build_error_response, build_response, to_payload


class TestBuildResponse:
    def test_success_envelope(self) -> None:
        response = build_response(data={"id": 1}, status_code=HTTPStatus.CREATED, message="Created")

        assert isinstance(response, SuccessResponse)
        assert response.success is True
        assert response.data == {"id": 1}
        assert response.status_code == HTTPStatus.CREATED
        assert response.message == "Created"

    def test_envelope_is_immutable(self) -> None:
        response = build_response(data=None, status_code=HTTPStatus.OK, message="ok")

        with pytest.raises(FrozenInstanceError):
            response.message = "changed"  # type: ignore[misc]


class TestBuildErrorResponse:
    def test_error_envelope_without_details(self) -> None:
        response = build_error_response(
            code=ErrorCode.INTERNAL_ERROR,
            message="An unexpected error occurred",
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
        )

        assert isinstance(response, ErrorResponse)
        assert response.success is False
        assert response.code == ErrorCode.INTERNAL_ERROR
        assert response.details is None

    def test_details_always_carry_code(self) -> None:
        """Test that the error code is merged into any details given."""
        response = build_error_response(
            code=ErrorCode.USER_ALREADY_EXISTS,
            message="It was not possible to create the user",
            status_code=HTTPStatus.BAD_REQUEST,
            details={"field": "email"},
        )

        assert response.details == {"field": "email", "code": "BILL-201"}

    def test_details_code_cannot_be_overridden(self) -> None:
        response = build_error_response(
            code=ErrorCode.USER_ALREADY_EXISTS,
            message="duplicate",
            status_code=HTTPStatus.BAD_REQUEST,
            details={"code": "OTHER"},
        )

        assert response.details == {"code": "BILL-201"}


class TestToPayload:
    def test_success_payload(self) -> None:
        payload = to_payload(build_response(data=[1, 2], status_code=HTTPStatus.OK, message="ok"))

        assert payload == {"success": True, "status_code": 200, "message": "ok", "data": [1, 2]}

    def test_error_payload(self) -> None:
        payload = to_payload(
            build_error_response(
                code=ErrorCode.USER_ALREADY_EXISTS,
                message="It was not possible to create the user",
                status_code=HTTPStatus.BAD_REQUEST,
                details={},
            )
        )

        assert payload == {
            "success": False,
            "status_code": 400,
            "message": "It was not possible to create the user",
            "code": "BILL-201",
            "details": {"code": "BILL-201"},
        }

    def test_error_payload_omits_missing_details(self) -> None:
        payload = to_payload(
            build_error_response(
                code=ErrorCode.INVALID_REQUEST,
                message="Invalid request data",
                status_code=HTTPStatus.BAD_REQUEST,
            )
        )

        assert "details" not in payload
        assert "data" not in payload
