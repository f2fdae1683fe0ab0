"""Error envelope rendering."""

import json

import pytest

from app.core.errors import HTTP_STATUS, AppError, ErrorKind, Failure, app_error_handler


class TestFailure:

    def test_flags(self):
        assert Failure(ErrorKind.STORE_UNAVAILABLE, "retry").retryable
        assert not Failure(ErrorKind.STORE_UNAVAILABLE, "retry").manual_followup
        assert Failure(ErrorKind.CONFLICT_OR_PARTIAL_WRITE, "check").manual_followup
        assert not Failure(ErrorKind.VALIDATION_ERROR, "bad").retryable

    def test_every_kind_has_a_status(self):
        assert set(HTTP_STATUS) == set(ErrorKind)


class TestHandler:

    @pytest.mark.asyncio
    async def test_store_unavailable_is_retryable(self):
        exc = AppError.from_failure(Failure(ErrorKind.STORE_UNAVAILABLE, "Approval failed, please retry"))
        response = await app_error_handler(None, exc)
        body = json.loads(response.body)
        assert response.status_code == 503
        assert body["error"]["retryable"] is True
        assert body["error"]["code"] == "STORE_UNAVAILABLE"
        assert "details" not in body["error"]

    @pytest.mark.asyncio
    async def test_details_and_redirect(self):
        exc = AppError(
            ErrorKind.FORBIDDEN,
            "Access denied",
            redirect_to="/access-denied",
            details={"reason": "missing_permission"},
        )
        response = await app_error_handler(None, exc)
        body = json.loads(response.body)["error"]
        assert response.status_code == 403
        assert body == {
            "code": "FORBIDDEN",
            "message": "Access denied",
            "status": 403,
            "redirect_to": "/access-denied",
            "details": {"reason": "missing_permission"},
        }
