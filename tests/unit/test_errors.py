"""Tests for sl_common.errors and sl_common.response."""

from unittest.mock import MagicMock

from src.sl_common.errors import (
    AppError,
    BalanceExistsError,
    BalanceNotFoundError,
    NoteNotPendingError,
    TransactionNotFoundError,
    UserNotFoundError,
)
from src.sl_common.response import ApiResponse, error_response, respond, success_response


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_custom_http_status(self) -> None:
        err = AppError(code=1002, message="Email taken", http_status=409)
        assert err.http_status == 409

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1, message="x"), Exception)


class TestSpecificErrors:
    def test_balance_not_found(self) -> None:
        err = BalanceNotFoundError("baki", "b-1")
        assert err.code == 2002
        assert err.http_status == 404
        assert "baki" in err.message
        assert "b-1" in err.message

    def test_balance_exists_is_conflict(self) -> None:
        err = BalanceExistsError("account_balance", "u-1", "c-1")
        assert err.http_status == 409
        assert "u-1" in err.message and "c-1" in err.message

    def test_note_not_pending(self) -> None:
        err = NoteNotPendingError("n-1", "APPROVED")
        assert err.code == 3002
        assert err.http_status == 409
        assert "APPROVED" in err.message

    def test_transaction_not_found(self) -> None:
        err = TransactionNotFoundError("t-1")
        assert err.http_status == 404

    def test_user_not_found(self) -> None:
        assert UserNotFoundError("u-9").code == 1006


class TestApiResponse:
    def test_success_response_defaults(self) -> None:
        resp = success_response({"a": 1})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"a": 1}
        assert resp.request_id.startswith("req_")

    def test_error_response_has_no_data(self) -> None:
        resp = error_response(2002, "missing")
        assert resp.code == 2002
        assert resp.data is None

    def test_respond_uses_request_id_from_state(self) -> None:
        request = MagicMock()
        request.state.request_id = "req_fromstate"
        resp = respond(request, [1, 2], message="Done")
        assert resp.request_id == "req_fromstate"
        assert resp.message == "Done"
        assert resp.data == [1, 2]

    def test_respond_keeps_generated_id_without_state(self) -> None:
        request = MagicMock()
        request.state = object()
        resp = respond(request)
        assert isinstance(resp, ApiResponse)
        assert resp.request_id.startswith("req_")
