"""Tests for error codes and hierarchy."""

from __future__ import annotations

from chatsecure_push.errors import (
    ChatSecurePushConnectionError,
    ChatSecurePushError,
    ChatSecurePushTimeout,
    ErrorCode,
    InternalError,
    InvalidJSONError,
    InvalidRequestError,
    InvalidResponseError,
    NoDataError,
    ResponseError,
)


class TestErrorCodes:
    """Internal codes never overlap server statuses."""

    def test_internal_codes_start_at_600(self) -> None:
        assert all(code >= 600 for code in ErrorCode)

    def test_internal_error_codes(self) -> None:
        assert NoDataError().code == ErrorCode.NO_DATA
        assert InvalidJSONError().code == ErrorCode.INVALID_JSON
        assert InvalidResponseError().code == ErrorCode.INVALID_RESPONSE
        assert InvalidRequestError().code == ErrorCode.INVALID_REQUEST

    def test_default_message_is_docstring(self) -> None:
        assert str(NoDataError()) == "Server returned a success status without a body."

    def test_response_error_code_is_status(self) -> None:
        err = ResponseError(403, "Forbidden")
        assert err.code == 403
        assert err.status == 403
        assert str(err) == "Forbidden"

    def test_response_error_default_message(self) -> None:
        assert str(ResponseError(500)) == "Server responded with HTTP 500"

    def test_transport_errors_have_no_code(self) -> None:
        assert ChatSecurePushTimeout("t").code is None
        assert ChatSecurePushConnectionError("c").code is None


class TestHierarchy:
    """All errors share one base class."""

    def test_subclasses(self) -> None:
        for cls in (
            ChatSecurePushTimeout,
            ChatSecurePushConnectionError,
            ResponseError,
            InternalError,
        ):
            assert issubclass(cls, ChatSecurePushError)
        for cls in (NoDataError, InvalidJSONError, InvalidResponseError, InvalidRequestError):
            assert issubclass(cls, InternalError)
