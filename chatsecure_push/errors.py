"""Client error types for ChatSecure push server interactions.

Network and HTTP failures carry the HTTP status code (100-500) in ``code``.
Internal failures use the ``ErrorCode`` range starting at 600 so they are
never mistaken for a status reported by the server.
"""

from __future__ import annotations

from enum import IntEnum


class ErrorCode(IntEnum):
    """Numeric codes for failures that did not come from the server."""

    NO_DATA = 601
    INVALID_JSON = 602
    INVALID_RESPONSE = 603
    INVALID_REQUEST = 604


class ChatSecurePushError(Exception):
    """Base error for ChatSecure push client failures."""

    code: int | None = None


class ChatSecurePushTimeout(ChatSecurePushError):
    """Timeout while communicating with the push server."""


class ChatSecurePushConnectionError(ChatSecurePushError):
    """Network connection to the push server failed."""


class ResponseError(ChatSecurePushError):
    """HTTP response error from the push server."""

    def __init__(self, status: int, message: str | None = None) -> None:
        super().__init__(message or f"Server responded with HTTP {status}")
        self.status = status
        self.code = status
        self.server_message = message


class InternalError(ChatSecurePushError):
    """Failure raised by the client itself rather than the network."""

    code: int

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__doc__)


class NoDataError(InternalError):
    """Server returned a success status without a body."""

    code = ErrorCode.NO_DATA


class InvalidJSONError(InternalError):
    """Response body is not valid JSON."""

    code = ErrorCode.INVALID_JSON


class InvalidResponseError(InternalError):
    """Response JSON does not have the expected shape."""

    code = ErrorCode.INVALID_RESPONSE


class InvalidRequestError(InternalError):
    """Request parameters cannot form a valid request."""

    code = ErrorCode.INVALID_REQUEST
