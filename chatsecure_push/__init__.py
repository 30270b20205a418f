"""Client SDK for the ChatSecure push server."""

__version__ = "0.1.0"

from .client import ChatSecurePushClient, Result
from .endpoints import (
    AccountEndpoint,
    APIEndpoint,
    APIRequest,
    DeviceEndpoint,
    MessageEndpoint,
    TokenEndpoint,
)
from .errors import (
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
from .models import Account, Device, DeviceKind, Message, Token
from .protocol import Endpoint, JsonKey, Method

__all__ = [
    "APIEndpoint",
    "APIRequest",
    "Account",
    "AccountEndpoint",
    "ChatSecurePushClient",
    "ChatSecurePushConnectionError",
    "ChatSecurePushError",
    "ChatSecurePushTimeout",
    "Device",
    "DeviceEndpoint",
    "DeviceKind",
    "Endpoint",
    "ErrorCode",
    "InternalError",
    "InvalidJSONError",
    "InvalidRequestError",
    "InvalidResponseError",
    "JsonKey",
    "Message",
    "MessageEndpoint",
    "Method",
    "NoDataError",
    "ResponseError",
    "Result",
    "Token",
    "TokenEndpoint",
    "__version__",
]
