"""Wire constants and JSON helpers for the ChatSecure push REST API."""

from __future__ import annotations

import json
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from .errors import InvalidJSONError, InvalidRequestError

JSON_CONTENT_TYPE = "application/json"

# Keys the server may use for a human readable error description
_ERROR_MESSAGE_KEYS = ("detail", "message", "error")


class Method(StrEnum):
    """HTTP methods used by the REST API."""

    OPTIONS = "OPTIONS"
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class Endpoint(StrEnum):
    """Resource paths relative to the API base URL."""

    ACCOUNTS = "accounts"
    APNS = "device/apns"
    GCM = "device/gcm"
    TOKENS = "tokens"
    MESSAGES = "messages"
    PUBSUB = "pubsub"


class JsonKey(StrEnum):
    """Field names of request and response bodies."""

    USERNAME = "username"
    PASSWORD = "password"
    EMAIL = "email"
    TOKEN = "token"
    REGISTRATION_ID = "registration_id"
    NAME = "name"
    DEVICE_ID = "device_id"
    ACTIVE = "active"
    DATE_CREATED = "date_created"
    DATE_EXPIRES = "date_expires"
    APNS_DEVICE = "apns_device"
    GCM_DEVICE = "gcm_device"
    DATA = "data"
    MESSAGE = "message"
    APS = "aps"
    ALERT = "alert"
    ID = "id"
    RESULTS = "results"
    JID = "jid"


def encode_body(fields: Mapping[str, Any]) -> bytes:
    """Encode request fields as JSON, leaving out fields that are None.

    Raises:
        InvalidRequestError: If a value cannot be represented as JSON.
    """
    payload = {str(key): value for key, value in fields.items() if value is not None}
    try:
        return json.dumps(payload, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as err:
        raise InvalidRequestError(f"Request body is not JSON encodable: {err}") from err


def decode_json(data: bytes) -> Any:
    """Decode a response body.

    Raises:
        InvalidJSONError: If the body is not UTF-8 encoded JSON.
    """
    try:
        return json.loads(data)
    except (UnicodeDecodeError, ValueError) as err:
        raise InvalidJSONError(f"Response body is not valid JSON: {err}") from err


def extract_error_message(data: bytes | None) -> str | None:
    """Return the error description from an error response body, if any."""
    if not data:
        return None
    try:
        payload = json.loads(data)
    except (UnicodeDecodeError, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    for key in _ERROR_MESSAGE_KEYS:
        message = payload.get(key)
        if isinstance(message, str) and message:
            return message
    return None
