"""Data records exchanged with the ChatSecure push server."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .errors import InvalidResponseError
from .protocol import Endpoint, JsonKey


class DeviceKind(Enum):
    """Push platforms a device can be registered for."""

    APNS = "apns"
    GCM = "gcm"

    @property
    def endpoint(self) -> Endpoint:
        """Device resource path for this platform."""
        return Endpoint.APNS if self is DeviceKind.APNS else Endpoint.GCM

    @property
    def token_key(self) -> JsonKey:
        """Key that links a whitelist token to a device of this platform."""
        return JsonKey.APNS_DEVICE if self is DeviceKind.APNS else JsonKey.GCM_DEVICE


def _expect_object(payload: Any, model: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise InvalidResponseError(f"{model} payload is not a JSON object")
    return payload


def _required_str(payload: dict[str, Any], key: JsonKey, model: str) -> str:
    value = payload.get(key)
    # Server ids may arrive as integers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise InvalidResponseError(f"{model} payload is missing '{key}'")
    return value


def _optional_str(payload: dict[str, Any], key: JsonKey, model: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if not isinstance(value, str):
        raise InvalidResponseError(f"{model} field '{key}' is not a string")
    return value


def _optional_datetime(
    payload: dict[str, Any], key: JsonKey, model: str
) -> datetime | None:
    value = _optional_str(payload, key, model)
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as err:
        raise InvalidResponseError(
            f"{model} field '{key}' is not an ISO-8601 timestamp"
        ) from err


@dataclass(slots=True)
class Account:
    """Account on the push server.

    The password is only ever sent to the server. Accounts parsed from a
    response leave it unset, and it is never part of ``to_json``.
    """

    username: str
    password: str | None = field(default=None, repr=False)
    email: str | None = None
    token: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> Account:
        """Build an account from a server response or a persisted dict."""
        data = _expect_object(payload, "Account")
        return cls(
            username=_required_str(data, JsonKey.USERNAME, "Account"),
            email=_optional_str(data, JsonKey.EMAIL, "Account"),
            token=_optional_str(data, JsonKey.TOKEN, "Account"),
        )

    def to_json(self) -> dict[str, Any]:
        """Serialize for local persistence, without the password."""
        data: dict[str, Any] = {JsonKey.USERNAME.value: self.username}
        if self.email is not None:
            data[JsonKey.EMAIL.value] = self.email
        if self.token is not None:
            data[JsonKey.TOKEN.value] = self.token
        return data


@dataclass(slots=True)
class Device:
    """A push-capable device registered to an account."""

    token: str
    name: str | None = None
    device_id: str | None = None
    server_id: str | None = None
    active: bool | None = None
    date_created: datetime | None = None
    date_expires: datetime | None = None
    kind: DeviceKind = DeviceKind.APNS

    @classmethod
    def from_json(cls, payload: Any, kind: DeviceKind = DeviceKind.APNS) -> Device:
        data = _expect_object(payload, "Device")
        active = data.get(JsonKey.ACTIVE)
        if active is not None and not isinstance(active, bool):
            raise InvalidResponseError("Device field 'active' is not a boolean")
        return cls(
            token=_required_str(data, JsonKey.REGISTRATION_ID, "Device"),
            name=_optional_str(data, JsonKey.NAME, "Device"),
            device_id=_optional_str(data, JsonKey.DEVICE_ID, "Device"),
            server_id=_optional_str(data, JsonKey.ID, "Device"),
            active=active,
            date_created=_optional_datetime(data, JsonKey.DATE_CREATED, "Device"),
            date_expires=_optional_datetime(data, JsonKey.DATE_EXPIRES, "Device"),
            kind=kind,
        )


@dataclass(slots=True)
class Token:
    """Whitelist token that lets its holder push messages to an account."""

    id: str
    name: str | None = None
    apns_device: str | None = None
    gcm_device: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> Token:
        data = _expect_object(payload, "Token")
        return cls(
            id=_required_str(data, JsonKey.ID, "Token"),
            name=_optional_str(data, JsonKey.NAME, "Token"),
            apns_device=_optional_str(data, JsonKey.APNS_DEVICE, "Token"),
            gcm_device=_optional_str(data, JsonKey.GCM_DEVICE, "Token"),
        )


@dataclass(slots=True)
class Message:
    """Push message payload.

    ``url`` overrides the client's message endpoint, which is how a holder
    of a whitelist token reaches another user's server.
    """

    data: dict[str, Any] = field(default_factory=dict)
    url: str | None = None
    token: str | None = None

    @classmethod
    def from_json(cls, payload: Any, url: str | None = None) -> Message:
        data = _expect_object(payload, "Message")
        body = data.get(JsonKey.DATA, {})
        if body is None:
            body = {}
        if not isinstance(body, dict):
            raise InvalidResponseError("Message field 'data' is not a JSON object")
        return cls(
            data=body,
            url=url,
            token=_optional_str(data, JsonKey.TOKEN, "Message"),
        )
