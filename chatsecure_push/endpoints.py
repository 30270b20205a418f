"""Request builders and response parsers for each REST resource."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import (
    InvalidRequestError,
    InvalidResponseError,
    NoDataError,
    ResponseError,
)
from .models import Account, Device, DeviceKind, Message, Token
from .protocol import (
    JSON_CONTENT_TYPE,
    Endpoint,
    JsonKey,
    Method,
    decode_json,
    encode_body,
    extract_error_message,
)

# Statuses below this bound are treated as success
_HTTP_ERROR_STATUS = 400


@dataclass(slots=True)
class APIRequest:
    """HTTP request ready to be dispatched on the shared session."""

    method: Method
    url: str
    body: bytes | None = None
    headers: dict[str, str] = field(default_factory=dict)


def _require(value: str | None, name: str) -> str:
    if not value:
        raise InvalidRequestError(f"'{name}' is required")
    return value


class APIEndpoint:
    """Base builder bound to the API base URL."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"

    def url(self, path: str, suffix: str | None = None) -> str:
        url = f"{self.base_url}{path.strip('/')}/"
        if suffix:
            url = f"{url}{suffix.strip('/')}/"
        return url

    def build_request(
        self,
        method: Method,
        path: str,
        suffix: str | None = None,
        fields: Mapping[str, Any] | None = None,
        *,
        url: str | None = None,
    ) -> APIRequest:
        """Build a request for ``path``, or for an absolute ``url`` override."""
        request = APIRequest(method=method, url=url or self.url(path, suffix))
        if fields is not None:
            request.body = encode_body(fields)
            request.headers["Content-Type"] = JSON_CONTENT_TYPE
        return request

    def check_response(
        self,
        status: int | None,
        error: BaseException | None,
        data: bytes | None = None,
    ) -> None:
        """Raise the transport error or an HTTP error status, if any.

        A transport error always wins over whatever status or body came
        with it.
        """
        if error is not None:
            raise error
        if status is None:
            raise NoDataError("No response received")
        if status >= _HTTP_ERROR_STATUS:
            raise ResponseError(status, extract_error_message(data))

    def parse_json(
        self, data: bytes | None, status: int | None, error: BaseException | None
    ) -> Any:
        """Validate a completed exchange and return the decoded JSON body."""
        self.check_response(status, error, data)
        if not data:
            raise NoDataError()
        return decode_json(data)

    def pubsub_request(self) -> APIRequest:
        return self.build_request(Method.GET, Endpoint.PUBSUB)

    def parse_pubsub(
        self, data: bytes | None, status: int | None, error: BaseException | None
    ) -> str:
        """Return the pubsub service JID advertised by the server."""
        payload = self.parse_json(data, status, error)
        jid = payload.get(JsonKey.JID) if isinstance(payload, dict) else None
        if not isinstance(jid, str) or not jid:
            raise InvalidResponseError("Pubsub payload is missing 'jid'")
        return jid


class AccountEndpoint(APIEndpoint):
    """Builder for the ``accounts`` resource."""

    def post_request(
        self, username: str, password: str, email: str | None = None
    ) -> APIRequest:
        fields = {
            JsonKey.USERNAME: _require(username, "username"),
            JsonKey.PASSWORD: _require(password, "password"),
            JsonKey.EMAIL: email,
        }
        return self.build_request(Method.POST, Endpoint.ACCOUNTS, fields=fields)

    def account_from_response(
        self, data: bytes | None, status: int | None, error: BaseException | None
    ) -> Account:
        return Account.from_json(self.parse_json(data, status, error))


class DeviceEndpoint(APIEndpoint):
    """Builder for the ``device/apns`` and ``device/gcm`` resources."""

    def __init__(self, base_url: str, kind: DeviceKind = DeviceKind.APNS) -> None:
        super().__init__(base_url)
        self.kind = kind

    def _fields(
        self, token: str, name: str | None, device_id: str | None
    ) -> dict[str, Any]:
        return {
            JsonKey.REGISTRATION_ID: _require(token, "token"),
            JsonKey.NAME: name,
            JsonKey.DEVICE_ID: device_id,
        }

    def post_request(
        self, token: str, name: str | None = None, device_id: str | None = None
    ) -> APIRequest:
        return self.build_request(
            Method.POST, self.kind.endpoint, fields=self._fields(token, name, device_id)
        )

    def put_request(
        self,
        server_id: str,
        token: str,
        name: str | None = None,
        device_id: str | None = None,
    ) -> APIRequest:
        """Build a partial update; fields left as None are not sent."""
        return self.build_request(
            Method.PUT,
            self.kind.endpoint,
            _require(server_id, "server_id"),
            fields=self._fields(token, name, device_id),
        )

    def device_from_response(
        self, data: bytes | None, status: int | None, error: BaseException | None
    ) -> Device:
        return Device.from_json(self.parse_json(data, status, error), kind=self.kind)


class TokenEndpoint(APIEndpoint):
    """Builder for the ``tokens`` resource."""

    def post_request(
        self,
        device_id: str,
        name: str | None = None,
        kind: DeviceKind = DeviceKind.APNS,
    ) -> APIRequest:
        fields = {
            kind.token_key: _require(device_id, "device_id"),
            JsonKey.NAME: name,
        }
        return self.build_request(Method.POST, Endpoint.TOKENS, fields=fields)

    def get_request(self, token_id: str | None = None) -> APIRequest:
        return self.build_request(Method.GET, Endpoint.TOKENS, token_id)

    def delete_request(self, token_id: str) -> APIRequest:
        return self.build_request(
            Method.DELETE, Endpoint.TOKENS, _require(token_id, "token_id")
        )

    def token_from_response(
        self, data: bytes | None, status: int | None, error: BaseException | None
    ) -> Token:
        return Token.from_json(self.parse_json(data, status, error))

    def tokens_from_response(
        self,
        data: bytes | None,
        status: int | None,
        error: BaseException | None,
        *,
        scoped: bool = False,
    ) -> list[Token]:
        """Parse a token list; any malformed element fails the whole list.

        A ``scoped`` request names one token id, and the server may answer
        it with the bare token object instead of a ``results`` array.
        """
        payload = self.parse_json(data, status, error)
        if not isinstance(payload, dict):
            raise InvalidResponseError("Token list payload is not a JSON object")
        if JsonKey.RESULTS not in payload:
            if not scoped:
                raise InvalidResponseError("Token list payload is missing 'results'")
            return [Token.from_json(payload)]
        results = payload[JsonKey.RESULTS]
        if not isinstance(results, list):
            raise InvalidResponseError("Token list 'results' is not an array")
        return [Token.from_json(item) for item in results]


class MessageEndpoint(APIEndpoint):
    """Builder for the ``messages`` resource."""

    @property
    def default_url(self) -> str:
        return self.url(Endpoint.MESSAGES)

    def post_request(self, message: Message) -> APIRequest:
        fields = {
            JsonKey.TOKEN: message.token,
            JsonKey.DATA: message.data,
        }
        return self.build_request(
            Method.POST, Endpoint.MESSAGES, fields=fields, url=message.url
        )

    def message_from_response(
        self,
        data: bytes | None,
        status: int | None,
        error: BaseException | None,
        url: str | None = None,
    ) -> Message:
        return Message.from_json(
            self.parse_json(data, status, error), url=url or self.default_url
        )
