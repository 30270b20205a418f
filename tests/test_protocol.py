"""Tests for wire constants and JSON helpers."""

from __future__ import annotations

import json

import pytest

from chatsecure_push.errors import ErrorCode, InvalidJSONError, InvalidRequestError
from chatsecure_push.protocol import (
    Endpoint,
    JsonKey,
    Method,
    decode_json,
    encode_body,
    extract_error_message,
)


class TestEnums:
    """Enumerations map to the fixed wire strings."""

    def test_endpoint_paths(self) -> None:
        assert Endpoint.ACCOUNTS == "accounts"
        assert Endpoint.APNS == "device/apns"
        assert Endpoint.GCM == "device/gcm"
        assert Endpoint.TOKENS == "tokens"
        assert Endpoint.MESSAGES == "messages"
        assert Endpoint.PUBSUB == "pubsub"

    def test_json_keys_are_snake_case(self) -> None:
        assert JsonKey.REGISTRATION_ID == "registration_id"
        assert JsonKey.DATE_CREATED == "date_created"
        assert JsonKey.APNS_DEVICE == "apns_device"
        assert all(key.value == key.value.lower() for key in JsonKey)

    def test_method_values(self) -> None:
        assert {m.value for m in Method} == {
            "OPTIONS",
            "GET",
            "HEAD",
            "POST",
            "PUT",
            "PATCH",
            "DELETE",
        }


class TestEncodeBody:
    """Tests for encode_body()."""

    def test_none_values_are_dropped(self) -> None:
        body = encode_body({JsonKey.USERNAME: "alice", JsonKey.EMAIL: None})
        assert json.loads(body) == {"username": "alice"}

    def test_nested_values_are_kept(self) -> None:
        body = encode_body({JsonKey.DATA: {"aps": {"alert": "hi"}}})
        assert json.loads(body) == {"data": {"aps": {"alert": "hi"}}}

    def test_unencodable_value_raises_invalid_request(self) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            encode_body({JsonKey.DATA: {"when": object()}})
        assert exc_info.value.code == ErrorCode.INVALID_REQUEST

    def test_nan_raises_invalid_request(self) -> None:
        with pytest.raises(InvalidRequestError):
            encode_body({JsonKey.DATA: {"value": float("nan")}})


class TestDecodeJson:
    """Tests for decode_json()."""

    def test_decodes_object(self) -> None:
        assert decode_json(b'{"id": "a"}') == {"id": "a"}

    def test_malformed_json_raises(self) -> None:
        with pytest.raises(InvalidJSONError) as exc_info:
            decode_json(b"{not json")
        assert exc_info.value.code == 602

    def test_invalid_utf8_raises(self) -> None:
        with pytest.raises(InvalidJSONError):
            decode_json(b"\xff\xfe\xfa")


class TestExtractErrorMessage:
    """Tests for extract_error_message()."""

    def test_detail_field(self) -> None:
        assert extract_error_message(b'{"detail": "Not found."}') == "Not found."

    def test_message_field(self) -> None:
        assert extract_error_message(b'{"message": "Bad token"}') == "Bad token"

    @pytest.mark.parametrize(
        "data",
        [None, b"", b"<html>oops</html>", b"[1, 2]", b'{"username": ["taken"]}'],
    )
    def test_no_message(self, data: bytes | None) -> None:
        assert extract_error_message(data) is None
