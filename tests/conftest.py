"""Pytest configuration and fixtures for chatsecure_push tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

BASE_URL = "https://push.example.com/api/v1/"


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    read_data: bytes | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Payload to return JSON encoded from read()
        read_data: Raw bytes to return from read(), used when json_data is None

    Returns:
        Configured AsyncMock response usable as an async context manager
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        response.read.return_value = json.dumps(json_data).encode()
    else:
        response.read.return_value = read_data if read_data is not None else b""

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response


def sent_json(mock_session: MagicMock, index: int = -1) -> Any:
    """Decode the JSON body of a request issued on the mock session."""
    call = mock_session.request.call_args_list[index]
    return json.loads(call.kwargs["data"])
