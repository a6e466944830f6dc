"""Pytest configuration and fixtures for ncw_wallet_core tests."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from ncw_wallet_core import SessionClient, Transport

BASE_URL = "https://x"
PHYSICAL_DEVICE_ID = "phys-1"


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock aiohttp ClientSession."""
    import aiohttp

    return MagicMock(spec=aiohttp.ClientSession)


@pytest.fixture
def token_provider() -> AsyncMock:
    """Async token provider returning a fixed bearer token."""
    return AsyncMock(return_value="test-token")


@pytest.fixture
def transport(mock_session: MagicMock, token_provider: AsyncMock) -> Transport:
    return Transport(mock_session, token_provider)


@pytest.fixture
def client(transport: Transport) -> SessionClient:
    return SessionClient(
        transport, BASE_URL, physical_device_id=lambda: PHYSICAL_DEVICE_ID
    )


def create_mock_response(
    status: int = 200,
    json_data: Any = None,
    text_data: str | None = None,
) -> AsyncMock:
    """Create a configured mock response.

    Args:
        status: HTTP status code
        json_data: Value serialized as the response body
        text_data: Raw response body text (used when json_data is None)

    Returns:
        Configured AsyncMock response usable as an async context manager
    """
    response = AsyncMock()
    response.status = status

    if json_data is not None:
        body = json.dumps(json_data).encode()
    else:
        body = (text_data or "").encode()
    response.read.return_value = body

    response.__aenter__.return_value = response
    response.__aexit__.return_value = None

    return response
