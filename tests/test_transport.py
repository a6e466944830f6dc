"""Test Transport request execution and retry policy."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from ncw_wallet_core import (
    AuthenticationError,
    MessageBody,
    NetworkConnectionError,
    RawJsonBody,
    RequestTimeout,
    ResponseError,
    StructBody,
    Transport,
    resolve_body,
)

from .conftest import create_mock_response

URL = "https://x/api/login"


@dataclass
class _Params:
    amount: str

    def to_dict(self) -> dict[str, Any]:
        return {"amount": self.amount}


class TestResolveBody:
    """Request body variant selection."""

    def test_message_overrides_body(self) -> None:
        resolved = resolve_body({"raw": True}, "hello")
        assert resolved == MessageBody("hello")
        assert resolved.to_json() == {"message": "hello"}

    def test_plain_value_is_raw_json(self) -> None:
        assert resolve_body([1, 2]) == RawJsonBody([1, 2])

    def test_record_with_to_dict_is_struct(self) -> None:
        resolved = resolve_body(_Params("1.5"))
        assert isinstance(resolved, StructBody)
        assert resolved.to_json() == {"amount": "1.5"}

    def test_variant_passes_through(self) -> None:
        body = RawJsonBody({"a": 1})
        assert resolve_body(body) is body

    def test_nothing_to_send(self) -> None:
        assert resolve_body() is None


class TestTransportSend:
    """Headers, bodies and error mapping."""

    async def test_returns_body_bytes(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(text_data="ok")

        assert await transport.send(URL) == b"ok"

    async def test_post_sends_bearer_and_content_type(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(text_data="ok")

        await transport.send(URL, body={"a": 1})

        call_args = mock_session.request.call_args
        assert call_args.args == ("POST", URL)
        assert call_args.kwargs["headers"] == {
            "Authorization": "Bearer test-token",
            "Content-Type": "application/json",
        }
        assert json.loads(call_args.kwargs["data"]) == {"a": 1}

    async def test_get_has_no_content_type_or_body(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(json_data=[])

        await transport.send(URL, method="GET", body={"ignored": True})

        call_kwargs = mock_session.request.call_args.kwargs
        assert call_kwargs["headers"] == {"Authorization": "Bearer test-token"}
        assert "data" not in call_kwargs

    async def test_message_is_wrapped(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(text_data="")

        await transport.send(URL, body={"raw": 1}, message="m1")

        data = mock_session.request.call_args.kwargs["data"]
        assert json.loads(data) == {"message": "m1"}

    async def test_timeout_is_applied(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(text_data="")

        await transport.send(URL, timeout=30.0)

        timeout = mock_session.request.call_args.kwargs["timeout"]
        assert timeout.total == 30.0

    async def test_no_timeout_uses_session_default(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(text_data="")

        await transport.send(URL)

        assert "timeout" not in mock_session.request.call_args.kwargs

    async def test_token_fetched_for_every_attempt(
        self,
        transport: Transport,
        mock_session: MagicMock,
        token_provider: AsyncMock,
    ) -> None:
        token_provider.side_effect = ["t1", "t2"]
        mock_session.request.side_effect = [
            aiohttp.ClientConnectionError("refused"),
            create_mock_response(text_data="ok"),
        ]

        await transport.send(URL, retries=1)

        headers = [c.kwargs["headers"] for c in mock_session.request.call_args_list]
        assert headers[0]["Authorization"] == "Bearer t1"
        assert headers[1]["Authorization"] == "Bearer t2"

    async def test_token_failure_raises_authentication_error(
        self,
        transport: Transport,
        mock_session: MagicMock,
        token_provider: AsyncMock,
    ) -> None:
        token_provider.side_effect = RuntimeError("token refresh failed")

        with pytest.raises(AuthenticationError, match="token refresh") as exc_info:
            await transport.send(URL, retries=3)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert token_provider.await_count == 1
        mock_session.request.assert_not_called()

    async def test_timeout_raises_request_timeout(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = TimeoutError("timed out")

        with pytest.raises(RequestTimeout, match="timed out"):
            await transport.send(URL, retries=0)

    async def test_client_error_raises_connection_error(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = aiohttp.ClientError("Connection refused")

        with pytest.raises(NetworkConnectionError):
            await transport.send(URL, retries=0)

    async def test_error_status_raises_response_error_without_retry(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.return_value = create_mock_response(status=500)

        with pytest.raises(ResponseError) as exc_info:
            await transport.send(URL, retries=3)

        assert exc_info.value.status == 500
        assert mock_session.request.call_count == 1


class TestTransportRetries:
    """Immediate retries on transport-level failures."""

    @pytest.mark.parametrize("retries", [0, 1, 2, 5])
    async def test_persistent_failure_makes_n_plus_one_attempts(
        self, transport: Transport, mock_session: MagicMock, retries: int
    ) -> None:
        mock_session.request.side_effect = aiohttp.ClientConnectionError("down")

        with pytest.raises(NetworkConnectionError):
            await transport.send(URL, retries=retries)

        assert mock_session.request.call_count == retries + 1

    @pytest.mark.parametrize(("retries", "succeed_on"), [(0, 1), (3, 2), (5, 6)])
    async def test_success_on_attempt_k_makes_k_attempts(
        self,
        transport: Transport,
        mock_session: MagicMock,
        retries: int,
        succeed_on: int,
    ) -> None:
        failures: list[Any] = [TimeoutError()] * (succeed_on - 1)
        mock_session.request.side_effect = [
            *failures,
            create_mock_response(text_data="done"),
        ]

        assert await transport.send(URL, retries=retries) == b"done"
        assert mock_session.request.call_count == succeed_on

    async def test_retry_reissues_identical_request(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = [
            aiohttp.ClientConnectionError("reset"),
            create_mock_response(text_data="ok"),
        ]

        await transport.send(URL, method="POST", timeout=30.0, retries=1, message="m")

        first, second = mock_session.request.call_args_list
        assert first.args == second.args
        assert first.kwargs["data"] == second.kwargs["data"]
        assert first.kwargs["timeout"].total == second.kwargs["timeout"].total

    async def test_last_failure_is_surfaced(
        self, transport: Transport, mock_session: MagicMock
    ) -> None:
        mock_session.request.side_effect = [
            aiohttp.ClientConnectionError("first"),
            TimeoutError("second"),
        ]

        with pytest.raises(RequestTimeout):
            await transport.send(URL, retries=1)
