"""Typed session client for the NCW wallet backend.

One coroutine per remote operation. Each resolves its URL from the endpoint
catalog, sends through :class:`~ncw_wallet_core.transport.Transport` and
decodes the JSON answer into domain records.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any
from urllib.parse import urlencode

from . import endpoints
from .config import WalletConfig
from .errors import DecodingError, WalletClientError
from .models import (
    Asset,
    AssetAddress,
    AssetBalance,
    AssignResponse,
    CreateTransactionResponse,
    Device,
    EstimatedFee,
    PostTransactionParams,
    SigningMessage,
    Transaction,
    decode_list,
)
from .transport import Transport

_LOGGER = logging.getLogger(__name__)

# Read-mostly calls made once per session tolerate a few immediate retries
SESSION_RETRIES = 5
# Mutating and polled calls never retry inside the transport
NO_RETRIES = 0
RPC_RETRIES = 2


def _decode_json(data: bytes) -> Any:
    try:
        return json.loads(data)
    except (UnicodeDecodeError, ValueError) as err:
        raise DecodingError("Response body is not valid JSON") from err


def _decode_text(data: bytes) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise DecodingError("Response body is not valid UTF-8") from err


def _with_query(url: str, params: list[tuple[str, str]]) -> str:
    if not params:
        return url
    return f"{url}?{urlencode(params)}"


class SessionClient:
    """Request/response wrappers over the backend REST API.

    Usage:
        transport = Transport(http_session, auth.get_user_id_token)
        client = SessionClient.from_config(
            transport, config, physical_device_id=sdk.get_physical_device_id
        )
        token = await client.login()
        devices = await client.get_devices()
    """

    def __init__(
        self,
        transport: Transport,
        base_url: str,
        *,
        physical_device_id: Callable[[], str],
    ) -> None:
        self._transport = transport
        self._base_url = base_url
        self._physical_device_id = physical_device_id

    @classmethod
    def from_config(
        cls,
        transport: Transport,
        config: WalletConfig,
        *,
        physical_device_id: Callable[[], str],
    ) -> SessionClient:
        """Create a client for the backend named in ``config``."""
        return cls(transport, config.base_url, physical_device_id=physical_device_id)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def _request(
        self,
        endpoint: endpoints.Endpoint,
        *,
        method: str = "POST",
        retries: int = NO_RETRIES,
        query: list[tuple[str, str]] | None = None,
        body: Any = None,
        message: str | None = None,
    ) -> bytes:
        url = _with_query(endpoint.url(self._base_url), query or [])
        return await self._transport.send(
            url,
            method=method,
            timeout=endpoint.timeout,
            retries=retries,
            body=body,
            message=message,
        )

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def login(self) -> str:
        """Log in and return the raw response body as text."""
        data = await self._request(endpoints.Login(), retries=SESSION_RETRIES)
        return _decode_text(data)

    async def get_devices(self) -> list[Device]:
        data = await self._request(
            endpoints.Devices(), method="GET", retries=SESSION_RETRIES
        )
        payload = _decode_json(data)
        if not isinstance(payload, dict) or "devices" not in payload:
            raise DecodingError("Device list response is missing 'devices'")
        return decode_list(payload["devices"], Device.from_dict, "devices")

    async def assign(self, device_id: str) -> AssignResponse:
        """Assign the device to a wallet, creating the wallet on first use."""
        data = await self._request(
            endpoints.Assign(device_id), retries=SESSION_RETRIES
        )
        return AssignResponse.from_dict(_decode_json(data))

    # -------------------------------------------------------------------------
    # Signing messages
    # -------------------------------------------------------------------------

    async def get_messages(self, device_id: str) -> list[SigningMessage]:
        """Fetch pending signing messages for this physical device."""
        data = await self._request(
            endpoints.Messages(device_id),
            method="GET",
            query=[("physicalDeviceId", self._physical_device_id())],
        )
        return decode_list(_decode_json(data), SigningMessage.from_dict, "messages")

    async def delete_message(self, device_id: str, message_id: str | int) -> None:
        """Delete a relayed message; failures are logged, never raised.

        A message that fails to delete is re-delivered by the next poll.
        """
        try:
            await self._request(
                endpoints.DeleteMessage(device_id, str(message_id)), method="DELETE"
            )
        except WalletClientError as err:
            _LOGGER.warning("Failed to delete message %s: %s", message_id, err)
            return
        except Exception:
            _LOGGER.exception("Unexpected error deleting message %s", message_id)
            return
        _LOGGER.debug("Deleted message %s", message_id)

    async def rpc(self, device_id: str, message: str) -> str:
        """Relay an outbound MPC message and return the backend's reply."""
        data = await self._request(
            endpoints.Rpc(device_id), retries=RPC_RETRIES, message=message
        )
        return _decode_text(data)

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def get_transactions(
        self,
        device_id: str,
        *,
        details: bool = True,
        start_date: float | None = None,
    ) -> list[Transaction]:
        """Long-poll the transaction list.

        Args:
            device_id: Device identifier.
            details: Request the detailed payload.
            start_date: Epoch seconds; only changes since then are returned.
        """
        query: list[tuple[str, str]] = []
        if details:
            query.append(("details", "true"))
        if start_date is not None:
            query.append(("startDate", str(start_date)))
        query.append(("poll", "true"))
        data = await self._request(
            endpoints.Transactions(device_id), method="GET", query=query
        )
        return decode_list(_decode_json(data), Transaction.from_dict, "transactions")

    async def create_transaction(
        self, device_id: str, params: PostTransactionParams | dict[str, Any]
    ) -> CreateTransactionResponse:
        data = await self._request(endpoints.Transactions(device_id), body=params)
        return CreateTransactionResponse.from_dict(_decode_json(data))

    async def cancel_transaction(self, device_id: str, tx_id: str) -> bool:
        """Cancel a pending transaction; True when the backend confirms."""
        data = await self._request(endpoints.CancelTransaction(device_id, tx_id))
        payload = _decode_json(data)
        if not isinstance(payload, dict):
            raise DecodingError("Cancel response is not an object")
        success = payload.get("success")
        if success is not None and not isinstance(success, bool):
            raise DecodingError("Field 'success' must be a boolean")
        return bool(success)

    async def estimate_fee(
        self, device_id: str, params: PostTransactionParams | dict[str, Any]
    ) -> EstimatedFee:
        data = await self._request(endpoints.EstimateFee(device_id), body=params)
        return EstimatedFee.from_dict(_decode_json(data))

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    async def create_asset(self, device_id: str, asset_id: str) -> str:
        data = await self._request(endpoints.CreateAsset(device_id, asset_id))
        return _decode_text(data)

    async def get_assets(self, device_id: str) -> list[Asset]:
        data = await self._request(endpoints.Assets(device_id), method="GET")
        return decode_list(_decode_json(data), Asset.from_dict, "assets")

    async def get_asset_balance(self, device_id: str, asset_id: str) -> AssetBalance:
        data = await self._request(
            endpoints.AssetBalance(device_id, asset_id), method="GET"
        )
        return AssetBalance.from_dict(_decode_json(data))

    async def get_asset_address(self, device_id: str, asset_id: str) -> AssetAddress:
        data = await self._request(
            endpoints.AssetAddress(device_id, asset_id), method="GET"
        )
        return AssetAddress.from_dict(_decode_json(data))
