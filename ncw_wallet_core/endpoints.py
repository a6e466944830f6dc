"""Endpoint catalog for the NCW wallet backend.

Every remote operation is a frozen dataclass carrying the identifiers needed
to build its path. The set is closed: adding an operation means adding a
subclass here with its path and timeout.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar
from urllib.parse import quote, urlsplit

from .errors import ConfigurationError

DEFAULT_TIMEOUT = 30.0


def _segment(value: str, name: str) -> str:
    """Percent-encode a single path identifier."""
    if not value:
        raise ConfigurationError(f"Missing {name} for endpoint URL")
    return quote(str(value), safe="")


@dataclass(frozen=True)
class Endpoint:
    """Base class for backend endpoints."""

    timeout: ClassVar[float] = DEFAULT_TIMEOUT

    @property
    def path(self) -> str:
        raise NotImplementedError

    def url(self, base_url: str) -> str:
        """Resolve the endpoint against a base URL.

        Raises:
            ConfigurationError: If the base URL is not an absolute http(s)
                URL or an identifier is missing.
        """
        parts = urlsplit(base_url or "")
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigurationError(f"Invalid base URL: {base_url!r}")
        return base_url.rstrip("/") + self.path


@dataclass(frozen=True)
class Login(Endpoint):
    @property
    def path(self) -> str:
        return "/api/login"


@dataclass(frozen=True)
class Devices(Endpoint):
    @property
    def path(self) -> str:
        return "/api/devices"


@dataclass(frozen=True)
class _DeviceEndpoint(Endpoint):
    device_id: str

    @property
    def device_path(self) -> str:
        return f"/api/devices/{_segment(self.device_id, 'device_id')}"


@dataclass(frozen=True)
class Assign(_DeviceEndpoint):
    @property
    def path(self) -> str:
        return f"{self.device_path}/assign"


@dataclass(frozen=True)
class Messages(_DeviceEndpoint):
    @property
    def path(self) -> str:
        return f"{self.device_path}/messages"


@dataclass(frozen=True)
class DeleteMessage(_DeviceEndpoint):
    message_id: str

    @property
    def path(self) -> str:
        return f"{self.device_path}/messages/{_segment(self.message_id, 'message_id')}"


@dataclass(frozen=True)
class Rpc(_DeviceEndpoint):
    @property
    def path(self) -> str:
        return f"{self.device_path}/rpc"


@dataclass(frozen=True)
class Transactions(_DeviceEndpoint):
    @property
    def path(self) -> str:
        return f"{self.device_path}/transactions"


@dataclass(frozen=True)
class CancelTransaction(_DeviceEndpoint):
    tx_id: str

    @property
    def path(self) -> str:
        return f"{self.device_path}/transactions/{_segment(self.tx_id, 'tx_id')}/cancel"


@dataclass(frozen=True)
class _AssetEndpoint(_DeviceEndpoint):
    asset_id: str

    @property
    def asset_path(self) -> str:
        # Only account 0 is exposed by the demo backend
        asset = _segment(self.asset_id, "asset_id")
        return f"{self.device_path}/accounts/0/assets/{asset}"


@dataclass(frozen=True)
class Assets(_DeviceEndpoint):
    @property
    def path(self) -> str:
        return f"{self.device_path}/accounts/0/assets"


@dataclass(frozen=True)
class CreateAsset(_AssetEndpoint):
    @property
    def path(self) -> str:
        return self.asset_path


@dataclass(frozen=True)
class AssetBalance(_AssetEndpoint):
    @property
    def path(self) -> str:
        return f"{self.asset_path}/balance"


@dataclass(frozen=True)
class AssetAddress(_AssetEndpoint):
    @property
    def path(self) -> str:
        return f"{self.asset_path}/address"


@dataclass(frozen=True)
class EstimateFee(_DeviceEndpoint):
    @property
    def path(self) -> str:
        # Shares the transactions collection path; the body selects estimation
        return f"{self.device_path}/transactions"
