"""Client error types for NCW wallet backend interactions."""

from __future__ import annotations


class WalletClientError(Exception):
    """Base error for NCW wallet client failures."""


class NetworkError(WalletClientError):
    """Transport-level failure; retryable per call."""


class RequestTimeout(NetworkError):
    """Timeout while communicating with the backend."""


class NetworkConnectionError(NetworkError):
    """Network connection to the backend failed."""


class ResponseError(WalletClientError):
    """HTTP error status returned by the backend."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status


class DecodingError(WalletClientError):
    """Response payload did not match the expected schema."""


class ConfigurationError(WalletClientError):
    """URL or configuration could not be formed."""


class AuthenticationError(WalletClientError):
    """Bearer token could not be obtained."""
