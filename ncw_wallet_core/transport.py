"""HTTP request executor for the NCW wallet backend.

Owns bearer-token injection, JSON request bodies, per-request timeouts and
the immediate-retry policy for transport-level failures. Retries are
re-issued back to back with no backoff; sustained outages are expected to be
absorbed by the polling engine's own error delay.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

import aiohttp

from .errors import (
    AuthenticationError,
    NetworkConnectionError,
    NetworkError,
    RequestTimeout,
    ResponseError,
    WalletClientError,
)

_LOGGER = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str]]

DEFAULT_RETRIES = 2


class SupportsToDict(Protocol):
    def to_dict(self) -> dict[str, Any]: ...


@dataclass(frozen=True)
class RawJsonBody:
    """Arbitrary JSON-serializable value sent as-is."""

    value: Any

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class StructBody:
    """Typed request record serialized through its ``to_dict``."""

    value: SupportsToDict

    def to_json(self) -> Any:
        return self.value.to_dict()


@dataclass(frozen=True)
class MessageBody:
    """A protocol message wrapped as ``{"message": ...}``."""

    message: str

    def to_json(self) -> Any:
        return {"message": self.message}


RequestBody = RawJsonBody | StructBody | MessageBody


def resolve_body(body: Any = None, message: str | None = None) -> RequestBody | None:
    """Pick the request body variant for a call.

    A message always takes precedence over ``body``.
    """
    if message is not None:
        return MessageBody(message)
    if body is None:
        return None
    if isinstance(body, (RawJsonBody, StructBody, MessageBody)):
        return body
    if callable(getattr(body, "to_dict", None)):
        return StructBody(body)
    return RawJsonBody(body)


class Transport:
    """Single-request executor with bounded immediate retries."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        token_provider: TokenProvider,
    ) -> None:
        self._session = session
        self._token_provider = token_provider

    async def send(
        self,
        url: str,
        *,
        method: str = "POST",
        timeout: float | None = None,
        retries: int = DEFAULT_RETRIES,
        body: Any = None,
        message: str | None = None,
    ) -> bytes:
        """Send a request and return the raw response body.

        Args:
            url: Fully resolved request URL.
            method: HTTP method.
            timeout: Total request timeout in seconds; session default if None.
            retries: Additional attempts after a transport-level failure.
            body: JSON value, typed record, or ``RequestBody`` variant.
            message: Protocol message; overrides ``body`` when given.

        Raises:
            RequestTimeout: The final attempt timed out.
            NetworkConnectionError: The final attempt failed to connect.
            ResponseError: The backend answered with an error status.
            AuthenticationError: The token provider failed; not retried.
        """
        payload = resolve_body(body, message)
        remaining = max(retries, 0)
        while True:
            try:
                return await self._attempt(url, method, timeout, payload)
            except NetworkError as err:
                if remaining == 0:
                    raise
                _LOGGER.info(
                    "Retry %s - %d more retries (%s)", url, remaining, err
                )
                remaining -= 1

    async def _attempt(
        self,
        url: str,
        method: str,
        timeout: float | None,
        payload: RequestBody | None,
    ) -> bytes:
        try:
            token = await self._token_provider()
        except WalletClientError:
            raise
        except Exception as err:
            raise AuthenticationError(f"Token provider failed: {err}") from err
        headers = {"Authorization": f"Bearer {token}"}
        kwargs: dict[str, Any] = {}
        if method != "GET":
            headers["Content-Type"] = "application/json"
            if payload is not None:
                kwargs["data"] = json.dumps(payload.to_json())
        if timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=timeout)

        _LOGGER.debug("Request %s %s", method, url)
        try:
            async with self._session.request(
                method, url, headers=headers, **kwargs
            ) as resp:
                data = await resp.read()
                _LOGGER.debug(
                    "Response %s %s: %d %r", method, url, resp.status, data[:512]
                )
                if resp.status >= 400:
                    raise ResponseError(
                        resp.status, f"{method} {url} failed with status {resp.status}"
                    )
                return data
        except TimeoutError as err:
            raise RequestTimeout(f"{method} {url} timed out") from err
        except aiohttp.ClientError as err:
            raise NetworkConnectionError(f"{method} {url} failed: {err}") from err
