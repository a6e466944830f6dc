"""Long-polling engine keeping local wallet state in sync with the backend.

Two independent streams run as asyncio tasks on the caller's event loop:

- the message stream fetches pending MPC signing messages, relays each
  payload to the listener in backend order and deletes it server-side;
- the transaction stream fetches transaction snapshots, the first one in
  full and every later one from the listener's last known update time.

A stream never overlaps with itself: the next fetch is issued only after the
previous batch has been handed to the listener. A failed cycle is reported
to the listener and retried after ``error_delay`` seconds; polling never
gives up on its own.

Lifetime: the engine keeps a strong reference to its listener. Call
:meth:`PollingEngine.stop` or :meth:`PollingEngine.close` before discarding
the listener.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any, Protocol

from .client import SessionClient
from .config import WalletConfig
from .errors import WalletClientError
from .models import Transaction

_LOGGER = logging.getLogger(__name__)

DEFAULT_ERROR_DELAY = 5.0


class PollingState(Enum):
    """Polling lifecycle state."""

    IDLE = "idle"
    POLLING = "polling"


class PollingListener(Protocol):
    """Receiver of poll results.

    Callbacks may be plain functions or coroutine functions; the engine
    awaits coroutine results before continuing the stream.
    """

    def on_incoming_message(
        self, payload: str, message_id: int | None
    ) -> Awaitable[None] | None: ...

    def on_transactions(
        self, transactions: list[Transaction]
    ) -> Awaitable[None] | None: ...

    def on_poll_error(self, message: str) -> Awaitable[None] | None: ...

    def last_known_update_timestamp(self) -> float | None: ...


class PollingEngine:
    """Dual-stream long-polling engine.

    Usage:
        engine = PollingEngine.from_config(client, device_id, listener, config)
        engine.start()
        ...
        engine.stop()        # cooperative; in-flight cycles finish
        await engine.close() # cancels both streams
    """

    def __init__(
        self,
        client: SessionClient,
        device_id: str,
        listener: PollingListener,
        *,
        error_delay: float = DEFAULT_ERROR_DELAY,
    ) -> None:
        self.device_id = device_id
        self._client = client
        self._listener = listener
        self._error_delay = error_delay

        self._running = False
        self._received_snapshot = False
        self._message_task: asyncio.Task[None] | None = None
        self._transaction_task: asyncio.Task[None] | None = None

    @classmethod
    def from_config(
        cls,
        client: SessionClient,
        device_id: str,
        listener: PollingListener,
        config: WalletConfig,
    ) -> PollingEngine:
        """Create an engine using the configured error delay."""
        return cls(client, device_id, listener, error_delay=config.poll_error_delay)

    @property
    def state(self) -> PollingState:
        return PollingState.POLLING if self._running else PollingState.IDLE

    @property
    def is_polling(self) -> bool:
        return self._running

    @property
    def has_snapshot(self) -> bool:
        """True once a full transaction snapshot has been delivered."""
        return self._received_snapshot

    # -------------------------------------------------------------------------
    # Public API: Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Start both streams; no-op while already polling.

        Must be called from a running event loop.
        """
        if self._running:
            return
        self._running = True
        _LOGGER.info("[%s] Polling started", self.device_id)

        # A stream stopped mid-cycle resumes on its own once the flag is set
        if self._message_task is None or self._message_task.done():
            self._message_task = asyncio.create_task(
                self._message_loop(), name=f"poll-messages-{self.device_id}"
            )
        if self._transaction_task is None or self._transaction_task.done():
            self._transaction_task = asyncio.create_task(
                self._transaction_loop(), name=f"poll-transactions-{self.device_id}"
            )

    def stop(self) -> None:
        """Stop rescheduling; in-flight cycles are allowed to complete."""
        if not self._running:
            return
        self._running = False
        _LOGGER.info("[%s] Polling stopped", self.device_id)

    async def close(self) -> None:
        """Stop and cancel both streams, including in-flight requests."""
        self.stop()
        for task in (self._message_task, self._transaction_task):
            if task is None:
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._message_task = None
        self._transaction_task = None

    # -------------------------------------------------------------------------
    # Internal: Streams
    # -------------------------------------------------------------------------

    async def _message_loop(self) -> None:
        while self._running:
            try:
                messages = await self._client.get_messages(self.device_id)
                for signing_message in messages:
                    if signing_message.message is None:
                        continue
                    await self._notify(
                        self._listener.on_incoming_message,
                        signing_message.message,
                        signing_message.id,
                    )
                    if signing_message.id is not None:
                        await self._client.delete_message(
                            self.device_id, signing_message.id
                        )
            except Exception as err:
                await self._handle_poll_failure("messages", err)
                continue

            # Let other tasks run between cycles
            await asyncio.sleep(0)

        _LOGGER.debug("[%s] Message stream idle", self.device_id)

    async def _transaction_loop(self) -> None:
        while self._running:
            start_date: float | None = None
            try:
                if self._received_snapshot:
                    start_date = self._listener.last_known_update_timestamp()
                transactions = await self._client.get_transactions(
                    self.device_id, start_date=start_date
                )
            except Exception as err:
                await self._handle_poll_failure("transactions", err)
                continue

            _LOGGER.debug(
                "[%s] Transaction snapshot: %d entries (startDate=%s)",
                self.device_id,
                len(transactions),
                start_date,
            )
            await self._notify(self._listener.on_transactions, transactions)
            self._received_snapshot = True
            await asyncio.sleep(0)

        _LOGGER.debug("[%s] Transaction stream idle", self.device_id)

    async def _handle_poll_failure(self, stream: str, err: Exception) -> None:
        if isinstance(err, WalletClientError):
            _LOGGER.warning(
                "[%s] Polling %s failed: %s; retrying in %.1fs",
                self.device_id,
                stream,
                err,
                self._error_delay,
            )
        else:
            _LOGGER.exception(
                "[%s] Unexpected error polling %s: %s", self.device_id, stream, err
            )
        await self._notify(self._listener.on_poll_error, str(err))
        await asyncio.sleep(self._error_delay)

    async def _notify(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            result = callback(*args)
            if inspect.iscoroutine(result):
                await result
        except Exception as err:
            _LOGGER.exception(
                "[%s] Listener callback error: %s", self.device_id, err
            )
