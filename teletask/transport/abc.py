"""
Abstract transport interface for DoIP communication.

A transport owns the byte stream to the central unit and pushes what happens on
it to registered handlers:

- data: every received chunk, in arrival order
- ready: the connection is (re)established and writable
- keep_alive: the keep-alive interval has elapsed
- disconnected: the connection closed
- reconnecting: a reconnect attempt is about to be made
- error: a transport failure that no caller can receive

Handlers run synchronously on the event loop. A failing handler is logged
and does not stop delivery to the other handlers.

Implementations:
- AsyncTcpTransport: asyncio stream connection
- MockTransport: For testing without a central unit
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable

if TYPE_CHECKING:
    from types import TracebackType

logger = logging.getLogger(__name__)

DataHandler = Callable[[bytes], None]
EventHandler = Callable[[], None]
ReconnectingHandler = Callable[[int], None]
ErrorHandler = Callable[[Exception], None]


class AbstractTransport(ABC):
    """
    Base class for DoIP transports.

    Used as an async context manager, a transport is opened on entry and
    closed on exit:

        async with AsyncTcpTransport("192.168.1.10") as transport:
            transport.on_data(handle_bytes)
            await transport.write(frame)

    Attributes:
        is_open: Whether the connection is established.
        address: Peer identifier used in log messages.
    """

    def __init__(self) -> None:
        self._data_handlers: list[DataHandler] = []
        self._ready_handlers: list[EventHandler] = []
        self._keep_alive_handlers: list[EventHandler] = []
        self._disconnected_handlers: list[EventHandler] = []
        self._reconnecting_handlers: list[ReconnectingHandler] = []
        self._error_handlers: list[ErrorHandler] = []

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the connection is established and writable."""
        ...

    @property
    @abstractmethod
    def address(self) -> str:
        """Printable peer identifier, e.g. "192.168.1.10:55957"."""
        ...

    @abstractmethod
    async def open(self) -> None:
        """
        Connect and emit a ready event once the connection is usable.

        Raises:
            TransportError: If connecting fails.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """
        Disconnect and stop any automatic reconnection.

        Calling it on a closed transport does nothing.
        """
        ...

    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Send bytes to the central unit.

        Args:
            data: A complete frame including its checksum.

        Raises:
            TransportError: If the connection is closed or the write fails.
        """
        ...

    # ===== Handler Registration =====

    def on_data(self, handler: DataHandler) -> None:
        self._data_handlers.append(handler)

    def on_ready(self, handler: EventHandler) -> None:
        self._ready_handlers.append(handler)

    def on_keep_alive(self, handler: EventHandler) -> None:
        self._keep_alive_handlers.append(handler)

    def on_disconnected(self, handler: EventHandler) -> None:
        self._disconnected_handlers.append(handler)

    def on_reconnecting(self, handler: ReconnectingHandler) -> None:
        """Register a handler receiving the 1-based reconnect attempt number."""
        self._reconnecting_handlers.append(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        self._error_handlers.append(handler)

    # ===== Event Emission =====

    def _dispatch(self, event: str, handlers: list, *args: object) -> None:
        for handler in list(handlers):
            try:
                handler(*args)
            except Exception:
                logger.exception("Transport %s handler failed on %s", event, self.address)

    def _emit_data(self, data: bytes) -> None:
        self._dispatch("data", self._data_handlers, data)

    def _emit_ready(self) -> None:
        self._dispatch("ready", self._ready_handlers)

    def _emit_keep_alive(self) -> None:
        self._dispatch("keep_alive", self._keep_alive_handlers)

    def _emit_disconnected(self) -> None:
        self._dispatch("disconnected", self._disconnected_handlers)

    def _emit_reconnecting(self, attempt: int) -> None:
        self._dispatch("reconnecting", self._reconnecting_handlers, attempt)

    def _emit_error(self, error: Exception) -> None:
        self._dispatch("error", self._error_handlers, error)

    async def __aenter__(self) -> AbstractTransport:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()
