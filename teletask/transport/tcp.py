"""
Async TCP transport for DoIP central units.

The central unit accepts a single persistent TCP connection (default port
55957). The transport keeps that connection alive:

- A reader task delivers every received chunk to the data handlers
- A keep-alive ticker emits keep_alive events at a fixed interval
- After an unexpected drop, reconnection is retried with a fixed delay,
  up to a bounded number of attempts

Example:
    >>> transport = AsyncTcpTransport("192.168.1.10")
    >>> transport.on_data(print)
    >>> async with transport:
    ...     await transport.write(build_keep_alive_frame())
"""

from __future__ import annotations

import asyncio
import logging

from teletask.config import ConnectionOptions
from teletask.exceptions import TransportError
from teletask.protocol.constants import ProtocolConstants
from teletask.transport.abc import AbstractTransport

logger = logging.getLogger(__name__)


class AsyncTcpTransport(AbstractTransport):
    """
    Async TCP transport using asyncio streams.

    Attributes:
        host: Central unit host name or IP address.
        port: Central unit TCP port.
        is_open: Whether the socket is currently connected.
    """

    def __init__(
        self,
        host: str,
        port: int = ProtocolConstants.DEFAULT_PORT,
        options: ConnectionOptions | None = None,
    ) -> None:
        """
        Initialize the TCP transport.

        Args:
            host: Central unit host name or IP address.
            port: TCP port (default: 55957).
            options: Connection options; defaults are used when omitted.
        """
        super().__init__()
        self._host = host
        self._port = port
        self._options = options or ConnectionOptions()
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._keep_alive_task: asyncio.Task[None] | None = None
        self._reconnect_task: asyncio.Task[None] | None = None
        self._reconnect_attempts = 0
        self._closing = False

    @property
    def is_open(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    @property
    def address(self) -> str:
        return f"{self._host}:{self._port}"

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def options(self) -> ConnectionOptions:
        return self._options

    @property
    def reconnect_attempts(self) -> int:
        """Attempts made since the last successful connection."""
        return self._reconnect_attempts

    async def open(self) -> None:
        """
        Connect to the central unit.

        Raises:
            TransportError: If the connection cannot be established within
                the connect timeout.
        """
        if self.is_open:
            return

        self._closing = False
        await self._connect()

    async def _connect(self) -> None:
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self._host, self._port),
                timeout=self._options.connect_timeout,
            )
        except asyncio.TimeoutError:
            raise TransportError(
                f"Timed out connecting to {self.address} "
                f"after {self._options.connect_timeout:.1f}s"
            ) from None
        except OSError as e:
            raise TransportError(f"Failed to connect to {self.address}: {e}") from e

        self._reconnect_attempts = 0
        self._reader_task = asyncio.create_task(self._read_loop(self._reader))
        self._keep_alive_task = asyncio.create_task(self._keep_alive_loop())

        logger.info("Connected to %s", self.address)
        self._emit_ready()

    async def close(self) -> None:
        """
        Close the connection and stop reconnecting.

        Safe to call multiple times.
        """
        self._closing = True
        was_open = self.is_open

        current = asyncio.current_task()
        for task in (self._reconnect_task, self._keep_alive_task, self._reader_task):
            if task is not None and task is not current and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._reconnect_task = None

        await self._release()

        if was_open:
            logger.info("Disconnected from %s", self.address)
            self._emit_disconnected()

    async def write(self, data: bytes) -> None:
        """
        Write a frame to the socket.

        Raises:
            TransportError: If the socket is not open or write fails.
        """
        if not self.is_open:
            raise TransportError(f"Connection to {self.address} is not open")

        try:
            self._writer.write(data)
            await self._writer.drain()
        except OSError as e:
            raise TransportError(f"Write to {self.address} failed: {e}") from e

    async def _release(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        self._reader_task = None
        self._keep_alive_task = None

        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug("Error while closing %s: %s", self.address, e)

    async def _read_loop(self, reader: asyncio.StreamReader) -> None:
        try:
            while True:
                data = await reader.read(ProtocolConstants.READ_CHUNK_SIZE)
                if not data:
                    logger.warning("Connection to %s closed by peer", self.address)
                    break
                self._emit_data(data)
        except OSError as e:
            logger.warning("Read from %s failed: %s", self.address, e)
            self._emit_error(TransportError(f"Read from {self.address} failed: {e}"))

        await self._connection_lost()

    async def _keep_alive_loop(self) -> None:
        while True:
            await asyncio.sleep(self._options.keep_alive_interval)
            self._emit_keep_alive()

    async def _connection_lost(self) -> None:
        if self._keep_alive_task is not None:
            self._keep_alive_task.cancel()
        await self._release()
        self._emit_disconnected()

        if not self._closing and self._options.auto_reconnect:
            self._reconnect_task = asyncio.create_task(self._reconnect_loop())

    async def _reconnect_loop(self) -> None:
        while not self._closing:
            if self._reconnect_attempts >= self._options.max_reconnect_attempts:
                logger.error(
                    "Giving up on %s after %d reconnect attempts",
                    self.address,
                    self._reconnect_attempts,
                )
                self._emit_error(
                    TransportError(
                        f"Maximum reconnect attempts ({self._options.max_reconnect_attempts}) "
                        f"reached for {self.address}"
                    )
                )
                return

            self._reconnect_attempts += 1
            logger.warning(
                "Reconnecting to %s in %.1fs (attempt %d/%d)",
                self.address,
                self._options.reconnect_delay,
                self._reconnect_attempts,
                self._options.max_reconnect_attempts,
            )
            self._emit_reconnecting(self._reconnect_attempts)

            await asyncio.sleep(self._options.reconnect_delay)
            if self._closing:
                return

            try:
                await self._connect()
                return
            except TransportError as e:
                logger.warning("Reconnect to %s failed: %s", self.address, e)

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"AsyncTcpTransport({self._host!r}, port={self._port}, {status})"
