"""
In-memory transport for tests.

MockTransport stands in for a central unit: every frame the client writes
is kept for inspection, replies can be scripted per write, and tests can
push received bytes or connection events (ready, drop, reconnect attempt,
keep-alive tick, error) at any moment.

Example:
    >>> from teletask.transport import MockTransport
    >>> from teletask import TeletaskClient
    >>>
    >>> mock = MockTransport()
    >>> mock.set_response_callback(lambda frame: relay_response_for(frame))
    >>>
    >>> async with TeletaskClient(mock) as client:
    ...     state = await client.query_relay(1, 5)
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Callable

from teletask.exceptions import TransportError
from teletask.transport.abc import AbstractTransport

ReplyFactory = Callable[[bytes], bytes | None]


class MockTransport(AbstractTransport):
    """
    Scriptable transport without a network.

    A reply triggered by a write reaches the data handlers on the next
    event loop iteration, the way bytes from a socket would, so a query is
    already waiting when its RESPONSE arrives.

    Attributes:
        written_data: Every frame written so far, oldest first.
        open_count: Number of times open() actually opened the transport.

    Example:
        >>> mock = MockTransport()
        >>> mock.add_response(b"\\x0a")
        >>>
        >>> async with mock:
        ...     await mock.write(b"\\x02\\x03\\x0b\\x10")
        ...     assert mock.written_data == [b"\\x02\\x03\\x0b\\x10"]
    """

    def __init__(self, address: str = "mock://central-unit") -> None:
        """
        Args:
            address: Value reported by the address property.
        """
        super().__init__()
        self._address = address
        self._connected = False
        self._scripted_replies: deque[bytes] = deque()
        self._frames: list[bytes] = []
        self._reply_factory: ReplyFactory | None = None
        self._refusal: Exception | None = None
        self.open_count = 0

    @property
    def is_open(self) -> bool:
        return self._connected

    @property
    def address(self) -> str:
        return self._address

    @property
    def written_data(self) -> list[bytes]:
        """Copy of the frames written so far."""
        return list(self._frames)

    @property
    def last_written(self) -> bytes | None:
        """The newest written frame, or None before the first write."""
        if not self._frames:
            return None
        return self._frames[-1]

    def add_response(self, response: bytes) -> None:
        """
        Script the reply to a future write.

        Scripted replies are used one per write, first in first out.
        """
        self._scripted_replies.append(bytes(response))

    def set_response_callback(self, callback: ReplyFactory | None) -> None:
        """
        Generate replies from the written frame.

        The callback gets each written frame and returns the bytes to send
        back. Returning None falls back to the scripted replies. Pass None
        to remove the callback.
        """
        self._reply_factory = callback

    def fail_next_open(self, error: Exception | None = None) -> None:
        """Make the next open() raise (TransportError by default)."""
        self._refusal = error or TransportError("Mock connection refused")

    def clear(self) -> None:
        """Forget written frames and scripted replies."""
        self._frames.clear()
        self._scripted_replies.clear()

    def clear_written(self) -> None:
        self._frames.clear()

    async def open(self) -> None:
        """Mark the transport open and emit a ready event."""
        if self._refusal is not None:
            error, self._refusal = self._refusal, None
            raise error
        if self._connected:
            return
        self._connected = True
        self.open_count += 1
        self._emit_ready()

    async def close(self) -> None:
        if not self._connected:
            return
        self._connected = False
        self._emit_disconnected()

    async def write(self, data: bytes) -> None:
        """
        Record a frame and schedule its reply, if any.

        Raises:
            TransportError: If the transport is closed.
        """
        if not self._connected:
            raise TransportError("Mock transport not open")

        frame = bytes(data)
        self._frames.append(frame)

        reply = self._reply_factory(frame) if self._reply_factory else None
        if reply is None and self._scripted_replies:
            reply = self._scripted_replies.popleft()
        if reply is not None:
            asyncio.get_running_loop().call_soon(self._emit_data, reply)

    # ===== Simulation =====

    def inject(self, data: bytes) -> None:
        """Deliver received bytes to the data handlers immediately."""
        self._emit_data(bytes(data))

    def simulate_ready(self) -> None:
        """Simulate a (re)established connection."""
        self._connected = True
        self._emit_ready()

    def simulate_disconnect(self) -> None:
        """Simulate the peer dropping the connection."""
        self._connected = False
        self._emit_disconnected()

    def simulate_reconnecting(self, attempt: int = 1) -> None:
        self._emit_reconnecting(attempt)

    def simulate_keep_alive(self) -> None:
        self._emit_keep_alive()

    def simulate_error(self, error: Exception) -> None:
        self._emit_error(error)

    # ===== Assertions =====

    def assert_written(self, expected: bytes, index: int = -1) -> None:
        """
        Check one written frame.

        Args:
            expected: Frame bytes the test expects.
            index: Position in written_data; the newest frame by default.

        Raises:
            AssertionError: If nothing was written or the frame differs.
        """
        if not self._frames:
            raise AssertionError("No data written to mock transport")

        frame = self._frames[index]
        if frame != expected:
            raise AssertionError(
                f"Written data mismatch: expected {expected.hex(' ')}, got {frame.hex(' ')}"
            )

    def assert_write_count(self, expected: int) -> None:
        """Check how many frames were written."""
        if len(self._frames) != expected:
            raise AssertionError(
                f"Write count mismatch: expected {expected}, got {len(self._frames)}"
            )

    def __repr__(self) -> str:
        status = "open" if self._connected else "closed"
        return f"MockTransport({self._address!r}, {status}, writes={len(self._frames)})"
