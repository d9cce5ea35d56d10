"""
Request/response correlation for GET queries.

Every GET is answered by a RESPONSE frame carrying the same function type,
central unit and item number. The correlator pairs them:

1. A pending entry (future + decoder) is registered under the composite key
2. The GET frame is sent
3. A matching RESPONSE resolves the future with the decoded state
4. Without a RESPONSE, the query fails with TimeoutError

The entry is removed on success, failure and timeout alike, so the key can
be queried again. At most one query per key is in flight; a second query
for the same key is rejected with QueryInFlightError.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from teletask.exceptions import DecodeError, QueryInFlightError, TimeoutError
from teletask.models.states import ResponsePayload
from teletask.parsers.registry import ResponseDecoder
from teletask.protocol.constants import ProtocolConstants

logger = logging.getLogger(__name__)

QueryKey = tuple[int, int, int]
"""Composite key: (function type, central unit, item number)."""


@dataclass
class PendingQuery:
    """A query waiting for its RESPONSE."""

    future: asyncio.Future[Any]
    decoder: ResponseDecoder


class ResponseCorrelator:
    """
    Tracks in-flight queries and resolves them from RESPONSE payloads.

    All methods must be called from the event loop thread.

    Example:
        >>> correlator = ResponseCorrelator(timeout=4.0)
        >>> state = await correlator.query(
        ...     (FunctionType.RELAY, 1, 5),
        ...     RelayDecoder(),
        ...     lambda: transport.write(build_get_frame(1, FunctionType.RELAY, 5)),
        ... )
    """

    def __init__(self, timeout: float = ProtocolConstants.DEFAULT_RESPONSE_TIMEOUT) -> None:
        """
        Initialize the correlator.

        Args:
            timeout: Default time in seconds a query waits for its RESPONSE.
        """
        self._timeout = timeout
        self._pending: dict[QueryKey, PendingQuery] = {}

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def pending_count(self) -> int:
        """Number of queries waiting for a RESPONSE."""
        return len(self._pending)

    def is_pending(self, key: QueryKey) -> bool:
        return key in self._pending

    def register(self, key: QueryKey, decoder: ResponseDecoder) -> asyncio.Future[Any]:
        """
        Register a pending query.

        Args:
            key: Composite key of the queried item.
            decoder: Decoder applied to the RESPONSE data.

        Returns:
            Future resolved with the decoded state.

        Raises:
            QueryInFlightError: If a query for the same key is pending.
        """
        if key in self._pending:
            raise QueryInFlightError(key)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[key] = PendingQuery(future=future, decoder=decoder)
        return future

    async def wait(
        self,
        key: QueryKey,
        future: asyncio.Future[Any],
        timeout: float | None = None,
    ) -> Any:
        """
        Wait for a registered query to resolve.

        Raises:
            TimeoutError: If no RESPONSE arrives within the timeout.
            DecodeError: If the RESPONSE data cannot be decoded.
        """
        effective_timeout = timeout if timeout is not None else self._timeout
        try:
            return await asyncio.wait_for(future, timeout=effective_timeout)
        except asyncio.TimeoutError:
            function_type, central_unit, number = key
            logger.warning(
                "No response for function type 0x%02X, central unit %d, number %d",
                function_type,
                central_unit,
                number,
            )
            raise TimeoutError(
                f"No response for function type 0x{function_type:02X}, "
                f"central unit {central_unit}, number {number}",
                timeout_seconds=effective_timeout,
            ) from None
        finally:
            self._discard(key, future)

    async def query(
        self,
        key: QueryKey,
        decoder: ResponseDecoder,
        send: Callable[[], Awaitable[None]],
        timeout: float | None = None,
    ) -> Any:
        """
        Register a query, send its GET and wait for the decoded state.

        The pending entry exists before `send` runs, so a RESPONSE arriving
        immediately after the write is never missed.

        Args:
            key: Composite key of the queried item.
            decoder: Decoder applied to the RESPONSE data.
            send: Coroutine function writing the GET frame.
            timeout: Override of the default timeout.

        Raises:
            QueryInFlightError: If a query for the same key is pending.
            TimeoutError: If no RESPONSE arrives in time.
            DecodeError: If the RESPONSE data cannot be decoded.
        """
        future = self.register(key, decoder)
        try:
            await send()
        except BaseException:
            self._discard(key, future)
            future.cancel()
            raise
        return await self.wait(key, future, timeout)

    def resolve(self, payload: ResponsePayload) -> bool:
        """
        Resolve the query matching a RESPONSE.

        Decode failures fail the query rather than propagating, whatever
        the decoder raises.

        Returns:
            True if a pending query consumed the payload, False otherwise.
        """
        pending = self._pending.pop(payload.key, None)
        if pending is None or pending.future.done():
            return False

        try:
            state = pending.decoder.decode(payload.data)
        except DecodeError as e:
            logger.debug("Failed to decode response for %s: %s", payload.key, e)
            pending.future.set_exception(e)
        except Exception as e:
            logger.warning("Decoder %r failed for %s: %r", pending.decoder, payload.key, e)
            pending.future.set_exception(e)
        else:
            pending.future.set_result(state)
        return True

    def fail_all(self, error: BaseException) -> int:
        """
        Fail every pending query with the given error.

        Returns:
            Number of queries failed.
        """
        pending = list(self._pending.values())
        self._pending.clear()

        failed = 0
        for entry in pending:
            if not entry.future.done():
                entry.future.set_exception(error)
                failed += 1
        return failed

    def _discard(self, key: QueryKey, future: asyncio.Future[Any]) -> None:
        entry = self._pending.get(key)
        if entry is not None and entry.future is future:
            del self._pending[key]

    def __repr__(self) -> str:
        return f"ResponseCorrelator(pending={len(self._pending)}, timeout={self._timeout})"
