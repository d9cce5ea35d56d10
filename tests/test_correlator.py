"""Tests for ResponseCorrelator."""

import asyncio

import pytest

from teletask.correlator import ResponseCorrelator
from teletask.exceptions import (
    ConnectionError,
    DecodeError,
    QueryInFlightError,
    TimeoutError,
    TransportError,
)
from teletask.models.states import ResponsePayload
from teletask.parsers.dimmer import DimmerDecoder
from teletask.parsers.registry import ResponseDecoder
from teletask.parsers.relay import RelayDecoder
from teletask.protocol.constants import FunctionType

RELAY_KEY = (FunctionType.RELAY, 1, 5)
DIMMER_KEY = (FunctionType.DIMMER, 1, 5)


def relay_response(central_unit=1, number=5, state=0xFF):
    return ResponsePayload(
        central_unit=central_unit,
        function_type=FunctionType.RELAY,
        number=number,
        error=0,
        data=bytes([state]),
    )


async def no_send():
    return None


class BrokenRelayDecoder(ResponseDecoder):
    """Relay decoder that fails with a plain ValueError."""

    @property
    def function_type(self):
        return FunctionType.RELAY

    def decode(self, data):
        raise ValueError("unsupported relay payload")


class TestResponseCorrelator:
    """Tests for query registration and resolution."""

    @pytest.fixture
    def correlator(self):
        return ResponseCorrelator(timeout=0.5)

    @pytest.mark.asyncio
    async def test_resolve_matching_query(self, correlator):
        """Test that a RESPONSE resolves its own query and no other."""
        relay_future = correlator.register(RELAY_KEY, RelayDecoder())
        dimmer_future = correlator.register(DIMMER_KEY, DimmerDecoder())

        assert correlator.resolve(relay_response()) is True

        assert relay_future.done()
        assert relay_future.result().on is True
        assert not dimmer_future.done()
        assert correlator.pending_count == 1
        dimmer_future.cancel()

    @pytest.mark.asyncio
    async def test_query_resolved_after_send(self, correlator):
        """Test register-then-send with a RESPONSE arriving during the send."""

        async def send():
            # Reply arrives before the sender regains control
            correlator.resolve(relay_response(state=0x00))

        state = await correlator.query(RELAY_KEY, RelayDecoder(), send)

        assert state.on is False
        assert correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_unmatched_response(self, correlator):
        """Test that a RESPONSE without a waiter is not consumed."""
        assert correlator.resolve(relay_response(number=9)) is False

    @pytest.mark.asyncio
    async def test_duplicate_key_rejected(self, correlator):
        """Test that a second query for the same key is rejected."""
        future = correlator.register(RELAY_KEY, RelayDecoder())

        with pytest.raises(QueryInFlightError) as exc_info:
            correlator.register(RELAY_KEY, RelayDecoder())
        assert exc_info.value.key == RELAY_KEY

        assert not future.done()
        future.cancel()

    @pytest.mark.asyncio
    async def test_timeout_frees_key(self, correlator):
        """Test that a timed-out query is removed and the key reusable."""
        with pytest.raises(TimeoutError) as exc_info:
            await correlator.query(RELAY_KEY, RelayDecoder(), no_send, timeout=0.05)

        assert exc_info.value.timeout_seconds == 0.05
        assert not correlator.is_pending(RELAY_KEY)

        future = correlator.register(RELAY_KEY, RelayDecoder())
        assert correlator.is_pending(RELAY_KEY)
        future.cancel()

    @pytest.mark.asyncio
    async def test_decode_error_fails_query(self, correlator):
        """Test that an undecodable RESPONSE rejects the query."""
        future = correlator.register(RELAY_KEY, RelayDecoder())
        correlator.resolve(relay_response(state=0x01))

        with pytest.raises(DecodeError):
            await correlator.wait(RELAY_KEY, future)
        assert correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_decoder_exception_fails_query(self, correlator):
        """Test that any decoder exception rejects the query at once."""
        future = correlator.register(RELAY_KEY, BrokenRelayDecoder())

        assert correlator.resolve(relay_response()) is True

        assert future.done()
        with pytest.raises(ValueError, match="unsupported relay payload"):
            await correlator.wait(RELAY_KEY, future, timeout=0.01)
        assert correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_send_failure_cleans_up(self, correlator):
        """Test that a failed GET write leaves no pending entry."""

        async def failing_send():
            raise TransportError("write failed")

        with pytest.raises(TransportError):
            await correlator.query(RELAY_KEY, RelayDecoder(), failing_send)
        assert correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_fail_all(self, correlator):
        """Test that all pending queries fail with the given error."""
        relay_task = asyncio.create_task(correlator.query(RELAY_KEY, RelayDecoder(), no_send))
        dimmer_task = asyncio.create_task(correlator.query(DIMMER_KEY, DimmerDecoder(), no_send))
        await asyncio.sleep(0)

        assert correlator.fail_all(ConnectionError("closed")) == 2

        for task in (relay_task, dimmer_task):
            with pytest.raises(ConnectionError):
                await task
        assert correlator.pending_count == 0

    @pytest.mark.asyncio
    async def test_concurrent_queries_resolve_independently(self, correlator):
        """Test responses arriving in the opposite order of the queries."""
        relay_task = asyncio.create_task(correlator.query(RELAY_KEY, RelayDecoder(), no_send))
        dimmer_task = asyncio.create_task(correlator.query(DIMMER_KEY, DimmerDecoder(), no_send))
        await asyncio.sleep(0)

        correlator.resolve(ResponsePayload(
            central_unit=1, function_type=FunctionType.DIMMER, number=5, error=0, data=b"\x28",
        ))
        assert (await dimmer_task).level == 40
        assert not relay_task.done()

        correlator.resolve(relay_response())
        assert (await relay_task).on is True

    def test_repr(self, correlator):
        assert repr(correlator) == "ResponseCorrelator(pending=0, timeout=0.5)"
