"""Tests for MockTransport."""

import asyncio

import pytest

from teletask.exceptions import TransportError
from teletask.transport.mock import MockTransport


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.mark.asyncio
    async def test_open_close(self, transport):
        """Test opening and closing transport."""
        assert not transport.is_open
        await transport.open()
        assert transport.is_open
        await transport.close()
        assert not transport.is_open

    @pytest.mark.asyncio
    async def test_open_is_idempotent(self, transport):
        await transport.open()
        await transport.open()
        assert transport.open_count == 1

    @pytest.mark.asyncio
    async def test_open_failure(self, transport):
        """Test a refused connection."""
        transport.fail_next_open()
        with pytest.raises(TransportError):
            await transport.open()
        assert not transport.is_open

        await transport.open()
        assert transport.is_open

    @pytest.mark.asyncio
    async def test_lifecycle_events(self, transport):
        events = []
        transport.on_ready(lambda: events.append("ready"))
        transport.on_disconnected(lambda: events.append("disconnected"))

        await transport.open()
        await transport.close()
        await transport.close()

        assert events == ["ready", "disconnected"]

    @pytest.mark.asyncio
    async def test_write_records_data(self, transport):
        """Test that write records data."""
        await transport.open()
        await transport.write(b"hello")
        await transport.write(b"world")
        assert transport.written_data == [b"hello", b"world"]
        assert transport.last_written == b"world"

    @pytest.mark.asyncio
    async def test_write_when_closed_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.write(b"test")

    @pytest.mark.asyncio
    async def test_queued_response(self, transport):
        """Test that a queued reply is delivered after the write."""
        received = []
        transport.on_data(received.append)
        transport.add_response(b"\x0a")
        await transport.open()

        await transport.write(b"request")
        assert received == []
        await asyncio.sleep(0)

        assert received == [b"\x0a"]

    @pytest.mark.asyncio
    async def test_responses_fifo(self, transport):
        received = []
        transport.on_data(received.append)
        transport.add_response(b"first")
        transport.add_response(b"second")
        await transport.open()

        await transport.write(b"a")
        await transport.write(b"b")
        await asyncio.sleep(0)

        assert received == [b"first", b"second"]

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        """Test dynamic replies with fallback to the queue."""
        received = []
        transport.on_data(received.append)
        transport.set_response_callback(lambda data: data.upper() if data == b"echo" else None)
        transport.add_response(b"queued")
        await transport.open()

        await transport.write(b"echo")
        await transport.write(b"other")
        await asyncio.sleep(0)

        assert received == [b"ECHO", b"queued"]

    def test_inject(self, transport):
        received = []
        transport.on_data(received.append)
        transport.inject(bytearray(b"\x02\x03"))
        assert received == [b"\x02\x03"]

    def test_simulated_events(self, transport):
        events = []
        transport.on_ready(lambda: events.append("ready"))
        transport.on_disconnected(lambda: events.append("disconnected"))
        transport.on_reconnecting(lambda attempt: events.append(attempt))
        transport.on_keep_alive(lambda: events.append("keep-alive"))
        transport.on_error(lambda error: events.append(str(error)))

        transport.simulate_ready()
        assert transport.is_open
        transport.simulate_keep_alive()
        transport.simulate_disconnect()
        assert not transport.is_open
        transport.simulate_reconnecting(3)
        transport.simulate_error(TransportError("lost"))

        assert events == ["ready", "keep-alive", "disconnected", 3, "lost"]

    def test_failing_handler_does_not_stop_others(self, transport):
        received = []

        def broken(data):
            raise RuntimeError("handler failed")

        transport.on_data(broken)
        transport.on_data(received.append)
        transport.inject(b"\x0a")

        assert received == [b"\x0a"]

    @pytest.mark.asyncio
    async def test_clear(self, transport):
        transport.add_response(b"reply")
        await transport.open()
        await transport.write(b"data")
        transport.clear()

        assert transport.written_data == []
        await transport.write(b"more")
        assert transport.written_data == [b"more"]

    @pytest.mark.asyncio
    async def test_assert_written(self, transport):
        await transport.open()
        await transport.write(b"\x02\x03\x0b\x10")

        transport.assert_written(b"\x02\x03\x0b\x10")
        transport.assert_write_count(1)
        with pytest.raises(AssertionError, match="expected 02 03 0b 11"):
            transport.assert_written(b"\x02\x03\x0b\x11")
        with pytest.raises(AssertionError):
            transport.assert_write_count(2)

    def test_assert_written_nothing(self, transport):
        with pytest.raises(AssertionError, match="No data written"):
            transport.assert_written(b"\x00")

    @pytest.mark.asyncio
    async def test_context_manager(self, transport):
        async with transport:
            assert transport.is_open
        assert not transport.is_open

    def test_repr(self, transport):
        assert repr(transport) == "MockTransport('mock://central-unit', closed, writes=0)"
