"""Tests for PayloadReader."""

import pytest

from teletask.exceptions import DecodeError
from teletask.parsers.payload_reader import PayloadReader
from teletask.protocol.constants import FunctionType


class TestPayloadReader:
    """Tests for PayloadReader class."""

    def test_read_byte(self):
        """Test reading single bytes in order."""
        reader = PayloadReader(b"\xff\x00\xab")
        assert reader.read_byte() == 0xFF
        assert reader.read_byte() == 0x00
        assert reader.read_byte() == 0xAB

    def test_read_uint16_big_endian(self):
        """Test that 16-bit values are read MSB first."""
        reader = PayloadReader(b"\x12\x34")
        assert reader.read_uint16() == 0x1234

    def test_read_uint32_big_endian(self):
        reader = PayloadReader(b"\x12\x34\x56\x78")
        assert reader.read_uint32() == 0x12345678

    def test_read_bytes(self):
        reader = PayloadReader(b"\x01\x02\x03")
        assert reader.read_bytes(2) == b"\x01\x02"
        assert reader.remaining == 1

    def test_skip_and_seek(self):
        """Test relative and absolute positioning."""
        reader = PayloadReader(b"\x00\x11\x22\x33")
        reader.skip(2)
        assert reader.read_byte() == 0x22
        reader.seek(1)
        assert reader.read_byte() == 0x11

    def test_position_and_remaining(self):
        reader = PayloadReader(b"\x00\x11\x22\x33")
        assert reader.position == 0
        assert reader.remaining == 4
        reader.read_uint16()
        assert reader.position == 2
        assert reader.remaining == 2
        assert len(reader) == 4

    def test_peek_byte(self):
        """Test peeking without consuming."""
        reader = PayloadReader(b"\xaa\xbb")
        assert reader.peek_byte() == 0xAA
        assert reader.peek_byte(1) == 0xBB
        assert reader.read_byte() == 0xAA
        assert reader.peek_byte() == 0xBB

    def test_has_bytes(self):
        reader = PayloadReader(b"\x01")
        assert reader.has_bytes(1)
        assert not reader.has_bytes(2)


class TestPayloadReaderBounds:
    """Tests for bounds violations."""

    def test_read_past_end(self):
        """Test that reading past the end raises DecodeError, not IndexError."""
        reader = PayloadReader(b"\x01", FunctionType.DIMMER)
        reader.read_byte()
        with pytest.raises(DecodeError) as exc_info:
            reader.read_byte()
        assert exc_info.value.function_type == FunctionType.DIMMER
        assert exc_info.value.offset == 1

    def test_uint16_past_end(self):
        with pytest.raises(DecodeError):
            PayloadReader(b"\x01").read_uint16()

    def test_require(self):
        """Test the whole-payload length check."""
        reader = PayloadReader(b"\x01\x02", FunctionType.MOTOR)
        reader.require(2, "motor")
        with pytest.raises(DecodeError, match="Invalid motor payload: need 9 bytes, have 2"):
            reader.require(9, "motor")

    def test_seek_out_of_range(self):
        reader = PayloadReader(b"\x01\x02")
        with pytest.raises(DecodeError):
            reader.seek(3)

    def test_peek_out_of_range(self):
        with pytest.raises(DecodeError):
            PayloadReader(b"").peek_byte()

    def test_repr(self):
        assert repr(PayloadReader(b"\x01\x02")) == "PayloadReader(position=0, length=2)"
