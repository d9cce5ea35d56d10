"""
Dimmer response decoding.

Dimmer payload (after the response header):
- Byte 0: Current level (0-100)
- Byte 1: Previous level (optional; present when the dimmer was switched
  off and remembers its last level)
"""

from __future__ import annotations

from teletask.exceptions import DecodeError
from teletask.models.states import DimmerState
from teletask.parsers.payload_reader import PayloadReader
from teletask.parsers.registry import ResponseDecoder
from teletask.protocol.constants import FunctionType, ProtocolConstants


def decode_dimmer(data: bytes) -> DimmerState:
    """
    Decode a dimmer payload.

    An out-of-range previous level is ignored rather than rejected.

    Raises:
        DecodeError: If the payload is empty or the level exceeds 100.

    Example:
        >>> decode_dimmer(b"\\x32")
        DimmerState(on=True, level=50, previous_level=None)
    """
    reader = PayloadReader(data, FunctionType.DIMMER)
    reader.require(1, "dimmer")
    level = reader.read_byte()

    if level > ProtocolConstants.MAX_PERCENTAGE:
        raise DecodeError(
            f"Invalid dimmer level in response: {level}",
            function_type=FunctionType.DIMMER,
            offset=0,
            raw_data=data,
        )

    previous_level = None
    if reader.has_bytes(1):
        candidate = reader.read_byte()
        if candidate <= ProtocolConstants.MAX_PERCENTAGE:
            previous_level = candidate

    return DimmerState(on=level > 0, level=level, previous_level=previous_level)


class DimmerDecoder(ResponseDecoder):
    """Decoder for dimmer RESPONSE payloads."""

    @property
    def function_type(self) -> FunctionType:
        return FunctionType.DIMMER

    def decode(self, data: bytes) -> DimmerState:
        return decode_dimmer(data)
