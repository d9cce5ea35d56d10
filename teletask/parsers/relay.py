"""
Relay response decoding.

Relay payload (after the response header):
- Byte 0: State (0x00 = off, 0xFF = on; anything else is invalid)
"""

from __future__ import annotations

from teletask.exceptions import DecodeError
from teletask.models.states import RelayState
from teletask.parsers.payload_reader import PayloadReader
from teletask.parsers.registry import ResponseDecoder
from teletask.protocol.constants import FunctionState, FunctionType


def decode_relay(data: bytes) -> RelayState:
    """
    Decode a relay payload.

    Raises:
        DecodeError: If the payload is empty or the state byte is not
            0x00 or 0xFF.

    Example:
        >>> decode_relay(b"\\xff")
        RelayState(on=True)
    """
    reader = PayloadReader(data, FunctionType.RELAY)
    reader.require(1, "relay")
    state = reader.read_byte()

    if state not in (FunctionState.OFF, FunctionState.ON):
        raise DecodeError(
            f"Invalid relay state value: 0x{state:02X}",
            function_type=FunctionType.RELAY,
            offset=0,
            raw_data=data,
        )

    return RelayState(on=state == FunctionState.ON)


class RelayDecoder(ResponseDecoder):
    """Decoder for relay RESPONSE payloads."""

    @property
    def function_type(self) -> FunctionType:
        return FunctionType.RELAY

    def decode(self, data: bytes) -> RelayState:
        return decode_relay(data)
