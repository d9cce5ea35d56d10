"""
Frame building and parameter encoding for the DoIP protocol.

Every frame, in both directions, has the layout:

    STX(0x02) | LEN | CMD | PARAMS... | CHECKSUM

LEN counts STX, LEN, CMD and the parameters (3 + len(PARAMS)); the
checksum byte sits at index LEN and is the sum of all preceding bytes
modulo 256.

Item numbers are 16-bit values transmitted big-endian (MSB first).
"""

from __future__ import annotations

from collections.abc import Iterable

from teletask.protocol.checksums import append_checksum
from teletask.protocol.constants import Command, LogState, ProtocolConstants


def build_frame(command: int, parameters: Iterable[int] = ()) -> bytes:
    """
    Build a complete checksummed frame.

    Args:
        command: Command byte.
        parameters: Parameter bytes, each already in range 0-255.

    Returns:
        Complete frame bytes.

    Example:
        >>> build_frame(Command.GET, [0x01, 0x01, 0x00, 0x01]).hex(" ")
        '02 07 06 01 01 00 01 12'
    """
    params = bytes(parameters)
    length = ProtocolConstants.FRAME_OVERHEAD + len(params)
    header = bytes([ProtocolConstants.STX, length, command])
    return append_checksum(header + params)


def encode_item_number(number: int) -> bytes:
    """
    Encode a 16-bit item number as 2 big-endian bytes.

    Raises:
        ValueError: If number is not in range 0-65535.

    Example:
        >>> encode_item_number(0x1234)
        b'\\x124'
    """
    if not 0 <= number <= ProtocolConstants.MAX_ITEM_NUMBER:
        raise ValueError(f"Item number must be 0-65535, got {number}")
    return bytes([(number >> 8) & 0xFF, number & 0xFF])


def decode_item_number(msb: int, lsb: int) -> int:
    """Join the two item number bytes of a payload header."""
    return (msb << 8) | lsb


def encode_uint16(value: int) -> bytes:
    """
    Encode a 16-bit unsigned value big-endian.

    Raises:
        ValueError: If value is not in range 0-65535.
    """
    if not 0 <= value <= 0xFFFF:
        raise ValueError(f"UInt16 value must be 0-65535, got {value}")
    return bytes([(value >> 8) & 0xFF, value & 0xFF])


def build_get_frame(central_unit: int, function_type: int, number: int) -> bytes:
    """
    Build a GET frame: [central unit, function type, number MSB, number LSB].
    """
    return build_frame(
        Command.GET,
        bytes([central_unit, function_type]) + encode_item_number(number),
    )


def build_set_frame(
    central_unit: int,
    function_type: int,
    number: int,
    action: bytes | Iterable[int],
) -> bytes:
    """
    Build a SET frame.

    Parameter layout: [central unit, function type, number MSB, number LSB,
    action bytes...].
    """
    return build_frame(
        Command.SET,
        bytes([central_unit, function_type]) + encode_item_number(number) + bytes(action),
    )


def build_log_frame(function_type: int, enabled: bool) -> bytes:
    """
    Build the LOG command that enables or disables events for a function type.
    """
    state = LogState.ON if enabled else LogState.OFF
    return build_frame(Command.LOG, [function_type, state])


def build_keep_alive_frame() -> bytes:
    """Build the parameterless KEEP_ALIVE frame (02 03 0B 10)."""
    return build_frame(Command.KEEP_ALIVE)


def bytes_to_hex(data: bytes | bytearray | memoryview) -> str:
    """
    Convert bytes to a spaced uppercase hex string for logging.

    Example:
        >>> bytes_to_hex(b'\\x02\\x03\\x0b\\x10')
        '02 03 0B 10'
    """
    return bytes(data).hex(" ").upper()
