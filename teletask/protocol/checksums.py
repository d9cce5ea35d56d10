"""
8-bit additive checksum calculation and validation.

The DoIP protocol uses a simple additive checksum:
- Sum every byte from the start marker to the last parameter
- Keep only the lower 8 bits (modulo 256)

The checksum is the final byte of the frame.
"""

from __future__ import annotations


def calculate_checksum(data: bytes | bytearray | memoryview) -> int:
    """
    Calculate 8-bit additive checksum over the specified data.

    Algorithm: Sum all bytes, keep only lower 8 bits.

    Args:
        data: Data to checksum (STX through the last parameter byte).

    Returns:
        8-bit checksum value (0-255).

    Example:
        >>> calculate_checksum(b"\\x02\\x07\\x06\\x01\\x01\\x00\\x01")
        18
    """
    return sum(data) & 0xFF


def validate_checksum(frame: bytes | bytearray | memoryview) -> bool:
    """
    Validate that the last byte of a frame is the checksum of the rest.

    Args:
        frame: Complete frame including the trailing checksum byte.

    Returns:
        True if checksum is valid, False otherwise.
    """
    if len(frame) < 2:
        return False
    return calculate_checksum(frame[:-1]) == frame[-1]


def append_checksum(data: bytes | bytearray) -> bytes:
    """
    Calculate checksum and append it as a single byte.

    Args:
        data: Data to checksum.

    Returns:
        Original data with the checksum byte appended.

    Example:
        >>> append_checksum(b"\\x02\\x03\\x0b")
        b'\\x02\\x03\\x0b\\x10'
    """
    return bytes(data) + bytes([calculate_checksum(data)])
