"""
PayloadReader - Bounds-checked reader for fixed-layout DoIP payloads.

DoIP payloads are raw bytes with multi-byte values transmitted big-endian.
The reader tracks position and raises DecodeError, never IndexError, when
a payload is shorter than its layout requires.

Example:
    >>> reader = PayloadReader(b"\\x0a\\xab\\xff")
    >>> reader.read_uint16()
    2731
    >>> reader.read_byte()
    255
"""

from __future__ import annotations

from teletask.exceptions import DecodeError


class PayloadReader:
    """
    Reader for big-endian binary payloads.

    Attributes:
        position: Current read position in bytes.
        remaining: Number of bytes remaining.
        data: The underlying payload.
    """

    __slots__ = ("_data", "_position", "_function_type")

    def __init__(self, data: bytes, function_type: int | None = None) -> None:
        """
        Initialize the payload reader.

        Args:
            data: Payload bytes.
            function_type: Function type reported on DecodeError.
        """
        self._data = bytes(data)
        self._position = 0
        self._function_type = function_type

    @property
    def position(self) -> int:
        """Current position in bytes (0-indexed)."""
        return self._position

    @property
    def remaining(self) -> int:
        """Number of bytes remaining to read."""
        return len(self._data) - self._position

    @property
    def data(self) -> bytes:
        return self._data

    def has_bytes(self, count: int) -> bool:
        """Check if at least `count` bytes are available to read."""
        return self.remaining >= count

    def require(self, count: int, what: str) -> None:
        """
        Fail unless the whole payload holds at least `count` bytes.

        Raises:
            DecodeError: If the payload is too short.
        """
        if len(self._data) < count:
            raise DecodeError(
                f"Invalid {what} payload: need {count} bytes, have {len(self._data)}",
                function_type=self._function_type,
                raw_data=self._data,
            )

    def _check_bounds(self, count: int, operation: str) -> None:
        if self._position + count > len(self._data):
            raise DecodeError(
                f"Cannot {operation}: need {count} bytes, "
                f"have {self.remaining} at position {self._position}",
                function_type=self._function_type,
                offset=self._position,
                raw_data=self._data,
            )

    # ===== Position Control =====

    def skip(self, count: int) -> None:
        """
        Skip forward by the specified number of bytes.

        Raises:
            DecodeError: If skip would exceed payload bounds.
        """
        self._check_bounds(count, "skip")
        self._position += count

    def seek(self, position: int) -> None:
        """
        Move to an absolute byte position.

        Raises:
            DecodeError: If position is out of bounds.
        """
        if position < 0 or position > len(self._data):
            raise DecodeError(
                f"Invalid seek position {position}, valid range is 0-{len(self._data)}",
                function_type=self._function_type,
                offset=position,
            )
        self._position = position

    # ===== Reading =====

    def read_byte(self) -> int:
        """Read a single unsigned byte and advance position."""
        self._check_bounds(1, "read byte")
        value = self._data[self._position]
        self._position += 1
        return value

    def read_uint16(self) -> int:
        """Read a big-endian unsigned 16-bit value."""
        self._check_bounds(2, "read uint16")
        value = int.from_bytes(self._data[self._position:self._position + 2], "big")
        self._position += 2
        return value

    def read_uint32(self) -> int:
        """Read a big-endian unsigned 32-bit value."""
        self._check_bounds(4, "read uint32")
        value = int.from_bytes(self._data[self._position:self._position + 4], "big")
        self._position += 4
        return value

    def read_bytes(self, count: int) -> bytes:
        """Read `count` raw bytes."""
        self._check_bounds(count, f"read {count} bytes")
        value = self._data[self._position:self._position + count]
        self._position += count
        return value

    def peek_byte(self, offset: int = 0) -> int:
        """
        Read a byte relative to the current position without advancing.

        Raises:
            DecodeError: If the byte is beyond the payload.
        """
        index = self._position + offset
        if not 0 <= index < len(self._data):
            raise DecodeError(
                f"Cannot peek byte at position {index}",
                function_type=self._function_type,
                offset=index,
                raw_data=self._data,
            )
        return self._data[index]

    def __repr__(self) -> str:
        return f"PayloadReader(position={self._position}, length={len(self._data)})"

    def __len__(self) -> int:
        return len(self._data)
