"""
Exception hierarchy for teletask.

All exceptions inherit from TeletaskError, providing a clean hierarchy
for error handling. The design follows these principles:

1. Protocol errors (framing, checksum) are distinct from connection errors
2. Decode errors carry the function type and offending bytes for debugging
3. Timeouts are distinguishable from every other failure
4. All exceptions provide meaningful error messages
"""

from __future__ import annotations


class TeletaskError(Exception):
    """
    Base exception for all teletask errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all teletask errors with a single except clause.
    """

    pass


class ProtocolError(TeletaskError):
    """
    Protocol-level error.

    Raised when the protocol is violated, such as:
    - Invalid frame format
    - Unexpected command byte
    - Conflicting in-flight queries
    """

    pass


class FrameError(ProtocolError):
    """
    Frame parsing error.

    Raised (or reported through the client's error channel) when a frame
    with a well-formed header carries an unrecognized command byte or an
    impossible length.
    """

    def __init__(self, message: str, *, raw_frame: bytes | None = None) -> None:
        super().__init__(message)
        self.raw_frame = raw_frame

    def __str__(self) -> str:
        base = super().__str__()
        if self.raw_frame:
            return f"{base} (frame={self.raw_frame.hex(' ')})"
        return base


class ChecksumError(FrameError):
    """
    Checksum validation failure.

    Only produced when receive-side checksum validation is enabled.
    """

    def __init__(
        self,
        message: str = "Checksum validation failed",
        *,
        expected: int | None = None,
        received: int | None = None,
        raw_frame: bytes | None = None,
    ) -> None:
        super().__init__(message, raw_frame=raw_frame)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        base = ProtocolError.__str__(self)
        if self.expected is not None and self.received is not None:
            return f"{base} (expected 0x{self.expected:02X}, got 0x{self.received:02X})"
        return base


class QueryInFlightError(ProtocolError):
    """
    A query for the same (function type, central unit, number) is pending.

    The newer call is rejected; the first caller keeps waiting for its
    response.
    """

    def __init__(self, key: tuple[int, int, int]) -> None:
        self.key = key
        function_type, central_unit, number = key
        super().__init__(
            f"Query already in flight for function type 0x{function_type:02X}, "
            f"central unit {central_unit}, number {number}"
        )


class DecodeError(TeletaskError):
    """
    Payload decoding error.

    Raised when a payload cannot be decoded, typically due to:
    - Too few bytes for the function type's layout
    - Out-of-range values (relay state, dimmer level, motor position)
    - Sensor error markers
    """

    def __init__(
        self,
        message: str,
        *,
        function_type: int | None = None,
        offset: int | None = None,
        raw_data: bytes | None = None,
    ) -> None:
        super().__init__(message)
        self.function_type = function_type
        self.offset = offset
        self.raw_data = raw_data

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.function_type is not None:
            parts.append(f"function_type=0x{self.function_type:02X}")
        if self.offset is not None:
            parts.append(f"offset={self.offset}")
        if self.raw_data:
            # Truncate raw data for display
            display_data = self.raw_data.hex()
            if len(display_data) > 40:
                display_data = display_data[:40] + "..."
            parts.append(f"data={display_data}")
        return " ".join(parts) if len(parts) > 1 else parts[0]


class TimeoutError(TeletaskError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when a RESPONSE is not received within the response timeout.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base


class ConnectionError(TeletaskError):  # noqa: A001 - intentionally shadows builtin
    """
    Central unit connection error.

    Raised when:
    - A command is sent while not connected
    - The connection cannot be established
    - The connection is closed while a query is waiting
    """

    pass


class TransportError(TeletaskError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Socket errors
    - Writes on a closed transport
    """

    pass
