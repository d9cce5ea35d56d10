"""
DoIP stream demultiplexing.

The central unit pushes an unbounded byte stream over TCP. A single
delivery from the socket may contain zero, one or several frames, a frame
may be split across deliveries, and standalone acknowledge bytes (0x0A)
may appear between frames.

FrameReader scans the stream left to right:

1. **Acknowledge byte** (0x0A): a one-byte "OK" unit, consumed silently.
2. **Start marker** (0x02): the next byte is the frame length. If the
   buffer does not yet hold the whole frame, scanning stops and the
   remainder is kept for the next delivery. Otherwise the frame is sliced
   out and classified by its command byte.
3. **Anything else**: skipped one byte at a time to resynchronize.

Wire Format Notes:
- LEN covers STX, LEN, CMD and the parameters; the frame is LEN + 1
  bytes long including the trailing checksum
- The payload handed to consumers is the parameter bytes, between the
  command byte and the checksum (both exclusive)
- Checksums are only verified when the reader is created with
  validate_checksums=True; a frame failing the check is reported and the
  scan resumes one byte after its start marker, since the length byte
  itself may be the corrupt one
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from teletask.protocol.checksums import calculate_checksum
from teletask.protocol.constants import INBOUND_COMMANDS, Command, ProtocolConstants

logger = logging.getLogger(__name__)


class FrameParseResult(Enum):
    """
    Result codes for frame parsing operations.

    Partial frames are never reported; they are buffered until the rest
    arrives.
    """

    SUCCESS = auto()
    """Frame was extracted and carries a known inbound command."""

    INVALID_CHECKSUM = auto()
    """Frame checksum validation failed (data corruption)."""

    INVALID_FORMAT = auto()
    """Length byte is too small to describe a frame."""

    UNKNOWN_COMMAND = auto()
    """Command byte is not one the central unit sends."""


@dataclass(frozen=True)
class ParsedFrame:
    """
    A complete inbound frame.

    Attributes:
        command_byte: The command byte at offset 2.
        payload: Parameter bytes between the command and the checksum.
        raw_frame: Complete raw frame bytes as received.
    """

    command_byte: int
    payload: bytes
    raw_frame: bytes

    @property
    def command(self) -> Command | int:
        """
        Get command as Command enum if recognized, else raw int.
        """
        try:
            return Command(self.command_byte)
        except ValueError:
            return self.command_byte

    @property
    def is_log(self) -> bool:
        return self.command_byte == Command.LOG

    @property
    def is_response(self) -> bool:
        return self.command_byte == Command.RESPONSE

    @property
    def is_keep_alive(self) -> bool:
        return self.command_byte == Command.KEEP_ALIVE

    def __repr__(self) -> str:
        cmd_name = self.command.name if isinstance(self.command, Command) else f"0x{self.command_byte:02X}"
        if self.payload:
            return f"ParsedFrame({cmd_name}, payload={len(self.payload)} bytes)"
        return f"ParsedFrame({cmd_name})"


@dataclass(frozen=True)
class FrameParseError:
    """
    Details about a frame that was consumed but could not be accepted.
    """

    result: FrameParseResult
    message: str
    position: int = 0
    partial_data: bytes = b""


class FrameReader:
    """
    Incremental DoIP frame demultiplexer.

    The reader keeps the undelivered tail of a partially received frame
    between calls, so frames split across socket reads are reassembled.
    One reader must be used per connection and reset() after reconnecting.

    Example:
        >>> reader = FrameReader()
        >>> reader.feed(b"\\x0a\\x02\\x09\\x03")
        []
        >>> results = reader.feed(b"\\x01\\x01\\x00\\x05\\x00\\xff\\x14")
        >>> results[0][1]
        ParsedFrame(LOG, payload=6 bytes)
    """

    def __init__(self, validate_checksums: bool = False) -> None:
        """
        Initialize the frame reader.

        Args:
            validate_checksums: Reject frames whose trailing byte does not
                match the additive checksum.
        """
        self._validate_checksums = validate_checksums
        self._buffer = bytearray()

    @property
    def buffered(self) -> int:
        """Number of bytes held back waiting for the rest of a frame."""
        return len(self._buffer)

    def reset(self) -> None:
        """Drop any partially received frame."""
        if self._buffer:
            logger.debug("Discarding %d buffered bytes", len(self._buffer))
        self._buffer.clear()

    def feed(
        self,
        data: bytes | bytearray | memoryview,
    ) -> list[tuple[FrameParseResult, ParsedFrame | FrameParseError]]:
        """
        Consume a chunk of stream data.

        Args:
            data: Bytes as delivered by the transport.

        Returns:
            One (result, frame_or_error) tuple per complete frame found,
            in stream order:
            - On success: (SUCCESS, ParsedFrame)
            - On failure: (error_code, FrameParseError)
        """
        self._buffer.extend(data)
        buffer = self._buffer
        results: list[tuple[FrameParseResult, ParsedFrame | FrameParseError]] = []
        position = 0
        skipped = 0

        while position < len(buffer):
            current = buffer[position]

            if current == ProtocolConstants.ACK:
                position += 1
                continue

            if current != ProtocolConstants.STX:
                skipped += 1
                position += 1
                continue

            if position + 1 >= len(buffer):
                break

            length = buffer[position + 1]
            if length < ProtocolConstants.FRAME_OVERHEAD:
                results.append((
                    FrameParseResult.INVALID_FORMAT,
                    FrameParseError(
                        result=FrameParseResult.INVALID_FORMAT,
                        message=f"Frame length {length} is shorter than the frame header",
                        position=position,
                        partial_data=bytes(buffer[position:position + 2]),
                    ),
                ))
                position += 1
                continue

            end = position + length + 1
            if end > len(buffer):
                break

            result = self._classify(bytes(buffer[position:end]), position)
            results.append(result)
            if result[0] is FrameParseResult.INVALID_CHECKSUM:
                # The length byte may be the corrupt one; rescan from the next byte.
                position += 1
            else:
                position = end

        if skipped:
            logger.warning("Skipped %d unexpected byte(s) while resynchronizing", skipped)

        del buffer[:position]
        if buffer:
            logger.debug("Holding %d byte(s) of an incomplete frame", len(buffer))

        return results

    def _classify(
        self,
        raw: bytes,
        position: int,
    ) -> tuple[FrameParseResult, ParsedFrame | FrameParseError]:
        """Validate and classify a complete frame by its command byte."""
        if self._validate_checksums:
            expected = calculate_checksum(raw[:-1])
            if expected != raw[-1]:
                return FrameParseResult.INVALID_CHECKSUM, FrameParseError(
                    result=FrameParseResult.INVALID_CHECKSUM,
                    message=f"Checksum mismatch: expected 0x{expected:02X}, got 0x{raw[-1]:02X}",
                    position=position,
                    partial_data=raw,
                )

        command_byte = raw[ProtocolConstants.COMMAND_OFFSET]
        if command_byte not in INBOUND_COMMANDS:
            return FrameParseResult.UNKNOWN_COMMAND, FrameParseError(
                result=FrameParseResult.UNKNOWN_COMMAND,
                message=f"Unknown command: 0x{command_byte:02X}",
                position=position,
                partial_data=raw,
            )

        frame = ParsedFrame(
            command_byte=command_byte,
            payload=raw[ProtocolConstants.PARAMETERS_OFFSET:-1],
            raw_frame=raw,
        )
        return FrameParseResult.SUCCESS, frame
