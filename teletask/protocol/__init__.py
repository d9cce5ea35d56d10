"""
Protocol layer for DoIP communication.

This module contains the low-level protocol handling:
- Command, function type and action catalogs
- Checksum calculation and validation
- Frame building for GET, SET, LOG and KEEP_ALIVE
- Stream demultiplexing into frames
"""

from teletask.protocol.checksums import append_checksum, calculate_checksum, validate_checksum
from teletask.protocol.constants import (
    INBOUND_COMMANDS,
    AudioAction,
    Command,
    FunctionState,
    FunctionType,
    LogState,
    MotorAction,
    ProtocolConstants,
    RegimeAction,
    SensorAction,
    TPKeyAction,
)
from teletask.protocol.encoding import (
    build_frame,
    build_get_frame,
    build_keep_alive_frame,
    build_log_frame,
    build_set_frame,
    bytes_to_hex,
    decode_item_number,
    encode_item_number,
    encode_uint16,
)
from teletask.protocol.frame_reader import (
    FrameParseError,
    FrameParseResult,
    FrameReader,
    ParsedFrame,
)

__all__ = [
    # Constants
    "Command",
    "FunctionType",
    "FunctionState",
    "LogState",
    "MotorAction",
    "AudioAction",
    "SensorAction",
    "RegimeAction",
    "TPKeyAction",
    "ProtocolConstants",
    "INBOUND_COMMANDS",
    # Checksums
    "calculate_checksum",
    "validate_checksum",
    "append_checksum",
    # Encoding
    "build_frame",
    "build_get_frame",
    "build_set_frame",
    "build_log_frame",
    "build_keep_alive_frame",
    "encode_item_number",
    "decode_item_number",
    "encode_uint16",
    "bytes_to_hex",
    # Frame Parsing
    "FrameReader",
    "FrameParseResult",
    "ParsedFrame",
    "FrameParseError",
]
