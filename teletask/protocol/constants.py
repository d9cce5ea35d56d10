"""
DoIP protocol command bytes, function types and action catalogs.

The byte values in this module are fixed by the central unit firmware and
must match it exactly.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final


class Command(IntEnum):
    """
    Frame command bytes.

    The command byte sits at offset 2 of every frame and identifies
    its purpose.
    """

    LOG = 0x03
    """Unsolicited state change (inbound) or log enable/disable (outbound)."""

    GET = 0x06
    """Query the current state of an item."""

    SET = 0x07
    """Change the state of an item (fire-and-forget)."""

    KEEP_ALIVE = 0x0B
    """No-op that keeps the TCP session open."""

    RESPONSE = 0x10
    """Reply to a GET."""


class FunctionType(IntEnum):
    """Categories of controllable and queryable items."""

    RELAY = 0x01
    DIMMER = 0x02
    PROCESS = 0x03
    MOTOR = 0x06
    LOCAL_MOOD = 0x08
    TIMED_MOOD = 0x09
    GENERAL_MOOD = 0x0A
    REGIME = 0x0E
    FLAG = 0x0F
    SENSOR = 0x14
    AUDIO = 0x1F
    TP_KEY = 0x34
    SERVICE = 0x35
    MESSAGE = 0x36
    CONDITION = 0x3C


class FunctionState(IntEnum):
    """Generic on/off/toggle values for relays, flags and moods."""

    OFF = 0x00
    ON = 0xFF
    TOGGLE = 0x67


class LogState(IntEnum):
    """Parameter of the LOG command that enables or disables events."""

    OFF = 0x00
    ON = 0xFF


class MotorAction(IntEnum):
    """SET actions for motors."""

    UP = 0x01
    DOWN = 0x02
    STOP = 0x03
    START_STOP = 0x06
    UP_STOP = 0x07
    DOWN_STOP = 0x08
    GO_TO_POSITION = 0x0B
    SUN_PROTECTION = 0x0F
    UP_DOWN = 0x37


class AudioAction(IntEnum):
    """SET actions for audio zones."""

    VOLUME_UP = 0x20
    VOLUME_DOWN = 0x21
    AUX2 = 0x23
    ON = 0x24
    OFF = 0x25
    FM = 0x26
    CD = 0x27
    TAPE = 0x28
    VIDEO = 0x29
    AUX = 0x2A
    VIDEO2 = 0x2B
    FM2 = 0x2F
    CD2 = 0x30
    TAPE2 = 0x31
    SRC6 = 0x47
    SRC7 = 0x48
    SRC8 = 0x49
    SRC6_2 = 0x4A
    SRC7_2 = 0x4B
    SRC8_2 = 0x4C
    MUTE = 0x4D


class SensorAction(IntEnum):
    """SET actions for sensors and temperature controllers."""

    TEMP_UP = 0x15
    TEMP_DOWN = 0x16
    TEMP_FROST = 0x18
    TEMP_NIGHT = 0x19
    TEMP_DAY = 0x1A
    TEMP_SET_NIGHT = 0x1B
    TEMP_SET_DAY = 0x1D
    TEMP_MODE = 0x1E
    TEMP_SPEED = 0x1F
    TEMP_SET_STANDBY = 0x58
    TEMP_SP_AUTO = 0x59
    TEMP_STANDBY = 0x5D
    TEMP_AUTO = 0x5E
    TEMP_HEAT = 0x5F
    TEMP_COOL = 0x60
    TEMP_SP_LOW = 0x61
    TEMP_SP_MED = 0x62
    TEMP_SP_HIGH = 0x63
    TEMP_ON_OFF = 0x68
    TEMP_VENT = 0x69
    TEMP_STOP = 0x6A
    TEMP_HEAT_PLUS = 0x6B


class RegimeAction(IntEnum):
    """Regimes that can be activated on the installation."""

    AUTO = 0x00
    WORKDAY = 0x01
    WEEKEND = 0x02
    SIMULATION = 0x03
    NONE = 0x04
    CUSTOM = 0x05


class TPKeyAction(IntEnum):
    """Values reported in LOG events for touch panel keys."""

    PULSE = 0x01
    CLOSED = 0x02
    OPENED = 0x03
    OTHER = 0x09


class ProtocolConstants:
    """
    DoIP protocol constants.

    Contains frame markers, header offsets, value limits, the default
    endpoint and timing defaults.
    """

    # ===== Frame Markers =====

    STX: Final[int] = 0x02
    """Start of frame marker."""

    ACK: Final[int] = 0x0A
    """Standalone acknowledge byte (not part of any frame)."""

    # ===== Frame Layout =====

    FRAME_OVERHEAD: Final[int] = 3
    """Length byte value of a frame without parameters (STX + LEN + CMD)."""

    COMMAND_OFFSET: Final[int] = 2
    """Offset of the command byte inside a frame."""

    PARAMETERS_OFFSET: Final[int] = 3
    """Offset of the first parameter byte inside a frame."""

    PAYLOAD_HEADER_SIZE: Final[int] = 5
    """Central unit + function type + number (2) + error byte."""

    # ===== Value Limits =====

    MIN_CENTRAL_UNIT: Final[int] = 1
    MAX_CENTRAL_UNIT: Final[int] = 10
    MAX_ITEM_NUMBER: Final[int] = 0xFFFF
    MAX_PERCENTAGE: Final[int] = 100

    # ===== Endpoint =====

    DEFAULT_PORT: Final[int] = 55957
    """Default TCP port of the central unit."""

    # ===== Timing Constants (seconds) =====

    DEFAULT_RESPONSE_TIMEOUT: Final[float] = 4.0
    """Time a query waits for its RESPONSE."""

    DEFAULT_KEEP_ALIVE_INTERVAL: Final[float] = 240.0
    """Interval between keep-alive frames."""

    DEFAULT_RECONNECT_DELAY: Final[float] = 5.0
    """Fixed delay before each reconnection attempt."""

    DEFAULT_MAX_RECONNECT_ATTEMPTS: Final[int] = 10
    """Reconnection attempts before giving up."""

    DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0
    """Time allowed for the TCP handshake."""

    READ_CHUNK_SIZE: Final[int] = 4096
    """Maximum bytes requested from the socket per read."""


INBOUND_COMMANDS: Final[frozenset[int]] = frozenset({
    Command.LOG,
    Command.RESPONSE,
    Command.KEEP_ALIVE,
})
"""Command bytes the central unit may send to a client."""
