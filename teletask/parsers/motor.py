"""
Motor response decoding.

Motor payload structure (after the response header, 9 bytes):
- Direction (1 byte): 1 = up, 2 = down, anything else = stopped
- Power (1 byte): 0xFF = moving
- Protection (1 byte): see MotorProtection
- Target position (1 byte, 0-100)
- Current position (1 byte, 0-100)
- Time to finish (2 bytes, big-endian, centiseconds)
- Correction at 0% (1 byte)
- Correction at 100% (1 byte)
"""

from __future__ import annotations

from typing import Final

from teletask.exceptions import DecodeError
from teletask.models.states import (
    MotorCalibration,
    MotorDirection,
    MotorProtection,
    MotorState,
)
from teletask.parsers.payload_reader import PayloadReader
from teletask.parsers.registry import ResponseDecoder
from teletask.protocol.constants import FunctionType, ProtocolConstants

MOTOR_PAYLOAD_SIZE: Final[int] = 9

MOTOR_POWER_ON: Final[int] = 0xFF

_DIRECTIONS: Final[dict[int, MotorDirection]] = {
    0x01: MotorDirection.UP,
    0x02: MotorDirection.DOWN,
}

_PROTECTION_STATES: Final[dict[int, MotorProtection]] = {
    0x00: MotorProtection.NOT_DEFINED,
    0x01: MotorProtection.ON_CONTROLLED,
    0x02: MotorProtection.ON_NOT_CONTROLLED,
    0x03: MotorProtection.ON_OVERRULED,
    0x04: MotorProtection.OFF,
}


def parse_motor_direction(value: int) -> MotorDirection:
    return _DIRECTIONS.get(value, MotorDirection.STOPPED)


def parse_motor_protection(value: int) -> MotorProtection:
    return _PROTECTION_STATES.get(value, MotorProtection.UNKNOWN)


def decode_motor(data: bytes) -> MotorState:
    """
    Decode a motor payload.

    Raises:
        DecodeError: If the payload is shorter than 9 bytes or a position
            exceeds 100.
    """
    reader = PayloadReader(data, FunctionType.MOTOR)
    reader.require(MOTOR_PAYLOAD_SIZE, "motor")

    direction = reader.read_byte()
    power = reader.read_byte()
    protection = reader.read_byte()
    target_position = reader.read_byte()
    current_position = reader.read_byte()
    time_to_finish = reader.read_uint16()
    correction_zero = reader.read_byte()
    correction_hundred = reader.read_byte()

    if (
        target_position > ProtocolConstants.MAX_PERCENTAGE
        or current_position > ProtocolConstants.MAX_PERCENTAGE
    ):
        raise DecodeError(
            f"Invalid motor position values: target={target_position}, current={current_position}",
            function_type=FunctionType.MOTOR,
            offset=3,
            raw_data=data,
        )

    return MotorState(
        moving=power == MOTOR_POWER_ON,
        direction=parse_motor_direction(direction),
        position=current_position,
        target_position=target_position,
        protection=parse_motor_protection(protection),
        time_to_finish_seconds=time_to_finish / 100,
        calibration=MotorCalibration(
            correction_at_zero_percent=correction_zero,
            correction_at_hundred_percent=correction_hundred,
        ),
    )


class MotorDecoder(ResponseDecoder):
    """Decoder for motor RESPONSE payloads."""

    @property
    def function_type(self) -> FunctionType:
        return FunctionType.MOTOR

    def decode(self, data: bytes) -> MotorState:
        return decode_motor(data)
