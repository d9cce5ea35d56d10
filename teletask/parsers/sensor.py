"""
Sensor family response decoding.

A sensor payload is dispatched on the discriminator byte at offset 1:

    0x01 temperature         0x04 temperature control
    0x02 humidity            0x05 pulse counter
    0x03 light               other: generic

Callers that already know the sensor family may bypass the discriminator
by passing an explicit SensorType.

Unit conversions:
- Temperature: raw / 10 - 273, rounded to 0.1 °C. Raw values of 0x3F00
  and above signal a sensor fault.
- Light: 10 ** (raw / 40) - 1, rounded to whole lux.
- Pulse counter total: raw / 1000 (kWh).
"""

from __future__ import annotations

from typing import Final

from teletask.exceptions import DecodeError
from teletask.models.states import (
    FanSpeed,
    GenericSensorState,
    HumiditySensorState,
    LightSensorState,
    OperationMode,
    PresetMode,
    PulseCounterState,
    SensorState,
    SensorType,
    TemperatureControlState,
    TemperatureSensorState,
)
from teletask.parsers.payload_reader import PayloadReader
from teletask.parsers.registry import ResponseDecoder
from teletask.protocol.constants import FunctionType

TEMPERATURE_ERROR_THRESHOLD: Final[int] = 0x3F00

TEMPERATURE_CONTROL_PAYLOAD_SIZE: Final[int] = 16

PULSE_COUNTER_TOTAL_OFFSET: Final[int] = 16

PULSE_COUNTER_PAYLOAD_SIZE: Final[int] = PULSE_COUNTER_TOTAL_OFFSET + 4

DISCRIMINATOR_OFFSET: Final[int] = 1

_SENSOR_TYPES: Final[dict[int, SensorType]] = {
    0x01: SensorType.TEMPERATURE,
    0x02: SensorType.HUMIDITY,
    0x03: SensorType.LIGHT,
    0x04: SensorType.TEMPERATURE_CONTROL,
    0x05: SensorType.PULSE_COUNTER,
}

_PRESET_MODES: Final[dict[int, PresetMode]] = {
    0x1A: PresetMode.DAY,
    0x19: PresetMode.NIGHT,
    0x5D: PresetMode.STANDBY,
}

_OPERATION_MODES: Final[dict[int, OperationMode]] = {
    0x94: OperationMode.AUTO,
    0x95: OperationMode.HEAT,
    0x96: OperationMode.COOL,
    0x69: OperationMode.VENT,
    0x6A: OperationMode.DRY,
}

_FAN_SPEEDS: Final[dict[int, FanSpeed]] = {
    0x89: FanSpeed.AUTO,
    0x97: FanSpeed.LOW,
    0x98: FanSpeed.MEDIUM,
    0x99: FanSpeed.HIGH,
}

_ON: Final[int] = 0xFF


# ===== Enumerations =====


def parse_preset_mode(value: int) -> PresetMode:
    return _PRESET_MODES.get(value, PresetMode.OFF)


def parse_operation_mode(value: int) -> OperationMode:
    return _OPERATION_MODES.get(value, OperationMode.OFF)


def parse_fan_speed(value: int) -> FanSpeed:
    return _FAN_SPEEDS.get(value, FanSpeed.AUTO)


def convert_temperature(raw: int) -> float:
    """Convert a raw temperature (tenths of a kelvin) to °C."""
    return round(raw / 10 - 273, 1)


def determine_sensor_type(data: bytes) -> SensorType:
    """
    Determine the sensor family from the discriminator byte.

    The discriminator shares its position with the low byte of 2-byte
    temperature, light and generic readings, so the result is only
    reliable for the other families. Callers that know the sensor type
    should decode with it instead.

    Raises:
        DecodeError: If the payload is too short to hold a discriminator.
    """
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(DISCRIMINATOR_OFFSET + 1, "sensor")
    return _SENSOR_TYPES.get(reader.peek_byte(DISCRIMINATOR_OFFSET), SensorType.GENERIC)


# ===== Per-family decoders =====


def decode_temperature_sensor(data: bytes) -> TemperatureSensorState:
    """
    Decode a temperature sensor.

    Raises:
        DecodeError: If fewer than 2 bytes are given or the sensor
            reports a fault.

    Example:
        >>> decode_temperature_sensor(bytes([0x0B, 0x96])).temperature
        23.6
    """
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(2, "temperature sensor")
    raw = reader.read_uint16()

    if raw >= TEMPERATURE_ERROR_THRESHOLD:
        raise DecodeError(
            f"Temperature sensor error detected (raw=0x{raw:04X})",
            function_type=FunctionType.SENSOR,
            offset=0,
            raw_data=data,
        )

    return TemperatureSensorState(temperature=convert_temperature(raw))


def decode_humidity_sensor(data: bytes) -> HumiditySensorState:
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(1, "humidity sensor")
    return HumiditySensorState(humidity=reader.read_byte())


def decode_light_sensor(data: bytes) -> LightSensorState:
    """Decode a light sensor (logarithmic scale)."""
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(2, "light sensor")
    raw = reader.read_uint16()
    return LightSensorState(light=round(10 ** (raw / 40) - 1))


def decode_temperature_control(data: bytes) -> TemperatureControlState:
    """
    Decode a temperature controller.

    Layout (16 bytes):
        0-1   current temperature      8   standby offset (tenths)
        2-3   target temperature       9   preset
        4-5   day preset               10  operation mode
        6-7   night preset             11  fan speed
        12    on (0xFF)                13  window open (0xFF)
        14    output state             15  swing direction
    """
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(TEMPERATURE_CONTROL_PAYLOAD_SIZE, "temperature control")

    temperature = convert_temperature(reader.read_uint16())
    target_temperature = convert_temperature(reader.read_uint16())
    day_preset = convert_temperature(reader.read_uint16())
    night_preset = convert_temperature(reader.read_uint16())
    standby_offset = reader.read_byte() / 10
    preset = parse_preset_mode(reader.read_byte())
    mode = parse_operation_mode(reader.read_byte())
    fan_speed = parse_fan_speed(reader.read_byte())
    on = reader.read_byte() == _ON
    window_open = reader.read_byte() == _ON
    output_state = reader.read_byte()
    swing_direction = reader.read_byte()

    return TemperatureControlState(
        temperature=temperature,
        target_temperature=target_temperature,
        day_preset=day_preset,
        night_preset=night_preset,
        standby_offset=standby_offset,
        preset=preset,
        mode=mode,
        fan_speed=fan_speed,
        on=on,
        window_open=window_open,
        output_state=output_state,
        swing_direction=swing_direction,
    )


def decode_pulse_counter(data: bytes) -> PulseCounterState:
    """Decode a pulse counter: current rate at offset 0, total at offset 16."""
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(PULSE_COUNTER_PAYLOAD_SIZE, "pulse counter")

    current = reader.read_uint16()
    reader.seek(PULSE_COUNTER_TOTAL_OFFSET)
    total = reader.read_uint32() / 1000

    return PulseCounterState(current=current, total=total)


def decode_generic_sensor(data: bytes) -> GenericSensorState:
    reader = PayloadReader(data, FunctionType.SENSOR)
    reader.require(2, "generic sensor")
    return GenericSensorState(value=reader.read_uint16())


_DECODERS = {
    SensorType.TEMPERATURE: decode_temperature_sensor,
    SensorType.HUMIDITY: decode_humidity_sensor,
    SensorType.LIGHT: decode_light_sensor,
    SensorType.TEMPERATURE_CONTROL: decode_temperature_control,
    SensorType.PULSE_COUNTER: decode_pulse_counter,
    SensorType.GENERIC: decode_generic_sensor,
}


def decode_sensor(data: bytes, sensor_type: SensorType | None = None) -> SensorState:
    """
    Decode a sensor payload.

    Args:
        data: Bytes following the response header.
        sensor_type: Sensor family; determined from the discriminator
            byte when omitted.

    Returns:
        One of the sensor state models, discriminated by ``type``.

    Raises:
        DecodeError: If the payload is too short for the family or the
            sensor reports a fault.
    """
    if sensor_type is None:
        sensor_type = determine_sensor_type(data)
    return _DECODERS[SensorType(sensor_type)](data)


class SensorDecoder(ResponseDecoder):
    """
    Decoder for sensor RESPONSE payloads.

    Args:
        sensor_type: Fixed sensor family; None dispatches on the
            discriminator byte.
    """

    def __init__(self, sensor_type: SensorType | None = None) -> None:
        self._sensor_type = sensor_type

    @property
    def function_type(self) -> FunctionType:
        return FunctionType.SENSOR

    @property
    def sensor_type(self) -> SensorType | None:
        return self._sensor_type

    def decode(self, data: bytes) -> SensorState:
        return decode_sensor(data, self._sensor_type)
