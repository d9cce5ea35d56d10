"""
Pydantic models for DoIP addresses, events and decoded states.

This module defines the value objects produced and consumed by the
client, implemented as immutable Pydantic models with validation.

Design principles:
- All models are frozen (immutable)
- Addresses validate their ranges on construction, before any frame is built
- Decoded states carry engineering units (°C, lux, seconds, kWh),
  never raw wire values, except where the protocol defines no unit
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from teletask.protocol.constants import FunctionType, ProtocolConstants
from teletask.protocol.encoding import encode_item_number

Percentage = Annotated[int, Field(ge=0, le=ProtocolConstants.MAX_PERCENTAGE)]
"""Integer percentage used for dimmer levels and motor positions."""

PERCENTAGE_ADAPTER: TypeAdapter[int] = TypeAdapter(Percentage)

ItemNumber = Annotated[int, Field(ge=0, le=ProtocolConstants.MAX_ITEM_NUMBER)]

ITEM_NUMBER_ADAPTER: TypeAdapter[int] = TypeAdapter(ItemNumber)


class ItemAddress(BaseModel):
    """
    Address of an item on the installation.

    Example:
        >>> address = ItemAddress(central_unit=1, number=5)
        >>> address.number_bytes
        b'\\x00\\x05'

    Constructing an address with a central unit outside 1-10 or a number
    outside 0-65535 raises pydantic.ValidationError (a ValueError).
    """

    model_config = ConfigDict(frozen=True)

    central_unit: int = Field(
        ge=ProtocolConstants.MIN_CENTRAL_UNIT,
        le=ProtocolConstants.MAX_CENTRAL_UNIT,
        description="Central unit number (1-10)",
    )
    number: ItemNumber = Field(description="Item number (0-65535)")

    @property
    def number_bytes(self) -> bytes:
        """The item number as transmitted (MSB, LSB)."""
        return encode_item_number(self.number)


class StateChange(BaseModel):
    """
    Content of a LOG frame.

    The value is the raw state byte; callers decode it further if needed.
    """

    model_config = ConfigDict(frozen=True)

    central_unit: int
    function_type: FunctionType | int
    number: int
    value: int


class ResponsePayload(BaseModel):
    """
    Header and body of a RESPONSE frame.

    Attributes:
        central_unit: Central unit that answered.
        function_type: Function type byte of the queried item.
        number: Item number.
        error: Error byte (not interpreted by the central unit firmware).
        data: Type-specific bytes following the header.
    """

    model_config = ConfigDict(frozen=True)

    central_unit: int
    function_type: int
    number: int
    error: int
    data: bytes

    @property
    def key(self) -> tuple[int, int, int]:
        """Correlation key (function type, central unit, number)."""
        return (self.function_type, self.central_unit, self.number)


# ===== Relay / Dimmer =====


class RelayState(BaseModel):
    """State of a relay."""

    model_config = ConfigDict(frozen=True)

    on: bool


class DimmerState(BaseModel):
    """
    State of a dimmer.

    previous_level is only present when the central unit reports the level
    the dimmer had before it was switched off.
    """

    model_config = ConfigDict(frozen=True)

    on: bool
    level: Percentage
    previous_level: Percentage | None = None


# ===== Motor =====


class MotorDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    STOPPED = "stopped"


class MotorProtection(str, Enum):
    """Sun/wind protection state of a motor."""

    NOT_DEFINED = "notDefined"
    ON_CONTROLLED = "onControlled"
    ON_NOT_CONTROLLED = "onNotControlled"
    ON_OVERRULED = "onOverruled"
    OFF = "off"
    UNKNOWN = "unknown"


class MotorCalibration(BaseModel):
    model_config = ConfigDict(frozen=True)

    correction_at_zero_percent: int
    correction_at_hundred_percent: int


class MotorState(BaseModel):
    """
    State of a motor (shutter, screen, gate).

    Attributes:
        moving: Whether the motor is powered.
        direction: Current direction.
        position: Current position (0-100).
        target_position: Position the motor is moving to (0-100).
        protection: Protection state.
        time_to_finish_seconds: Time left to reach the target.
        calibration: End-stop corrections.
    """

    model_config = ConfigDict(frozen=True)

    moving: bool
    direction: MotorDirection
    position: Percentage
    target_position: Percentage
    protection: MotorProtection
    time_to_finish_seconds: float
    calibration: MotorCalibration

    @property
    def protection_controlled(self) -> bool:
        """True when protection is on and controlled by the central unit."""
        return self.protection == MotorProtection.ON_CONTROLLED


# ===== Sensors =====


class SensorType(str, Enum):
    """Sensor families distinguished by the sensor decoder."""

    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    LIGHT = "light"
    TEMPERATURE_CONTROL = "temperatureControl"
    PULSE_COUNTER = "pulseCounter"
    GENERIC = "generic"


class PresetMode(str, Enum):
    DAY = "day"
    NIGHT = "night"
    STANDBY = "standby"
    OFF = "off"


class OperationMode(str, Enum):
    AUTO = "auto"
    HEAT = "heat"
    COOL = "cool"
    VENT = "vent"
    DRY = "dry"
    OFF = "off"


class FanSpeed(str, Enum):
    AUTO = "auto"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TemperatureSensorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.TEMPERATURE] = SensorType.TEMPERATURE
    temperature: float
    unit: str = "°C"


class HumiditySensorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.HUMIDITY] = SensorType.HUMIDITY
    humidity: int
    unit: str = "%"


class LightSensorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.LIGHT] = SensorType.LIGHT
    light: int
    unit: str = "lux"


class TemperatureControlState(BaseModel):
    """
    State of a temperature controller (thermostat / HVAC unit).

    All temperatures are in °C.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.TEMPERATURE_CONTROL] = SensorType.TEMPERATURE_CONTROL
    temperature: float
    target_temperature: float
    day_preset: float
    night_preset: float
    standby_offset: float
    preset: PresetMode
    mode: OperationMode
    fan_speed: FanSpeed
    on: bool
    window_open: bool
    output_state: int
    swing_direction: int
    unit: str = "°C"


class PulseCounterState(BaseModel):
    """Current rate and cumulative total of a pulse counter (energy meter)."""

    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.PULSE_COUNTER] = SensorType.PULSE_COUNTER
    current: int
    total: float
    unit: str = "kWh"


class GenericSensorState(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal[SensorType.GENERIC] = SensorType.GENERIC
    value: int


SensorState = Union[
    TemperatureSensorState,
    HumiditySensorState,
    LightSensorState,
    TemperatureControlState,
    PulseCounterState,
    GenericSensorState,
]
"""Any decoded sensor state; discriminate on the ``type`` field."""
