"""
Data models for the DoIP protocol.

This module contains Pydantic models representing:

- Item addresses (central unit + number)
- LOG events and RESPONSE payloads
- Decoded relay, dimmer, motor and sensor states
"""

from teletask.models.states import (
    DimmerState,
    FanSpeed,
    GenericSensorState,
    HumiditySensorState,
    ItemAddress,
    LightSensorState,
    MotorCalibration,
    MotorDirection,
    MotorProtection,
    MotorState,
    OperationMode,
    PresetMode,
    PulseCounterState,
    RelayState,
    ResponsePayload,
    SensorState,
    SensorType,
    StateChange,
    TemperatureControlState,
    TemperatureSensorState,
)

__all__ = [
    # Addresses and frames
    "ItemAddress",
    "StateChange",
    "ResponsePayload",
    # Relay / Dimmer
    "RelayState",
    "DimmerState",
    # Motor
    "MotorState",
    "MotorDirection",
    "MotorProtection",
    "MotorCalibration",
    # Sensors
    "SensorType",
    "SensorState",
    "TemperatureSensorState",
    "HumiditySensorState",
    "LightSensorState",
    "TemperatureControlState",
    "PulseCounterState",
    "GenericSensorState",
    "PresetMode",
    "OperationMode",
    "FanSpeed",
]
