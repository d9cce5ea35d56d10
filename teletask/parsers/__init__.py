"""
Decoders for DoIP RESPONSE payloads.

Each supported function type has a pure decoder that turns the bytes
following the response header into an immutable state model:

1. **PayloadReader**: Bounds-checked big-endian reader
2. **Decoder Registry**: Strategy pattern for function-type dispatch
3. **Relay / Dimmer / Motor**: Fixed-layout decoders
4. **Sensor**: Family dispatch on a discriminator byte

Example:
    >>> from teletask.parsers import create_default_registry
    >>> from teletask.protocol import FunctionType
    >>>
    >>> registry = create_default_registry()
    >>> registry.get(FunctionType.RELAY).decode(b"\\xff").on
    True
"""

from teletask.parsers.dimmer import DimmerDecoder, decode_dimmer
from teletask.parsers.motor import MotorDecoder, decode_motor
from teletask.parsers.payload_reader import PayloadReader
from teletask.parsers.registry import DecoderRegistry, ResponseDecoder, create_default_registry
from teletask.parsers.relay import RelayDecoder, decode_relay
from teletask.parsers.sensor import (
    SensorDecoder,
    decode_generic_sensor,
    decode_humidity_sensor,
    decode_light_sensor,
    decode_pulse_counter,
    decode_sensor,
    decode_temperature_control,
    decode_temperature_sensor,
    determine_sensor_type,
)

__all__ = [
    # Reader
    "PayloadReader",
    # Registry
    "DecoderRegistry",
    "ResponseDecoder",
    "create_default_registry",
    # Decoders
    "RelayDecoder",
    "DimmerDecoder",
    "MotorDecoder",
    "SensorDecoder",
    "decode_relay",
    "decode_dimmer",
    "decode_motor",
    "decode_sensor",
    "determine_sensor_type",
    "decode_temperature_sensor",
    "decode_humidity_sensor",
    "decode_light_sensor",
    "decode_temperature_control",
    "decode_pulse_counter",
    "decode_generic_sensor",
]
