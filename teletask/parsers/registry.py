"""
Response decoder registry and strategy interface.

This module implements the Strategy pattern for function-type-specific
decoding of RESPONSE payloads. Each function type (relay, dimmer, motor,
sensor) has a decoder registered with the DecoderRegistry.

Architecture:
    DecoderRegistry
        └── ResponseDecoder (interface)
            ├── RelayDecoder
            ├── DimmerDecoder
            ├── MotorDecoder
            └── SensorDecoder
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from teletask.protocol.constants import FunctionType


class ResponseDecoder(ABC):
    """
    Abstract base class for RESPONSE payload decoders.

    Decoders receive the type-specific bytes that follow the 5-byte
    response header and return an immutable state model. They are pure:
    no I/O and no shared state.
    """

    @property
    @abstractmethod
    def function_type(self) -> FunctionType:
        """The function type this decoder handles."""
        ...

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """
        Decode a type-specific payload.

        Args:
            data: Bytes following the response header.

        Returns:
            Function-type-specific state model.

        Raises:
            DecodeError: If the payload is too short or holds invalid values.
        """
        ...


class DecoderRegistry:
    """
    Registry for function-type-specific decoders.

    If no decoder is registered for a function type, get() returns None
    and the caller decides how to handle the raw payload.

    Example:
        >>> registry = DecoderRegistry()
        >>> registry.register(RelayDecoder())
        >>> decoder = registry.get(FunctionType.RELAY)
        >>> if decoder:
        ...     state = decoder.decode(b"\\xff")
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._decoders: dict[int, ResponseDecoder] = {}

    def register(self, decoder: ResponseDecoder) -> None:
        """
        Register a decoder.

        Note:
            Replaces any existing decoder for the same function type.
        """
        self._decoders[decoder.function_type] = decoder

    def get(self, function_type: int) -> ResponseDecoder | None:
        """
        Get the decoder for a function type.

        Returns:
            Decoder if registered, None otherwise.
        """
        return self._decoders.get(function_type)

    def has(self, function_type: int) -> bool:
        """Check if a decoder is registered."""
        return function_type in self._decoders

    @property
    def registered_types(self) -> frozenset[int]:
        """Get all function types with a registered decoder."""
        return frozenset(self._decoders.keys())

    def unregister(self, function_type: int) -> bool:
        """
        Remove a decoder registration.

        Returns:
            True if a decoder was removed, False if none was registered.
        """
        if function_type in self._decoders:
            del self._decoders[function_type]
            return True
        return False

    def clear(self) -> None:
        """Remove all registered decoders."""
        self._decoders.clear()

    def __repr__(self) -> str:
        return f"DecoderRegistry(decoders={len(self._decoders)})"


def create_default_registry() -> DecoderRegistry:
    """
    Create a new registry with all built-in decoders registered.

    Registers decoders for relay, dimmer, motor and sensor responses.
    """
    from teletask.parsers.dimmer import DimmerDecoder
    from teletask.parsers.motor import MotorDecoder
    from teletask.parsers.relay import RelayDecoder
    from teletask.parsers.sensor import SensorDecoder

    registry = DecoderRegistry()
    registry.register(RelayDecoder())
    registry.register(DimmerDecoder())
    registry.register(MotorDecoder())
    registry.register(SensorDecoder())
    return registry
