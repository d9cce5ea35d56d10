"""
teletask - Async Python client for Teletask central units (DoIP protocol).

This library controls relays, dimmers, motors, moods, regimes, flags,
audio zones and sensors over a persistent TCP connection, answers state
queries, and delivers the state changes the central unit pushes.

Example:
    >>> from teletask import TeletaskClient
    >>> from teletask.protocol import FunctionType
    >>>
    >>> async def main():
    ...     async with TeletaskClient.create("192.168.1.10") as client:
    ...         await client.subscribe(FunctionType.DIMMER, print)
    ...         await client.set_dimmer(1, 3, 75)
    ...         motor = await client.query_motor(1, 2)
    ...         print(motor.position)
"""

from teletask.client import ClientState, TeletaskClient
from teletask.config import ConnectionOptions
from teletask.exceptions import (
    ChecksumError,
    ConnectionError,
    DecodeError,
    FrameError,
    ProtocolError,
    QueryInFlightError,
    TeletaskError,
    TimeoutError,
    TransportError,
)
from teletask.models.states import (
    DimmerState,
    ItemAddress,
    MotorState,
    RelayState,
    SensorState,
    SensorType,
    StateChange,
)
from teletask.protocol.constants import (
    AudioAction,
    FunctionState,
    FunctionType,
    MotorAction,
    RegimeAction,
    SensorAction,
)
from teletask.transport import AbstractTransport, AsyncTcpTransport, MockTransport

__version__ = "0.1.0"
__all__ = [
    # Client
    "TeletaskClient",
    "ClientState",
    "ConnectionOptions",
    # Models
    "ItemAddress",
    "StateChange",
    "RelayState",
    "DimmerState",
    "MotorState",
    "SensorState",
    "SensorType",
    # Catalogs
    "FunctionType",
    "FunctionState",
    "MotorAction",
    "AudioAction",
    "SensorAction",
    "RegimeAction",
    # Exceptions
    "TeletaskError",
    "ProtocolError",
    "FrameError",
    "ChecksumError",
    "QueryInFlightError",
    "DecodeError",
    "TimeoutError",
    "ConnectionError",
    "TransportError",
    # Transport
    "AbstractTransport",
    "AsyncTcpTransport",
    "MockTransport",
    # Version
    "__version__",
]
