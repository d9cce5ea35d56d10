"""
Teletask DoIP client.

This module provides the main client interface for controlling a Teletask
central unit over a persistent TCP connection.

Two kinds of traffic share the connection:
- Commands (SET) are fire-and-forget; queries (GET) wait for a RESPONSE
  matched on (function type, central unit, number)
- LOG frames are pushed by the central unit for every function type whose
  events were enabled, and fanned out to subscribers

The client state machine:
    DISCONNECTED -> connect() -> CONNECTING -> CONNECTED
    CONNECTED -> connection lost -> DISCONNECTED -> (transport ready) -> CONNECTED
    CONNECTED -> disconnect() -> DISCONNECTING -> DISCONNECTED

Example:
    >>> from teletask import TeletaskClient
    >>> from teletask.protocol import FunctionType
    >>>
    >>> async def main():
    ...     async with TeletaskClient.create("192.168.1.10") as client:
    ...         await client.subscribe(FunctionType.RELAY, print)
    ...         await client.set_relay(1, 5, True)
    ...         state = await client.query_dimmer(1, 3)
    ...         print(state.level)
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Coroutine

from teletask.config import ConnectionOptions
from teletask.correlator import ResponseCorrelator
from teletask.exceptions import (
    ChecksumError,
    ConnectionError,
    DecodeError,
    FrameError,
    TeletaskError,
)
from teletask.models.states import (
    ITEM_NUMBER_ADAPTER,
    PERCENTAGE_ADAPTER,
    DimmerState,
    ItemAddress,
    MotorState,
    RelayState,
    ResponsePayload,
    SensorState,
    SensorType,
    StateChange,
)
from teletask.parsers.registry import DecoderRegistry, ResponseDecoder, create_default_registry
from teletask.parsers.sensor import SensorDecoder
from teletask.protocol.checksums import calculate_checksum
from teletask.protocol.constants import (
    AudioAction,
    Command,
    FunctionState,
    FunctionType,
    MotorAction,
    ProtocolConstants,
    RegimeAction,
    SensorAction,
)
from teletask.protocol.encoding import (
    build_get_frame,
    build_keep_alive_frame,
    build_log_frame,
    build_set_frame,
    bytes_to_hex,
    decode_item_number,
    encode_uint16,
)
from teletask.protocol.frame_reader import (
    FrameParseError,
    FrameParseResult,
    FrameReader,
    ParsedFrame,
)
from teletask.subscriptions import StateChangeCallback, SubscriptionManager

if TYPE_CHECKING:
    from teletask.transport.abc import AbstractTransport

# Module logger
logger = logging.getLogger(__name__)

ErrorHandler = Callable[[TeletaskError], None]

LOG_PAYLOAD_SIZE = ProtocolConstants.PAYLOAD_HEADER_SIZE + 1

# Moods and regimes are addressed on the whole installation, not a unit
INSTALLATION_CENTRAL_UNIT = 0x00


class ClientState(Enum):
    """Client connection states."""

    DISCONNECTED = auto()
    """Not connected to a central unit."""

    CONNECTING = auto()
    """Opening the transport."""

    CONNECTED = auto()
    """Connected and ready for commands and queries."""

    DISCONNECTING = auto()
    """Closing the transport."""


def _state_byte(state: bool | int) -> int:
    """Map a bool to ON/OFF, or validate a FunctionState value."""
    if isinstance(state, bool):
        return FunctionState.ON if state else FunctionState.OFF
    return FunctionState(state)


def _mood_byte(state: bool | int) -> int:
    if isinstance(state, bool):
        return FunctionState.ON if state else FunctionState.OFF
    return min(ProtocolConstants.MAX_PERCENTAGE, max(0, int(state)))


class TeletaskClient:
    """
    Client for a Teletask central unit.

    The client owns the stream demultiplexer, the pending query table and
    the subscriber table of one connection. Received data is processed
    synchronously in arrival order; queries suspend without blocking it.

    Attributes:
        state: Current connection state.
        options: Connection options in effect.
        transport: The underlying transport layer.

    Example:
        >>> transport = AsyncTcpTransport("192.168.1.10")
        >>> client = TeletaskClient(transport)
        >>> await client.connect()
        >>> relay = await client.query_relay(1, 5)
        >>> await client.set_relay(1, 5, not relay.on)
        >>> await client.disconnect()
    """

    def __init__(
        self,
        transport: AbstractTransport,
        options: ConnectionOptions | None = None,
        registry: DecoderRegistry | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            transport: Transport layer for communication.
            options: Connection options; defaults are used when omitted.
            registry: Response decoders; the built-in set when omitted.
        """
        self._transport = transport
        self._options = options or ConnectionOptions()
        self._registry = registry or create_default_registry()
        self._state = ClientState.DISCONNECTED
        self._session_requested = False
        self._frame_reader = FrameReader(validate_checksums=self._options.validate_checksums)
        self._correlator = ResponseCorrelator(timeout=self._options.response_timeout)
        self._subscriptions = SubscriptionManager(on_error=self._report_error)
        self._background_tasks: set[asyncio.Task[None]] = set()

        self._error_handlers: list[ErrorHandler] = []
        self._connected_handlers: list[Callable[[], None]] = []
        self._disconnected_handlers: list[Callable[[], None]] = []
        self._reconnecting_handlers: list[Callable[[int], None]] = []
        self._connection_error_handlers: list[Callable[[Exception], None]] = []

        transport.on_data(self._handle_data)
        transport.on_ready(self._handle_ready)
        transport.on_keep_alive(self._handle_keep_alive)
        transport.on_disconnected(self._handle_disconnected)
        transport.on_reconnecting(self._handle_reconnecting)
        transport.on_error(self._handle_transport_error)

    @classmethod
    def create(
        cls,
        host: str,
        port: int = ProtocolConstants.DEFAULT_PORT,
        options: ConnectionOptions | None = None,
    ) -> TeletaskClient:
        """
        Create a client with a TCP transport.

        Args:
            host: Central unit host name or IP address.
            port: TCP port (default: 55957).
            options: Connection options shared by client and transport.
        """
        from teletask.transport.tcp import AsyncTcpTransport

        options = options or ConnectionOptions()
        return cls(AsyncTcpTransport(host, port, options), options)

    @property
    def state(self) -> ClientState:
        """Get the current connection state."""
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the client can send commands."""
        return self._state == ClientState.CONNECTED and self._transport.is_open

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    @property
    def options(self) -> ConnectionOptions:
        return self._options

    @property
    def pending_queries(self) -> int:
        """Number of queries waiting for a RESPONSE."""
        return self._correlator.pending_count

    # ===== Connection Lifecycle =====

    async def connect(self) -> None:
        """
        Open the connection to the central unit.

        Sends a keep-alive and re-enables LOG events for every function
        type that already has subscribers.

        Raises:
            ConnectionError: If the client is not disconnected.
            TransportError: If the transport cannot be opened.
        """
        if self._state != ClientState.DISCONNECTED:
            raise ConnectionError(f"Cannot connect: client is in {self._state.name} state")

        self._state = ClientState.CONNECTING
        self._session_requested = True
        self._frame_reader.reset()
        logger.info("Connecting to %s", self._transport.address)

        try:
            await self._transport.open()
        except Exception:
            self._state = ClientState.DISCONNECTED
            self._session_requested = False
            raise

        self._state = ClientState.CONNECTED
        logger.info("Connected to %s", self._transport.address)
        await self._restore_session()
        self._notify(self._connected_handlers)

    async def disconnect(self) -> None:
        """
        Close the connection.

        Pending queries fail with ConnectionError. Safe to call even if not
        connected.
        """
        if self._state == ClientState.DISCONNECTING:
            return
        if self._state == ClientState.DISCONNECTED and not self._session_requested:
            return

        logger.info("Disconnecting from %s", self._transport.address)
        self._state = ClientState.DISCONNECTING
        self._session_requested = False

        failed = self._correlator.fail_all(ConnectionError("Connection closed while waiting for response"))
        if failed:
            logger.debug("Failed %d pending queries on disconnect", failed)

        try:
            await self._transport.close()
        finally:
            for task in list(self._background_tasks):
                task.cancel()
            self._frame_reader.reset()
            self._state = ClientState.DISCONNECTED
            logger.debug("Disconnected")

    async def send_keep_alive(self) -> None:
        """
        Send a KEEP_ALIVE frame.

        Raises:
            ConnectionError: If not connected.
        """
        await self._send(build_keep_alive_frame())

    # ===== Event Hooks =====

    def on_connected(self, handler: Callable[[], None]) -> None:
        """Register a handler called after every (re)connection."""
        self._connected_handlers.append(handler)

    def on_disconnected(self, handler: Callable[[], None]) -> None:
        self._disconnected_handlers.append(handler)

    def on_reconnecting(self, handler: Callable[[int], None]) -> None:
        """Register a handler receiving the reconnect attempt number."""
        self._reconnecting_handlers.append(handler)

    def on_connection_error(self, handler: Callable[[Exception], None]) -> None:
        self._connection_error_handlers.append(handler)

    def on_error(self, handler: ErrorHandler) -> None:
        """
        Register a handler for errors that cannot be raised to a caller.

        Receives framing errors, LOG decode errors and subscriber failures.
        """
        self._error_handlers.append(handler)

    # ===== Subscriptions =====

    async def subscribe(self, function_type: FunctionType | int, callback: StateChangeCallback) -> None:
        """
        Subscribe to LOG events of a function type.

        The first subscriber of a type enables LOG events on the central
        unit. While disconnected the subscription is only registered and is
        enabled when the connection becomes ready.

        Args:
            function_type: Function type to receive events for.
            callback: Called with a StateChange for every event.
        """
        function_type = FunctionType(function_type)
        if self._subscriptions.add(function_type, callback):
            logger.debug("Enabling LOG events for %s", function_type.name)
            if self.is_connected:
                await self._send(build_log_frame(function_type, True))

    async def unsubscribe(self, function_type: FunctionType | int, callback: StateChangeCallback) -> None:
        """
        Remove a LOG event subscription.

        Removing the last subscriber of a type disables its LOG events.
        """
        function_type = FunctionType(function_type)
        if self._subscriptions.remove(function_type, callback):
            logger.debug("Disabling LOG events for %s", function_type.name)
            if self.is_connected:
                await self._send(build_log_frame(function_type, False))

    # ===== Queries =====

    async def query(
        self,
        function_type: FunctionType | int,
        central_unit: int,
        number: int,
        timeout: float | None = None,
    ) -> Any:
        """
        Query the state of an item with the registered decoder.

        Args:
            function_type: Function type of the item.
            central_unit: Central unit number (1-10).
            number: Item number (0-65535).
            timeout: Override of the response timeout in seconds.

        Returns:
            The decoded state.

        Raises:
            ValueError: If the address is invalid or no decoder is
                registered for the function type.
            ConnectionError: If not connected.
            QueryInFlightError: If the same item is already being queried.
            TimeoutError: If no RESPONSE arrives in time.
            DecodeError: If the RESPONSE cannot be decoded.
        """
        decoder = self._registry.get(function_type)
        if decoder is None:
            raise ValueError(f"No decoder registered for function type 0x{int(function_type):02X}")
        return await self._query(function_type, central_unit, number, decoder, timeout)

    async def query_relay(self, central_unit: int, relay: int) -> RelayState:
        return await self.query(FunctionType.RELAY, central_unit, relay)

    async def query_dimmer(self, central_unit: int, dimmer: int) -> DimmerState:
        return await self.query(FunctionType.DIMMER, central_unit, dimmer)

    async def query_motor(self, central_unit: int, motor: int) -> MotorState:
        return await self.query(FunctionType.MOTOR, central_unit, motor)

    async def query_sensor(
        self,
        central_unit: int,
        sensor: int,
        sensor_type: SensorType | str | None = None,
    ) -> SensorState:
        """
        Query a sensor.

        Args:
            central_unit: Central unit number (1-10).
            sensor: Sensor number.
            sensor_type: Sensor family. Pass it whenever it is known.
                Without it the family is guessed from data byte 1 of the
                response, which for temperature, light and generic sensors
                is also the low byte of the reading, so those readings are
                misclassified unless that byte happens to match.
        """
        if sensor_type is None:
            return await self.query(FunctionType.SENSOR, central_unit, sensor)
        decoder = SensorDecoder(SensorType(sensor_type))
        return await self._query(FunctionType.SENSOR, central_unit, sensor, decoder)

    async def _query(
        self,
        function_type: int,
        central_unit: int,
        number: int,
        decoder: ResponseDecoder,
        timeout: float | None = None,
    ) -> Any:
        address = ItemAddress(central_unit=central_unit, number=number)
        self._ensure_connected()

        key = (int(function_type), address.central_unit, address.number)
        frame = build_get_frame(address.central_unit, function_type, address.number)
        return await self._correlator.query(key, decoder, lambda: self._send(frame), timeout)

    # ===== Commands =====

    async def set_relay(self, central_unit: int, relay: int, state: bool | FunctionState) -> None:
        """
        Switch a relay.

        Args:
            state: True/False, or a FunctionState (ON, OFF, TOGGLE).
        """
        await self._set(FunctionType.RELAY, central_unit, relay, [_state_byte(state)])

    async def set_dimmer(self, central_unit: int, dimmer: int, level: int) -> None:
        """
        Set a dimmer level.

        Raises:
            ValueError: If level is not in range 0-100.
        """
        level = PERCENTAGE_ADAPTER.validate_python(level)
        await self._set(FunctionType.DIMMER, central_unit, dimmer, [level])

    async def set_motor(self, central_unit: int, motor: int, action: MotorAction | int) -> None:
        """
        Control a motor.

        Args:
            action: A MotorAction, or a plain int position (0-100) to move to.

        Raises:
            ValueError: If the position is out of range.
        """
        if isinstance(action, MotorAction):
            parameters = [action]
        else:
            position = PERCENTAGE_ADAPTER.validate_python(action)
            parameters = [MotorAction.GO_TO_POSITION, position]
        await self._set(FunctionType.MOTOR, central_unit, motor, parameters)

    async def set_motor_position(self, central_unit: int, motor: int, position: int) -> None:
        await self.set_motor(central_unit, motor, int(position))

    async def set_motor_sun_protection(self, central_unit: int, motor: int, enabled: bool) -> None:
        """Enable sun protection, or stop the motor when disabling it."""
        action = MotorAction.SUN_PROTECTION if enabled else MotorAction.STOP
        await self.set_motor(central_unit, motor, action)

    async def set_audio(self, central_unit: int, zone: int, action: AudioAction) -> None:
        await self._set(FunctionType.AUDIO, central_unit, zone, [AudioAction(action)])

    async def set_sensor(
        self,
        central_unit: int,
        sensor: int,
        action: SensorAction,
        value: int | None = None,
    ) -> None:
        """
        Send an action to a sensor or temperature controller.

        Args:
            action: Sensor action.
            value: Optional 16-bit argument (e.g. a setpoint), sent big-endian.
        """
        parameters = bytes([SensorAction(action)])
        if value is not None:
            parameters += encode_uint16(value)
        await self._set(FunctionType.SENSOR, central_unit, sensor, parameters)

    async def set_local_mood(self, mood: int, state: bool | int) -> None:
        await self._set_mood(FunctionType.LOCAL_MOOD, mood, state)

    async def set_timed_mood(self, mood: int, state: bool | int) -> None:
        await self._set_mood(FunctionType.TIMED_MOOD, mood, state)

    async def set_general_mood(self, mood: int, state: bool | int) -> None:
        await self._set_mood(FunctionType.GENERAL_MOOD, mood, state)

    async def set_flag(self, central_unit: int, flag: int, state: bool | FunctionState) -> None:
        await self._set(FunctionType.FLAG, central_unit, flag, [_state_byte(state)])

    async def set_regime(self, regime: RegimeAction, state: bool = True) -> None:
        """
        Activate (or deactivate) an installation regime.

        Frame parameters: [0, REGIME, 0x00, regime, 0xFF/0x00].
        """
        regime = RegimeAction(regime)
        value = FunctionState.ON if state else FunctionState.OFF
        await self._send(
            build_set_frame(INSTALLATION_CENTRAL_UNIT, FunctionType.REGIME, regime, [value])
        )

    async def _set_mood(self, function_type: FunctionType, mood: int, state: bool | int) -> None:
        mood = ITEM_NUMBER_ADAPTER.validate_python(mood)
        frame = build_set_frame(INSTALLATION_CENTRAL_UNIT, function_type, mood, [_mood_byte(state)])
        await self._send(frame)

    async def _set(
        self,
        function_type: FunctionType,
        central_unit: int,
        number: int,
        parameters: bytes | list[int],
    ) -> None:
        address = ItemAddress(central_unit=central_unit, number=number)
        frame = build_set_frame(address.central_unit, function_type, address.number, parameters)
        await self._send(frame)

    # ===== Sending =====

    async def _send(self, frame: bytes) -> None:
        """
        Write a frame to the transport.

        Raises:
            ConnectionError: If not connected (nothing is written).
        """
        self._ensure_connected()
        logger.debug("Sending %s", bytes_to_hex(frame))
        await self._transport.write(frame)

    def _ensure_connected(self) -> None:
        """Verify client is in connected state."""
        if not self.is_connected:
            raise ConnectionError(f"Not connected (state: {self._state.name})")

    async def _restore_session(self) -> None:
        """Send a keep-alive and re-enable LOG events after (re)connecting."""
        await self.send_keep_alive()
        for function_type in sorted(self._subscriptions.active_types):
            logger.debug("Re-enabling LOG events for %s", FunctionType(function_type).name)
            await self._send(build_log_frame(function_type, True))

    def _spawn(self, coro: Coroutine[Any, Any, None], name: str) -> None:
        task = asyncio.get_running_loop().create_task(self._guarded(coro, name))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _guarded(self, coro: Coroutine[Any, Any, None], name: str) -> None:
        try:
            await coro
        except TeletaskError as e:
            logger.warning("%s failed: %s", name, e)
            self._report_error(e)

    # ===== Transport Events =====

    def _handle_ready(self) -> None:
        if self._state == ClientState.CONNECTING:
            # connect() finishes the session setup itself
            return
        if not self._session_requested:
            logger.debug("Ignoring ready event without an active session")
            return

        self._frame_reader.reset()
        self._state = ClientState.CONNECTED
        logger.info("Reconnected to %s", self._transport.address)
        self._spawn(self._restore_session(), "Session restore")
        self._notify(self._connected_handlers)

    def _handle_keep_alive(self) -> None:
        if self.is_connected:
            self._spawn(self.send_keep_alive(), "Keep-alive")

    def _handle_disconnected(self) -> None:
        if self._state == ClientState.CONNECTED:
            logger.warning("Connection to %s lost", self._transport.address)
            self._state = ClientState.DISCONNECTED
            self._frame_reader.reset()
        self._notify(self._disconnected_handlers)

    def _handle_reconnecting(self, attempt: int) -> None:
        self._notify(self._reconnecting_handlers, attempt)

    def _handle_transport_error(self, error: Exception) -> None:
        logger.error("Transport error on %s: %s", self._transport.address, error)
        self._notify(self._connection_error_handlers, error)

    def _notify(self, handlers: list, *args: object) -> None:
        for handler in list(handlers):
            try:
                handler(*args)
            except Exception:
                logger.exception("Event handler %r failed", handler)

    # ===== Inbound Frames =====

    def _handle_data(self, data: bytes) -> None:
        logger.debug("Received %s", bytes_to_hex(data))
        for result, item in self._frame_reader.feed(data):
            if result is FrameParseResult.SUCCESS:
                try:
                    self._dispatch_frame(item)
                except Exception as e:
                    logger.exception("Failed to handle %r", item)
                    self._report_error(e)
            else:
                self._handle_bad_frame(result, item)

    def _handle_bad_frame(self, result: FrameParseResult, error: FrameParseError) -> None:
        logger.error("Dropping frame: %s", error.message)
        if result is FrameParseResult.INVALID_CHECKSUM:
            raw = error.partial_data
            self._report_error(ChecksumError(
                error.message,
                expected=calculate_checksum(raw[:-1]),
                received=raw[-1],
                raw_frame=raw,
            ))
        else:
            self._report_error(FrameError(error.message, raw_frame=error.partial_data))

    def _dispatch_frame(self, frame: ParsedFrame) -> None:
        if frame.command_byte == Command.LOG:
            self._handle_log(frame)
        elif frame.command_byte == Command.RESPONSE:
            self._handle_response(frame)
        else:
            logger.debug("Ignoring %r", frame)

    def _handle_log(self, frame: ParsedFrame) -> None:
        payload = frame.payload
        if len(payload) < LOG_PAYLOAD_SIZE:
            error = DecodeError(
                f"Invalid LOG payload: need {LOG_PAYLOAD_SIZE} bytes, have {len(payload)}",
                raw_data=payload,
            )
            logger.error("Dropping LOG event: %s", error)
            self._report_error(error)
            return

        function_type: FunctionType | int
        try:
            function_type = FunctionType(payload[1])
        except ValueError:
            function_type = payload[1]

        event = StateChange(
            central_unit=payload[0],
            function_type=function_type,
            number=decode_item_number(payload[2], payload[3]),
            value=payload[5],
        )
        logger.debug("LOG event %r", event)
        self._subscriptions.dispatch(event)

    def _handle_response(self, frame: ParsedFrame) -> None:
        payload = frame.payload
        header_size = ProtocolConstants.PAYLOAD_HEADER_SIZE
        if len(payload) < header_size:
            error = DecodeError(
                f"Invalid RESPONSE payload: need {header_size} bytes, have {len(payload)}",
                raw_data=payload,
            )
            logger.error("Dropping RESPONSE: %s", error)
            self._report_error(error)
            return

        response = ResponsePayload(
            central_unit=payload[0],
            function_type=payload[1],
            number=decode_item_number(payload[2], payload[3]),
            error=payload[4],
            data=payload[header_size:],
        )
        if not self._correlator.resolve(response):
            logger.warning(
                "Unexpected response for function type 0x%02X, central unit %d, number %d",
                response.function_type,
                response.central_unit,
                response.number,
            )

    def _report_error(self, error: Exception) -> None:
        for handler in list(self._error_handlers):
            try:
                handler(error)
            except Exception:
                logger.exception("Error handler %r failed", handler)

    async def __aenter__(self) -> TeletaskClient:
        """Async context manager entry - connects."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - disconnects."""
        await self.disconnect()

    def __repr__(self) -> str:
        return f"TeletaskClient({self._transport.address!r}, state={self._state.name})"
