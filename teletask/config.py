"""
Connection configuration.

ConnectionOptions groups the timing and recovery settings shared by the
client and the TCP transport. All durations are in seconds.

Example:
    >>> options = ConnectionOptions(response_timeout=2.0, auto_reconnect=False)
    >>> options.keep_alive_interval
    240.0
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from teletask.protocol.constants import ProtocolConstants


class ConnectionOptions(BaseModel):
    """
    Options for a central unit connection.

    Attributes:
        auto_reconnect: Reconnect after the connection drops unexpectedly.
        reconnect_delay: Fixed delay before each reconnect attempt.
        keep_alive_interval: Interval between KEEP_ALIVE frames.
        response_timeout: Time a query waits for its RESPONSE.
        max_reconnect_attempts: Attempts before giving up (error event).
        connect_timeout: Time allowed for a single TCP connect.
        validate_checksums: Verify the checksum of received frames.
    """

    model_config = ConfigDict(frozen=True)

    auto_reconnect: bool = True
    reconnect_delay: float = Field(
        default=ProtocolConstants.DEFAULT_RECONNECT_DELAY,
        ge=0,
    )
    keep_alive_interval: float = Field(
        default=ProtocolConstants.DEFAULT_KEEP_ALIVE_INTERVAL,
        gt=0,
    )
    response_timeout: float = Field(
        default=ProtocolConstants.DEFAULT_RESPONSE_TIMEOUT,
        gt=0,
    )
    max_reconnect_attempts: int = Field(
        default=ProtocolConstants.DEFAULT_MAX_RECONNECT_ATTEMPTS,
        ge=0,
    )
    connect_timeout: float = Field(
        default=ProtocolConstants.DEFAULT_CONNECT_TIMEOUT,
        gt=0,
    )
    validate_checksums: bool = False


DEFAULT_OPTIONS = ConnectionOptions()
