"""
Transport layer for DoIP communication.

Available transports:
- AsyncTcpTransport: Persistent TCP connection with keep-alive and reconnection
- MockTransport: Mock transport for testing without a central unit

Example:
    >>> from teletask.transport import AsyncTcpTransport
    >>> transport = AsyncTcpTransport("192.168.1.10", 55957)
    >>> transport.on_data(handle_bytes)
    >>> await transport.open()

Testing Example:
    >>> from teletask.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.inject(bytes([0x0A]))
"""

from teletask.transport.abc import AbstractTransport
from teletask.transport.mock import MockTransport
from teletask.transport.tcp import AsyncTcpTransport

__all__ = [
    "AbstractTransport",
    "AsyncTcpTransport",
    "MockTransport",
]
