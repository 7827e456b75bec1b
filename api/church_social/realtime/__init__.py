"""Real-time delivery over Socket.IO."""

from church_social.realtime.gateway import ConnectionState, Gateway
from church_social.realtime.handlers import (
    SocketHandlers,
    create_socket_server,
    register_socket_handlers,
)

__all__ = [
    "Gateway",
    "ConnectionState",
    "SocketHandlers",
    "create_socket_server",
    "register_socket_handlers",
]
