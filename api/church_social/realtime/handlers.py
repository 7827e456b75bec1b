"""Socket.IO event handlers bound to the gateway."""

import logging
from typing import Any

import socketio

from church_social.realtime import events
from church_social.realtime.gateway import Gateway

logger = logging.getLogger(__name__)


def _require(data: Any, *keys: str) -> dict[str, Any] | None:
    if not isinstance(data, dict) or any(data.get(k) is None for k in keys):
        return None
    return data


class SocketHandlers:
    """Translate client socket events into gateway operations."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        self.gateway.connect(sid)
        logger.debug("Socket connected: %s", sid)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        logger.debug("Socket disconnected: %s", sid)
        await self.gateway.unregister(sid)

    async def on_user_online(self, sid: str, user_id: Any) -> None:
        if not user_id:
            logger.info("Ignoring %s without user id from %s", events.USER_ONLINE, sid)
            return
        await self.gateway.register(str(user_id), sid)

    async def on_join_conversation(self, sid: str, conversation_id: Any) -> None:
        if conversation_id:
            self.gateway.join_group(sid, str(conversation_id))

    async def on_leave_conversation(self, sid: str, conversation_id: Any) -> None:
        if conversation_id:
            self.gateway.leave_group(sid, str(conversation_id))

    async def on_typing_start(self, sid: str, data: Any) -> None:
        data = _require(data, "conversationId", "userId")
        if data is None:
            logger.info("Malformed %s from %s", events.TYPING_START, sid)
            return
        await self.gateway.emit_to_group(
            data["conversationId"],
            events.USER_TYPING,
            {"userId": data["userId"], "userName": data.get("userName")},
            skip_sid=sid,
        )

    async def on_typing_stop(self, sid: str, data: Any) -> None:
        data = _require(data, "conversationId", "userId")
        if data is None:
            logger.info("Malformed %s from %s", events.TYPING_STOP, sid)
            return
        await self.gateway.emit_to_group(
            data["conversationId"],
            events.USER_STOP_TYPING,
            {"userId": data["userId"]},
            skip_sid=sid,
        )

    async def on_message_read(self, sid: str, data: Any) -> None:
        data = _require(data, "conversationId", "messageId", "userId")
        if data is None:
            logger.info("Malformed %s from %s", events.MESSAGE_READ, sid)
            return
        await self.gateway.emit_to_group(
            data["conversationId"],
            events.MESSAGE_READ_RECEIPT,
            {"messageId": data["messageId"], "userId": data["userId"]},
            skip_sid=sid,
        )

    async def on_send_notification(self, sid: str, data: Any) -> None:
        # Client-to-client relay; nothing is persisted
        data = _require(data, "recipientId", "notification")
        if data is None:
            logger.info("Malformed %s from %s", events.SEND_NOTIFICATION, sid)
            return
        await self.gateway.emit_to_user(
            data["recipientId"], events.NEW_NOTIFICATION, data["notification"]
        )

    def bindings(self) -> dict[str, Any]:
        """Map socket event names to handler coroutines."""
        return {
            "connect": self.on_connect,
            "disconnect": self.on_disconnect,
            events.USER_ONLINE: self.on_user_online,
            events.JOIN_CONVERSATION: self.on_join_conversation,
            events.LEAVE_CONVERSATION: self.on_leave_conversation,
            events.TYPING_START: self.on_typing_start,
            events.TYPING_STOP: self.on_typing_stop,
            events.MESSAGE_READ: self.on_message_read,
            events.SEND_NOTIFICATION: self.on_send_notification,
        }


def register_socket_handlers(server: socketio.AsyncServer, gateway: Gateway) -> SocketHandlers:
    """Attach the gateway's handlers to a Socket.IO server."""
    handlers = SocketHandlers(gateway)
    for event, handler in handlers.bindings().items():
        server.on(event, handler)
    return handlers


def create_socket_server(cors_origins: list[str]) -> socketio.AsyncServer:
    """Build the ASGI Socket.IO server shared by the whole process."""
    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_origins,
        logger=False,
        engineio_logger=False,
    )
