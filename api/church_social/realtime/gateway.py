"""
Real-time gateway.

Owns the in-memory connection registry (user -> live socket id) and the
ad-hoc delivery groups used for conversation rooms, and routes events to a
single user, a group, or every connected socket.

Delivery is best effort: events for users without a live connection are
dropped, transport errors are logged and never raised to the caller. The
durable record of anything important is the Notification row written by the
fan-out service, not the live event.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol
from uuid import UUID

from church_social.realtime import events

logger = logging.getLogger(__name__)


class EventServer(Protocol):
    """The subset of ``socketio.AsyncServer`` the gateway relies on."""

    async def emit(self, event: str, data: Any = None, to: str | None = None, **kwargs: Any) -> None: ...


class ConnectionState(str, enum.Enum):
    """Lifecycle of a single transport connection."""

    ANONYMOUS = "anonymous"
    REGISTERED = "registered"
    DISCONNECTED = "disconnected"


@dataclass
class Connection:
    sid: str
    state: ConnectionState = ConnectionState.ANONYMOUS
    user_id: str | None = None
    groups: set[str] = field(default_factory=set)


def _key(value: str | UUID) -> str:
    return str(value)


class Gateway:
    """Connection registry and event router for one server process."""

    def __init__(self, server: EventServer):
        self._server = server
        self._connections: dict[str, Connection] = {}
        self._users: dict[str, str] = {}
        self._groups: dict[str, set[str]] = {}

    # --- Connection lifecycle ---

    def connect(self, sid: str) -> Connection:
        """Track a freshly connected, not yet identified socket."""
        connection = Connection(sid=sid)
        self._connections[sid] = connection
        return connection

    async def register(self, user_id: str | UUID, sid: str) -> None:
        """
        Bind a user to a live socket and announce them as online.

        Last connect wins: a second socket for the same user replaces the
        registry entry. The earlier socket stays open but no longer receives
        user-targeted events.
        """
        user_key = _key(user_id)
        connection = self._connections.get(sid) or self.connect(sid)

        previous = self._users.get(user_key)
        if previous and previous != sid:
            logger.debug("User %s moved from connection %s to %s", user_key, previous, sid)

        connection.user_id = user_key
        connection.state = ConnectionState.REGISTERED
        self._users[user_key] = sid

        await self.broadcast(
            events.USER_STATUS_CHANGE, {"userId": user_key, "status": "online"}
        )

    async def unregister(self, sid: str) -> None:
        """Handle transport disconnect for a socket."""
        connection = self._connections.pop(sid, None)
        if connection is None:
            return

        for group_id in list(connection.groups):
            self.leave_group(sid, group_id)
        connection.state = ConnectionState.DISCONNECTED

        user_key = connection.user_id
        if user_key is None:
            return
        self._users.pop(user_key, None)
        await self.broadcast(
            events.USER_STATUS_CHANGE, {"userId": user_key, "status": "offline"}
        )

    # --- Groups ---

    def join_group(self, sid: str, group_id: str | UUID) -> bool:
        """
        Add a connected socket to a delivery group.

        No membership check happens here; callers authorize the join.
        """
        connection = self._connections.get(sid)
        if connection is None:
            return False
        group_key = _key(group_id)
        connection.groups.add(group_key)
        self._groups.setdefault(group_key, set()).add(sid)
        return True

    def leave_group(self, sid: str, group_id: str | UUID) -> bool:
        """Remove a socket from a delivery group."""
        group_key = _key(group_id)
        members = self._groups.get(group_key)
        if not members or sid not in members:
            return False
        members.discard(sid)
        if not members:
            del self._groups[group_key]
        connection = self._connections.get(sid)
        if connection is not None:
            connection.groups.discard(group_key)
        return True

    # --- Delivery ---

    async def emit_to_user(self, user_id: str | UUID, event: str, payload: Any) -> bool:
        """Deliver to the user's live socket. Returns False if they are offline."""
        sid = self._users.get(_key(user_id))
        if sid is None:
            logger.debug("Dropping %s for offline user %s", event, user_id)
            return False
        return await self._deliver(event, payload, to=sid)

    async def emit_to_group(
        self,
        group_id: str | UUID,
        event: str,
        payload: Any,
        skip_sid: str | None = None,
    ) -> int:
        """Deliver to every socket in the group except ``skip_sid``."""
        delivered = 0
        for sid in sorted(self._groups.get(_key(group_id), ())):
            if sid == skip_sid:
                continue
            if await self._deliver(event, payload, to=sid):
                delivered += 1
        return delivered

    async def broadcast(self, event: str, payload: Any) -> None:
        """Deliver to every connected socket."""
        await self._deliver(event, payload)

    async def _deliver(self, event: str, payload: Any, to: str | None = None) -> bool:
        try:
            await self._server.emit(event, payload, to=to)
        except Exception:
            logger.warning("Live delivery of %s to %s failed", event, to or "*", exc_info=True)
            return False
        return True

    # --- Introspection ---

    def connection_for(self, user_id: str | UUID) -> str | None:
        return self._users.get(_key(user_id))

    def is_online(self, user_id: str | UUID) -> bool:
        return _key(user_id) in self._users

    def state_of(self, sid: str) -> ConnectionState:
        connection = self._connections.get(sid)
        return connection.state if connection else ConnectionState.DISCONNECTED

    def user_for(self, sid: str) -> str | None:
        connection = self._connections.get(sid)
        return connection.user_id if connection else None

    def members_of(self, group_id: str | UUID) -> set[str]:
        return set(self._groups.get(_key(group_id), ()))

    @property
    def connection_count(self) -> int:
        return len(self._connections)
