"""
Chat WebSocket Manager

Manages real-time delivery for workspace chat:
- Personal rooms (user:<id>) for notifications and messages
- Conversation rooms (conversation:<id>) for typing indicators
- Fan-out of new messages to the other participants

Delivery is best effort: events for users with no open socket are dropped.
"""

import asyncio
from typing import Dict, Iterable, List, Set, Optional, Any
from datetime import datetime
from dataclasses import dataclass, field
from enum import Enum
from fastapi import WebSocket

from dintask.core.logging_config import logger
from dintask.core.types import generate_uuid


class ChatEventType(str, Enum):
    """WebSocket event types for chat"""
    # Client events
    SETUP = "setup"
    JOIN_CHAT = "join_chat"
    TYPING = "typing"
    STOP_TYPING = "stop_typing"
    NEW_MESSAGE = "new_message"
    PING = "ping"

    # Server events
    CONNECTED = "connected"
    MESSAGE_RECEIVED = "message_received"
    NEW_NOTIFICATION = "new_notification"
    ERROR = "error"
    PONG = "pong"


@dataclass
class RoomConnection:
    """One open socket and the rooms it has joined"""
    websocket: WebSocket
    user_id: str
    user_name: str
    workspace_id: Optional[str] = None
    connection_id: str = field(default_factory=generate_uuid)
    rooms: Set[str] = field(default_factory=set)
    connected_at: datetime = field(default_factory=datetime.utcnow)
    last_activity: datetime = field(default_factory=datetime.utcnow)


def user_room(user_id) -> str:
    return f"user:{user_id}"


def conversation_room(conversation_id) -> str:
    return f"conversation:{conversation_id}"


class RoomConnectionManager:
    """
    Room based connection registry.

    A user may hold several sockets (tabs, devices); each socket joins
    rooms independently. Sending to a room reaches every socket in it.
    """

    def __init__(self):
        # connection_id -> connection
        self._connections: Dict[str, RoomConnection] = {}
        # room -> connection ids
        self._rooms: Dict[str, Set[str]] = {}
        self._lock = asyncio.Lock()

    async def connect(
        self,
        websocket: WebSocket,
        user_id: str,
        user_name: str,
        workspace_id: Optional[str] = None
    ) -> RoomConnection:
        await websocket.accept()
        connection = RoomConnection(
            websocket=websocket,
            user_id=str(user_id),
            user_name=user_name,
            workspace_id=str(workspace_id) if workspace_id else None
        )
        async with self._lock:
            self._connections[connection.connection_id] = connection
        logger.info(f"[WS] {self.__class__.__name__} connected user {user_id}")
        return connection

    async def disconnect(self, connection: RoomConnection):
        async with self._lock:
            self._connections.pop(connection.connection_id, None)
            for room in connection.rooms:
                members = self._rooms.get(room)
                if members is None:
                    continue
                members.discard(connection.connection_id)
                if not members:
                    del self._rooms[room]
            connection.rooms.clear()
        logger.info(f"[WS] {self.__class__.__name__} disconnected user {connection.user_id}")

    async def join(self, connection: RoomConnection, room: str):
        if not room:
            return
        room = str(room)
        async with self._lock:
            self._rooms.setdefault(room, set()).add(connection.connection_id)
            connection.rooms.add(room)

    async def leave(self, connection: RoomConnection, room: str):
        if not room:
            return
        room = str(room)
        async with self._lock:
            members = self._rooms.get(room)
            if members is not None:
                members.discard(connection.connection_id)
                if not members:
                    del self._rooms[room]
            connection.rooms.discard(room)

    def room_members(self, room: str) -> List[RoomConnection]:
        ids = self._rooms.get(str(room), set())
        return [self._connections[cid] for cid in list(ids) if cid in self._connections]

    def is_online(self, user_id: str) -> bool:
        return any(c.user_id == str(user_id) for c in self._connections.values())

    async def send(self, connection: RoomConnection, event_type: str, data: Any) -> bool:
        message = {
            "type": getattr(event_type, "value", event_type),
            "data": data,
            "timestamp": datetime.utcnow().isoformat()
        }
        try:
            await connection.websocket.send_json(message)
            connection.last_activity = datetime.utcnow()
            return True
        except Exception as e:
            logger.error(f"[WS] Error sending to user {connection.user_id}: {e}")
            await self.disconnect(connection)
            return False

    async def emit_to_room(
        self,
        room: str,
        event_type: str,
        data: Any,
        exclude: Optional[RoomConnection] = None
    ) -> int:
        """Send to every socket in room; returns how many were reached"""
        delivered = 0
        for connection in self.room_members(room):
            if exclude is not None and connection.connection_id == exclude.connection_id:
                continue
            if await self.send(connection, event_type, data):
                delivered += 1
        return delivered

    async def emit_to_rooms(self, rooms: Iterable[str], event_type: str, data: Any) -> int:
        """Send once per socket even when it sits in several of the rooms"""
        seen: Set[str] = set()
        delivered = 0
        for room in rooms:
            for connection in self.room_members(room):
                if connection.connection_id in seen:
                    continue
                seen.add(connection.connection_id)
                if await self.send(connection, event_type, data):
                    delivered += 1
        return delivered


class ChatWebSocketManager(RoomConnectionManager):
    """
    Chat sockets: personal rooms keyed by user id plus conversation rooms.

    Callers check conversation membership before join_chat; typing is only
    relayed into a conversation the socket has joined.
    """

    async def setup(self, connection: RoomConnection):
        """Join the caller's personal room and acknowledge"""
        await self.join(connection, user_room(connection.user_id))
        await self.send(connection, ChatEventType.CONNECTED, {"userId": connection.user_id})

    async def join_chat(self, connection: RoomConnection, conversation_id: str):
        await self.join(connection, conversation_room(conversation_id))

    async def typing(self, connection: RoomConnection, conversation_id: str, is_typing: bool = True):
        room = conversation_room(conversation_id)
        if room not in connection.rooms:
            return
        event = ChatEventType.TYPING if is_typing else ChatEventType.STOP_TYPING
        await self.emit_to_room(room, event, conversation_id, exclude=connection)

    async def fan_out_message(
        self,
        message: Dict[str, Any],
        participant_ids: Iterable[str],
        sender_id: str
    ) -> int:
        """Emit message_received to every participant except the sender"""
        rooms = [user_room(p) for p in participant_ids if str(p) != str(sender_id)]
        return await self.emit_to_rooms(rooms, ChatEventType.MESSAGE_RECEIVED, message)

    async def notify_user(self, user_id: str, notification: Dict[str, Any]) -> int:
        return await self.emit_to_room(user_room(user_id), ChatEventType.NEW_NOTIFICATION, notification)


# Global instance
chat_websocket_manager = ChatWebSocketManager()
