"""
Support WebSocket Manager

Ticket rooms for live support conversations. Sockets join their company
room on connect (platform operators join the superadmin room instead)
and ticket rooms (ticket:<id>) on demand, once the caller has been
cleared to see the ticket.
"""

from enum import Enum
from typing import Any, Dict, Optional

from dintask.services.chat_websocket import RoomConnection, RoomConnectionManager

SUPERADMIN_ROOM = "platform:superadmin"


class SupportEventType(str, Enum):
    """WebSocket event types for support tickets"""
    JOIN_TICKET = "join_ticket"
    LEAVE_TICKET = "leave_ticket"
    SUPPORT_TYPING = "support_typing"
    SUPPORT_STOP_TYPING = "support_stop_typing"
    PING = "ping"

    CONNECTED = "connected"
    NEW_SUPPORT_TICKET = "new_support_ticket"
    NEW_SUPPORT_RESPONSE = "new_support_response"
    ERROR = "error"
    PONG = "pong"


def company_room(company_id) -> str:
    return f"company:{company_id}"


def ticket_room(ticket_id) -> str:
    return f"ticket:{ticket_id}"


class SupportWebSocketManager(RoomConnectionManager):

    async def register(self, connection: RoomConnection, is_platform: bool):
        if is_platform:
            await self.join(connection, SUPERADMIN_ROOM)
        elif connection.workspace_id:
            await self.join(connection, company_room(connection.workspace_id))
        await self.send(connection, SupportEventType.CONNECTED, {"userId": connection.user_id})

    async def join_ticket(self, connection: RoomConnection, ticket_id: str):
        await self.join(connection, ticket_room(ticket_id))

    async def leave_ticket(self, connection: RoomConnection, ticket_id: str):
        await self.leave(connection, ticket_room(ticket_id))

    async def typing(self, connection: RoomConnection, ticket_id: str, is_typing: bool = True):
        room = ticket_room(ticket_id)
        if not ticket_id or room not in connection.rooms:
            return
        if is_typing:
            await self.emit_to_room(
                room,
                SupportEventType.SUPPORT_TYPING,
                {"ticketId": ticket_id, "userName": connection.user_name},
                exclude=connection
            )
        else:
            await self.emit_to_room(room, SupportEventType.SUPPORT_STOP_TYPING, ticket_id, exclude=connection)

    async def broadcast_new_ticket(self, ticket: Dict[str, Any], company_id: Optional[str], escalated: bool) -> int:
        rooms = []
        if company_id:
            rooms.append(company_room(company_id))
        if escalated:
            rooms.append(SUPERADMIN_ROOM)
        return await self.emit_to_rooms(rooms, SupportEventType.NEW_SUPPORT_TICKET, ticket)

    async def broadcast_response(self, ticket_id: str, ticket: Dict[str, Any]) -> int:
        return await self.emit_to_room(ticket_room(ticket_id), SupportEventType.NEW_SUPPORT_RESPONSE, ticket)


# Global instance
support_websocket_manager = SupportWebSocketManager()
