"""
Realtime endpoints

Connection URLs:
    WS /api/v1/ws/chat?token=<jwt>
    WS /api/v1/ws/support?token=<jwt>

Message format (both directions):
{
    "type": "event_type",
    "data": { ... }
}
"""

import json
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from dintask.core.database import AsyncSessionLocal
from dintask.core.exceptions import DinTaskError
from dintask.core.logging_config import logger
from dintask.core.types import is_valid_uuid
from dintask.models.chat import Conversation
from dintask.models.support import SupportTicket
from dintask.modules.auth.dependencies import get_user_from_token
from dintask.modules.auth.roles import PLATFORM_ROLES, role_of
from dintask.services.chat_websocket import ChatEventType, chat_websocket_manager
from dintask.services.support_websocket import SupportEventType, support_websocket_manager

router = APIRouter()

INVALID_TOKEN_CODE = 4001


async def _authenticate(websocket: WebSocket, token: Optional[str]):
    """Resolve the token to an account; closes the socket with 4001 when it cannot"""
    async with AsyncSessionLocal() as db:
        try:
            return await get_user_from_token(db, token)
        except DinTaskError as e:
            logger.warning(f"[WS] Rejected handshake: {e.message}")
    await websocket.close(code=INVALID_TOKEN_CODE, reason="Invalid or expired token")
    return None


async def _joined_conversation(user, conversation_id) -> Optional[Conversation]:
    """The conversation, when the caller is one of its participants"""
    if not conversation_id or not is_valid_uuid(conversation_id):
        return None
    async with AsyncSessionLocal() as db:
        conversation = await db.get(Conversation, str(conversation_id))
    if conversation is None or not conversation.has_participant(user.id):
        return None
    return conversation


async def _may_watch_ticket(user, ticket_id) -> bool:
    """Company members see their company's tickets; operators only escalated ones"""
    if not ticket_id or not is_valid_uuid(ticket_id):
        return False
    async with AsyncSessionLocal() as db:
        ticket = await db.get(SupportTicket, str(ticket_id))
    if ticket is None:
        return False
    if role_of(user) in PLATFORM_ROLES:
        return bool(ticket.is_escalated_to_super_admin)
    return str(ticket.company_id) == str(user.workspace_id)


async def _refuse(manager, connection, event_type, message: str):
    await manager.send(connection, event_type, {"error": "forbidden", "message": message})


@router.websocket("/chat")
async def chat_websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Chat socket.

    Client events: setup, join_chat, typing, stop_typing, new_message, ping
    Server events: connected, typing, stop_typing, message_received,
    new_notification, pong, error
    """
    user = await _authenticate(websocket, token)
    if user is None:
        return

    connection = await chat_websocket_manager.connect(
        websocket=websocket,
        user_id=user.id,
        user_name=user.name,
        workspace_id=user.workspace_id,
    )

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except json.JSONDecodeError:
                await chat_websocket_manager.send(
                    connection, ChatEventType.ERROR,
                    {"error": "invalid_json", "message": "Invalid JSON message"}
                )
                continue

            event_type = message.get("type", "")
            event_data = message.get("data") or {}

            if event_type == ChatEventType.SETUP:
                await chat_websocket_manager.setup(connection)

            elif event_type == ChatEventType.JOIN_CHAT:
                conversation_id = event_data if isinstance(event_data, str) else event_data.get("conversationId")
                if await _joined_conversation(user, conversation_id) is None:
                    await _refuse(chat_websocket_manager, connection, ChatEventType.ERROR,
                                  "Not a participant of this conversation")
                    continue
                await chat_websocket_manager.join_chat(connection, conversation_id)

            elif event_type in (ChatEventType.TYPING, ChatEventType.STOP_TYPING):
                room = event_data if isinstance(event_data, str) else event_data.get("conversationId")
                await chat_websocket_manager.typing(connection, room, is_typing=event_type == ChatEventType.TYPING)

            elif event_type == ChatEventType.NEW_MESSAGE:
                if not isinstance(event_data, dict) or not event_data.get("text"):
                    continue
                conversation = await _joined_conversation(user, event_data.get("conversationId"))
                if conversation is None:
                    await _refuse(chat_websocket_manager, connection, ChatEventType.ERROR,
                                  "Not a participant of this conversation")
                    continue
                await chat_websocket_manager.fan_out_message(
                    event_data,
                    [p.user_id for p in conversation.participants],
                    connection.user_id,
                )

            elif event_type == ChatEventType.PING:
                await chat_websocket_manager.send(connection, ChatEventType.PONG, {})

            else:
                logger.debug(f"Unknown chat WebSocket event type: {event_type}")

    except WebSocketDisconnect:
        logger.info(f"Chat WebSocket disconnected for user {connection.user_id}")
    except Exception as e:
        logger.error(f"Chat WebSocket error: {e}", exc_info=True)
    finally:
        await chat_websocket_manager.disconnect(connection)


@router.websocket("/support")
async def support_websocket_endpoint(websocket: WebSocket, token: Optional[str] = Query(None)):
    """
    Support ticket socket.

    Client events: join_ticket, leave_ticket, support_typing,
    support_stop_typing, ping
    Server events: connected, new_support_ticket, new_support_response,
    support_typing, support_stop_typing, pong, error
    """
    user = await _authenticate(websocket, token)
    if user is None:
        return

    connection = await support_websocket_manager.connect(
        websocket=websocket,
        user_id=user.id,
        user_name=user.name,
        workspace_id=user.workspace_id,
    )
    await support_websocket_manager.register(connection, is_platform=role_of(user) in PLATFORM_ROLES)

    try:
        while True:
            try:
                message = await websocket.receive_json()
            except json.JSONDecodeError:
                await support_websocket_manager.send(
                    connection, SupportEventType.ERROR,
                    {"error": "invalid_json", "message": "Invalid JSON message"}
                )
                continue

            event_type = message.get("type", "")
            event_data = message.get("data") or {}
            ticket_id = event_data if isinstance(event_data, str) else event_data.get("ticketId")

            if event_type == SupportEventType.JOIN_TICKET:
                if not await _may_watch_ticket(user, ticket_id):
                    await _refuse(support_websocket_manager, connection, SupportEventType.ERROR,
                                  "Not authorized to access this ticket")
                    continue
                await support_websocket_manager.join_ticket(connection, ticket_id)

            elif event_type == SupportEventType.LEAVE_TICKET:
                await support_websocket_manager.leave_ticket(connection, ticket_id)

            elif event_type in (SupportEventType.SUPPORT_TYPING, SupportEventType.SUPPORT_STOP_TYPING):
                await support_websocket_manager.typing(
                    connection, ticket_id, is_typing=event_type == SupportEventType.SUPPORT_TYPING
                )

            elif event_type == SupportEventType.PING:
                await support_websocket_manager.send(connection, SupportEventType.PONG, {})

            else:
                logger.debug(f"Unknown support WebSocket event type: {event_type}")

    except WebSocketDisconnect:
        logger.info(f"Support WebSocket disconnected for user {connection.user_id}")
    except Exception as e:
        logger.error(f"Support WebSocket error: {e}", exc_info=True)
    finally:
        await support_websocket_manager.disconnect(connection)
