"""
Workspace chat.

Conversations never cross workspaces: every participant must be the
workspace admin or one of its members. Delivery of new messages to online
participants goes through the chat WebSocket manager.
"""
from datetime import datetime
from typing import List, Sequence

from fastapi import APIRouter, Depends
from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dintask.core.database import get_db
from dintask.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from dintask.core.types import is_valid_uuid
from dintask.models.chat import Conversation, ConversationParticipant, Message
from dintask.modules.auth.dependencies import (
    WorkspaceScope,
    authorize,
    check_admin_subscription,
    get_workspace,
)
from dintask.modules.auth.directory import find_workspace_account
from dintask.modules.auth.roles import ADMIN, EMPLOYEE, MANAGER, SALES
from dintask.schemas.chat import (
    AccessChatRequest,
    ConversationOut,
    CreateGroupRequest,
    MessageOut,
    SendMessageRequest,
)
from dintask.services.chat_websocket import chat_websocket_manager

router = APIRouter(
    dependencies=[Depends(authorize(ADMIN, MANAGER, SALES, EMPLOYEE)), Depends(check_admin_subscription)]
)

MIN_GROUP_OTHERS = 2


def _participating(user_id):
    return select(ConversationParticipant.conversation_id).where(
        ConversationParticipant.user_id == str(user_id)
    )


async def _serialize(db: AsyncSession, conversations: Sequence[Conversation]) -> List[ConversationOut]:
    """ConversationOut with the last message attached"""
    last_ids = [c.last_message_id for c in conversations if c.last_message_id]
    messages = {}
    if last_ids:
        rows = await db.execute(select(Message).where(Message.id.in_(last_ids)))
        messages = {m.id: m for m in rows.scalars().all()}

    result = []
    for conversation in conversations:
        out = ConversationOut.model_validate(conversation)
        last = messages.get(conversation.last_message_id)
        if last is not None:
            out.last_message = MessageOut.model_validate(last)
        result.append(out)
    return result


async def _member_conversation(db: AsyncSession, scope: WorkspaceScope, conversation_id: str) -> Conversation:
    conversation = await db.get(Conversation, conversation_id) if is_valid_uuid(conversation_id) else None
    if conversation is None:
        raise ResourceNotFoundError("Conversation")
    if not conversation.has_participant(scope.user.id):
        raise AuthorizationError("Not a participant of this conversation")
    return conversation


@router.post("/")
async def access_chat(
    data: AccessChatRequest,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    """Return the 1:1 conversation with another workspace account, creating it on first contact"""
    if not data.user_id:
        raise ValidationError("Please provide the user to chat with", field="userId")
    if str(data.user_id) == str(scope.user.id):
        raise ValidationError("Cannot start a conversation with yourself", field="userId")

    other = await find_workspace_account(db, scope.admin_id, data.user_id, model_name=data.user_model)
    if other is None:
        raise ResourceNotFoundError("User")

    stmt = (
        select(Conversation)
        .where(
            Conversation.is_group.is_(False),
            Conversation.workspace_id == str(scope.admin_id),
            Conversation.id.in_(_participating(scope.user.id)),
            Conversation.id.in_(_participating(other.id)),
        )
        .limit(1)
    )
    conversation = (await db.execute(stmt)).scalars().first()

    if conversation is None:
        conversation = Conversation(
            is_group=False,
            workspace_id=str(scope.admin_id),
            participants=[
                ConversationParticipant(user_id=scope.user.id, on_model=scope.user.model_name),
                ConversationParticipant(user_id=other.id, on_model=other.model_name),
            ],
        )
        db.add(conversation)
        await db.commit()
        await db.refresh(conversation)

    data_out = (await _serialize(db, [conversation]))[0]
    return {"success": True, "data": data_out}


@router.get("/")
async def fetch_chats(
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    stmt = (
        select(Conversation)
        .where(Conversation.id.in_(_participating(scope.user.id)))
        .order_by(Conversation.updated_at.desc())
    )
    conversations = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(conversations), "data": await _serialize(db, conversations)}


@router.post("/group")
async def create_group_chat(
    data: CreateGroupRequest,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    if not data.name or data.participants is None:
        raise ValidationError("Please fill all fields")

    participants = [ConversationParticipant(user_id=scope.user.id, on_model=scope.user.model_name)]
    seen = {str(scope.user.id)}
    for entry in data.participants:
        if str(entry.id) in seen:
            continue
        account = await find_workspace_account(db, scope.admin_id, entry.id, model_name=entry.model)
        if account is None:
            raise ValidationError(f"Participant {entry.id} is not part of this workspace", field="participants")
        seen.add(str(account.id))
        participants.append(ConversationParticipant(user_id=account.id, on_model=account.model_name))

    if len(participants) - 1 < MIN_GROUP_OTHERS:
        raise ValidationError("Minimum 3 users required for group (including you)", field="participants")

    conversation = Conversation(
        is_group=True,
        group_name=data.name,
        workspace_id=str(scope.admin_id),
        participants=participants,
    )
    db.add(conversation)
    await db.commit()
    await db.refresh(conversation)
    return {"success": True, "data": ConversationOut.model_validate(conversation)}


@router.post("/message")
async def send_message(
    data: SendMessageRequest,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    conversation = await _member_conversation(db, scope, data.conversation_id)

    message = Message(
        conversation_id=conversation.id,
        sender_id=scope.user.id,
        sender_model=scope.user.model_name,
        text=data.content,
        attachments=list(data.attachments),
        read_by=[str(scope.user.id)],
    )
    db.add(message)
    await db.flush()

    conversation.last_message_id = message.id
    conversation.updated_at = datetime.utcnow()
    await db.commit()

    payload = MessageOut.model_validate(message)
    await chat_websocket_manager.fan_out_message(
        jsonable_encoder(payload),
        [p.user_id for p in conversation.participants],
        scope.user.id,
    )
    return {"success": True, "data": payload}


@router.get("/messages/{conversation_id}")
async def all_messages(
    conversation_id: str,
    scope: WorkspaceScope = Depends(get_workspace),
    db: AsyncSession = Depends(get_db)
):
    conversation = await _member_conversation(db, scope, conversation_id)
    stmt = (
        select(Message)
        .where(Message.conversation_id == conversation.id)
        .order_by(Message.created_at.asc())
    )
    messages = (await db.execute(stmt)).scalars().all()
    return {"success": True, "count": len(messages), "data": [MessageOut.model_validate(m) for m in messages]}
