"""Workspace chat: 1:1 and group conversations with polymorphic participants"""
from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from dintask.core.database import Base
from dintask.core.types import GUID, generate_uuid


class Conversation(Base):
    __tablename__ = "conversations"

    __table_args__ = (
        Index('ix_conversations_workspace_id', 'workspace_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    is_group = Column(Boolean, default=False, nullable=False)
    group_name = Column(String(255), nullable=True)
    group_avatar = Column(Text, nullable=True)
    last_message_id = Column(GUID, nullable=True)
    workspace_id = Column(String(36), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    participants = relationship(
        "ConversationParticipant", cascade="all, delete-orphan", lazy="selectin"
    )

    def has_participant(self, user_id) -> bool:
        return any(p.user_id == str(user_id) for p in self.participants)


class ConversationParticipant(Base):
    __tablename__ = "conversation_participants"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    conversation_id = Column(GUID, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(GUID, nullable=False, index=True)
    on_model = Column(String(50), nullable=False)


class Message(Base):
    __tablename__ = "messages"

    __table_args__ = (
        Index('ix_messages_conversation_created', 'conversation_id', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    conversation_id = Column(GUID, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_id = Column(GUID, nullable=False)
    sender_model = Column(String(50), nullable=False)
    text = Column(Text, nullable=False)
    attachments = Column(JSON, default=list)
    read_by = Column(JSON, default=list)
    is_deleted = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
