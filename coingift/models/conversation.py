# coingift/models/conversation.py

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, String, Text

from coingift.db.base_class import Base, new_id
from coingift.models.gift import CamelModel


class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(String(36), primary_key=True, default=new_id)
    user_name = Column(String(100), nullable=False)
    user_email = Column(String(255), default="", index=True)
    status = Column(String(20), default="open", nullable=False)  # open / closed
    last_message = Column(String(100), default="")
    last_message_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False)


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(36), primary_key=True, default=new_id)
    conversation_id = Column(String(36), ForeignKey("conversations.id"), index=True, nullable=False)
    sender_type = Column(String(10), nullable=False)  # user / admin
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False)


class ConversationCreate(CamelModel):
    user_name: Optional[str] = None
    user_email: Optional[str] = None


class ConversationRead(CamelModel):
    id: str
    user_name: str
    user_email: str = ""
    status: str
    last_message: str = ""
    last_message_at: Optional[datetime] = None
    created_at: datetime


class MessageCreate(CamelModel):
    sender_type: Optional[str] = None
    content: Optional[str] = None


class MessageRead(CamelModel):
    id: str
    conversation_id: str
    sender_type: str
    content: str
    created_at: datetime
