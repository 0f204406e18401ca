# coingift/routers/conversations.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from coingift.common.deps import get_chat_service, get_current_admin, get_optional_admin
from coingift.models.conversation import (
    ConversationCreate,
    ConversationRead,
    MessageCreate,
    MessageRead,
)
from coingift.services.chat_service import ChatService

router = APIRouter()

# 客服聊天是前端定時輪詢，這裡只提供一般的讀寫 API


@router.post("", response_model=ConversationRead)
def create_conversation(body: ConversationCreate, service: ChatService = Depends(get_chat_service)):
    return service.create_conversation(body)


@router.get("", response_model=List[ConversationRead])
def list_conversations(
    user_name: str = Query("", alias="userName"),
    user_email: str = Query("", alias="userEmail"),
    service: ChatService = Depends(get_chat_service),
    current_admin: Optional[str] = Depends(get_optional_admin),
):
    # 不帶條件 = 管理者收件匣
    if not user_name and not user_email and current_admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return service.list_conversations(user_name=user_name, user_email=user_email)


@router.get("/{conversation_id}/messages", response_model=List[MessageRead])
def list_messages(conversation_id: str, service: ChatService = Depends(get_chat_service)):
    return service.list_messages(conversation_id)


@router.post("/{conversation_id}/messages", response_model=MessageRead)
def send_message(
    conversation_id: str,
    body: MessageCreate,
    service: ChatService = Depends(get_chat_service),
    current_admin: Optional[str] = Depends(get_optional_admin),
):
    return service.send_message(conversation_id, body, is_admin=current_admin is not None)


@router.post("/{conversation_id}/close", response_model=ConversationRead)
def close_conversation(
    conversation_id: str,
    service: ChatService = Depends(get_chat_service),
    admin: str = Depends(get_current_admin),
):
    return service.close_conversation(conversation_id)
