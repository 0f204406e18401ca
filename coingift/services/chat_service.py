# coingift/services/chat_service.py

from typing import Callable, List

from coingift.common import lifecycle
from coingift.common.errors import Forbidden, NotFound, StateConflict, ValidationFailed
from coingift.core.logging import get_logger
from coingift.models.conversation import Conversation, ConversationCreate, Message, MessageCreate
from coingift.services.chat_store import ChatStore

logger = get_logger(__name__)

SENDER_TYPES = ("user", "admin")
PREVIEW_LENGTH = 100


class ChatService:

    def __init__(self, store: ChatStore, clock: Callable = lifecycle.utcnow):
        self.store = store
        self.clock = clock

    def create_conversation(self, conversation_in: ConversationCreate) -> Conversation:
        user_name = (conversation_in.user_name or "").strip()
        user_email = (conversation_in.user_email or "").strip()
        if not user_name:
            raise ValidationFailed("이름을 입력해주세요.")

        # 已經有進行中的對話就直接沿用
        existing = self.store.find_open_conversation(user_name, user_email)
        if existing is not None:
            return existing

        conversation = self.store.add_conversation(Conversation(
            user_name=user_name,
            user_email=user_email,
            status="open",
            last_message="",
            last_message_at=None,
            created_at=self.clock(),
        ))
        logger.info("conversation_created", conversation_id=conversation.id)
        return conversation

    def list_conversations(self, user_name: str = "", user_email: str = "") -> List[Conversation]:
        conversations = self.store.list_conversations(user_name, user_email)
        # open 的排前面，其餘依最後訊息時間 (沒有就用建立時間) 由新到舊
        conversations.sort(key=lambda c: c.last_message_at or c.created_at, reverse=True)
        conversations.sort(key=lambda c: c.status != "open")
        return conversations

    def get_conversation(self, conversation_id: str) -> Conversation:
        conversation = self.store.get_conversation(conversation_id)
        if conversation is None:
            raise NotFound("대화를 찾을 수 없습니다.")
        return conversation

    def list_messages(self, conversation_id: str) -> List[Message]:
        self.get_conversation(conversation_id)
        return self.store.list_messages(conversation_id)

    def send_message(self, conversation_id: str, message_in: MessageCreate, is_admin: bool = False) -> Message:
        content = (message_in.content or "").strip()
        if not content or not message_in.sender_type:
            raise ValidationFailed("메시지 내용을 입력해주세요.")
        if message_in.sender_type not in SENDER_TYPES:
            raise ValidationFailed(f"알 수 없는 발신자입니다: {message_in.sender_type}")
        if message_in.sender_type == "admin" and not is_admin:
            raise Forbidden("관리자만 답변할 수 있습니다.")

        conversation = self.get_conversation(conversation_id)
        if conversation.status != "open":
            raise StateConflict("종료된 상담입니다.")

        now = self.clock()
        message = self.store.add_message(
            Message(
                conversation_id=conversation_id,
                sender_type=message_in.sender_type,
                content=content,
                created_at=now,
            ),
            conversation,
            last_message=content[:PREVIEW_LENGTH],
            last_message_at=now,
        )
        logger.info("message_sent", conversation_id=conversation_id,
                    sender_type=message_in.sender_type)
        return message

    def close_conversation(self, conversation_id: str) -> Conversation:
        conversation = self.get_conversation(conversation_id)
        if conversation.status == "closed":
            return conversation
        conversation = self.store.update_conversation(conversation, status="closed")
        logger.info("conversation_closed", conversation_id=conversation_id)
        return conversation
