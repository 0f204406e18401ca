# coingift/services/chat_store.py

from typing import List, Optional

from sqlalchemy.orm import Session

from coingift.models.conversation import Conversation, Message


class ChatStore:
    """客服對話與訊息的存取，照 GiftStore 的寫法。"""

    def __init__(self, db: Session):
        self.db = db

    def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        return self.db.query(Conversation).filter(Conversation.id == conversation_id).first()

    def list_conversations(self, user_name: str = "", user_email: str = "") -> List[Conversation]:
        query = self.db.query(Conversation)
        if user_email:
            query = query.filter(Conversation.user_email == user_email)
        elif user_name:
            query = query.filter(Conversation.user_name == user_name)
        return query.all()

    def find_open_conversation(self, user_name: str, user_email: str = "") -> Optional[Conversation]:
        query = self.db.query(Conversation).filter(Conversation.status == "open")
        # 有信箱就用信箱比對，沒有才用名字
        if user_email:
            query = query.filter(Conversation.user_email == user_email)
        else:
            query = query.filter(Conversation.user_name == user_name, Conversation.user_email == "")
        return query.order_by(Conversation.created_at.desc()).first()

    def add_conversation(self, conversation: Conversation) -> Conversation:
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def update_conversation(self, conversation: Conversation, **fields) -> Conversation:
        for key, value in fields.items():
            setattr(conversation, key, value)
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(conversation)
        return conversation

    def list_messages(self, conversation_id: str) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc())
            .all()
        )

    def add_message(self, message: Message, conversation: Conversation, **conversation_fields) -> Message:
        # 訊息與對話摘要同一個 commit 寫進去
        self.db.add(message)
        for key, value in conversation_fields.items():
            setattr(conversation, key, value)
        self.db.add(conversation)
        self.db.commit()
        self.db.refresh(message)
        return message
