# coingift/models/gift.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import Column, DateTime, Integer, String, Text

from coingift.db.base_class import Base, new_id


class GiftStatus:
    PENDING = "pending"
    PAID = "paid"
    REGISTERED = "registered"
    REFUNDED = "refunded"
    EXPIRED = "expired"

    ALL = (PENDING, PAID, REGISTERED, REFUNDED, EXPIRED)


class Gift(Base):
    __tablename__ = "gifts"

    id = Column(String(36), primary_key=True, default=new_id)
    code = Column(String(14), unique=True, index=True, nullable=False)
    amount = Column(Integer, nullable=False)

    sender_name = Column(String(100), nullable=False)
    sender_phone = Column(String(30), default="", index=True)
    sender_email = Column(String(255), default="", index=True)

    receiver_name = Column(String(100), nullable=False)
    receiver_phone = Column(String(30), default="", index=True)
    receiver_email = Column(String(255), default="", index=True)

    message = Column(Text, default="")
    status = Column(String(20), default=GiftStatus.PENDING, nullable=False, index=True)
    payment_id = Column(String(36), default="", index=True)
    thank_you_message = Column(Text, default="")

    # 時間一律存 naive UTC
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    registered_at = Column(DateTime, nullable=True)


# --- API Schemas (JSON 欄位一律 camelCase) ---

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class GiftCreate(CamelModel):
    # 必填檢查交給 service，才能回傳統一的錯誤訊息
    amount: Optional[int] = None
    sender_name: Optional[str] = None
    sender_phone: Optional[str] = None
    sender_email: Optional[str] = None
    receiver_name: Optional[str] = None
    receiver_phone: Optional[str] = None
    receiver_email: Optional[str] = None
    message: Optional[str] = None


class GiftCreated(CamelModel):
    id: str
    code: str
    amount: int
    sender_name: str
    receiver_name: str
    expires_at: datetime


class GiftUpdate(CamelModel):
    status: Optional[str] = None
    thank_you_message: Optional[str] = None
    registered_at: Optional[datetime] = None
    payment_id: Optional[str] = None


class GiftRead(CamelModel):
    id: str
    code: str
    amount: int
    sender_name: str
    sender_phone: str = ""
    sender_email: str = ""
    receiver_name: str
    receiver_phone: str = ""
    receiver_email: str = ""
    message: str = ""
    status: str
    payment_id: str = ""
    thank_you_message: str = ""
    created_at: datetime
    expires_at: datetime
    registered_at: Optional[datetime] = None


class RegisterRequest(CamelModel):
    code: Optional[str] = None


class RegisteredGift(CamelModel):
    id: str
    amount: int
    sender_name: str


class RegisterResult(CamelModel):
    success: bool = True
    message: str
    gift: RegisteredGift


class AmountPresets(CamelModel):
    min_amount: int
    presets: List[int]
