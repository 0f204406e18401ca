# coingift/services/gift_store.py

from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy import or_, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from coingift.models.gift import Gift


class DuplicateCode(Exception):
    """兌換碼已經存在 (unique 衝突)。"""


class GiftStore(ABC):
    """禮物資料的存取介面，狀態機只透過這些方法讀寫。"""

    @abstractmethod
    def get_by_id(self, gift_id: str) -> Optional[Gift]: ...

    @abstractmethod
    def get_by_code(self, code: str) -> Optional[Gift]: ...

    @abstractmethod
    def get_by_payment_id(self, payment_id: str) -> Optional[Gift]: ...

    @abstractmethod
    def list(self, sender_phone: str = "", sender_email: str = "",
             receiver_phone: str = "", receiver_email: str = "",
             statuses=None) -> List[Gift]: ...

    @abstractmethod
    def append(self, gift: Gift) -> Gift: ...

    @abstractmethod
    def update_by_id(self, gift_id: str, **fields) -> Optional[Gift]: ...

    @abstractmethod
    def compare_and_set_status(self, gift_id: str, expected: str, new: str, **fields) -> bool:
        """只有目前狀態 == expected 時才改成 new，回傳是否真的有改到。"""


class SqlGiftStore(GiftStore):

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, gift_id: str) -> Optional[Gift]:
        return self.db.query(Gift).filter(Gift.id == gift_id).first()

    def get_by_code(self, code: str) -> Optional[Gift]:
        return self.db.query(Gift).filter(Gift.code == code).first()

    def get_by_payment_id(self, payment_id: str) -> Optional[Gift]:
        if not payment_id:
            return None
        return self.db.query(Gift).filter(Gift.payment_id == payment_id).first()

    def list(self, sender_phone: str = "", sender_email: str = "",
             receiver_phone: str = "", receiver_email: str = "",
             statuses=None) -> List[Gift]:
        query = self.db.query(Gift)

        # 同一組 (寄件人 / 收件人) 的電話或信箱，任一個對到就算
        sender = []
        if sender_phone:
            sender.append(Gift.sender_phone == sender_phone)
        if sender_email:
            sender.append(Gift.sender_email == sender_email)
        if sender:
            query = query.filter(or_(*sender))

        receiver = []
        if receiver_phone:
            receiver.append(Gift.receiver_phone == receiver_phone)
        if receiver_email:
            receiver.append(Gift.receiver_email == receiver_email)
        if receiver:
            query = query.filter(or_(*receiver))

        if statuses:
            query = query.filter(Gift.status.in_(list(statuses)))

        return query.order_by(Gift.created_at.desc()).all()

    def append(self, gift: Gift) -> Gift:
        self.db.add(gift)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateCode(gift.code) from exc
        self.db.refresh(gift)
        return gift

    def update_by_id(self, gift_id: str, **fields) -> Optional[Gift]:
        db_gift = self.get_by_id(gift_id)
        if not db_gift:
            return None

        for key, value in fields.items():
            setattr(db_gift, key, value)

        self.db.add(db_gift)
        self.db.commit()
        self.db.refresh(db_gift)
        return db_gift

    def compare_and_set_status(self, gift_id: str, expected: str, new: str, **fields) -> bool:
        # 條件式 UPDATE：兩個請求同時兌換同一張碼，只有一個會更新成功
        result = self.db.execute(
            update(Gift)
            .where(Gift.id == gift_id, Gift.status == expected)
            .values(status=new, **fields)
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount == 1
