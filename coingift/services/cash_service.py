# coingift/services/cash_service.py

from coingift.models.cash import CashEntry, CashSummary
from coingift.models.gift import GiftStatus
from coingift.services.gift_store import GiftStore

REFUND_DESCRIPTION = "선물 환불"


class CashService:

    def __init__(self, store: GiftStore):
        self.store = store

    def get_cash(self, phone: str = "", email: str = "") -> CashSummary:
        """
        寄件人 (電話或信箱) 所有 refunded 禮物加總，就是可用的現金餘額。
        每次查詢都重新計算。
        """
        if not phone and not email:
            return CashSummary()

        refunded = self.store.list(
            sender_phone=phone, sender_email=email, statuses=(GiftStatus.REFUNDED,)
        )
        history = [
            CashEntry(
                id=gift.id,
                amount=gift.amount,
                type="refund",
                description=REFUND_DESCRIPTION,
                created_at=gift.created_at,
            )
            for gift in refunded
        ]
        return CashSummary(history=history, total_cash=sum(entry.amount for entry in history))
