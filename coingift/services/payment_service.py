# coingift/services/payment_service.py
# 付款流程是模擬的：建立付款只會在禮物上記下 paymentId，完成付款時把禮物改成 paid

import uuid

from coingift.common.errors import (
    MSG_GIFT_NOT_FOUND,
    MSG_PAYMENT_NOT_FOUND,
    MSG_REQUIRED,
    NotFound,
    StateConflict,
    ValidationFailed,
)
from coingift.core.logging import get_logger
from coingift.models.gift import GiftStatus
from coingift.models.payment import PaymentCompleted, PaymentCreate, PaymentRead
from coingift.services.gift_store import GiftStore

logger = get_logger(__name__)


class PaymentService:

    def __init__(self, store: GiftStore):
        self.store = store

    def create_payment(self, payment_in: PaymentCreate) -> PaymentRead:
        if not payment_in.gift_id or not payment_in.amount:
            raise ValidationFailed(MSG_REQUIRED)

        gift = self.store.get_by_id(payment_in.gift_id)
        if gift is None:
            raise NotFound(MSG_GIFT_NOT_FOUND)
        if gift.status != GiftStatus.PENDING:
            raise StateConflict("결제 대기 중인 선물이 아닙니다.")
        if payment_in.amount != gift.amount:
            raise ValidationFailed("결제 금액이 선물 금액과 일치하지 않습니다.")

        payment_id = str(uuid.uuid4())
        self.store.update_by_id(gift.id, payment_id=payment_id)
        logger.info("payment_created", gift_id=gift.id, payment_id=payment_id,
                    method=payment_in.method or "card")

        return PaymentRead(
            id=payment_id,
            gift_id=gift.id,
            amount=gift.amount,
            method=payment_in.method or "card",
            status="pending",
        )

    def complete_payment(self, payment_id: str) -> PaymentCompleted:
        gift = self.store.get_by_payment_id(payment_id)
        if gift is None:
            raise NotFound(MSG_PAYMENT_NOT_FOUND)

        if gift.status == GiftStatus.PAID:
            # 重複通知：狀態本來就是 paid，不再寫入
            logger.info("payment_already_completed", gift_id=gift.id, payment_id=payment_id)
            return PaymentCompleted(message="결제가 완료되었습니다.")

        if not self.store.compare_and_set_status(gift.id, GiftStatus.PENDING, GiftStatus.PAID):
            raise StateConflict("결제를 완료할 수 없는 선물입니다.")

        logger.info("payment_completed", gift_id=gift.id, payment_id=payment_id)
        return PaymentCompleted(message="결제가 완료되었습니다.")
