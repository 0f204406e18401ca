# coingift/services/gift_service.py

from collections import Counter
from typing import Callable, Dict, List

from coingift.common import codes, lifecycle
from coingift.common.errors import (
    MSG_GIFT_NOT_FOUND,
    MSG_INVALID_CODE,
    MSG_REQUIRED,
    Forbidden,
    NotFound,
    StateConflict,
    ValidationFailed,
)
from coingift.core.config import settings
from coingift.core.logging import get_logger
from coingift.models.gift import Gift, GiftCreate, GiftRead, GiftStatus, GiftUpdate
from coingift.services.gift_store import DuplicateCode, GiftStore

logger = get_logger(__name__)


class GiftService:
    """
    禮物狀態機：pending → paid → registered / refunded / expired。
    所有檢查都在寫入之前做完，被拒絕的操作不會留下任何寫入。
    """

    def __init__(self, store: GiftStore, clock: Callable = lifecycle.utcnow):
        self.store = store
        self.clock = clock

    # --- 建立 ---

    def create_gift(self, gift_in: GiftCreate) -> Gift:
        sender_name = (gift_in.sender_name or "").strip()
        receiver_name = (gift_in.receiver_name or "").strip()
        if not gift_in.amount or not sender_name or not receiver_name:
            raise ValidationFailed(MSG_REQUIRED)
        if gift_in.amount < settings.GIFT_MIN_AMOUNT:
            raise ValidationFailed(f"최소 선물 금액은 {settings.GIFT_MIN_AMOUNT}원입니다.")
        if gift_in.amount > settings.GIFT_MAX_AMOUNT:
            raise ValidationFailed(f"최대 선물 금액은 {settings.GIFT_MAX_AMOUNT}원입니다.")

        now = self.clock()
        fields = dict(
            amount=gift_in.amount,
            sender_name=sender_name,
            sender_phone=gift_in.sender_phone or "",
            sender_email=gift_in.sender_email or "",
            receiver_name=receiver_name,
            receiver_phone=gift_in.receiver_phone or "",
            receiver_email=gift_in.receiver_email or "",
            message=gift_in.message or "",
            status=GiftStatus.PENDING,
            payment_id="",
            thank_you_message="",
            created_at=now,
            # 到期日只在建立時算一次
            expires_at=lifecycle.expiry_for(now, settings.GIFT_EXPIRE_DAYS),
            registered_at=None,
        )

        # 碰撞機率極低，但 code 欄位是 unique，撞到就重抽
        for attempt in range(settings.CODE_MAX_ATTEMPTS):
            code = codes.generate()
            if self.store.get_by_code(code) is not None:
                continue
            try:
                gift = self.store.append(Gift(code=code, **fields))
            except DuplicateCode:
                logger.warning("gift_code_collision", attempt=attempt)
                continue
            logger.info("gift_created", gift_id=gift.id, amount=gift.amount)
            return gift

        raise StateConflict("코인 코드를 생성하지 못했습니다. 다시 시도해주세요.")

    # --- 查詢 ---

    def get_gift(self, id_or_code: str) -> Gift:
        gift = self.store.get_by_id(id_or_code)
        if gift is None:
            gift = self.store.get_by_code(codes.normalize(id_or_code))
        if gift is None:
            raise NotFound(MSG_GIFT_NOT_FOUND)
        return gift

    def list_gifts(self, phone: str = "", email: str = "", admin: bool = False) -> List[Gift]:
        if admin:
            return self.store.list()
        if not phone and not email:
            return []
        return self.store.list(sender_phone=phone, sender_email=email)

    def list_received(self, phone: str = "", email: str = "") -> List[Gift]:
        if not phone and not email:
            return []
        return self.store.list(receiver_phone=phone, receiver_email=email)

    def to_read(self, gift: Gift) -> GiftRead:
        read = GiftRead.model_validate(gift)
        status = lifecycle.effective_status(gift.status, gift.expires_at, self.clock())
        return read.model_copy(update={"status": status})

    # --- 兌換 ---

    def redeem(self, code: str) -> Gift:
        normalized = codes.normalize(code)
        gift = self.store.get_by_code(normalized) if normalized else None
        if gift is None:
            raise NotFound(MSG_INVALID_CODE)

        now = self.clock()
        lifecycle.check_redeemable(gift.status, gift.expires_at, now)

        swapped = self.store.compare_and_set_status(
            gift.id, GiftStatus.PAID, GiftStatus.REGISTERED, registered_at=now
        )
        if not swapped:
            # 被其他請求搶先改掉了，重新讀一次拿正確的原因
            latest = self.store.get_by_id(gift.id)
            lifecycle.check_redeemable(latest.status, latest.expires_at, now)
            raise StateConflict(MSG_INVALID_CODE)

        logger.info("gift_registered", gift_id=gift.id, amount=gift.amount)
        return self.store.get_by_id(gift.id)

    # --- 更新 ---

    @staticmethod
    def _check_thank_you(status: str, existing: str, message: str) -> str:
        message = (message or "").strip()
        if not message:
            raise ValidationFailed("감사 메시지를 입력해주세요.")
        if status != GiftStatus.REGISTERED:
            raise StateConflict("등록된 선물에만 감사 메시지를 보낼 수 있습니다.")
        # 感謝訊息只能寫一次
        if existing:
            raise StateConflict("이미 감사 메시지를 보냈습니다.")
        return message

    def update_gift(self, gift_id: str, gift_in: GiftUpdate, is_admin: bool = False) -> Gift:
        """
        部分更新。一般使用者只能寫感謝訊息；
        status / registeredAt / paymentId 只有管理者能改，且要符合狀態轉換表。
        """
        gift = self.store.get_by_id(gift_id)
        if gift is None:
            raise NotFound(MSG_GIFT_NOT_FOUND)

        admin_fields = gift_in.model_dump(exclude_unset=True, exclude={"thank_you_message"})
        admin_fields = {k: v for k, v in admin_fields.items() if v is not None}
        if admin_fields and not is_admin:
            raise Forbidden("관리자만 변경할 수 있습니다.")

        updates: Dict = {}
        target = admin_fields.get("status")
        if target is not None and target != gift.status:
            if target not in GiftStatus.ALL:
                raise ValidationFailed(f"알 수 없는 상태입니다: {target}")
            if not lifecycle.can_transition(gift.status, target):
                raise StateConflict(f"{gift.status} 상태에서 {target}(으)로 변경할 수 없습니다.")
            updates["status"] = target

        # registeredAt 只能跟著 registered 狀態一起存在
        resulting = updates.get("status", gift.status)
        if "registered_at" in admin_fields:
            if resulting != GiftStatus.REGISTERED:
                raise StateConflict("등록된 선물에만 등록 시각을 지정할 수 있습니다.")
            updates["registered_at"] = admin_fields["registered_at"]
        elif updates.get("status") == GiftStatus.REGISTERED:
            updates["registered_at"] = self.clock()

        if "payment_id" in admin_fields:
            if gift.status != GiftStatus.PENDING:
                raise StateConflict("결제 대기 중인 선물만 결제 정보를 바꿀 수 있습니다.")
            updates["payment_id"] = admin_fields["payment_id"]

        if gift_in.thank_you_message is not None:
            updates["thank_you_message"] = self._check_thank_you(
                resulting, gift.thank_you_message, gift_in.thank_you_message
            )

        # 全部檢查通過才一次寫入
        if updates:
            gift = self.store.update_by_id(gift_id, **updates)
            logger.info("gift_updated", gift_id=gift_id, fields=sorted(updates))

        return gift

    # --- 過期掃描 ---

    def sweep(self) -> Dict[str, int]:
        """把過期的 paid 改成 refunded、pending 改成 expired。"""
        now = self.clock()
        result = {GiftStatus.REFUNDED: 0, GiftStatus.EXPIRED: 0}
        for gift in self.store.list(statuses=(GiftStatus.PENDING, GiftStatus.PAID)):
            target = lifecycle.sweep_target(gift.status, gift.expires_at, now)
            if target is None:
                continue
            if self.store.compare_and_set_status(gift.id, gift.status, target):
                result[target] += 1

        logger.info("gift_sweep_finished", refunded=result[GiftStatus.REFUNDED],
                    expired=result[GiftStatus.EXPIRED])
        return result

    def stats(self) -> Dict[str, int]:
        now = self.clock()
        counts = Counter(
            lifecycle.effective_status(g.status, g.expires_at, now) for g in self.store.list()
        )
        return {status: counts.get(status, 0) for status in GiftStatus.ALL}

