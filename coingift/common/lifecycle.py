# coingift/common/lifecycle.py
# 禮物狀態機的純邏輯，不碰資料庫，方便單獨測試

from datetime import datetime, timedelta, timezone

from coingift.common.errors import (
    MSG_ALREADY_REGISTERED,
    MSG_EXPIRED,
    MSG_NOT_PAID,
    MSG_REFUNDED,
    StateConflict,
)
from coingift.models.gift import GiftStatus

# 允許的狀態轉換 (registered / refunded 為終點)
TRANSITIONS = {
    GiftStatus.PENDING: {GiftStatus.PAID, GiftStatus.EXPIRED},
    GiftStatus.PAID: {GiftStatus.REGISTERED, GiftStatus.REFUNDED, GiftStatus.EXPIRED},
    GiftStatus.EXPIRED: {GiftStatus.REFUNDED},
    GiftStatus.REGISTERED: set(),
    GiftStatus.REFUNDED: set(),
}


def utcnow() -> datetime:
    # 資料庫裡存的是 naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def expiry_for(created_at: datetime, days: int) -> datetime:
    return created_at + timedelta(days=days)


def is_past_expiry(expires_at: datetime, now: datetime) -> bool:
    return now >= expires_at


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, set())


def effective_status(status: str, expires_at: datetime, now: datetime) -> str:
    """
    讀取時看到的狀態：還沒被掃描、但已經過期的 pending/paid 禮物顯示為 expired。
    不會寫回資料庫。
    """
    if status in (GiftStatus.PENDING, GiftStatus.PAID) and is_past_expiry(expires_at, now):
        return GiftStatus.EXPIRED
    return status


def check_redeemable(status: str, expires_at: datetime, now: datetime) -> None:
    """
    兌換前的檢查，順序很重要：
    已兌換、已退款的原因要優先於「尚未付款」回報給收禮人。
    """
    if status == GiftStatus.REGISTERED:
        raise StateConflict(MSG_ALREADY_REGISTERED)
    if status == GiftStatus.REFUNDED:
        raise StateConflict(MSG_REFUNDED)
    if status == GiftStatus.EXPIRED or is_past_expiry(expires_at, now):
        raise StateConflict(MSG_EXPIRED)
    if status != GiftStatus.PAID:
        raise StateConflict(MSG_NOT_PAID)


def sweep_target(status: str, expires_at: datetime, now: datetime):
    """過期掃描：paid → refunded，pending → expired，其他不動 (回傳 None)。"""
    if not is_past_expiry(expires_at, now):
        return None
    if status == GiftStatus.PAID:
        return GiftStatus.REFUNDED
    if status == GiftStatus.PENDING:
        return GiftStatus.EXPIRED
    return None
