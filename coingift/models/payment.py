# coingift/models/payment.py
# 付款沒有獨立的資料表，paymentId 直接記在 gifts.payment_id 上

from typing import Optional

from coingift.models.gift import CamelModel


class PaymentCreate(CamelModel):
    gift_id: Optional[str] = None
    amount: Optional[int] = None
    method: Optional[str] = None


class PaymentRead(CamelModel):
    id: str
    gift_id: str
    amount: int
    method: str = "card"
    status: str = "pending"


class PaymentCompleted(CamelModel):
    success: bool = True
    message: str
