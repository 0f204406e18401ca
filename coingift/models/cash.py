# coingift/models/cash.py
# 現金餘額每次都從已退款的禮物重新計算，沒有獨立的帳本表

from datetime import datetime
from typing import List

from coingift.models.gift import CamelModel


class CashEntry(CamelModel):
    id: str
    amount: int
    type: str = "refund"
    description: str
    created_at: datetime


class CashSummary(CamelModel):
    history: List[CashEntry] = []
    total_cash: int = 0
