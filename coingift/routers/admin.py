# coingift/routers/admin.py

from fastapi import APIRouter, Depends

from coingift.common.deps import get_current_admin, get_gift_service
from coingift.services.gift_service import GiftService

router = APIRouter()


# 手動觸發過期掃描 (背景迴圈沒開的時候用)
@router.post("/sweep")
def run_sweep(service: GiftService = Depends(get_gift_service), admin: str = Depends(get_current_admin)):
    return service.sweep()


@router.get("/stats")
def gift_stats(service: GiftService = Depends(get_gift_service), admin: str = Depends(get_current_admin)):
    return service.stats()
