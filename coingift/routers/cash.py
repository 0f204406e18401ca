# coingift/routers/cash.py

from fastapi import APIRouter, Depends

from coingift.common.deps import get_cash_service
from coingift.common.errors import ValidationFailed
from coingift.models.cash import CashSummary
from coingift.services.cash_service import CashService

router = APIRouter()


@router.get("", response_model=CashSummary)
def get_cash(phone: str = "", email: str = "", service: CashService = Depends(get_cash_service)):
    if not phone and not email:
        raise ValidationFailed("사용자 정보를 입력해주세요.")
    return service.get_cash(phone=phone, email=email)
