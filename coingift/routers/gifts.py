# coingift/routers/gifts.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from coingift.common.deps import get_gift_service, get_optional_admin
from coingift.common.errors import MSG_REQUIRED, ValidationFailed
from coingift.core.config import settings
from coingift.models.gift import (
    AmountPresets,
    GiftCreate,
    GiftCreated,
    GiftRead,
    GiftUpdate,
    RegisteredGift,
    RegisterRequest,
    RegisterResult,
)
from coingift.services.gift_service import GiftService

router = APIRouter()


# 1. 送禮：建立禮物 (pending)
@router.post("", response_model=GiftCreated)
def create_gift(gift_in: GiftCreate, service: GiftService = Depends(get_gift_service)):
    return service.create_gift(gift_in)


# 2. 寄件人的送禮紀錄 / 管理者看全部
@router.get("", response_model=List[GiftRead])
def list_gifts(
    phone: str = "",
    email: str = "",
    admin: bool = False,
    service: GiftService = Depends(get_gift_service),
    current_admin: Optional[str] = Depends(get_optional_admin),
):
    if admin and current_admin is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    if not admin and not phone and not email:
        raise ValidationFailed("조회 조건을 입력해주세요.")
    return [service.to_read(g) for g in service.list_gifts(phone=phone, email=email, admin=admin)]


# 3. 收禮人收到的禮物
@router.get("/received", response_model=List[GiftRead])
def list_received(phone: str = "", email: str = "", service: GiftService = Depends(get_gift_service)):
    if not phone and not email:
        raise ValidationFailed("연락처 또는 이메일을 입력해주세요.")
    return [service.to_read(g) for g in service.list_received(phone=phone, email=email)]


@router.get("/amounts", response_model=AmountPresets)
def amount_presets():
    return AmountPresets(min_amount=settings.GIFT_MIN_AMOUNT, presets=settings.GIFT_AMOUNT_PRESETS)


# 4. 兌換碼登錄
@router.post("/register", response_model=RegisterResult)
def register_gift(body: RegisterRequest, service: GiftService = Depends(get_gift_service)):
    if not body.code or not body.code.strip():
        raise ValidationFailed("코인 코드를 입력해주세요.")
    gift = service.redeem(body.code)
    return RegisterResult(
        success=True,
        message="코인이 성공적으로 등록되었습니다!",
        gift=RegisteredGift(id=gift.id, amount=gift.amount, sender_name=gift.sender_name),
    )


# 5. 用 id 或兌換碼查詢單一禮物
@router.get("/{gift_id}", response_model=GiftRead)
def get_gift(gift_id: str, service: GiftService = Depends(get_gift_service)):
    return service.to_read(service.get_gift(gift_id))


# 6. 部分更新 (感謝訊息 / 管理者改狀態)
@router.patch("/{gift_id}", response_model=GiftRead)
def update_gift(
    gift_id: str,
    gift_in: GiftUpdate,
    service: GiftService = Depends(get_gift_service),
    current_admin: Optional[str] = Depends(get_optional_admin),
):
    if not gift_in.model_fields_set:
        raise ValidationFailed(MSG_REQUIRED)
    gift = service.update_gift(gift_id, gift_in, is_admin=current_admin is not None)
    return service.to_read(gift)
