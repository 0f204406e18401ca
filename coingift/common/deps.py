# coingift/common/deps.py

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from coingift.common.lifecycle import utcnow
from coingift.core.config import settings
from coingift.core.logging import get_logger
from coingift.core.security import decode_access_token
from coingift.db.session import get_db
from coingift.services.cash_service import CashService
from coingift.services.chat_service import ChatService
from coingift.services.chat_store import ChatStore
from coingift.services.gift_service import GiftService
from coingift.services.gift_store import SqlGiftStore
from coingift.services.payment_service import PaymentService

logger = get_logger(__name__)

# 定義登入網址；auto_error=False 讓一般使用者也能呼叫同一支 API
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


def get_clock():
    # 測試時可以用 dependency_overrides 換成固定時間
    return utcnow


def get_gift_store(db: Session = Depends(get_db)) -> SqlGiftStore:
    return SqlGiftStore(db=db)


def get_gift_service(store: SqlGiftStore = Depends(get_gift_store), clock=Depends(get_clock)) -> GiftService:
    return GiftService(store=store, clock=clock)


def get_payment_service(store: SqlGiftStore = Depends(get_gift_store)) -> PaymentService:
    return PaymentService(store=store)


def get_cash_service(store: SqlGiftStore = Depends(get_gift_store)) -> CashService:
    return CashService(store=store)


def get_chat_service(db: Session = Depends(get_db), clock=Depends(get_clock)) -> ChatService:
    return ChatService(store=ChatStore(db=db), clock=clock)


def get_optional_admin(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """有帶合法的管理者 token 就回傳帳號；沒帶、過期或不合法都當一般使用者，回 None。"""
    if not token:
        return None

    try:
        payload = decode_access_token(token)
    except JWTError:
        logger.info("admin_token_rejected")
        return None

    username = payload.get("sub")
    if username is None or username != settings.ADMIN_USERNAME:
        logger.info("admin_token_rejected", sub=username)
        return None
    return username


def get_current_admin(admin: Optional[str] = Depends(get_optional_admin)) -> str:
    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return admin
