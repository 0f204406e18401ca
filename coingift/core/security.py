# coingift/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Union

from jose import jwt
from passlib.context import CryptContext

from coingift.core.config import settings

# 設定密碼加密方式為 bcrypt
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _truncate(password: str) -> str:
    """
    Bcrypt 有一個硬性限制：密碼不能超過 72 bytes。
    超過的部分直接截斷，雜湊與驗證兩邊都用同一套規則。
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 71:
        return password_bytes[:71].decode("utf-8", errors="ignore")
    return password


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not hashed_password:
        return False
    return pwd_context.verify(_truncate(plain_password), hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(_truncate(password))


def authenticate_admin(username: str, password: str) -> bool:
    if username != settings.ADMIN_USERNAME:
        return False
    return verify_password(password, settings.ADMIN_PASSWORD_HASH)


def create_access_token(data: dict, expires_delta: Union[timedelta, None] = None) -> str:
    """
    製作 JWT 識別證 (Token)
    """
    to_encode = data.copy()
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    # 失敗時由 jose 丟出 JWTError，交給呼叫端處理
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
