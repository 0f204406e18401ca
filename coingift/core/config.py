# coingift/core/config.py

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./coin_gift.db"

    # --- 管理者登入 (JWT) ---
    SECRET_KEY: str = "CHANGE_THIS_TO_A_SUPER_SECRET_KEY"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    ADMIN_USERNAME: str = "admin"
    # passlib bcrypt hash，空字串代表關閉管理者登入
    ADMIN_PASSWORD_HASH: str = ""

    # --- 禮物規則 ---
    GIFT_MIN_AMOUNT: int = 1000
    # 上限必須小於 DB INTEGER (64-bit)
    GIFT_MAX_AMOUNT: int = 10_000_000
    GIFT_EXPIRE_DAYS: int = 30
    GIFT_AMOUNT_PRESETS: List[int] = [10000, 30000, 50000, 100000, 1000000]
    CODE_MAX_ATTEMPTS: int = 5

    # 0 = 不啟動背景過期掃描
    SWEEP_INTERVAL_SECONDS: int = 0

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    CORS_ORIGINS: List[str] = ["*"]

    # .env 檔案就在執行指令的那個資料夾
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# 建立一個全域實例
settings = Settings()
