# coingift/main.py

import asyncio
import contextlib
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coingift.common.errors import register_error_handlers
from coingift.core.config import settings
from coingift.core.logging import get_logger, setup_logging
from coingift.db.base_class import Base
from coingift.db.session import engine

# 引用所有 Model，讓 SQLAlchemy 知道要建哪些表
from coingift.models import conversation, gift  # noqa: F401
from coingift.routers import admin, auth, cash, conversations, gifts, payments
from coingift.services.sweeper import sweep_forever

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 啟動時自動檢查並建立缺少的表格
    Base.metadata.create_all(bind=engine)

    sweeper = None
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        sweeper = asyncio.create_task(sweep_forever(settings.SWEEP_INTERVAL_SECONDS))
        logger.info("gift_sweeper_started", interval=settings.SWEEP_INTERVAL_SECONDS)

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper


app = FastAPI(title="Coin Gift API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# 註冊路由
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(gifts.router, prefix="/api/v1/gifts", tags=["gifts"])
app.include_router(payments.router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(cash.router, prefix="/api/v1/cash", tags=["cash"])
app.include_router(conversations.router, prefix="/api/v1/conversations", tags=["conversations"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])


@app.get("/")
def read_root():
    return {"message": "Coin Gift API is running!"}
