# coingift/services/sweeper.py

import asyncio

from starlette.concurrency import run_in_threadpool

from coingift.common.lifecycle import utcnow
from coingift.core.logging import get_logger
from coingift.db.session import SessionLocal
from coingift.services.gift_service import GiftService
from coingift.services.gift_store import SqlGiftStore

logger = get_logger(__name__)


def run_sweep_once(session_factory=SessionLocal, clock=utcnow):
    db = session_factory()
    try:
        return GiftService(SqlGiftStore(db), clock=clock).sweep()
    finally:
        db.close()


async def sweep_forever(interval_seconds: int, session_factory=SessionLocal):
    """背景迴圈：每 interval_seconds 秒掃描一次過期禮物，直到被 cancel。"""
    while True:
        try:
            await run_in_threadpool(run_sweep_once, session_factory)
        except Exception:
            # 單次失敗只記錄，下一輪再試
            logger.exception("gift_sweep_failed")
        await asyncio.sleep(interval_seconds)
