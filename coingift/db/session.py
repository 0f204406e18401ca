# coingift/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from coingift.core.config import settings

# SQLite 需要允許跨執行緒使用同一個連線 (FastAPI 的 threadpool)
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
