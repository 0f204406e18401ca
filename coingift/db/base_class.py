# coingift/db/base_class.py
import uuid

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def new_id() -> str:
    # 所有資料列都用 UUID 字串當主鍵
    return str(uuid.uuid4())
