# coingift/common/errors.py

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class GiftError(Exception):
    """所有業務錯誤的基底，訊息直接顯示給使用者看。"""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(GiftError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFound(GiftError):
    status_code = status.HTTP_404_NOT_FOUND


class StateConflict(GiftError):
    status_code = status.HTTP_409_CONFLICT


class Forbidden(GiftError):
    status_code = status.HTTP_403_FORBIDDEN


# --- 使用者看到的訊息 ---
MSG_REQUIRED = "필수 항목을 입력해주세요."
MSG_GIFT_NOT_FOUND = "선물을 찾을 수 없습니다."
MSG_INVALID_CODE = "유효하지 않은 코인 코드입니다."
MSG_ALREADY_REGISTERED = "이미 등록된 코인 코드입니다."
MSG_REFUNDED = "환불된 코인 코드입니다."
MSG_EXPIRED = "만료된 코인 코드입니다."
MSG_NOT_PAID = "결제가 완료되지 않은 선물입니다."
MSG_PAYMENT_NOT_FOUND = "결제를 찾을 수 없습니다."


def _error(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def gift_error_handler(request: Request, exc: GiftError) -> JSONResponse:
    return _error(exc.status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # 型別不對 (例如 amount 不是數字) 也當成輸入錯誤，回 400
    return _error(status.HTTP_400_BAD_REQUEST, MSG_REQUIRED)


def register_error_handlers(app) -> None:
    app.add_exception_handler(GiftError, gift_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
