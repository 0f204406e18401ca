# coingift/routers/payments.py

from fastapi import APIRouter, Depends

from coingift.common.deps import get_payment_service
from coingift.models.payment import PaymentCompleted, PaymentCreate, PaymentRead
from coingift.services.payment_service import PaymentService

router = APIRouter()


@router.post("", response_model=PaymentRead)
def create_payment(payment_in: PaymentCreate, service: PaymentService = Depends(get_payment_service)):
    return service.create_payment(payment_in)


# 模擬付款完成的回呼
@router.post("/{payment_id}/complete", response_model=PaymentCompleted)
def complete_payment(payment_id: str, service: PaymentService = Depends(get_payment_service)):
    return service.complete_payment(payment_id)
