"""
Payment routes.
"""
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session
from typing import Optional
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.schemas.event import SplitResponse
from splitledger.schemas.payment import PaymentCreate, PaymentResponse, TransactionResponse
from splitledger.api.dependencies import get_current_user
from splitledger.services import payment_service

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/pay", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def pay_debitor(
    payment: PaymentCreate,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Pay all or part of a debitor's remaining share."""
    result = payment_service.pay(
        db,
        debitor_id=payment.debitor_id,
        payer_user_id=payment.payer_user_id or current_user.id,
        amount=payment.amount,
        caller_id=current_user.id,
        note=payment.note,
        idempotency_key=payment.idempotency_key or idempotency_key,
    )
    return PaymentResponse(
        transaction=TransactionResponse.from_model(result.transaction),
        split=SplitResponse.model_validate(result.split),
        replayed=result.replayed,
    )
