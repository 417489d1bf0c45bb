"""
Transaction history routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.schemas.payment import TransactionResponse
from splitledger.api.dependencies import get_current_user
from splitledger.services import payment_service

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("", response_model=List[TransactionResponse])
async def list_transactions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All recorded payments, newest first."""
    return [TransactionResponse.from_model(tx) for tx in payment_service.list_transactions(db)]
