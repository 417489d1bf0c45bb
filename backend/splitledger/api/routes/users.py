"""
User management routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.schemas.user import UserCreate, UserUpdate, UserResponse, UserBalancesResponse
from splitledger.schemas.event import SplitResponse
from splitledger.schemas.payment import TransactionResponse
from splitledger.models.user import User
from splitledger.api.dependencies import get_current_user
from splitledger.services import balance_service, payment_service, user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: Session = Depends(get_db)):
    """Register a user already known to the identity provider."""
    return user_service.register_user(db, username=user_data.username, email=user_data.email)


@router.get("", response_model=List[UserResponse])
async def list_users(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all users."""
    return user_service.list_users(db)


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.get("/me/balances", response_model=UserBalancesResponse)
async def get_my_balances(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """You-owe, owed-to-you and net balance of the caller."""
    return balance_service.get_user_balances(db, current_user.id)


@router.get("/search", response_model=UserResponse)
async def search_user(
    username: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Find a user by exact username."""
    return user_service.search_by_username(db, username)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get user by ID."""
    return user_service.get_user(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    user_data: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Edit your own profile."""
    return user_service.update_user(
        db, user_id, caller_id=current_user.id,
        username=user_data.username, email=user_data.email
    )


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete your own account; rejected while the ledger references it."""
    user_service.delete_user(db, user_id, caller_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}/balances", response_model=UserBalancesResponse)
async def get_user_balances(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """You-owe, owed-to-you and net balance of a user."""
    return balance_service.get_user_balances(db, user_id)


@router.get("/{user_id}/debitors", response_model=List[SplitResponse])
async def list_user_debitors(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All splits assigned to a user."""
    return user_service.user_splits(db, user_id)


@router.get("/{user_id}/transactions", response_model=List[TransactionResponse])
async def list_user_transactions(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Payments a user made or received."""
    return [
        TransactionResponse.from_model(tx)
        for tx in payment_service.list_user_transactions(db, user_id)
    ]
