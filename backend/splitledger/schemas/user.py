"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from decimal import Decimal


class UserBase(BaseModel):
    """Base user schema."""
    username: str
    email: EmailStr


class UserCreate(UserBase):
    """Schema for registering a user with the ledger."""
    pass


class UserUpdate(BaseModel):
    """Schema for profile edits."""
    username: Optional[str] = None
    email: Optional[EmailStr] = None


class UserResponse(UserBase):
    """Schema for user response."""
    id: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserBalancesResponse(BaseModel):
    """Derived balances of a user, recomputed on every request."""
    user_id: int
    you_owe: Decimal
    owed_to_you: Decimal
    net: Decimal

    class Config:
        from_attributes = True
