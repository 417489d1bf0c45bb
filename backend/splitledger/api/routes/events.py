"""
Event lifecycle routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List
from splitledger.db.session import get_db
from splitledger.models.user import User
from splitledger.schemas.event import EventCreate, EventResponse, DebitorCreate, SplitResponse
from splitledger.schemas.payment import TransactionResponse
from splitledger.api.dependencies import get_current_user
from splitledger.services import event_service, payment_service

router = APIRouter(prefix="/events", tags=["events"])


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Create an event split equally between the caller and the participants."""
    return event_service.create_event(
        db,
        title=event_data.title,
        total=event_data.total,
        creator_id=current_user.id,
        participants=event_data.participant_specs(),
    )


@router.get("", response_model=List[EventResponse])
async def list_events(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List all events, newest first."""
    return event_service.list_events(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get an event with its splits."""
    return event_service.get_event(db, event_id)


@router.post("/{event_id}/cancel", response_model=EventResponse)
async def cancel_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel an event (creator only, one-way)."""
    return event_service.cancel_event(db, event_id, caller_id=current_user.id)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete an event and its splits (creator only). Transactions are kept."""
    event_service.delete_event(db, event_id, caller_id=current_user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{event_id}/debitors", response_model=List[SplitResponse])
async def list_event_debitors(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Splits of an event with participant usernames."""
    return event_service.event_splits(db, event_id)


@router.post("/{event_id}/debitors", response_model=SplitResponse, status_code=status.HTTP_201_CREATED)
async def add_debitor(
    event_id: int,
    debitor_data: DebitorCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Add a participant to an active event (creator only)."""
    return event_service.add_participant(
        db,
        event_id,
        user_id=debitor_data.user_id,
        caller_id=current_user.id,
        included=debitor_data.included,
        deb_amount=debitor_data.deb_amount,
    )


@router.get("/{event_id}/transactions", response_model=List[TransactionResponse])
async def list_event_transactions(
    event_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Payments recorded against an event, including deleted ones."""
    return [
        TransactionResponse.from_model(tx)
        for tx in payment_service.list_event_transactions(db, event_id)
    ]
