"""
User service: registration, profile edits and guarded deletion.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from splitledger.core.errors import Forbidden, InvalidInput, NotFound
from splitledger.models.event import Split
from splitledger.models.user import User
from splitledger.services import store

logger = logging.getLogger(__name__)


def _clean_username(username: Optional[str]) -> Optional[str]:
    if username is None:
        return None
    username = username.strip()
    if not username:
        raise InvalidInput("Username must not be empty")
    return username


def register_user(db: Session, username: str, email: str) -> User:
    """Create the ledger record for a user registered with the identity provider."""
    user = store.create_user(db, username=_clean_username(username), email=email.strip().lower())
    store.commit(db)
    logger.info(f"Registered user {user.id} '{user.username}'")
    return user


def get_user(db: Session, user_id: int) -> User:
    return store.get_user(db, user_id)


def list_users(db: Session) -> List[User]:
    return store.list_users(db)


def search_by_username(db: Session, username: str) -> User:
    user = store.get_user_by_username(db, (username or "").strip())
    if not user:
        raise NotFound("User not found")
    return user


def update_user(
    db: Session,
    user_id: int,
    caller_id: int,
    username: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    if user_id != caller_id:
        raise Forbidden("You can only edit your own profile")
    user = store.get_user(db, user_id)
    store.update_user(
        db,
        user,
        username=_clean_username(username),
        email=email.strip().lower() if email is not None else None,
    )
    store.commit(db)
    logger.info(f"Updated profile of user {user_id}")
    return user


def delete_user(db: Session, user_id: int, caller_id: int) -> None:
    """Delete a user that nothing references; otherwise Conflict."""
    if user_id != caller_id:
        raise Forbidden("You can only delete your own account")
    user = store.get_user(db, user_id)
    store.delete_user(db, user)
    store.commit(db)
    logger.info(f"Deleted user {user_id}")


def user_splits(db: Session, user_id: int) -> List[Split]:
    store.get_user(db, user_id)
    return store.list_splits_for_user(db, user_id)
