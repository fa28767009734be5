"""Reusable FastAPI dependency functions."""
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from core.exceptions import RecordNotFound
from db.database import get_db
from models import User
from services.dispatcher import ModeDispatcher
from services.storage import ensure_guest_user, get_user


def get_dispatcher(request: Request) -> ModeDispatcher:
    """The dispatcher built once at startup."""
    return request.app.state.dispatcher


def get_current_user(
    x_user_id: Optional[int] = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the acting user.

    Authentication happens upstream; it forwards the user id in ``X-User-Id``.
    Requests without it act as the guest user.
    """
    if x_user_id is None:
        return ensure_guest_user(db)
    try:
        return get_user(db, x_user_id)
    except RecordNotFound:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")


def ensure_owner(record, user: User) -> None:
    if record.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
