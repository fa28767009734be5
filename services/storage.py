"""Persistence for users, writing entries, chat sessions and chat messages.

Every function takes a SQLAlchemy ``Session``. Missing rows raise
``RecordNotFound``; database failures are logged, rolled back and re-raised
as ``StorageError``.
"""
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, List, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import RecordNotFound, StorageError
from models import ChatMessage, ChatSession, User, WritingEntry
from schemas.storage import ChatMessageCreate, WritingEntryCreate, WritingEntryUpdate
from utils.chat_helpers import default_session_title

logger = logging.getLogger("Storage")

GUEST_USERNAME = "guest"


@contextmanager
def _db_errors(db: Session, action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error while trying to {action}: {e}", exc_info=True)
        raise StorageError(f"Could not {action}", cause=e) from e


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Users

def get_user(db: Session, user_id: int) -> User:
    with _db_errors(db, "load user"):
        user = db.get(User, user_id)
    if user is None:
        raise RecordNotFound("User", user_id)
    return user


def ensure_guest_user(db: Session) -> User:
    with _db_errors(db, "create guest user"):
        user = db.execute(select(User).where(User.username == GUEST_USERNAME)).scalar_one_or_none()
        if user is None:
            user = User(username=GUEST_USERNAME, full_name="Guest")
            db.add(user)
            db.commit()
            db.refresh(user)
    return user


# Writing entries

def list_writing_entries(db: Session, user_id: int) -> List[WritingEntry]:
    with _db_errors(db, "list writing entries"):
        stmt = (
            select(WritingEntry)
            .where(WritingEntry.user_id == user_id)
            .order_by(WritingEntry.updated_at.desc(), WritingEntry.id.desc())
        )
        return list(db.execute(stmt).scalars())


def get_writing_entry(db: Session, entry_id: int) -> WritingEntry:
    with _db_errors(db, "load writing entry"):
        entry = db.get(WritingEntry, entry_id)
    if entry is None:
        raise RecordNotFound("WritingEntry", entry_id)
    return entry


def create_writing_entry(db: Session, user_id: int, entry_in: WritingEntryCreate) -> WritingEntry:
    data = entry_in.model_dump()
    data["title"] = data.get("title") or "Untitled"
    with _db_errors(db, "create writing entry"):
        entry = WritingEntry(user_id=user_id, **data)
        db.add(entry)
        db.commit()
        db.refresh(entry)
    return entry


def update_writing_entry(db: Session, entry_id: int, entry_in: WritingEntryUpdate) -> WritingEntry:
    """Partial update: only fields present in the request are written."""
    entry = get_writing_entry(db, entry_id)
    changes = entry_in.model_dump(exclude_unset=True)
    with _db_errors(db, "update writing entry"):
        for field, value in changes.items():
            if field in ("title", "input_text", "is_favorite") and value is None:
                continue
            setattr(entry, field, value)
        entry.updated_at = _now()
        db.commit()
        db.refresh(entry)
    return entry


def delete_writing_entry(db: Session, entry_id: int) -> None:
    entry = get_writing_entry(db, entry_id)
    with _db_errors(db, "delete writing entry"):
        db.delete(entry)
        db.commit()


# Chat sessions

def list_chat_sessions(db: Session, user_id: int) -> List[ChatSession]:
    with _db_errors(db, "list chat sessions"):
        stmt = (
            select(ChatSession)
            .where(ChatSession.user_id == user_id)
            .order_by(ChatSession.updated_at.desc(), ChatSession.id.desc())
        )
        return list(db.execute(stmt).scalars())


def get_chat_session(db: Session, session_id: int) -> ChatSession:
    with _db_errors(db, "load chat session"):
        session = db.get(ChatSession, session_id)
    if session is None:
        raise RecordNotFound("ChatSession", session_id)
    return session


def create_chat_session(db: Session, user_id: int, title: Optional[str] = None) -> ChatSession:
    with _db_errors(db, "create chat session"):
        session = ChatSession(user_id=user_id, title=title or "New Chat")
        db.add(session)
        db.commit()
        db.refresh(session)
    return session


def update_chat_session(
    db: Session, session_id: int, title: Optional[str] = None, is_favorite: Optional[bool] = None
) -> ChatSession:
    session = get_chat_session(db, session_id)
    with _db_errors(db, "update chat session"):
        if title is not None:
            session.title = title
        if is_favorite is not None:
            session.is_favorite = is_favorite
        session.updated_at = _now()
        db.commit()
        db.refresh(session)
    return session


def delete_chat_session(db: Session, session_id: int) -> int:
    """Delete a session and its messages in one transaction. Returns the number of messages removed."""
    session = get_chat_session(db, session_id)
    with _db_errors(db, "delete chat session"):
        removed = db.execute(delete(ChatMessage).where(ChatMessage.session_id == session_id)).rowcount
        db.delete(session)
        db.commit()
    logger.info(f"Deleted chat session {session_id} with {removed} messages")
    return removed


# Chat messages

def list_chat_messages(db: Session, session_id: int) -> List[ChatMessage]:
    get_chat_session(db, session_id)
    with _db_errors(db, "list chat messages"):
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.timestamp.asc(), ChatMessage.id.asc())
        )
        return list(db.execute(stmt).scalars())


def create_chat_message(db: Session, session_id: int, role: str, content: str) -> ChatMessage:
    """Append a message and bump the session's ``updated_at``."""
    session = get_chat_session(db, session_id)
    with _db_errors(db, "save chat message"):
        now = _now()
        message = ChatMessage(session_id=session_id, role=role, content=content, timestamp=now)
        session.updated_at = now
        db.add(message)
        db.commit()
        db.refresh(message)
    return message


def save_chat(
    db: Session, user_id: int, title: Optional[str], messages: Sequence[ChatMessageCreate]
) -> ChatSession:
    """Store a whole conversation as a new session.

    Messages get strictly increasing timestamps so their order survives.
    """
    with _db_errors(db, "save chat"):
        session = ChatSession(user_id=user_id, title=title or default_session_title())
        db.add(session)
        db.flush()
        base = _now()
        for i, msg in enumerate(messages):
            db.add(ChatMessage(
                session_id=session.id,
                role=msg.role,
                content=msg.content,
                timestamp=base + timedelta(milliseconds=i),
            ))
        db.commit()
        db.refresh(session)
    return session
