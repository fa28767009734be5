import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from core.deps import ensure_owner, get_current_user
from db.database import get_db
from models import User
from schemas.storage import (
    ChatMessageCreate,
    ChatMessageRead,
    ChatSessionCreate,
    ChatSessionDetail,
    ChatSessionRead,
    ChatSessionUpdate,
    SaveChatRequest,
    UserRead,
    WritingEntryCreate,
    WritingEntryRead,
    WritingEntryUpdate,
)
from services import storage

router = APIRouter(prefix="/db")
logger = logging.getLogger("StorageRouter")


# Current user

@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user


# Writing entries

@router.get("/writing-entries", response_model=List[WritingEntryRead])
def list_writing_entries(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return storage.list_writing_entries(db, current_user.id)


@router.post("/writing-entries", response_model=WritingEntryRead, status_code=status.HTTP_201_CREATED)
def create_writing_entry(
    entry_in: WritingEntryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    entry = storage.create_writing_entry(db, current_user.id, entry_in)
    logger.info(f"Created writing entry {entry.id} for user {current_user.id}")
    return entry


@router.get("/writing-entries/{entry_id}", response_model=WritingEntryRead)
def get_writing_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    entry = storage.get_writing_entry(db, entry_id)
    ensure_owner(entry, current_user)
    return entry


@router.patch("/writing-entries/{entry_id}", response_model=WritingEntryRead)
def update_writing_entry(
    entry_id: int,
    entry_in: WritingEntryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_owner(storage.get_writing_entry(db, entry_id), current_user)
    return storage.update_writing_entry(db, entry_id, entry_in)


@router.delete("/writing-entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_writing_entry(entry_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_owner(storage.get_writing_entry(db, entry_id), current_user)
    storage.delete_writing_entry(db, entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# Chat sessions

@router.get("/chat-sessions", response_model=List[ChatSessionRead])
def list_chat_sessions(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return storage.list_chat_sessions(db, current_user.id)


@router.post("/chat-sessions", response_model=ChatSessionRead, status_code=status.HTTP_201_CREATED)
def create_chat_session(
    session_in: ChatSessionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return storage.create_chat_session(db, current_user.id, session_in.title)


@router.get("/chat-sessions/{session_id}", response_model=ChatSessionDetail)
def get_chat_session(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    session = storage.get_chat_session(db, session_id)
    ensure_owner(session, current_user)
    detail = ChatSessionDetail.model_validate(session)
    detail.messages = [ChatMessageRead.model_validate(m) for m in storage.list_chat_messages(db, session_id)]
    return detail


@router.patch("/chat-sessions/{session_id}", response_model=ChatSessionRead)
def update_chat_session(
    session_id: int,
    session_in: ChatSessionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_owner(storage.get_chat_session(db, session_id), current_user)
    return storage.update_chat_session(db, session_id, session_in.title, session_in.is_favorite)


@router.delete("/chat-sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_chat_session(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_owner(storage.get_chat_session(db, session_id), current_user)
    storage.delete_chat_session(db, session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/chat-sessions/{session_id}/messages", response_model=List[ChatMessageRead])
def list_chat_messages(session_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_owner(storage.get_chat_session(db, session_id), current_user)
    return storage.list_chat_messages(db, session_id)


@router.post(
    "/chat-sessions/{session_id}/messages",
    response_model=ChatMessageRead,
    status_code=status.HTTP_201_CREATED,
)
def create_chat_message(
    session_id: int,
    message_in: ChatMessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_owner(storage.get_chat_session(db, session_id), current_user)
    return storage.create_chat_message(db, session_id, message_in.role, message_in.content)


@router.post("/save-chat", response_model=ChatSessionDetail, status_code=status.HTTP_201_CREATED)
def save_chat(request: SaveChatRequest, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Store a finished conversation as a new session in one go."""
    session = storage.save_chat(db, current_user.id, request.title, request.messages)
    logger.info(f"Saved chat session {session.id} with {len(request.messages)} messages")
    detail = ChatSessionDetail.model_validate(session)
    detail.messages = [ChatMessageRead.model_validate(m) for m in storage.list_chat_messages(db, session.id)]
    return detail
