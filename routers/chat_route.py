import json
import logging
from typing import Dict, Iterator, List

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.deps import ensure_owner, get_current_user, get_dispatcher
from core.exceptions import ProviderError, RecordNotFound, StorageError
from db.database import SessionLocal, get_db
from models import User
from routers.ai import NDJSON
from schemas.chat import ChatRequest, ChatResponse
from services import storage
from services.dispatcher import ModeDispatcher
from utils.chat_helpers import default_session_title

router = APIRouter()
logger = logging.getLogger("ChatRouter")


def stream_and_save(dispatcher: ModeDispatcher, messages: List[Dict], session_id: int) -> Iterator[str]:
    """Stream the reply, then store it before the response closes.

    The last line reports whether the reply was saved.
    """
    parts: List[str] = []
    try:
        for chunk in dispatcher.stream_chat(messages):
            parts.append(chunk)
            yield json.dumps({"response": chunk}) + "\n"
    except ProviderError as e:
        logger.error(f"Chat stream for session {session_id} failed: {e}")
        yield json.dumps({"error": "Chat response failed", "message": e.message}) + "\n"
        yield json.dumps({"saved": False, "sessionId": session_id}) + "\n"
        return

    # The request-scoped session may already be closed once streaming starts.
    try:
        with SessionLocal() as db:
            message = storage.create_chat_message(db, session_id, "assistant", "".join(parts))
    except (StorageError, RecordNotFound) as e:
        logger.error(f"Streamed reply for session {session_id} was not saved: {e}")
        yield json.dumps({"saved": False, "sessionId": session_id, "message": "Reply could not be saved"}) + "\n"
        return
    yield json.dumps({"saved": True, "sessionId": session_id, "messageId": message.id}) + "\n"


# Chat Route
@router.post("/chat", tags=["Chat"])
def chat_endpoint(
    request: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    dispatcher: ModeDispatcher = Depends(get_dispatcher),
):
    """
    Stateful chat: history comes from the stored session, and both sides of
    the turn are saved. Omit ``sessionId`` to start a new session.
    """
    if request.sessionId is not None:
        session = storage.get_chat_session(db, request.sessionId)
        ensure_owner(session, current_user)
    else:
        session = storage.create_chat_session(db, current_user.id, default_session_title(request.message))
        logger.info(f"Started chat session {session.id} for user {current_user.id}")

    history = [{"role": m.role, "content": m.content} for m in storage.list_chat_messages(db, session.id)]
    storage.create_chat_message(db, session.id, "user", request.message)
    messages = history + [{"role": "user", "content": request.message}]
    logger.info(f"Chat turn in session {session.id} ({len(messages)} messages)")

    if request.stream:
        return StreamingResponse(
            stream_and_save(dispatcher, messages, session.id),
            media_type=NDJSON,
            headers={"X-Session-Id": str(session.id)},
        )

    reply = dispatcher.chat(messages)
    saved = storage.create_chat_message(db, session.id, "assistant", reply)
    return ChatResponse(response=reply, sessionId=session.id, timestamp=saved.timestamp)
