from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from schemas.ai import MAX_MESSAGE_LENGTH


class ChatRequest(BaseModel):
    """Chat request model"""
    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    sessionId: Optional[int] = None  # omitted on the first turn
    stream: bool = False


class ChatResponse(BaseModel):
    response: str
    sessionId: int
    timestamp: datetime
