"""Request/response models for the persistence endpoints.

Attributes mirror the ORM columns; JSON uses camelCase aliases.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class UserRead(CamelModel):
    id: int
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime


class WritingEntryCreate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    input_text: str = Field(min_length=1)
    grammar_result: Optional[Any] = None
    paraphrase_result: Optional[Any] = None
    ai_check_result: Optional[Any] = None
    humanizer_result: Optional[Any] = None
    is_favorite: bool = False


class WritingEntryUpdate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    input_text: Optional[str] = Field(default=None, min_length=1)
    grammar_result: Optional[Any] = None
    paraphrase_result: Optional[Any] = None
    ai_check_result: Optional[Any] = None
    humanizer_result: Optional[Any] = None
    is_favorite: Optional[bool] = None


class WritingEntryRead(CamelModel):
    id: int
    user_id: int
    title: str
    input_text: str
    grammar_result: Optional[Any] = None
    paraphrase_result: Optional[Any] = None
    ai_check_result: Optional[Any] = None
    humanizer_result: Optional[Any] = None
    is_favorite: bool
    created_at: datetime
    updated_at: datetime


class ChatSessionCreate(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)


class ChatSessionUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    is_favorite: Optional[bool] = None


class ChatSessionRead(CamelModel):
    id: int
    user_id: int
    title: str
    is_favorite: bool
    created_at: datetime
    updated_at: datetime


class ChatMessageCreate(CamelModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1)


class ChatMessageRead(CamelModel):
    id: int
    session_id: int
    role: str
    content: str
    timestamp: datetime


class ChatSessionDetail(ChatSessionRead):
    messages: List[ChatMessageRead] = Field(default_factory=list)


class SaveChatRequest(CamelModel):
    title: Optional[str] = Field(default=None, max_length=255)
    messages: List[ChatMessageCreate] = Field(min_length=1)
