"""Request models for the writing tools and the unified AI endpoint."""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

TEXT_MIN_LENGTH = 3
TEXT_MAX_LENGTH = 10_000
MAX_CHAT_MESSAGES = 50
MAX_MESSAGE_LENGTH = 4_000

Mode = Literal["grammar", "paraphrase", "humanize", "aicheck", "chat"]
Style = Literal["standard", "formal", "fluency", "academic", "custom"]
STYLES = ("standard", "formal", "fluency", "academic", "custom")
TEXT_MODES = ("grammar", "paraphrase", "humanize", "aicheck")


def coerce_style(value):
    """Unknown or empty styles fall back to 'standard'."""
    if isinstance(value, str) and value.lower() in STYLES:
        return value.lower()
    return "standard"


class ChatMessageIn(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)


class TextRequest(BaseModel):
    text: str = Field(min_length=TEXT_MIN_LENGTH, max_length=TEXT_MAX_LENGTH)


class GrammarCheckRequest(TextRequest):
    language: Optional[str] = None


class StyledTextRequest(TextRequest):
    style: Style = "standard"
    customTone: Optional[str] = Field(default=None, max_length=200)

    @field_validator("style", mode="before")
    @classmethod
    def default_style(cls, value):
        return coerce_style(value)


class GenerateWritingRequest(BaseModel):
    instructions: str = Field(min_length=1, max_length=TEXT_MAX_LENGTH)
    sample: Optional[str] = Field(default=None, max_length=TEXT_MAX_LENGTH)
    references: Optional[str] = None
    length: Optional[str] = None
    style: Optional[str] = None
    format: Optional[str] = None


class AIRequest(BaseModel):
    """Unified request for /ai/process.

    ``text`` is required for the text modes, ``messages`` for chat.
    """

    mode: Mode
    text: Optional[str] = Field(default=None, min_length=TEXT_MIN_LENGTH, max_length=TEXT_MAX_LENGTH)
    style: Style = "standard"
    customTone: Optional[str] = Field(default=None, max_length=200)
    language: Optional[str] = None
    messages: Optional[List[ChatMessageIn]] = Field(default=None, min_length=1, max_length=MAX_CHAT_MESSAGES)
    stream: bool = False

    @field_validator("style", mode="before")
    @classmethod
    def default_style(cls, value):
        return coerce_style(value)

    @model_validator(mode="after")
    def check_mode_fields(self) -> "AIRequest":
        if self.mode in TEXT_MODES and self.text is None:
            raise ValueError(f"text is required for mode '{self.mode}'")
        if self.mode == "chat" and not self.messages:
            raise ValueError("messages are required for mode 'chat'")
        return self
