from models.user import User
from models.writing_entry import WritingEntry
from models.chat import ChatMessage, ChatSession

__all__ = ["User", "WritingEntry", "ChatSession", "ChatMessage"]
