from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from db.database import Base
from models.user import utcnow


class WritingEntry(Base):
    """One tool invocation on a piece of text, plus whatever results it produced."""

    __tablename__ = "writing_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False, default="Untitled")
    input_text = Column(Text, nullable=False)
    grammar_result = Column(JSON, nullable=True)
    paraphrase_result = Column(JSON, nullable=True)
    ai_check_result = Column(JSON, nullable=True)
    humanizer_result = Column(JSON, nullable=True)
    is_favorite = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="writing_entries")
