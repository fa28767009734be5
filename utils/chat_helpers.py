"""
Chat Helpers
Utility functions for chat message processing and history management.
"""

import re
from datetime import datetime
from typing import Dict, List, Optional

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful writing assistant. You help users improve their writing: "
    "grammar, clarity, tone, structure and style. Keep answers focused and practical."
)
MAX_HISTORY_MESSAGES = 7

GREETING_RE = re.compile(r"^(hi|hello|hey|greetings|hi there|hello there)\b")
THANKS_RE = re.compile(r"^(thanks|thank you|thx)\b")

GREETING_REPLY = (
    "Hello! I'm your writing assistant. I can help with grammar checking, paraphrasing, "
    "humanizing text, content creation, and more. What type of writing help do you need today?"
)
THANKS_REPLY = "You're welcome! Is there anything else you'd like help with?"


def quick_reply(messages: List[Dict]) -> Optional[str]:
    """
    Canned answer for short greetings and thanks.

    Args:
        messages: Chat history as role/content dicts

    Returns:
        The reply, or None when the last user message needs a real model
    """
    last_user = next((m["content"] for m in reversed(messages) if m.get("role") == "user"), "")
    normalized = last_user.strip().lower()
    if not normalized or len(normalized) >= 15:
        return None
    if GREETING_RE.match(normalized):
        return GREETING_REPLY
    if THANKS_RE.match(normalized):
        return THANKS_REPLY
    return None


def sanitize_messages(messages: List[Dict], limit: int = MAX_HISTORY_MESSAGES) -> tuple[str, List[Dict]]:
    """
    Shape a chat history for providers that require strict user/assistant turns.

    System messages are folded into the system prompt, consecutive messages of
    the same role are merged, the history starts and ends with a user turn and
    only the last ``limit`` turns are kept.

    Args:
        messages: Chat history as role/content dicts
        limit: Maximum number of turns to keep

    Returns:
        (system_prompt, turns)
    """
    system_parts = [m["content"] for m in messages if m.get("role") == "system" and m.get("content")]
    system_prompt = "\n\n".join(system_parts) if system_parts else DEFAULT_SYSTEM_PROMPT

    turns: List[Dict] = []
    for msg in messages:
        role = msg.get("role")
        content = (msg.get("content") or "").strip()
        if role not in ("user", "assistant") or not content:
            continue
        if turns and turns[-1]["role"] == role:
            turns[-1]["content"] += "\n\n" + content
        else:
            turns.append({"role": role, "content": content})

    if not turns or turns[0]["role"] != "user":
        turns.insert(0, {"role": "user", "content": "Hello"})
    if turns[-1]["role"] != "user":
        turns.append({"role": "user", "content": "Please continue."})

    if len(turns) > limit:
        turns = turns[-limit:]
        if turns[0]["role"] != "user":
            turns = turns[1:]
    return system_prompt, turns


def default_session_title(first_message: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Title for a new session: the start of the first message, else a dated name."""
    if first_message and first_message.strip():
        title = " ".join(first_message.split())
        return title if len(title) <= 50 else title[:47].rstrip() + "..."
    now = now or datetime.now()
    return f"Chat {now:%Y-%m-%d %H:%M}"
