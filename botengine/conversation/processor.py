"""
botengine/conversation/processor.py — Chat pass-through to the LLM provider.

  handle_message(persona_id, message, session_id, db) → ChatReply

The session store keeps the last MAX_HISTORY_MESSAGES turns per session so
follow-up questions carry context. No dialogue logic lives here.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from botengine.conversation.prompt_templates import PERSONA_CHAT_PROMPT
from botengine.conversation.utils import (
    build_chat_llm,
    chat_configured,
    history_to_messages,
    reply_text,
    truncate_for_context,
)
from botengine.db import repository
from botengine.pricing import personas

logger = logging.getLogger(__name__)

MAX_HISTORY_MESSAGES = 20
MAX_MESSAGE_CHARS = 1000


class ChatUnavailableError(RuntimeError):
    """Raised when no LLM provider key is configured."""


@dataclass
class ChatReply:
    reply: str
    session_id: str
    turns: int                      # stored turns after this exchange


def handle_message(
    persona_id: str,
    message: str,
    session_id: str,
    db: Session,
    client_id: Optional[str] = None,
) -> ChatReply:
    """
    Send one user message to the persona and store the exchange.

    Raises:
        ChatUnavailableError: If OPENROUTER_API_KEY is not set.
    """
    if not chat_configured():
        raise ChatUnavailableError("Chat is not configured")

    history = repository.get_chat_history(db, session_id, client_id)
    logger.info("Chat message — session=%s persona=%s history=%d", session_id, persona_id, len(history))

    chain = PERSONA_CHAT_PROMPT | build_chat_llm(temperature=0.5)
    response = chain.invoke({
        "persona_name": personas.display_name(persona_id),
        "persona_expertise": personas.expertise(persona_id),
        "history": history_to_messages(history),
        "message": truncate_for_context(message, max_chars=MAX_MESSAGE_CHARS),
    })
    reply = reply_text(response)

    history = (history + [
        {"role": "user", "content": message},
        {"role": "assistant", "content": reply},
    ])[-MAX_HISTORY_MESSAGES:]
    repository.save_chat_history(db, session_id, history, client_id=client_id, persona=persona_id)
    db.commit()

    return ChatReply(reply=reply, session_id=session_id, turns=len(history))
