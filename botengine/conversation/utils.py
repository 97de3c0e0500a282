"""
botengine/conversation/utils.py — Helpers around the chat LLM.

Provides:
  - chat_configured()       : whether an OpenRouter key is set
  - build_chat_llm()        : ChatOpenAI client pointed at OpenRouter
  - history_to_messages()   : stored session turns → LangChain messages
  - reply_text()            : plain text of an LLM response
  - truncate_for_context()  : trim user input before it reaches the prompt
"""

import logging
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_openai import ChatOpenAI

from botengine.config import settings

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def chat_configured() -> bool:
    return bool(settings.openrouter_api_key)


def build_chat_llm(temperature: float = 0.5) -> ChatOpenAI:
    """ChatOpenAI over OpenRouter using settings.openrouter_model."""
    logger.debug("Building chat LLM (model=%s, temperature=%.1f)", settings.openrouter_model, temperature)
    return ChatOpenAI(
        model=settings.openrouter_model,
        api_key=settings.openrouter_api_key,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
        max_retries=3,
        default_headers={"X-Title": "Bot Engine"},
    )


def history_to_messages(history: list[dict]) -> list[BaseMessage]:
    """[{role, content}, ...] → HumanMessage / AIMessage. Unknown roles count as the user."""
    messages: list[BaseMessage] = []
    for turn in history:
        content = turn.get("content", "")
        if turn.get("role") == "assistant":
            messages.append(AIMessage(content=content))
        else:
            messages.append(HumanMessage(content=content))
    return messages


def reply_text(response: Any) -> str:
    content = response.content if hasattr(response, "content") else response
    return str(content).strip()


def truncate_for_context(text: str, max_chars: int = 2000) -> str:
    """Trim to max_chars, appending '...' when something was cut."""
    if not text or len(text) <= max_chars:
        return text or ""
    return text[:max_chars] + "..."
