"""
Natural-language answers for executed queries.

The composer never raises: service failures become a fixed apology and a
missing credential becomes an instruction naming the variables to set.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from ..config import Settings
from ..errors import CompositionFailure, ServiceError, ServiceUnavailable
from ..schemas import ConversationTurn
from ..utils.conversation_manager import build_conversation_context
from ..utils.logs import get_logger
from ..utils.response_formatting import summarize_results

logger = get_logger(__name__)

COMPOSITION_FALLBACK = (
    "I encountered an error while processing your request. "
    "Please try rephrasing your question."
)

RESPONSE_RULES = (
    "Provide a clear, conversational explanation of the results",
    "Highlight key insights and patterns",
    "Suggest follow-up questions if relevant",
    "Be concise but informative",
    "If the query returned data, summarize the findings",
    "If there was an error, explain it in user-friendly terms",
)

# Short glossary surfaced alongside answers that mention a category.
CATEGORY_KNOWLEDGE = {
    "electronics": "Electronics category includes smartphones, computers, tablets, and other electronic devices.",
    "furniture": "Furniture category includes home and office furniture items.",
    "home": "Home category includes home decor, kitchen items, and household goods.",
    "sports": "Sports category includes sports equipment and athletic gear.",
    "fashion": "Fashion category includes clothing, shoes, and accessories.",
}


def get_external_knowledge(message: str) -> Optional[str]:
    """Return the first category note whose name appears in the message."""
    m = (message or "").lower()
    for category, info in CATEGORY_KNOWLEDGE.items():
        if category in m:
            return info
    return None


def unavailable_reply(error: ServiceUnavailable) -> str:
    names = " or ".join(error.env_vars) or "an API key"
    return (
        "I apologize, but the AI service is not configured. "
        f"Please set {names} in your environment to enable chat functionality."
    )


def build_response_prompt(message: str, sql: Optional[str], rows: Optional[List[Dict[str, Any]]],
                          history: List[ConversationTurn], external_knowledge: Optional[str] = None,
                          sample_size: int = 3, history_turns: int = 20, line_chars: int = 100) -> str:
    rules = "\n".join(f"{i}. {rule}" for i, rule in enumerate(RESPONSE_RULES, start=1))
    context = f"Additional Context: {external_knowledge}\n\n" if external_knowledge else ""
    conversation = build_conversation_context(history, max_messages=history_turns, max_chars=line_chars)
    return (
        "You are a helpful AI assistant for an e-commerce data analytics platform.\n"
        "You help users understand their business data through natural language conversations.\n\n"
        f"{context}"
        f"You just executed this SQL query:\n{sql or '(no query)'}\n\n"
        f"Results: {summarize_results(rows, sample_size)}\n\n"
        f"Your task:\n{rules}\n\n"
        f"Conversation History:\n{conversation}\n\n"
        f"User Query: {message}\n\n"
        "Provide your response:"
    )


class ResponseComposer:
    def __init__(self, llm, settings: Settings):
        self.llm = llm
        self.settings = settings

    async def compose(self, message: str, sql: Optional[str], rows: Optional[List[Dict[str, Any]]],
                      history: List[ConversationTurn], external_knowledge: Optional[str] = None) -> str:
        prompt = build_response_prompt(
            message, sql, rows, history, external_knowledge,
            sample_size=self.settings.sample_rows,
            history_turns=self.settings.response_history_turns,
            line_chars=self.settings.history_line_chars,
        )
        try:
            return await self._complete(prompt, message)
        except ServiceUnavailable as e:
            return unavailable_reply(e)
        except CompositionFailure as e:
            logger.error(f"[compose_error] {e.message}")
            return COMPOSITION_FALLBACK
        except Exception as e:
            # The executed query and its rows must still reach the caller.
            logger.exception(f"[compose_error] unexpected: {e}")
            return COMPOSITION_FALLBACK

    async def _complete(self, prompt: str, message: str) -> str:
        try:
            text = await self.llm.chat([
                {"role": "system", "content": prompt},
                {"role": "user", "content": message},
            ])
        except ServiceError as e:
            raise CompositionFailure(e.message) from e
        if not text or not text.strip():
            raise CompositionFailure("empty response from the model")
        return text.strip()
