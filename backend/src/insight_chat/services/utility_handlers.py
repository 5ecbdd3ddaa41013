"""Replies for messages that do not need a query: definitions, translations, small talk."""

from __future__ import annotations
from typing import List, Optional

from ..errors import ServiceError, ServiceUnavailable
from ..schemas import ConversationTurn
from ..utils.conversation_manager import history_as_messages
from ..utils.logs import get_logger
from .composer import COMPOSITION_FALLBACK, unavailable_reply

logger = get_logger(__name__)

DEFINITION_PROMPT = (
    "You are a helpful assistant. Provide clear, concise definitions for e-commerce and business terms."
)
TRANSLATION_PROMPT = (
    "You are a translation assistant. Translate text between languages as requested."
)
GENERAL_PROMPT = (
    "You are a helpful assistant for an e-commerce analytics platform. Answer questions about the "
    "business, data, or help users understand how to query the data."
)


class UtilityResponder:
    def __init__(self, llm):
        self.llm = llm

    async def define(self, message: str, external_knowledge: Optional[str] = None) -> str:
        if external_knowledge:
            return external_knowledge
        return await self._ask([
            {"role": "system", "content": DEFINITION_PROMPT},
            {"role": "user", "content": message},
        ])

    async def translate(self, message: str) -> str:
        return await self._ask([
            {"role": "system", "content": TRANSLATION_PROMPT},
            {"role": "user", "content": message},
        ])

    async def converse(self, message: str, history: List[ConversationTurn]) -> str:
        return await self._ask([
            {"role": "system", "content": GENERAL_PROMPT},
            *history_as_messages(history),
            {"role": "user", "content": message},
        ])

    async def _ask(self, messages) -> str:
        # No model fallback here; only SQL generation walks the fallback list.
        try:
            text = await self.llm.chat(messages)
        except ServiceUnavailable as e:
            return unavailable_reply(e)
        except ServiceError as e:
            logger.error(f"[utility_error] {e.message}")
            return COMPOSITION_FALLBACK
        return text.strip() if text and text.strip() else COMPOSITION_FALLBACK
