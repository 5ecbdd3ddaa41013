"""
Chat agent: one user message in, one answer bundle out.

Data questions go through translate -> execute -> shape -> compose; other
messages go to the utility responders. Errors never leave
``process_interaction``; they become a textual reply.
"""

from __future__ import annotations
from typing import Optional

from ..config import Settings
from ..errors import ExecutionFailure, InsightChatError, ServiceUnavailable, TranslationFailure
from ..schemas import DEFAULT_SESSION_ID, ConversationTurn, InteractionResult
from ..utils.conversation_manager import SessionStore
from ..utils.logs import get_logger
from ..utils.query_detection import QueryIntent, classify_query
from ..utils.response_formatting import build_visualization
from ..utils.sql_generation import QueryTranslator
from .composer import ResponseComposer, get_external_knowledge, unavailable_reply
from .query_executor import QueryExecutor
from .recovery import ModelFallbackPolicy
from .utility_handlers import UtilityResponder

logger = get_logger(__name__)


def apology(detail: str) -> str:
    return (
        f"I encountered an error: {detail}. "
        "Please try rephrasing your question or check if the data is loaded."
    )


class ChatAgent:
    def __init__(self, llm, executor: QueryExecutor, sessions: SessionStore, settings: Settings,
                 translator: Optional[QueryTranslator] = None):
        self.llm = llm
        self.executor = executor
        self.sessions = sessions
        self.settings = settings
        self.translator = translator or QueryTranslator(llm, ModelFallbackPolicy.from_settings(settings))
        self.composer = ResponseComposer(llm, settings)
        self.utilities = UtilityResponder(llm)

    async def process_interaction(self, message: str, session_id: Optional[str] = None) -> InteractionResult:
        session_id = session_id or DEFAULT_SESSION_ID
        async with self.sessions.lock(session_id):
            history = self.sessions.get(session_id)
            intent = classify_query(message)
            logger.info(f"[chat] session={session_id} intent={intent.value} message={message[:80]!r}")

            try:
                result = await self._dispatch(intent, message, history)
            except TranslationFailure as e:
                result = InteractionResult(text=apology(f"Failed to generate SQL query: {e.message}"))
            except ExecutionFailure as e:
                result = InteractionResult(text=apology(f"SQL Error: {e.message}"), query=e.query)
            except ServiceUnavailable as e:
                result = InteractionResult(text=unavailable_reply(e))
            except InsightChatError as e:
                result = InteractionResult(text=apology(e.message))
            except Exception as e:
                logger.exception(f"[agent_error] {e}")
                result = InteractionResult(text=apology(str(e)))

            result.session_id = session_id
            result.mode = intent.value
            self.sessions.append(session_id, ConversationTurn(role="user", text=message))
            self.sessions.append(session_id, ConversationTurn(role="assistant", text=result.text))
            return result

    async def _dispatch(self, intent: QueryIntent, message: str, history) -> InteractionResult:
        external_knowledge = get_external_knowledge(message)

        if intent is QueryIntent.DATA_ANALYSIS:
            return await self._answer_data_question(message, history, external_knowledge)
        if intent is QueryIntent.DEFINITION:
            return InteractionResult(text=await self.utilities.define(message, external_knowledge))
        if intent is QueryIntent.TRANSLATION:
            return InteractionResult(text=await self.utilities.translate(message))
        return InteractionResult(text=await self.utilities.converse(message, history))

    async def _answer_data_question(self, message: str, history, external_knowledge) -> InteractionResult:
        sql = await self.translator.translate(message, history)
        rows = await self.executor.execute(sql)
        chart = build_visualization(rows, message)
        text = await self.composer.compose(message, sql, rows, history, external_knowledge)
        return InteractionResult(text=text, query=sql, rows=rows, chart=chart)
