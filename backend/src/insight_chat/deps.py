from functools import lru_cache
from typing import Any, Dict

from .config import settings

def get_settings():
    return settings

from .providers.gemini_provider import HTTPGeminiProvider
from .services.sql_store import SQLStore
from .services.query_executor import QueryExecutor
from .services.agent import ChatAgent
from .utils.conversation_manager import InMemorySessionStore
from .utils.logs import get_logger

logger = get_logger(__name__)


@lru_cache()
def get_llm() -> HTTPGeminiProvider:
    return HTTPGeminiProvider(settings)


@lru_cache()
def get_sql_store() -> SQLStore:
    return SQLStore(settings)


@lru_cache()
def get_session_store() -> InMemorySessionStore:
    return InMemorySessionStore(max_turns=settings.history_limit)


@lru_cache()
def get_agent() -> ChatAgent:
    return ChatAgent(
        llm=get_llm(),
        executor=QueryExecutor(get_sql_store()),
        sessions=get_session_store(),
        settings=settings,
    )


async def check_services(store: SQLStore = None, llm: HTTPGeminiProvider = None) -> Dict[str, Any]:
    """Basic startup health checks.
    - Confirm a completion-service credential is present (no network call)
    - Run a simple DuckDB query
    (Best-effort: failures are logged but don't block startup.)
    """
    results = {}
    llm = llm or get_llm()
    if llm.is_configured:
        results['llm'] = 'ok'
    else:
        results['llm'] = f'error: {llm.unavailable_message()}'
    try:
        store = store or get_sql_store()
        store.query("SELECT 1")
        results['duckdb'] = 'ok'
    except Exception as e:
        results['duckdb'] = f'error: {e}'
    logger.info(f"[startup checks] {results}")
    return results
