"""
Test configuration and fixtures.

The completion service is replaced by ``StubLLM`` (scripted replies, recorded
calls) and the store by an in-memory DuckDB seeded with a handful of rows.
"""
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from insight_chat.config import Settings
from insight_chat.deps import get_agent, get_llm, get_session_store, get_settings, get_sql_store
from insight_chat.errors import ServiceError
from insight_chat.main import app
from insight_chat.services.agent import ChatAgent
from insight_chat.services.query_executor import QueryExecutor
from insight_chat.services.sql_store import SQLStore
from insight_chat.utils.conversation_manager import InMemorySessionStore


class StubLLM:
    """
    Deterministic stand-in for the completion service.

    ``replies`` is consumed in order; an Exception instance is raised instead
    of returned. Once exhausted, ``default`` is returned.
    """

    def __init__(self, replies: Optional[List[Any]] = None, default: str = "stub answer"):
        self.replies = list(replies or [])
        self.default = default
        self.calls: List[Dict[str, Any]] = []
        self.model = "primary-model"
        self.is_configured = True

    async def chat(self, messages, model=None, **kwargs):
        self.calls.append({"messages": messages, "model": model})
        if self.replies:
            reply = self.replies.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return self.default

    def unavailable_message(self):
        return "not configured"


def model_not_found(model: str = "primary-model") -> ServiceError:
    return ServiceError(f"models/{model} is not found for API version v1beta",
                        kind=ServiceError.MODEL_NOT_FOUND, model=model)


SEED_SQL = [
    "INSERT INTO customers VALUES ('c1', 'u1', '01001', 'sao paulo', 'SP'), ('c2', 'u2', '20001', 'rio de janeiro', 'RJ')",
    "INSERT INTO products (product_id, product_category_name) VALUES ('p1', 'electronics'), ('p2', 'furniture'), ('p3', NULL)",
    "INSERT INTO orders (order_id, customer_id, order_status, order_purchase_timestamp) VALUES "
    "('o1', 'c1', 'delivered', TIMESTAMP '2018-01-15 10:00:00'), "
    "('o2', 'c2', 'delivered', TIMESTAMP '2018-02-03 12:30:00'), "
    "('o3', 'c1', 'shipped', TIMESTAMP '2018-02-20 08:15:00')",
    "INSERT INTO order_items (order_id, order_item_id, product_id, seller_id, price, freight_value) VALUES "
    "('o1', 1, 'p1', 's1', 100.00, 10.00), "
    "('o2', 1, 'p2', 's1', 50.00, 5.00), "
    "('o3', 1, 'p1', 's2', 20.40, 2.00)",
]


@pytest.fixture
def settings():
    return Settings(
        duckdb_path=":memory:",
        default_model="default-model",
        fallback_models=["alt-model-1", "alt-model-2"],
        history_limit=20,
        render_charts=False,
    )


@pytest.fixture
def sql_store(settings):
    store = SQLStore(settings)
    for statement in SEED_SQL:
        store.con.execute(statement)
    yield store
    store.close()


@pytest.fixture
def sessions():
    return InMemorySessionStore(max_turns=20)


@pytest.fixture
def stub_llm():
    return StubLLM()


@pytest.fixture
def make_agent(settings, sql_store, sessions):
    def _make(llm) -> ChatAgent:
        return ChatAgent(llm=llm, executor=QueryExecutor(sql_store), sessions=sessions, settings=settings)
    return _make


@pytest_asyncio.fixture
async def client(settings, sql_store, sessions, stub_llm, make_agent):
    """HTTP client wired to the stub completion service and the seeded store."""
    agent = make_agent(stub_llm)
    app.dependency_overrides[get_agent] = lambda: agent
    app.dependency_overrides[get_session_store] = lambda: sessions
    app.dependency_overrides[get_sql_store] = lambda: sql_store
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_llm] = lambda: stub_llm

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
