"""
HTTP tests for the chat, data and health endpoints.
"""
import pytest


@pytest.mark.asyncio
async def test_health(client):
    r = await client.get("/api/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "ok"
    assert body["services"] == {"llm": "ok", "duckdb": "ok"}


@pytest.mark.asyncio
async def test_chat_data_question(client, stub_llm):
    stub_llm.replies = ["SELECT order_id, order_status FROM orders ORDER BY order_id", "Three orders."]
    r = await client.post("/api/chat", json={"message": "Show all orders", "sessionId": "web-1", "max_rows": 2})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["mode"] == "data_analysis"
    assert body["text"] == "Three orders."
    assert body["query_sql"].startswith("SELECT order_id")
    assert body["rows"] == [
        {"order_id": "o1", "order_status": "delivered"},
        {"order_id": "o2", "order_status": "delivered"},
    ]
    assert body["chart"] is None
    assert body["chart_path"] is None
    assert body["session_id"] == "web-1"


@pytest.mark.asyncio
async def test_chat_metric_chart_serialises(client, stub_llm):
    stub_llm.replies = ["SELECT COUNT(*) AS total_orders FROM orders", "There are 3."]
    r = await client.post("/api/chat", json={"message": "How many orders in total?"})
    body = r.json()
    assert body["chart"] == {"type": "metric", "data": {"total_orders": 3}}
    assert body["session_id"] == "default"


@pytest.mark.asyncio
async def test_chat_sql_error_is_still_200(client, stub_llm):
    stub_llm.replies = ["SELECT nope FROM orders"]
    r = await client.post("/api/chat", json={"message": "Show the nope column"})
    assert r.status_code == 200
    body = r.json()
    assert "SQL Error" in body["text"]
    assert body["query_sql"] == "SELECT nope FROM orders"
    assert body["rows"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"message": "   "}, {}, {"message": "hi", "max_rows": -1}])
async def test_chat_rejects_bad_requests(client, payload):
    r = await client.post("/api/chat", json=payload)
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_history_roundtrip(client, stub_llm):
    await client.post("/api/chat", json={"message": "hello", "session_id": "h1"})

    r = await client.get("/api/chat/history/h1")
    messages = r.json()["messages"]
    assert [(m["role"], m["text"]) for m in messages] == [("user", "hello"), ("assistant", "stub answer")]

    stats = (await client.get("/api/chat/stats")).json()
    assert stats["session_stats"]["total_sessions"] == 1

    r = await client.delete("/api/chat/history/h1")
    assert "cleared" in r.json()["message"]
    assert (await client.get("/api/chat/history/h1")).json()["messages"] == []
    r = await client.delete("/api/chat/history/h1")
    assert "not_found" in r.json()["message"]


@pytest.mark.asyncio
async def test_data_stats(client):
    r = await client.get("/api/data/stats")
    assert r.json() == {
        "success": True,
        "stats": {"customers": 2, "orders": 3, "products": 3, "orderItems": 3},
    }


@pytest.mark.asyncio
async def test_data_tables_and_sample(client):
    tables = (await client.get("/api/data/tables")).json()["tables"]
    assert "orders" in tables and "geolocation" in tables

    r = await client.get("/api/data/sample/products", params={"limit": 2})
    data = r.json()["data"]
    assert len(data) == 2
    assert "product_category_name" in data[0]

    assert (await client.get("/api/data/sample/geolocation")).status_code == 400
