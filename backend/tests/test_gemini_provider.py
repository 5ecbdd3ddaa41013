"""
Tests for the Gemini HTTP provider using httpx.MockTransport.
"""
import json

import httpx
import pytest

from insight_chat.config import Settings
from insight_chat.errors import ServiceError, ServiceUnavailable
from insight_chat.providers.gemini_provider import HTTPGeminiProvider

KEY_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY")


@pytest.fixture
def provider_settings():
    return Settings(
        model_name="gemini-test",
        temperature=0.1,
        max_tokens=256,
        llm={"service_url": "https://llm.test/", "api_version": "v9", "http_timeout": 5},
    )


@pytest.fixture(autouse=True)
def clear_keys(monkeypatch):
    for var in KEY_VARS:
        monkeypatch.delenv(var, raising=False)


def make_provider(settings, handler):
    return HTTPGeminiProvider(settings, transport=httpx.MockTransport(handler))


def ok_body(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


@pytest.mark.asyncio
async def test_chat_posts_generate_content(provider_settings, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "secret")
    seen = {}

    def handler(request: httpx.Request):
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("x-goog-api-key")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=ok_body("  SELECT 1  "))

    provider = make_provider(provider_settings, handler)
    text = await provider.chat([
        {"role": "system", "content": "be brief"},
        {"role": "user", "content": "hi"},
        {"role": "assistant", "content": "hello"},
        {"role": "user", "content": "count orders"},
    ])

    assert text == "SELECT 1"
    assert seen["url"] == "https://llm.test/v9/models/gemini-test:generateContent"
    assert seen["key"] == "secret"
    body = seen["body"]
    assert body["systemInstruction"] == {"parts": [{"text": "be brief"}]}
    assert [c["role"] for c in body["contents"]] == ["user", "model", "user"]
    assert body["generationConfig"] == {"temperature": 0.1, "maxOutputTokens": 256}


@pytest.mark.asyncio
async def test_explicit_model_overrides_configured_one(provider_settings, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")
    urls = []

    def handler(request):
        urls.append(request.url.path)
        return httpx.Response(200, json=ok_body("ok"))

    await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}], model="gemini-pro")
    assert urls == ["/v9/models/gemini-pro:generateContent"]


@pytest.mark.asyncio
async def test_missing_key_raises_before_any_request(provider_settings):
    def handler(request):
        raise AssertionError("no request expected")

    provider = make_provider(provider_settings, handler)
    assert not provider.is_configured
    with pytest.raises(ServiceUnavailable) as exc_info:
        await provider.chat([{"role": "user", "content": "x"}])
    assert exc_info.value.env_vars == KEY_VARS


def test_first_configured_key_wins(provider_settings, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "  ")
    monkeypatch.setenv("GEMINI_API_KEY", "second")
    assert HTTPGeminiProvider(provider_settings).api_key == "second"


@pytest.mark.asyncio
@pytest.mark.parametrize("status, message", [
    (404, "models/gemini-test is not found for API version v9"),
    (400, "Model gemini-test is not found or not supported"),
])
async def test_rejected_model_is_model_not_found(provider_settings, monkeypatch, status, message):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    def handler(request):
        return httpx.Response(status, json={"error": {"code": status, "message": message}})

    with pytest.raises(ServiceError) as exc_info:
        await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}])
    assert exc_info.value.is_model_not_found
    assert exc_info.value.message == message
    assert exc_info.value.model == "gemini-test"


@pytest.mark.asyncio
async def test_other_http_errors(provider_settings, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    def handler(request):
        return httpx.Response(503, text="overloaded")

    with pytest.raises(ServiceError) as exc_info:
        await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}])
    assert not exc_info.value.is_model_not_found
    assert exc_info.value.message == "HTTP 503: overloaded"


@pytest.mark.asyncio
async def test_transport_error_is_service_error(provider_settings, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServiceError, match="ConnectError"):
        await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}])


@pytest.mark.asyncio
async def test_empty_candidates_yield_empty_text(provider_settings, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    def handler(request):
        return httpx.Response(200, json={"candidates": []})

    assert await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}]) == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, text="not json"),
    httpx.Response(200, json=["unexpected", "list"]),
    httpx.Response(200, json={"candidates": [{"content": {"parts": "oops"}}]}),
])
async def test_unreadable_success_body_is_service_error(provider_settings, monkeypatch, response):
    monkeypatch.setenv("GOOGLE_API_KEY", "k")

    def handler(request):
        return response

    with pytest.raises(ServiceError) as exc_info:
        await make_provider(provider_settings, handler).chat([{"role": "user", "content": "x"}])
    assert not exc_info.value.is_model_not_found
    assert "Malformed response" in exc_info.value.message
