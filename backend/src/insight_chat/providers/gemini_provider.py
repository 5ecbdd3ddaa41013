import os
import httpx
from typing import List, Dict, Any, Optional
from ..config import Settings, settings as default_settings
from ..errors import ServiceError, ServiceUnavailable
from ..utils.logs import get_logger

logger = get_logger(__name__)


class HTTPGeminiProvider:
    """HTTP client for the Gemini ``generateContent`` API using values from config.yaml.

    Pulls the model name from `model_name` and the endpoint from `llm.service_url`.
    The API key is read from the environment on every call (first non-empty
    variable in `api_key_env`), so a key exported after startup is picked up.
    """
    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or default_settings
        llm_cfg = self.settings.llm or {}
        self.base_url: str = llm_cfg.get("service_url", "https://generativelanguage.googleapis.com").rstrip('/')
        self.api_version: str = llm_cfg.get("api_version", "v1beta")
        self.timeout: float = float(llm_cfg.get("http_timeout", 60))
        self.model: str = self.settings.model_name
        self.temperature: float = self.settings.temperature
        self.max_tokens: int = self.settings.max_tokens
        self.key_env_vars = tuple(self.settings.api_key_env)
        self._transport = transport

    @property
    def api_key(self) -> Optional[str]:
        for var in self.key_env_vars:
            value = (os.getenv(var) or "").strip()
            if value:
                return value
        return None

    @property
    def is_configured(self) -> bool:
        return self.api_key is not None

    def unavailable_message(self) -> str:
        names = " or ".join(self.key_env_vars) or "an API key"
        return f"Gemini API key not configured. Please set {names} in your environment."

    async def chat(self, messages: List[Dict[str, Any]], model: Optional[str] = None,
                   max_tokens: Optional[int] = None, temperature: Optional[float] = None) -> str:
        api_key = self.api_key
        if not api_key:
            raise ServiceUnavailable(self.unavailable_message(), env_vars=self.key_env_vars)

        model = model or self.model
        url = f"{self.base_url}/{self.api_version}/models/{model}:generateContent"
        payload = self._build_payload(
            messages,
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature if temperature is None else temperature,
        )
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                r = await client.post(url, json=payload, headers={"x-goog-api-key": api_key})
        except httpx.HTTPError as e:
            raise ServiceError(f"{type(e).__name__}: {e}", model=model) from e

        if r.status_code >= 400:
            message = self._error_message(r)
            if r.status_code == 404 or 'is not found' in message.lower():
                logger.warning(f"[llm_model_not_found] model={model}: {message}")
                raise ServiceError(message, kind=ServiceError.MODEL_NOT_FOUND, model=model)
            logger.error(f"[llm_error] {r.status_code} model={model} body={r.text[:500]}")
            raise ServiceError(message, model=model)

        try:
            return self._extract_text(r.json())
        except (ValueError, KeyError, AttributeError, TypeError) as e:
            logger.error(f"[llm_error] unreadable response model={model} body={r.text[:500]}")
            raise ServiceError(f"Malformed response from the model service: {e}", model=model) from e

    def _build_payload(self, messages: List[Dict[str, Any]], max_tokens: int, temperature: float) -> Dict[str, Any]:
        system_parts = []
        contents = []
        for m in messages:
            role = m.get("role", "user")
            content = m.get("content", "")
            if role == "system":
                system_parts.append({"text": content})
            else:
                contents.append({
                    "role": "model" if role == "assistant" else "user",
                    "parts": [{"text": content}],
                })
        payload: Dict[str, Any] = {
            "contents": contents,
            "generationConfig": {"temperature": temperature, "maxOutputTokens": max_tokens},
        }
        if system_parts:
            payload["systemInstruction"] = {"parts": system_parts}
        return payload

    def _extract_text(self, data: Dict[str, Any]) -> str:
        candidates = data.get("candidates") or [{}]
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(p.get("text", "") for p in parts).strip()

    def _error_message(self, r: httpx.Response) -> str:
        try:
            body = r.json()
        except ValueError:
            body = None
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        return f"HTTP {r.status_code}: {r.text[:200]}"
