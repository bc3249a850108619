"""OpenRouter (OpenAI-compatible) chat client for the research planner.

Tries the configured model IDs in order, falling back on 429/5xx and transport errors.
"""

from dataclasses import dataclass

import httpx

from src.core.config import config
from src.core.logger import logger


@dataclass
class LLMResponse:
    text: str
    model: str
    tokens_used: int = 0


class OpenRouterClient:

    def __init__(
        self,
        api_key: str | None = None,
        models: list[str] | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.models = models if models is not None else (config.planner_models or ["openrouter/auto"])
        if not self.models:
            self.models = ["openrouter/auto"]
        self.api_key = (api_key or config.openrouter_api_key).strip()
        self.base_url = (base_url or config.openrouter_base_url).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=60.0)
        self.last_model_used: str | None = None

    @property
    def model(self) -> str:
        return self.models[0]

    def _should_retry(self, e: Exception) -> bool:
        if isinstance(e, httpx.HTTPStatusError):
            return e.response.status_code in (429, 500, 502, 503, 504)
        return isinstance(e, httpx.TransportError)

    async def chat_json(
        self,
        system_message: str,
        user_message: str,
        temperature: float | None = None,
        max_tokens: int = 800,
    ) -> LLMResponse:
        """Chat completion in JSON mode. Raises when every model fails."""
        payload_base = {
            "messages": [
                {"role": "system", "content": system_message},
                {"role": "user", "content": user_message},
            ],
            "max_tokens": max_tokens,
            "temperature": config.planner_temperature if temperature is None else temperature,
            "response_format": {"type": "json_object"},
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        last_error: Exception | None = None
        for model in self.models:
            payload = {**payload_base, "model": model}
            try:
                response = await self.client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
                self.last_model_used = data.get("model") or model
                choices = data.get("choices") or [{}]
                message = choices[0].get("message", {}) or {}
                text = message.get("content", "") or ""
                tokens_used = (data.get("usage") or {}).get("total_tokens", 0)
                logger.debug(
                    f"Planner LLM {self.last_model_used}: {tokens_used} tokens, {len(text)} chars"
                )
                return LLMResponse(
                    text=text,
                    model=self.last_model_used or model,
                    tokens_used=tokens_used,
                )
            except Exception as e:
                last_error = e
                if isinstance(e, httpx.HTTPStatusError):
                    body = e.response.text or ""
                    logger.warning(f"Planner LLM {model} {e.response.status_code}: {body[:300]}")
                else:
                    logger.warning(f"Planner LLM {model} failed: {e}")
                if self._should_retry(e):
                    continue
                raise
        if last_error:
            raise last_error
        raise RuntimeError("No planner models configured")

    async def close(self):
        await self.client.aclose()


def create_planning_client() -> OpenRouterClient | None:
    """Planning client when an API key is configured, else None (deterministic planner)."""
    if not config.planner_available:
        return None
    return OpenRouterClient()
