"""Query embeddings from an OpenAI-compatible /embeddings endpoint."""

import httpx

from src.core.config import config
from src.core.logger import logger
from src.research.backends.base import EmbeddingClient


class OpenAICompatibleEmbedder(EmbeddingClient):

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        base_url: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = (api_key or config.embedding_api_key).strip()
        self.model = model or config.embedding_model
        self.base_url = (base_url or config.embedding_base_url).rstrip("/")
        self.client = client or httpx.AsyncClient(timeout=30.0)

    async def embed(self, text: str) -> list[float] | None:
        text = (text or "").strip()
        if not text or not self.api_key:
            return None
        response = await self.client.post(
            f"{self.base_url}/embeddings",
            json={"model": self.model, "input": text},
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
        )
        response.raise_for_status()
        data = response.json().get("data") or []
        if not data or not isinstance(data[0], dict):
            logger.warning(f"Embedding response from {self.model} had no data")
            return None
        embedding = data[0].get("embedding")
        if not isinstance(embedding, list) or not embedding:
            return None
        return [float(x) for x in embedding]

    async def close(self):
        await self.client.aclose()


def create_embedder() -> OpenAICompatibleEmbedder | None:
    """Embedding client when an API key is configured, else None (semantic provider off)."""
    if not config.embeddings_available:
        return None
    return OpenAICompatibleEmbedder()
