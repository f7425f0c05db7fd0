"""
OpenAI Embedding Client
Text embeddings at a caller-selected width via the OpenAI embeddings API
"""
import logging
from typing import List, Optional

import httpx

from churchcomm.domain.interfaces.embedding_provider import (
    EmbeddingError,
    EmbeddingNotConfiguredError,
    EmbeddingProvider,
)

logger = logging.getLogger(__name__)


class OpenAIEmbeddingClient(EmbeddingProvider):
    """
    Calls POST {base_url}/embeddings with a `dimensions` override so one
    model serves both the 768-wide member store and the 1536-wide church
    store.
    """

    DEFAULT_BASE_URL = "https://api.openai.com/v1"
    DEFAULT_MODEL = "text-embedding-3-small"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        model: str = DEFAULT_MODEL,
        member_dimensions: int = 768,
        church_dimensions: int = 1536,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout_seconds
        self._transport = transport
        self.member_dimensions = member_dimensions
        self.church_dimensions = church_dimensions

    @classmethod
    def from_config(cls, api_key: Optional[str], config: dict) -> "OpenAIEmbeddingClient":
        """Build from the providers.embeddings.openai config section."""
        return cls(
            api_key=api_key,
            base_url=config.get("base_url", cls.DEFAULT_BASE_URL),
            model=config.get("model", cls.DEFAULT_MODEL),
            member_dimensions=int(config.get("member_dimensions", 768)),
            church_dimensions=int(config.get("church_dimensions", 1536)),
            timeout_seconds=float(config.get("timeout_seconds", 15)),
        )

    async def embed(self, text: str, dimensions: int) -> List[float]:
        if not self._api_key:
            raise EmbeddingNotConfiguredError()

        payload = {
            "model": self._model,
            "input": text,
            "dimensions": dimensions,
        }

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self._base_url}/embeddings",
                    json=payload,
                    headers={
                        "Authorization": f"Bearer {self._api_key}",
                        "Content-Type": "application/json",
                    }
                )
            except httpx.HTTPError as e:
                raise EmbeddingError(f"OpenAI embeddings request failed: {e}") from e

        if response.status_code >= 300:
            raise EmbeddingError(
                f"OpenAI embeddings API error: {response.status_code} - {response.text}",
                status_code=response.status_code
            )

        try:
            embedding = response.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingError(f"Malformed embeddings response: {e}") from e

        if len(embedding) != dimensions:
            raise EmbeddingError(
                f"Expected {dimensions}-dim embedding, got {len(embedding)}"
            )

        logger.debug(f"Embedded {len(text)} chars at {dimensions} dims")
        return embedding
