"""
Embedding Provider Interface
Abstract base class for text-embedding providers
"""
from abc import ABC, abstractmethod
from typing import List, Optional


class EmbeddingError(Exception):
    """Raised when the embedding provider fails or returns a bad vector."""
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class EmbeddingNotConfiguredError(EmbeddingError):
    """Raised when the embedding API key is missing."""
    def __init__(self, message: str = "OPENAI_API_KEY not configured"):
        super().__init__(message)


class EmbeddingProvider(ABC):
    """
    Produces fixed-width vectors.

    Member memories and church memories are indexed at different widths,
    so callers ask for the width of the store they are about to search.
    """

    member_dimensions: int = 768
    church_dimensions: int = 1536

    @abstractmethod
    async def embed(self, text: str, dimensions: int) -> List[float]:
        """Embed text at the requested vector width"""
        pass

    async def embed_member(self, text: str) -> List[float]:
        """Vector at the member-memory width"""
        return await self.embed(text, self.member_dimensions)

    async def embed_church(self, text: str) -> List[float]:
        """Vector at the church-memory width"""
        return await self.embed(text, self.church_dimensions)
