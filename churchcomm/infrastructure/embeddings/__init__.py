"""Embedding provider implementations"""
from churchcomm.infrastructure.embeddings.openai_embeddings import OpenAIEmbeddingClient

__all__ = ["OpenAIEmbeddingClient"]
