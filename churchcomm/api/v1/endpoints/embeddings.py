"""
Embeddings Endpoint
Church-width text embeddings for ingesting church memories
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from churchcomm.api.v1.dependencies import get_embedding_provider
from churchcomm.domain.interfaces.embedding_provider import EmbeddingProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["embeddings"])


class EmbeddingRequest(BaseModel):
    text: Optional[str] = None


@router.post("/embeddings")
async def generate_embedding(
    request: EmbeddingRequest,
    embeddings: EmbeddingProvider = Depends(get_embedding_provider)
):
    """Return a 1536-dimension embedding for request.text."""
    if not request.text:
        return JSONResponse(status_code=400, content={"error": "Missing or invalid 'text' field"})

    try:
        embedding = await embeddings.embed_church(request.text)
    except Exception as e:
        logger.error(f"Generate embedding error: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    return {"embedding": embedding}
