"""
Context Retriever
Pulls personal and church memories relevant to an upcoming call
"""
import logging
from typing import List, Optional

from churchcomm.core.config import ContextConfig
from churchcomm.domain.interfaces.embedding_provider import EmbeddingProvider
from churchcomm.domain.interfaces.memory_search import ChurchMemorySearch, MemberMemorySearch
from churchcomm.domain.models.memory import (
    ChurchMemory,
    InjectedContext,
    MemberMemory,
    MemoryType,
)

logger = logging.getLogger(__name__)


MAX_MEMBER_ITEMS = 5
MAX_CHURCH_ITEMS = 5


def merge_member_memories(
    vector_memories: List[MemberMemory],
    recent_memories: List[MemberMemory]
) -> List[MemberMemory]:
    """Vector hits first, then recent ones; first occurrence of an id wins."""
    seen = set()
    merged = []
    for memory in [*vector_memories, *recent_memories]:
        if memory.id in seen:
            continue
        seen.add(memory.id)
        merged.append(memory)
    return merged


def format_member_context(
    vector_memories: List[MemberMemory],
    recent_memories: List[MemberMemory]
) -> str:
    unique = merge_member_memories(vector_memories, recent_memories)
    return "\n".join(f"- {m.label}: {m.content}" for m in unique[:MAX_MEMBER_ITEMS])


def format_church_context(memories: List[ChurchMemory]) -> str:
    return "\n".join(f"- {m.category}: {m.content}" for m in memories[:MAX_CHURCH_ITEMS])


def extract_preferences(memories: List[MemberMemory]) -> str:
    return "\n".join(
        f"- {m.content}" for m in memories if m.memory_type == MemoryType.PREFERENCE.value
    )


class ContextRetriever:
    """
    Builds the three context blocks injected into a call prompt.

    Retrieval steps:
    1. Embed a fixed query at the member width and vector-search the
       person's memories.
    2. Fetch the person's most recent memories regardless of score, so
       fresh information surfaces even when it ranks below the threshold.
    3. Re-embed at the church width and vector-search the organization's
       memories. Failure here only empties the church block.

    get_call_context never raises; any failure yields empty blocks.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        member_memories: MemberMemorySearch,
        church_memories: ChurchMemorySearch,
        config: Optional[ContextConfig] = None
    ):
        self.embeddings = embeddings
        self.member_memories = member_memories
        self.church_memories = church_memories
        self.config = config or ContextConfig()

    async def get_call_context(self, person_id: str, organization_id: str) -> InjectedContext:
        try:
            query_embedding = await self.embeddings.embed_member(self.config.query_text)

            vector_memories = await self.member_memories.match(
                person_id=person_id,
                query_embedding=query_embedding,
                match_threshold=self.config.match_threshold,
                match_count=self.config.member_match_count,
            )
            recent_memories = await self.member_memories.recent(
                person_id=person_id,
                limit=self.config.recent_member_count,
            )

            church_memories = await self._get_church_memories(organization_id)

            return InjectedContext(
                member_context=format_member_context(vector_memories, recent_memories),
                church_context=format_church_context(church_memories),
                preferences=extract_preferences(vector_memories),
            )
        except Exception as e:
            logger.error(f"Error getting call context for person {person_id}: {e}")
            return InjectedContext.empty()

    async def _get_church_memories(self, organization_id: str) -> List[ChurchMemory]:
        try:
            church_embedding = await self.embeddings.embed_church(self.config.query_text)
            return await self.church_memories.match(
                organization_id=organization_id,
                query_embedding=church_embedding,
                match_threshold=self.config.match_threshold,
                match_count=self.config.church_match_count,
            )
        except Exception as e:
            logger.warning(f"Org {organization_id}: church context unavailable: {e}")
            return []
