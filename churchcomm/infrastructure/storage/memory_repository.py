"""
Supabase Memory Search
pgvector similarity search over member_memories and church_memories RPCs
"""
import logging
from typing import List

from supabase import Client

from churchcomm.domain.interfaces.memory_search import ChurchMemorySearch, MemberMemorySearch
from churchcomm.domain.models.memory import ChurchMemory, MemberMemory

logger = logging.getLogger(__name__)


class SupabaseMemberMemorySearch(MemberMemorySearch):
    """member_memories (768-dim vectors), scoped by person"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    async def match(
        self,
        person_id: str,
        query_embedding: List[float],
        match_threshold: float,
        match_count: int
    ) -> List[MemberMemory]:
        response = self.supabase.rpc("match_member_memories", {
            "p_person_id": person_id,
            "query_embedding": query_embedding,
            "match_threshold": match_threshold,
            "match_count": match_count,
        }).execute()
        return [MemberMemory(**row) for row in response.data or []]

    async def recent(self, person_id: str, limit: int) -> List[MemberMemory]:
        response = self.supabase.rpc("get_recent_member_memories", {
            "p_person_id": person_id,
            "p_limit": limit,
        }).execute()
        return [MemberMemory(**row) for row in response.data or []]


class SupabaseChurchMemorySearch(ChurchMemorySearch):
    """church_memories (1536-dim vectors), scoped by organization"""

    def __init__(self, supabase: Client):
        self.supabase = supabase

    async def match(
        self,
        organization_id: str,
        query_embedding: List[float],
        match_threshold: float,
        match_count: int
    ) -> List[ChurchMemory]:
        response = self.supabase.rpc("match_church_memories", {
            "query_embedding": query_embedding,
            "match_threshold": match_threshold,
            "match_count": match_count,
            "p_organization_id": organization_id,
        }).execute()
        return [ChurchMemory(**row) for row in response.data or []]
