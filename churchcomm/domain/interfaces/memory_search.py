"""
Memory Search Interfaces
Personal and organizational memory are separate stores with different
vector widths, so each gets its own capability interface.
"""
from abc import ABC, abstractmethod
from typing import List

from churchcomm.domain.models.memory import ChurchMemory, MemberMemory


class MemberMemorySearch(ABC):
    """Search over one person's memories"""

    @abstractmethod
    async def match(
        self,
        person_id: str,
        query_embedding: List[float],
        match_threshold: float,
        match_count: int
    ) -> List[MemberMemory]:
        """Nearest neighbours above match_threshold (cosine similarity)"""
        pass

    @abstractmethod
    async def recent(self, person_id: str, limit: int) -> List[MemberMemory]:
        """Most recent memories, newest first"""
        pass


class ChurchMemorySearch(ABC):
    """Search over one organization's memories"""

    @abstractmethod
    async def match(
        self,
        organization_id: str,
        query_embedding: List[float],
        match_threshold: float,
        match_count: int
    ) -> List[ChurchMemory]:
        """Nearest neighbours above match_threshold (cosine similarity)"""
        pass
