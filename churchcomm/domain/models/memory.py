"""
Memory Models
Facts learned from past conversations, per person and per organization
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from datetime import datetime
from enum import Enum


class MemoryType(str, Enum):
    """Category tag of a member memory"""
    CALL_SUMMARY = "call_summary"
    PRAYER_REQUEST = "prayer_request"
    PERSONAL_NOTE = "personal_note"
    PREFERENCE = "preference"


MEMORY_TYPE_LABELS = {
    MemoryType.CALL_SUMMARY.value: "Previous call",
    MemoryType.PRAYER_REQUEST.value: "Prayer request",
    MemoryType.PERSONAL_NOTE.value: "Note",
}
DEFAULT_MEMORY_LABEL = "Info"
DEFAULT_CHURCH_CATEGORY = "general"


class MemberMemory(BaseModel):
    """Row returned by match_member_memories / get_recent_member_memories."""

    id: str
    content: str
    memory_type: Optional[str] = None
    similarity: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}

    @property
    def label(self) -> str:
        return MEMORY_TYPE_LABELS.get(self.memory_type, DEFAULT_MEMORY_LABEL)


class ChurchMemory(BaseModel):
    """Row returned by match_church_memories."""

    id: str
    content: str
    metadata: Optional[Dict[str, Any]] = Field(default_factory=dict)
    similarity: Optional[float] = None
    organization_id: Optional[str] = None

    model_config = {"extra": "ignore"}

    @property
    def category(self) -> str:
        return (self.metadata or {}).get("category") or DEFAULT_CHURCH_CATEGORY


class InjectedContext(BaseModel):
    """Formatted context blocks appended to a call prompt."""

    member_context: str = ""
    church_context: str = ""
    preferences: str = ""

    @classmethod
    def empty(cls) -> "InjectedContext":
        return cls()

    @property
    def has_conversation_context(self) -> bool:
        return bool(self.member_context or self.church_context)
