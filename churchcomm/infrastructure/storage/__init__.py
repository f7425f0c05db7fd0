"""Supabase-backed storage"""
from churchcomm.infrastructure.storage.memory_repository import (
    SupabaseChurchMemorySearch,
    SupabaseMemberMemorySearch,
)
from churchcomm.infrastructure.storage.outreach_repository import SupabaseOutreachRepository
from churchcomm.infrastructure.storage.supabase_client import create_supabase_client

__all__ = [
    "SupabaseOutreachRepository",
    "SupabaseMemberMemorySearch",
    "SupabaseChurchMemorySearch",
    "create_supabase_client",
]
