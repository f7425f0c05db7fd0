"""
Supabase Client
Service-role client shared by the scheduler, worker and API
"""
import logging
from typing import Optional

from supabase import create_client, Client

from churchcomm.core.config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_supabase_client(settings: Optional[Settings] = None) -> Client:
    """
    Create a Supabase client with validation.

    Raises:
        RuntimeError: If Supabase URL or SERVICE_KEY is not configured
    """
    settings = settings or get_settings()

    if not settings.supabase_url:
        raise RuntimeError(
            "SUPABASE_URL is not configured. "
            "Set SUPABASE_URL environment variable."
        )
    if not settings.supabase_service_key:
        raise RuntimeError(
            "SUPABASE_SERVICE_KEY is not configured. "
            "Set SUPABASE_SERVICE_KEY environment variable."
        )

    return create_client(settings.supabase_url, settings.supabase_service_key)
