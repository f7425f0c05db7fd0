"""
API Dependencies
Shared dependencies for Supabase access, provider construction and the
scheduler trigger secret
"""
import hmac
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from supabase import Client

from churchcomm.core.config import ConfigManager, Settings, get_config_manager, get_settings
from churchcomm.domain.interfaces.embedding_provider import EmbeddingProvider
from churchcomm.domain.services.outreach_scheduler import OutreachScheduler
from churchcomm.infrastructure.factory import EmbeddingProviderFactory, build_outreach_scheduler
from churchcomm.infrastructure.storage import create_supabase_client


def get_supabase(settings: Settings = Depends(get_settings)) -> Client:
    """
    Get Supabase client with validation.

    Raises:
        RuntimeError: If Supabase URL or SERVICE_KEY is not configured
    """
    return create_supabase_client(settings)


def get_outreach_scheduler(
    settings: Settings = Depends(get_settings),
    config_manager: ConfigManager = Depends(get_config_manager),
    supabase: Client = Depends(get_supabase)
) -> OutreachScheduler:
    return build_outreach_scheduler(settings, config_manager, supabase)


def get_embedding_provider(
    settings: Settings = Depends(get_settings),
    config_manager: ConfigManager = Depends(get_config_manager)
) -> EmbeddingProvider:
    return EmbeddingProviderFactory.create(
        config_manager.get("providers.embeddings.active", "openai"),
        settings.openai_api_key,
        config_manager.get_provider_config("embeddings"),
    )


async def verify_scheduler_secret(
    authorization: Optional[str] = Header(None, alias="Authorization"),
    settings: Settings = Depends(get_settings)
) -> None:
    """
    Require "Authorization: Bearer <SCHEDULER_SECRET>" when a secret is set.

    Raises:
        HTTPException: 401 if the header is missing or does not match
    """
    if not settings.scheduler_secret:
        return

    expected = f"Bearer {settings.scheduler_secret}"
    if not authorization or not hmac.compare_digest(authorization, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid scheduler credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
