"""
Provider Factories
Select provider implementations by name and assemble the scheduler
"""
from datetime import timedelta
from typing import Dict, Optional, Type

from supabase import Client

from churchcomm.core.config import ConfigManager, Settings
from churchcomm.domain.interfaces.embedding_provider import EmbeddingProvider
from churchcomm.domain.interfaces.voice_provider import VoiceProvider
from churchcomm.domain.services.call_executor import DEFAULT_VOICE_ID, CallExecutor
from churchcomm.domain.services.context_retriever import ContextRetriever
from churchcomm.domain.services.outreach_scheduler import OutreachScheduler
from churchcomm.domain.services.prompt_augmenter import PromptAugmenter
from churchcomm.domain.services.retry_manager import RetryManager
from churchcomm.infrastructure.embeddings.openai_embeddings import OpenAIEmbeddingClient
from churchcomm.infrastructure.storage import (
    SupabaseChurchMemorySearch,
    SupabaseMemberMemorySearch,
    SupabaseOutreachRepository,
    create_supabase_client,
)
from churchcomm.infrastructure.telephony.vapi_caller import VapiCaller


class VoiceProviderFactory:
    """Factory for creating voice provider instances"""

    _providers: Dict[str, Type[VoiceProvider]] = {"vapi": VapiCaller}

    @classmethod
    def create(cls, provider_name: str, api_key: Optional[str], config: dict) -> VoiceProvider:
        if provider_name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "None"
            raise ValueError(f"Unknown voice provider: {provider_name}. Available: {available}")

        return cls._providers[provider_name].from_config(api_key, config)


class EmbeddingProviderFactory:
    """Factory for creating embedding provider instances"""

    _providers: Dict[str, Type[EmbeddingProvider]] = {"openai": OpenAIEmbeddingClient}

    @classmethod
    def create(cls, provider_name: str, api_key: Optional[str], config: dict) -> EmbeddingProvider:
        if provider_name not in cls._providers:
            available = ", ".join(cls._providers.keys()) if cls._providers else "None"
            raise ValueError(f"Unknown embedding provider: {provider_name}. Available: {available}")

        return cls._providers[provider_name].from_config(api_key, config)


def build_outreach_scheduler(
    settings: Settings,
    config_manager: ConfigManager,
    supabase: Optional[Client] = None
) -> OutreachScheduler:
    """
    Assemble the scheduler from settings, YAML config and a Supabase client.

    Providers are chosen by providers.<type>.active; credentials come from
    the environment.
    """
    supabase = supabase or create_supabase_client(settings)
    outreach = config_manager.get_outreach_config()

    voice_name = config_manager.get("providers.voice.active", "vapi")
    voice_config = config_manager.get_provider_config("voice")
    voice_provider = VoiceProviderFactory.create(voice_name, settings.vapi_api_key, voice_config)

    embedding_name = config_manager.get("providers.embeddings.active", "openai")
    embeddings = EmbeddingProviderFactory.create(
        embedding_name,
        settings.openai_api_key,
        config_manager.get_provider_config("embeddings"),
    )

    store = SupabaseOutreachRepository(supabase)
    retriever = ContextRetriever(
        embeddings=embeddings,
        member_memories=SupabaseMemberMemorySearch(supabase),
        church_memories=SupabaseChurchMemorySearch(supabase),
        config=outreach.context,
    )
    executor = CallExecutor(
        store=store,
        voice_provider=voice_provider,
        augmenter=PromptAugmenter(retriever, max_length=outreach.context.max_prompt_length),
        default_phone_number_id=settings.vapi_phone_number_id,
        batch_size=outreach.execution_batch_size,
        max_retries=outreach.max_retries,
        default_voice_id=voice_config.get("default_voice_id", DEFAULT_VOICE_ID),
    )

    return OutreachScheduler(
        store=store,
        executor=executor,
        retry_manager=RetryManager(
            store,
            max_retries=outreach.max_retries,
            retry_window=timedelta(hours=outreach.retry_window_hours),
        ),
        max_concurrent_organizations=outreach.max_concurrent_organizations,
    )
