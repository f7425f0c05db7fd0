"""
Configuration Management
Loads settings from YAML files and environment variables
"""
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ${VAR} or ${VAR:-default}
_ENV_PATTERN = re.compile(r"^\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-(.*))?\}$")


class Settings(BaseSettings):
    """Application settings and credentials loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = "development"

    # API Settings
    api_prefix: str = "/api/v1"

    # Relational store
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None

    # Voice-calling provider
    vapi_api_key: Optional[str] = None
    vapi_phone_number_id: Optional[str] = None

    # Embedding provider
    openai_api_key: Optional[str] = None

    # Bearer secret required by the scheduler trigger endpoint (open when unset)
    scheduler_secret: Optional[str] = None


class ContextConfig(BaseModel):
    """Tunables for memory retrieval and prompt augmentation"""
    query_text: str = "recent conversations, prayer requests, and personal information"
    match_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    member_match_count: int = Field(default=5, ge=1)
    recent_member_count: int = Field(default=3, ge=0)
    church_match_count: int = Field(default=5, ge=1)
    max_prompt_length: int = Field(default=8000, ge=100)


class OutreachConfig(BaseModel):
    """Tunables for one scheduler tick"""
    execution_batch_size: int = Field(default=10, ge=1, le=100)
    max_retries: int = Field(default=2, ge=0)
    retry_window_hours: int = Field(default=24, ge=1)
    max_concurrent_organizations: int = Field(default=1, ge=1)
    tick_interval_seconds: int = Field(default=900, ge=1)
    context: ContextConfig = Field(default_factory=ContextConfig)


class ConfigManager:
    """Manages loading and merging configuration from multiple sources"""

    def __init__(self, env: str = "development", config_dir: Optional[Path] = None):
        self.env = env
        self.config_dir = config_dir or Path(__file__).parent.parent.parent / "config"
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration files in order of precedence"""
        default_path = self.config_dir / "default.yaml"
        if default_path.exists():
            self._config = self._load_yaml(default_path)

        env_path = self.config_dir / f"{self.env}.yaml"
        if env_path.exists():
            env_config = self._load_yaml(env_path)
            self._deep_merge(self._config, env_config)

        self._substitute_env_vars(self._config)

    def _load_yaml(self, path: Path) -> Dict:
        """Load YAML file"""
        with open(path, 'r') as f:
            return yaml.safe_load(f) or {}

    def _substitute_env_vars(self, config: Dict) -> None:
        """Replace ${VAR_NAME} / ${VAR_NAME:-default} with environment values"""
        for key, value in config.items():
            if isinstance(value, dict):
                self._substitute_env_vars(value)
            elif isinstance(value, str):
                match = _ENV_PATTERN.match(value)
                if not match:
                    continue
                env_var, default = match.groups()
                if default is not None:
                    config[key] = os.getenv(env_var) or default
                else:
                    config[key] = os.getenv(env_var, value)

    def _deep_merge(self, base: Dict, override: Dict) -> None:
        """Recursively merge override into base"""
        for key, value in override.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation
        Example: config.get("providers.voice.active") -> "vapi"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_provider_config(self, provider_type: str) -> Dict:
        """Get active provider configuration"""
        active = self.get(f"providers.{provider_type}.active")
        if not active:
            raise ValueError(f"No active {provider_type} provider configured")

        return self.get(f"providers.{provider_type}.{active}", {})

    def get_outreach_config(self) -> OutreachConfig:
        """Scheduler tunables as a validated model"""
        return OutreachConfig(**(self.get("outreach", {}) or {}))


@lru_cache
def get_settings() -> Settings:
    """Cached application settings"""
    return Settings()


@lru_cache
def get_config_manager() -> ConfigManager:
    """Cached config manager for the current environment"""
    return ConfigManager(env=get_settings().environment)
