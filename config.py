import os
from dataclasses import dataclass
from typing import Mapping, Optional

from models.errors import ConfigError


@dataclass
class Config:
    """Application configuration."""

    # OpenAI (Whisper + chat completions)
    openai_api_key: str
    openai_base_url: Optional[str] = None
    azure_openai_endpoint: Optional[str] = None
    azure_openai_api_version: str = "2024-10-21"
    transcription_model: str = "whisper-1"
    summarization_model: str = "gpt-4o-mini"
    transcription_language: str = "en"

    # Supabase (podcast rows + audio bucket)
    supabase_url: Optional[str] = None
    supabase_service_key: Optional[str] = None
    podcasts_table: str = "podcasts"
    audio_bucket: str = "audio-files"

    # Audio storage backend: "supabase", "azure" or "local"
    storage_backend: str = "supabase"
    azure_storage_connection_string: Optional[str] = None
    azure_storage_container: str = "audio-files"
    local_storage_path: str = "/tmp/local_storage"

    # Whisper rejects uploads above 25MB
    max_audio_bytes: int = 25 * 1024 * 1024

    # Timeouts per external call, in seconds
    retrieval_timeout: int = 60
    transcription_timeout: int = 120
    summarization_timeout: int = 60

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build the configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Config instance

        Raises:
            ConfigError: If a required setting is missing or malformed
        """
        env = os.environ if environ is None else environ

        openai_api_key = env.get("OPENAI_API_KEY")
        if not openai_api_key:
            raise ConfigError(
                "OpenAI API key not configured. Please add OPENAI_API_KEY to the function app settings.")

        config = cls(
            openai_api_key=openai_api_key,
            openai_base_url=env.get("OPENAI_BASE_URL") or None,
            azure_openai_endpoint=env.get("AZURE_OPENAI_ENDPOINT") or None,
            azure_openai_api_version=env.get(
                "AZURE_OPENAI_API_VERSION", "2024-10-21"),
            transcription_model=env.get("TRANSCRIPTION_MODEL", "whisper-1"),
            summarization_model=env.get("SUMMARIZATION_MODEL", "gpt-4o-mini"),
            transcription_language=env.get("TRANSCRIPTION_LANGUAGE", "en"),
            supabase_url=env.get("SUPABASE_URL") or None,
            supabase_service_key=env.get("SUPABASE_SERVICE_ROLE_KEY") or None,
            podcasts_table=env.get("PODCASTS_TABLE", "podcasts"),
            audio_bucket=env.get("AUDIO_BUCKET", "audio-files"),
            storage_backend=env.get("AUDIO_STORAGE_BACKEND", "supabase").lower(),
            azure_storage_connection_string=env.get(
                "AZURE_STORAGE_CONNECTION_STRING") or None,
            azure_storage_container=env.get(
                "AZURE_STORAGE_CONTAINER", "audio-files"),
            local_storage_path=env.get(
                "LOCAL_STORAGE_PATH", "/tmp/local_storage"),
            retrieval_timeout=_int_setting(env, "RETRIEVAL_TIMEOUT", 60),
            transcription_timeout=_int_setting(
                env, "TRANSCRIPTION_TIMEOUT", 120),
            summarization_timeout=_int_setting(
                env, "SUMMARIZATION_TIMEOUT", 60),
        )
        config.validate()
        return config

    def validate(self) -> None:
        """Check that the selected backends have their credentials."""
        if not self.supabase_url or not self.supabase_service_key:
            raise ConfigError(
                "Supabase is not configured. Please set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")

        if self.storage_backend not in ("supabase", "azure", "local"):
            raise ConfigError(
                f"Unknown AUDIO_STORAGE_BACKEND: {self.storage_backend}")

        if self.storage_backend == "azure" and not self.azure_storage_connection_string:
            raise ConfigError(
                "AZURE_STORAGE_CONNECTION_STRING is required for the azure storage backend.")


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value
