from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys
    openai_api_key: str = ""
    assemblyai_api_key: str = ""  # Optional; audio/video uploads return 501 if absent

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    log_level: str = "INFO"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Task extraction
    llm_model: str = "gpt-3.5-turbo"
    llm_temperature: float = 0.1
    llm_max_tokens: int = 1000
    llm_timeout_seconds: float = 30.0
    max_input_chars: int = 3000
    extraction_max_retries: int = 2
    retry_base_delay_seconds: float = 1.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
