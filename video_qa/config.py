from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings

from video_qa.pipeline_config import CacheBackend


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API keys
    openai_api_key: str = ""

    # Provider
    openai_base_url: str = "https://api.openai.com/v1"
    embedding_model: str = "text-embedding-3-small"
    llm_model: str = "gpt-3.5-turbo"
    request_timeout: float = 60.0

    # Chunking / embedding
    max_chunk_chars: int = 1000
    max_embedding_input_chars: int = 8000
    embedding_interval_seconds: float = 0.2
    embedding_batch_size: int = 5
    min_transcript_chars: int = 100

    # Answering
    top_k: int = 3
    answer_max_tokens: int = 500
    answer_temperature: float = 0.1
    answer_top_p: float = 0.9

    # Cache
    cache_backend: CacheBackend = CacheBackend.FILE
    cache_path: str = ".cache/video_qa.json"
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_cache_table: str = "transcript_cache"

    # Transcript source
    transcripts_dir: str = "transcripts"

    # App config
    api_host: str = "0.0.0.0"
    api_port: int = 8000

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
