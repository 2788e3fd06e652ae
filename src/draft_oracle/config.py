"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Settings
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS - comma-separated origins (env var: CORS_ORIGINS)
    cors_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # Cache store (DuckDB file; empty keeps entries in memory)
    cache_database_path: str = ""
    cache_default_ttl_ms: int = 60 * 60 * 1000
    cache_sweep_interval_ms: int = 5 * 60 * 1000
    cache_evict_batch_size: int = 5

    # Rate limiting
    rate_limit_max_requests: int = 30
    rate_limit_window_ms: int = 60_000

    # Upstash Redis REST (rate limit counters shared across instances)
    upstash_redis_rest_url: str = ""
    upstash_redis_rest_token: str = ""

    # LLM Provider (OpenAI-compatible chat completions)
    ai_api_url: str = "https://api.tokenfactory.us-central1.nebius.com/v1/chat/completions"
    ai_api_key: str = ""
    ai_model: str = "deepseek-ai/DeepSeek-V3-0324-fast"
    ai_timeout_seconds: float = 15.0

    # Feature flags
    enable_ai: bool = True
    enable_analysis_worker: bool = False

    @computed_field
    @property
    def redis_configured(self) -> bool:
        return bool(self.upstash_redis_rest_url and self.upstash_redis_rest_token)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
