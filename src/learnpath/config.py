"""learnpath configuration management."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "learnpath"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Security - API token for /api/* routes
    api_token: str | None = None

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000"

    # Upstream completion service (Groq, OpenAI-compatible)
    groq_api_key: str | None = None
    groq_base_url: str = "https://api.groq.com/openai/v1"
    model_name: str = "meta-llama/llama-4-scout-17b-16e-instruct"
    request_timeout: float = 60.0

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
