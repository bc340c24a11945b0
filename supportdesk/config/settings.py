"""Application Settings - Central Configuration"""
from functools import lru_cache
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # MongoDB (must be a replica set for change streams)
    mongo_uri: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongo_db: str = "supportdesk_dev"

    # Sessions
    session_secret: str = "change-me-in-production"
    session_algorithm: str = "HS256"
    session_ttl_minutes: int = 60 * 12
    session_cookie_name: str = "sd_session"
    cookie_secure: bool = False

    # LLM provider: "azure" or "openai"
    llm_provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = "gpt-3.5-turbo"
    azure_openai_endpoint: str = ""
    azure_openai_api_key: str = ""
    azure_openai_deployment: str = "gpt-4"
    azure_openai_api_version: str = "2024-02-01"
    llm_temperature: float = 0.3

    # Summarization
    summary_chunk_size: int = 3000
    summary_chunk_overlap: int = 200
    summarization_timeout_seconds: float = 60.0

    # Realtime notifications
    notifier_heartbeat_seconds: float = 15.0
    # Base URL the notifier uses to reach the summarize endpoint.
    # Falls back to the incoming request's base URL when empty.
    app_base_url: Optional[str] = None

    # Logging
    logs_path: str = "./logs"
    log_to_file: bool = True
    log_level: str = "INFO"

    # CORS - set to "*" to allow all origins
    cors_origins: str = "*"

    # Environment
    environment: str = "development"
    debug: bool = True

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string to list"""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
