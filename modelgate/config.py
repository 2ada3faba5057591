"""
Application configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: < 100 lines
- Clear naming: Descriptive property names
"""

from typing import Dict, List, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Application configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="ModelGate", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Debug mode")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000",
        description="CORS allowed origins",
    )

    # Provider catalog
    provider_catalog_path: Optional[str] = Field(
        default=None, description="JSON provider catalog (built-in catalog if unset)"
    )
    default_provider: str = Field(default="groq", description="Fallback provider id")
    default_model: Optional[str] = Field(
        default=None, description="Fallback model id (provider's first model if unset)"
    )

    # Provider secrets
    openai_api_key: str = Field(default="", description="OpenAI API key")
    groq_api_key: str = Field(default="", description="Groq API key")
    gemini_api_key: str = Field(default="", description="Gemini API key")
    openrouter_api_key: str = Field(default="", description="OpenRouter API key")

    # Cache settings
    cache_max_entries: int = Field(default=1000, ge=1, description="Cache capacity")
    cache_default_ttl_ms: int = Field(
        default=300_000, ge=0, description="Default cache TTL in milliseconds"
    )

    # Conversation settings
    max_conversations: int = Field(default=100, ge=1, description="Retained conversations")
    history_limit: int = Field(
        default=20, ge=1, description="Messages sent to the provider as context"
    )

    # Outbound call settings
    probe_timeout_seconds: float = Field(default=5.0, gt=0, description="Probe timeout")
    dispatch_timeout_seconds: float = Field(
        default=30.0, gt=0, description="Provider call timeout"
    )
    retry_attempts: int = Field(default=2, ge=1, le=10, description="Dispatch attempts")
    retry_initial_delay: float = Field(default=0.5, ge=0, description="First backoff delay")

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    def api_keys(self) -> Dict[str, str]:
        """API keys by provider id, configured keys only."""
        keys = {
            "openai": self.openai_api_key,
            "groq": self.groq_api_key,
            "gemini": self.gemini_api_key,
            "openrouter": self.openrouter_api_key,
        }
        return {provider_id: key for provider_id, key in keys.items() if key}

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = AppConfig()
