"""Configuration management using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini credentials: an API key, or Vertex AI with a GCP project
    gemini_api_key: str = ""
    use_vertexai: bool = False
    gcp_project_id: str = ""
    vertex_ai_location: str = "global"

    # Model selection
    text_model: str = "gemini-3-flash-preview"
    image_model: str = "gemini-2.5-flash-image"

    # Per-stage timeout for remote generation calls
    request_timeout_seconds: float = Field(default=60.0, gt=0)

    # Application settings
    app_name: str = "burnmaster-pro"
    history_limit: int = Field(default=10, ge=1)

    # Server settings
    backend_host: str = "localhost"
    backend_port: int = 8000
    frontend_port: int = 3000

    @model_validator(mode="after")
    def _check_credentials(self) -> "Settings":
        if self.use_vertexai:
            if not self.gcp_project_id:
                raise ValueError("GCP_PROJECT_ID is required when USE_VERTEXAI is enabled")
        elif not self.gemini_api_key:
            raise ValueError("GEMINI_API_KEY is required")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
