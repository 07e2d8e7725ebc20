from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


_DEFAULT_DATA_ROOT = Path.home() / "multilingual-system"


class AppSettings(BaseSettings):
    """Application configuration loaded from environment or .env."""

    app_name: str = Field(default="Localegen API")
    app_env: str = Field(default="dev", alias="APP_ENV")
    debug: bool = Field(default=False, alias="APP_DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8080, alias="API_PORT")
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"], alias="CORS_ALLOW_ORIGINS"
    )

    database_url: Optional[str] = Field(default=None, alias="DATABASE_URL")

    translation_endpoint_url: str = Field(
        default="http://localhost:5002/v1/chat/completions",
        alias="TRANSLATION_ENDPOINT_URL",
    )
    translation_model: Optional[str] = Field(default=None, alias="TRANSLATION_MODEL")
    translation_api_key: Optional[SecretStr] = Field(
        default=None, alias="TRANSLATION_API_KEY"
    )
    translation_temperature: float = Field(default=0.3, alias="TRANSLATION_TEMPERATURE")
    translation_timeout_seconds: float = Field(
        default=60.0, alias="TRANSLATION_TIMEOUT_SECONDS"
    )
    translation_chunk_size: int = Field(default=5, ge=1, alias="TRANSLATION_CHUNK_SIZE")
    default_source_language: str = Field(default="en", alias="DEFAULT_SOURCE_LANGUAGE")

    upload_dir: Path = Field(default=_DEFAULT_DATA_ROOT / "uploads", alias="UPLOAD_DIR")
    generation_dir: Path = Field(
        default=_DEFAULT_DATA_ROOT / "generated-translations", alias="GENERATION_DIR"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> AppSettings:
    """Return cached application settings."""
    return AppSettings()  # type: ignore[call-arg]
