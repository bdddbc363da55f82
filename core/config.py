"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from pathlib import Path
from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="XML Batch Converter", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Remote transformation service
    remote_url: str = Field(
        default="https://localhost:44357/api/account/processXml",
        alias="REMOTE_TRANSFORM_URL",
    )
    remote_content_type: str = Field(default="application/xml", alias="REMOTE_CONTENT_TYPE")
    remote_timeout: float = Field(default=5.0, alias="REMOTE_TIMEOUT")
    remote_verify_ssl: bool = Field(default=False, alias="REMOTE_VERIFY_SSL")
    remote_max_attempts: int = Field(default=1, alias="REMOTE_MAX_ATTEMPTS")

    # Remote encoding layout
    repeating_types: Annotated[List[str], NoDecode] = Field(
        default=["IbanHesap", "Details"], alias="REPEATING_TYPES"
    )
    scalar_sections: Annotated[List[str], NoDecode] = Field(
        default=["Parameters", "Header"], alias="SCALAR_SECTIONS"
    )

    # Storage
    temp_storage_path: str = Field(default="files", alias="STORAGE_PATH")
    max_upload_bytes: int = Field(default=10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("remote_timeout")
    @classmethod
    def validate_timeout(cls, v):
        """Remote calls must be bounded by a positive deadline."""
        if v <= 0:
            raise ValueError("Remote timeout must be positive")
        if v > 300:
            raise ValueError("Remote timeout should not exceed 300 seconds")
        return v

    @field_validator("remote_max_attempts")
    @classmethod
    def validate_attempts(cls, v):
        if not (1 <= v <= 5):
            raise ValueError("Remote max attempts must be between 1 and 5")
        return v

    @field_validator("repeating_types", "scalar_sections", mode="before")
    @classmethod
    def split_type_list(cls, v):
        """Accept comma separated strings from the environment."""
        if isinstance(v, str):
            v = [item.strip() for item in v.split(",")]
        return [item for item in v if item]

    @field_validator("repeating_types")
    @classmethod
    def validate_repeating_types(cls, v):
        if not v:
            raise ValueError("At least one repeating type is required")
        return v

    @field_validator("scalar_sections")
    @classmethod
    def validate_scalar_sections(cls, v):
        if len(v) != 2:
            raise ValueError("Exactly two scalar sections are required (parameters, header)")
        return v

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.temp_storage_path).mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.ensure_directories()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
