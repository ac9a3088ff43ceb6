"""Server configuration using pydantic-settings, read once at startup."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from phishtank_mcp import __version__

# Requests per minute allowed by PhishTank with and without an app key
ANONYMOUS_REQUESTS_PER_MINUTE = 10
REGISTERED_REQUESTS_PER_MINUTE = 100


class Settings(BaseSettings):
    """PhishTank MCP settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="PHISHTANK_",
    )

    # Credentials
    api_key: str | None = Field(
        default=None, description="PhishTank application key (app_key)"
    )
    user_agent: str = Field(default=f"phishtank-mcp-server/{__version__}")

    # Logging
    log_level: str = Field(default="INFO")

    # Network
    http_timeout: float = Field(default=30.0)
    check_url_endpoint: str = Field(default="http://checkurl.phishtank.com/checkurl/")
    data_base_url: str = Field(default="http://data.phishtank.com/data")
    database_file: str = Field(default="online-valid.json")

    # Cache (seconds)
    url_check_ttl: int = Field(default=300)  # 5 minutes
    database_ttl: int = Field(default=3600)  # 1 hour

    @field_validator("api_key")
    @classmethod
    def empty_key_is_none(cls, v: str | None) -> str | None:
        """Treat a blank app key as not configured."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @property
    def has_api_key(self) -> bool:
        """Check whether an app key is configured."""
        return bool(self.api_key)

    @property
    def requests_per_minute(self) -> int:
        """Throttle budget: higher limits apply when an app key is set."""
        if self.has_api_key:
            return REGISTERED_REQUESTS_PER_MINUTE
        return ANONYMOUS_REQUESTS_PER_MINUTE

    @property
    def database_url(self) -> str:
        """Bulk download URL; the app key is part of the path when present."""
        base = self.data_base_url.rstrip("/")
        if self.api_key:
            return f"{base}/{self.api_key}/{self.database_file}"
        return f"{base}/{self.database_file}"


@lru_cache
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()
