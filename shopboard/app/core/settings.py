"""
Application settings with validation using pydantic-settings.
Credentials decide whether the dashboard talks to Etsy or serves mock data.
"""
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Etsy API configuration (both required for live mode)
    ETSY_API_KEY: Optional[str] = Field(default=None, description="Etsy API key")
    ETSY_SHOP_ID: Optional[str] = Field(default=None, description="Etsy shop identifier")
    ETSY_API_BASE_URL: str = Field(
        default="https://openapi.etsy.com/v3/application",
        description="Etsy Open API base URL",
    )
    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=10.0, gt=0, description="Timeout for each call to the Etsy API (seconds)"
    )

    # Display configuration
    DISPLAY_TIMEZONE: Optional[str] = Field(
        default=None, description="IANA timezone for clock strings and 'today' (server local if unset)"
    )
    CURRENCY_SYMBOL: str = Field(default="$", description="Currency prefix on the trmnl display")

    # Server configuration
    HOST: str = Field(default="0.0.0.0", description="Listening host")
    PORT: int = Field(default=3000, description="Listening port")

    # CORS configuration
    ALLOWED_ORIGINS: str = Field(default="", description="Comma-separated list of allowed CORS origins")

    # Environment
    ENVIRONMENT: str = Field(default="development", description="Environment: development or production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        if v not in ("development", "production"):
            raise ValueError("ENVIRONMENT must be 'development' or 'production'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("DISPLAY_TIMEZONE")
    @classmethod
    def validate_timezone(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"DISPLAY_TIMEZONE '{v}' is not a known IANA timezone")
        return v

    @property
    def has_api_keys(self) -> bool:
        """True when both Etsy credentials are configured (live mode)."""
        return bool(self.ETSY_API_KEY and self.ETSY_SHOP_ID)

    @property
    def display_tz(self) -> Optional[ZoneInfo]:
        """Timezone for display strings; None means the server's local zone."""
        if not self.DISPLAY_TIMEZONE:
            return None
        return ZoneInfo(self.DISPLAY_TIMEZONE)

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get list of allowed CORS origins."""
        if not self.ALLOWED_ORIGINS:
            return []
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
