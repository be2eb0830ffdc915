"""
Configuration management system using Pydantic Settings.
Supports environment-based configuration for different deployment environments.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import Optional
from enum import Enum


class Environment(str, Enum):
    """Supported deployment environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(str, Enum):
    """Supported log levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Main translatable settings"""

    app_name: str = Field(default="Translatable Records")
    environment: Environment = Field(default=Environment.DEVELOPMENT)

    # Locale Configuration
    default_locale: str = Field(default="en", min_length=1, max_length=16)
    locale: Optional[str] = Field(
        default=None,
        description="Initial active locale; the default locale when unset",
    )
    fallback_enabled: bool = Field(default=True)
    touch_timestamps: bool = Field(default=True)

    # Database Configuration
    database_url: str = Field(default="sqlite:///./translatable.db")
    database_echo: bool = Field(default=False)

    # Logging Configuration
    log_level: LogLevel = Field(default=LogLevel.INFO)
    log_format: str = Field(default="json", pattern="^(json|text)$")

    @field_validator('environment', mode='before')
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment setting"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    @field_validator('default_locale', 'locale', mode='before')
    @classmethod
    def normalize_locale(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def initial_locale(self) -> str:
        """Active locale a fresh translator starts with"""
        return self.locale or self.default_locale

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    model_config = {
        "env_prefix": "TRANSLATABLE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and files"""
    global settings
    settings = Settings()
    return settings
