"""
Settings for the orbis-access engine.

Values are read from ORBIS_ACCESS_* environment variables or a .env file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccessSettings(BaseSettings):
    """Runtime configuration for the permission engine."""

    model_config = SettingsConfigDict(
        env_prefix="ORBIS_ACCESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_pool_min_size: int = Field(default=1, ge=0)
    db_pool_max_size: int = Field(default=10, ge=1)
    db_command_timeout: float = Field(default=60.0, gt=0)

    # Permission cache
    permission_cache_ttl: float = Field(default=300.0)  # 5 minutes

    # Role defaults applied by create_role
    default_role_color: str = Field(default="#64748b")
    default_role_icon: str = Field(default="user")
    default_role_level: int = Field(default=50)

    # Audit trail
    audit_default_ip: str = Field(default="0.0.0.0")
    audit_recent_limit: int = Field(default=100, ge=1)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="simple")
    enable_sql_logging: bool = Field(default=False)

    @field_validator("permission_cache_ttl")
    @classmethod
    def _ttl_must_be_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("permission_cache_ttl must be greater than zero")
        return value

    @field_validator("log_format")
    @classmethod
    def _known_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in {"simple", "detailed", "json"}:
            raise ValueError(f"Unsupported log_format: {value}")
        return value

    @property
    def asyncpg_dsn(self) -> Optional[str]:
        """Database URL without the SQLAlchemy-style driver suffix."""
        if self.database_url and "+asyncpg" in self.database_url:
            return self.database_url.replace("+asyncpg", "")
        return self.database_url


@lru_cache()
def get_settings() -> AccessSettings:
    """Get cached settings instance."""
    return AccessSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
