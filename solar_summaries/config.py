"""
Configuration management for the solar summaries service.

Uses Pydantic settings for validation and environment variable support.
"""
from datetime import time
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.exceptions import ConfigurationException


class DatabaseSettings(BaseSettings):
    """Postgres (Supabase) datastore configuration."""

    model_config = SettingsConfigDict(
        env_prefix='DB_',
        env_file='.env',
        extra='ignore'
    )

    dsn: Optional[str] = Field(default=None, description='Full connection string, overrides host/port/user')
    host: str = Field(default='localhost', description='Database host')
    port: int = Field(default=5432, description='Database port')
    name: str = Field(default='postgres', description='Database name')
    user: str = Field(default='postgres', description='Database user')
    password: Optional[str] = Field(default=None, description='Database password')
    pool_size: int = Field(default=5, description='Connection pool size')
    max_overflow: int = Field(default=10, description='Max overflow connections')
    echo_sql: bool = Field(default=False, description='Echo SQL queries')

    @property
    def is_configured(self) -> bool:
        """Whether credentials for the datastore are present."""
        return bool(self.dsn or self.password)

    @property
    def url(self) -> str:
        """
        Build the async database URL.

        Raises:
            ConfigurationException: If no credentials are configured.
        """
        if self.dsn:
            dsn = self.dsn
            for prefix in ('postgres://', 'postgresql://'):
                if dsn.startswith(prefix):
                    return 'postgresql+asyncpg://' + dsn[len(prefix):]
            return dsn

        if not self.password:
            raise ConfigurationException(
                "Missing datastore credentials: set DB_DSN or DB_PASSWORD",
                setting='DB_PASSWORD',
            )
        return f"postgresql+asyncpg://{self.user}:{self.password}@{self.host}:{self.port}/{self.name}"


class ClerkSettings(BaseSettings):
    """Clerk identity provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix='CLERK_',
        env_file='.env',
        extra='ignore'
    )

    secret_key: Optional[str] = Field(default=None, description='Clerk Backend API secret key')
    api_url: str = Field(default='https://api.clerk.com/v1', description='Clerk Backend API base URL')
    jwt_key: Optional[str] = Field(
        default=None,
        description='PEM public key for networkless session token verification'
    )
    authorized_parties: List[str] = Field(
        default_factory=list,
        description='Allowed values for the azp claim (empty allows any)'
    )
    jwks_cache_seconds: int = Field(default=3600, description='How long fetched JWKS stay cached')
    leeway_seconds: int = Field(default=5, description='Clock skew allowed when checking exp/nbf')
    timeout: float = Field(default=10.0, description='HTTP timeout in seconds')


class AggregationSettings(BaseSettings):
    """Daily/monthly summary aggregation configuration."""

    model_config = SettingsConfigDict(
        env_prefix='AGGREGATION_',
        env_file='.env',
        extra='ignore'
    )

    default_timezone: str = Field(default='Asia/Colombo', description='IANA timezone of devices')
    device_timezones: Dict[str, str] = Field(
        default_factory=dict,
        description='Per-device IANA timezone overrides keyed by serial'
    )
    finalize_cutoff: time = Field(
        default=time(23, 0),
        description='Local time of day after which today may be finalized'
    )
    scheduled_days: int = Field(default=2, ge=1, description='Window of the scheduled daily run')
    backfill_days: int = Field(default=30, ge=1, description='Default backfill window in days')
    live_retention_days: int = Field(default=14, ge=1, description='Live readings older than this are pruned')
    prune_enabled: bool = Field(default=True, description='Prune old live readings after the daily run')

    def timezone_for(self, serial: str) -> str:
        """Get the IANA timezone name for a device."""
        return self.device_timezones.get(serial, self.default_timezone)


class CORSSettings(BaseSettings):
    """CORS configuration."""

    model_config = SettingsConfigDict(
        env_prefix='CORS_',
        env_file='.env',
        extra='ignore'
    )

    allowed_origins: List[str] = Field(
        default=['http://localhost:3000', 'http://localhost:5173'],
        description='Allowed origins for CORS'
    )
    allow_credentials: bool = Field(default=True)
    allowed_methods: List[str] = Field(default=['GET', 'POST', 'PATCH', 'DELETE', 'OPTIONS'])
    allowed_headers: List[str] = Field(default=['*'])


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore'
    )

    # Application
    app_name: str = Field(default='Solar Summaries')
    app_version: str = Field(default='1.0.0')
    debug: bool = Field(default=False)
    environment: str = Field(default='development')  # development, staging, production

    # Server
    host: str = Field(default='0.0.0.0')
    port: int = Field(default=8000)
    workers: int = Field(default=1)
    reload: bool = Field(default=False)

    # API
    api_prefix: str = Field(default='/api')
    api_version: str = Field(default='v1')

    # Logging
    log_level: str = Field(default='INFO')

    # Bearer token required by the hosted job endpoints when set
    jobs_token: Optional[str] = Field(default=None)

    # Sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    clerk: ClerkSettings = Field(default_factory=ClerkSettings)
    aggregation: AggregationSettings = Field(default_factory=AggregationSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == 'production'

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == 'development'


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return AppSettings()
