"""Configuration data models using Pydantic."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AppConfig(BaseModel):
    """Application identity."""
    name: str = Field(
        default="userservice",
        description="Service name reported in logs and API metadata"
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)"
    )

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is known."""
        valid_environments = ["development", "staging", "production"]
        v = v.lower()
        if v not in valid_environments:
            raise ValueError(f"environment must be one of {valid_environments}")
        return v


class HTTPConfig(BaseModel):
    """HTTP adapter configuration."""
    host: str = Field(
        default="0.0.0.0",
        description="Interface to bind"
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port to listen on"
    )
    default_page_size: int = Field(
        default=10,
        ge=1,
        le=1000,
        description="Page size used when a listing request gives no valid limit"
    )
    max_page_size: int = Field(
        default=100,
        ge=1,
        le=1000,
        description="Largest page size a listing request may ask for"
    )
    docs_enabled: bool = Field(
        default=True,
        description="Serve OpenAPI docs at /docs"
    )

    @field_validator('max_page_size')
    @classmethod
    def validate_max_page_size(cls, v, info):
        """Ensure the default page fits under the maximum."""
        if 'default_page_size' in info.data and v < info.data['default_page_size']:
            raise ValueError("max_page_size must be at least default_page_size")
        return v


class RetryConfigModel(BaseModel):
    """Retry configuration for transient storage failures."""
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Maximum number of retry attempts"
    )
    initial_delay: float = Field(
        default=0.05,
        ge=0.0,
        le=10.0,
        description="Initial delay in seconds before first retry"
    )
    max_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Maximum delay in seconds between retries"
    )
    exponential_base: float = Field(
        default=2.0,
        ge=1.0,
        le=3.0,
        description="Exponential backoff base"
    )
    jitter: float = Field(
        default=0.1,
        ge=0.0,
        le=0.5,
        description="Jitter factor (0.1 = up to 10% extra delay)"
    )


class StorageConfig(BaseModel):
    """User store configuration."""
    provider: str = Field(
        default="sqlite",
        description="Store provider (memory, sqlite)"
    )
    path: str = Field(
        default="./userservice_data/users.sqlite3",
        description="SQLite database file"
    )
    timeout: float = Field(
        default=5.0,
        gt=0.0,
        le=300.0,
        description="Deadline in seconds for each store call"
    )
    retry: RetryConfigModel = Field(
        default_factory=RetryConfigModel,
        description="Retry policy for transient storage errors"
    )

    @field_validator('provider')
    @classmethod
    def validate_provider(cls, v):
        """Ensure provider is supported."""
        valid_providers = ["memory", "sqlite"]
        v = v.lower()
        if v not in valid_providers:
            raise ValueError(f"provider must be one of {valid_providers}")
        return v


class HealthConfig(BaseModel):
    """Health check configuration."""
    timeout: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="Total time budget in seconds for readiness checks"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    file: Optional[str] = Field(
        default=None,
        description="JSON log file path (console only when unset)"
    )
    console: bool = Field(
        default=True,
        description="Enable console logging"
    )
    rotation: str = Field(
        default="daily",
        description="Log rotation strategy (daily, none)"
    )
    retention_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Number of days to retain logs"
    )

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}")
        return v

    @field_validator('rotation')
    @classmethod
    def validate_rotation(cls, v):
        """Ensure rotation strategy is valid."""
        valid_strategies = ["daily", "none"]
        v = v.lower()
        if v not in valid_strategies:
            raise ValueError(f"rotation must be one of {valid_strategies}")
        return v


class UserServiceConfig(BaseModel):
    """Complete userservice configuration."""
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    app: AppConfig = Field(default_factory=AppConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    health: HealthConfig = Field(default_factory=HealthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def to_yaml(self) -> str:
        """Convert configuration to YAML string."""
        import yaml
        return yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False)
