"""
Configuration management for the SNMP MIB Platform console.

Uses Pydantic Settings for environment variable validation and type safety.
"""

from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class BackendConfig(BaseSettings):
    """Platform backend connection configuration."""

    url: str = Field(
        default="http://localhost:17880",
        description="Backend base URL"
    )
    api_version: str = Field(
        default="v1",
        description="Backend API version path segment"
    )
    timeout: float = Field(
        default=30.0,
        gt=0,
        description="Request timeout in seconds"
    )
    retry_attempts: int = Field(
        default=3,
        ge=0,
        description="Number of retries for failed backend calls"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Delay between retries in seconds"
    )

    class Config:
        env_prefix = "BACKEND_"


class DeploymentConfig(BaseSettings):
    """Monitoring component deployment configuration."""

    poll_attempts: int = Field(
        default=60,
        ge=1,
        description="Maximum number of deployment status checks"
    )
    poll_interval: float = Field(
        default=2.0,
        ge=0,
        description="Seconds between deployment status checks"
    )
    simulate_on_failure: bool = Field(
        default=False,
        description="Report a simulated success when the backend fails (demo only)"
    )
    default_method: str = Field(
        default="docker",
        description="Deployment method used when the request does not name one"
    )

    class Config:
        env_prefix = "DEPLOY_"


class LoggingConfig(BaseSettings):
    """Application log configuration."""

    level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    dir: str = Field(
        default="logs",
        description="Directory for date-partitioned client log files"
    )
    buffer_size: int = Field(
        default=1000,
        ge=1,
        description="Number of entries kept in the in-memory log buffer"
    )
    remote_url: Optional[str] = Field(
        default=None,
        description="Endpoint that receives ERROR entries (optional)"
    )
    retention_days: int = Field(
        default=30,
        ge=1,
        description="Remove log partitions older than this many days on cleanup"
    )

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v = v.upper()
        if v not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v

    class Config:
        env_prefix = "LOG_"


class ServerConfig(BaseSettings):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=8000, description="Bind port")
    reload: bool = Field(default=False, description="Enable uvicorn auto-reload")
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    class Config:
        env_prefix = "API_"


class AppConfig(BaseSettings):
    """Main application configuration."""

    environment: str = Field(
        default="development",
        description="Runtime environment (development or production)"
    )
    seed_demo_hosts: bool = Field(
        default=True,
        description="Populate the host registry with demo hosts at startup"
    )
    mib_temp_dir: str = Field(
        default="temp/mib-extract",
        description="Scratch directory for MIB archive extraction"
    )

    # Nested configurations
    backend: BackendConfig = Field(default_factory=BackendConfig)
    deployment: DeploymentConfig = Field(default_factory=DeploymentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment name."""
        v = v.lower()
        if v not in ("development", "production", "test"):
            raise ValueError("Environment must be development, production or test")
        return v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global config instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get the global configuration instance.

    Lazily loads configuration on first access.

    Returns:
        AppConfig: The global configuration instance
    """
    global _config
    if _config is None:
        _config = AppConfig(
            backend=BackendConfig(),
            deployment=DeploymentConfig(),
            logging=LoggingConfig(),
            server=ServerConfig(),
        )
    return _config


def reload_config() -> AppConfig:
    """
    Reload configuration from environment variables.

    Useful for testing or when environment changes.

    Returns:
        AppConfig: The reloaded configuration instance
    """
    global _config
    _config = None
    return get_config()


def get_api_url(endpoint: str, config: Optional[BackendConfig] = None) -> str:
    """
    Build a full backend API URL.

    Args:
        endpoint: Resource path, with or without a leading slash
        config: Backend configuration (default: global config)

    Returns:
        URL of the form {base}/api/{version}/{endpoint}
    """
    config = config or get_config().backend
    base_url = config.url.rstrip("/")
    clean_endpoint = endpoint.lstrip("/")
    return f"{base_url}/api/{config.api_version}/{clean_endpoint}"
