"""
Core module for the SNMP MIB Platform console.

Contains configuration, the error hierarchy and the application logger used
across all modules.
"""

from snmp_platform.core.config import AppConfig, get_api_url, get_config, reload_config
from snmp_platform.core.errors import (
    AppError,
    BackendError,
    ConflictError,
    NotFoundError,
    ValidationError,
    api_response,
)
from snmp_platform.core.logger import AppLogger, LogBuffer, LogEntry, LogLevel, get_app_logger

__all__ = [
    "AppConfig",
    "get_api_url",
    "get_config",
    "reload_config",
    "AppError",
    "BackendError",
    "ConflictError",
    "NotFoundError",
    "ValidationError",
    "api_response",
    "AppLogger",
    "LogBuffer",
    "LogEntry",
    "LogLevel",
    "get_app_logger",
]
