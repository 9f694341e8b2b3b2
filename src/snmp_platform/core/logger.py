"""
Application logger with an in-memory ring buffer.

Entries are mirrored to the standard ``logging`` module, kept in a bounded
buffer for the dashboard, and ERROR entries can be shipped to a remote
collector (normally this service's own ``/api/logs`` endpoint).
"""

import json
import logging
import os
from collections import deque
from datetime import datetime
from enum import IntEnum
from typing import Any, Deque, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging for the server and the CLI."""
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format=LOG_FORMAT,
    )


class LogLevel(IntEnum):
    """Client log levels, ordered by severity."""

    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3


_STDLIB_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARN: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class LogEntry(BaseModel):
    """A single application log record."""

    level: LogLevel
    message: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    context: Optional[Dict[str, Any]] = None
    user_id: Optional[str] = None
    session_id: Optional[str] = None
    component: Optional[str] = None
    action: Optional[str] = None


class LogBuffer:
    """Bounded list of recent log entries; the oldest entry is evicted first."""

    def __init__(self, capacity: int = 1000):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: LogEntry) -> None:
        self._entries.append(entry)

    def recent(self, count: int = 100) -> List[LogEntry]:
        if count <= 0:
            return []
        return list(self._entries)[-count:]

    def by_level(self, level: LogLevel) -> List[LogEntry]:
        return [e for e in self._entries if e.level == level]

    def clear(self) -> None:
        self._entries.clear()

    def export(self) -> str:
        return json.dumps([e.model_dump(mode="json") for e in self._entries], indent=2)


class AppLogger:
    """
    Structured application logger.

    Usage:
        app_log = get_app_logger()
        app_log.info("Deployment started", {"host_id": "1"})
        app_log.log_api_call("GET", "/api/devices", 12.5, 200)
    """

    def __init__(
        self,
        min_level: LogLevel = LogLevel.DEBUG,
        capacity: int = 1000,
        remote_url: Optional[str] = None,
        timeout: float = 5.0,
    ):
        self.min_level = min_level
        self.buffer = LogBuffer(capacity)
        self.remote_url = remote_url
        self.timeout = timeout
        self._log = logging.getLogger("snmp_platform.app")

    def should_log(self, level: LogLevel) -> bool:
        return level >= self.min_level

    def _add(self, entry: LogEntry) -> None:
        self.buffer.append(entry)
        self._log.log(
            _STDLIB_LEVELS[entry.level],
            entry.message,
            extra={"context": entry.context or {}},
        )
        if entry.level >= LogLevel.ERROR and self.remote_url:
            self._send_remote(entry)

    def _send_remote(self, entry: LogEntry) -> None:
        """Post an entry to the remote collector; failures are only logged."""
        try:
            response = httpx.post(
                self.remote_url,
                json=entry.model_dump(mode="json"),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug(f"Remote log delivery failed: {e}")

    def log(
        self,
        level: LogLevel,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        **fields: Any,
    ) -> Optional[LogEntry]:
        if not self.should_log(level):
            return None
        entry = LogEntry(level=level, message=message, context=context, **fields)
        self._add(entry)
        return entry

    def debug(self, message: str, context: Optional[Dict[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Optional[Dict[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, context)

    def warn(self, message: str, context: Optional[Dict[str, Any]] = None) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, context)

    def error(
        self,
        message: str,
        error: Optional[BaseException] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> Optional[LogEntry]:
        merged = dict(context or {})
        if error is not None:
            merged["error"] = {"name": type(error).__name__, "message": str(error)}
        return self.log(LogLevel.ERROR, message, merged or None)

    def log_api_call(
        self,
        method: str,
        url: str,
        duration_ms: float,
        status: int,
        context: Optional[Dict[str, Any]] = None,
    ) -> Optional[LogEntry]:
        """Record an API call; the level follows the response status."""
        message = f"API {method} {url} - {status} ({duration_ms:.0f}ms)"
        details = {"method": method, "url": url, "duration": duration_ms, "status": status}
        details.update(context or {})
        if status >= 400:
            return self.error(message, context=details)
        if status >= 300:
            return self.warn(message, details)
        return self.info(message, details)

    def log_user_action(
        self, action: str, component: str, context: Optional[Dict[str, Any]] = None
    ) -> Optional[LogEntry]:
        details = {"action": action, "component": component}
        details.update(context or {})
        return self.log(
            LogLevel.INFO,
            f"User action: {action} in {component}",
            details,
            action=action,
            component=component,
        )


_app_logger: Optional[AppLogger] = None


def get_app_logger() -> AppLogger:
    """
    Get the global application logger.

    WARN and above are recorded in production, everything otherwise.
    """
    global _app_logger
    if _app_logger is None:
        from snmp_platform.core.config import get_config

        config = get_config()
        _app_logger = AppLogger(
            min_level=LogLevel.WARN if config.is_production else LogLevel.DEBUG,
            capacity=config.logging.buffer_size,
            remote_url=config.logging.remote_url,
        )
    return _app_logger


def reset_app_logger() -> None:
    """Drop the global logger so the next call picks up fresh configuration."""
    global _app_logger
    _app_logger = None
