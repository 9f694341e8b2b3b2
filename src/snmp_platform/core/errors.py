"""
Application error hierarchy and JSON response envelopes.

Every error raised inside a route handler that derives from AppError is
turned into a ``{"success": false, "error": {...}}`` response by the
exception handler registered in ``snmp_platform.ui.http_server``.
"""

import logging
import math
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that carry an HTTP status."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        is_operational: bool = True,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational
        self.code = code


class ValidationError(AppError):
    """Raised when request input is invalid."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, 400, True, "VALIDATION_ERROR")
        self.field = field


class UnauthorizedError(AppError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, 401, True, "UNAUTHORIZED")


class ForbiddenError(AppError):
    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, 403, True, "FORBIDDEN")


class NotFoundError(AppError):
    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found", 404, True, "NOT_FOUND")


class ConflictError(AppError):
    def __init__(self, message: str):
        super().__init__(message, 409, True, "CONFLICT")


class InternalServerError(AppError):
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, 500, False, "INTERNAL_SERVER_ERROR")


class BackendError(AppError):
    """
    Raised when the platform backend cannot be reached or rejects a call.

    A status of 502 means no response was received at all.
    """

    def __init__(self, message: str, status_code: int = 502, detail: Any = None):
        super().__init__(message, status_code, True, "BACKEND_ERROR")
        self.detail = detail


def describe_validation_errors(errors: List[Dict[str, Any]]) -> str:
    """Join pydantic error entries into ``loc: msg; loc: msg``."""
    parts = []
    for err in errors:
        location = ".".join(str(part) for part in err.get("loc", ()))
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def handle_error(error: Exception, include_stack: bool = False) -> Dict[str, Any]:
    """
    Describe an exception as message, status code and error code.

    Args:
        error: Exception to describe
        include_stack: Add a formatted traceback (development only)

    Returns:
        Dictionary with message, status_code, code and optionally stack
    """
    if isinstance(error, AppError):
        info: Dict[str, Any] = {
            "message": error.message,
            "status_code": error.status_code,
            "code": error.code,
        }
    else:
        info = {
            "message": "Something went wrong",
            "status_code": 500,
            "code": "INTERNAL_SERVER_ERROR",
        }

    if include_stack:
        info["stack"] = "".join(
            traceback.format_exception(type(error), error, error.__traceback__)
        )
    return info


def _timestamp() -> str:
    return datetime.utcnow().isoformat()


class ApiResponse:
    """Builders for the standard JSON envelopes."""

    @staticmethod
    def success(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": True, "data": data, "timestamp": _timestamp()}
        if message:
            body["message"] = message
        return body

    @staticmethod
    def error(error: Exception, message: Optional[str] = None) -> Dict[str, Any]:
        info = handle_error(error)
        return {
            "success": False,
            "error": {
                "message": message or info["message"],
                "code": info["code"],
                "status_code": info["status_code"],
            },
            "timestamp": _timestamp(),
        }

    @staticmethod
    def paginated(
        items: List[Any],
        total: int,
        page: int,
        limit: int,
        message: Optional[str] = None,
    ) -> Dict[str, Any]:
        if limit <= 0:
            raise ValidationError("limit must be positive", field="limit")
        body: Dict[str, Any] = {
            "success": True,
            "data": {
                "items": items,
                "pagination": {
                    "total": total,
                    "page": page,
                    "limit": limit,
                    "total_pages": math.ceil(total / limit),
                    "has_next": page * limit < total,
                    "has_prev": page > 1,
                },
            },
            "timestamp": _timestamp(),
        }
        if message:
            body["message"] = message
        return body


api_response = ApiResponse()


def log_error(error: Exception, **context: Any) -> None:
    """
    Log an error with context.

    Operational errors (bad input, missing resources) are logged as warnings,
    everything else as errors with a traceback.
    """
    if isinstance(error, AppError) and error.is_operational:
        logger.warning(f"Operational error: {error.message} {context or ''}".rstrip())
    else:
        logger.error(f"System error: {error} {context or ''}".rstrip(), exc_info=error)
