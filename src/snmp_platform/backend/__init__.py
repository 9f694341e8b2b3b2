"""
Backend package: HTTP client for the platform backend service.
"""

from .client import BackendClient, create_backend_client

__all__ = ["BackendClient", "create_backend_client"]
