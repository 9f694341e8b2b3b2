"""
Date-partitioned log file store backing the /api/logs endpoint.
"""

from .store import LogFileStore

__all__ = ["LogFileStore"]
