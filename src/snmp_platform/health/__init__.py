"""
System health collection for the console host.
"""

from .system import SystemHealthCollector

__all__ = ["SystemHealthCollector"]
