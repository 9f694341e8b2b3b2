"""
Host inventory module.

Keeps the in-memory registry of discovered hosts and host groups used by the
monitoring installer.
"""

__all__ = ["models", "manager", "demo"]
