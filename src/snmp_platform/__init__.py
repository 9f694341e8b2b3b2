"""
SNMP MIB Platform - monitoring console

This package provides the console tier of the SNMP/MIB monitoring platform:
dashboard pages plus JSON API handlers that either forward to the platform
backend or run small pieces of local logic.

Main modules:
- core: configuration, error hierarchy, application logger
- backend: HTTP client for the platform backend
- inventory: in-memory host registry and host groups
- detection: SNMP server brand detection
- deployment: monitoring install polling, alert rules, bulk operations, upgrades
- mibs: MIB archive extraction and validation
- health: system health collection
- logs: date-partitioned log file store
- ui: FastAPI routers and pages
- cli: snmpctl operational CLI
"""

__version__ = "2.0.0"
__author__ = "SNMP Platform Team"

__all__ = ["__version__", "__author__"]
