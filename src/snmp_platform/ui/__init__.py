"""
User interface and API module.

Provides the dashboard pages and the REST API route handlers.
"""

__all__ = [
    "deps",
    "proxy_api",
    "hosts_api",
    "snmp_api",
    "deployment_api",
    "mibs_api",
    "system_api",
    "logs_api",
    "pages",
    "i18n",
    "http_server",
]
