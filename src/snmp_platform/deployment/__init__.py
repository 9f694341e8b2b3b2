"""
Deployment module.

Monitoring component installation with task polling, alert rule deployment,
bulk operations and component upgrades. All of them drive the platform
backend's deployment API.
"""

__all__ = ["models", "installer", "alert_rules", "bulk", "upgrade"]
