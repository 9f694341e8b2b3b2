"""
Shared dependencies for the API routers.

Process-wide services are created lazily on first use. Tests replace them
through ``app.dependency_overrides``.
"""

import logging
from typing import Dict, Optional

from fastapi import Depends, Request

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import AppConfig, get_config
from snmp_platform.deployment.bulk import BulkOperationRunner
from snmp_platform.deployment.installer import MonitoringInstaller
from snmp_platform.deployment.migration import ConfigMigrationPlanner
from snmp_platform.deployment.upgrade import UpgradeManager
from snmp_platform.inventory.manager import HostManager
from snmp_platform.logs.store import LogFileStore

logger = logging.getLogger(__name__)

_backend: Optional[BackendClient] = None
_host_manager: Optional[HostManager] = None
_bulk_runner: Optional[BulkOperationRunner] = None


def get_settings() -> AppConfig:
    return get_config()


def get_backend_client() -> BackendClient:
    global _backend
    if _backend is None:
        _backend = BackendClient(get_config().backend)
    return _backend


def get_host_manager() -> HostManager:
    global _host_manager
    if _host_manager is None:
        _host_manager = HostManager()
    return _host_manager


def get_bulk_runner(backend: BackendClient = Depends(get_backend_client)) -> BulkOperationRunner:
    global _bulk_runner
    if _bulk_runner is None:
        _bulk_runner = BulkOperationRunner(backend)
    return _bulk_runner


def get_log_store(settings: AppConfig = Depends(get_settings)) -> LogFileStore:
    return LogFileStore(settings.logging.dir)


def get_installer(
    backend: BackendClient = Depends(get_backend_client),
    hosts: HostManager = Depends(get_host_manager),
    settings: AppConfig = Depends(get_settings),
) -> MonitoringInstaller:
    return MonitoringInstaller(backend, hosts, settings.deployment)


def get_upgrade_manager(backend: BackendClient = Depends(get_backend_client)) -> UpgradeManager:
    return UpgradeManager(backend)


def get_migration_planner(backend: BackendClient = Depends(get_backend_client)) -> ConfigMigrationPlanner:
    return ConfigMigrationPlanner(backend)


def forwarded_headers(request: Request) -> Dict[str, str]:
    """Headers passed on to the backend (only Authorization)."""
    authorization = request.headers.get("authorization")
    return {"Authorization": authorization} if authorization else {}


async def close_backend_client() -> None:
    global _backend, _bulk_runner
    if _backend is not None:
        await _backend.close()
        logger.debug("Closed backend client")
    _backend = None
    _bulk_runner = None
