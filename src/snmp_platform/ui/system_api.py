"""
System health endpoints.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import AppConfig
from snmp_platform.core.errors import ValidationError, api_response
from snmp_platform.health.system import SystemHealthCollector
from snmp_platform.logs.store import LogFileStore

from .deps import get_backend_client, get_log_store, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
async def system_health(
    backend: BackendClient = Depends(get_backend_client),
    settings: AppConfig = Depends(get_settings),
) -> Dict[str, Any]:
    collector = SystemHealthCollector(backend, settings.logging.dir)
    return api_response.success(await collector.collect())


@router.post("/health")
async def system_maintenance(
    body: Dict[str, Any] = Body(...),
    store: LogFileStore = Depends(get_log_store),
    settings: AppConfig = Depends(get_settings),
) -> Dict[str, Any]:
    action = body.get("action")
    if action != "cleanup":
        raise ValidationError(f"Unsupported action: {action}", field="action")

    removed = store.prune(settings.logging.retention_days)
    return api_response.success(
        {"removed": removed},
        message=f"Removed {len(removed)} old log file(s)",
    )
