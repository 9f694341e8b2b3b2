"""
Server-rendered dashboard pages.
"""

import logging
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from snmp_platform import __version__
from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import AppConfig
from snmp_platform.core.errors import BackendError
from snmp_platform.health.system import SystemHealthCollector
from snmp_platform.inventory.manager import HostManager
from snmp_platform.inventory.models import HostStatus

from .deps import get_backend_client, get_host_manager, get_settings
from .i18n import SUPPORTED_LANGUAGES, resolve_language, translate

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"], include_in_schema=False)

DEVICE_COLUMNS = [
    "devices.name",
    "devices.ip",
    "devices.type",
    "devices.vendor",
    "devices.status",
    "devices.last_seen",
    "devices.actions",
]


def _items(data: Any, *keys: str) -> List[Dict[str, Any]]:
    """Backend list payloads come bare or wrapped under one of ``keys``."""
    if isinstance(data, dict):
        for key in keys:
            if isinstance(data.get(key), list):
                return data[key]
        return []
    return data if isinstance(data, list) else []


def _render(request: Request, template: str, lang: Optional[str], **context: Any) -> HTMLResponse:
    language = resolve_language(lang)
    context.update(
        {
            "lang": language,
            "languages": SUPPORTED_LANGUAGES,
            "t": partial(translate, lang=language),
            "version": __version__,
            "path": request.url.path,
        }
    )
    return templates.TemplateResponse(request, template, context)


async def _fetch_list(backend: BackendClient, resource: str) -> Optional[List[Dict[str, Any]]]:
    """Backend list, or None when the backend cannot serve it."""
    try:
        data = await backend.get_json(resource)
    except BackendError as e:
        logger.warning(f"Could not load {resource} for page: {e.message}")
        return None
    return _items(data, "data", resource, "items")


@router.get("/", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    lang: Optional[str] = Query(None),
    hosts: HostManager = Depends(get_host_manager),
    backend: BackendClient = Depends(get_backend_client),
):
    all_hosts = hosts.list_hosts()
    summary = {
        "total": len(all_hosts),
        "online": sum(1 for h in all_hosts if h.status == HostStatus.ONLINE),
        "monitored": sum(1 for h in all_hosts if h.monitoring_enabled),
    }
    backend_ok = await backend.health_check()
    return _render(request, "dashboard.html", lang, summary=summary, backend_ok=backend_ok)


@router.get("/devices", response_class=HTMLResponse)
async def devices_page(
    request: Request,
    lang: Optional[str] = Query(None),
    backend: BackendClient = Depends(get_backend_client),
):
    devices = await _fetch_list(backend, "devices")
    return _render(
        request,
        "devices.html",
        lang,
        columns=[translate(key, resolve_language(lang)) for key in DEVICE_COLUMNS],
        devices=devices or [],
        backend_ok=devices is not None,
    )


@router.get("/mibs", response_class=HTMLResponse)
async def mibs_page(
    request: Request,
    lang: Optional[str] = Query(None),
    backend: BackendClient = Depends(get_backend_client),
):
    mibs = await _fetch_list(backend, "mibs")
    return _render(request, "mibs.html", lang, mibs=mibs or [], backend_ok=mibs is not None)


@router.get("/system-health", response_class=HTMLResponse)
async def system_health_page(
    request: Request,
    lang: Optional[str] = Query(None),
    backend: BackendClient = Depends(get_backend_client),
    settings: AppConfig = Depends(get_settings),
):
    metrics = await SystemHealthCollector(backend, settings.logging.dir).collect()
    return _render(request, "system_health.html", lang, metrics=metrics)
