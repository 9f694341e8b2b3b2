"""
Host registry endpoints.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from snmp_platform.core.errors import ValidationError
from snmp_platform.inventory.manager import HostManager
from snmp_platform.inventory.models import HostGroup

from .deps import get_host_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/hosts", tags=["hosts"])


@router.get("")
async def list_hosts(
    component: Optional[str] = Query(None, description="Only hosts able to run this component"),
    group: Optional[str] = Query(None, description="Host group id, or 'all'"),
    hosts: HostManager = Depends(get_host_manager),
) -> Dict[str, Any]:
    """
    List deployable hosts.

    A group other than ``all`` replaces the component filter.
    """
    if group and group != "all":
        result = hosts.get_hosts_by_group(group)
    else:
        result = hosts.get_available_hosts(component)

    return {
        "success": True,
        "hosts": [host.to_api() for host in result],
        "total": len(result),
    }


@router.post("")
async def host_action(
    body: Dict[str, Any] = Body(...),
    hosts: HostManager = Depends(get_host_manager),
):
    action = body.get("action")

    if action == "add":
        host = hosts.add_discovered_host(body.get("hostData") or {})
        logger.info(f"Added host {host.id} ({host.ip})")
        return {"success": True, "host": host.to_api()}

    if action == "update-monitoring":
        host_ids = body.get("hostIds") or []
        components = body.get("components") or []
        for host_id in host_ids:
            hosts.update_host_monitoring(host_id, components)
        return {
            "success": True,
            "message": f"Updated monitoring status for {len(host_ids)} host(s)",
        }

    if action == "bulk-add":
        items = body.get("hosts") or []
        if not isinstance(items, list):
            raise ValidationError("hosts must be a list", field="hosts")
        if not all(isinstance(item, dict) for item in items):
            raise ValidationError("Each host must be an object", field="hosts")
        added = [hosts.add_discovered_host(item) for item in items]
        return {"success": True, "hosts": [h.to_api() for h in added], "count": len(added)}

    return JSONResponse({"success": False, "error": "Unsupported action"}, status_code=400)


@router.get("/groups")
async def list_groups(hosts: HostManager = Depends(get_host_manager)) -> Dict[str, Any]:
    groups = hosts.list_groups()
    return {"success": True, "groups": [g.to_api() for g in groups], "total": len(groups)}


@router.post("/groups", status_code=201)
async def create_group(
    group: HostGroup,
    hosts: HostManager = Depends(get_host_manager),
) -> Dict[str, Any]:
    hosts.add_group(group)
    logger.info(f"Registered host group {group.id}")
    return {"success": True, "group": group.to_api()}
