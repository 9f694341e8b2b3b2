"""
Deployment endpoints: monitoring install, alert rules, configuration deploy,
bulk operations, component upgrades and config migration.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import BackendError, ValidationError, api_response
from snmp_platform.deployment.alert_rules import AlertRule, render_prometheus_rules, validate_rules
from snmp_platform.deployment.bulk import BulkOperationRunner
from snmp_platform.deployment.installer import MonitoringInstaller
from snmp_platform.deployment.migration import ConfigMigrationPlanner, get_migration_rules
from snmp_platform.deployment.models import InstallRequest
from snmp_platform.deployment.upgrade import UpgradeManager, UpgradeStrategy

from .deps import (
    forwarded_headers,
    get_backend_client,
    get_bulk_runner,
    get_installer,
    get_migration_planner,
    get_upgrade_manager,
)
from .proxy_api import passthrough_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["deployment"])

CONFIG_TYPES = ("monitoring", "alerting", "snmp")


def _backend_failure(error: BackendError, message: str) -> JSONResponse:
    logger.error(f"{message}: {error.message}")
    return JSONResponse(
        {"success": False, "error": message, "details": error.message},
        status_code=500,
    )


# Monitoring install

@router.post("/monitoring/install")
async def install_monitoring(
    request: InstallRequest,
    installer: MonitoringInstaller = Depends(get_installer),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Dict[str, Any]:
    """
    Deploy monitoring components to hosts.

    Each host gets a backend task that is executed and polled until it
    completes, fails or runs out of status checks.
    """
    report = await installer.install(request, headers)
    return report.to_api()


@router.get("/monitoring/install")
async def list_monitoring_components(
    backend: BackendClient = Depends(get_backend_client),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Response:
    try:
        response = await backend.get("deployment/components", headers=headers)
    except BackendError as e:
        return _backend_failure(e, "Failed to get monitoring components")
    return passthrough_response(response)


# Alert rules

@router.post("/alert-rules/deploy")
async def deploy_alert_rules(
    body: Dict[str, Any] = Body(...),
    backend: BackendClient = Depends(get_backend_client),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Response:
    rules = body.get("rules")
    if not isinstance(rules, list) or not rules:
        raise ValidationError("At least one alert rule is required", field="rules")

    failures = validate_rules(rules)
    if failures:
        logger.info(f"Rejected alert rule deployment: {len(failures)} invalid rule(s)")
        return JSONResponse(
            {"success": False, "error": "Invalid alert rules", "details": failures},
            status_code=400,
        )

    try:
        response = await backend.post("alert-deployment/deploy", json=body, headers=headers)
    except BackendError as e:
        return _backend_failure(e, "Failed to deploy alert rules")
    return passthrough_response(response)


@router.post("/alert-rules/render", response_class=PlainTextResponse)
async def render_alert_rules(body: Dict[str, Any] = Body(...)) -> Response:
    """Render rules as a Prometheus rule file (YAML)."""
    rules = body.get("rules")
    if not isinstance(rules, list) or not rules:
        raise ValidationError("At least one alert rule is required", field="rules")

    failures = validate_rules(rules)
    if failures:
        return JSONResponse(
            {"success": False, "error": "Invalid alert rules", "details": failures},
            status_code=400,
        )

    parsed = [AlertRule.model_validate(rule) for rule in rules]
    return PlainTextResponse(render_prometheus_rules(parsed), media_type="application/x-yaml")


# Configuration deploy

@router.post("/config/deploy")
async def deploy_config(
    body: Dict[str, Any] = Body(...),
    backend: BackendClient = Depends(get_backend_client),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Response:
    config_type = body.get("configType")
    if config_type in CONFIG_TYPES:
        endpoint = f"config-deployment/{config_type}"
    else:
        endpoint = "config-deployment/tasks"

    try:
        response = await backend.post(endpoint, json=body, headers=headers)
    except BackendError as e:
        return _backend_failure(e, "Failed to deploy configuration")
    return passthrough_response(response)


@router.get("/config/deploy")
async def list_config_templates(
    backend: BackendClient = Depends(get_backend_client),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Response:
    try:
        response = await backend.get("config-deployment/templates", headers=headers)
    except BackendError as e:
        return _backend_failure(e, "Failed to get configuration templates")
    return passthrough_response(response)


# Bulk operations

@router.post("/bulk-operations/execute")
async def execute_bulk_operation(
    body: Dict[str, Any] = Body(...),
    runner: BulkOperationRunner = Depends(get_bulk_runner),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Dict[str, Any]:
    return await runner.execute(
        body.get("operation"),
        host_ids=body.get("hostIds"),
        components=body.get("components"),
        commands=body.get("commands"),
        headers=headers,
    )


@router.get("/bulk-operations/execute")
async def get_bulk_operation(
    execution_id: Optional[str] = Query(None, alias="executionId"),
    runner: BulkOperationRunner = Depends(get_bulk_runner),
) -> Dict[str, Any]:
    if not execution_id:
        raise ValidationError("executionId is required", field="executionId")
    return {"success": True, "status": runner.get_execution(execution_id)}


# Upgrades

@router.post("/monitoring/upgrade")
async def upgrade_components(
    body: Dict[str, Any] = Body(...),
    upgrades: UpgradeManager = Depends(get_upgrade_manager),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Dict[str, Any]:
    action = body.get("action")
    host_id = body.get("hostId")
    components: List[str] = body.get("components") or []
    target_versions = body.get("targetVersions") or {}
    if not isinstance(components, list):
        raise ValidationError("components must be a list", field="components")
    if not isinstance(target_versions, dict):
        raise ValidationError("targetVersions must be an object", field="targetVersions")

    if action == "check":
        statuses = await upgrades.check(host_id, components, target_versions, headers)
        return api_response.success([s.model_dump(mode="json", by_alias=True) for s in statuses])

    if action == "upgrade":
        strategy = UpgradeStrategy.model_validate(body["strategy"]) if body.get("strategy") else None
        tasks = await upgrades.upgrade(host_id, components, target_versions, strategy, headers)
        return api_response.success(tasks)

    if action == "status":
        return api_response.success(await upgrades.status(body.get("taskId"), headers))

    if action == "rollback":
        return api_response.success(await upgrades.rollback(body.get("taskId"), headers))

    raise ValidationError("Invalid action", field="action")


@router.get("/monitoring/upgrade")
async def get_upgrade_status(
    task_id: Optional[str] = Query(None, alias="taskId"),
    upgrades: UpgradeManager = Depends(get_upgrade_manager),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Dict[str, Any]:
    return api_response.success(await upgrades.status(task_id, headers))


# Configuration migration

@router.post("/monitoring/config-migration")
async def config_migration(
    body: Dict[str, Any] = Body(...),
    planner: ConfigMigrationPlanner = Depends(get_migration_planner),
    headers: Dict[str, str] = Depends(forwarded_headers),
) -> Dict[str, Any]:
    """
    Analyze, preview, execute or roll back the config migration that
    accompanies a component upgrade.
    """
    action = body.get("action")
    args = (
        body.get("hostId"),
        body.get("componentName"),
        body.get("fromVersion"),
        body.get("toVersion"),
    )

    if action == "analyze":
        return api_response.success(planner.analyze(*args))

    if action == "preview":
        config_files = body.get("configFiles") or []
        if not isinstance(config_files, list):
            raise ValidationError("configFiles must be a list", field="configFiles")
        return api_response.success(planner.preview(*args, config_files))

    if action == "execute":
        options = body.get("options") or {}
        if not isinstance(options, dict):
            raise ValidationError("options must be an object", field="options")
        return api_response.success(await planner.execute(*args, options, headers))

    if action == "rollback":
        return api_response.success(await planner.rollback(body.get("migrationId"), headers))

    raise ValidationError("Invalid action", field="action")


@router.get("/monitoring/config-migration")
async def get_migration_rules_route(
    action: Optional[str] = Query(None),
    component: Optional[str] = Query(None),
    from_version: Optional[str] = Query(None, alias="from"),
    to_version: Optional[str] = Query(None, alias="to"),
) -> Dict[str, Any]:
    if action != "rules" or not (component and from_version and to_version):
        raise ValidationError("Invalid parameters")
    rule_sets = get_migration_rules(component, from_version, to_version)
    return api_response.success([r.model_dump(mode="json", by_alias=True) for r in rule_sets])
