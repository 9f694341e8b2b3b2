"""
Component version checks and upgrade task planning.
"""

import logging
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import ValidationError

from .migration import get_migration_rules

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"^v?(\d+(?:\.\d+)*)")


class VersionStatus(str, Enum):
    NOT_INSTALLED = "NOT_INSTALLED"
    SAME_VERSION = "SAME_VERSION"
    NEED_UPDATE = "NEED_UPDATE"
    NEWER_VERSION = "NEWER_VERSION"
    CORRUPTED = "CORRUPTED"


UPGRADE_ACTIONS = {
    VersionStatus.NOT_INSTALLED: "install",
    VersionStatus.SAME_VERSION: "skip",
    VersionStatus.NEED_UPDATE: "update",
    VersionStatus.NEWER_VERSION: "downgrade",
    VersionStatus.CORRUPTED: "reinstall",
}


class UpgradeStrategy(BaseModel):
    """How an upgrade is carried out on the host."""

    backup_config: bool = True
    backup_data: bool = True
    stop_service: bool = True
    migrate_config: bool = True
    rollback_enabled: bool = True
    upgrade_timeout: int = Field(default=1800, description="Seconds")
    health_check_delay: int = Field(default=30, description="Seconds")

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ComponentVersionStatus(BaseModel):
    """Installed vs. target version of one component."""

    name: str
    installed: bool
    current_version: Optional[str] = None
    target_version: str
    status: VersionStatus
    upgrade_action: str
    last_check: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


def parse_version(version: Optional[str]) -> Optional[Tuple[int, ...]]:
    """Parse ``1.2.3`` or ``v1.2.3``; returns None for anything else."""
    if not version:
        return None
    match = _VERSION_PATTERN.match(version.strip())
    if not match:
        return None
    return tuple(int(part) for part in match.group(1).split("."))


def compare_versions(left: Tuple[int, ...], right: Tuple[int, ...]) -> int:
    """Compare two parsed versions; missing parts count as 0."""
    width = max(len(left), len(right))
    left = left + (0,) * (width - len(left))
    right = right + (0,) * (width - len(right))
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def classify_component(
    name: str,
    installed_version: Optional[str],
    target_version: str,
    installed: bool,
) -> ComponentVersionStatus:
    """
    Decide what an upgrade should do with one component.

    An installed component whose version cannot be parsed is CORRUPTED. A
    target that is not a version number (e.g. ``latest``) always updates.
    """
    if not installed:
        status = VersionStatus.NOT_INSTALLED
    else:
        current = parse_version(installed_version)
        target = parse_version(target_version)
        if current is None:
            status = VersionStatus.CORRUPTED
        elif target is None:
            status = VersionStatus.NEED_UPDATE
        else:
            status = {
                0: VersionStatus.SAME_VERSION,
                -1: VersionStatus.NEED_UPDATE,
                1: VersionStatus.NEWER_VERSION,
            }[compare_versions(current, target)]

    return ComponentVersionStatus(
        name=name,
        installed=installed,
        current_version=installed_version if installed else None,
        target_version=target_version,
        status=status,
        upgrade_action=UPGRADE_ACTIONS[status],
    )


def build_upgrade_steps(
    strategy: UpgradeStrategy, from_version: str, to_version: str
) -> List[Dict[str, str]]:
    """Ordered upgrade steps; optional steps follow the strategy flags."""
    steps = [("pre_check", "Run pre-upgrade checks")]
    if strategy.backup_config:
        steps.append(("backup_config", "Back up configuration files"))
    if strategy.backup_data:
        steps.append(("backup_data", "Back up data files"))
    if strategy.stop_service:
        steps.append(("stop_service", "Stop the running service"))
    steps.append(("upgrade_component", f"Upgrade component from {from_version} to {to_version}"))
    if strategy.migrate_config:
        steps.append(("migrate_config", "Migrate configuration files"))
    steps.extend(
        [
            ("start_service", "Start the upgraded service"),
            ("health_check", "Run health check"),
            ("post_check", "Run post-upgrade checks"),
        ]
    )
    return [{"name": name, "description": desc, "status": "pending"} for name, desc in steps]


def _installed_map(data: Any) -> Dict[str, Optional[str]]:
    """Accept ``[...]``, ``{"components": [...]}`` or ``{"data": [...]}``."""
    if isinstance(data, dict):
        data = data.get("components", data.get("data", []))
    installed: Dict[str, Optional[str]] = {}
    for item in data or []:
        if isinstance(item, dict) and item.get("name"):
            installed[item["name"]] = item.get("version")
    return installed


class UpgradeManager:
    """Checks component versions on a host and submits upgrade tasks to the backend."""

    def __init__(self, backend: BackendClient):
        self.backend = backend

    async def installed_versions(
        self, host_id: str, headers: Optional[Dict[str, str]] = None
    ) -> Dict[str, Optional[str]]:
        data = await self.backend.get_json(f"deployment/hosts/{host_id}/components", headers=headers)
        return _installed_map(data)

    async def check(
        self,
        host_id: str,
        components: List[str],
        target_versions: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[ComponentVersionStatus]:
        if not host_id:
            raise ValidationError("hostId is required", field="hostId")
        target_versions = target_versions or {}
        installed = await self.installed_versions(host_id, headers)

        return [
            classify_component(
                name,
                installed.get(name),
                target_versions.get(name, "latest"),
                name in installed,
            )
            for name in components
        ]

    async def upgrade(
        self,
        host_id: str,
        components: List[str],
        target_versions: Optional[Dict[str, str]] = None,
        strategy: Optional[UpgradeStrategy] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> List[Any]:
        """Submit one upgrade task per component; returns the backend's task records."""
        if not host_id:
            raise ValidationError("hostId is required", field="hostId")
        if not components:
            raise ValidationError("components must not be empty", field="components")

        target_versions = target_versions or {}
        strategy = strategy or UpgradeStrategy()
        installed = await self.installed_versions(host_id, headers)

        tasks = []
        for name in components:
            from_version = installed.get(name) or "none"
            to_version = target_versions.get(name, "latest")
            payload = {
                "hostId": host_id,
                "componentName": name,
                "fromVersion": from_version,
                "toVersion": to_version,
                "strategy": strategy.model_dump(by_alias=True),
                "steps": build_upgrade_steps(strategy, from_version, to_version),
            }
            if strategy.migrate_config:
                payload["migrationRules"] = [
                    r.model_dump(mode="json", by_alias=True)
                    for r in get_migration_rules(name, from_version, to_version)
                ]
            logger.info(f"Submitting upgrade of {name} on host {host_id}: {from_version} -> {to_version}")
            tasks.append(await self.backend.post_json("deployment/upgrades", payload, headers=headers))
        return tasks

    async def status(self, task_id: Optional[str], headers: Optional[Dict[str, str]] = None) -> Any:
        if not task_id:
            raise ValidationError("Task ID is required", field="taskId")
        return await self.backend.get_json(f"deployment/upgrades/{task_id}", headers=headers)

    async def rollback(self, task_id: Optional[str], headers: Optional[Dict[str, str]] = None) -> Any:
        if not task_id:
            raise ValidationError("Task ID is required", field="taskId")
        logger.warning(f"Rolling back upgrade task {task_id}")
        return await self.backend.post_json(f"deployment/upgrades/{task_id}/rollback", headers=headers)
