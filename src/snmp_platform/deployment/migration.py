"""
Configuration migration planning for component upgrades.

A small rule database describes which configuration keys change between
versions of a component. Planning detects the component's config files,
attaches the matching changes to each file and estimates the effort.
Execution and rollback are carried out by the backend.
"""

import fnmatch
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import ValidationError

logger = logging.getLogger(__name__)


class ChangeType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"
    RENAME = "rename"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MODERATE = "moderate"
    COMPLEX = "complex"


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class MigrationRule(CamelModel):
    action: ChangeType
    path: str
    description: str
    transformation: Optional[str] = None
    new_value: Optional[Any] = None
    condition: Optional[str] = None


class MigrationRuleSet(CamelModel):
    """Rules for moving between two version ranges (shell-style globs)."""

    from_version: str
    to_version: str
    rules: List[MigrationRule]


class ConfigChange(CamelModel):
    type: ChangeType
    path: str
    new_value: Optional[Any] = None
    reason: str
    risk: str = "low"
    automatic: bool = True


class ConfigFile(CamelModel):
    path: str
    name: str
    type: str
    migration_required: bool = False
    migration_complexity: Complexity = Complexity.SIMPLE
    changes: List[ConfigChange] = Field(default_factory=list)


MIGRATION_RULES: Dict[str, List[MigrationRuleSet]] = {
    "prometheus": [
        MigrationRuleSet(
            from_version="2.0.*",
            to_version="2.1.*",
            rules=[
                MigrationRule(
                    action=ChangeType.MODIFY,
                    path="global.scrape_interval",
                    transformation="rename to global.evaluation_interval",
                    description="Global scrape interval key renamed",
                ),
                MigrationRule(
                    action=ChangeType.ADD,
                    path="global.external_labels.cluster",
                    new_value="production",
                    description="Add cluster identification label",
                ),
                MigrationRule(
                    action=ChangeType.REMOVE,
                    path="rule_files",
                    condition="if empty",
                    description="Remove empty rule file list",
                ),
            ],
        )
    ],
    "grafana": [
        MigrationRuleSet(
            from_version="8.*",
            to_version="9.*",
            rules=[
                MigrationRule(
                    action=ChangeType.MODIFY,
                    path="auth.anonymous.enabled",
                    transformation="move to security.anonymous.enabled",
                    description="Anonymous access setting moved to the security section",
                ),
                MigrationRule(
                    action=ChangeType.ADD,
                    path="feature_toggles.enable",
                    new_value="ngalert",
                    description="Enable new feature toggle",
                ),
            ],
        )
    ],
    "victoriametrics": [
        MigrationRuleSet(
            from_version="1.8.*",
            to_version="1.9.*",
            rules=[
                MigrationRule(
                    action=ChangeType.MODIFY,
                    path="retentionPeriod",
                    transformation="change format from days to duration",
                    description="Retention period changes from days to a duration",
                ),
            ],
        )
    ],
}

CONFIG_PATHS: Dict[str, List[str]] = {
    "prometheus": ["/etc/prometheus/prometheus.yml", "/etc/prometheus/rules/*.yml"],
    "grafana": ["/etc/grafana/grafana.ini", "/var/lib/grafana/grafana.db"],
    "victoriametrics": ["/etc/victoriametrics/config.yml"],
    "alertmanager": ["/etc/alertmanager/alertmanager.yml"],
    "node-exporter": ["/etc/node-exporter/config.yml"],
    "categraf": ["/etc/categraf/conf/*.toml"],
}

FILE_TYPES = {
    "yml": "yaml",
    "yaml": "yaml",
    "json": "json",
    "toml": "toml",
    "ini": "ini",
    "properties": "properties",
}

# Minutes per file that needs migrating
EFFORT_MINUTES = {
    Complexity.SIMPLE: 2,
    Complexity.MODERATE: 5,
    Complexity.COMPLEX: 10,
}


def version_matches(version: str, pattern: str) -> bool:
    """Match ``1.8.3`` or ``v1.8.3`` against a glob such as ``1.8.*``."""
    version = version.strip()
    if version[:1] in ("v", "V"):
        version = version[1:]
    return fnmatch.fnmatchcase(version, pattern)


def get_migration_rules(component: str, from_version: str, to_version: str) -> List[MigrationRuleSet]:
    """Rule sets of ``component`` whose version ranges cover the upgrade."""
    return [
        rule_set
        for rule_set in MIGRATION_RULES.get(component, [])
        if version_matches(from_version, rule_set.from_version)
        and version_matches(to_version, rule_set.to_version)
    ]


def config_file_type(path: str) -> str:
    """File format from the extension; unknown extensions are treated as YAML."""
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return FILE_TYPES.get(extension, "yaml")


def detect_config_files(component: str) -> List[ConfigFile]:
    """Well-known config locations of a component."""
    paths = CONFIG_PATHS.get(component, [f"/etc/{component}/config.yml"])
    return [
        ConfigFile(path=path, name=path.rsplit("/", 1)[-1], type=config_file_type(path))
        for path in paths
    ]


def file_complexity(change_count: int) -> Complexity:
    if change_count > 5:
        return Complexity.COMPLEX
    if change_count > 2:
        return Complexity.MODERATE
    return Complexity.SIMPLE


def analyze_file_changes(config_file: ConfigFile, rule_sets: List[MigrationRuleSet]) -> ConfigFile:
    changes = [
        ConfigChange(
            type=rule.action,
            path=rule.path,
            new_value=rule.new_value,
            reason=rule.description,
        )
        for rule_set in rule_sets
        for rule in rule_set.rules
    ]
    return config_file.model_copy(
        update={
            "changes": changes,
            "migration_required": bool(changes),
            "migration_complexity": file_complexity(len(changes)),
        }
    )


def migration_complexity(files: List[ConfigFile]) -> Complexity:
    """Overall complexity: any complex file, or many changes in total."""
    total_changes = sum(len(f.changes) for f in files)
    if any(f.migration_complexity == Complexity.COMPLEX for f in files) or total_changes > 20:
        return Complexity.COMPLEX
    if total_changes > 10:
        return Complexity.MODERATE
    return Complexity.SIMPLE


def estimated_minutes(files: List[ConfigFile]) -> int:
    return sum(EFFORT_MINUTES[f.migration_complexity] for f in files if f.migration_required)


class ConfigMigrationPlanner:
    """
    Plans configuration migrations and hands execution to the backend.

    Usage:
        planner = ConfigMigrationPlanner(backend)
        plan = planner.analyze("h1", "prometheus", "2.0.5", "2.1.0")
    """

    def __init__(self, backend: BackendClient):
        self.backend = backend

    @staticmethod
    def _require(**values: Optional[str]) -> None:
        missing = [
            name for name, value in values.items() if not isinstance(value, str) or not value.strip()
        ]
        if missing:
            raise ValidationError(f"Missing required parameter(s): {', '.join(missing)}", field=missing[0])

    def analyze(self, host_id: str, component: str, from_version: str, to_version: str) -> Dict[str, Any]:
        """Rules, per-file changes and an effort summary for one upgrade."""
        self._require(
            hostId=host_id,
            componentName=component,
            fromVersion=from_version,
            toVersion=to_version,
        )
        rule_sets = get_migration_rules(component, from_version, to_version)
        files = [analyze_file_changes(f, rule_sets) for f in detect_config_files(component)]
        logger.debug(f"Migration of {component} {from_version} -> {to_version} on {host_id}: {len(files)} file(s)")

        return {
            "hostId": host_id,
            "migrationRules": [r.model_dump(mode="json", by_alias=True) for r in rule_sets],
            "configFiles": [f.model_dump(mode="json", by_alias=True) for f in files],
            "summary": {
                "totalFiles": len(files),
                "requireMigration": sum(1 for f in files if f.migration_required),
                "totalChanges": sum(len(f.changes) for f in files),
                "complexity": migration_complexity(files).value,
                "estimatedTime": estimated_minutes(files),
            },
        }

    def preview(
        self,
        host_id: str,
        component: str,
        from_version: str,
        to_version: str,
        config_files: Optional[List[str]] = None,
    ) -> Dict[str, Any]:
        """Planned changes for the selected files (all detected files by default)."""
        plan = self.analyze(host_id, component, from_version, to_version)
        selected = set(config_files or [])
        previews = [
            {"file": f["path"], "changes": f["changes"]}
            for f in plan["configFiles"]
            if not selected or f["path"] in selected
        ]
        return {"previews": previews}

    async def execute(
        self,
        host_id: str,
        component: str,
        from_version: str,
        to_version: str,
        options: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Submit the migration plan to the backend."""
        plan = self.analyze(host_id, component, from_version, to_version)
        payload = {
            "hostId": host_id,
            "componentName": component,
            "fromVersion": from_version,
            "toVersion": to_version,
            "options": options or {},
            "configFiles": plan["configFiles"],
        }
        logger.info(f"Submitting config migration of {component} on host {host_id}")
        return await self.backend.post_json("deployment/config-migrations", payload, headers=headers)

    async def rollback(self, migration_id: Optional[str], headers: Optional[Dict[str, str]] = None) -> Any:
        if not migration_id:
            raise ValidationError("Migration ID is required for rollback", field="migrationId")
        logger.warning(f"Rolling back config migration {migration_id}")
        return await self.backend.post_json(
            f"deployment/config-migrations/{migration_id}/rollback", headers=headers
        )
