"""
Tests for bulk operations and component upgrades.
"""

import asyncio
import json

import pytest

from snmp_platform.core.errors import NotFoundError, ValidationError
from snmp_platform.deployment.bulk import BulkOperationRunner
from snmp_platform.deployment.upgrade import (
    UpgradeManager,
    UpgradeStrategy,
    VersionStatus,
    build_upgrade_steps,
    classify_component,
    compare_versions,
    parse_version,
)

from fake_backend import reply


class TestBulkOperations:
    """Test bulk deploy and SSH command runs."""

    def test_deploy_components(self, backend, fake_backend):
        fake_backend.route("POST", "deployment/batch", reply(200, {"batchId": "b1"}))
        runner = BulkOperationRunner(backend)

        execution = asyncio.run(
            runner.execute("deploy_components", host_ids=["1", "2"], components=["node-exporter"])
        )

        assert execution["status"] == "completed"
        assert execution["results"][0]["data"] == {"batchId": "b1"}
        sent = json.loads(fake_backend.calls("POST", "deployment/batch")[0].content)
        assert sent == {"host_ids": ["1", "2"], "components": ["node-exporter"]}
        assert runner.get_execution(execution["executionId"]) is execution

    def test_deploy_components_failure(self, backend, fake_backend):
        fake_backend.route("POST", "deployment/batch", reply(500))
        execution = asyncio.run(BulkOperationRunner(backend).execute("deploy_components", ["1"], ["x"]))

        assert execution["success"] is False
        assert execution["status"] == "failed"
        assert execution["results"][0]["error"] == "Failed to deploy components"

    def test_ssh_commands_one_result_per_command(self, backend, fake_backend):
        fake_backend.route("GET", "hosts/1", reply(200, {"data": {"ip": "10.0.0.1", "username": "root"}}))
        fake_backend.route("POST", "ssh/execute", reply(200, {"success": True, "stdout": "ok"}))

        execution = asyncio.run(
            BulkOperationRunner(backend).execute("ssh_commands", host_ids=["1"], commands=["uptime", "df -h"])
        )

        assert execution["success"] is True
        assert [r["command"] for r in execution["results"]] == ["uptime", "df -h"]
        assert all(r["host_ip"] == "10.0.0.1" for r in execution["results"])
        sent = json.loads(fake_backend.calls("POST", "ssh/execute")[0].content)
        assert sent["host"] == "10.0.0.1"
        assert sent["port"] == 22

    def test_ssh_host_lookup_failure(self, backend, fake_backend):
        execution = asyncio.run(
            BulkOperationRunner(backend).execute("ssh_commands", host_ids=["404"], commands=["uptime"])
        )

        assert execution["success"] is False
        assert execution["results"][0]["host_id"] == "404"
        assert fake_backend.calls("POST", "ssh/execute") == []

    def test_unsupported_operation(self, backend):
        with pytest.raises(ValidationError):
            asyncio.run(BulkOperationRunner(backend).execute("reboot_all", ["1"]))

    def test_non_list_arguments_rejected(self, backend):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(BulkOperationRunner(backend).execute("ssh_commands", host_ids="1", commands=["uptime"]))
        assert exc_info.value.field == "hostIds"

    def test_ssh_tolerates_non_object_replies(self, backend, fake_backend):
        fake_backend.route("GET", "hosts/1", reply(200, [{"ip": "10.0.0.1"}]))
        fake_backend.route("POST", "ssh/execute", reply(200, ["ok"]))

        execution = asyncio.run(
            BulkOperationRunner(backend).execute("ssh_commands", host_ids=["1"], commands=["uptime"])
        )

        result = execution["results"][0]
        assert result["success"] is False
        assert result["host_ip"] is None
        assert result["stdout"] is None

    def test_unknown_execution(self, backend):
        with pytest.raises(NotFoundError):
            BulkOperationRunner(backend).get_execution("exec-missing")


class TestVersions:
    """Test version parsing and classification."""

    def test_parse_version(self):
        assert parse_version("v1.7.0") == (1, 7, 0)
        assert parse_version("2.48.1-rc1") == (2, 48, 1)
        assert parse_version("latest") is None
        assert parse_version(None) is None

    def test_compare_pads_missing_parts(self):
        assert compare_versions((1, 7), (1, 7, 0)) == 0
        assert compare_versions((1, 6, 9), (1, 7)) == -1
        assert compare_versions((2,), (1, 9, 9)) == 1

    def test_classification(self):
        cases = [
            (None, "1.7.0", False, VersionStatus.NOT_INSTALLED, "install"),
            ("1.7.0", "1.7.0", True, VersionStatus.SAME_VERSION, "skip"),
            ("1.6.0", "1.7.0", True, VersionStatus.NEED_UPDATE, "update"),
            ("1.8.0", "1.7.0", True, VersionStatus.NEWER_VERSION, "downgrade"),
            ("unknown", "1.7.0", True, VersionStatus.CORRUPTED, "reinstall"),
            ("1.7.0", "latest", True, VersionStatus.NEED_UPDATE, "update"),
        ]
        for installed_version, target, installed, status, action in cases:
            result = classify_component("node-exporter", installed_version, target, installed)
            assert result.status == status
            assert result.upgrade_action == action

    def test_steps_follow_strategy(self):
        steps = build_upgrade_steps(UpgradeStrategy(backup_data=False, migrate_config=False), "1.6.0", "1.7.0")
        names = [s["name"] for s in steps]

        assert names[0] == "pre_check"
        assert "backup_config" in names
        assert "backup_data" not in names
        assert "migrate_config" not in names
        assert names[-3:] == ["start_service", "health_check", "post_check"]
        assert all(s["status"] == "pending" for s in steps)


class TestUpgradeManager:
    """Test backend-driven upgrade operations."""

    @pytest.fixture
    def upgrades(self, backend, fake_backend):
        fake_backend.route(
            "GET",
            "deployment/hosts/h1/components",
            reply(
                200,
                {
                    "components": [
                        {"name": "node-exporter", "version": "1.6.0"},
                        {"name": "grafana", "version": "garbage"},
                    ]
                },
            ),
        )
        return UpgradeManager(backend)

    def test_check(self, upgrades):
        statuses = asyncio.run(
            upgrades.check("h1", ["node-exporter", "grafana", "categraf"], {"node-exporter": "1.7.0"})
        )

        assert [s.status for s in statuses] == [
            VersionStatus.NEED_UPDATE,
            VersionStatus.CORRUPTED,
            VersionStatus.NOT_INSTALLED,
        ]
        assert statuses[2].target_version == "latest"

    def test_upgrade_submits_one_task_per_component(self, upgrades, fake_backend):
        fake_backend.route("POST", "deployment/upgrades", reply(200, {"id": "u1"}))
        tasks = asyncio.run(upgrades.upgrade("h1", ["node-exporter"], {"node-exporter": "1.7.0"}))

        assert tasks == [{"id": "u1"}]
        payload = json.loads(fake_backend.calls("POST", "deployment/upgrades")[0].content)
        assert payload["fromVersion"] == "1.6.0"
        assert payload["toVersion"] == "1.7.0"
        assert payload["strategy"]["backupConfig"] is True
        assert payload["steps"][0]["name"] == "pre_check"

    def test_upgrade_carries_migration_rules(self, upgrades, fake_backend):
        fake_backend.route(
            "GET",
            "deployment/hosts/h2/components",
            reply(200, [{"name": "prometheus", "version": "2.0.5"}]),
        )
        fake_backend.route("POST", "deployment/upgrades", reply(200, {"id": "u2"}))

        asyncio.run(upgrades.upgrade("h2", ["prometheus"], {"prometheus": "2.1.0"}))
        asyncio.run(
            upgrades.upgrade(
                "h2", ["prometheus"], {"prometheus": "2.1.0"}, UpgradeStrategy(migrate_config=False)
            )
        )

        with_rules, without_rules = [
            json.loads(r.content) for r in fake_backend.calls("POST", "deployment/upgrades")
        ]
        assert with_rules["migrationRules"][0]["fromVersion"] == "2.0.*"
        assert len(with_rules["migrationRules"][0]["rules"]) == 3
        assert "migrationRules" not in without_rules

    def test_status_and_rollback(self, upgrades, fake_backend):
        fake_backend.route("GET", "deployment/upgrades/u1", reply(200, {"status": "running"}))
        fake_backend.route("POST", "deployment/upgrades/u1/rollback", reply(200, {"status": "rolled_back"}))

        assert asyncio.run(upgrades.status("u1")) == {"status": "running"}
        assert asyncio.run(upgrades.rollback("u1")) == {"status": "rolled_back"}

    def test_task_id_required(self, upgrades):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(upgrades.status(None))
        assert exc_info.value.message == "Task ID is required"
