"""
Tests for the JSON API routes.
"""

import io
import json
import zipfile

from snmp_platform.core.logger import AppLogger, LogLevel

from fake_backend import fail, reply

VALID_MIB = "IF-TEST-MIB DEFINITIONS ::= BEGIN\nifTest OBJECT IDENTIFIER ::= { 1 3 6 }\nEND\n"


class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestApiCallLogging:
    def test_api_calls_recorded(self, client, monkeypatch):
        app_log = AppLogger()
        monkeypatch.setattr("snmp_platform.core.logger._app_logger", app_log)

        client.get("/api/hosts")
        client.post("/api/hosts", json={"action": "nope"})

        entries = app_log.buffer.recent(10)
        assert [e.context["status"] for e in entries] == [200, 400]
        assert entries[0].level == LogLevel.INFO
        assert entries[1].level == LogLevel.ERROR
        assert entries[1].context["url"] == "/api/hosts"


class TestCrudProxy:
    """Test forwarding to backend resources."""

    def test_get_passes_query_string_verbatim(self, client, fake_backend):
        fake_backend.route("GET", "devices", reply(200, {"data": [{"id": 1}]}))

        response = client.get("/api/devices?page=2&sort=name")

        assert response.status_code == 200
        assert response.json() == {"data": [{"id": 1}]}
        assert fake_backend.requests[-1].url.query == b"page=2&sort=name"

    def test_upstream_error_status_kept(self, client, fake_backend):
        fake_backend.route("GET", "alerts", reply(503, {"detail": "maintenance"}))

        response = client.get("/api/alerts")

        assert response.status_code == 503
        assert response.json() == {"error": "Backend API error"}

    def test_unreachable_backend(self, client, fake_backend):
        fake_backend.route("GET", "mibs", fail())

        response = client.get("/api/mibs")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}

    def test_post_body_verbatim(self, client, fake_backend):
        fake_backend.route("POST", "alert-rules", reply(201, {"id": 3}))
        body = b'{"name": "HighCPU", "expr": "cpu > 90"}'

        response = client.post(
            "/api/alert-rules", content=body, headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 201
        assert fake_backend.calls("POST", "alert-rules")[0].content == body

    def test_put_and_delete_use_id(self, client, fake_backend):
        fake_backend.route("PUT", "devices/7", reply(200, {"id": 7}))
        fake_backend.route("DELETE", "devices/7", reply(200, {"deleted": True}))

        assert client.put("/api/devices?id=7", json={"name": "sw1"}).status_code == 200
        assert client.delete("/api/devices?id=7").json() == {"deleted": True}
        assert json.loads(fake_backend.calls("PUT", "devices/7")[0].content) == {"name": "sw1"}

    def test_authorization_forwarded(self, client, fake_backend):
        fake_backend.route("GET", "devices", reply(200, []))
        client.get("/api/devices", headers={"Authorization": "Bearer token-1"})
        assert fake_backend.requests[-1].headers["authorization"] == "Bearer token-1"


class TestHostRoutes:
    """Test the host registry API."""

    def test_add_and_list(self, client):
        response = client.post(
            "/api/hosts",
            json={
                "action": "add",
                "hostData": {"id": "h1", "ip": "10.0.0.1", "os": "Ubuntu", "status": "online", "memory": 8192},
            },
        )
        assert response.status_code == 200
        assert "vmstorage" in response.json()["host"]["availableComponents"]

        listed = client.get("/api/hosts", params={"component": "node-exporter"}).json()
        assert listed["success"] is True
        assert listed["total"] == 1
        assert listed["hosts"][0]["id"] == "h1"

        assert client.get("/api/hosts", params={"component": "windows-exporter"}).json()["total"] == 0

    def test_bulk_add_and_update_monitoring(self, client, host_manager):
        response = client.post(
            "/api/hosts",
            json={"action": "bulk-add", "hosts": [{"id": "a", "ip": "10.0.0.1"}, {"id": "b", "ip": "10.0.0.2"}]},
        )
        assert response.json()["count"] == 2

        response = client.post(
            "/api/hosts",
            json={"action": "update-monitoring", "hostIds": ["a", "zzz"], "components": ["node-exporter"]},
        )
        assert response.json()["message"] == "Updated monitoring status for 2 host(s)"
        assert host_manager.get_host("a").monitoring_enabled is True

    def test_unsupported_action(self, client):
        response = client.post("/api/hosts", json={"action": "explode"})
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "Unsupported action"}

    def test_add_without_ip(self, client):
        response = client.post("/api/hosts", json={"action": "add", "hostData": {"name": "x"}})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_malformed_host_fields_rejected(self, client, host_manager):
        bad_status = client.post(
            "/api/hosts", json={"action": "add", "hostData": {"ip": "10.0.0.7", "status": "bogus"}}
        )
        bad_memory = client.post(
            "/api/hosts", json={"action": "add", "hostData": {"ip": "10.0.0.8", "memory": "16GB"}}
        )
        bare_ips = client.post("/api/hosts", json={"action": "bulk-add", "hosts": ["10.0.0.9"]})

        for response in (bad_status, bad_memory, bare_ips):
            assert response.status_code == 400
            assert response.json()["success"] is False
            assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert host_manager.hosts == {}

    def test_groups(self, client, host_manager):
        host_manager.add_discovered_host({"id": "1", "ip": "10.0.0.1"})

        created = client.post("/api/hosts/groups", json={"id": "web", "name": "Web", "hostIds": ["1"]})
        assert created.status_code == 201
        assert created.json()["group"]["hostIds"] == ["1"]

        duplicate = client.post("/api/hosts/groups", json={"id": "web", "name": "Web"})
        assert duplicate.status_code == 409

        assert client.get("/api/hosts/groups").json()["total"] == 1
        assert client.get("/api/hosts", params={"group": "web"}).json()["total"] == 1


class TestSnmpRoutes:
    """Test brand detection API."""

    def test_detect_brand(self, client):
        response = client.post(
            "/api/snmp/detect-brand",
            json={"sysDescr": "Dell PowerEdge R640 iDRAC", "sysObjectID": "1.3.6.1.4.1.674.10892.5"},
        )
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["primary"]["brand"] == "Dell"
        assert data["config"]["templateId"] == "server-dell-idrac"
        assert data["advice"]["primaryRecommendation"]["brand"] == "Dell"

    def test_empty_body_rejected(self, client):
        response = client.post("/api/snmp/detect-brand", json={})
        assert response.status_code == 400
        assert response.json()["success"] is False


class TestMonitoringInstallRoutes:
    """Test the monitoring install API."""

    def test_install(self, client, fake_backend, host_manager):
        host_manager.add_discovered_host({"id": "1", "ip": "10.0.0.1"})
        fake_backend.route("POST", "deployment/tasks", reply(200, {"task": {"id": "t9"}}))
        fake_backend.route("POST", "deployment/tasks/t9/execute", reply(200, {}))
        fake_backend.route(
            "GET",
            "deployment/tasks/t9",
            reply(200, {"task": {"status": "running"}}),
            reply(200, {"task": {"status": "completed"}}),
        )

        response = client.post(
            "/api/monitoring/install",
            json={"hostIds": ["1"], "components": [{"name": "node-exporter", "port": 9100}]},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["results"][0]["status"] == "completed"
        assert body["results"][0]["attempts"] == 2
        assert host_manager.get_host("1").installed_components == ["node-exporter"]

    def test_install_requires_hosts(self, client):
        response = client.post(
            "/api/monitoring/install",
            json={"hostIds": [], "components": [{"name": "node-exporter"}]},
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "hostIds must not be empty"

    def test_malformed_body(self, client):
        response = client.post("/api/monitoring/install", json={"hostIds": "1"})
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_list_components(self, client, fake_backend):
        fake_backend.route("GET", "deployment/components", reply(200, {"components": ["node-exporter"]}))
        assert client.get("/api/monitoring/install").json() == {"components": ["node-exporter"]}

    def test_list_components_backend_down(self, client, fake_backend):
        fake_backend.route("GET", "deployment/components", fail())
        response = client.get("/api/monitoring/install")
        assert response.status_code == 500
        assert response.json()["error"] == "Failed to get monitoring components"


class TestAlertRuleRoutes:
    """Test alert rule deployment and rendering."""

    RULE = {"name": "HighCPU", "expr": "cpu_usage > 90", "for": "5m", "severity": "critical"}

    def test_invalid_rules_rejected(self, client, fake_backend):
        response = client.post(
            "/api/alert-rules/deploy",
            json={"rules": [self.RULE, {"name": "Bad", "expr": "rate(x[5m]"}]},
        )
        body = response.json()

        assert response.status_code == 400
        assert body["details"][0]["index"] == 1
        assert fake_backend.calls("POST", "alert-deployment/deploy") == []

    def test_valid_rules_forwarded(self, client, fake_backend):
        fake_backend.route("POST", "alert-deployment/deploy", reply(201, {"deployed": 1}))
        response = client.post("/api/alert-rules/deploy", json={"rules": [self.RULE], "target": "prometheus"})

        assert response.status_code == 201
        assert response.json() == {"deployed": 1}
        forwarded = json.loads(fake_backend.calls("POST", "alert-deployment/deploy")[0].content)
        assert forwarded["target"] == "prometheus"

    def test_wrongly_typed_rule_rejected(self, client, fake_backend):
        response = client.post("/api/alert-rules/deploy", json={"rules": [{"name": 5, "expr": "up == 0"}]})
        body = response.json()

        assert response.status_code == 400
        assert body["success"] is False
        assert body["details"][0]["index"] == 0
        assert "name" in body["details"][0]["errors"][0]
        assert fake_backend.calls("POST", "alert-deployment/deploy") == []

    def test_no_rules(self, client):
        assert client.post("/api/alert-rules/deploy", json={"rules": []}).status_code == 400

    def test_render(self, client):
        response = client.post("/api/alert-rules/render", json={"rules": [self.RULE]})
        assert response.status_code == 200
        assert "alert: HighCPU" in response.text
        assert "default_alerts" in response.text


class TestConfigDeployRoutes:
    def test_routes_by_config_type(self, client, fake_backend):
        fake_backend.route("POST", "config-deployment/snmp", reply(200, {"ok": "snmp"}))
        fake_backend.route("POST", "config-deployment/tasks", reply(200, {"ok": "tasks"}))

        assert client.post("/api/config/deploy", json={"configType": "snmp"}).json() == {"ok": "snmp"}
        assert client.post("/api/config/deploy", json={"configType": "custom"}).json() == {"ok": "tasks"}

    def test_templates(self, client, fake_backend):
        fake_backend.route("GET", "config-deployment/templates", reply(200, [{"id": "snmp-basic"}]))
        assert client.get("/api/config/deploy").json() == [{"id": "snmp-basic"}]


class TestBulkRoutes:
    """Test bulk operation execution and lookup."""

    def test_execute_and_fetch(self, client, fake_backend):
        fake_backend.route("POST", "deployment/batch", reply(200, {"queued": 2}))

        execution = client.post(
            "/api/bulk-operations/execute",
            json={"operation": "deploy_components", "hostIds": ["1", "2"], "components": ["grafana"]},
        ).json()
        assert execution["status"] == "completed"

        fetched = client.get("/api/bulk-operations/execute", params={"executionId": execution["executionId"]})
        assert fetched.status_code == 200
        assert fetched.json()["status"]["executionId"] == execution["executionId"]

    def test_unsupported_operation(self, client):
        response = client.post("/api/bulk-operations/execute", json={"operation": "format_disks"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Unsupported bulk operation"

    def test_missing_and_unknown_execution(self, client):
        assert client.get("/api/bulk-operations/execute").status_code == 400
        assert client.get("/api/bulk-operations/execute", params={"executionId": "nope"}).status_code == 404


class TestUpgradeRoutes:
    """Test component upgrade actions."""

    def test_check(self, client, fake_backend):
        fake_backend.route(
            "GET",
            "deployment/hosts/h1/components",
            reply(200, [{"name": "node-exporter", "version": "1.7.0"}]),
        )
        response = client.post(
            "/api/monitoring/upgrade",
            json={"action": "check", "hostId": "h1", "components": ["node-exporter"], "targetVersions": {"node-exporter": "1.7.0"}},
        )
        data = response.json()["data"]

        assert data[0]["status"] == "SAME_VERSION"
        assert data[0]["upgradeAction"] == "skip"

    def test_invalid_action(self, client):
        response = client.post("/api/monitoring/upgrade", json={"action": "yolo"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid action"

    def test_malformed_strategy(self, client, fake_backend):
        fake_backend.route("GET", "deployment/hosts/h1/components", reply(200, []))
        response = client.post(
            "/api/monitoring/upgrade",
            json={
                "action": "upgrade",
                "hostId": "h1",
                "components": ["node-exporter"],
                "strategy": {"backupConfig": "maybe"},
            },
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert "backupConfig" in response.json()["error"]["message"]
        assert fake_backend.calls("POST", "deployment/upgrades") == []

    def test_components_must_be_list(self, client):
        response = client.post(
            "/api/monitoring/upgrade", json={"action": "check", "hostId": "h1", "components": "grafana"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "components must be a list"

    def test_status_requires_task_id(self, client):
        response = client.get("/api/monitoring/upgrade")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Task ID is required"

    def test_status(self, client, fake_backend):
        fake_backend.route("GET", "deployment/upgrades/u1", reply(200, {"status": "completed"}))
        response = client.get("/api/monitoring/upgrade", params={"taskId": "u1"})
        assert response.json()["data"] == {"status": "completed"}


class TestConfigMigrationRoutes:
    """Test config migration planning routes."""

    def test_rules(self, client):
        response = client.get(
            "/api/monitoring/config-migration",
            params={"action": "rules", "component": "grafana", "from": "8.5.0", "to": "9.0.0"},
        )
        data = response.json()["data"]

        assert response.status_code == 200
        assert data[0]["fromVersion"] == "8.*"
        assert len(data[0]["rules"]) == 2

    def test_rules_missing_parameters(self, client):
        response = client.get(
            "/api/monitoring/config-migration", params={"action": "rules", "component": "grafana"}
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid parameters"
        assert client.get("/api/monitoring/config-migration").status_code == 400

    def test_analyze(self, client):
        response = client.post(
            "/api/monitoring/config-migration",
            json={
                "action": "analyze",
                "hostId": "h1",
                "componentName": "prometheus",
                "fromVersion": "2.0.5",
                "toVersion": "2.1.0",
            },
        )
        summary = response.json()["data"]["summary"]

        assert response.status_code == 200
        assert summary["totalChanges"] == 6
        assert summary["estimatedTime"] == 10

    def test_rollback_requires_migration_id(self, client):
        response = client.post("/api/monitoring/config-migration", json={"action": "rollback"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Migration ID is required for rollback"

    def test_invalid_action(self, client):
        response = client.post("/api/monitoring/config-migration", json={"action": "apply-all"})
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Invalid action"


class TestMibUploadRoutes:
    """Test MIB archive upload."""

    def test_no_file(self, client):
        response = client.post("/api/mibs/upload-zip")
        assert response.status_code == 400
        assert response.json() == {"error": "No zip file provided"}

    def test_upload(self, client, fake_backend):
        fake_backend.route("POST", "mibs", reply(201, {}))
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("IF-TEST-MIB.mib", VALID_MIB)

        response = client.post(
            "/api/mibs/upload-zip",
            files={"zipFile": ("mibs.zip", buffer.getvalue(), "application/zip")},
        )
        body = response.json()

        assert response.status_code == 200
        assert body["successCount"] == 1
        assert body["totalFiles"] == 1
        assert body["errors"] == []


class TestLogRoutes:
    """Test client log collection."""

    def test_invalid_entry(self, client):
        response = client.post("/api/logs", json={"level": 1, "message": "no timestamp"})
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid log entry format"}

    def test_write_and_read(self, client):
        for level in (1, 3):
            response = client.post(
                "/api/logs",
                json={"level": level, "message": f"level {level}", "timestamp": 1700000000000},
            )
            assert response.json() == {"success": True}

        data = client.get("/api/logs").json()["data"]
        assert data["total"] == 2
        assert data["logs"][0]["timestamp"] == "2023-11-14T22:13:20Z"

        errors = client.get("/api/logs", params={"level": 3}).json()["data"]
        assert [e["message"] for e in errors["logs"]] == ["level 3"]

    def test_missing_date(self, client):
        data = client.get("/api/logs", params={"date": "2020-01-01"}).json()["data"]
        assert data["logs"] == []
        assert data["message"] == "No logs found for this date"

    def test_bad_query(self, client):
        assert client.get("/api/logs", params={"date": "yesterday"}).status_code == 400
        assert client.get("/api/logs", params={"level": 7}).status_code == 400


class TestSystemHealthRoutes:
    """Test system health reporting and maintenance."""

    def test_health_report(self, client, metrics):
        response = client.get("/api/system/health")
        data = response.json()["data"]

        assert response.status_code == 200
        assert data["cpu"]["cores"] == 4
        assert data["services"] == {"backend": "healthy", "api": "healthy", "logs": "healthy"}
        assert data["network"]["latency"] is not None
        assert {"platform", "arch", "hostname", "last_update", "collection_time"} <= set(data)

    def test_backend_down(self, client, fake_backend, metrics):
        fake_backend.route("GET", "health", reply(503))
        data = client.get("/api/system/health").json()["data"]

        assert data["services"]["backend"] == "down"
        assert data["network"]["latency"] is None

    def test_cleanup(self, client):
        response = client.post("/api/system/health", json={"action": "cleanup"})
        assert response.status_code == 200
        assert response.json()["data"] == {"removed": []}

    def test_unknown_action(self, client):
        assert client.post("/api/system/health", json={"action": "reboot"}).status_code == 400
