"""
Shared fixtures: a scripted backend behind httpx.MockTransport, isolated
settings under tmp_path and a TestClient wired to both.
"""

import httpx
import pytest
from fastapi.testclient import TestClient

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import (
    AppConfig,
    BackendConfig,
    DeploymentConfig,
    LoggingConfig,
)
from snmp_platform.deployment.bulk import BulkOperationRunner
from snmp_platform.inventory.manager import HostManager
from snmp_platform.ui.deps import (
    get_backend_client,
    get_bulk_runner,
    get_host_manager,
    get_settings,
)
from snmp_platform.ui.http_server import app

from fake_backend import FakeBackend


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def backend_config() -> BackendConfig:
    return BackendConfig(url="http://backend.test", retry_attempts=0, retry_delay=0)


@pytest.fixture
def backend(fake_backend, backend_config) -> BackendClient:
    return BackendClient(backend_config, transport=httpx.MockTransport(fake_backend.handler))


@pytest.fixture
def host_manager() -> HostManager:
    return HostManager()


@pytest.fixture
def settings(tmp_path, backend_config) -> AppConfig:
    return AppConfig(
        environment="test",
        seed_demo_hosts=False,
        mib_temp_dir=str(tmp_path / "mib-extract"),
        backend=backend_config,
        deployment=DeploymentConfig(poll_attempts=3, poll_interval=0),
        logging=LoggingConfig(dir=str(tmp_path / "logs")),
    )


@pytest.fixture
def client(settings, backend, host_manager):
    runner = BulkOperationRunner(backend)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_backend_client] = lambda: backend
    app.dependency_overrides[get_host_manager] = lambda: host_manager
    app.dependency_overrides[get_bulk_runner] = lambda: runner
    yield TestClient(app)
    app.dependency_overrides.clear()


def fake_metrics():
    return {
        "cpu": {"usage": 5.0, "cores": 4, "model": "test-cpu", "speed": 2400},
        "memory": {"total": 16.0, "used": 4.0, "free": 12.0, "percentage": 25},
        "disk": {"total": 100.0, "used": 40.0, "free": 60.0, "percentage": 40},
        "network": {"throughput": 1.5, "packets_lost": 0},
        "uptime": 7200000,
        "load_average": [0.1, 0.2, 0.3],
    }


@pytest.fixture
def metrics(monkeypatch):
    """Replace psutil collection with fixed host metrics."""
    monkeypatch.setattr("snmp_platform.health.system.collect_host_metrics", fake_metrics)
