"""
Monitoring component installer.

For every target host a deployment task is created on the backend, executed,
and then polled until it reaches a terminal status or the attempt budget is
used up.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.config import DeploymentConfig, get_config
from snmp_platform.core.errors import BackendError, ValidationError
from snmp_platform.inventory.manager import HostManager

from .models import (
    TERMINAL_STATUSES,
    DeploymentReport,
    DeploymentSummary,
    HostDeploymentResult,
    InstallRequest,
    TaskStatus,
)

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], Awaitable[Any]]


def _task_error(error: Any) -> Optional[str]:
    """Task errors may be strings or structured objects; results carry text."""
    if error is None or isinstance(error, str):
        return error
    return json.dumps(error, default=str)


def _task_body(data: Any) -> Dict[str, Any]:
    """Backend task responses are either ``{"task": {...}}`` or the task itself."""
    if isinstance(data, dict):
        task = data.get("task", data)
        if isinstance(task, dict):
            return task
    return {}


class MonitoringInstaller:
    """
    Deploys monitoring components to hosts through the backend.

    Hosts are processed one after another. Each host gets its own task so a
    failure on one host does not stop the others.
    """

    def __init__(
        self,
        backend: BackendClient,
        host_manager: Optional[HostManager] = None,
        config: Optional[DeploymentConfig] = None,
        sleep: Sleeper = asyncio.sleep,
    ):
        """
        Initialize installer.

        Args:
            backend: Backend client
            host_manager: Registry updated with installed components (optional)
            config: Deployment settings (default: global config)
            sleep: Coroutine used to wait between status checks
        """
        self.backend = backend
        self.host_manager = host_manager
        self.config = config or get_config().deployment
        self.sleep = sleep

    async def install(
        self,
        request: InstallRequest,
        headers: Optional[Dict[str, str]] = None,
    ) -> DeploymentReport:
        """
        Run a deployment across all requested hosts.

        Raises:
            ValidationError: If no hosts or no components are given
        """
        if not request.host_ids:
            raise ValidationError("hostIds must not be empty", field="hostIds")
        if not request.components:
            raise ValidationError("components must not be empty", field="components")

        method = request.deployment_method or self.config.default_method
        task_components = [c.to_task_component(method) for c in request.components]
        component_names = [c.name for c in request.components]

        deployment_id = f"deploy-{uuid.uuid4().hex[:12]}"
        logger.info(
            f"Deployment {deployment_id}: {component_names} to {len(request.host_ids)} host(s) via {method}"
        )

        results: List[HostDeploymentResult] = []
        for host_id in request.host_ids:
            result = await self.deploy_host(host_id, task_components, headers)
            results.append(result)

            if (
                result.status == TaskStatus.COMPLETED
                and not result.simulated
                and self.host_manager is not None
            ):
                self.host_manager.update_host_monitoring(host_id, component_names)

        summary = DeploymentSummary(
            total=len(results),
            succeeded=sum(1 for r in results if r.status == TaskStatus.COMPLETED),
            failed=sum(
                1 for r in results if r.status in (TaskStatus.FAILED, TaskStatus.TIMEOUT)
            ),
            simulated=sum(1 for r in results if r.simulated),
        )
        logger.info(
            f"Deployment {deployment_id} finished: {summary.succeeded}/{summary.total} succeeded"
        )

        return DeploymentReport(
            success=summary.failed == 0,
            deployment_id=deployment_id,
            results=results,
            summary=summary,
        )

    async def deploy_host(
        self,
        host_id: str,
        task_components: List[Dict[str, Any]],
        headers: Optional[Dict[str, str]] = None,
    ) -> HostDeploymentResult:
        """Create, execute and poll the task for one host."""
        names = [c["name"] for c in task_components]
        task_id: Optional[str] = None

        try:
            created = await self.backend.post_json(
                "deployment/tasks",
                {"host_id": host_id, "components": task_components},
                headers=headers,
            )
            task_id = _task_body(created).get("id")
            if not task_id:
                raise BackendError("Backend did not return a deployment task id", 502)
            task_id = str(task_id)

            await self.backend.post_json(f"deployment/tasks/{task_id}/execute", headers=headers)

            status, attempts, error = await self.wait_for_task(task_id, headers)

        except BackendError as e:
            return self._backend_failure(host_id, task_id, names, e)

        if status == TaskStatus.TIMEOUT:
            logger.warning(f"Deployment task {task_id} on host {host_id} timed out after {attempts} checks")

        return HostDeploymentResult(
            host_id=host_id,
            task_id=task_id,
            status=status,
            components=names,
            attempts=attempts,
            error=error,
        )

    async def wait_for_task(
        self,
        task_id: str,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[TaskStatus, int, Optional[str]]:
        """
        Poll a task until it is completed or failed.

        Returns:
            (status, number of checks made, task error message if any).
            Status is TIMEOUT when the attempt budget runs out first.
        """
        max_attempts = self.config.poll_attempts

        for attempt in range(1, max_attempts + 1):
            data = await self.backend.get_json(f"deployment/tasks/{task_id}", headers=headers)
            task = _task_body(data)
            status = str(task.get("status", "")).lower()
            logger.debug(f"Task {task_id} check {attempt}/{max_attempts}: {status}")

            if status in TERMINAL_STATUSES:
                return TaskStatus(status), attempt, _task_error(task.get("error"))

            if attempt < max_attempts:
                await self.sleep(self.config.poll_interval)

        return TaskStatus.TIMEOUT, max_attempts, None

    def _backend_failure(
        self,
        host_id: str,
        task_id: Optional[str],
        names: List[str],
        error: BackendError,
    ) -> HostDeploymentResult:
        if self.config.simulate_on_failure:
            logger.warning(
                f"Backend failed for host {host_id} ({error.message}); reporting simulated success"
            )
            return HostDeploymentResult(
                host_id=host_id,
                task_id=task_id,
                status=TaskStatus.COMPLETED,
                components=names,
                error=error.message,
                simulated=True,
            )

        logger.error(f"Deployment to host {host_id} failed: {error.message}")
        return HostDeploymentResult(
            host_id=host_id,
            task_id=task_id,
            status=TaskStatus.FAILED,
            components=names,
            error=error.message,
        )
