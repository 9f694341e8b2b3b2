"""
Bulk operations across many hosts.

Each run is recorded under an execution id so the dashboard can fetch its
outcome later.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from snmp_platform.backend.client import BackendClient
from snmp_platform.core.errors import BackendError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_OPERATIONS = ("deploy_components", "ssh_commands")


class BulkOperationRunner:
    """Runs bulk operations through the backend and keeps their results in memory."""

    def __init__(self, backend: BackendClient):
        self.backend = backend
        self.executions: Dict[str, Dict[str, Any]] = {}

    async def execute(
        self,
        operation: Optional[str],
        host_ids: Optional[List[str]] = None,
        components: Optional[List[Any]] = None,
        commands: Optional[List[str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """
        Run one bulk operation and record it.

        Raises:
            ValidationError: For an unsupported operation or a non-list argument
        """
        if operation not in SUPPORTED_OPERATIONS:
            raise ValidationError("Unsupported bulk operation", field="operation")
        list_args = (("hostIds", host_ids), ("components", components), ("commands", commands))
        for field, value in list_args:
            if value is not None and not isinstance(value, list):
                raise ValidationError(f"{field} must be a list", field=field)

        execution_id = f"exec-{uuid.uuid4().hex[:12]}"
        started = datetime.utcnow()
        logger.info(f"Bulk operation {operation} ({execution_id}) on {len(host_ids or [])} host(s)")

        if operation == "deploy_components":
            results = await self._deploy_components(host_ids or [], components or [], headers)
        else:
            results = await self._ssh_commands(host_ids or [], commands or [], headers)

        success = all(r["success"] for r in results)
        execution = {
            "executionId": execution_id,
            "operation": operation,
            "status": "completed" if success else "failed",
            "success": success,
            "startTime": started.isoformat(),
            "endTime": datetime.utcnow().isoformat(),
            "results": results,
        }
        self.executions[execution_id] = execution
        return execution

    def get_execution(self, execution_id: str) -> Dict[str, Any]:
        execution = self.executions.get(execution_id)
        if execution is None:
            raise NotFoundError(f"Execution {execution_id}")
        return execution

    async def _deploy_components(
        self,
        host_ids: List[str],
        components: List[Any],
        headers: Optional[Dict[str, str]],
    ) -> List[Dict[str, Any]]:
        try:
            data = await self.backend.post_json(
                "deployment/batch",
                {"host_ids": host_ids, "components": components},
                headers=headers,
            )
        except BackendError as e:
            logger.error(f"Batch deployment failed: {e.message}")
            return [
                {
                    "operation": "deploy_components",
                    "success": False,
                    "error": "Failed to deploy components",
                }
            ]
        return [{"operation": "deploy_components", "success": True, "data": data}]

    async def _ssh_commands(
        self,
        host_ids: List[str],
        commands: List[str],
        headers: Optional[Dict[str, str]],
    ) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []

        for host_id in host_ids:
            try:
                host_data = await self.backend.get_json(f"hosts/{host_id}", headers=headers)
            except BackendError as e:
                logger.warning(f"Could not load host {host_id}: {e.message}")
                results.append(
                    {
                        "operation": "ssh_command",
                        "host_id": host_id,
                        "success": False,
                        "error": f"Host lookup failed: {e.message}",
                    }
                )
                continue

            host = host_data.get("data") if isinstance(host_data, dict) else None
            if not isinstance(host, dict):
                host = {}
            for command in commands:
                results.append(await self._run_command(host_id, host, command, headers))

        return results

    async def _run_command(
        self,
        host_id: str,
        host: Dict[str, Any],
        command: str,
        headers: Optional[Dict[str, str]],
    ) -> Dict[str, Any]:
        payload = {
            "host": host.get("ip"),
            "port": host.get("port") or 22,
            "username": host.get("username"),
            "password": host.get("password"),
            "privateKey": host.get("private_key"),
            "command": command,
        }
        try:
            data = await self.backend.post_json("ssh/execute", payload, headers=headers)
        except BackendError as e:
            return {
                "operation": "ssh_command",
                "host_id": host_id,
                "host_ip": host.get("ip"),
                "command": command,
                "success": False,
                "error": e.message,
            }
        if not isinstance(data, dict):
            data = {}
        return {
            "operation": "ssh_command",
            "host_id": host_id,
            "host_ip": host.get("ip"),
            "command": command,
            "success": bool(data.get("success")),
            "stdout": data.get("stdout"),
            "stderr": data.get("stderr"),
        }
