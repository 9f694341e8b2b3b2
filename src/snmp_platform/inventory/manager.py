"""
In-memory host registry.

Hosts are added by discovery calls and updated when monitoring components
are installed. The registry lives for the lifetime of the process.
"""

import logging
import re
import uuid
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from snmp_platform.core.errors import ConflictError, ValidationError, describe_validation_errors

from .models import Host, HostGroup, HostStatus

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

# Exporters offered when a well-known service port is open
PORT_COMPONENTS = {
    3306: "mysqld-exporter",
    5432: "postgres-exporter",
    6379: "redis-exporter",
}


def _snake_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    return {_CAMEL_BOUNDARY.sub("_", key).lower(): value for key, value in data.items()}


def detect_available_components(
    os_name: Optional[str],
    memory: int = 0,
    open_ports: Iterable[int] = (),
) -> List[str]:
    """
    Work out which monitoring components a host can run.

    Args:
        os_name: Operating system name as discovered
        memory: Memory in MB
        open_ports: Open TCP ports

    Returns:
        Component ids in a stable order
    """
    components: List[str] = []
    os_lower = (os_name or "").lower()

    if "linux" in os_lower or "ubuntu" in os_lower:
        components.extend(["node-exporter", "categraf"])
    if "windows" in os_lower:
        components.append("windows-exporter")

    ports = set(open_ports or ())
    for port, component in PORT_COMPONENTS.items():
        if port in ports:
            components.append(component)

    # Larger hosts can carry storage and visualisation
    if memory >= 4096:
        components.extend(["victoriametrics", "grafana"])
    if memory >= 8192:
        components.extend(["vmstorage", "vminsert", "vmselect"])

    return components


class HostManager:
    """
    Registry of hosts and host groups keyed by id.

    Usage:
        manager = HostManager()
        host = manager.add_discovered_host({"ip": "10.0.0.5", "os": "Ubuntu"})
        manager.update_host_monitoring(host.id, ["node-exporter"])
    """

    def __init__(self):
        self.hosts: Dict[str, Host] = {}
        self.groups: Dict[str, HostGroup] = {}

    def add_discovered_host(self, host_data: Dict[str, Any]) -> Host:
        """
        Register a host reported by discovery.

        Accepts camelCase or snake_case keys. Monitoring state always starts
        disabled with nothing installed.

        Raises:
            ValidationError: If no IP address is given or a field has the
                wrong type
        """
        if not isinstance(host_data or {}, dict):
            raise ValidationError("Host data must be an object", field="hostData")
        data = _snake_keys(host_data or {})
        ip = data.get("ip")
        if not ip:
            raise ValidationError("Host IP address is required", field="ip")

        try:
            host = self._build_host(data, ip)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid host data: {describe_validation_errors(e.errors())}", field="hostData"
            ) from e
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid host data: {e}", field="hostData") from e

        self.hosts[host.id] = host
        logger.debug(f"Registered host {host.id} ({host.ip}): {host.available_components}")
        return host

    def _build_host(self, data: Dict[str, Any], ip: str) -> Host:
        metadata = dict(data.get("metadata") or {})
        open_ports = metadata.get("openPorts") or metadata.get("open_ports") or []
        memory = int(data.get("memory") or 0)
        now = datetime.utcnow()

        return Host(
            id=str(data.get("id") or self._generate_id()),
            name=data.get("name") or f"host-{ip}",
            ip=ip,
            hostname=data.get("hostname"),
            os=data.get("os") or "Unknown",
            os_version=data.get("os_version") or "",
            arch=data.get("arch") or "x86_64",
            status=data.get("status") or HostStatus.UNKNOWN,
            cpu_cores=int(data.get("cpu_cores") or 0),
            memory=memory,
            disk=int(data.get("disk") or 0),
            location=data.get("location") or "",
            group=data.get("group") or "default",
            tags=list(data.get("tags") or []),
            discovered_at=now,
            last_seen=now,
            available_components=detect_available_components(data.get("os"), memory, open_ports),
            ssh_port=int(data.get("ssh_port") or 22),
            ssh_user=data.get("ssh_user"),
            ssh_key_path=data.get("ssh_key_path"),
            metadata=metadata,
        )

    def get_host(self, host_id: str) -> Optional[Host]:
        return self.hosts.get(host_id)

    def list_hosts(self) -> List[Host]:
        return list(self.hosts.values())

    def get_available_hosts(self, component_id: Optional[str] = None) -> List[Host]:
        """Online hosts, optionally only those that can run ``component_id``."""
        return [
            host
            for host in self.hosts.values()
            if host.status == HostStatus.ONLINE
            and (not component_id or component_id in host.available_components)
        ]

    def get_hosts_by_group(self, group_id: str) -> List[Host]:
        """
        Hosts in a group.

        A registered group lists its members explicitly; otherwise hosts whose
        ``group`` field equals the id are returned.
        """
        group = self.groups.get(group_id)
        if group is None:
            return [host for host in self.hosts.values() if host.group == group_id]
        return [self.hosts[hid] for hid in group.host_ids if hid in self.hosts]

    def update_host_monitoring(self, host_id: str, components: List[str]) -> Optional[Host]:
        """Record installed components; unknown ids are ignored."""
        host = self.hosts.get(host_id)
        if host is None:
            logger.debug(f"Ignoring monitoring update for unknown host {host_id}")
            return None

        host.installed_components = list(components)
        host.monitoring_enabled = len(components) > 0
        host.last_seen = datetime.utcnow()
        return host

    def add_group(self, group: HostGroup) -> HostGroup:
        if group.id in self.groups:
            raise ConflictError(f"Host group {group.id} already exists")
        self.groups[group.id] = group
        return group

    def list_groups(self) -> List[HostGroup]:
        return list(self.groups.values())

    def clear(self) -> None:
        self.hosts.clear()
        self.groups.clear()

    @staticmethod
    def _generate_id() -> str:
        return uuid.uuid4().hex[:9]
