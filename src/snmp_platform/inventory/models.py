"""
Host inventory data models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class HostStatus(str, Enum):
    """Reachability of a host."""

    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class Host(BaseModel):
    """
    Represents a host that monitoring components can be deployed to.

    Serialized with camelCase keys (``osVersion``, ``installedComponents``)
    to match the dashboard's JSON.
    """

    id: str = Field(..., description="Host identifier")
    name: str = Field(..., description="Display name")
    ip: str = Field(..., description="IP address")
    hostname: Optional[str] = Field(None, description="Hostname if resolved")
    os: str = Field(default="Unknown", description="Operating system name")
    os_version: str = Field(default="", description="Operating system version")
    arch: str = Field(default="x86_64", description="CPU architecture")
    status: HostStatus = Field(default=HostStatus.UNKNOWN)
    cpu_cores: int = Field(default=0, ge=0)
    memory: int = Field(default=0, ge=0, description="Memory in MB")
    disk: int = Field(default=0, ge=0, description="Disk in GB")
    location: str = ""
    group: str = "default"
    tags: List[str] = Field(default_factory=list)
    discovered_at: datetime = Field(default_factory=datetime.utcnow)
    last_seen: datetime = Field(default_factory=datetime.utcnow)

    # Monitoring
    monitoring_enabled: bool = False
    installed_components: List[str] = Field(default_factory=list)
    available_components: List[str] = Field(default_factory=list)

    # Connection
    ssh_port: int = 22
    ssh_user: Optional[str] = None
    ssh_key_path: Optional[str] = None

    metadata: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True
        json_schema_extra = {
            "example": {
                "id": "1",
                "name": "web-server-01",
                "ip": "192.168.1.10",
                "os": "Ubuntu",
                "osVersion": "22.04",
                "status": "online",
                "cpuCores": 8,
                "memory": 16384,
                "disk": 500,
                "group": "web-servers",
                "tags": ["production", "web"],
                "availableComponents": ["node-exporter", "categraf"],
                "metadata": {"openPorts": [22, 80, 443, 9100]},
            }
        }

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class HostGroup(BaseModel):
    """A named set of hosts sharing default components."""

    id: str
    name: str
    description: str = ""
    host_ids: List[str] = Field(default_factory=list)
    default_components: List[str] = Field(default_factory=list)
    deployment_template: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
