"""
Deployment data models.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic.alias_generators import to_camel


class TaskStatus(str, Enum):
    """Status of a backend deployment task as seen by the console."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    TIMEOUT = "timeout"


TERMINAL_STATUSES = {TaskStatus.COMPLETED.value, TaskStatus.FAILED.value}


class ComponentSpec(BaseModel):
    """A monitoring component requested for installation."""

    name: str = Field(..., validation_alias=AliasChoices("name", "component"))
    version: Optional[str] = None
    port: Optional[int] = Field(None, validation_alias=AliasChoices("port", "defaultPort"))
    config: Dict[str, Any] = Field(default_factory=dict)

    def to_task_component(self, deployment_method: str) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "port": self.port,
            "config": self.config,
            "deployment_method": deployment_method,
        }


class InstallRequest(BaseModel):
    """Body of POST /api/monitoring/install."""

    host_ids: List[str] = Field(default_factory=list)
    components: List[ComponentSpec] = Field(default_factory=list)
    deployment_method: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        coerce_numbers_to_str = True
        json_schema_extra = {
            "example": {
                "hostIds": ["1", "2"],
                "components": [{"name": "node-exporter", "version": "1.7.0", "port": 9100}],
                "deploymentMethod": "docker",
            }
        }


class HostDeploymentResult(BaseModel):
    """Outcome of deploying to one host."""

    host_id: str
    task_id: Optional[str] = None
    status: TaskStatus
    components: List[str] = Field(default_factory=list)
    attempts: int = 0
    error: Optional[str] = None
    simulated: bool = False
    finished_at: datetime = Field(default_factory=datetime.utcnow)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class DeploymentSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    simulated: int = 0


class DeploymentReport(BaseModel):
    """Response envelope for a monitoring install run."""

    success: bool
    deployment_id: str
    results: List[HostDeploymentResult]
    summary: DeploymentSummary

    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
