"""Reporting snapshot of one governed workload."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind


class Resource(BaseModel):
    """High-level state of one workload managed by a ContainerVersion.

    Holds the version currently deployed for the governed container and the
    number of available pods. Instances are immutable values: two resources
    with the same fields are equal.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    namespace: str = Field(description="Workload namespace")
    name: str = Field(description="Workload name")
    type: WorkloadKind = Field(description="Workload kind")
    container: str = Field(description="Governed container name")
    version: str = Field(description="Tag the container currently runs")
    available_pods: int = Field(default=0, description="Available pods for the workload")
    cv: str = Field(description="Owning ContainerVersion name")
    tag: str = Field(default="", description="Tag the ContainerVersion tracks")
