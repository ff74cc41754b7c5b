"""Capability contracts shared by every workload kind.

Every kind adapter satisfies ``Workload``. Kinds whose pods come from a pod
template and that carry a replica count additionally satisfy
``TemplateWorkload``; use ``is_template_workload`` to check for it rather
than testing concrete classes.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind

if TYPE_CHECKING:
    from kubernetes.client import V1Pod, V1PodSpec, V1PodTemplateSpec

    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )
    from container_version_manager.integrations.kubernetes.models.resource import Resource

__all__ = ["TemplateWorkload", "Workload", "WorkloadKind", "is_template_workload"]


@runtime_checkable
class Workload(Protocol):
    """Something deployable: a Deployment, DaemonSet, Pod, etc."""

    @property
    def name(self) -> str:
        """Name of the workload, without the namespace."""
        ...

    @property
    def namespace(self) -> str:
        """Namespace the workload belongs to."""
        ...

    @property
    def kind(self) -> WorkloadKind:
        """Kind tag of the workload."""
        ...

    def pod_spec(self) -> V1PodSpec:
        """Pod spec the workload currently runs."""
        ...

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        """Set the image tag of ``container`` to ``version`` and write it back.

        Raises:
            ContainerNotFoundError: If the workload has no such container.
            KubernetesError: If the update call fails.
        """
        ...

    def rollback_after(self) -> timedelta | None:
        """How long a failing rollout may run before rollback; None disables it."""
        ...

    def progress_health(self, start_time: datetime) -> bool | None:
        """Whether the rollout started at ``start_time`` is healthy.

        Returns None while the outcome cannot be decided yet.

        Raises:
            KubernetesError: If the health could not be evaluated. Callers
                must treat this as indeterminate, not as unhealthy.
        """
        ...

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        """Reporting snapshot for ``cv``; None if the governed container is absent."""
        ...


@runtime_checkable
class TemplateWorkload(Workload, Protocol):
    """Workload that manages a set of pods through a pod template."""

    def pod_template_spec(self) -> V1PodTemplateSpec:
        """Template used to create the workload's pods."""
        ...

    def select(self, selector: dict[str, str]) -> list[TemplateWorkload]:
        """All workloads of this kind matching ``selector``; may include self."""
        ...

    def select_own_pods(self, pods: list[V1Pod]) -> list[V1Pod]:
        """The subset of ``pods`` managed by this workload."""
        ...

    def num_replicas(self) -> int:
        """Desired number of replicas."""
        ...

    def patch_num_replicas(self, num: int) -> None:
        """Change the desired number of replicas."""
        ...


def is_template_workload(workload: Workload) -> bool:
    """Whether ``workload`` supports the TemplateWorkload operations."""
    return isinstance(workload, TemplateWorkload)
