"""Kubernetes resource models."""

from container_version_manager.integrations.kubernetes.models.base import K8sEntityBase
from container_version_manager.integrations.kubernetes.models.container_version import (
    CV_GROUP,
    CV_KIND,
    CV_PLURAL,
    CV_VERSION,
    ContainerSpec,
    ContainerVersion,
    ContainerVersionSpec,
    ContainerVersionStatus,
    RolloutStatus,
)
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.integrations.kubernetes.models.resource import Resource

__all__ = [
    "CV_GROUP",
    "CV_KIND",
    "CV_PLURAL",
    "CV_VERSION",
    "ContainerSpec",
    "ContainerVersion",
    "ContainerVersionSpec",
    "ContainerVersionStatus",
    "K8sEntityBase",
    "Resource",
    "RolloutStatus",
    "WorkloadKind",
]
