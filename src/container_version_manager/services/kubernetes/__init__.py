"""Kubernetes service module.

Provides the ContainerVersion manager, the workload provider and the event
recorders used while rolling container versions out.
"""

from container_version_manager.services.kubernetes.container_versions import (
    ContainerVersionManager,
)
from container_version_manager.services.kubernetes.events import (
    EventRecorder,
    KubernetesEventRecorder,
    LoggingEventRecorder,
)
from container_version_manager.services.kubernetes.provider import WorkloadProvider

__all__ = [
    "ContainerVersionManager",
    "EventRecorder",
    "KubernetesEventRecorder",
    "LoggingEventRecorder",
    "WorkloadProvider",
]
