"""Event recording for ContainerVersion rollouts.

Failures noticed while resolving or rolling out a ContainerVersion are
reported as events against it. A recorder never raises: losing an event
must not fail the operation that emitted it.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from container_version_manager.integrations.kubernetes.models.base import _format_timestamp
from container_version_manager.integrations.kubernetes.models.container_version import (
    CV_GROUP,
    CV_KIND,
    CV_VERSION,
)

if TYPE_CHECKING:
    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()

# Event types accepted by the core/v1 Event API
EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

# Reason reported when workload discovery fails
REASON_SYNC_FAILED = "CRSyncFailed"

EVENT_SOURCE = "container-version-manager"


class EventRecorder(Protocol):
    """Sink for events about a ContainerVersion."""

    def event(self, cv: ContainerVersion, event_type: str, reason: str, message: str) -> None:
        """Record an event; must not raise."""
        ...


class LoggingEventRecorder:
    """Recorder that writes events to the structured log."""

    def event(self, cv: ContainerVersion, event_type: str, reason: str, message: str) -> None:
        log = logger.warning if event_type == EVENT_WARNING else logger.info
        log(
            "container_version_event",
            container_version=cv.name,
            namespace=cv.namespace,
            type=event_type,
            reason=reason,
            message=message,
        )


class KubernetesEventRecorder:
    """Recorder that creates core/v1 Events referencing the ContainerVersion.

    Args:
        client: Kubernetes API client instance.
        component: Source component reported on the event.
    """

    def __init__(self, client: KubernetesClient, component: str = EVENT_SOURCE) -> None:
        self._client = client
        self._component = component

    def event(self, cv: ContainerVersion, event_type: str, reason: str, message: str) -> None:
        namespace = cv.namespace or self._client.default_namespace
        try:
            self._client.core_v1.create_namespaced_event(
                namespace=namespace,
                body=self._build_event(cv, namespace, event_type, reason, message),
            )
        except Exception as e:
            error = self._client.translate_api_exception(
                e, resource_type="Event", namespace=namespace
            )
            logger.warning(
                "event_recording_failed",
                container_version=cv.name,
                namespace=namespace,
                reason=reason,
                error=str(error),
            )

    def _build_event(
        self,
        cv: ContainerVersion,
        namespace: str,
        event_type: str,
        reason: str,
        message: str,
    ) -> dict[str, Any]:
        now = _format_timestamp(datetime.now(UTC))
        return {
            "apiVersion": "v1",
            "kind": "Event",
            "metadata": {"generateName": f"{cv.name}.", "namespace": namespace},
            "involvedObject": {
                "apiVersion": f"{CV_GROUP}/{CV_VERSION}",
                "kind": CV_KIND,
                "name": cv.name,
                "namespace": namespace,
                "uid": cv.uid,
            },
            "reason": reason,
            "message": message,
            "type": event_type,
            "firstTimestamp": now,
            "lastTimestamp": now,
            "count": 1,
            "source": {"component": self._component},
        }
