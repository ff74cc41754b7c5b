"""Bare Pod workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from container_version_manager.integrations.kubernetes.models.base import _safe_get
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.integrations.kubernetes.models.resource import Resource
from container_version_manager.services.kubernetes.workloads.common import (
    api_error,
    rollback_after,
)
from container_version_manager.services.kubernetes.workloads.images import (
    find_container,
    image_version,
    set_container_version,
)

if TYPE_CHECKING:
    from kubernetes.client import V1Pod, V1PodSpec

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()

# Waiting reasons that will not resolve without a new image.
_STUCK_REASONS = frozenset({"CrashLoopBackOff", "ErrImagePull", "ImagePullBackOff"})


class Pod:
    """Pod not owned by any controller, wrapped in the Workload contract."""

    kind = WorkloadKind.POD

    def __init__(self, client: KubernetesClient, namespace: str, pod: V1Pod) -> None:
        self._client = client
        self._namespace = namespace
        self._pod = pod

    def __repr__(self) -> str:
        return f"Pod({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._pod.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._pod.spec

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = copy.deepcopy(self._pod)
        image = set_container_version(
            body.spec,
            cv,
            container,
            version,
            kind=self.kind,
            name=self.name,
            namespace=self._namespace,
        )
        logger.info(
            "patching_pod_spec",
            kind=self.kind.value,
            name=self.name,
            namespace=self._namespace,
            container=container,
            image=image,
        )
        try:
            self._pod = self._client.core_v1.replace_namespaced_pod(
                name=self.name, namespace=self._namespace, body=body
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(self._pod.metadata)

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        phase = _safe_get(self._pod, "status", "phase")
        if phase == "Failed":
            return False
        statuses = _safe_get(self._pod, "status", "container_statuses", default=[])
        for status in statuses:
            if _safe_get(status, "state", "waiting", "reason") in _STUCK_REASONS:
                return False
        if phase == "Succeeded":
            return True
        if phase == "Running" and self._all_ready():
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        running = _safe_get(self._pod, "status", "phase") == "Running"
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=1 if running and self._all_ready() else 0,
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def _all_ready(self) -> bool:
        statuses = _safe_get(self._pod, "status", "container_statuses", default=[])
        return bool(statuses) and all(status.ready for status in statuses)

    def _refresh(self) -> None:
        try:
            self._pod = self._client.core_v1.read_namespaced_pod(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
