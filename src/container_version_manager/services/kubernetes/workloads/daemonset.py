"""DaemonSet workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from container_version_manager.integrations.kubernetes.exceptions import (
    UnsupportedWorkloadOperationError,
)
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.integrations.kubernetes.models.resource import Resource
from container_version_manager.services.kubernetes.workloads.common import (
    api_error,
    generation_observed,
    rollback_after,
)
from container_version_manager.services.kubernetes.workloads.images import (
    find_container,
    image_version,
    set_container_version,
)
from container_version_manager.services.kubernetes.workloads.selectors import (
    filter_pods,
    selector_string,
)

if TYPE_CHECKING:
    from kubernetes.client import V1DaemonSet, V1Pod, V1PodSpec, V1PodTemplateSpec

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()


class DaemonSet:
    """DaemonSet wrapped in the TemplateWorkload contract.

    The replica count is decided by node scheduling, so it can be read but
    not patched.
    """

    kind = WorkloadKind.DAEMON_SET

    def __init__(self, client: KubernetesClient, namespace: str, daemon_set: V1DaemonSet) -> None:
        self._client = client
        self._namespace = namespace
        self._daemon_set = daemon_set

    def __repr__(self) -> str:
        return f"DaemonSet({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._daemon_set.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._daemon_set.spec.template.spec

    def pod_template_spec(self) -> V1PodTemplateSpec:
        return self._daemon_set.spec.template

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = copy.deepcopy(self._daemon_set)
        image = set_container_version(
            body.spec.template.spec,
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
            self._daemon_set = self._client.apps_v1.replace_namespaced_daemon_set(
                name=self.name, namespace=self._namespace, body=body
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(self._daemon_set.metadata)

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        status = self._daemon_set.status
        if status is None or not generation_observed(self._daemon_set.metadata, status):
            return None

        desired = status.desired_number_scheduled or 0
        if (status.updated_number_scheduled or 0) == desired and (
            status.number_available or 0
        ) == desired:
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        status = self._daemon_set.status
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=(status.number_available if status else None) or 0,
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def select(self, selector: dict[str, str]) -> list[DaemonSet]:
        try:
            result = self._client.apps_v1.list_namespaced_daemon_set(
                namespace=self._namespace, label_selector=selector_string(selector)
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, None, self._namespace) from e
        return [DaemonSet(self._client, self._namespace, item) for item in result.items]

    def select_own_pods(self, pods: list[V1Pod]) -> list[V1Pod]:
        return filter_pods(self._daemon_set.spec.selector, self._namespace, pods)

    def num_replicas(self) -> int:
        status = self._daemon_set.status
        return (status.desired_number_scheduled if status else None) or 0

    def patch_num_replicas(self, num: int) -> None:
        raise UnsupportedWorkloadOperationError(
            "patch_num_replicas",
            resource_type=self.kind.value,
            resource_name=self.name,
            namespace=self._namespace,
        )

    def _refresh(self) -> None:
        try:
            self._daemon_set = self._client.apps_v1.read_namespaced_daemon_set(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
