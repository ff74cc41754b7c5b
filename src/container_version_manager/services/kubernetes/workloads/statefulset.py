"""StatefulSet workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesValidationError,
)
from container_version_manager.integrations.kubernetes.models.base import _safe_get
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
    from kubernetes.client import V1Pod, V1PodSpec, V1PodTemplateSpec, V1StatefulSet

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()


class StatefulSet:
    """StatefulSet wrapped in the TemplateWorkload contract.

    Pods are replaced one ordinal at a time, so the rollout is only healthy
    once the pods at or above the rolling-update partition run the update
    revision and every replica is ready.
    """

    kind = WorkloadKind.STATEFUL_SET

    def __init__(
        self, client: KubernetesClient, namespace: str, stateful_set: V1StatefulSet
    ) -> None:
        self._client = client
        self._namespace = namespace
        self._stateful_set = stateful_set

    def __repr__(self) -> str:
        return f"StatefulSet({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._stateful_set.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._stateful_set.spec.template.spec

    def pod_template_spec(self) -> V1PodTemplateSpec:
        return self._stateful_set.spec.template

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = copy.deepcopy(self._stateful_set)
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
            self._stateful_set = self._client.apps_v1.replace_namespaced_stateful_set(
                name=self.name, namespace=self._namespace, body=body
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(self._stateful_set.metadata)

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        status = self._stateful_set.status
        if status is None or not generation_observed(self._stateful_set.metadata, status):
            return None

        desired = self.num_replicas()
        if (status.ready_replicas or 0) != desired:
            return None

        partition = self._partition()
        if partition > 0:
            if (status.updated_replicas or 0) >= desired - partition:
                return True
            return None

        if status.update_revision and status.current_revision == status.update_revision:
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        status = self._stateful_set.status
        available = _safe_get(status, "available_replicas")
        if available is None:
            available = _safe_get(status, "ready_replicas", default=0)
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=available,
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def select(self, selector: dict[str, str]) -> list[StatefulSet]:
        try:
            result = self._client.apps_v1.list_namespaced_stateful_set(
                namespace=self._namespace, label_selector=selector_string(selector)
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, None, self._namespace) from e
        return [StatefulSet(self._client, self._namespace, item) for item in result.items]

    def select_own_pods(self, pods: list[V1Pod]) -> list[V1Pod]:
        return filter_pods(self._stateful_set.spec.selector, self._namespace, pods)

    def num_replicas(self) -> int:
        replicas = self._stateful_set.spec.replicas
        return 1 if replicas is None else replicas

    def patch_num_replicas(self, num: int) -> None:
        if num < 0:
            raise KubernetesValidationError(f"replica count must be non-negative, got {num}")
        logger.info("scaling_workload", kind=self.kind.value, name=self.name, replicas=num)
        try:
            self._stateful_set = self._client.apps_v1.patch_namespaced_stateful_set(
                name=self.name, namespace=self._namespace, body={"spec": {"replicas": num}}
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def _partition(self) -> int:
        """Ordinal below which pods keep the current revision."""
        strategy = self._stateful_set.spec.update_strategy
        if strategy is None or strategy.type not in (None, "RollingUpdate"):
            return 0
        return _safe_get(strategy, "rolling_update", "partition", default=0)

    def _refresh(self) -> None:
        try:
            self._stateful_set = self._client.apps_v1.read_namespaced_stateful_set(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
