"""Deployment workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesValidationError,
)
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.integrations.kubernetes.models.resource import Resource
from container_version_manager.services.kubernetes.workloads.common import (
    api_error,
    generation_observed,
    has_condition,
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
    from kubernetes.client import V1Deployment, V1Pod, V1PodSpec, V1PodTemplateSpec

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()


class Deployment:
    """Deployment wrapped in the TemplateWorkload contract.

    Health follows the deployment controller: the rollout is failed once
    ``Progressing`` reports ``ProgressDeadlineExceeded`` and healthy when
    every desired replica is updated, ready and available. The progress
    deadline doubles as the rollback window.
    """

    kind = WorkloadKind.DEPLOYMENT

    def __init__(self, client: KubernetesClient, namespace: str, deployment: V1Deployment) -> None:
        self._client = client
        self._namespace = namespace
        self._deployment = deployment

    def __repr__(self) -> str:
        return f"Deployment({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._deployment.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._deployment.spec.template.spec

    def pod_template_spec(self) -> V1PodTemplateSpec:
        return self._deployment.spec.template

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = copy.deepcopy(self._deployment)
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
            self._deployment = self._client.apps_v1.replace_namespaced_deployment(
                name=self.name, namespace=self._namespace, body=body
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(
            self._deployment.metadata,
            self._deployment.spec.progress_deadline_seconds,
        )

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        metadata = self._deployment.metadata
        status = self._deployment.status
        if status is None or not generation_observed(metadata, status):
            return None

        if has_condition(status, "ReplicaFailure"):
            return False
        if has_condition(status, "Progressing", reason="ProgressDeadlineExceeded"):
            return False

        desired = self.num_replicas()
        if (
            (status.updated_replicas or 0) == desired
            and (status.ready_replicas or 0) == desired
            and (status.available_replicas or 0) == desired
            and (status.replicas or 0) == desired
        ):
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        status = self._deployment.status
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=(status.available_replicas if status else None) or 0,
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def select(self, selector: dict[str, str]) -> list[Deployment]:
        try:
            result = self._client.apps_v1.list_namespaced_deployment(
                namespace=self._namespace, label_selector=selector_string(selector)
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, None, self._namespace) from e
        return [Deployment(self._client, self._namespace, item) for item in result.items]

    def select_own_pods(self, pods: list[V1Pod]) -> list[V1Pod]:
        return filter_pods(self._deployment.spec.selector, self._namespace, pods)

    def num_replicas(self) -> int:
        replicas = self._deployment.spec.replicas
        return 1 if replicas is None else replicas

    def patch_num_replicas(self, num: int) -> None:
        if num < 0:
            raise KubernetesValidationError(f"replica count must be non-negative, got {num}")
        logger.info("scaling_workload", kind=self.kind.value, name=self.name, replicas=num)
        try:
            self._deployment = self._client.apps_v1.patch_namespaced_deployment(
                name=self.name, namespace=self._namespace, body={"spec": {"replicas": num}}
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def _refresh(self) -> None:
        """Re-read the deployment so health reflects the live object."""
        try:
            self._deployment = self._client.apps_v1.read_namespaced_deployment(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
