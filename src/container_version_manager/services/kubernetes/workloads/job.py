"""Job workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog
from kubernetes.client import V1ObjectMeta

from container_version_manager.integrations.kubernetes.exceptions import (
    JobRecreateError,
    KubernetesValidationError,
)
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.integrations.kubernetes.models.resource import Resource
from container_version_manager.services.kubernetes.workloads.common import (
    api_error,
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
    from kubernetes.client import V1Job, V1Pod, V1PodSpec, V1PodTemplateSpec

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()

# Labels the job controller stamps on the selector and pod template.
_GENERATED_LABELS = (
    "controller-uid",
    "job-name",
    "batch.kubernetes.io/controller-uid",
    "batch.kubernetes.io/job-name",
)


class Job:
    """Job wrapped in the TemplateWorkload contract.

    A Job's pod template is immutable, so a new version is rolled out by
    deleting the Job and creating it again from its own spec. Parallelism
    stands in for the replica count.
    """

    kind = WorkloadKind.JOB

    def __init__(self, client: KubernetesClient, namespace: str, job: V1Job) -> None:
        self._client = client
        self._namespace = namespace
        self._job = job

    def __repr__(self) -> str:
        return f"Job({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._job.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._job.spec.template.spec

    def pod_template_spec(self) -> V1PodTemplateSpec:
        return self._job.spec.template

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = self._recreate_body()
        image = set_container_version(
            body.spec.template.spec,
            cv,
            container,
            version,
            kind=self.kind,
            name=self.name,
            namespace=self._namespace,
        )
        log = logger.bind(name=self.name, namespace=self._namespace, container=container)
        log.info("recreating_job", image=image)
        try:
            self._client.batch_v1.delete_namespaced_job(
                name=self.name, namespace=self._namespace, propagation_policy="Background"
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

        try:
            self._job = self._client.batch_v1.create_namespaced_job(
                namespace=self._namespace, body=body
            )
        except Exception as e:
            error = api_error(self._client, e, self.kind, self.name, self._namespace)
            log.error("job_recreate_failed", image=image, error=str(error))
            raise JobRecreateError(self.name, error, body, namespace=self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(self._job.metadata)

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        status = self._job.status
        if status is None:
            return None
        if has_condition(status, "Failed"):
            return False
        if has_condition(status, "Complete"):
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        status = self._job.status
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=(status.active if status else None) or 0,
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def select(self, selector: dict[str, str]) -> list[Job]:
        try:
            result = self._client.batch_v1.list_namespaced_job(
                namespace=self._namespace, label_selector=selector_string(selector)
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, None, self._namespace) from e
        return [Job(self._client, self._namespace, item) for item in result.items]

    def select_own_pods(self, pods: list[V1Pod]) -> list[V1Pod]:
        return filter_pods(self._job.spec.selector, self._namespace, pods)

    def num_replicas(self) -> int:
        parallelism = self._job.spec.parallelism
        return 1 if parallelism is None else parallelism

    def patch_num_replicas(self, num: int) -> None:
        if num < 0:
            raise KubernetesValidationError(f"parallelism must be non-negative, got {num}")
        logger.info("scaling_workload", kind=self.kind.value, name=self.name, replicas=num)
        try:
            self._job = self._client.batch_v1.patch_namespaced_job(
                name=self.name, namespace=self._namespace, body={"spec": {"parallelism": num}}
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def _recreate_body(self) -> V1Job:
        """Copy of the job stripped of server-populated fields."""
        body = copy.deepcopy(self._job)
        metadata = body.metadata
        body.metadata = V1ObjectMeta(
            name=metadata.name,
            namespace=self._namespace,
            labels=metadata.labels,
            annotations=metadata.annotations,
        )
        body.status = None
        if not body.spec.manual_selector:
            body.spec.selector = None
            template_meta = body.spec.template.metadata
            if template_meta is not None and template_meta.labels:
                for key in _GENERATED_LABELS:
                    template_meta.labels.pop(key, None)
        return body

    def _refresh(self) -> None:
        try:
            self._job = self._client.batch_v1.read_namespaced_job(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
