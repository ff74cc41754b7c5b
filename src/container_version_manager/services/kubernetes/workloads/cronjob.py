"""CronJob workload adapter."""

from __future__ import annotations

import copy
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

import structlog

from container_version_manager.integrations.kubernetes.models.base import _as_utc, _safe_get
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
    from kubernetes.client import V1CronJob, V1PodSpec

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )

logger = structlog.get_logger()


class CronJob:
    """CronJob wrapped in the Workload contract.

    The pods that matter belong to Jobs the schedule has not created yet,
    so there is no replica count to manage. A rollout counts as healthy
    once a scheduled run succeeds after it started.
    """

    kind = WorkloadKind.CRON_JOB

    def __init__(self, client: KubernetesClient, namespace: str, cron_job: V1CronJob) -> None:
        self._client = client
        self._namespace = namespace
        self._cron_job = cron_job

    def __repr__(self) -> str:
        return f"CronJob({self._namespace}/{self.name})"

    @property
    def name(self) -> str:
        return self._cron_job.metadata.name

    @property
    def namespace(self) -> str:
        return self._namespace

    def pod_spec(self) -> V1PodSpec:
        return self._cron_job.spec.job_template.spec.template.spec

    def patch_pod_spec(self, cv: ContainerVersion, container: str, version: str) -> None:
        body = copy.deepcopy(self._cron_job)
        image = set_container_version(
            body.spec.job_template.spec.template.spec,
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
            self._cron_job = self._client.batch_v1.replace_namespaced_cron_job(
                name=self.name, namespace=self._namespace, body=body
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e

    def rollback_after(self) -> timedelta | None:
        return rollback_after(self._cron_job.metadata)

    def progress_health(self, start_time: datetime) -> bool | None:
        self._refresh()
        last_success = _safe_get(self._cron_job, "status", "last_successful_time")
        if last_success is not None and _as_utc(last_success) >= _as_utc(start_time):
            return True
        return None

    def as_resource(self, cv: ContainerVersion) -> Resource | None:
        container = find_container(self.pod_spec(), cv.spec.container.name)
        if container is None:
            return None
        active = _safe_get(self._cron_job, "status", "active", default=[])
        return Resource(
            namespace=self._namespace,
            name=self.name,
            type=self.kind,
            container=container.name,
            version=image_version(container.image or ""),
            available_pods=len(active),
            cv=cv.name,
            tag=cv.spec.tag,
        )

    def _refresh(self) -> None:
        try:
            self._cron_job = self._client.batch_v1.read_namespaced_cron_job(
                name=self.name, namespace=self._namespace
            )
        except Exception as e:
            raise api_error(self._client, e, self.kind, self.name, self._namespace) from e
