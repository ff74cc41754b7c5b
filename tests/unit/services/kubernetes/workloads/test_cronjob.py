"""Unit tests for the CronJob workload adapter."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes.client import (
    V1CronJob,
    V1CronJobSpec,
    V1CronJobStatus,
    V1JobSpec,
    V1JobTemplateSpec,
    V1ObjectMeta,
    V1ObjectReference,
    V1PodTemplateSpec,
)

from container_version_manager.integrations.kubernetes.models.container_version import (
    ContainerVersion,
)
from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.services.kubernetes.workloads import (
    CronJob,
    Workload,
    is_template_workload,
)

START = datetime(2024, 3, 1, 12, tzinfo=UTC)


@pytest.fixture
def make_v1_cron_job(
    make_metadata: Callable[..., V1ObjectMeta],
    make_template: Callable[..., V1PodTemplateSpec],
) -> Callable[..., V1CronJob]:
    """Factory for V1CronJob objects."""

    def _make(status: V1CronJobStatus | None = None, **meta: Any) -> V1CronJob:
        return V1CronJob(
            metadata=make_metadata(**meta),
            spec=V1CronJobSpec(
                schedule="*/5 * * * *",
                job_template=V1JobTemplateSpec(spec=V1JobSpec(template=make_template())),
            ),
            status=status,
        )

    return _make


class TestCronJob:
    """Tests for the CronJob adapter."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_plain_workload(
        self, mock_k8s_client: MagicMock, make_v1_cron_job: Callable[..., V1CronJob]
    ) -> None:
        """CronJobs support the basic contract only."""
        obj = make_v1_cron_job()
        workload = CronJob(mock_k8s_client, "default", obj)

        assert workload.kind is WorkloadKind.CRON_JOB
        assert workload.pod_spec() is obj.spec.job_template.spec.template.spec
        assert isinstance(workload, Workload)
        assert not is_template_workload(workload)

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_patch_pod_spec(
        self,
        mock_k8s_client: MagicMock,
        make_v1_cron_job: Callable[..., V1CronJob],
        make_cv: Callable[..., ContainerVersion],
    ) -> None:
        """Should replace the cron job with the new image in its job template."""
        workload = CronJob(mock_k8s_client, "default", make_v1_cron_job())

        workload.patch_pod_spec(make_cv(), "app", "2.0.0")

        call = mock_k8s_client.batch_v1.replace_namespaced_cron_job.call_args
        assert call.kwargs["name"] == "web"
        body = call.kwargs["body"]
        image = body.spec.job_template.spec.template.spec.containers[0].image
        assert image == "registry.example.com/web:2.0.0"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    @pytest.mark.parametrize(
        ("last_success", "expected"),
        [
            (START + timedelta(minutes=5), True),
            (START, True),
            (START - timedelta(minutes=5), None),
            (None, None),
        ],
    )
    def test_progress_health(
        self,
        last_success: datetime | None,
        expected: bool | None,
        mock_k8s_client: MagicMock,
        make_v1_cron_job: Callable[..., V1CronJob],
    ) -> None:
        """Healthy once a run succeeds after the rollout started."""
        mock_k8s_client.batch_v1.read_namespaced_cron_job.return_value = make_v1_cron_job(
            status=V1CronJobStatus(last_successful_time=last_success)
        )
        workload = CronJob(mock_k8s_client, "default", make_v1_cron_job())

        assert workload.progress_health(START) is expected

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_progress_health_naive_start(
        self, mock_k8s_client: MagicMock, make_v1_cron_job: Callable[..., V1CronJob]
    ) -> None:
        """A naive start time is taken as UTC."""
        mock_k8s_client.batch_v1.read_namespaced_cron_job.return_value = make_v1_cron_job(
            status=V1CronJobStatus(last_successful_time=START)
        )
        workload = CronJob(mock_k8s_client, "default", make_v1_cron_job())

        assert workload.progress_health(datetime(2024, 3, 1, 11, 59)) is True

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_as_resource_counts_active_jobs(
        self,
        mock_k8s_client: MagicMock,
        make_v1_cron_job: Callable[..., V1CronJob],
        make_cv: Callable[..., ContainerVersion],
    ) -> None:
        active = [V1ObjectReference(name="web-1"), V1ObjectReference(name="web-2")]
        workload = CronJob(
            mock_k8s_client, "default", make_v1_cron_job(status=V1CronJobStatus(active=active))
        )

        resource = workload.as_resource(make_cv())

        assert resource is not None
        assert resource.available_pods == 2
        assert resource.version == "1.0.0"
