"""Kinds the provider lists, in the order their workloads are reported."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.services.kubernetes.workloads.cronjob import CronJob
from container_version_manager.services.kubernetes.workloads.daemonset import DaemonSet
from container_version_manager.services.kubernetes.workloads.deployment import Deployment
from container_version_manager.services.kubernetes.workloads.job import Job
from container_version_manager.services.kubernetes.workloads.pod import Pod
from container_version_manager.services.kubernetes.workloads.replicaset import ReplicaSet
from container_version_manager.services.kubernetes.workloads.statefulset import StatefulSet

if TYPE_CHECKING:
    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.services.kubernetes.workloads.contract import Workload


@dataclass(frozen=True)
class KindBinding:
    """How to list one workload kind and wrap the listed objects.

    Attributes:
        kind: Kind tag of the listed objects.
        list_items: Returns the raw objects of the kind in a namespace.
        adapter: Wraps one raw object in its Workload adapter.
    """

    kind: WorkloadKind
    list_items: Callable[..., list[Any]]
    adapter: Callable[[KubernetesClient, str, Any], Workload]

    def list_workloads(
        self, client: KubernetesClient, namespace: str, **kwargs: Any
    ) -> list[Workload]:
        items = self.list_items(client, namespace, **kwargs)
        return [self.adapter(client, namespace, item) for item in items]


def _list_deployments(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.apps_v1.list_namespaced_deployment(namespace=namespace, **kwargs).items


def _list_cron_jobs(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.batch_v1.list_namespaced_cron_job(namespace=namespace, **kwargs).items


def _list_daemon_sets(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.apps_v1.list_namespaced_daemon_set(namespace=namespace, **kwargs).items


def _list_jobs(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.batch_v1.list_namespaced_job(namespace=namespace, **kwargs).items


def _list_pods(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.core_v1.list_namespaced_pod(namespace=namespace, **kwargs).items


def _list_replica_sets(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.apps_v1.list_namespaced_replica_set(namespace=namespace, **kwargs).items


def _list_stateful_sets(client: KubernetesClient, namespace: str, **kwargs: Any) -> list[Any]:
    return client.apps_v1.list_namespaced_stateful_set(namespace=namespace, **kwargs).items


WORKLOAD_KINDS: tuple[KindBinding, ...] = (
    KindBinding(WorkloadKind.DEPLOYMENT, _list_deployments, Deployment),
    KindBinding(WorkloadKind.CRON_JOB, _list_cron_jobs, CronJob),
    KindBinding(WorkloadKind.DAEMON_SET, _list_daemon_sets, DaemonSet),
    KindBinding(WorkloadKind.JOB, _list_jobs, Job),
    KindBinding(WorkloadKind.POD, _list_pods, Pod),
    KindBinding(WorkloadKind.REPLICA_SET, _list_replica_sets, ReplicaSet),
    KindBinding(WorkloadKind.STATEFUL_SET, _list_stateful_sets, StatefulSet),
)
