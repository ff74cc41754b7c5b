"""Workload adapters for the kinds a ContainerVersion can govern."""

from container_version_manager.services.kubernetes.workloads.contract import (
    TemplateWorkload,
    Workload,
    WorkloadKind,
    is_template_workload,
)
from container_version_manager.services.kubernetes.workloads.cronjob import CronJob
from container_version_manager.services.kubernetes.workloads.daemonset import DaemonSet
from container_version_manager.services.kubernetes.workloads.deployment import Deployment
from container_version_manager.services.kubernetes.workloads.job import Job
from container_version_manager.services.kubernetes.workloads.pod import Pod
from container_version_manager.services.kubernetes.workloads.registry import (
    WORKLOAD_KINDS,
    KindBinding,
)
from container_version_manager.services.kubernetes.workloads.replicaset import ReplicaSet
from container_version_manager.services.kubernetes.workloads.statefulset import StatefulSet

__all__ = [
    "WORKLOAD_KINDS",
    "CronJob",
    "DaemonSet",
    "Deployment",
    "Job",
    "KindBinding",
    "Pod",
    "ReplicaSet",
    "StatefulSet",
    "TemplateWorkload",
    "Workload",
    "WorkloadKind",
    "is_template_workload",
]
