"""Workload kind tags."""

from __future__ import annotations

from enum import Enum


class WorkloadKind(str, Enum):
    """Closed set of workload kinds a ContainerVersion can govern."""

    DEPLOYMENT = "Deployment"
    CRON_JOB = "CronJob"
    DAEMON_SET = "DaemonSet"
    JOB = "Job"
    POD = "Pod"
    REPLICA_SET = "ReplicaSet"
    STATEFUL_SET = "StatefulSet"

    @property
    def plural(self) -> str:
        """Plural label used when reporting listing failures (e.g., "cronJobs")."""
        return self.value[0].lower() + self.value[1:] + "s"
