"""Helpers shared by the workload kind adapters."""

from __future__ import annotations

from datetime import timedelta
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from kubernetes.client import V1ObjectMeta

    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.exceptions import KubernetesError
    from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind

logger = structlog.get_logger()

# Workload annotation overriding how long a failing rollout may run
# before it is rolled back.
ROLLBACK_AFTER_ANNOTATION = "container-version.k8s.io/rollback-after-seconds"


def rollback_after(
    metadata: V1ObjectMeta | None,
    fallback_seconds: int | None = None,
) -> timedelta | None:
    """Resolve the rollback window of a workload.

    The annotation wins over ``fallback_seconds``. A malformed or
    non-positive annotation is ignored.
    """
    annotations = (metadata.annotations if metadata else None) or {}
    if raw := annotations.get(ROLLBACK_AFTER_ANNOTATION):
        try:
            seconds = int(raw)
        except ValueError:
            seconds = 0
        if seconds > 0:
            return timedelta(seconds=seconds)
        logger.warning(
            "ignoring_rollback_annotation",
            name=metadata.name if metadata else None,
            value=raw,
        )
    if fallback_seconds is not None and fallback_seconds > 0:
        return timedelta(seconds=fallback_seconds)
    return None


def generation_observed(metadata: V1ObjectMeta | None, status: Any) -> bool:
    """Whether the controller has seen the latest spec change."""
    generation = (metadata.generation if metadata else None) or 0
    observed = getattr(status, "observed_generation", None) or 0
    return observed >= generation


def has_condition(
    status: Any,
    condition_type: str,
    *,
    reason: str | None = None,
    value: str = "True",
) -> bool:
    """Whether ``status.conditions`` holds a matching condition.

    With ``reason`` set, the condition status is not checked.
    """
    for cond in getattr(status, "conditions", None) or []:
        if cond.type != condition_type:
            continue
        if reason is not None:
            if cond.reason == reason:
                return True
        elif cond.status == value:
            return True
    return False


def api_error(
    client: KubernetesClient,
    e: Exception,
    kind: WorkloadKind,
    name: str | None,
    namespace: str,
) -> KubernetesError:
    """Translate an API exception raised while operating on a workload."""
    return client.translate_api_exception(
        e,
        resource_type=kind.value,
        resource_name=name,
        namespace=namespace,
    )
