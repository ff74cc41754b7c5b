"""Label selector helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubernetes.client import V1LabelSelector, V1Pod


def selector_string(selector: dict[str, str]) -> str:
    """Render an equality selector as the API expects, e.g. ``app=web,tier=fe``.

    Keys are sorted so the same selector always renders the same string.
    """
    return ",".join(f"{key}={selector[key]}" for key in sorted(selector))


def selector_matches(label_selector: V1LabelSelector | None, labels: dict[str, str] | None) -> bool:
    """Whether ``labels`` satisfy a workload's ``spec.selector``.

    A missing selector matches nothing; an empty one matches everything.
    """
    if label_selector is None:
        return False
    labels = labels or {}

    for key, value in (label_selector.match_labels or {}).items():
        if labels.get(key) != value:
            return False

    for expr in label_selector.match_expressions or []:
        values = expr.values or []
        if expr.operator == "In":
            if labels.get(expr.key) not in values:
                return False
        elif expr.operator == "NotIn":
            if expr.key in labels and labels[expr.key] in values:
                return False
        elif expr.operator == "Exists":
            if expr.key not in labels:
                return False
        elif expr.operator == "DoesNotExist":
            if expr.key in labels:
                return False
        else:
            return False

    return True


def filter_pods(
    label_selector: V1LabelSelector | None,
    namespace: str,
    pods: list[V1Pod],
) -> list[V1Pod]:
    """Pods in ``namespace`` whose labels satisfy ``label_selector``."""
    return [
        pod
        for pod in pods
        if pod.metadata is not None
        and pod.metadata.namespace in (None, namespace)
        and selector_matches(label_selector, pod.metadata.labels)
    ]
