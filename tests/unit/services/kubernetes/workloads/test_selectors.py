"""Unit tests for label selector helpers."""

from __future__ import annotations

import pytest
from kubernetes.client import (
    V1LabelSelector,
    V1LabelSelectorRequirement,
    V1ObjectMeta,
    V1Pod,
)

from container_version_manager.services.kubernetes.workloads.selectors import (
    filter_pods,
    selector_matches,
    selector_string,
)


def _pod(name: str, labels: dict[str, str], namespace: str = "apps") -> V1Pod:
    return V1Pod(metadata=V1ObjectMeta(name=name, namespace=namespace, labels=labels))


def _expr(key: str, operator: str, values: list[str] | None = None) -> V1LabelSelector:
    return V1LabelSelector(
        match_expressions=[V1LabelSelectorRequirement(key=key, operator=operator, values=values)]
    )


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSelectorString:
    """Tests for selector_string."""

    def test_sorted_pairs(self) -> None:
        """Keys are rendered sorted so equal selectors render equally."""
        assert selector_string({"tier": "fe", "app": "web"}) == "app=web,tier=fe"

    def test_single(self) -> None:
        assert selector_string({"app": "web"}) == "app=web"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSelectorMatches:
    """Tests for selector_matches."""

    def test_missing_selector_matches_nothing(self) -> None:
        assert not selector_matches(None, {"app": "web"})

    def test_empty_selector_matches_everything(self) -> None:
        assert selector_matches(V1LabelSelector(), {"app": "web"})

    def test_match_labels(self) -> None:
        selector = V1LabelSelector(match_labels={"app": "web"})
        assert selector_matches(selector, {"app": "web", "tier": "fe"})
        assert not selector_matches(selector, {"app": "api"})
        assert not selector_matches(selector, None)

    @pytest.mark.parametrize(
        ("selector", "labels", "expected"),
        [
            (_expr("tier", "In", ["fe", "be"]), {"tier": "fe"}, True),
            (_expr("tier", "In", ["fe"]), {"tier": "db"}, False),
            (_expr("tier", "NotIn", ["db"]), {"tier": "fe"}, True),
            (_expr("tier", "NotIn", ["db"]), {}, True),
            (_expr("tier", "NotIn", ["db"]), {"tier": "db"}, False),
            (_expr("tier", "Exists"), {"tier": "fe"}, True),
            (_expr("tier", "Exists"), {}, False),
            (_expr("tier", "DoesNotExist"), {}, True),
            (_expr("tier", "DoesNotExist"), {"tier": "fe"}, False),
            (_expr("tier", "Gt", ["1"]), {"tier": "2"}, False),
        ],
    )
    def test_match_expressions(
        self, selector: V1LabelSelector, labels: dict[str, str], expected: bool
    ) -> None:
        """Set-based requirements follow the API server semantics."""
        assert selector_matches(selector, labels) is expected


@pytest.mark.unit
@pytest.mark.kubernetes
class TestFilterPods:
    """Tests for filter_pods."""

    def test_filters_by_labels_and_namespace(self) -> None:
        """Only pods in the namespace whose labels match are kept."""
        selector = V1LabelSelector(match_labels={"app": "web"})
        pods = [
            _pod("web-1", {"app": "web"}),
            _pod("api-1", {"app": "api"}),
            _pod("web-other", {"app": "web"}, namespace="other"),
        ]

        result = filter_pods(selector, "apps", pods)

        assert [p.metadata.name for p in result] == ["web-1"]

    def test_pods_without_metadata_skipped(self) -> None:
        selector = V1LabelSelector(match_labels={"app": "web"})
        assert filter_pods(selector, "apps", [V1Pod()]) == []
