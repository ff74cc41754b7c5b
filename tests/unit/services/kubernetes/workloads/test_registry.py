"""Unit tests for the workload kind registry."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind
from container_version_manager.services.kubernetes.workloads import (
    WORKLOAD_KINDS,
    Deployment,
    Workload,
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestWorkloadKinds:
    """Tests for WORKLOAD_KINDS."""

    def test_reporting_order(self) -> None:
        """Kinds are listed in their fixed reporting order."""
        assert [binding.kind for binding in WORKLOAD_KINDS] == list(WorkloadKind)

    def test_adapters_match_kinds(self) -> None:
        """Each binding wraps objects in the adapter of its kind."""
        for binding in WORKLOAD_KINDS:
            workload = binding.adapter(MagicMock(), "apps", MagicMock())
            assert workload.kind is binding.kind
            assert isinstance(workload, Workload)

    def test_list_workloads(self) -> None:
        """Listing wraps every returned object and forwards the list options."""
        client = MagicMock()
        items = [MagicMock(), MagicMock()]
        client.apps_v1.list_namespaced_deployment.return_value = MagicMock(items=items)
        binding = WORKLOAD_KINDS[0]

        workloads = binding.list_workloads(client, "apps", label_selector="app=web")

        assert len(workloads) == 2
        assert all(isinstance(w, Deployment) for w in workloads)
        assert all(w.namespace == "apps" for w in workloads)
        client.apps_v1.list_namespaced_deployment.assert_called_once_with(
            namespace="apps", label_selector="app=web"
        )
