"""Unit tests for ContainerVersion event recorders."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.rest import ApiException

from container_version_manager.integrations.kubernetes.models.container_version import (
    ContainerVersion,
)
from container_version_manager.services.kubernetes.events import (
    EVENT_NORMAL,
    EVENT_WARNING,
    REASON_SYNC_FAILED,
    KubernetesEventRecorder,
    LoggingEventRecorder,
)

EVENTS_LOGGER = "container_version_manager.services.kubernetes.events.logger"


class TestLoggingEventRecorder:
    """Tests for LoggingEventRecorder."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_warning_logged_at_warning(self, make_cv: Callable[..., ContainerVersion]) -> None:
        """Warning events should be logged as warnings."""
        with patch(EVENTS_LOGGER) as mock_logger:
            LoggingEventRecorder().event(
                make_cv(), EVENT_WARNING, REASON_SYNC_FAILED, "Failed to get jobs"
            )

        mock_logger.warning.assert_called_once_with(
            "container_version_event",
            container_version="web-cv",
            namespace="default",
            type=EVENT_WARNING,
            reason=REASON_SYNC_FAILED,
            message="Failed to get jobs",
        )
        mock_logger.info.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_normal_logged_at_info(self, make_cv: Callable[..., ContainerVersion]) -> None:
        """Normal events should be logged at info level."""
        with patch(EVENTS_LOGGER) as mock_logger:
            LoggingEventRecorder().event(make_cv(), EVENT_NORMAL, "Synced", "ok")

        mock_logger.info.assert_called_once()
        mock_logger.warning.assert_not_called()


class TestKubernetesEventRecorder:
    """Tests for KubernetesEventRecorder."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_creates_event_for_container_version(
        self, mock_k8s_client: MagicMock, make_cv: Callable[..., ContainerVersion]
    ) -> None:
        """Should create a core/v1 Event referencing the ContainerVersion."""
        recorder = KubernetesEventRecorder(mock_k8s_client)

        recorder.event(
            make_cv(namespace="apps"), EVENT_WARNING, REASON_SYNC_FAILED, "Failed to get pods"
        )

        call = mock_k8s_client.core_v1.create_namespaced_event.call_args
        assert call.kwargs["namespace"] == "apps"
        body = call.kwargs["body"]
        assert body["metadata"] == {"generateName": "web-cv.", "namespace": "apps"}
        assert body["involvedObject"] == {
            "apiVersion": "custom.k8s.io/v1",
            "kind": "ContainerVersion",
            "name": "web-cv",
            "namespace": "apps",
            "uid": "uid-web-cv",
        }
        assert body["type"] == "Warning"
        assert body["reason"] == "CRSyncFailed"
        assert body["message"] == "Failed to get pods"
        assert body["source"] == {"component": "container-version-manager"}
        assert body["firstTimestamp"] == body["lastTimestamp"]
        assert body["firstTimestamp"].endswith("Z")

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_custom_component(
        self, mock_k8s_client: MagicMock, make_cv: Callable[..., ContainerVersion]
    ) -> None:
        """Should report the configured source component."""
        recorder = KubernetesEventRecorder(mock_k8s_client, component="cvm-controller")

        recorder.event(make_cv(), EVENT_NORMAL, "Synced", "ok")

        body = mock_k8s_client.core_v1.create_namespaced_event.call_args.kwargs["body"]
        assert body["source"] == {"component": "cvm-controller"}

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_api_failure_is_not_raised(
        self, mock_k8s_client: MagicMock, make_cv: Callable[..., ContainerVersion]
    ) -> None:
        """A failed event write should be logged, never raised."""
        mock_k8s_client.core_v1.create_namespaced_event.side_effect = ApiException(
            status=403, reason="Forbidden"
        )
        recorder = KubernetesEventRecorder(mock_k8s_client)

        with patch(EVENTS_LOGGER) as mock_logger:
            recorder.event(make_cv(), EVENT_WARNING, REASON_SYNC_FAILED, "Failed to get jobs")

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args == ("event_recording_failed",)
