"""Unit tests for K8sBaseManager."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from kubernetes.client.rest import ApiException
from tenacity import retry, retry_if_exception_type, stop_after_attempt
from urllib3.exceptions import ProtocolError

from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesConnectionError,
    KubernetesNotFoundError,
)
from container_version_manager.services.kubernetes.base import K8sBaseManager


class TestK8sBaseManager:
    """Tests for K8sBaseManager base class."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_init(self, mock_k8s_client: MagicMock) -> None:
        """Manager should initialize with client."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._client == mock_k8s_client
        assert manager._log is not None

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_resolve_namespace_with_explicit_namespace(self, mock_k8s_client: MagicMock) -> None:
        """Should return explicit namespace when provided."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._resolve_namespace("test-namespace") == "test-namespace"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_resolve_namespace_with_none(self, mock_k8s_client: MagicMock) -> None:
        """Should return default namespace when None provided."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._resolve_namespace(None) == "default"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_handle_api_error(self) -> None:
        """Should translate API exception through client and chain the cause."""
        mock_client = MagicMock()
        manager = K8sBaseManager(mock_client)
        test_exception = Exception("Test error")
        mock_client.translate_api_exception.return_value = RuntimeError("Translated error")

        with pytest.raises(RuntimeError, match="Translated error") as exc_info:
            manager._handle_api_error(
                test_exception,
                resource_type="Pod",
                resource_name="test-pod",
                namespace="test-ns",
            )

        assert exc_info.value.__cause__ is test_exception
        mock_client.translate_api_exception.assert_called_once_with(
            test_exception,
            resource_type="Pod",
            resource_name="test-pod",
            namespace="test-ns",
        )

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_entity_name_default(self, mock_k8s_client: MagicMock) -> None:
        """Base manager should have empty entity name."""
        manager = K8sBaseManager(mock_k8s_client)

        assert manager._entity_name == ""


class TestCallWithRetry:
    """Tests for K8sBaseManager._call_with_retry."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_passes_arguments_through(self, mock_k8s_client: MagicMock) -> None:
        """Should call the API method with its arguments and return the result."""
        manager = K8sBaseManager(mock_k8s_client)
        fn = MagicMock(return_value="ok")

        result = manager._call_with_retry(
            fn, "a", "b", resource_type="Pod", namespace="ns", label_selector="app=web"
        )

        assert result == "ok"
        fn.assert_called_once_with("a", "b", label_selector="app=web")

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_translates_errors(self, mock_k8s_client: MagicMock) -> None:
        """Should raise the translated error with the resource context."""
        manager = K8sBaseManager(mock_k8s_client)
        fn = MagicMock(side_effect=ApiException(status=404, reason="Not Found"))

        with pytest.raises(KubernetesNotFoundError) as exc_info:
            manager._call_with_retry(
                fn, resource_type="Pod", resource_name="web-0", namespace="apps"
            )

        assert exc_info.value.resource_name == "web-0"
        assert exc_info.value.namespace == "apps"

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_retries_connection_errors(self, mock_k8s_client: MagicMock) -> None:
        """Should retry calls that fail with a connection error."""
        mock_k8s_client.make_retry_decorator.return_value = retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(3),
            reraise=True,
        )
        manager = K8sBaseManager(mock_k8s_client)
        fn = MagicMock(side_effect=[ProtocolError("Connection aborted."), "ok"])

        assert manager._call_with_retry(fn) == "ok"
        assert fn.call_count == 2

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_does_not_retry_api_errors(self, mock_k8s_client: MagicMock) -> None:
        """Should not retry errors other than connection failures."""
        mock_k8s_client.make_retry_decorator.return_value = retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(3),
            reraise=True,
        )
        manager = K8sBaseManager(mock_k8s_client)
        fn = MagicMock(side_effect=ApiException(status=404, reason="Not Found"))

        with pytest.raises(KubernetesNotFoundError):
            manager._call_with_retry(fn)

        assert fn.call_count == 1
