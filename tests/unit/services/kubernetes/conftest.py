"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes.client import (
    V1Container,
    V1ObjectMeta,
    V1PodSpec,
    V1PodTemplateSpec,
)

from container_version_manager.integrations.kubernetes.client import KubernetesClient
from container_version_manager.integrations.kubernetes.models.container_version import (
    ContainerSpec,
    ContainerVersion,
    ContainerVersionSpec,
)


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client with API sub-mocks.

    Error translation is the real one and the retry decorator is a
    pass-through, so managers see translated errors on the first attempt.
    """
    mock_client = MagicMock()
    mock_client.default_namespace = "default"
    mock_client.translate_api_exception = KubernetesClient.translate_api_exception
    mock_client.make_retry_decorator.return_value = lambda fn: fn
    return mock_client


@pytest.fixture
def make_cv() -> Callable[..., ContainerVersion]:
    """Factory for ContainerVersion models."""

    def _make(
        name: str = "web-cv",
        namespace: str = "default",
        selector: dict[str, str] | None = None,
        container: str = "app",
        image_repo: str = "registry.example.com/web",
        tag: str = "stable",
    ) -> ContainerVersion:
        return ContainerVersion(
            name=name,
            namespace=namespace,
            uid=f"uid-{name}",
            resource_version="1",
            spec=ContainerVersionSpec(
                image_repo=image_repo,
                tag=tag,
                selector={"app": "web"} if selector is None else selector,
                container=ContainerSpec(name=container),
            ),
        )

    return _make


@pytest.fixture
def make_template() -> Callable[..., V1PodTemplateSpec]:
    """Factory for pod templates running one or more containers."""

    def _make(
        containers: dict[str, str] | None = None,
        labels: dict[str, str] | None = None,
    ) -> V1PodTemplateSpec:
        containers = containers or {"app": "registry.example.com/web:1.0.0"}
        return V1PodTemplateSpec(
            metadata=V1ObjectMeta(labels=labels or {"app": "web"}),
            spec=V1PodSpec(
                containers=[
                    V1Container(name=name, image=image) for name, image in containers.items()
                ]
            ),
        )

    return _make


@pytest.fixture
def make_metadata() -> Callable[..., V1ObjectMeta]:
    """Factory for workload metadata."""

    def _make(
        name: str = "web",
        namespace: str = "default",
        annotations: dict[str, str] | None = None,
        generation: int | None = 1,
        **kwargs: Any,
    ) -> V1ObjectMeta:
        return V1ObjectMeta(
            name=name,
            namespace=namespace,
            annotations=annotations,
            generation=generation,
            labels={"app": "web"},
            **kwargs,
        )

    return _make
