"""Kubernetes integration - API client, configuration and models."""

from container_version_manager.integrations.kubernetes.client import KubernetesClient
from container_version_manager.integrations.kubernetes.config import (
    ClusterConfig,
    ControllerConfig,
    KubernetesDefaultsConfig,
    ProviderOptions,
)
from container_version_manager.integrations.kubernetes.exceptions import (
    ContainerNotFoundError,
    InvalidImageReferenceError,
    JobRecreateError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
    UnsupportedWorkloadOperationError,
    WorkloadListingError,
)

__all__ = [
    "ClusterConfig",
    "ContainerNotFoundError",
    "ControllerConfig",
    "InvalidImageReferenceError",
    "JobRecreateError",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesDefaultsConfig",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesTimeoutError",
    "KubernetesValidationError",
    "ProviderOptions",
    "UnsupportedWorkloadOperationError",
    "WorkloadListingError",
]
