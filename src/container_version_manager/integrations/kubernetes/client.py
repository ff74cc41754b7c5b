"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with kubeconfig/in-cluster
loading, lazy API group initialization, retry logic, and consistent error
translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import (
        AppsV1Api,
        BatchV1Api,
        CoreV1Api,
        CustomObjectsApi,
    )

    from container_version_manager.integrations.kubernetes.config import ControllerConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Kubernetes API client.

    Wraps the official kubernetes Python client with:
    - Kubeconfig loading with in-cluster fallback
    - Lazy API group initialization
    - Automatic retry with tenacity for transient errors
    - Consistent error translation to custom exceptions
    - Context manager support

    Example:
        ```python
        from container_version_manager.integrations.kubernetes import KubernetesClient
        from container_version_manager.integrations.kubernetes.config import ControllerConfig

        config = ControllerConfig.from_env()
        with KubernetesClient(config) as client:
            pods = client.core_v1.list_namespaced_pod(namespace=client.default_namespace)
        ```
    """

    def __init__(self, controller_config: ControllerConfig) -> None:
        """Initialize Kubernetes client from controller config.

        Args:
            controller_config: Complete controller configuration.
        """
        self._config = controller_config
        self._retries = controller_config.defaults.retry_attempts
        self._current_context: str | None = None

        # Lazy-loaded API group instances
        self._core_v1: CoreV1Api | None = None
        self._apps_v1: AppsV1Api | None = None
        self._batch_v1: BatchV1Api | None = None
        self._custom_objects: CustomObjectsApi | None = None

        self._load_config()

        logger.info(
            "Kubernetes client initialized",
            context=self._current_context,
            default_namespace=controller_config.get_active_namespace(),
        )

    def _load_config(self) -> None:
        """Load Kubernetes configuration from kubeconfig or in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        active_context = self._config.get_active_context()
        kubeconfig_path = self._config.cluster.kubeconfig

        try:
            config.load_kube_config(
                config_file=kubeconfig_path,
                context=active_context,
            )
            self._current_context = active_context
            logger.debug(
                "loaded_kubeconfig",
                context=active_context,
                kubeconfig=kubeconfig_path,
            )
        except ConfigException:
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=e,
                ) from e

        self._invalidate_api_cache()

    def _invalidate_api_cache(self) -> None:
        """Clear cached API group instances."""
        self._core_v1 = None
        self._apps_v1 = None
        self._batch_v1 = None
        self._custom_objects = None

    # =========================================================================
    # Lazy API Group Accessors
    # =========================================================================

    @property
    def core_v1(self) -> CoreV1Api:
        """Get CoreV1Api instance (pods, events)."""
        if self._core_v1 is None:
            from kubernetes.client import CoreV1Api

            self._core_v1 = CoreV1Api()
        return self._core_v1

    @property
    def apps_v1(self) -> AppsV1Api:
        """Get AppsV1Api instance (deployments, statefulsets, daemonsets, replicasets)."""
        if self._apps_v1 is None:
            from kubernetes.client import AppsV1Api

            self._apps_v1 = AppsV1Api()
        return self._apps_v1

    @property
    def batch_v1(self) -> BatchV1Api:
        """Get BatchV1Api instance (jobs, cronjobs)."""
        if self._batch_v1 is None:
            from kubernetes.client import BatchV1Api

            self._batch_v1 = BatchV1Api()
        return self._batch_v1

    @property
    def custom_objects(self) -> CustomObjectsApi:
        """Get CustomObjectsApi instance (ContainerVersion resources)."""
        if self._custom_objects is None:
            from kubernetes.client import CustomObjectsApi

            self._custom_objects = CustomObjectsApi()
        return self._custom_objects

    def get_current_context(self) -> str:
        """Get the current active context name.

        Returns:
            The current context name, or 'in-cluster' if running inside a pod.
        """
        return self._current_context or "unknown"

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes or transport exception to a custom exception.

        Args:
            e: The original exception (typically ApiException).
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError, MaxRetryError
        from urllib3.exceptions import TimeoutError as Urllib3TimeoutError

        if isinstance(e, KubernetesError):
            return e

        if isinstance(e, MaxRetryError) and isinstance(e.reason, Urllib3TimeoutError):
            e = e.reason

        if isinstance(e, Urllib3TimeoutError):
            return KubernetesTimeoutError(message=f"Request timed out: {e}")

        if isinstance(e, HTTPError):
            return KubernetesConnectionError(
                message="Kubernetes API server unreachable",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 409:
            return KubernetesConflictError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Retry Decorator
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(max(self._retries, 1)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def default_namespace(self) -> str:
        """Get the default namespace from config."""
        return self._config.get_active_namespace()

    @property
    def timeout(self) -> int:
        """Get the configured timeout."""
        return self._config.get_active_timeout()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        self._invalidate_api_cache()
        logger.debug("Kubernetes client closed")

    def __enter__(self) -> KubernetesClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
