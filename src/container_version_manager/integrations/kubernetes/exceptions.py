"""Kubernetes integration custom exceptions."""

from __future__ import annotations

from typing import Any


class KubernetesError(Exception):
    """Base exception for Kubernetes operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from Kubernetes API (if applicable).
        resource_type: Type of resource involved (e.g., "Pod", "ContainerVersion").
        resource_name: Name of the resource involved.
        namespace: Namespace of the resource (if applicable).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from Kubernetes API.
            resource_type: Type of resource involved.
            resource_name: Name of the resource involved.
            namespace: Namespace of the resource.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource_type and self.resource_name:
            loc = f"[{self.resource_type}/{self.resource_name}"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


class KubernetesConnectionError(KubernetesError):
    """Exception raised when connection to a Kubernetes cluster fails.

    This includes network errors, kubeconfig issues, and unreachable API servers.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize KubernetesConnectionError.

        Args:
            message: Human-readable error message.
            original_error: The original exception that caused this error.
        """
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAuthError(KubernetesError):
    """Exception raised when authentication or authorization fails (401/403)."""

    def __init__(
        self,
        message: str = "Kubernetes authentication/authorization failed",
        status_code: int | None = 401,
        reason: str | None = None,
    ) -> None:
        """Initialize KubernetesAuthError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code (usually 401 or 403).
            reason: Kubernetes API reason string.
        """
        super().__init__(message=message, status_code=status_code)
        self.reason = reason


class KubernetesNotFoundError(KubernetesError):
    """Exception raised when a requested Kubernetes resource is not found."""

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesNotFoundError.

        Args:
            message: Human-readable error message.
            resource_type: Type of resource (e.g., "Pod", "ContainerVersion").
            resource_name: Name of the resource.
            namespace: Namespace of the resource.
        """
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' not found"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=404,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesError):
    """Exception raised when a request or resource spec is invalid.

    Covers 400/422 responses from the API server as well as requests this
    package refuses to send (malformed image references, unknown containers).
    """

    def __init__(
        self,
        message: str = "Invalid resource specification",
        validation_errors: dict[str, Any] | None = None,
        status_code: int | None = 422,
    ) -> None:
        """Initialize KubernetesValidationError.

        Args:
            message: Human-readable error message.
            validation_errors: Specific field validation errors.
            status_code: HTTP status code (usually 400 or 422).
        """
        super().__init__(message=message, status_code=status_code)
        self.validation_errors = validation_errors or {}


class KubernetesConflictError(KubernetesError):
    """Exception raised when a write loses an optimistic-concurrency race (409).

    The object was modified by another client since it was read, so the
    submitted ``resourceVersion`` is stale.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesConflictError.

        Args:
            message: Human-readable error message.
            resource_type: Type of resource.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.
        """
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' was modified concurrently"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=409,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesTimeoutError(KubernetesError):
    """Exception raised when a Kubernetes API request exceeds its timeout."""

    def __init__(
        self,
        message: str = "Kubernetes operation timed out",
        timeout_seconds: int | None = None,
    ) -> None:
        """Initialize KubernetesTimeoutError.

        Args:
            message: Human-readable error message.
            timeout_seconds: The timeout value that was exceeded.
        """
        if timeout_seconds:
            message = f"{message} (after {timeout_seconds}s)"
        super().__init__(message=message)
        self.timeout_seconds = timeout_seconds


# =============================================================================
# Workload contract violations
# =============================================================================


class InvalidImageReferenceError(KubernetesValidationError):
    """Raised when a container image reference has no ``:`` tag delimiter."""

    def __init__(self, image: str) -> None:
        """Initialize InvalidImageReferenceError.

        Args:
            image: The offending image reference.
        """
        super().__init__(
            message=f"Image reference '{image}' has no tag delimiter ':'",
            validation_errors={"image": image},
            status_code=None,
        )
        self.image = image


class ContainerNotFoundError(KubernetesValidationError):
    """Raised when a workload does not run the requested container."""

    def __init__(
        self,
        container: str,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize ContainerNotFoundError.

        Args:
            container: Name of the container that was looked up.
            resource_type: Kind of the workload searched.
            resource_name: Name of the workload searched.
            namespace: Namespace of the workload.
        """
        super().__init__(
            message=f"Container '{container}' not found",
            validation_errors={"container": container},
            status_code=None,
        )
        self.container = container
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace


class UnsupportedWorkloadOperationError(KubernetesError):
    """Raised when a workload kind cannot perform the requested operation."""

    def __init__(
        self,
        operation: str,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize UnsupportedWorkloadOperationError.

        Args:
            operation: Name of the refused operation (e.g., "patch_num_replicas").
            resource_type: Kind of the workload.
            resource_name: Name of the workload.
            namespace: Namespace of the workload.
        """
        super().__init__(
            message=f"Operation '{operation}' is not supported",
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )
        self.operation = operation


class WorkloadListingError(KubernetesError):
    """Raised when listing one workload kind fails during discovery.

    Discovery is all-or-nothing, so this error means no workloads at all
    were returned for the ContainerVersion being resolved.

    Attributes:
        kind: Plural label of the kind whose listing failed (e.g., "jobs").
        cause: The translated error raised by the failing list call.
    """

    def __init__(self, kind: str, cause: KubernetesError, namespace: str | None = None) -> None:
        """Initialize WorkloadListingError.

        Args:
            kind: Plural label of the failing kind.
            cause: The underlying translated API error.
            namespace: Namespace that was being listed.
        """
        super().__init__(
            message=f"failed to get {kind}: {cause.message}",
            status_code=cause.status_code,
            namespace=namespace,
        )
        self.kind = kind
        self.cause = cause


class JobRecreateError(KubernetesError):
    """Raised when a Job was deleted for a new version but not created again.

    The Job no longer exists in the cluster. ``body`` holds the spec that
    failed to be created so it can be submitted again.

    Attributes:
        cause: The translated error raised by the create call.
        body: The Job object that was not created.
    """

    def __init__(
        self,
        name: str,
        cause: KubernetesError,
        body: Any = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize JobRecreateError.

        Args:
            name: Name of the deleted Job.
            cause: The underlying translated API error.
            body: The Job object that was not created.
            namespace: Namespace of the Job.
        """
        super().__init__(
            message=f"Job '{name}' was deleted but not recreated: {cause.message}",
            status_code=cause.status_code,
            resource_type="Job",
            resource_name=name,
            namespace=namespace,
        )
        self.cause = cause
        self.body = body
