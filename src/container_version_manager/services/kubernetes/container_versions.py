"""ContainerVersion resource manager.

Reads and writes ContainerVersion custom resources through the Kubernetes
``CustomObjectsApi``.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesValidationError,
)
from container_version_manager.integrations.kubernetes.models.container_version import (
    CV_GROUP,
    CV_KIND,
    CV_PLURAL,
    CV_VERSION,
    ContainerVersion,
)
from container_version_manager.services.kubernetes.base import K8sBaseManager


class ContainerVersionManager(K8sBaseManager):
    """Manager for ContainerVersion resources.

    Writes use the ``resourceVersion`` carried by the model, so a replace
    fails with ``KubernetesConflictError`` when the object changed since it
    was read. Transient connection failures are retried.
    """

    _entity_name = "container_version"

    def list_container_versions(
        self,
        namespace: str | None = None,
        *,
        label_selector: str | None = None,
    ) -> list[ContainerVersion]:
        """List ContainerVersions in a namespace.

        Args:
            namespace: Target namespace.
            label_selector: Filter by label selector.

        Returns:
            List of ContainerVersion models.
        """
        ns = self._resolve_namespace(namespace)
        self._log.debug("listing_container_versions", namespace=ns)
        kwargs: dict[str, Any] = {}
        if label_selector:
            kwargs["label_selector"] = label_selector

        result = self._call_with_retry(
            self._client.custom_objects.list_namespaced_custom_object,
            CV_GROUP,
            CV_VERSION,
            ns,
            CV_PLURAL,
            resource_type=CV_KIND,
            namespace=ns,
            **kwargs,
        )
        items: list[dict[str, Any]] = result.get("items", [])
        cvs = [self._to_model(item, ns) for item in items]
        self._log.debug("listed_container_versions", count=len(cvs), namespace=ns)
        return cvs

    def get_container_version(
        self,
        name: str,
        namespace: str | None = None,
        *,
        lenient: bool = False,
    ) -> ContainerVersion:
        """Get a single ContainerVersion by name.

        Args:
            name: ContainerVersion name.
            namespace: Target namespace.
            lenient: Read an unrecognized rollout status as unset instead of
                failing, so it can be overwritten.

        Returns:
            ContainerVersion model.

        Raises:
            KubernetesNotFoundError: If no such ContainerVersion exists.
            KubernetesValidationError: If the stored object cannot be parsed.
        """
        ns = self._resolve_namespace(namespace)
        self._log.debug("getting_container_version", name=name, namespace=ns)
        result = self._call_with_retry(
            self._client.custom_objects.get_namespaced_custom_object,
            CV_GROUP,
            CV_VERSION,
            ns,
            CV_PLURAL,
            name,
            resource_type=CV_KIND,
            resource_name=name,
            namespace=ns,
        )
        return self._to_model(result, ns, lenient=lenient)

    def replace_container_version(self, cv: ContainerVersion) -> ContainerVersion:
        """Replace a ContainerVersion, status included.

        Args:
            cv: The modified ContainerVersion, as previously read.

        Returns:
            The ContainerVersion as stored by the API server.

        Raises:
            KubernetesConflictError: If the stored object has moved on.
        """
        ns = self._resolve_namespace(cv.namespace)
        result = self._call_with_retry(
            self._client.custom_objects.replace_namespaced_custom_object,
            CV_GROUP,
            CV_VERSION,
            ns,
            CV_PLURAL,
            cv.name,
            cv.to_k8s_object(),
            resource_type=CV_KIND,
            resource_name=cv.name,
            namespace=ns,
        )
        self._log.info(
            "replaced_container_version",
            name=cv.name,
            namespace=ns,
            resource_version=result.get("metadata", {}).get("resourceVersion"),
        )
        return self._to_model(result, ns)

    def replace_container_version_status(self, cv: ContainerVersion) -> ContainerVersion:
        """Replace only the status of a ContainerVersion.

        Requires the CRD to enable the status subresource.

        Args:
            cv: The ContainerVersion with its new status.

        Returns:
            The ContainerVersion as stored by the API server.

        Raises:
            KubernetesConflictError: If the stored object has moved on.
        """
        ns = self._resolve_namespace(cv.namespace)
        result = self._call_with_retry(
            self._client.custom_objects.replace_namespaced_custom_object_status,
            CV_GROUP,
            CV_VERSION,
            ns,
            CV_PLURAL,
            cv.name,
            cv.to_k8s_object(),
            resource_type=CV_KIND,
            resource_name=cv.name,
            namespace=ns,
        )
        self._log.info("replaced_container_version_status", name=cv.name, namespace=ns)
        return self._to_model(result, ns)

    def _to_model(
        self, obj: dict[str, Any], namespace: str, *, lenient: bool = False
    ) -> ContainerVersion:
        """Parse a raw ContainerVersion, raising a KubernetesValidationError on bad data."""
        name = (obj.get("metadata") or {}).get("name")
        try:
            return ContainerVersion.from_k8s_object(obj)
        except ValueError as e:  # pydantic.ValidationError included
            if not lenient:
                raise self._invalid(name, namespace, e) from e
            self._log.warning(
                "discarding_invalid_rollout_status",
                name=name,
                namespace=namespace,
                status=obj.get("status"),
                error=str(e),
            )
        try:
            return ContainerVersion.from_k8s_object(obj, lenient=True)
        except ValueError as e:
            raise self._invalid(name, namespace, e) from e

    @staticmethod
    def _invalid(
        name: str | None, namespace: str, error: ValueError
    ) -> KubernetesValidationError:
        invalid = KubernetesValidationError(
            f"Invalid {CV_KIND} '{name}': {error}",
            validation_errors=_validation_errors(error),
            status_code=None,
        )
        invalid.resource_type = CV_KIND
        invalid.resource_name = name
        invalid.namespace = namespace
        return invalid


def _validation_errors(error: ValueError) -> dict[str, Any]:
    """Field-level messages of a pydantic error, or the plain message."""
    if isinstance(error, ValidationError):
        return {
            ".".join(str(part) for part in err["loc"]) or "status": err["msg"]
            for err in error.errors()
        }
    return {"status": str(error)}
