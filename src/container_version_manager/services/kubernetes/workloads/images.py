"""Container image reference helpers.

An image reference is ``repository:tag``. The version of a reference is
everything after the first ``:``; later colons belong to the version.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from container_version_manager.integrations.kubernetes.exceptions import (
    ContainerNotFoundError,
    InvalidImageReferenceError,
)

if TYPE_CHECKING:
    from kubernetes.client import V1Container, V1PodSpec

    from container_version_manager.integrations.kubernetes.models.container_version import (
        ContainerVersion,
    )
    from container_version_manager.integrations.kubernetes.models.kinds import WorkloadKind


def image_version(image: str) -> str:
    """Return the version part of an image reference.

    Raises:
        InvalidImageReferenceError: If the reference has no ``:``.
    """
    _, sep, version = image.partition(":")
    if not sep:
        raise InvalidImageReferenceError(image)
    return version


def image_repository(image: str) -> str:
    """Return the repository part of an image reference.

    Only a ``:`` after the last ``/`` starts a tag, so a registry port
    (``localhost:5000/web``) stays part of the repository. A digest is
    dropped along with the tag.
    """
    name = image.partition("@")[0]
    colon = name.rfind(":")
    if colon > name.rfind("/"):
        return name[:colon]
    return name


def find_container(pod_spec: V1PodSpec | None, name: str) -> V1Container | None:
    """Find a container by name in a pod spec."""
    if pod_spec is None:
        return None
    for container in pod_spec.containers or []:
        if container.name == name:
            return container
    return None


def set_container_version(
    pod_spec: V1PodSpec | None,
    cv: ContainerVersion,
    container: str,
    version: str,
    *,
    kind: WorkloadKind,
    name: str,
    namespace: str,
) -> str:
    """Point ``container`` in ``pod_spec`` at ``version`` in place.

    The repository comes from the ContainerVersion when it declares one,
    otherwise the container keeps its current repository.

    Returns:
        The new image reference.

    Raises:
        ContainerNotFoundError: If ``pod_spec`` has no such container.
    """
    target = find_container(pod_spec, container)
    if target is None:
        raise ContainerNotFoundError(
            container,
            resource_type=kind.value,
            resource_name=name,
            namespace=namespace,
        )
    repository = cv.spec.image_repo or image_repository(target.image or "")
    target.image = f"{repository}:{version}"
    return target.image
