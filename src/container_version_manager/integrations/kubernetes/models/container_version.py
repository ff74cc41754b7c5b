"""ContainerVersion custom resource models.

ContainerVersion objects are accessed via ``CustomObjectsApi`` which returns
raw ``dict`` objects rather than typed SDK classes. ``from_k8s_object``
therefore reads camelCase keys with ``dict.get()``, and the raw object is
kept so writes preserve fields these models do not describe.
"""

from __future__ import annotations

import copy
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from container_version_manager.integrations.kubernetes.models.base import (
    K8sEntityBase,
    _format_timestamp,
    _parse_timestamp,
)

# ContainerVersion CRD coordinates
CV_GROUP = "custom.k8s.io"
CV_VERSION = "v1"
CV_PLURAL = "containerversions"
CV_KIND = "ContainerVersion"


class RolloutStatus(str, Enum):
    """Rollout outcome persisted on a ContainerVersion.

    The values are compared verbatim by downstream consumers.
    """

    FAILED = "Failed"
    SUCCESS = "Success"
    PROGRESSING = "Progressing"


_ROLLOUT_STATUS_VALUES = frozenset(status.value for status in RolloutStatus)


class ContainerSpec(BaseModel):
    """The container a ContainerVersion rolls out."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""


class ContainerVersionSpec(BaseModel):
    """Desired image and the workloads it applies to."""

    model_config = ConfigDict(extra="ignore")

    image_repo: str = Field(default="", description="Image repository without tag")
    tag: str = Field(default="", description="Tag to track")
    poll_interval_seconds: int | None = Field(default=None, description="Registry poll interval")
    liveness_seconds: int | None = Field(default=None, description="Liveness check period")
    selector: dict[str, str] = Field(default_factory=dict, description="Workload label selector")
    container: ContainerSpec = Field(default_factory=ContainerSpec)

    @classmethod
    def from_k8s_object(cls, spec: dict[str, Any]) -> ContainerVersionSpec:
        """Create from the ``spec`` dict of a ContainerVersion."""
        container: dict[str, Any] = spec.get("container") or {}
        return cls(
            image_repo=spec.get("imageRepo", ""),
            tag=spec.get("tag", ""),
            poll_interval_seconds=spec.get("pollIntervalSeconds"),
            liveness_seconds=spec.get("livenessSeconds"),
            selector=spec.get("selector") or {},
            container=ContainerSpec(name=container.get("name", "")),
        )


class ContainerVersionStatus(BaseModel):
    """Last recorded rollout outcome.

    ``curr_status`` is ``None`` until a rollout status has been recorded;
    see ``is_unknown``.
    """

    model_config = ConfigDict(extra="ignore")

    curr_version: str = ""
    curr_status: RolloutStatus | None = None
    curr_status_time: datetime | None = None
    success_version: str = ""

    @field_validator("curr_status", mode="before")
    @classmethod
    def validate_curr_status(cls, v: Any) -> Any:
        """Map the empty value the API returns for unset status to None."""
        if v == "":
            return None
        return v

    @property
    def is_unknown(self) -> bool:
        """Whether no rollout status has been recorded yet."""
        return self.curr_status is None

    def record(self, version: str, status: RolloutStatus, tm: datetime) -> ContainerVersionStatus:
        """Return a copy with a new rollout outcome applied.

        The success version only moves forward on ``Success``; failed or
        in-progress rollouts keep the last known good version.
        """
        update: dict[str, Any] = {
            "curr_version": version,
            "curr_status": status,
            "curr_status_time": tm,
        }
        if status is RolloutStatus.SUCCESS:
            update["success_version"] = version
        return self.model_copy(update=update)

    @classmethod
    def from_k8s_object(
        cls, status: dict[str, Any], *, lenient: bool = False
    ) -> ContainerVersionStatus:
        """Create from the ``status`` dict of a ContainerVersion.

        With ``lenient`` an unrecognized ``currStatus`` or an unparseable
        ``currStatusTime`` reads as unset instead of raising, so the record
        can still be overwritten.
        """
        curr_status = status.get("currStatus")
        raw_time = status.get("currStatusTime")
        if not lenient:
            curr_time = _parse_timestamp(raw_time)
        else:
            if curr_status not in _ROLLOUT_STATUS_VALUES:
                curr_status = None
            try:
                curr_time = _parse_timestamp(raw_time)
            except ValueError:
                curr_time = None
        return cls(
            curr_version=status.get("currVersion", ""),
            curr_status=curr_status,
            curr_status_time=curr_time,
            success_version=status.get("successVersion", ""),
        )

    def to_k8s_object(self) -> dict[str, Any]:
        """Serialize to the camelCase ``status`` dict."""
        result: dict[str, Any] = {
            "currVersion": self.curr_version,
            "successVersion": self.success_version,
        }
        if self.curr_status is not None:
            result["currStatus"] = self.curr_status.value
        if self.curr_status_time is not None:
            result["currStatusTime"] = _format_timestamp(self.curr_status_time)
        return result


class ContainerVersion(K8sEntityBase):
    """ContainerVersion custom resource."""

    resource_version: str | None = Field(default=None, description="Optimistic lock token")
    spec: ContainerVersionSpec = Field(default_factory=ContainerVersionSpec)
    status: ContainerVersionStatus = Field(default_factory=ContainerVersionStatus)
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any], *, lenient: bool = False) -> ContainerVersion:
        """Create from a ContainerVersion CRD dict.

        ``lenient`` is passed on to the status parser.
        """
        metadata: dict[str, Any] = obj.get("metadata", {})
        status: dict[str, Any] = obj.get("status") or {}
        return cls(
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace"),
            uid=metadata.get("uid"),
            labels=metadata.get("labels") or None,
            resource_version=metadata.get("resourceVersion"),
            spec=ContainerVersionSpec.from_k8s_object(obj.get("spec") or {}),
            status=ContainerVersionStatus.from_k8s_object(status, lenient=lenient),
            raw=obj,
        )

    def to_k8s_object(self) -> dict[str, Any]:
        """Serialize for a replace call, keeping unknown fields of the raw object."""
        body = copy.deepcopy(self.raw)
        body.setdefault("apiVersion", f"{CV_GROUP}/{CV_VERSION}")
        body.setdefault("kind", CV_KIND)
        metadata = body.setdefault("metadata", {})
        metadata["name"] = self.name
        if self.namespace:
            metadata["namespace"] = self.namespace
        if self.resource_version:
            metadata["resourceVersion"] = self.resource_version
        status = dict(body.get("status") or {})
        status.update(self.status.to_k8s_object())
        body["status"] = status
        return body
