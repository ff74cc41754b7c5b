"""Controller configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# Number of workload kinds queried during discovery; more workers than
# this would sit idle.
MAX_LISTING_WORKERS = 7


class ClusterConfig(BaseModel):
    """Connection settings for the cluster the controller operates on."""

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str = "~/.kube/config"
    namespace: str = "default"
    timeout: int = 300

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())


class KubernetesDefaultsConfig(BaseModel):
    """Default settings for Kubernetes API access."""

    model_config = ConfigDict(extra="forbid")

    timeout: int = 300
    retry_attempts: int = 3

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is non-negative."""
        if v < 0:
            raise ValueError("retry_attempts must be non-negative")
        return v


class ProviderOptions(BaseModel):
    """Tunables for a WorkloadProvider.

    Attributes:
        listing_workers: Threads used to list the workload kinds. 1 lists
            them sequentially.
        status_update_retries: Attempts made by a rollout status update
            when it loses a write race to another client.
        use_status_subresource: Write rollout status through the
            ``/status`` subresource instead of replacing the whole object.
        request_timeout: Per-request timeout in seconds passed to list calls.
        record_events: Report failures as Kubernetes Events on the
            ContainerVersion in addition to the log.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    listing_workers: int = 1
    status_update_retries: int = 3
    use_status_subresource: bool = False
    request_timeout: int | None = None
    record_events: bool = False

    @field_validator("listing_workers")
    @classmethod
    def validate_listing_workers(cls, v: int) -> int:
        """Validate listing_workers is between 1 and the number of kinds."""
        if not 1 <= v <= MAX_LISTING_WORKERS:
            raise ValueError(f"listing_workers must be between 1 and {MAX_LISTING_WORKERS}")
        return v

    @field_validator("status_update_retries")
    @classmethod
    def validate_status_update_retries(cls, v: int) -> int:
        """Validate at least one attempt is made."""
        if v < 1:
            raise ValueError("status_update_retries must be at least 1")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_request_timeout(cls, v: int | None) -> int | None:
        """Validate request_timeout is positive when set."""
        if v is not None and v <= 0:
            raise ValueError("request_timeout must be positive")
        return v


class ControllerConfig(BaseModel):
    """Complete controller configuration."""

    model_config = ConfigDict(extra="forbid")

    cluster: ClusterConfig = ClusterConfig()
    defaults: KubernetesDefaultsConfig = KubernetesDefaultsConfig()
    provider: ProviderOptions = ProviderOptions()

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> ControllerConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            CVM_K8S_CONTEXT: Kubeconfig context to use
            CVM_K8S_KUBECONFIG: Kubeconfig path
            CVM_K8S_NAMESPACE: Namespace the controller operates in
            CVM_K8S_TIMEOUT: Default timeout in seconds
            CVM_LISTING_WORKERS: Threads used for workload discovery
            CVM_STATUS_UPDATE_RETRIES: Attempts for conflicting status writes
            CVM_USE_STATUS_SUBRESOURCE: Write status via the /status subresource
            CVM_RECORD_EVENTS: Report failures as Kubernetes Events
        """
        config_dict = base_config.copy() if base_config else {}
        cluster = dict(config_dict.get("cluster", {}))
        defaults = dict(config_dict.get("defaults", {}))
        provider = dict(config_dict.get("provider", {}))

        if context := os.environ.get("CVM_K8S_CONTEXT"):
            cluster["context"] = context

        if kubeconfig := os.environ.get("CVM_K8S_KUBECONFIG"):
            cluster["kubeconfig"] = kubeconfig

        if namespace := os.environ.get("CVM_K8S_NAMESPACE"):
            cluster["namespace"] = namespace

        if timeout := os.environ.get("CVM_K8S_TIMEOUT"):
            defaults["timeout"] = int(timeout)

        if workers := os.environ.get("CVM_LISTING_WORKERS"):
            provider["listing_workers"] = int(workers)

        if retries := os.environ.get("CVM_STATUS_UPDATE_RETRIES"):
            provider["status_update_retries"] = int(retries)

        if use_status := os.environ.get("CVM_USE_STATUS_SUBRESOURCE"):
            provider["use_status_subresource"] = use_status.lower() in {"1", "true", "yes"}

        if record_events := os.environ.get("CVM_RECORD_EVENTS"):
            provider["record_events"] = record_events.lower() in {"1", "true", "yes"}

        config_dict["cluster"] = cluster
        config_dict["defaults"] = defaults
        config_dict["provider"] = provider
        return cls.model_validate(config_dict)

    def get_active_context(self) -> str | None:
        """Get the kubeconfig context name, or None to use the current one."""
        return self.cluster.context or None

    def get_active_namespace(self) -> str:
        """Get the namespace the controller operates in."""
        return self.cluster.namespace

    def get_active_timeout(self) -> int:
        """Get the cluster timeout, falling back to the default timeout."""
        if "timeout" in self.cluster.model_fields_set:
            return self.cluster.timeout
        return self.defaults.timeout
