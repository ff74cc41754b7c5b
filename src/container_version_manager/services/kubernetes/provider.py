"""Workload provider.

Resolves the workloads a ContainerVersion governs within one namespace and
records rollout outcomes back onto the ContainerVersion. The provider holds
no cluster state of its own; every call reads from the API server.
"""

from __future__ import annotations

from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import TYPE_CHECKING, Any

from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt

from container_version_manager.integrations.kubernetes.config import ProviderOptions
from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesConflictError,
    KubernetesError,
    WorkloadListingError,
)
from container_version_manager.integrations.kubernetes.models.container_version import (
    ContainerVersion,
    RolloutStatus,
)
from container_version_manager.services.kubernetes.base import K8sBaseManager
from container_version_manager.services.kubernetes.events import (
    EVENT_WARNING,
    REASON_SYNC_FAILED,
    EventRecorder,
    LoggingEventRecorder,
)
from container_version_manager.services.kubernetes.workloads.registry import (
    WORKLOAD_KINDS,
    KindBinding,
)
from container_version_manager.services.kubernetes.workloads.selectors import selector_string

if TYPE_CHECKING:
    from container_version_manager.integrations.kubernetes.client import KubernetesClient
    from container_version_manager.integrations.kubernetes.models.resource import Resource
    from container_version_manager.services.kubernetes.container_versions import (
        ContainerVersionManager,
    )
    from container_version_manager.services.kubernetes.workloads.contract import Workload


class WorkloadProvider(K8sBaseManager):
    """Provider of the workloads managed by ContainerVersions in a namespace.

    Workloads are matched by the ContainerVersion's label selector across
    every supported kind and reported in a fixed kind order: Deployments,
    CronJobs, DaemonSets, Jobs, Pods, ReplicaSets, StatefulSets. Discovery
    is all-or-nothing: if any kind cannot be listed, no workloads are
    returned.

    A provider may be shared between threads.

    Example:
        ```python
        client = KubernetesClient(ControllerConfig.from_env())
        provider = WorkloadProvider(client, ContainerVersionManager(client), "apps")
        for resource in provider.all_resources():
            print(resource.name, resource.version)
        ```
    """

    _entity_name = "workload_provider"

    def __init__(
        self,
        client: KubernetesClient,
        cv_client: ContainerVersionManager,
        namespace: str,
        options: ProviderOptions | None = None,
        recorder: EventRecorder | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            client: Kubernetes API client instance.
            cv_client: Manager used to read and write ContainerVersions.
            namespace: Namespace the provider operates within.
            options: Provider tunables; defaults apply when omitted.
            recorder: Sink for failure events; defaults to the log.
        """
        super().__init__(client)
        self._cv_client = cv_client
        self._namespace = namespace
        self._options = options or ProviderOptions()
        self._recorder = recorder or LoggingEventRecorder()

    @property
    def namespace(self) -> str:
        """Namespace this provider operates within."""
        return self._namespace

    @property
    def client(self) -> KubernetesClient:
        """Kubernetes client, for working with the API directly."""
        return self._client

    @property
    def options(self) -> ProviderOptions:
        return self._options

    @property
    def recorder(self) -> EventRecorder:
        """Sink that failure events are reported to."""
        return self._recorder

    # =========================================================================
    # ContainerVersion Operations
    # =========================================================================

    def cv(self, name: str) -> ContainerVersion:
        """Get the ContainerVersion with the given name.

        Raises:
            KubernetesNotFoundError: If no such ContainerVersion exists.
        """
        return self._cv_client.get_container_version(name, self._namespace)

    def update_rollout_status(
        self,
        name: str,
        version: str,
        status: RolloutStatus | str,
        tm: datetime,
    ) -> ContainerVersion:
        """Record a rollout outcome on a ContainerVersion.

        Sets the current version, status and status time. The success version
        is only updated when ``status`` is ``Success``. A write that loses a
        race with another client is re-applied on a fresh read, up to
        ``options.status_update_retries`` attempts.

        ``tm`` is stored with whole-second precision, like any Kubernetes
        timestamp; microseconds are dropped before writing so the returned
        model matches the stored object. A stored status this package does
        not recognize is logged and overwritten.

        Args:
            name: ContainerVersion name.
            version: Version that was rolled out.
            status: Outcome of the rollout.
            tm: Time the outcome was observed.

        Returns:
            The updated ContainerVersion.

        Raises:
            ValueError: If ``status`` is not a rollout status.
            KubernetesNotFoundError: If no such ContainerVersion exists.
            KubernetesConflictError: If every attempt lost a write race.
        """
        rollout_status = RolloutStatus(status)
        tm = tm.replace(microsecond=0)
        log = self._log.bind(name=name, namespace=self._namespace)
        log.debug("updating_rollout_status", version=version, status=rollout_status.value)

        def _log_conflict(retry_state: RetryCallState) -> None:
            log.warning("rollout_status_conflict", attempt=retry_state.attempt_number)

        @retry(
            retry=retry_if_exception_type(KubernetesConflictError),
            stop=stop_after_attempt(self._options.status_update_retries),
            before_sleep=_log_conflict,
            reraise=True,
        )
        def _update() -> ContainerVersion:
            cv = self._cv_client.get_container_version(name, self._namespace, lenient=True)
            cv = cv.model_copy(
                update={"status": cv.status.record(version, rollout_status, tm)}
            )
            if self._options.use_status_subresource:
                return self._cv_client.replace_container_version_status(cv)
            return self._cv_client.replace_container_version(cv)

        result = _update()
        log.info(
            "updated_rollout_status",
            version=version,
            status=rollout_status.value,
            success_version=result.status.success_version,
        )
        return result

    # =========================================================================
    # Resource Reporting
    # =========================================================================

    def all_resources(self) -> list[Resource]:
        """Resources managed by every ContainerVersion in the namespace.

        Workloads matched by more than one ContainerVersion are reported once
        per ContainerVersion.
        """
        cvs = self._cv_client.list_container_versions(self._namespace)
        resources: list[Resource] = []
        for cv in cvs:
            resources.extend(self.cv_resources(cv))
        self._warn_overlaps(resources)
        return resources

    def cv_resources(self, cv: ContainerVersion) -> list[Resource]:
        """Resources managed by ``cv``.

        Workloads that do not run the governed container are left out.
        """
        return [
            resource
            for workload in self.workloads(cv)
            if (resource := workload.as_resource(cv)) is not None
        ]

    # =========================================================================
    # Workload Discovery
    # =========================================================================

    def workloads(self, cv: ContainerVersion) -> list[Workload]:
        """Workloads matching the selector of ``cv``.

        An empty selector matches every workload in the namespace.

        Raises:
            WorkloadListingError: If any kind could not be listed.
        """
        list_kwargs: dict[str, Any] = {"label_selector": selector_string(cv.spec.selector)}
        if self._options.request_timeout is not None:
            list_kwargs["_request_timeout"] = self._options.request_timeout

        self._log.debug(
            "listing_workloads",
            cv=cv.name,
            namespace=self._namespace,
            selector=list_kwargs["label_selector"],
        )
        if self._options.listing_workers > 1:
            batches = self._list_parallel(cv, list_kwargs)
        else:
            batches = [self._list_kind(binding, cv, list_kwargs) for binding in WORKLOAD_KINDS]

        result = [workload for batch in batches for workload in batch]
        self._log.debug("listed_workloads", cv=cv.name, count=len(result))
        return result

    def _list_parallel(
        self, cv: ContainerVersion, list_kwargs: dict[str, Any]
    ) -> list[list[Workload]]:
        """List every kind on a thread pool, keeping the kind order."""
        with ThreadPoolExecutor(
            max_workers=self._options.listing_workers,
            thread_name_prefix="cvm-list",
        ) as pool:
            futures = [
                pool.submit(self._list_kind, binding, cv, list_kwargs)
                for binding in WORKLOAD_KINDS
            ]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise
            return [future.result() for future in futures]

    def _list_kind(
        self,
        binding: KindBinding,
        cv: ContainerVersion,
        list_kwargs: dict[str, Any],
    ) -> list[Workload]:
        try:
            return self._call_with_retry(
                binding.list_workloads,
                self._client,
                self._namespace,
                resource_type=binding.kind.value,
                namespace=self._namespace,
                **list_kwargs,
            )
        except KubernetesError as e:
            self._recorder.event(
                cv, EVENT_WARNING, REASON_SYNC_FAILED, f"Failed to get {binding.kind.plural}"
            )
            raise WorkloadListingError(binding.kind.plural, e, namespace=self._namespace) from e

    def _warn_overlaps(self, resources: list[Resource]) -> None:
        owners: dict[tuple[str, str], list[str]] = defaultdict(list)
        for resource in resources:
            owners[(resource.type.value, resource.name)].append(resource.cv)
        for (kind, name), cvs in owners.items():
            if len(cvs) > 1:
                self._log.warning(
                    "overlapping_container_versions",
                    kind=kind,
                    name=name,
                    namespace=self._namespace,
                    cvs=sorted(cvs),
                )
