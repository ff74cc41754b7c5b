"""Main CLI entry point using Typer."""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Any

import typer

from container_version_manager import __version__
from container_version_manager.cli.base import (
    NamespaceOption,
    OutputOption,
    console,
    handle_k8s_error,
)
from container_version_manager.cli.formatters import OutputFormat, get_formatter
from container_version_manager.integrations.kubernetes.client import KubernetesClient
from container_version_manager.integrations.kubernetes.config import ControllerConfig
from container_version_manager.integrations.kubernetes.exceptions import KubernetesError
from container_version_manager.integrations.kubernetes.models.container_version import (
    ContainerVersion,
    RolloutStatus,
)
from container_version_manager.logging.config import configure_logging
from container_version_manager.services.kubernetes.container_versions import (
    ContainerVersionManager,
)
from container_version_manager.services.kubernetes.events import KubernetesEventRecorder
from container_version_manager.services.kubernetes.provider import WorkloadProvider
from container_version_manager.services.kubernetes.workloads.contract import (
    is_template_workload,
)

app = typer.Typer(
    name="cvm",
    help="Roll container image versions out across Kubernetes workloads.",
    add_completion=True,
    no_args_is_help=True,
)

# =============================================================================
# Column Definitions
# =============================================================================

RESOURCE_COLUMNS = [
    ("cv", "ContainerVersion"),
    ("namespace", "Namespace"),
    ("name", "Name"),
    ("type", "Type"),
    ("container", "Container"),
    ("version", "Version"),
    ("available_pods", "Available"),
    ("tag", "Tag"),
]

WORKLOAD_COLUMNS = [
    ("namespace", "Namespace"),
    ("name", "Name"),
    ("kind", "Kind"),
    ("template", "Template"),
]


# =============================================================================
# Helpers
# =============================================================================


def get_provider(namespace: str | None = None) -> WorkloadProvider:
    """Build a provider for ``namespace`` from the environment configuration."""
    config = ControllerConfig.from_env()
    client = KubernetesClient(config)
    options = config.provider
    if options.request_timeout is None:
        options = options.model_copy(update={"request_timeout": client.timeout})
    recorder = KubernetesEventRecorder(client) if options.record_events else None
    return WorkloadProvider(
        client,
        ContainerVersionManager(client),
        namespace or client.default_namespace,
        options=options,
        recorder=recorder,
    )


def _cv_summary(cv: ContainerVersion) -> dict[str, Any]:
    status = cv.status
    return {
        "name": cv.name,
        "namespace": cv.namespace,
        "image_repo": cv.spec.image_repo,
        "tag": cv.spec.tag,
        "container": cv.spec.container.name,
        "selector": cv.spec.selector,
        "status": "Unknown" if status.is_unknown else status.curr_status.value,
        "current_version": status.curr_version,
        "status_time": status.curr_status_time.isoformat() if status.curr_status_time else None,
        "success_version": status.success_version,
    }


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"cvm version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Write logs as JSON lines.",
    ),
    log_file: Path | None = typer.Option(
        None,
        "--log-file",
        help="Also write JSON logs to this rotating file.",
    ),
) -> None:
    """Container version manager - roll image tags out across workloads."""
    configure_logging(verbose=verbose, debug=debug, json_output=json_logs, log_file=log_file)


# =============================================================================
# Commands
# =============================================================================


@app.command("resources")
def list_resources(
    namespace: NamespaceOption = None,
    cv_name: Annotated[
        str | None,
        typer.Option("--cv", help="Only show resources of this ContainerVersion"),
    ] = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """List the workloads managed by ContainerVersions.

    Examples:
        cvm resources
        cvm resources -n production --cv api
        cvm resources -o json
    """
    try:
        provider = get_provider(namespace)
        if cv_name:
            resources = provider.cv_resources(provider.cv(cv_name))
        else:
            resources = provider.all_resources()
        formatter = get_formatter(output, console)
        formatter.format_list(resources, RESOURCE_COLUMNS, title="Managed Resources")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("workloads")
def list_workloads(
    name: Annotated[str, typer.Argument(help="ContainerVersion name")],
    namespace: NamespaceOption = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """List the workloads a ContainerVersion selects.

    Examples:
        cvm workloads api
        cvm workloads api -n production
    """
    try:
        provider = get_provider(namespace)
        workloads = provider.workloads(provider.cv(name))
        rows = [
            {
                "namespace": workload.namespace,
                "name": workload.name,
                "kind": workload.kind.value,
                "template": is_template_workload(workload),
            }
            for workload in workloads
        ]
        formatter = get_formatter(output, console)
        formatter.format_list(rows, WORKLOAD_COLUMNS, title=f"Workloads: {name}")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("show")
def show(
    name: Annotated[str, typer.Argument(help="ContainerVersion name")],
    namespace: NamespaceOption = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Show a ContainerVersion and its rollout status.

    Examples:
        cvm show api
        cvm show api -o yaml
    """
    try:
        provider = get_provider(namespace)
        cv = provider.cv(name)
        formatter = get_formatter(output, console)
        formatter.format_resource(_cv_summary(cv), title=f"ContainerVersion: {name}")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("set-status")
def set_status(
    name: Annotated[str, typer.Argument(help="ContainerVersion name")],
    version: Annotated[str, typer.Argument(help="Version that was rolled out")],
    status: Annotated[
        RolloutStatus,
        typer.Argument(help="Rollout outcome: Progressing, Success or Failed"),
    ],
    namespace: NamespaceOption = None,
) -> None:
    """Record a rollout outcome on a ContainerVersion.

    Examples:
        cvm set-status api 1.4.2 Success
        cvm set-status api 1.4.3 Failed -n production
    """
    try:
        provider = get_provider(namespace)
        cv = provider.update_rollout_status(name, version, status, datetime.now(UTC))
        console.print(
            f"[green]ContainerVersion '{name}' marked {status.value} at version "
            f"{version}[/green]"
        )
        if cv.status.success_version:
            console.print(f"  Last successful version: {cv.status.success_version}")
    except KubernetesError as e:
        handle_k8s_error(e)


if __name__ == "__main__":
    app()
