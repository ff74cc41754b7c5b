"""Shared options and error handling for the cvm commands."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from container_version_manager.cli.formatters import OutputFormat
from container_version_manager.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
    WorkloadListingError,
)

# Shared console instance
console = Console()


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Kubernetes namespace (defaults to CVM_K8S_NAMESPACE or 'default')",
    ),
]


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> None:
    """Handle Kubernetes errors with user-friendly output.

    Args:
        error: The Kubernetes error to handle.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, WorkloadListingError):
        console.print(f"[red]Error:[/red] Workload discovery failed while listing {error.kind}")
        console.print(f"  {error.cause.message}")
        console.print(
            "\n[dim]Hint: The controller needs list access to every workload kind "
            "in the namespace.[/dim]"
        )

    elif isinstance(error, KubernetesConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        console.print(f"  {error.message}")
        if error.original_error:
            console.print(f"  Cause: {error.original_error}")
        console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        console.print("[red]Error:[/red] Authentication/authorization failed")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Check your credentials, token, or RBAC permissions.[/dim]")

    elif isinstance(error, KubernetesNotFoundError):
        console.print("[red]Error:[/red] Resource not found")
        console.print(f"  {error.message}")

    elif isinstance(error, KubernetesValidationError):
        console.print("[red]Error:[/red] Validation failed")
        console.print(f"  {error.message}")
        if error.validation_errors:
            console.print("\n  Field errors:")
            for field, err in error.validation_errors.items():
                console.print(f"    - {field}: {err}")

    elif isinstance(error, KubernetesConflictError):
        console.print("[red]Error:[/red] Resource conflict")
        console.print(f"  {error.message}")
        console.print(
            "\n[dim]Hint: Raise CVM_STATUS_UPDATE_RETRIES if writers often collide.[/dim]"
        )

    elif isinstance(error, KubernetesTimeoutError):
        console.print("[red]Error:[/red] Operation timed out")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Try increasing the timeout with CVM_K8S_TIMEOUT.[/dim]")

    else:
        console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(1)
