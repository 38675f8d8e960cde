"""Base utilities for restartctl commands.

Provides common Typer options, exit codes, settings loading, and error
handling shared by all commands.
"""

from __future__ import annotations

from typing import Annotated, Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm

from restart_orchestrator.cli.output import OutputFormat
from restart_orchestrator.core.config import RestartSettings
from restart_orchestrator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesTimeoutError,
    WorkloadListingError,
)

# Shared console instances. Notices and prompts go to err_console when
# stdout carries a JSON or YAML document.
console = Console()
err_console = Console(stderr=True)

# Every matched workload restarted, or nothing matched.
EXIT_OK = 0
# The pass completed but some restarts failed.
EXIT_PARTIAL = 1
# The pass never completed: listing error, cancellation, bad configuration.
EXIT_ABORTED = 2


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

TokenOption = Annotated[
    str | None,
    typer.Option(
        "--token",
        "-t",
        help="Restart workloads whose name contains this token, case-insensitive "
        "(default: 'database'). An empty token selects nothing.",
    ),
]

PatternOption = Annotated[
    str | None,
    typer.Option(
        "--pattern",
        "-p",
        help="Regular expression matched against workload names; overrides --token",
    ),
]

KindOption = Annotated[
    list[str] | None,
    typer.Option(
        "--kind",
        "-k",
        help="Workload kind to process (deployment, statefulset, daemonset). Repeatable.",
    ),
]

ConflictRetriesOption = Annotated[
    int | None,
    typer.Option(
        "--conflict-retries",
        help="Re-run a restart this many times when the workload changed concurrently",
        min=0,
    ),
]

ContextOption = Annotated[
    str | None,
    typer.Option(
        "--context",
        help="Kubeconfig context to use",
    ),
]

KubeconfigOption = Annotated[
    str | None,
    typer.Option(
        "--kubeconfig",
        help="Path to the kubeconfig file",
    ),
]

ForceOption = Annotated[
    bool,
    typer.Option(
        "--force",
        "-f",
        help="Skip confirmation prompts",
    ),
]


# =============================================================================
# Settings
# =============================================================================


def load_settings(
    token: str | None = None,
    pattern: str | None = None,
    kinds: list[str] | None = None,
    conflict_retries: int | None = None,
    context: str | None = None,
    kubeconfig: str | None = None,
) -> RestartSettings:
    """Build settings from the environment, then apply explicit CLI options.

    Raises:
        typer.Exit: With EXIT_ABORTED when the settings are invalid.
    """
    overrides: dict[str, Any] = {}
    if token is not None:
        overrides["token"] = token
    if pattern is not None:
        overrides["pattern"] = pattern
    if kinds:
        overrides["kinds"] = kinds
    if conflict_retries is not None:
        overrides["conflict_retries"] = conflict_retries

    kube_overrides: dict[str, Any] = {}
    if context is not None:
        kube_overrides["context"] = context
    if kubeconfig is not None:
        kube_overrides["kubeconfig"] = kubeconfig

    try:
        settings = RestartSettings.from_env()
        if overrides or kube_overrides:
            data = settings.model_dump()
            data.update(overrides)
            data["kubernetes"].update(kube_overrides)
            settings = RestartSettings.model_validate(data)
    except (ValidationError, ValueError) as e:
        console.print("[red]Error:[/red] Invalid settings")
        console.print(f"  {e}")
        raise typer.Exit(EXIT_ABORTED) from e
    return settings


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> NoReturn:
    """Handle errors that abort a whole pass with user-friendly output.

    Args:
        error: The Kubernetes error to handle.

    Raises:
        typer.Exit: Always exits with EXIT_ABORTED.
    """
    cause = error.cause if isinstance(error, WorkloadListingError) else error

    if isinstance(error, WorkloadListingError):
        console.print(
            f"[red]Error:[/red] Cannot list {error.kind} resources; the pass was aborted"
        )
        console.print(f"  {cause.message}")

    if isinstance(cause, KubernetesConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        console.print(f"  {cause.message}")
        if cause.original_error:
            console.print(f"  Cause: {cause.original_error}")
        console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(cause, KubernetesAuthError):
        console.print("[red]Error:[/red] Authentication/authorization failed")
        console.print(f"  {cause.message}")
        console.print(
            "\n[dim]Hint: Listing across all namespaces needs cluster-wide "
            "list/get/patch on apps resources.[/dim]"
        )

    elif isinstance(cause, KubernetesTimeoutError):
        console.print("[red]Error:[/red] Operation timed out")
        console.print(f"  {cause.message}")
        console.print("\n[dim]Hint: Try increasing the timeout with RESTARTCTL_TIMEOUT.[/dim]")

    elif not isinstance(error, WorkloadListingError):
        console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(EXIT_ABORTED)


def confirm_action(
    message: str, default: bool = False, prompt_console: Console | None = None
) -> bool:
    """Prompt user to confirm an action on ``prompt_console`` (stdout by default)."""
    return Confirm.ask(message, default=default, console=prompt_console or console)
