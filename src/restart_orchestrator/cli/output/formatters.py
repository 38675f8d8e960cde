"""Output formatters for restartctl.

Implements the Strategy pattern for output formatting, allowing commands to
render plans, live outcomes, and results as a table, JSON, or YAML.
Machine-readable formats print one document at the end and nothing live.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections.abc import Sequence
from enum import StrEnum
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from restart_orchestrator.services.restart.models import (
    RestartOutcome,
    RestartResult,
    WorkloadRef,
)


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


def _ref_dict(ref: WorkloadRef) -> dict[str, Any]:
    return {"kind": ref.kind.value, "namespace": ref.namespace, "name": ref.name}


def result_to_dict(result: RestartResult) -> dict[str, Any]:
    """Serializable view of a result: summary, restarted workloads, failures."""
    return {
        **result.summary(),
        "restarted": [
            {**_ref_dict(o.ref), "restarted_at": o.restarted_at}
            for o in result.outcomes
            if o.restarted
        ],
        "failures": [
            {**_ref_dict(f.ref), "error_type": f.error_type, "error": f.error}
            for f in result.failures
        ],
    }


class RestartFormatter(ABC):
    """Abstract base class for restart output formatters."""

    def __init__(self, console: Console) -> None:
        self.console = console

    @abstractmethod
    def format_plan(self, refs: Sequence[WorkloadRef], title: str = "") -> None:
        """Display the workloads selected for restart."""

    @abstractmethod
    def format_result(self, result: RestartResult) -> None:
        """Display the final result of a pass."""

    def format_outcome(self, outcome: RestartOutcome) -> None:
        """Display one per-instance outcome as it happens."""

    def format_success(self, message: str) -> None:
        """Display a success message."""
        self.console.print(f"[green]{message}[/green]")

    def format_error(self, message: str) -> None:
        """Display an error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def _print_document(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)


class TableFormatter(RestartFormatter):
    """Rich table output formatter."""

    def format_plan(self, refs: Sequence[WorkloadRef], title: str = "") -> None:
        table = Table(title=title or "Workloads selected for restart", show_header=True)
        table.add_column("Kind", style="cyan", no_wrap=True)
        table.add_column("Namespace", style="cyan", overflow="fold")
        table.add_column("Name", overflow="fold")
        table.add_column("Last restart", style="dim", overflow="fold")

        for ref in refs:
            table.add_row(ref.kind.value, ref.namespace, ref.name, ref.restarted_at or "-")

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {len(refs)} workloads[/dim]")

    def format_outcome(self, outcome: RestartOutcome) -> None:
        ref = outcome.ref
        if outcome.restarted:
            self.console.print(
                f"[green]restarted[/green] {ref.kind.value} {ref.namespace}/{ref.name}"
                f" [dim]({outcome.restarted_at})[/dim]"
            )
        else:
            self.console.print(
                f"[red]failed[/red]    {ref.kind.value} {ref.namespace}/{ref.name}"
                f" [dim]{outcome.error_type}: {escape(outcome.error or '')}[/dim]"
            )

    def format_result(self, result: RestartResult) -> None:
        summary = Table(title="Restart summary", show_header=True)
        summary.add_column("Matched", justify="right")
        summary.add_column("Restarted", justify="right", style="green")
        summary.add_column("Failed", justify="right", style="red")
        summary.add_column("Status")
        summary.add_row(
            str(result.matched_count),
            str(result.restarted_count),
            str(result.failed_count),
            result.status,
        )
        self.console.print()
        self.console.print(summary)

        if not result.failures:
            return

        failures = Table(title="Failed restarts", show_header=True)
        failures.add_column("Kind", style="cyan", no_wrap=True)
        failures.add_column("Namespace", style="cyan", overflow="fold")
        failures.add_column("Name", overflow="fold")
        failures.add_column("Error", style="red", overflow="fold")
        for failure in result.failures:
            ref = failure.ref
            error = f"{failure.error_type}: {escape(failure.error)}"
            failures.add_row(ref.kind.value, ref.namespace, ref.name, error)
        self.console.print(failures)


class JsonFormatter(RestartFormatter):
    """JSON output formatter."""

    def format_plan(self, refs: Sequence[WorkloadRef], title: str = "") -> None:
        output = {"data": [_ref_dict(ref) for ref in refs], "total": len(refs)}
        self._print_document(json.dumps(output, indent=2, default=str))

    def format_result(self, result: RestartResult) -> None:
        self._print_document(json.dumps(result_to_dict(result), indent=2, default=str))


class YamlFormatter(RestartFormatter):
    """YAML output formatter."""

    def format_plan(self, refs: Sequence[WorkloadRef], title: str = "") -> None:
        data = [_ref_dict(ref) for ref in refs]
        self._print_document(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))

    def format_result(self, result: RestartResult) -> None:
        self._print_document(
            yaml.safe_dump(result_to_dict(result), default_flow_style=False, sort_keys=False)
        )


def get_formatter(format_type: OutputFormat, console: Console | None = None) -> RestartFormatter:
    """Factory function to get the appropriate formatter."""
    if console is None:
        console = Console()

    formatters: dict[OutputFormat, type[RestartFormatter]] = {
        OutputFormat.TABLE: TableFormatter,
        OutputFormat.JSON: JsonFormatter,
        OutputFormat.YAML: YamlFormatter,
    }

    formatter_class = formatters.get(format_type, TableFormatter)
    return formatter_class(console)
