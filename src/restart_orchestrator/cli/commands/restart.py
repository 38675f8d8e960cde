"""Restart and plan commands.

``restartctl restart`` runs one reconcile pass: every Deployment, StatefulSet
and DaemonSet in all namespaces whose name matches the selection gets its pod
template restart annotation bumped. ``restartctl plan`` shows what a restart
would touch without changing anything.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer

from restart_orchestrator.cli.commands.base import (
    EXIT_ABORTED,
    EXIT_OK,
    EXIT_PARTIAL,
    ConflictRetriesOption,
    ContextOption,
    ForceOption,
    KindOption,
    KubeconfigOption,
    OutputOption,
    PatternOption,
    TokenOption,
    confirm_action,
    console,
    err_console,
    handle_k8s_error,
    load_settings,
)
from restart_orchestrator.cli.output import OutputFormat, get_formatter
from restart_orchestrator.core.config import RestartSettings
from restart_orchestrator.integrations.kubernetes.client import KubernetesClient
from restart_orchestrator.integrations.kubernetes.exceptions import KubernetesError
from restart_orchestrator.logging import get_logger
from restart_orchestrator.services.kubernetes.workload_api import (
    WorkloadApi,
    build_workload_apis,
)
from restart_orchestrator.services.restart import (
    ConflictRetryingTrigger,
    MonotonicClock,
    ReconcileCancelledError,
    Reconciler,
    RestartResult,
    RestartTrigger,
    Trigger,
    WorkloadRef,
)

logger = get_logger(__name__)


def create_reconciler(settings: RestartSettings, client: KubernetesClient) -> Reconciler:
    """Wire a Reconciler against the cluster ``client`` is connected to."""
    clock = MonotonicClock()

    def make_trigger(api: WorkloadApi) -> Trigger:
        trigger: Trigger = RestartTrigger(api, clock)
        if settings.conflict_retries:
            trigger = ConflictRetryingTrigger(trigger, settings.conflict_retries)
        return trigger

    return Reconciler(
        build_workload_apis(client, settings.kinds),
        settings.build_selector(),
        trigger_factory=make_trigger,
    )


@contextmanager
def cancel_on_interrupt() -> Iterator[threading.Event]:
    """Turn the first Ctrl-C into a cancel request; a second one interrupts hard."""
    cancel_event = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield cancel_event
        return

    previous = signal.getsignal(signal.SIGINT)

    def _request_cancel(signum: int, frame: Any) -> None:
        if cancel_event.is_set():
            signal.default_int_handler(signum, frame)
        console.print("\n[yellow]Cancelling after the current workload...[/yellow]")
        cancel_event.set()

    signal.signal(signal.SIGINT, _request_cancel)
    try:
        yield cancel_event
    finally:
        signal.signal(signal.SIGINT, previous)


def restart(
    token: TokenOption = None,
    pattern: PatternOption = None,
    kind: KindOption = None,
    conflict_retries: ConflictRetriesOption = None,
    context: ContextOption = None,
    kubeconfig: KubeconfigOption = None,
    force: ForceOption = False,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """Trigger a rolling restart of every matching workload in all namespaces.

    Without --force the matching workloads are listed and confirmed first, and
    only those are restarted. With -o json or -o yaml the listing, prompt and
    notices go to stderr, so stdout holds just the result document.

    Exit codes: 0 all matched workloads restarted (or none matched),
    1 some restarts failed, 2 the pass was aborted.

    Examples:
        restartctl restart
        restartctl restart --token postgres --kind statefulset
        restartctl restart --pattern '^(pg|mysql)-' --force -o json
    """
    settings = load_settings(token, pattern, kind, conflict_retries, context, kubeconfig)
    formatter = get_formatter(output, console)
    machine_readable = output != OutputFormat.TABLE
    notices = err_console if machine_readable else console
    preview = get_formatter(OutputFormat.TABLE, notices) if machine_readable else formatter
    title = f"Workloads whose {settings.describe_selection()}"
    log = logger.bind(selection=settings.describe_selection())

    try:
        with KubernetesClient(settings.kubernetes) as client:
            log = log.bind(context=client.context_name)
            reconciler = create_reconciler(settings, client)

            confirmed: list[WorkloadRef] | None = None
            if not force:
                confirmed = reconciler.plan()
                preview.format_plan(confirmed, title=title)
                if not confirmed:
                    preview.format_success("Nothing to restart")
                    if machine_readable:
                        formatter.format_result(RestartResult())
                    raise typer.Exit(EXIT_OK)
                if not confirm_action(
                    f"Restart {len(confirmed)} workload(s)?", prompt_console=notices
                ):
                    notices.print("Aborted")
                    raise typer.Exit(EXIT_OK)

            log.info("restart_requested", kinds=[k.value for k in settings.kinds], force=force)
            on_outcome = None if machine_readable else formatter.format_outcome
            with cancel_on_interrupt() as cancel_event:
                result = reconciler.run(
                    on_outcome=on_outcome, cancel_event=cancel_event, only=confirmed
                )
    except ReconcileCancelledError as e:
        formatter.format_result(e.partial_result)
        preview.format_error(str(e))
        raise typer.Exit(EXIT_ABORTED) from e
    except KubernetesError as e:
        handle_k8s_error(e)

    formatter.format_result(result)
    raise typer.Exit(EXIT_OK if result.succeeded else EXIT_PARTIAL)


def plan(
    token: TokenOption = None,
    pattern: PatternOption = None,
    kind: KindOption = None,
    context: ContextOption = None,
    kubeconfig: KubeconfigOption = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """List the workloads a restart would touch, without changing anything.

    Examples:
        restartctl plan
        restartctl plan --pattern 'redis|postgres' -o yaml
    """
    settings = load_settings(token, pattern, kind, None, context, kubeconfig)
    formatter = get_formatter(output, console)

    try:
        with KubernetesClient(settings.kubernetes) as client:
            refs = create_reconciler(settings, client).plan()
    except KubernetesError as e:
        handle_k8s_error(e)

    formatter.format_plan(refs, title=f"Workloads whose {settings.describe_selection()}")
