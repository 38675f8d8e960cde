"""Restart-trigger protocol and the multi-kind reconcile loop."""

from restart_orchestrator.services.restart.clock import (
    Clock,
    MonotonicClock,
    SystemClock,
    format_restart_timestamp,
)
from restart_orchestrator.services.restart.models import (
    RESTARTED_AT_ANNOTATION,
    RestartFailure,
    RestartOutcome,
    RestartResult,
    WorkloadKind,
    WorkloadRef,
)
from restart_orchestrator.services.restart.reconciler import (
    ReconcileCancelledError,
    Reconciler,
)
from restart_orchestrator.services.restart.selector import (
    DEFAULT_TOKEN,
    RegexSelector,
    Selector,
    SubstringSelector,
    build_selector,
)
from restart_orchestrator.services.restart.trigger import (
    ConflictRetryingTrigger,
    RestartTrigger,
    Trigger,
)

__all__ = [
    "DEFAULT_TOKEN",
    "RESTARTED_AT_ANNOTATION",
    "Clock",
    "ConflictRetryingTrigger",
    "MonotonicClock",
    "ReconcileCancelledError",
    "Reconciler",
    "RegexSelector",
    "RestartFailure",
    "RestartOutcome",
    "RestartResult",
    "RestartTrigger",
    "Selector",
    "SubstringSelector",
    "SystemClock",
    "Trigger",
    "WorkloadKind",
    "WorkloadRef",
    "build_selector",
    "format_restart_timestamp",
]
