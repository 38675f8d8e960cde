"""Single reconcile pass over every supported workload kind.

Kinds are processed one after another in the fixed order Deployment,
StatefulSet, DaemonSet; instances of a kind one at a time. Per-instance
errors are recorded and the pass continues. A listing error aborts the whole
pass with no result.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Collection, Iterable
from typing import TYPE_CHECKING

import structlog

from restart_orchestrator.integrations.kubernetes.exceptions import KubernetesError
from restart_orchestrator.services.restart.clock import Clock, MonotonicClock
from restart_orchestrator.services.restart.models import (
    RestartOutcome,
    RestartResult,
    WorkloadKind,
    WorkloadRef,
)
from restart_orchestrator.services.restart.trigger import RestartTrigger, Trigger

if TYPE_CHECKING:
    from restart_orchestrator.services.kubernetes.workload_api import WorkloadApi
    from restart_orchestrator.services.restart.selector import Selector

logger = structlog.get_logger()

OutcomeCallback = Callable[[RestartOutcome], None]
TriggerFactory = Callable[["WorkloadApi"], Trigger]

_KIND_ORDER = {kind: index for index, kind in enumerate(WorkloadKind)}


class ReconcileCancelledError(Exception):
    """Raised when the caller cancels a pass before it finished.

    Attributes:
        partial_result: Everything recorded before the cancellation.
    """

    def __init__(self, partial_result: RestartResult) -> None:
        super().__init__(
            f"Restart pass cancelled after {partial_result.matched_count} matched workload(s)"
        )
        self.partial_result = partial_result


class Reconciler:
    """Lists, selects and restarts workloads across kinds.

    Example:
        >>> apis = build_workload_apis(client)
        >>> reconciler = Reconciler(apis, SubstringSelector("database"))
        >>> result = reconciler.run(on_outcome=print)
    """

    def __init__(
        self,
        apis: Iterable[WorkloadApi],
        selector: Selector,
        trigger_factory: TriggerFactory | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize the reconciler.

        Args:
            apis: One WorkloadApi per kind to process; reordered into the
                fixed kind order.
            selector: Decides which names are restarted.
            trigger_factory: Builds the trigger for each API. Defaults to a
                plain ``RestartTrigger``.
            clock: Time source shared by the default triggers, so stamps
                increase across kinds. Ignored with a custom factory.

        Raises:
            ValueError: If two APIs serve the same kind.
        """
        ordered = sorted(apis, key=lambda api: _KIND_ORDER[api.kind])
        kinds = [api.kind for api in ordered]
        if len(set(kinds)) != len(kinds):
            raise ValueError("Each workload kind may only be given once")

        shared_clock = clock or MonotonicClock()

        def default_factory(api: WorkloadApi) -> Trigger:
            return RestartTrigger(api, shared_clock)

        factory = trigger_factory or default_factory
        self._apis = ordered
        self._triggers = {api.kind: factory(api) for api in ordered}
        self._selector = selector
        self._log = logger.bind(entity="reconciler")

    @property
    def kinds(self) -> list[WorkloadKind]:
        """Kinds processed by this reconciler, in processing order."""
        return [api.kind for api in self._apis]

    def plan(self, cancel_event: threading.Event | None = None) -> list[WorkloadRef]:
        """List and select exactly like ``run`` without mutating anything.

        Raises:
            WorkloadListingError: If any kind cannot be listed.
        """
        selected: list[WorkloadRef] = []
        for api in self._apis:
            self._raise_if_cancelled(cancel_event, RestartResult())
            selected.extend(ref for ref in api.list_all() if self._selector.matches(ref.name))
        self._log.info("planned_restarts", count=len(selected))
        return selected

    def run(
        self,
        on_outcome: OutcomeCallback | None = None,
        cancel_event: threading.Event | None = None,
        only: Collection[WorkloadRef] | None = None,
    ) -> RestartResult:
        """Execute one pass.

        Args:
            on_outcome: Called with each per-instance outcome as it happens.
            cancel_event: When set, the pass stops before touching another
                workload.
            only: Workloads from an earlier ``plan``. When given, a listed
                workload is restarted only if it also matched then, so
                workloads created after the plan are left alone.

        Returns:
            The aggregate result of the pass.

        Raises:
            WorkloadListingError: If any kind cannot be listed.
            ReconcileCancelledError: If ``cancel_event`` was set mid-pass.
        """
        result = RestartResult()
        allowed = None if only is None else {ref.key for ref in only}
        self._log.info("reconcile_pass_started", kinds=[kind.value for kind in self.kinds])

        for api in self._apis:
            self._raise_if_cancelled(cancel_event, result)
            trigger = self._triggers[api.kind]

            for ref in api.list_all():
                if not self._selector.matches(ref.name):
                    continue
                if allowed is not None and ref.key not in allowed:
                    self._log.info("skipped_unconfirmed_workload", workload=str(ref))
                    continue
                self._raise_if_cancelled(cancel_event, result)
                outcome = self._restart_one(trigger, ref, result)
                if on_outcome is not None:
                    on_outcome(outcome)

        self._log.info("reconcile_pass_finished", **result.summary())
        return result

    def _restart_one(
        self, trigger: Trigger, ref: WorkloadRef, result: RestartResult
    ) -> RestartOutcome:
        try:
            stored = trigger.trigger(ref.namespace, ref.name)
        except KubernetesError as e:
            self._log.warning(
                "workload_restart_failed",
                kind=ref.kind.value,
                namespace=ref.namespace,
                name=ref.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return result.record_failure(ref, e)

        self._log.info(
            "restarted_workload",
            kind=ref.kind.value,
            namespace=ref.namespace,
            name=ref.name,
            restarted_at=stored.restarted_at,
        )
        return result.record_success(stored, stored.restarted_at)

    def _raise_if_cancelled(
        self, cancel_event: threading.Event | None, result: RestartResult
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            self._log.warning("reconcile_pass_cancelled", **result.summary())
            raise ReconcileCancelledError(result)
