"""Fetch-mutate-write cycle that makes Kubernetes roll a workload.

The trigger never moves pods itself. It stamps the
``kubectl.kubernetes.io/restartedAt`` pod template annotation (the same key
``kubectl rollout restart`` uses) and lets the workload controller roll new
pods in response to the changed template.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from restart_orchestrator.integrations.kubernetes.exceptions import KubernetesConflictError
from restart_orchestrator.services.restart.clock import (
    Clock,
    MonotonicClock,
    format_restart_timestamp,
)
from restart_orchestrator.services.restart.models import RESTARTED_AT_ANNOTATION

if TYPE_CHECKING:
    from restart_orchestrator.services.kubernetes.workload_api import WorkloadApi
    from restart_orchestrator.services.restart.models import WorkloadKind, WorkloadRef

logger = structlog.get_logger()


class Trigger(Protocol):
    """Anything that can force a rollout of one workload."""

    @property
    def kind(self) -> WorkloadKind: ...

    def trigger(self, namespace: str, name: str) -> WorkloadRef: ...


class RestartTrigger:
    """Forces a rollout of one workload of the API's kind.

    Each call fetches the object, sets the restart annotation to the current
    time and writes it back with the resource version from the fetch. A
    concurrent change surfaces as ``KubernetesConflictError``; nothing is
    retried here and nothing is ever created.
    """

    def __init__(self, api: WorkloadApi, clock: Clock | None = None) -> None:
        self._api = api
        self._clock = clock or MonotonicClock()
        self._log = logger.bind(entity="restart_trigger", kind=api.kind.value)

    @property
    def kind(self) -> WorkloadKind:
        return self._api.kind

    def trigger(self, namespace: str, name: str) -> WorkloadRef:
        """Restart one workload.

        Args:
            namespace: Workload namespace.
            name: Workload name.

        Returns:
            The stored workload after the write.

        Raises:
            KubernetesNotFoundError: The workload no longer exists.
            KubernetesConflictError: The workload changed between fetch and write.
            KubernetesTransientError: Transport, auth or server failure.
        """
        current = self._api.get(namespace, name)
        restarted_at = format_restart_timestamp(self._clock.now())
        mutated = current.with_pod_template_annotation(RESTARTED_AT_ANNOTATION, restarted_at)

        self._log.debug(
            "writing_restart_annotation",
            name=name,
            namespace=namespace,
            restarted_at=restarted_at,
            resource_version=current.resource_version,
        )
        return self._api.update(mutated)


class ConflictRetryingTrigger:
    """Caller-level policy that re-runs a whole trigger cycle on conflict.

    Every attempt fetches afresh, so a retry never writes over the change
    that caused the conflict.
    """

    def __init__(self, inner: Trigger, attempts: int, wait: Any = None) -> None:
        """Wrap a trigger.

        Args:
            inner: Trigger to wrap.
            attempts: Extra attempts after the first conflict (0 disables).
            wait: tenacity wait strategy; exponential backoff by default.
        """
        if attempts < 0:
            raise ValueError("attempts must be non-negative")
        self._inner = inner
        self._attempts = attempts
        self._wait = wait if wait is not None else wait_exponential(multiplier=0.5, min=0.5, max=5)

    @property
    def kind(self) -> WorkloadKind:
        return self._inner.kind

    def trigger(self, namespace: str, name: str) -> WorkloadRef:
        retrying = Retrying(
            retry=retry_if_exception_type(KubernetesConflictError),
            stop=stop_after_attempt(self._attempts + 1),
            wait=self._wait,
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(self._inner.trigger, namespace, name)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        namespace, name = retry_state.args
        logger.info(
            "retrying_restart_after_conflict",
            kind=self.kind.value,
            namespace=namespace,
            name=name,
            attempt=retry_state.attempt_number,
        )
