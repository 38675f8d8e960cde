"""Data models for workload restarts.

``WorkloadRef`` is built fresh from every listing or fetch and discarded after
use. ``RestartResult`` is built once per reconcile pass.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

RESTARTED_AT_ANNOTATION = "kubectl.kubernetes.io/restartedAt"


class WorkloadKind(StrEnum):
    """Workload kinds that can be rolling-restarted.

    Definition order is the processing order of a reconcile pass.
    """

    DEPLOYMENT = "Deployment"
    STATEFUL_SET = "StatefulSet"
    DAEMON_SET = "DaemonSet"

    @property
    def api_suffix(self) -> str:
        """Resource segment used in AppsV1Api method names (e.g. ``stateful_set``)."""
        return _API_SUFFIXES[self]

    @classmethod
    def parse(cls, value: str) -> WorkloadKind:
        """Resolve a kind from its name, case-insensitively.

        Accepts ``StatefulSet``, ``statefulset``, ``stateful_set`` and
        ``statefulsets``.

        Raises:
            ValueError: If the value names no supported kind.
        """
        normalized = value.strip().lower().replace("_", "").replace("-", "")
        for kind in cls:
            singular = kind.value.lower()
            if normalized in (singular, f"{singular}s"):
                return kind
        valid = ", ".join(kind.value for kind in cls)
        raise ValueError(f"Unsupported workload kind '{value}'. Use one of: {valid}")


_API_SUFFIXES: dict[WorkloadKind, str] = {
    WorkloadKind.DEPLOYMENT: "deployment",
    WorkloadKind.STATEFUL_SET: "stateful_set",
    WorkloadKind.DAEMON_SET: "daemon_set",
}


class WorkloadRef(BaseModel):
    """Identity of one workload plus its pod template annotations.

    ``resource_version`` is the optimistic-concurrency token the cluster
    returned with the object; updates send it back so a concurrent change is
    rejected instead of overwritten.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: WorkloadKind
    namespace: str = Field(min_length=1)
    name: str = Field(min_length=1)
    resource_version: str | None = None
    pod_template_annotations: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def key(self) -> tuple[WorkloadKind, str, str]:
        """Identity tuple, unique within one cluster snapshot."""
        return (self.kind, self.namespace, self.name)

    @property
    def restarted_at(self) -> str | None:
        """Value of the restart trigger annotation, if ever set."""
        return self.pod_template_annotations.get(RESTARTED_AT_ANNOTATION)

    def with_pod_template_annotation(self, key: str, value: str) -> WorkloadRef:
        """Return a copy whose pod template carries one more annotation."""
        annotations = dict(self.pod_template_annotations)
        annotations[key] = value
        return self.model_copy(update={"pod_template_annotations": annotations})

    def __str__(self) -> str:
        return f"{self.kind.value}/{self.namespace}/{self.name}"


class RestartOutcome(BaseModel):
    """What happened to one matched workload, emitted as it happens."""

    model_config = ConfigDict(frozen=True)

    ref: WorkloadRef
    restarted: bool
    restarted_at: str | None = None
    error: str | None = None
    error_type: str | None = None


class RestartFailure(BaseModel):
    """A matched workload whose restart failed, with enough detail to retry it."""

    model_config = ConfigDict(frozen=True)

    ref: WorkloadRef
    error: str
    error_type: str


ResultStatus = Literal["success", "partial", "noop"]


class RestartResult(BaseModel):
    """Aggregate outcome of one reconcile pass.

    ``matched_count == restarted_count + len(failures)`` holds after every
    recorded outcome.
    """

    matched_count: int = 0
    restarted_count: int = 0
    failures: list[RestartFailure] = Field(default_factory=list)
    outcomes: list[RestartOutcome] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def failed_count(self) -> int:
        """Number of matched workloads that were not restarted."""
        return len(self.failures)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> ResultStatus:
        """``noop`` when nothing matched, ``partial`` when anything failed."""
        if self.matched_count == 0:
            return "noop"
        if self.failures:
            return "partial"
        return "success"

    @property
    def succeeded(self) -> bool:
        """True when every matched workload was restarted."""
        return not self.failures

    def record_success(self, ref: WorkloadRef, restarted_at: str | None) -> RestartOutcome:
        """Count a matched workload as restarted."""
        self.matched_count += 1
        self.restarted_count += 1
        outcome = RestartOutcome(ref=ref, restarted=True, restarted_at=restarted_at)
        self.outcomes.append(outcome)
        return outcome

    def record_failure(self, ref: WorkloadRef, error: Exception) -> RestartOutcome:
        """Count a matched workload as failed, keeping discovery order."""
        self.matched_count += 1
        error_type = type(error).__name__
        self.failures.append(RestartFailure(ref=ref, error=str(error), error_type=error_type))
        outcome = RestartOutcome(
            ref=ref, restarted=False, error=str(error), error_type=error_type
        )
        self.outcomes.append(outcome)
        return outcome

    def summary(self) -> dict[str, Any]:
        """Counts and status as a flat dictionary."""
        return {
            "status": self.status,
            "matched_count": self.matched_count,
            "restarted_count": self.restarted_count,
            "failed_count": self.failed_count,
        }
