"""Shared fixtures for restart service tests.

``FakeWorkloadApi`` keeps workloads in memory with resource versions, so the
fetch-mutate-write cycle and its conflict detection run for real.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from restart_orchestrator.integrations.kubernetes.exceptions import (
    KubernetesConflictError,
    KubernetesError,
    KubernetesNotFoundError,
    WorkloadListingError,
)
from restart_orchestrator.services.restart.models import WorkloadKind, WorkloadRef


class FakeWorkloadApi:
    """In-memory WorkloadApi for one kind."""

    def __init__(self, kind: WorkloadKind) -> None:
        self.kind = kind
        self.store: dict[tuple[str, str], WorkloadRef] = {}
        self.listed: list[tuple[str, str]] = []
        self.list_error: KubernetesError | None = None
        self.get_errors: dict[tuple[str, str], KubernetesError] = {}
        self.pending_conflicts: dict[tuple[str, str], int] = {}
        self.list_calls = 0
        self.updates: list[WorkloadRef] = []

    def add(
        self,
        name: str,
        namespace: str = "default",
        annotations: dict[str, str] | None = None,
        listed_only: bool = False,
    ) -> WorkloadRef:
        """Add a workload; ``listed_only`` ones show up in listings but cannot be fetched."""
        ref = WorkloadRef(
            kind=self.kind,
            namespace=namespace,
            name=name,
            resource_version="1",
            pod_template_annotations=annotations or {},
        )
        self.listed.append((namespace, name))
        if not listed_only:
            self.store[(namespace, name)] = ref
        return ref

    def conflict_next_writes(self, namespace: str, name: str, times: int = 1) -> None:
        """Simulate a concurrent writer changing the object before our next writes."""
        self.pending_conflicts[(namespace, name)] = times

    def list_all(self) -> list[WorkloadRef]:
        self.list_calls += 1
        if self.list_error is not None:
            raise WorkloadListingError(self.kind.value, self.list_error)
        refs = []
        for namespace, name in self.listed:
            stored = self.store.get((namespace, name))
            refs.append(
                stored
                or WorkloadRef(
                    kind=self.kind, namespace=namespace, name=name, resource_version="1"
                )
            )
        return refs

    def get(self, namespace: str, name: str) -> WorkloadRef:
        key = (namespace, name)
        if key in self.get_errors:
            raise self.get_errors[key]
        if key not in self.store:
            raise KubernetesNotFoundError(
                resource_type=self.kind.value, resource_name=name, namespace=namespace
            )
        return self.store[key]

    def update(self, ref: WorkloadRef) -> WorkloadRef:
        key = (ref.namespace, ref.name)
        if key not in self.store:
            raise KubernetesNotFoundError(
                resource_type=self.kind.value, resource_name=ref.name, namespace=ref.namespace
            )
        if self.pending_conflicts.get(key):
            self.pending_conflicts[key] -= 1
            self._bump(key, self.store[key])
        stored = self.store[key]
        if ref.resource_version != stored.resource_version:
            raise KubernetesConflictError(
                resource_type=self.kind.value, resource_name=ref.name, namespace=ref.namespace
            )
        written = self._bump(key, ref)
        self.updates.append(written)
        return written

    def _bump(self, key: tuple[str, str], ref: WorkloadRef) -> WorkloadRef:
        version = str(int(self.store[key].resource_version or "0") + 1)
        bumped = ref.model_copy(update={"resource_version": version})
        self.store[key] = bumped
        return bumped


class FakeClock:
    """Clock returning a controllable time."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def make_api() -> Callable[[WorkloadKind], FakeWorkloadApi]:
    """Factory for in-memory workload APIs."""
    return FakeWorkloadApi


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock frozen at 2024-05-01T12:00:00Z."""
    return FakeClock(datetime(2024, 5, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def cluster(
    make_api: Callable[[WorkloadKind], FakeWorkloadApi],
) -> dict[WorkloadKind, FakeWorkloadApi]:
    """Cluster with two Deployments in ``prod`` and one StatefulSet in ``data``."""
    deployments = make_api(WorkloadKind.DEPLOYMENT)
    deployments.add("database-primary", "prod", annotations={"team": "db"})
    deployments.add("web-1", "prod")
    statefulsets = make_api(WorkloadKind.STATEFUL_SET)
    statefulsets.add("database-shard-a", "data")
    daemonsets = make_api(WorkloadKind.DAEMON_SET)
    return {
        WorkloadKind.DEPLOYMENT: deployments,
        WorkloadKind.STATEFUL_SET: statefulsets,
        WorkloadKind.DAEMON_SET: daemonsets,
    }
