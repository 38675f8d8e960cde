"""Per-kind access to workload objects in the cluster.

``WorkloadApi`` is the small capability the restart trigger and reconciler
depend on. ``KubernetesWorkloadApi`` implements it once for every kind over
``AppsV1Api``; the kind only selects which ``*_deployment`` /
``*_stateful_set`` / ``*_daemon_set`` methods are called.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, Protocol

from restart_orchestrator.integrations.kubernetes.exceptions import (
    KubernetesError,
    WorkloadListingError,
)
from restart_orchestrator.services.kubernetes.base import K8sBaseManager
from restart_orchestrator.services.restart.models import WorkloadKind, WorkloadRef

if TYPE_CHECKING:
    from restart_orchestrator.integrations.kubernetes.client import KubernetesClient


class WorkloadApi(Protocol):
    """Fetch, list and update workloads of one kind."""

    @property
    def kind(self) -> WorkloadKind: ...

    def list_all(self) -> list[WorkloadRef]:
        """List every instance across all namespaces.

        Raises:
            WorkloadListingError: If the instances cannot be enumerated.
        """
        ...

    def get(self, namespace: str, name: str) -> WorkloadRef:
        """Fetch one instance, including its current resource version.

        Raises:
            KubernetesNotFoundError: If it does not exist.
        """
        ...

    def update(self, ref: WorkloadRef) -> WorkloadRef:
        """Write the pod template annotations of ``ref`` back.

        Raises:
            KubernetesConflictError: If the stored resource version differs
                from ``ref.resource_version``.
        """
        ...


def _safe_get(obj: Any, *attrs: str, default: Any = None) -> Any:
    """Safely traverse nested attributes on kubernetes SDK objects."""
    current = obj
    for attr in attrs:
        if current is None:
            return default
        current = getattr(current, attr, None)
    return current if current is not None else default


class KubernetesWorkloadApi(K8sBaseManager):
    """WorkloadApi backed by the kubernetes AppsV1 API."""

    _entity_name = "workload"

    def __init__(self, client: KubernetesClient, kind: WorkloadKind) -> None:
        """Initialize the API for one workload kind.

        Args:
            client: Kubernetes API client instance.
            kind: Workload kind served by this instance.
        """
        super().__init__(client, kind=kind.value)
        self._kind = kind

    @property
    def kind(self) -> WorkloadKind:
        return self._kind

    def _method(self, template: str) -> Callable[..., Any]:
        return getattr(self._client.apps_v1, template.format(self._kind.api_suffix))

    def to_ref(self, obj: Any) -> WorkloadRef:
        """Build a WorkloadRef from a V1Deployment/V1StatefulSet/V1DaemonSet."""
        annotations = _safe_get(obj, "spec", "template", "metadata", "annotations")
        labels = _safe_get(obj, "metadata", "labels")
        return WorkloadRef(
            kind=self._kind,
            namespace=_safe_get(obj, "metadata", "namespace", default=""),
            name=_safe_get(obj, "metadata", "name", default=""),
            resource_version=_safe_get(obj, "metadata", "resource_version"),
            pod_template_annotations=dict(annotations) if annotations else {},
            labels=dict(labels) if labels else {},
        )

    # =========================================================================
    # Listing
    # =========================================================================

    def _list_page(self, continue_token: str | None) -> Any:
        list_fn = self._method("list_{}_for_all_namespaces")
        kwargs: dict[str, Any] = {
            "limit": self._client.page_size,
            "_request_timeout": self._client.timeout,
        }
        if continue_token:
            kwargs["_continue"] = continue_token
        try:
            return list_fn(**kwargs)
        except Exception as e:
            self._handle_api_error(e, self._kind.value)

    def list_all(self) -> list[WorkloadRef]:
        """List every instance of this kind across all namespaces.

        Follows ``continue`` tokens until the last page. Connection errors
        are retried per page with backoff.

        Returns:
            Workload references in the order the API server returned them.

        Raises:
            WorkloadListingError: If any page cannot be fetched.
        """
        self._log.debug("listing_workloads")
        fetch_page = self._client.make_retry_decorator()(self._list_page)
        refs: list[WorkloadRef] = []
        continue_token: str | None = None
        try:
            while True:
                page = fetch_page(continue_token)
                refs.extend(self.to_ref(item) for item in _safe_get(page, "items", default=[]))
                continue_token = _safe_get(page, "metadata", "_continue")
                if not isinstance(continue_token, str) or not continue_token:
                    break
        except KubernetesError as e:
            self._log.error("listing_workloads_failed", error=str(e))
            raise WorkloadListingError(self._kind.value, e) from e
        self._log.debug("listed_workloads", count=len(refs))
        return refs

    # =========================================================================
    # Fetch / Update
    # =========================================================================

    def get(self, namespace: str, name: str) -> WorkloadRef:
        """Fetch one instance with its current resource version."""
        self._log.debug("getting_workload", name=name, namespace=namespace)
        try:
            result = self._method("read_namespaced_{}")(
                name=name,
                namespace=namespace,
                _request_timeout=self._client.timeout,
            )
        except Exception as e:
            self._handle_api_error(e, self._kind.value, name, namespace)
        return self.to_ref(result)

    def update(self, ref: WorkloadRef) -> WorkloadRef:
        """Patch the pod template annotations, conditional on the resource version.

        The resource version travels in the patch body, so the API server
        answers 409 when the object changed after it was read.
        """
        body: dict[str, Any] = {
            "spec": {
                "template": {
                    "metadata": {"annotations": dict(ref.pod_template_annotations)},
                }
            }
        }
        if ref.resource_version:
            body["metadata"] = {"resourceVersion": ref.resource_version}

        self._log.debug(
            "updating_workload",
            name=ref.name,
            namespace=ref.namespace,
            resource_version=ref.resource_version,
        )
        try:
            result = self._method("patch_namespaced_{}")(
                name=ref.name,
                namespace=ref.namespace,
                body=body,
                _request_timeout=self._client.timeout,
            )
        except Exception as e:
            self._handle_api_error(e, self._kind.value, ref.name, ref.namespace)
        return self.to_ref(result)


def build_workload_apis(
    client: KubernetesClient,
    kinds: Iterable[WorkloadKind] | None = None,
) -> list[KubernetesWorkloadApi]:
    """Create one WorkloadApi per kind, in the fixed processing order."""
    selected = set(kinds) if kinds is not None else set(WorkloadKind)
    return [KubernetesWorkloadApi(client, kind) for kind in WorkloadKind if kind in selected]
