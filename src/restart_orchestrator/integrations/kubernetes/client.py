"""Kubernetes API client wrapper.

Holds the loaded cluster credentials and a lazily created ``AppsV1Api`` for
the lifetime of one command. Also maps the SDK's exceptions onto the
restart error taxonomy and builds the retry policy for listing calls.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from restart_orchestrator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesTransientError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import AppsV1Api

    from restart_orchestrator.integrations.kubernetes.config import (
        KubernetesConnectionConfig,
    )

logger = structlog.get_logger()

IN_CLUSTER = "in-cluster"
KUBECONFIG_DEFAULT = "current-context"

_AUTH_STATUSES = frozenset({401, 403})
_VALIDATION_STATUSES = frozenset({400, 422})


class KubernetesClient:
    """Connection to one cluster, used as a context manager by commands.

    Example:
        ```python
        with KubernetesClient(KubernetesConnectionConfig(context="prod")) as client:
            apis = build_workload_apis(client)
        ```
    """

    def __init__(self, config: KubernetesConnectionConfig) -> None:
        """Load credentials from the kubeconfig, or the pod's service account.

        Raises:
            KubernetesConnectionError: If neither source is usable.
        """
        self._config = config
        self._retries = config.retry_attempts
        self._apps_v1: AppsV1Api | None = None
        self._context_name = self._load_credentials()

        logger.info("kubernetes_client_ready", context=self._context_name)

    def _load_credentials(self) -> str:
        from kubernetes import config
        from kubernetes.config import ConfigException

        requested = self._config.context or None
        try:
            config.load_kube_config(config_file=self._config.kubeconfig, context=requested)
        except ConfigException as kubeconfig_error:
            logger.debug("kubeconfig_unavailable", error=str(kubeconfig_error))
        else:
            logger.debug(
                "loaded_kubeconfig", context=requested, kubeconfig=self._config.kubeconfig
            )
            return requested or KUBECONFIG_DEFAULT

        try:
            config.load_incluster_config()
        except ConfigException as e:
            raise KubernetesConnectionError(
                message="Cannot load Kubernetes configuration. "
                "Ensure kubeconfig exists or running inside a cluster.",
                original_error=e,
            ) from e
        logger.debug("loaded_incluster_config")
        return IN_CLUSTER

    @property
    def context_name(self) -> str:
        """Kubeconfig context in use, or ``in-cluster``."""
        return self._context_name

    @property
    def apps_v1(self) -> AppsV1Api:
        """AppsV1Api serving Deployments, StatefulSets and DaemonSets."""
        if self._apps_v1 is None:
            from kubernetes.client import AppsV1Api

            self._apps_v1 = AppsV1Api()
        return self._apps_v1

    @property
    def timeout(self) -> int:
        """Per-request timeout in seconds."""
        return self._config.timeout

    @property
    def page_size(self) -> int:
        return self._config.page_size

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Map an SDK or transport exception onto a KubernetesError subclass.

        404 and 409 keep the resource location so per-instance failures can
        be reported against the workload. 429 and 5xx are transient.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError
        from urllib3.exceptions import TimeoutError as Urllib3TimeoutError

        if isinstance(e, KubernetesError):
            return e
        if isinstance(e, Urllib3TimeoutError):
            return KubernetesTimeoutError(message=f"Kubernetes API request timed out: {e}")
        if isinstance(e, HTTPError):
            return KubernetesConnectionError(
                message=f"Kubernetes API unreachable: {e}", original_error=e
            )

        location: dict[str, Any] = {
            "resource_type": resource_type,
            "resource_name": resource_name,
            "namespace": namespace,
        }
        if not isinstance(e, ApiException):
            return KubernetesError(message=str(e), **location)

        status = e.status
        if status in _AUTH_STATUSES:
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )
        if status == 404:
            return KubernetesNotFoundError(**location)
        if status == 409:
            return KubernetesConflictError(**location)
        if status in _VALIDATION_STATUSES:
            return KubernetesValidationError(
                message=e.reason or "Validation failed", status_code=status
            )

        error_type = KubernetesError
        if status == 429 or (status is not None and status >= 500):
            error_type = KubernetesTransientError
        return error_type(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            **location,
        )

    def make_retry_decorator(self) -> Any:
        """Tenacity decorator retrying connection errors with exponential backoff."""
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(max(1, self._retries)),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release the API client's worker pool; a later call creates a new one."""
        if self._apps_v1 is not None:
            self._apps_v1.api_client.close()
            self._apps_v1 = None
        logger.debug("kubernetes_client_closed", context=self._context_name)

    def __enter__(self) -> KubernetesClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
