"""Base manager for Kubernetes service managers.

Provides shared client access, structured log binding, and error
translation for the per-kind workload APIs.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, NoReturn

import structlog

if TYPE_CHECKING:
    from restart_orchestrator.integrations.kubernetes.client import KubernetesClient

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Subclasses set ``_entity_name`` for structured log context and may pass
    extra context to bind on the logger.
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient, **log_context: Any) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
            **log_context: Extra values bound on every log event.
        """
        self._client = client
        self._log = logger.bind(entity=self._entity_name, **log_context)

    def _handle_api_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> NoReturn:
        """Translate a Kubernetes API exception and re-raise.

        Args:
            e: The original exception (typically ApiException).
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Raises:
            KubernetesError: Always raises an appropriate subclass.
        """
        raise self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        ) from e
