"""Kubernetes integration - API client, connection config, and error taxonomy."""

from restart_orchestrator.integrations.kubernetes.client import KubernetesClient
from restart_orchestrator.integrations.kubernetes.config import KubernetesConnectionConfig
from restart_orchestrator.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesTransientError,
    KubernetesValidationError,
    WorkloadListingError,
)

__all__ = [
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionConfig",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesTimeoutError",
    "KubernetesTransientError",
    "KubernetesValidationError",
    "WorkloadListingError",
]
