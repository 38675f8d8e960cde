"""Kubernetes service module: per-kind workload access over the AppsV1 API."""

from restart_orchestrator.services.kubernetes.base import K8sBaseManager
from restart_orchestrator.services.kubernetes.workload_api import (
    KubernetesWorkloadApi,
    WorkloadApi,
    build_workload_apis,
)

__all__ = [
    "K8sBaseManager",
    "KubernetesWorkloadApi",
    "WorkloadApi",
    "build_workload_apis",
]
