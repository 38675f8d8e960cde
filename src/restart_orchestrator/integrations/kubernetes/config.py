"""Kubernetes connection configuration model."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class KubernetesConnectionConfig(BaseModel):
    """How to reach the cluster and how hard to try.

    An empty ``context`` means the kubeconfig's current context; a ``None``
    ``kubeconfig`` lets the kubernetes client auto-detect (``KUBECONFIG`` or
    ``~/.kube/config``), falling back to in-cluster service account config.
    """

    model_config = ConfigDict(extra="forbid")

    context: str = ""
    kubeconfig: str | None = None
    timeout: int = 60
    retry_attempts: int = 3
    page_size: int = 500

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        if not v:
            return None
        return str(Path(v).expanduser())

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is non-negative."""
        if v < 0:
            raise ValueError("retry_attempts must be non-negative")
        return v

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Validate page_size is positive."""
        if v <= 0:
            raise ValueError("page_size must be positive")
        return v
