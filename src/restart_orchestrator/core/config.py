"""Run settings for a restart pass.

Settings are supplied once at start from environment variables and CLI
options; nothing is persisted between runs.
"""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from restart_orchestrator.integrations.kubernetes.config import KubernetesConnectionConfig
from restart_orchestrator.services.restart.models import WorkloadKind
from restart_orchestrator.services.restart.selector import (
    DEFAULT_TOKEN,
    Selector,
    build_selector,
)

ENV_PREFIX = "RESTARTCTL_"


class RestartSettings(BaseModel):
    """Complete configuration of one restart pass."""

    model_config = ConfigDict(extra="forbid")

    token: str = DEFAULT_TOKEN
    pattern: str | None = None
    kinds: list[WorkloadKind] = list(WorkloadKind)
    conflict_retries: int = 0
    kubernetes: KubernetesConnectionConfig = KubernetesConnectionConfig()

    @field_validator("kinds", mode="before")
    @classmethod
    def parse_kinds(cls, v: Any) -> Any:
        """Accept kind names in any case, singular or plural."""
        if isinstance(v, str):
            v = [part for part in v.split(",") if part.strip()]
        if isinstance(v, list | tuple | set):
            return [
                item if isinstance(item, WorkloadKind) else WorkloadKind.parse(item) for item in v
            ]
        return v

    @field_validator("kinds")
    @classmethod
    def validate_kinds(cls, v: list[WorkloadKind]) -> list[WorkloadKind]:
        """Deduplicate and put kinds in the fixed processing order."""
        if not v:
            raise ValueError("at least one workload kind is required")
        return [kind for kind in WorkloadKind if kind in v]

    @field_validator("conflict_retries")
    @classmethod
    def validate_conflict_retries(cls, v: int) -> int:
        """Validate conflict_retries is non-negative."""
        if v < 0:
            raise ValueError("conflict_retries must be non-negative")
        return v

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str | None) -> str | None:
        """Reject patterns that do not compile."""
        if v:
            build_selector(pattern=v)
        return v or None

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> RestartSettings:
        """Create settings with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            RESTARTCTL_TOKEN: Case-insensitive name token (default "database")
            RESTARTCTL_PATTERN: Regular expression, takes precedence over the token
            RESTARTCTL_KINDS: Comma-separated kinds to process
            RESTARTCTL_CONFLICT_RETRIES: Extra attempts after a write conflict
            RESTARTCTL_CONTEXT: Kubeconfig context
            RESTARTCTL_KUBECONFIG: Kubeconfig path
            RESTARTCTL_TIMEOUT: Per-request timeout in seconds
            RESTARTCTL_PAGE_SIZE: Page size for list calls
        """
        config_dict = base_config.copy() if base_config else {}
        kube = dict(config_dict.get("kubernetes") or {})

        if (token := os.environ.get(f"{ENV_PREFIX}TOKEN")) is not None:
            config_dict["token"] = token

        if pattern := os.environ.get(f"{ENV_PREFIX}PATTERN"):
            config_dict["pattern"] = pattern

        if kinds := os.environ.get(f"{ENV_PREFIX}KINDS"):
            config_dict["kinds"] = kinds

        if retries := os.environ.get(f"{ENV_PREFIX}CONFLICT_RETRIES"):
            config_dict["conflict_retries"] = int(retries)

        if context := os.environ.get(f"{ENV_PREFIX}CONTEXT"):
            kube["context"] = context

        if kubeconfig := os.environ.get(f"{ENV_PREFIX}KUBECONFIG"):
            kube["kubeconfig"] = kubeconfig

        if timeout := os.environ.get(f"{ENV_PREFIX}TIMEOUT"):
            kube["timeout"] = int(timeout)

        if page_size := os.environ.get(f"{ENV_PREFIX}PAGE_SIZE"):
            kube["page_size"] = int(page_size)

        config_dict["kubernetes"] = kube
        return cls.model_validate(config_dict)

    def build_selector(self) -> Selector:
        """Selector for these settings."""
        return build_selector(token=self.token, pattern=self.pattern)

    def describe_selection(self) -> str:
        """Human-readable description of the selection policy."""
        if self.pattern:
            return f"name matches /{self.pattern}/ (case-insensitive)"
        if not self.token.strip():
            return "nothing (empty token)"
        return f"name contains '{self.token.strip().lower()}' (case-insensitive)"
