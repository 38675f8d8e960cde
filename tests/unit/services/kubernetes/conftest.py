"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from restart_orchestrator.integrations.kubernetes.client import KubernetesClient


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client with a mocked AppsV1 API.

    Error translation is the real one, and the retry decorator is a
    passthrough so failures surface on the first attempt.
    """
    mock_client = MagicMock()
    mock_client.timeout = 60
    mock_client.page_size = 500
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    mock_client.make_retry_decorator.return_value = lambda fn: fn
    return mock_client


@pytest.fixture
def make_workload() -> Any:
    """Factory for SDK-shaped workload objects."""

    def _make(
        name: str,
        namespace: str = "default",
        resource_version: str | None = "1",
        annotations: dict[str, str] | None = None,
        labels: dict[str, str] | None = None,
    ) -> MagicMock:
        obj = MagicMock()
        obj.metadata.name = name
        obj.metadata.namespace = namespace
        obj.metadata.resource_version = resource_version
        obj.metadata.labels = labels
        obj.spec.template.metadata.annotations = annotations
        return obj

    return _make


@pytest.fixture
def make_page() -> Any:
    """Factory for SDK-shaped list responses."""

    def _make(items: list[Any], continue_token: str | None = None) -> MagicMock:
        page = MagicMock()
        page.items = items
        page.metadata._continue = continue_token
        return page

    return _make
