"""Shared pytest fixtures for restart_orchestrator tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path

import pytest
import structlog
import typer
from typer.testing import CliRunner

from restart_orchestrator.cli.main import app


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset environment variables for each test."""
    # Clear any RESTARTCTL_ prefixed environment variables
    for key in list(os.environ.keys()):
        if key.startswith("RESTARTCTL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def isolate_logging(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None]:
    """Keep log files in a temp dir and undo logging configuration afterwards."""
    log_dir = tmp_path / "logs"
    monkeypatch.setattr("restart_orchestrator.logging.config.LOG_DIR", log_dir)
    monkeypatch.setattr("restart_orchestrator.logging.config.LOG_FILE", log_dir / "restartctl.log")

    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    yield
    for handler in root.handlers:
        if handler not in original_handlers:
            handler.close()
    root.handlers = original_handlers
    root.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture
def cli_app() -> typer.Typer:
    """Return the CLI app for testing."""
    return app
