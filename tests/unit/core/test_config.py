"""Unit tests for restart run settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from restart_orchestrator.core.config import RestartSettings
from restart_orchestrator.services.restart.models import WorkloadKind
from restart_orchestrator.services.restart.selector import RegexSelector, SubstringSelector


@pytest.mark.unit
class TestRestartSettingsDefaults:
    """Settings with nothing configured."""

    def test_defaults(self) -> None:
        settings = RestartSettings()

        assert settings.token == "database"
        assert settings.pattern is None
        assert settings.kinds == [
            WorkloadKind.DEPLOYMENT,
            WorkloadKind.STATEFUL_SET,
            WorkloadKind.DAEMON_SET,
        ]
        assert settings.conflict_retries == 0
        assert settings.kubernetes.timeout == 60

    def test_default_selector(self) -> None:
        selector = RestartSettings().build_selector()

        assert isinstance(selector, SubstringSelector)
        assert selector.matches("database-primary")


@pytest.mark.unit
class TestRestartSettingsValidation:
    """Field validation."""

    def test_kinds_parsed_and_ordered(self) -> None:
        settings = RestartSettings(kinds=["daemonsets", "Deployment", "deployment"])

        assert settings.kinds == [WorkloadKind.DEPLOYMENT, WorkloadKind.DAEMON_SET]

    def test_kinds_from_comma_string(self) -> None:
        settings = RestartSettings.model_validate({"kinds": "statefulset, deployment"})

        assert settings.kinds == [WorkloadKind.DEPLOYMENT, WorkloadKind.STATEFUL_SET]

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValidationError, match="Unsupported workload kind"):
            RestartSettings(kinds=["cronjob"])

    def test_empty_kinds(self) -> None:
        with pytest.raises(ValidationError, match="at least one workload kind"):
            RestartSettings(kinds=[])

    def test_negative_conflict_retries(self) -> None:
        with pytest.raises(ValidationError, match="conflict_retries must be non-negative"):
            RestartSettings(conflict_retries=-1)

    def test_invalid_pattern(self) -> None:
        with pytest.raises(ValidationError, match="Invalid name pattern"):
            RestartSettings(pattern="(unclosed")

    def test_empty_pattern_is_none(self) -> None:
        assert RestartSettings(pattern="").pattern is None

    def test_pattern_selector(self) -> None:
        selector = RestartSettings(pattern="^pg-").build_selector()

        assert isinstance(selector, RegexSelector)
        assert selector.matches("pg-main")

    def test_unknown_field(self) -> None:
        with pytest.raises(ValidationError):
            RestartSettings(namespace="prod")  # type: ignore[call-arg]


@pytest.mark.unit
class TestRestartSettingsFromEnv:
    """Environment overrides."""

    def test_no_env_gives_defaults(self) -> None:
        assert RestartSettings.from_env() == RestartSettings()

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTARTCTL_TOKEN", "postgres")
        monkeypatch.setenv("RESTARTCTL_KINDS", "statefulset")
        monkeypatch.setenv("RESTARTCTL_CONFLICT_RETRIES", "2")
        monkeypatch.setenv("RESTARTCTL_CONTEXT", "prod-cluster")
        monkeypatch.setenv("RESTARTCTL_TIMEOUT", "15")
        monkeypatch.setenv("RESTARTCTL_PAGE_SIZE", "100")

        settings = RestartSettings.from_env()

        assert settings.token == "postgres"
        assert settings.kinds == [WorkloadKind.STATEFUL_SET]
        assert settings.conflict_retries == 2
        assert settings.kubernetes.context == "prod-cluster"
        assert settings.kubernetes.timeout == 15
        assert settings.kubernetes.page_size == 100

    def test_empty_token_env_is_applied(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTARTCTL_TOKEN", "")

        settings = RestartSettings.from_env()

        assert settings.token == ""
        assert not settings.build_selector().matches("database-primary")

    def test_env_wins_over_base_config(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTARTCTL_PATTERN", "^mysql-")

        settings = RestartSettings.from_env({"token": "redis", "pattern": "^pg-"})

        assert settings.token == "redis"
        assert settings.pattern == "^mysql-"

    def test_kubeconfig_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTARTCTL_KUBECONFIG", "/etc/kube/config")

        assert RestartSettings.from_env().kubernetes.kubeconfig == "/etc/kube/config"

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RESTARTCTL_TIMEOUT", "0")

        with pytest.raises(ValidationError, match="timeout must be positive"):
            RestartSettings.from_env()


@pytest.mark.unit
class TestDescribeSelection:
    @pytest.mark.parametrize(
        ("kwargs", "expected"),
        [
            ({}, "name contains 'database' (case-insensitive)"),
            ({"token": " Redis "}, "name contains 'redis' (case-insensitive)"),
            ({"token": ""}, "nothing (empty token)"),
            ({"pattern": "^pg-"}, "name matches /^pg-/ (case-insensitive)"),
        ],
    )
    def test_describe(self, kwargs: dict[str, str], expected: str) -> None:
        assert RestartSettings(**kwargs).describe_selection() == expected
