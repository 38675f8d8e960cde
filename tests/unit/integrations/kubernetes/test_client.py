"""Unit tests for Kubernetes client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client import ApiException
from urllib3.exceptions import ProtocolError
from urllib3.exceptions import TimeoutError as Urllib3TimeoutError

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
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKubernetesClientInitialization:
    """Test KubernetesClient initialization."""

    @patch("kubernetes.config")
    def test_init_with_default_config(self, mock_config: MagicMock) -> None:
        """The kubeconfig's current context is used when none is given."""
        config = KubernetesConnectionConfig()
        client = KubernetesClient(config)

        assert client._config == config
        assert client._retries == 3
        mock_config.load_kube_config.assert_called_once_with(config_file=None, context=None)
        assert client.context_name == "current-context"

    @patch("kubernetes.config")
    def test_init_with_explicit_context(self, mock_config: MagicMock) -> None:
        config = KubernetesConnectionConfig(context="staging", kubeconfig="/path/to/config")
        client = KubernetesClient(config)

        mock_config.load_kube_config.assert_called_once_with(
            config_file="/path/to/config",
            context="staging",
        )
        assert client.context_name == "staging"

    @patch("kubernetes.config")
    def test_init_fallback_to_incluster(self, mock_config: MagicMock) -> None:
        """Client falls back to the service account when no kubeconfig loads."""
        from kubernetes.config import ConfigException

        mock_config.load_kube_config.side_effect = ConfigException("Not found")
        mock_config.load_incluster_config.return_value = None

        client = KubernetesClient(KubernetesConnectionConfig())

        mock_config.load_incluster_config.assert_called_once()
        assert client.context_name == "in-cluster"

    @patch("kubernetes.config")
    def test_init_connection_error(self, mock_config: MagicMock) -> None:
        """No kubeconfig and no in-cluster config is a connection error."""
        from kubernetes.config import ConfigException

        mock_config.load_kube_config.side_effect = ConfigException("No config")
        mock_config.load_incluster_config.side_effect = ConfigException("Not in cluster")

        with pytest.raises(KubernetesConnectionError) as exc_info:
            KubernetesClient(KubernetesConnectionConfig())

        assert "Cannot load Kubernetes configuration" in str(exc_info.value)
        assert isinstance(exc_info.value.original_error, ConfigException)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKubernetesClientProperties:
    """Test lazy API creation and configuration passthrough."""

    @patch("kubernetes.config")
    def test_apps_v1_lazy_loading(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig())

        assert client._apps_v1 is None
        with patch("kubernetes.client.AppsV1Api") as mock_api:
            first = client.apps_v1
            second = client.apps_v1

        mock_api.assert_called_once()
        assert first is second

    @patch("kubernetes.config")
    def test_timeout_and_page_size(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig(timeout=15, page_size=50))

        assert client.timeout == 15
        assert client.page_size == 50

    @patch("kubernetes.config")
    def test_context_manager_closes_api_client(self, mock_config: MagicMock) -> None:
        api = MagicMock()
        with KubernetesClient(KubernetesConnectionConfig()) as client:
            client._apps_v1 = api

        api.api_client.close.assert_called_once()
        assert client._apps_v1 is None

    @patch("kubernetes.config")
    def test_close_without_api_is_noop(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig())

        client.close()
        client.close()

        assert client._apps_v1 is None


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTranslateApiException:
    """Test mapping of client exceptions onto the error taxonomy."""

    def _translate(self, status: int, reason: str = "reason") -> KubernetesError:
        return KubernetesClient.translate_api_exception(
            ApiException(status=status, reason=reason),
            resource_type="Deployment",
            resource_name="database-primary",
            namespace="prod",
        )

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_errors(self, status: int) -> None:
        error = self._translate(status, "Forbidden")
        assert isinstance(error, KubernetesAuthError)
        assert error.status_code == status

    def test_not_found(self) -> None:
        error = self._translate(404)
        assert isinstance(error, KubernetesNotFoundError)
        assert error.resource_name == "database-primary"
        assert error.namespace == "prod"

    def test_conflict(self) -> None:
        error = self._translate(409)
        assert isinstance(error, KubernetesConflictError)
        assert error.resource_type == "Deployment"

    @pytest.mark.parametrize("status", [400, 422])
    def test_validation(self, status: int) -> None:
        error = self._translate(status, "Invalid")
        assert isinstance(error, KubernetesValidationError)
        assert error.status_code == status

    @pytest.mark.parametrize("status", [429, 500, 503])
    def test_transient(self, status: int) -> None:
        error = self._translate(status, "Unavailable")
        assert type(error) is KubernetesTransientError
        assert error.status_code == status

    def test_other_status_is_generic(self) -> None:
        error = self._translate(418, "Teapot")
        assert type(error) is KubernetesError
        assert error.message == "Teapot"

    def test_urllib3_timeout(self) -> None:
        error = KubernetesClient.translate_api_exception(Urllib3TimeoutError("read timed out"))
        assert isinstance(error, KubernetesTimeoutError)

    def test_urllib3_transport_error(self) -> None:
        original = ProtocolError("Connection aborted")
        error = KubernetesClient.translate_api_exception(original)
        assert isinstance(error, KubernetesConnectionError)
        assert error.original_error is original

    def test_kubernetes_error_passes_through(self) -> None:
        original = KubernetesConflictError()
        assert KubernetesClient.translate_api_exception(original) is original

    def test_unknown_exception(self) -> None:
        error = KubernetesClient.translate_api_exception(RuntimeError("weird"))
        assert type(error) is KubernetesError
        assert error.message == "weird"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestRetryDecorator:
    """Test the connection-error retry policy."""

    @patch("kubernetes.config")
    def test_retries_connection_errors(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig(retry_attempts=3))
        fn = MagicMock(side_effect=[KubernetesConnectionError(), "page"])

        with patch("time.sleep"):
            result = client.make_retry_decorator()(fn)()

        assert result == "page"
        assert fn.call_count == 2

    @patch("kubernetes.config")
    def test_gives_up_after_attempts(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig(retry_attempts=2))
        fn = MagicMock(side_effect=KubernetesConnectionError("down"))

        with patch("time.sleep"), pytest.raises(KubernetesConnectionError, match="down"):
            client.make_retry_decorator()(fn)()

        assert fn.call_count == 2

    @patch("kubernetes.config")
    def test_does_not_retry_other_errors(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig())
        fn = MagicMock(side_effect=KubernetesAuthError())

        with pytest.raises(KubernetesAuthError):
            client.make_retry_decorator()(fn)()

        fn.assert_called_once()

    @patch("kubernetes.config")
    def test_zero_attempts_still_calls_once(self, mock_config: MagicMock) -> None:
        client = KubernetesClient(KubernetesConnectionConfig(retry_attempts=0))
        fn = MagicMock(side_effect=KubernetesConnectionError())

        with pytest.raises(KubernetesConnectionError):
            client.make_retry_decorator()(fn)()

        fn.assert_called_once()
