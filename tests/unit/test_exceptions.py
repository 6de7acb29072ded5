"""Unit tests for custom exception classes."""

import pytest

from governance_deployments.exceptions import (
    ArtifactNotFoundError,
    BootstrapError,
    ConfigurationError,
    DeploymentError,
    OrchestrationError,
    RpcError,
    VerificationFailure,
)


class TestExceptionCatching:
    """Test that exceptions can be caught as their base types."""

    def test_catch_configuration_error_as_value_error(self):
        """Test that ConfigurationError can be caught as ValueError."""
        with pytest.raises(ValueError):
            raise ConfigurationError("test")

    def test_catch_artifact_not_found_as_file_not_found_error(self):
        """Test that ArtifactNotFoundError can be caught as FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            raise ArtifactNotFoundError("test")

    def test_catch_artifact_not_found_as_configuration_error(self):
        """Test that a missing artifact is a configuration problem."""
        with pytest.raises(ConfigurationError):
            raise ArtifactNotFoundError("test")

    def test_catch_rpc_error_as_runtime_error(self):
        """Test that RpcError can be caught as RuntimeError."""
        with pytest.raises(RuntimeError):
            raise RpcError("test")

    def test_catch_all_as_orchestration_error(self):
        """Test that all custom exceptions can be caught as OrchestrationError."""
        exceptions = [
            ConfigurationError("test"),
            ArtifactNotFoundError("test"),
            RpcError("test"),
            DeploymentError("Token", "reverted"),
            VerificationFailure("test"),
            BootstrapError("Token", "delegate", "reverted"),
        ]

        for exc in exceptions:
            with pytest.raises(OrchestrationError):
                raise exc


class TestExceptionContext:
    """Test that exceptions carry component context."""

    def test_deployment_error_carries_component_and_cause(self):
        """Test that DeploymentError keeps the component and cause in its message."""
        exc = DeploymentError("GovernanceToken", "transaction reverted")

        assert exc.component == "GovernanceToken"
        assert exc.cause == "transaction reverted"
        assert "GovernanceToken" in str(exc)
        assert "transaction reverted" in str(exc)

    def test_bootstrap_error_carries_action(self):
        """Test that BootstrapError keeps the failed action."""
        exc = BootstrapError("GovernanceToken", "delegate", "out of gas")

        assert exc.component == "GovernanceToken"
        assert exc.action == "delegate"
        assert "delegate" in str(exc)
        assert "out of gas" in str(exc)

    def test_rpc_error_keeps_code(self):
        """Test that RpcError keeps the JSON-RPC error code."""
        exc = RpcError("nonce too low", code=-32000)

        assert exc.code == -32000
        assert str(exc) == "nonce too low"

    def test_rpc_error_code_is_optional(self):
        """Test that RpcError has no code by default."""
        assert RpcError("boom").code is None
