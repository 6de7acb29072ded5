"""Custom exception classes for governance-deployments library."""

from typing import Optional


class OrchestrationError(Exception):
    """Base exception for deployment orchestration errors."""

    pass


class ConfigurationError(OrchestrationError, ValueError):
    """Raised when a network profile, plan or run configuration is missing or invalid."""

    pass


class ArtifactNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when a compiled contract artifact cannot be located."""

    pass


class RpcError(OrchestrationError, RuntimeError):
    """Raised when the JSON-RPC endpoint fails or returns an error object."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


class DeploymentError(OrchestrationError, RuntimeError):
    """Raised when a deployment transaction is rejected, reverts or produces no code."""

    def __init__(self, component: str, cause: str):
        super().__init__(f"Deployment of '{component}' failed: {cause}")
        self.component = component
        self.cause = cause


class VerificationFailure(OrchestrationError, RuntimeError):
    """Raised by the explorer client; downgraded to a warning by the submitter."""

    pass


class BootstrapError(OrchestrationError, RuntimeError):
    """Raised when a post-deploy bootstrap call reverts or cannot be confirmed."""

    def __init__(self, component: str, action: str, cause: str):
        super().__init__(f"Bootstrap action '{action}' on '{component}' failed: {cause}")
        self.component = component
        self.action = action
        self.cause = cause
