"""
governance-deployments: orchestrates deployment of governance contracts
"""

from importlib.metadata import PackageNotFoundError, version

from .config import RunConfig
from .deployments import deploy_from_env, deploy_network
from .exceptions import (
    ArtifactNotFoundError,
    BootstrapError,
    ConfigurationError,
    DeploymentError,
    OrchestrationError,
    RpcError,
    VerificationFailure,
)
from .networks import resolve
from .orchestrator import Orchestrator
from .plan import default_plan, load_plan
from .types import (
    DEPLOYER,
    AddressRef,
    BootstrapAction,
    ComponentPlan,
    ComponentSpec,
    ComponentState,
    DeploymentRecord,
    NetworkProfile,
    RunResult,
    RunStatus,
)

try:
    __version__ = version("governance-deployments")
except PackageNotFoundError:
    __version__ = None

__all__ = [
    "Orchestrator",
    "RunConfig",
    "deploy_network",
    "deploy_from_env",
    "resolve",
    "default_plan",
    "load_plan",
    "DEPLOYER",
    "AddressRef",
    "BootstrapAction",
    "ComponentPlan",
    "ComponentSpec",
    "ComponentState",
    "DeploymentRecord",
    "NetworkProfile",
    "RunResult",
    "RunStatus",
    "OrchestrationError",
    "ConfigurationError",
    "ArtifactNotFoundError",
    "RpcError",
    "DeploymentError",
    "VerificationFailure",
    "BootstrapError",
]
