"""Data types and dataclasses for governance-deployments library."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import ConfigurationError


class ComponentState(Enum):
    """Lifecycle of a single component within a run."""

    PENDING = "pending"
    DEPLOYING = "deploying"
    DEPLOYED = "deployed"
    VERIFYING = "verifying"
    BOOTSTRAPPING = "bootstrapping"
    COMPLETE = "complete"
    FAILED = "failed"


class RunStatus(Enum):
    """Terminal status of a deployment run."""

    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class NetworkProfile:
    """Operational parameters for one target network."""

    network_id: str
    required_confirmations: int = 1
    verification_enabled: bool = False
    chain_id: Optional[int] = None
    explorer_api_url: Optional[str] = None
    instant_finality: bool = False

    def __post_init__(self):
        if isinstance(self.required_confirmations, bool) or not isinstance(
            self.required_confirmations, int
        ):
            raise ConfigurationError(
                f"required_confirmations for '{self.network_id}' must be an integer"
            )
        if self.required_confirmations < 1:
            raise ConfigurationError(
                f"required_confirmations for '{self.network_id}' must be >= 1, "
                f"got {self.required_confirmations}"
            )


@dataclass(frozen=True)
class AddressRef:
    """Constructor-argument template resolving to a prior component's address."""

    component: str


class _Deployer:
    """Template resolving to the deployer identity."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DEPLOYER"


DEPLOYER = _Deployer()


def _collect_refs(value: Any, found: List[str]) -> None:
    if isinstance(value, AddressRef):
        if value.component not in found:
            found.append(value.component)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_refs(item, found)


def template_dependencies(values: Any) -> List[str]:
    """
    Collect component names referenced by AddressRef templates.

    Args:
        values: Template value or (nested) sequence of template values

    Returns:
        Referenced component names in first-seen order
    """
    found: List[str] = []
    _collect_refs(values, found)
    return found


@dataclass(frozen=True)
class BootstrapAction:
    """Named post-deploy call on the deployed component, e.g. delegate(deployer)."""

    name: str
    args: Tuple[Any, ...] = ()


@dataclass(frozen=True)
class ComponentPlan:
    """Unresolved component entry from the deployment plan."""

    name: str
    constructor_args: Tuple[Any, ...] = ()
    bootstrap: Optional[BootstrapAction] = None
    artifact: Optional[str] = None  # Contract name in artifacts, defaults to name

    @property
    def dependencies(self) -> List[str]:
        """Components whose addresses this plan needs before it can be deployed."""
        deps = template_dependencies(self.constructor_args)
        if self.bootstrap is not None:
            for dep in template_dependencies(self.bootstrap.args):
                if dep not in deps:
                    deps.append(dep)
        return deps


@dataclass(frozen=True)
class ComponentSpec:
    """Fully resolved component, ready to be submitted. Immutable once submitted."""

    name: str
    constructor_args: Tuple[Any, ...]
    deployer_identity: str
    artifact: Optional[str] = None
    bootstrap: Optional[BootstrapAction] = None
    dependencies: Tuple[str, ...] = ()

    @property
    def contract_name(self) -> str:
        return self.artifact or self.name


@dataclass
class DeploymentRecord:
    """Audit record of one component deployment within a run."""

    # Required fields
    component_name: str
    address: Optional[str]  # None until the deployment is observed on chain
    confirmations_observed: int = 0

    # Step flags
    verified: bool = False
    bootstrap_completed: bool = False

    # Optional fields
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None
    constructor_args: List[Any] = field(default_factory=list)
    contract_name: Optional[str] = None
    state: ComponentState = ComponentState.PENDING
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view used for the run output."""
        return {
            "component": self.component_name,
            "contract": self.contract_name or self.component_name,
            "address": self.address,
            "confirmations": self.confirmations_observed,
            "verified": self.verified,
            "bootstrap_completed": self.bootstrap_completed,
            "transaction_hash": self.transaction_hash,
            "block_number": self.block_number,
            "constructor_args": self.constructor_args,
            "state": self.state.value,
            "error": self.error,
        }


@dataclass(frozen=True)
class VerificationRequest:
    """Payload submitted to the source verification service."""

    address: str
    constructor_args: Tuple[Any, ...]
    contract_name: str


@dataclass
class RunResult:
    """Outcome of a deployment run: ordered records plus terminal status."""

    network_id: str
    status: RunStatus
    records: List[DeploymentRecord]
    failed_component: Optional[str] = None
    error: Optional[str] = None

    def record(self, component_name: str) -> DeploymentRecord:
        """Look up a record by component name."""
        for record in self.records:
            if record.component_name == component_name:
                return record
        raise KeyError(component_name)

    def addresses(self) -> Dict[str, str]:
        """Map component name -> address for every component observed on chain."""
        return {r.component_name: r.address for r in self.records if r.address}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "network": self.network_id,
            "status": self.status.value,
            "failed_component": self.failed_component,
            "error": self.error,
            "records": [r.to_dict() for r in self.records],
        }
