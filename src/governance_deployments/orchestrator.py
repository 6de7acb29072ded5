"""Orchestrator: deploys the component plan for one network, in dependency order."""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import structlog
from eth_utils import is_address, to_checksum_address

from .bootstrap import BootstrapRunner
from .config import RunConfig
from .exceptions import (
    BootstrapError,
    ConfigurationError,
    DeploymentError,
    RpcError,
)
from .executor import ArtifactCache, DeploymentExecutor
from .networks import resolve
from .parsers import constructor_types
from .plan import default_plan, order_plans, resolve_plan
from .rpc import JsonRpcClient
from .store import DeploymentStore
from .types import (
    ComponentPlan,
    ComponentSpec,
    ComponentState,
    DeploymentRecord,
    NetworkProfile,
    RunResult,
    RunStatus,
)
from .verification import EtherscanClient, VerificationSubmitter

logger = structlog.get_logger()


def normalize_args(value: Any) -> Any:
    """Canonical form of constructor arguments for comparing saved and planned values."""
    if isinstance(value, (list, tuple)):
        return [normalize_args(v) for v in value]
    if isinstance(value, str) and is_address(value):
        return to_checksum_address(value)
    return value


class Orchestrator:
    """
    Sequences deployment, verification and bootstrap for every component.

    One flow of control per run: components are processed strictly one at a
    time in dependency order. The first failure halts the run; nothing is
    retried or rolled back, and the records collected so far are the audit
    output.
    """

    def __init__(
        self,
        config: RunConfig,
        client: Optional[JsonRpcClient] = None,
        executor: Optional[DeploymentExecutor] = None,
        verifier: Optional[VerificationSubmitter] = None,
        bootstrapper: Optional[BootstrapRunner] = None,
        store: Optional[DeploymentStore] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Explicit run configuration
            client: JSON-RPC client (defaults to one for config.rpc_url)
            executor: Deployment executor override
            verifier: Verification submitter override (built on demand when
                the network profile enables verification)
            bootstrapper: Bootstrap runner override
            store: Where records are persisted after each step (optional)
        """
        self.config = config
        self.client = client or JsonRpcClient(config.rpc_url)
        self.artifacts = ArtifactCache(config.artifacts_dir)
        self.executor = executor or DeploymentExecutor(
            self.client, self.artifacts, config.poll_interval
        )
        self.bootstrapper = bootstrapper or BootstrapRunner(
            self.client, self.artifacts, config.poll_interval
        )
        self.verifier = verifier
        self.store = store

        self.states: Dict[str, ComponentState] = {}
        self.transitions: List[Tuple[str, ComponentState]] = []

    def _transition(self, name: str, state: ComponentState) -> None:
        self.states[name] = state
        self.transitions.append((name, state))
        logger.info("component_state", component=name, state=state.value)

    def _persist(self, profile: NetworkProfile, record: DeploymentRecord) -> None:
        if self.store is None:
            return
        abi = None
        try:
            abi = self.artifacts.get(record.contract_name or record.component_name)["abi"]
        except ConfigurationError:
            pass
        self.store.save_record(profile.network_id, record, abi=abi)

    def _build_verifier(self, profile: NetworkProfile) -> VerificationSubmitter:
        if self.verifier is not None:
            return self.verifier
        client = None
        if profile.verification_enabled:
            if not profile.explorer_api_url:
                raise ConfigurationError(
                    f"Verification is enabled for '{profile.network_id}' "
                    "but no explorer_api_url is configured"
                )
            client = EtherscanClient(
                profile.explorer_api_url,
                self.config.verification_api_key,
                chain_id=profile.chain_id,
            )
        self.verifier = VerificationSubmitter(client, self.artifacts)
        return self.verifier

    def _resolve_deployer(self) -> str:
        deployer = self.config.deployer
        if deployer is None:
            try:
                accounts = self.client.accounts()
            except RpcError as e:
                raise ConfigurationError(f"Cannot list node accounts: {e}") from e
            if not accounts:
                raise ConfigurationError(
                    "No deployer configured and the node exposes no unlocked accounts"
                )
            deployer = accounts[0]
        try:
            return to_checksum_address(deployer)
        except ValueError as e:
            raise ConfigurationError(f"Invalid deployer address '{deployer}'") from e

    def _preflight(self, plans: Sequence[ComponentPlan]) -> None:
        # Every artifact and call shape is checked before any transaction is sent
        for plan in plans:
            artifact = self.artifacts.get(plan.artifact or plan.name)
            expected = constructor_types(artifact["abi"])
            if len(expected) != len(plan.constructor_args):
                raise ConfigurationError(
                    f"Component '{plan.name}' constructor expects {len(expected)} "
                    f"arguments, plan provides {len(plan.constructor_args)}"
                )
            if plan.bootstrap is not None:
                arity = len(plan.bootstrap.args)
                if not any(
                    item.get("type") == "function"
                    and item.get("name") == plan.bootstrap.name
                    and len(item.get("inputs", [])) == arity
                    for item in artifact["abi"]
                ):
                    raise ConfigurationError(
                        f"Component '{plan.name}' has no function "
                        f"'{plan.bootstrap.name}' taking {arity} arguments"
                    )

    def _has_code(self, address: str) -> bool:
        code = self.client.get_code(address)
        return bool(code) and code != "0x"

    def _live_external_addresses(
        self,
        plans: Sequence[ComponentPlan],
        previous: Mapping[str, DeploymentRecord],
    ) -> Dict[str, str]:
        """
        Addresses of saved components the plan references but does not deploy.

        Only addresses with contract code are returned.

        Raises:
            ConfigurationError: If a referenced saved address has no code or
                cannot be checked
        """
        names = {p.name for p in plans}
        addresses: Dict[str, str] = {}
        for plan in plans:
            for dep in plan.dependencies:
                if dep in names or dep in addresses:
                    continue
                prior = previous.get(dep)
                if prior is None or not prior.address:
                    continue
                try:
                    live = self._has_code(prior.address)
                except RpcError as e:
                    raise ConfigurationError(
                        f"Cannot check saved address {prior.address} of '{dep}': {e}"
                    ) from e
                if not live:
                    raise ConfigurationError(
                        f"Component '{plan.name}' references '{dep}', whose saved "
                        f"address {prior.address} has no contract code"
                    )
                addresses[dep] = prior.address
        return addresses

    def _reusable(self, prior: Optional[DeploymentRecord], spec: ComponentSpec) -> bool:
        if prior is None or not prior.address:
            return False
        try:
            live = self._has_code(prior.address)
        except RpcError as e:
            raise DeploymentError(spec.name, f"cannot check saved address {prior.address}: {e}") from e
        if not live:
            logger.warning("saved_deployment_stale", component=spec.name, address=prior.address)
            return False

        # A dependency redeployed in this run or a changed plan argument
        # means the saved instance was built from different inputs
        if normalize_args(prior.constructor_args) != normalize_args(spec.constructor_args):
            logger.warning(
                "saved_deployment_changed",
                component=spec.name,
                address=prior.address,
                saved_args=normalize_args(prior.constructor_args),
                planned_args=normalize_args(spec.constructor_args),
            )
            return False
        return True

    def _fail(
        self,
        profile: NetworkProfile,
        records: List[DeploymentRecord],
        record: DeploymentRecord,
        error: Exception,
    ) -> RunResult:
        record.state = ComponentState.FAILED
        record.error = str(error)
        self._transition(record.component_name, ComponentState.FAILED)
        self._persist(profile, record)
        logger.error("run_failed", component=record.component_name, error=str(error))
        result = RunResult(
            network_id=profile.network_id,
            status=RunStatus.FAILED,
            records=records,
            failed_component=record.component_name,
            error=str(error),
        )
        if self.store is not None:
            self.store.save_summary(result)
        return result

    def run(
        self,
        plans: Optional[Sequence[ComponentPlan]] = None,
        previous: Optional[Mapping[str, DeploymentRecord]] = None,
    ) -> RunResult:
        """
        Deploy every component of the plan on the configured network.

        Args:
            plans: Component plans (defaults to default_plan())
            previous: Records from an earlier run; a component whose saved
                address has code and whose saved constructor arguments
                match the resolved ones is not redeployed, and a saved
                component whose bootstrap never completed resumes at
                bootstrap. Saved components outside the plan supply
                addresses only if their code is live.

        Returns:
            RunResult with records in visit order. Status is COMPLETE only
            if every component reached COMPLETE.

        Raises:
            ConfigurationError: Before any on-chain action, if the network,
                plan, artifacts, deployer or referenced saved addresses are
                invalid
        """
        profile = resolve(
            self.config.network,
            self.config.profiles,
            self.config.verification_api_key,
        )
        if plans is None:
            plans = default_plan(self.config.min_delay)
        previous = dict(previous or {})

        ordered = order_plans(plans, known=[n for n, r in previous.items() if r.address])
        self._preflight(ordered)
        verifier = self._build_verifier(profile)
        deployer = self._resolve_deployer()
        addresses = self._live_external_addresses(ordered, previous)

        logger.info(
            "run_started",
            network=profile.network_id,
            deployer=deployer,
            confirmations=profile.required_confirmations,
            verification=profile.verification_enabled,
            components=[p.name for p in ordered],
        )

        records: List[DeploymentRecord] = []

        for plan in ordered:
            self._transition(plan.name, ComponentState.PENDING)
            prior = previous.get(plan.name)

            try:
                spec = resolve_plan(plan, deployer, addresses)
            except ConfigurationError as e:
                record = DeploymentRecord(component_name=plan.name, address=None)
                records.append(record)
                return self._fail(profile, records, record, e)

            try:
                reuse = self._reusable(prior, spec)
            except DeploymentError as e:
                record = prior
                records.append(record)
                return self._fail(profile, records, record, e)

            if reuse:
                record = prior
                record.contract_name = record.contract_name or spec.contract_name
                logger.info("component_reused", component=plan.name, address=record.address)
                if record.state == ComponentState.COMPLETE and (
                    spec.bootstrap is None or record.bootstrap_completed
                ):
                    records.append(record)
                    addresses[plan.name] = record.address
                    self._transition(plan.name, ComponentState.COMPLETE)
                    continue
            else:
                self._transition(plan.name, ComponentState.DEPLOYING)
                try:
                    record = self.executor.deploy(spec, profile)
                except (DeploymentError, ConfigurationError) as e:
                    record = DeploymentRecord(
                        component_name=plan.name,
                        address=None,
                        constructor_args=list(spec.constructor_args),
                        contract_name=spec.contract_name,
                    )
                    records.append(record)
                    return self._fail(profile, records, record, e)

            records.append(record)
            addresses[plan.name] = record.address
            record.state = ComponentState.DEPLOYED
            record.error = None
            self._transition(plan.name, ComponentState.DEPLOYED)
            self._persist(profile, record)

            if profile.verification_enabled and not record.verified:
                record.state = ComponentState.VERIFYING
                self._transition(plan.name, ComponentState.VERIFYING)
                self._persist(profile, record)
                verifier.verify(record, spec, profile)
                record.state = ComponentState.DEPLOYED
                self._transition(plan.name, ComponentState.DEPLOYED)
                self._persist(profile, record)

            if spec.bootstrap is not None:
                self._transition(plan.name, ComponentState.BOOTSTRAPPING)
                record.state = ComponentState.BOOTSTRAPPING
                try:
                    self.bootstrapper.run_bootstrap(
                        record, spec, spec.bootstrap.name, spec.bootstrap.args
                    )
                except (BootstrapError, ConfigurationError) as e:
                    return self._fail(profile, records, record, e)

            record.state = ComponentState.COMPLETE
            self._transition(plan.name, ComponentState.COMPLETE)
            self._persist(profile, record)

        result = RunResult(
            network_id=profile.network_id,
            status=RunStatus.COMPLETE,
            records=records,
        )
        if self.store is not None:
            self.store.save_summary(result)
        logger.info("run_completed", network=profile.network_id, components=len(records))
        return result
