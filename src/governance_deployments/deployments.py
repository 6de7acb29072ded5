"""Main API for governance-deployments library."""

from pathlib import Path
from typing import Any, Optional, Sequence

import structlog

from .config import RunConfig
from .orchestrator import Orchestrator
from .store import DeploymentStore
from .types import ComponentPlan, RunResult

logger = structlog.get_logger()


def deploy_network(
    config: RunConfig,
    plans: Optional[Sequence[ComponentPlan]] = None,
    resume: bool = True,
) -> RunResult:
    """
    Deploy the plan to a network and persist the records.

    Args:
        config: Run configuration
        plans: Component plans (defaults to the governance plan)
        resume: Reuse records saved by an earlier run on the same network

    Returns:
        RunResult; records are also written under config.deployments_dir

    Raises:
        ConfigurationError: If the run cannot start
    """
    store = DeploymentStore(Path(config.deployments_dir))
    previous = store.load(config.network) if resume else {}
    if previous:
        logger.info(
            "previous_records_loaded",
            network=config.network,
            components=sorted(previous),
        )

    orchestrator = Orchestrator(config, store=store)
    return orchestrator.run(plans=plans, previous=previous)


def deploy_from_env(
    network: str,
    plans: Optional[Sequence[ComponentPlan]] = None,
    resume: bool = True,
    **overrides: Any,
) -> RunResult:
    """
    Deploy using configuration from the environment.

    Args:
        network: Target network name
        plans: Component plans (defaults to the governance plan)
        resume: Reuse records saved by an earlier run
        **overrides: RunConfig fields taking precedence over the environment

    Returns:
        RunResult
    """
    return deploy_network(RunConfig.from_env(network, **overrides), plans=plans, resume=resume)
