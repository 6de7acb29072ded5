"""Command line interface for governance-deployments."""

import json
from pathlib import Path
from typing import Optional

import typer

from .config import RunConfig
from .constants import DEVELOPMENT_CHAINS, NETWORK_CONFIG
from .deployments import deploy_network
from .exceptions import ConfigurationError
from .logging_config import configure_logging
from .networks import load_profiles, resolve
from .plan import default_plan, load_plan, order_plans, plan_summary
from .store import DeploymentStore
from .types import RunResult, RunStatus

app = typer.Typer(
    name="governance-deploy",
    help="Deploy the governance token, time-lock and token factory",
    no_args_is_help=True,
)


def _print_records(result: RunResult) -> None:
    typer.echo(f"\nNetwork: {result.network_id}  status: {result.status.value}")
    for record in result.records:
        typer.echo(
            f"  {record.component_name:<20} {record.address or '-':<44} "
            f"state={record.state.value:<13} verified={record.verified} "
            f"bootstrap={record.bootstrap_completed}"
        )
    if result.error:
        typer.echo(f"\nFailed at {result.failed_component}: {result.error}")


@app.command("deploy")
def deploy(
    network: str = typer.Option(..., "--network", "-n", help="Target network name"),
    rpc_url: Optional[str] = typer.Option(None, help="JSON-RPC endpoint"),
    deployer: Optional[str] = typer.Option(None, help="Unlocked deployer address"),
    plan: Optional[Path] = typer.Option(None, help="JSON plan file"),
    profiles: Optional[Path] = typer.Option(None, help="JSON network profile table"),
    artifacts: Optional[str] = typer.Option(None, help="Compiler artifacts directory"),
    deployments: Optional[str] = typer.Option(None, help="Output directory"),
    fresh: bool = typer.Option(False, help="Ignore records from earlier runs"),
    log_level: str = typer.Option("INFO", help="Log level"),
    log_format: str = typer.Option("console", help="console or json"),
):
    """Deploy every component of the plan to NETWORK."""
    configure_logging(log_level, log_format)

    try:
        config = RunConfig.from_env(
            network,
            rpc_url=rpc_url,
            deployer=deployer,
            artifacts_dir=artifacts,
            deployments_dir=deployments,
            profiles=load_profiles(profiles) if profiles else None,
        )
        plans = load_plan(plan) if plan else default_plan(config.min_delay)
        result = deploy_network(config, plans=plans, resume=not fresh)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(2)

    _print_records(result)
    if result.status != RunStatus.COMPLETE:
        raise typer.Exit(1)


@app.command("networks")
def networks(
    profiles: Optional[Path] = typer.Option(None, help="JSON network profile table"),
):
    """List the configured network profiles."""
    try:
        table = load_profiles(profiles) if profiles else NETWORK_CONFIG
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(2)

    for name in sorted(table):
        profile = resolve(name, table, verification_credential="<set>")
        kind = "development" if name in DEVELOPMENT_CHAINS else "live"
        typer.echo(
            f"  {name:<12} {kind:<12} confirmations={profile.required_confirmations} "
            f"verification={'available' if profile.verification_enabled else 'off'}"
        )


@app.command("plan")
def show_plan(
    plan: Optional[Path] = typer.Option(None, help="JSON plan file"),
):
    """Print the components in deployment order."""
    try:
        plans = order_plans(load_plan(plan) if plan else default_plan())
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(2)
    typer.echo(json.dumps(plan_summary(plans), indent=2))


@app.command("show")
def show(
    network: str = typer.Option(..., "--network", "-n", help="Network name"),
    deployments: str = typer.Option("deployments", help="Output directory"),
):
    """Print records saved for NETWORK."""
    try:
        records = DeploymentStore(deployments).load(network)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(2)
    if not records:
        typer.echo(f"No deployments saved for '{network}'")
        raise typer.Exit(1)
    for record in records.values():
        typer.echo(json.dumps(record.to_dict(), indent=2))


def main():
    app()


if __name__ == "__main__":
    main()
