"""Deployment plan: component templates, resolution and ordering."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .constants import (
    ADDRESS_TEMPLATE_PREFIX,
    DEPLOYER_TEMPLATE,
    GOVERNANCE_TOKEN,
    MIN_DELAY,
    TIME_LOCK,
    TOKEN_FACTORY,
)
from .exceptions import ConfigurationError
from .types import DEPLOYER, AddressRef, BootstrapAction, ComponentPlan, ComponentSpec


def default_plan(min_delay: int = MIN_DELAY) -> List[ComponentPlan]:
    """
    Build the standard governance deployment plan.

    The token needs an initial self-delegation so the deployer's voting
    weight is checkpointed; the factory is constructed with the token address.

    Args:
        min_delay: Time-lock delay in seconds

    Returns:
        Ordered list of component plans
    """
    return [
        ComponentPlan(
            name=GOVERNANCE_TOKEN,
            constructor_args=(),
            bootstrap=BootstrapAction("delegate", (DEPLOYER,)),
        ),
        ComponentPlan(
            name=TIME_LOCK,
            constructor_args=(min_delay, (), (), DEPLOYER),
        ),
        ComponentPlan(
            name=TOKEN_FACTORY,
            constructor_args=(AddressRef(GOVERNANCE_TOKEN),),
        ),
    ]


def _parse_template(value: Any) -> Any:
    if isinstance(value, str):
        if value == DEPLOYER_TEMPLATE:
            return DEPLOYER
        if value.startswith(ADDRESS_TEMPLATE_PREFIX):
            return AddressRef(value[len(ADDRESS_TEMPLATE_PREFIX):])
        return value
    if isinstance(value, list):
        return tuple(_parse_template(v) for v in value)
    return value


def load_plan(path: Union[Path, str]) -> List[ComponentPlan]:
    """
    Load a deployment plan from JSON.

    Format: a list of objects with "name", optional "args", optional
    "artifact" and optional "bootstrap": {"action": str, "args": list}.
    The string "$deployer" stands for the deployer identity and "@Name"
    for the address of a previously deployed component.

    Args:
        path: Path to the JSON plan file

    Returns:
        List of component plans in declaration order

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError(f"Plan file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Plan file is not valid JSON: {path}") from e

    if not isinstance(data, list):
        raise ConfigurationError(f"Plan file must contain a list of components: {path}")

    plans = []
    for entry in data:
        if not isinstance(entry, dict) or "name" not in entry:
            raise ConfigurationError(f"Plan entry without a name in {path}: {entry!r}")

        bootstrap = None
        if entry.get("bootstrap"):
            action = entry["bootstrap"]
            if "action" not in action:
                raise ConfigurationError(f"Bootstrap for '{entry['name']}' has no action")
            bootstrap = BootstrapAction(
                action["action"], _parse_template(action.get("args", []))
            )

        plans.append(
            ComponentPlan(
                name=entry["name"],
                constructor_args=_parse_template(entry.get("args", [])),
                bootstrap=bootstrap,
                artifact=entry.get("artifact"),
            )
        )
    return plans


def order_plans(plans: Iterable[ComponentPlan], known: Iterable[str] = ()) -> List[ComponentPlan]:
    """
    Order plans so every component follows the components it references.

    Ties keep declaration order. Components in `known` are treated as
    already resolved.

    Args:
        plans: Component plans
        known: Names whose addresses are available before the run

    Returns:
        Plans in dependency order

    Raises:
        ConfigurationError: On duplicate names, unknown references or cycles
    """
    plans = list(plans)
    names = [p.name for p in plans]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate component names in plan: {', '.join(duplicates)}")

    available = set(known)
    for plan in plans:
        for dep in plan.dependencies:
            if dep not in names and dep not in available:
                raise ConfigurationError(
                    f"Component '{plan.name}' references unknown component '{dep}'"
                )
            if dep == plan.name:
                raise ConfigurationError(f"Component '{plan.name}' references itself")

    ordered: List[ComponentPlan] = []
    resolved = set(available) - set(names)
    remaining = list(plans)
    while remaining:
        ready = next(
            (p for p in remaining if all(d in resolved for d in p.dependencies)),
            None,
        )
        if ready is None:
            cycle = ", ".join(p.name for p in remaining)
            raise ConfigurationError(f"Dependency cycle between components: {cycle}")
        ordered.append(ready)
        resolved.add(ready.name)
        remaining.remove(ready)
    return ordered


def resolve_value(value: Any, deployer: str, addresses: Mapping[str, str]) -> Any:
    """
    Substitute templates in a constructor or call argument.

    Raises:
        ConfigurationError: If a referenced component has no address yet
    """
    if value is DEPLOYER:
        return deployer
    if isinstance(value, AddressRef):
        if value.component not in addresses:
            raise ConfigurationError(
                f"Address of '{value.component}' is not resolved yet"
            )
        return addresses[value.component]
    if isinstance(value, (list, tuple)):
        return [resolve_value(v, deployer, addresses) for v in value]
    return value


def resolve_plan(
    plan: ComponentPlan,
    deployer: str,
    addresses: Mapping[str, str],
) -> ComponentSpec:
    """
    Turn a plan into an immutable ComponentSpec.

    Args:
        plan: Component plan with templates
        deployer: Deployer identity
        addresses: Addresses of components deployed so far

    Returns:
        Resolved ComponentSpec
    """
    bootstrap: Optional[BootstrapAction] = None
    if plan.bootstrap is not None:
        bootstrap = BootstrapAction(
            plan.bootstrap.name,
            tuple(resolve_value(a, deployer, addresses) for a in plan.bootstrap.args),
        )

    return ComponentSpec(
        name=plan.name,
        constructor_args=tuple(resolve_value(a, deployer, addresses) for a in plan.constructor_args),
        deployer_identity=deployer,
        artifact=plan.artifact,
        bootstrap=bootstrap,
        dependencies=tuple(plan.dependencies),
    )


def plan_summary(plans: Iterable[ComponentPlan]) -> List[Dict[str, Any]]:
    """Human-readable view of a plan (templates rendered as strings)."""
    def render(value: Any) -> Any:
        if value is DEPLOYER:
            return DEPLOYER_TEMPLATE
        if isinstance(value, AddressRef):
            return f"{ADDRESS_TEMPLATE_PREFIX}{value.component}"
        if isinstance(value, (list, tuple)):
            return [render(v) for v in value]
        return value

    return [
        {
            "name": p.name,
            "args": render(p.constructor_args),
            "bootstrap": p.bootstrap.name if p.bootstrap else None,
            "depends_on": p.dependencies,
        }
        for p in plans
    ]
