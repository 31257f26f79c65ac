# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/cli/app.py

import json
from pathlib import Path
from typing import NoReturn, Optional

import typer
import yaml
from pydantic import ValidationError

from sqlconverge.config.loader import load_config
from sqlconverge.config.models import DesiredConfiguration
from sqlconverge.converge.driver import ConvergenceDriver, ConvergenceStatus
from sqlconverge.errors import SetupError
from sqlconverge.host.reboot import default_reboot_indicator
from sqlconverge.inventory.snapshot import SnapshotClusterInventory, SnapshotInventoryProbe
from sqlconverge.logging.log import init_logging
from sqlconverge.observers.console import ConsoleObserver
from sqlconverge.observers.jsonfile import JsonFileObserver
from sqlconverge.observers.logger import LoggerObserver
from sqlconverge.setup.runner import SetupRunner
from sqlconverge.utils.serialize import to_jsonable

app = typer.Typer(help="Reconcile a SQL Server instance against its declared configuration")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


def _driver(
    *,
    inventory: Path,
    cluster_inventory: Optional[Path],
    node_name: Optional[str],
    observers: list,
) -> ConvergenceDriver:
    return ConvergenceDriver(
        SnapshotInventoryProbe(inventory),
        cluster=SnapshotClusterInventory(cluster_inventory) if cluster_inventory else None,
        runner=SetupRunner(),
        reboot=default_reboot_indicator(),
        observers=observers,
        node_name=node_name,
    )


def _fail(command: str, message: str) -> NoReturn:
    typer.echo(f"[{command}] {message}", err=True)
    raise typer.Exit(code=EXIT_FAILED)


def _load(config: Path, command: str) -> DesiredConfiguration:
    try:
        return load_config(config)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"]) or "configuration"
        _fail(command, f"{config}: {field}: {err['msg']}")
    except (OSError, yaml.YAMLError) as e:
        _fail(command, f"cannot read {config}: {e}")


@app.command()
def inspect(
    config: Path = typer.Argument(..., help="Desired configuration YAML"),
    inventory: Path = typer.Option(..., "--inventory", "-i", help="Installed-state snapshot YAML"),
):
    """Print what is currently installed for the configured instance."""
    desired = _load(config, "inspect")
    driver = _driver(inventory=inventory, cluster_inventory=None, node_name=None, observers=[])
    try:
        state = driver.inspect(desired)
    except OSError as e:
        _fail("inspect", str(e))
    typer.echo(json.dumps(to_jsonable(state), indent=2))


@app.command()
def test(
    config: Path = typer.Argument(..., help="Desired configuration YAML"),
    inventory: Path = typer.Option(..., "--inventory", "-i", help="Installed-state snapshot YAML"),
):
    """Exit 0 when the instance already matches its configuration, 1 otherwise."""
    desired = _load(config, "test")
    driver = _driver(inventory=inventory, cluster_inventory=None, node_name=None, observers=[])
    try:
        satisfied = driver.is_satisfied(desired)
    except (SetupError, OSError) as e:
        _fail("test", str(e))

    typer.echo("in desired state" if satisfied else "not in desired state")
    raise typer.Exit(code=EXIT_OK if satisfied else EXIT_FAILED)


@app.command()
def reconcile(
    config: Path = typer.Argument(..., help="Desired configuration YAML"),
    inventory: Path = typer.Option(..., "--inventory", "-i", help="Installed-state snapshot YAML"),
    cluster_inventory: Optional[Path] = typer.Option(
        None, "--cluster-inventory", help="Cluster disks/networks snapshot YAML (cluster actions)"
    ),
    node_name: Optional[str] = typer.Option(
        None, "--node-name", help="Cluster node this pass runs on (default: hostname)"
    ),
    suppress_reboot: bool = typer.Option(
        False, "--suppress-reboot", help="Never signal a reboot, only report it"
    ),
    events_file: Optional[Path] = typer.Option(
        None, "--events-file", help="Append pass events as JSON lines"
    ),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Directory for run logs"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Verbose console logging"),
):
    """
    Install whatever is missing for the configured instance:
      1) probe installed state
      2) diff features, map cluster disks and networks
      3) run setup with the built arguments
      4) verify the instance reached the declared state
    """
    desired = _load(config, "reconcile")
    if suppress_reboot:
        desired = desired.model_copy(update={"suppress_reboot": True})

    logger, run_id, log_path = init_logging(base_dir=log_dir, verbose=debug, desired=desired)

    observers = [ConsoleObserver(), LoggerObserver(logger)]
    if events_file:
        observers.append(JsonFileObserver(events_file))

    driver = _driver(
        inventory=inventory,
        cluster_inventory=cluster_inventory,
        node_name=node_name,
        observers=observers,
    )
    try:
        result = driver.reconcile(desired)
    except OSError as e:
        # unreadable inventory snapshot
        logger.error("Reconciliation of %s aborted: %s", desired.instance_name, e)
        _fail("reconcile", f"{e} (log: {log_path})")

    typer.echo(result.summary())
    if result.reboot_required:
        typer.echo("A reboot is required to finish this installation.")
    typer.echo(f"log: {log_path}")

    if result.status is ConvergenceStatus.CONVERGED:
        raise typer.Exit(code=EXIT_OK)
    if result.status is ConvergenceStatus.PARTIALLY_CONVERGED:
        raise typer.Exit(code=EXIT_PARTIAL)
    raise typer.Exit(code=EXIT_FAILED)


if __name__ == "__main__":
    app()
