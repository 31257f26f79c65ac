# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/converge/driver.py

from __future__ import annotations

import logging
import socket
import tempfile
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from ..cluster.network import map_cluster_networks
from ..cluster.storage import map_cluster_disks, required_drives
from ..config.models import (
    CLUSTER_NETWORK_ACTIONS,
    CLUSTER_STORAGE_ACTIONS,
    DesiredConfiguration,
    SetupAction,
)
from ..errors import (
    ArgumentBuildError,
    ConvergenceVerificationError,
    InstallerExecutionError,
    InstanceNotFoundError,
    SetupError,
)
from ..features.diff import missing_features, normalize
from ..inventory.interface import ClusterInventory, InstallerRunner, InventoryProbe, RebootIndicator
from ..inventory.models import CurrentState, NetworkRole
from ..observers.dispatcher import EventBus
from ..observers.events import (
    new_ctx,
    PassStarted,
    StateProbed,
    FeaturesDiffed,
    ClusterDisksMapped,
    ClusterNetworksMapped,
    ArgumentsBuilt,
    InstallerStarted,
    InstallerFinished,
    RebootRequired,
    RebootSuppressed,
    VerificationSucceeded,
    VerificationFailed,
    PassFailed,
    PassSummary,
)
from ..setup.builder import BuildContext, build_arguments
from ..setup.config_file import write_configuration_file
from ..setup.runner import SetupRunner
from ..host.reboot import default_reboot_indicator

log = logging.getLogger("sqlconverge")

EXIT_SUCCESS = 0
EXIT_SUCCESS_REBOOT_REQUIRED = 3010


class Stage(str, Enum):
    PROBING = "Probing"
    DIFFING = "Diffing"
    MAPPING = "Mapping"
    BUILDING = "Building"
    EXECUTING = "Executing"
    AWAITING_COMPLETION = "AwaitingCompletion"
    VERIFYING = "Verifying"
    CONVERGED = "Converged"
    FAILED = "Failed"


class ConvergenceStatus(str, Enum):
    CONVERGED = "CONVERGED"
    PARTIALLY_CONVERGED = "PARTIALLY_CONVERGED"
    FAILED = "FAILED"


@dataclass
class ConvergenceResult:
    instance: str
    action: str
    status: ConvergenceStatus = ConvergenceStatus.FAILED
    stage: Stage = Stage.PROBING            # last stage entered
    missing_features: List[str] = field(default_factory=list)
    cluster_mismatches: List[str] = field(default_factory=list)
    installer_ran: bool = False
    exit_code: Optional[int] = None
    command_line: Optional[str] = None      # redacted
    reboot_required: bool = False
    reboot_suppressed: bool = False
    error: Optional[SetupError] = None

    @property
    def ok(self) -> bool:
        return self.status is ConvergenceStatus.CONVERGED

    def raise_for_status(self) -> None:
        if self.error is not None:
            raise self.error

    def summary(self) -> str:
        s = f"{self.instance}: {self.status.value}"
        if self.reboot_required:
            s += " (reboot required)"
        if self.reboot_suppressed:
            s += " (reboot suppressed)"
        if self.error is not None:
            s += f" at {self.stage.value}: {self.error}"
        return s


def cluster_mismatches(desired: DesiredConfiguration, state: CurrentState) -> List[str]:
    """Declared cluster attributes the instance does not report."""
    if desired.action not in CLUSTER_NETWORK_ACTIONS:
        return []

    diffs: List[str] = []
    if desired.failover_cluster_group_name and (
        (state.failover_cluster_group_name or "").casefold()
        != desired.failover_cluster_group_name.casefold()
    ):
        diffs.append("failover_cluster_group_name")
    if desired.failover_cluster_network_name and (
        (state.failover_cluster_network_name or "").casefold()
        != desired.failover_cluster_network_name.casefold()
    ):
        diffs.append("failover_cluster_network_name")
    if desired.failover_cluster_ip_addresses and (
        set(state.failover_cluster_ip_addresses) != set(desired.failover_cluster_ip_addresses)
    ):
        diffs.append("failover_cluster_ip_addresses")
    return diffs


class ConvergenceDriver:
    """
    Drives one instance to its declared state:
    probe -> diff -> map cluster resources -> build -> run setup -> verify.

    Nothing is retried. A failed stage ends the pass and is reported on the
    returned ConvergenceResult.
    """

    def __init__(
        self,
        probe: InventoryProbe,
        *,
        cluster: Optional[ClusterInventory] = None,
        runner: Optional[InstallerRunner] = None,
        reboot: Optional[RebootIndicator] = None,
        observers: Optional[List] = None,
        node_name: Optional[str] = None,
        work_dir: Optional[Path] = None,
    ):
        self.probe = probe
        self.cluster = cluster
        self.runner = runner or SetupRunner()
        self.reboot = reboot or default_reboot_indicator()
        self.bus = EventBus(observers or [])
        self.node_name = node_name or socket.gethostname()
        self.work_dir = work_dir or Path(tempfile.gettempdir()) / "sqlconverge"

    # ------------------------- get / test -------------------------

    def inspect(self, desired: DesiredConfiguration) -> CurrentState:
        try:
            return self.probe.probe(desired.instance_name)
        except InstanceNotFoundError:
            log.debug("Instance %s not installed", desired.instance_name)
            return CurrentState.empty(desired.instance_name)

    def is_satisfied(self, desired: DesiredConfiguration) -> bool:
        state = self.inspect(desired)
        missing = missing_features(desired.features, state.features, desired.product_major_version)
        drift = cluster_mismatches(desired, state)
        if missing:
            log.info("Features not installed: %s", ", ".join(missing))
        if drift:
            log.info("Cluster attributes differ: %s", ", ".join(drift))
        return not missing and not drift

    # ------------------------- set -------------------------

    def reconcile(self, desired: DesiredConfiguration) -> ConvergenceResult:
        run_ctx = new_ctx(instance=desired.instance_name, action=desired.action.value)
        result = ConvergenceResult(instance=desired.instance_name, action=desired.action.value)
        self.bus.emit(PassStarted(features=list(desired.features), **run_ctx))

        try:
            self._run_pass(desired, result, run_ctx)
        except ArgumentBuildError:
            raise
        except SetupError as e:
            result.status = ConvergenceStatus.FAILED
            result.error = e
            log.error("Reconciliation of %s failed at %s: %s", desired.instance_name, result.stage.value, e)
            self.bus.emit(PassFailed(stage=result.stage.value, error=str(e), **run_ctx))

        self.bus.emit(
            PassSummary(
                status=result.status.value,
                reboot_required=result.reboot_required,
                reboot_suppressed=result.reboot_suppressed,
                error=str(result.error) if result.error else None,
                **run_ctx,
            )
        )
        return result

    def _run_pass(self, desired: DesiredConfiguration, result: ConvergenceResult, run_ctx: dict) -> None:
        result.stage = Stage.PROBING
        state = self.inspect(desired)
        self.bus.emit(StateProbed(installed=bool(state.features), features=list(state.features), **run_ctx))

        result.stage = Stage.DIFFING
        missing = missing_features(desired.features, state.features, desired.product_major_version)
        drift = cluster_mismatches(desired, state)
        result.missing_features = missing
        result.cluster_mismatches = drift
        self.bus.emit(FeaturesDiffed(missing=missing, **run_ctx))

        if not missing and not drift:
            log.info("%s already in desired state", desired.instance_name)
            result.stage = Stage.CONVERGED
            result.status = ConvergenceStatus.CONVERGED
            return

        if not missing and desired.action is not SetupAction.COMPLETE_FAILOVER_CLUSTER:
            # setup cannot move an existing instance between cluster groups/networks
            log.warning("%s has all features but cluster attributes differ: %s", desired.instance_name, drift)
            result.status = ConvergenceStatus.PARTIALLY_CONVERGED
            return

        # completion configures the features laid down by PrepareFailoverCluster
        if desired.action is SetupAction.COMPLETE_FAILOVER_CLUSTER:
            features = list(desired.features)
        else:
            features = missing

        build = BuildContext(desired=desired, features=features, setup_user=desired.setup_user)
        if desired.is_cluster_action:
            result.stage = Stage.MAPPING
            self._map_cluster(desired, build, run_ctx)

        result.stage = Stage.BUILDING
        args = build_arguments(build)
        if desired.use_configuration_file:
            args = write_configuration_file(
                args,
                instance_name=desired.instance_name,
                path=self.work_dir / f"{desired.instance_name}-ConfigurationFile.ini",
            )
        result.command_line = args.redacted()
        self.bus.emit(ArgumentsBuilt(command_line=result.command_line, **run_ctx))

        result.stage = Stage.EXECUTING
        self.bus.emit(InstallerStarted(path=desired.setup_path, **run_ctx))
        t0 = time.time()
        cp = self.runner.run(
            desired.setup_path,
            args.render(),
            redacted=result.command_line,
            timeout=desired.setup_timeout_seconds,
        )
        result.installer_ran = True

        result.stage = Stage.AWAITING_COMPLETION
        result.exit_code = cp.returncode
        self.bus.emit(
            InstallerFinished(exit_code=cp.returncode, duration_ms=int((time.time() - t0) * 1000), **run_ctx)
        )
        if cp.returncode not in (EXIT_SUCCESS, EXIT_SUCCESS_REBOOT_REQUIRED):
            output = "\n".join(s for s in (cp.stdout, cp.stderr) if s)
            raise InstallerExecutionError(cp.returncode, output=output)

        self._handle_reboot(desired, result, cp.returncode, run_ctx)

        result.stage = Stage.VERIFYING
        self._verify(desired, result, run_ctx)

        result.stage = Stage.CONVERGED
        result.status = ConvergenceStatus.CONVERGED

    def _map_cluster(self, desired: DesiredConfiguration, build: BuildContext, run_ctx: dict) -> None:
        if desired.action not in CLUSTER_STORAGE_ACTIONS | CLUSTER_NETWORK_ACTIONS:
            return
        if self.cluster is None:
            raise ValueError(f"Action {desired.action.value} needs a cluster inventory")

        if desired.action in CLUSTER_STORAGE_ACTIONS:
            paths = desired.engine_directories()
            build.cluster_disks = map_cluster_disks(
                paths,
                self.cluster.list_disk_resources(exclude_assigned=True),
                self.node_name,
            )
            self.bus.emit(ClusterDisksMapped(drives=required_drives(paths), disks=build.cluster_disks, **run_ctx))

        if desired.action in CLUSTER_NETWORK_ACTIONS:
            build.cluster_ip_addresses = map_cluster_networks(
                desired.failover_cluster_ip_addresses,
                self.cluster.list_network_resources(min_role=NetworkRole.CLIENT_ONLY),
            )
            self.bus.emit(ClusterNetworksMapped(assignments=build.cluster_ip_addresses, **run_ctx))

    def _handle_reboot(
        self,
        desired: DesiredConfiguration,
        result: ConvergenceResult,
        exit_code: int,
        run_ctx: dict,
    ) -> None:
        if exit_code == EXIT_SUCCESS_REBOOT_REQUIRED:
            reason = f"installer exited with {EXIT_SUCCESS_REBOOT_REQUIRED}"
        elif self.reboot.is_reboot_pending():
            reason = "pending file rename operations"
        elif desired.force_reboot:
            reason = "force_reboot requested"
        else:
            return

        if desired.suppress_reboot:
            log.warning("Reboot needed (%s) but suppressed", reason)
            result.reboot_suppressed = True
            self.bus.emit(RebootSuppressed(reason=reason, **run_ctx))
        else:
            log.info("Reboot required: %s", reason)
            result.reboot_required = True
            self.bus.emit(RebootRequired(reason=reason, **run_ctx))

    def _verify(self, desired: DesiredConfiguration, result: ConvergenceResult, run_ctx: dict) -> None:
        state = self.inspect(desired)
        installed = set(state.features)
        missing = [f for f in normalize(desired.features) if f not in installed]
        drift = cluster_mismatches(desired, state)

        result.missing_features = missing
        result.cluster_mismatches = drift
        if missing or drift:
            self.bus.emit(VerificationFailed(missing=missing, cluster_mismatches=drift, **run_ctx))
            raise ConvergenceVerificationError(missing, drift)

        self.bus.emit(VerificationSucceeded(features=sorted(installed), **run_ctx))
