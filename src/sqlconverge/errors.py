# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/errors.py

from __future__ import annotations

from typing import List, Optional


class SetupError(RuntimeError):
    """Base class for reconciliation failures."""


class ArgumentBuildError(SetupError):
    """Raised when the argument set cannot be assembled (programmer error)."""


class InstanceNotFoundError(SetupError):
    def __init__(self, instance: str):
        super().__init__(f"Instance '{instance}' is not installed")
        self.instance = instance


class UnsupportedFeatureError(SetupError):
    def __init__(self, feature: str, version: int):
        super().__init__(
            f"Feature '{feature}' is not supported by the installer for major version {version}"
        )
        self.feature = feature
        self.version = version


class ClusterDiskMappingError(SetupError):
    def __init__(self, required: List[str], mapped: List[str]):
        super().__init__(
            f"Unable to map required drives {required} to available cluster disks "
            f"(required={len(required)}, mapped={len(mapped)}: {mapped})"
        )
        self.required = required
        self.mapped = mapped


class ClusterIPAddressNotValidError(SetupError):
    def __init__(self, declared: List[str], mapped: List[str]):
        super().__init__(
            f"One or more IP addresses {declared} do not belong to a client cluster network "
            f"(declared={len(declared)}, mapped={len(mapped)})"
        )
        self.declared = declared
        self.mapped = mapped


class InstallerExecutionError(SetupError):
    def __init__(self, exit_code: Optional[int], output: str = "", timed_out: bool = False):
        if timed_out:
            msg = "Installer did not finish before the setup timeout"
        elif exit_code is None:
            msg = f"Installer could not be started: {output}"
        else:
            msg = f"Installer exited with code {exit_code}"
        super().__init__(msg)
        self.exit_code = exit_code
        self.output = output
        self.timed_out = timed_out


class ConvergenceVerificationError(SetupError):
    def __init__(self, missing_features: List[str], cluster_mismatches: List[str]):
        parts = []
        if missing_features:
            parts.append(f"features still missing: {', '.join(missing_features)}")
        if cluster_mismatches:
            parts.append(f"cluster attributes differ: {', '.join(cluster_mismatches)}")
        super().__init__("Installer finished but the instance is not in the desired state; " + "; ".join(parts))
        self.missing_features = missing_features
        self.cluster_mismatches = cluster_mismatches
