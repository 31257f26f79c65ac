# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import List, Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single reconciliation pass
    instance: str     # instance name
    action: str       # setup action

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def new_ctx(instance: str, action: str) -> Dict[str, Any]:
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": str(uuid.uuid4()),
        "instance": instance,
        "action": action,
    }


# ---------------------------------------------------------------------
# Probe / diff
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class PassStarted(BaseEvent):
    features: List[str]

@dataclass(frozen=True)
class StateProbed(BaseEvent):
    installed: bool
    features: List[str]

@dataclass(frozen=True)
class FeaturesDiffed(BaseEvent):
    missing: List[str]


# ---------------------------------------------------------------------
# Cluster mapping
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ClusterDisksMapped(BaseEvent):
    drives: List[str]
    disks: List[str]

@dataclass(frozen=True)
class ClusterNetworksMapped(BaseEvent):
    assignments: List[str]


# ---------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ArgumentsBuilt(BaseEvent):
    command_line: str   # redacted

@dataclass(frozen=True)
class InstallerStarted(BaseEvent):
    path: str

@dataclass(frozen=True)
class InstallerFinished(BaseEvent):
    exit_code: int
    duration_ms: int

@dataclass(frozen=True)
class RebootRequired(BaseEvent):
    reason: str

@dataclass(frozen=True)
class RebootSuppressed(BaseEvent):
    reason: str


# ---------------------------------------------------------------------
# Verification & summary
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class VerificationSucceeded(BaseEvent):
    features: List[str]

@dataclass(frozen=True)
class VerificationFailed(BaseEvent):
    missing: List[str]
    cluster_mismatches: List[str]

@dataclass(frozen=True)
class PassFailed(BaseEvent):
    stage: str
    error: str

@dataclass(frozen=True)
class PassSummary(BaseEvent):
    status: str          # "CONVERGED" | "PARTIALLY_CONVERGED" | "FAILED"
    reboot_required: bool
    reboot_suppressed: bool
    error: Optional[str] = None
