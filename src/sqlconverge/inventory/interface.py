# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import subprocess
from typing import List, Protocol

from .models import ClusterDiskResource, ClusterNetworkResource, CurrentState, NetworkRole


class InventoryProbe(Protocol):
    def probe(self, instance_name: str) -> CurrentState:
        """Raises InstanceNotFoundError when nothing is installed for the instance."""
        ...


class ClusterInventory(Protocol):
    def list_disk_resources(self, exclude_assigned: bool = True) -> List[ClusterDiskResource]: ...

    def list_network_resources(self, min_role: NetworkRole) -> List[ClusterNetworkResource]: ...


class InstallerRunner(Protocol):
    def run(self, path: str, arguments: str, *, redacted: str, timeout: int) -> subprocess.CompletedProcess: ...


class RebootIndicator(Protocol):
    def is_reboot_pending(self) -> bool: ...
