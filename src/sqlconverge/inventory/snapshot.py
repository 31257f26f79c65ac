# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/inventory/snapshot.py

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml

from ..errors import InstanceNotFoundError
from .models import ClusterDiskResource, ClusterNetworkResource, CurrentState, NetworkRole

log = logging.getLogger("sqlconverge")


def _load(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    with path.open() as f:
        return yaml.safe_load(f) or {}


class SnapshotInventoryProbe:
    """
    Reads the installed-state snapshot written by the host's inventory probe.

    Layout::

        instances:
          MSSQLSERVER:
            features: [SQLENGINE, FULLTEXT]
            failover_cluster_group_name: SQL Server (MSSQLSERVER)
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def probe(self, instance_name: str) -> CurrentState:
        instances = _load(self.path).get("instances") or {}
        # instance names are case-insensitive on the host
        for name, data in instances.items():
            if name.upper() == instance_name.upper():
                log.debug("Snapshot %s has instance %s", self.path, name)
                return CurrentState.model_validate({**(data or {}), "instance_name": name})
        raise InstanceNotFoundError(instance_name)


class SnapshotClusterInventory:
    """
    Reads cluster topology (disks and networks) from a YAML snapshot.

    Layout::

        disks:
          - name: Cluster Disk 1
            owner_nodes: [NODE1, NODE2]
            partitions: ["E:"]
            assigned: false
        networks:
          - name: Client Network
            address: 10.0.0.0
            address_mask: 255.255.255.0
            role: 3
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def list_disk_resources(self, exclude_assigned: bool = True) -> List[ClusterDiskResource]:
        disks = [ClusterDiskResource.model_validate(d) for d in _load(self.path).get("disks") or []]
        if exclude_assigned:
            disks = [d for d in disks if not d.assigned]
        return disks

    def list_network_resources(self, min_role: NetworkRole) -> List[ClusterNetworkResource]:
        networks = [ClusterNetworkResource.model_validate(n) for n in _load(self.path).get("networks") or []]
        return [n for n in networks if n.role >= min_role]
