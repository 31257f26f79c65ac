# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/cluster/storage.py

from __future__ import annotations

import logging
import ntpath
from typing import Iterable, List, Set

from ..errors import ClusterDiskMappingError
from ..inventory.models import ClusterDiskResource

log = logging.getLogger("sqlconverge")


def drive_qualifier(path: str) -> str:
    """'E:\\MSSQL\\Data' -> 'E:'. Mount-point paths without a drive keep their root."""
    drive, _ = ntpath.splitdrive(path.strip())
    return drive.upper()


def required_drives(paths: Iterable[str]) -> List[str]:
    drives: Set[str] = {drive_qualifier(p) for p in paths if p and p.strip()}
    drives.discard("")
    return sorted(drives)


def map_cluster_disks(
    paths: Iterable[str],
    disks: Iterable[ClusterDiskResource],
    node_name: str,
) -> List[str]:
    """
    Resolve the cluster disk resources backing *paths*.

    *disks* should already exclude disks assigned to a cluster role. A disk
    qualifies when *node_name* may own it and one of its partitions sits on a
    required drive. Every required drive must resolve, or the call fails.
    """
    required = required_drives(paths)
    node = node_name.upper()

    mapped: List[str] = []
    for disk in disks:
        if node not in {o.upper() for o in disk.owner_nodes}:
            log.debug("Skipping cluster disk '%s', not ownable by %s", disk.name, node_name)
            continue
        partition_drives = {drive_qualifier(p) for p in disk.partitions}
        if partition_drives & set(required) and disk.name not in mapped:
            mapped.append(disk.name)

    mapped.sort()
    if len(mapped) != len(required):
        raise ClusterDiskMappingError(required, mapped)

    log.debug("Mapped drives %s to cluster disks %s", required, mapped)
    return mapped
