from pathlib import Path
import textwrap

import pytest

from sqlconverge.errors import InstanceNotFoundError
from sqlconverge.inventory.models import NetworkRole
from sqlconverge.inventory.snapshot import SnapshotClusterInventory, SnapshotInventoryProbe


def test_probe_reads_instance_case_insensitively(tmp_path: Path):
    f = tmp_path / "state.yaml"
    f.write_text(textwrap.dedent("""
        instances:
          MSSQLSERVER:
            features: [sqlengine, FULLTEXT]
            failover_cluster_group_name: SQL Server (MSSQLSERVER)
            failover_cluster_ip_addresses: [10.0.0.50]
    """))
    state = SnapshotInventoryProbe(f).probe("mssqlserver")
    assert state.instance_name == "MSSQLSERVER"
    assert state.features == ["SQLENGINE", "FULLTEXT"]
    assert state.is_clustered
    assert state.failover_cluster_ip_addresses == ["10.0.0.50"]


def test_probe_missing_instance_raises(tmp_path: Path):
    f = tmp_path / "state.yaml"
    f.write_text("instances: {}\n")
    with pytest.raises(InstanceNotFoundError):
        SnapshotInventoryProbe(f).probe("SQL01")


def test_cluster_inventory_filters(tmp_path: Path):
    f = tmp_path / "cluster.yaml"
    f.write_text(textwrap.dedent("""
        disks:
          - name: Cluster Disk 1
            owner_nodes: [NODE1, NODE2]
            partitions: ["E:"]
          - name: Cluster Disk 2
            owner_nodes: [NODE1]
            partitions: ["F:"]
            assigned: true
        networks:
          - name: Client Network
            address: 10.0.0.0
            address_mask: 255.255.255.0
            role: 3
          - name: Heartbeat
            address: 192.168.100.0
            address_mask: 255.255.255.0
            role: 1
    """))
    inv = SnapshotClusterInventory(f)
    assert [d.name for d in inv.list_disk_resources()] == ["Cluster Disk 1"]
    assert len(inv.list_disk_resources(exclude_assigned=False)) == 2
    assert [n.name for n in inv.list_network_resources(NetworkRole.CLIENT_ONLY)] == ["Client Network"]
