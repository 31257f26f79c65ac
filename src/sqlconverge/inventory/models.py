# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/inventory/models.py

from __future__ import annotations

from enum import IntEnum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NetworkRole(IntEnum):
    NONE = 0
    CLUSTER_ONLY = 1
    CLIENT_ONLY = 2
    CLUSTER_AND_CLIENT = 3


class CurrentState(BaseModel):
    """What the inventory probe found for one instance. Never mutated."""

    model_config = ConfigDict(frozen=True)

    instance_name: str
    features: List[str] = Field(default_factory=list)
    directories: Dict[str, str] = Field(default_factory=dict)
    service_accounts: Dict[str, str] = Field(default_factory=dict)
    failover_cluster_group_name: Optional[str] = None
    failover_cluster_network_name: Optional[str] = None
    failover_cluster_ip_addresses: List[str] = Field(default_factory=list)

    @field_validator("features", mode="before")
    @classmethod
    def _normalize_features(cls, value):
        return [str(f).strip().upper() for f in (value or []) if str(f).strip()]

    @classmethod
    def empty(cls, instance_name: str) -> "CurrentState":
        return cls(instance_name=instance_name)

    @property
    def is_clustered(self) -> bool:
        return bool(self.failover_cluster_group_name)


class ClusterDiskResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    owner_nodes: List[str] = Field(default_factory=list)
    partitions: List[str] = Field(default_factory=list)   # mount points, e.g. "E:"
    assigned: bool = False                                # already part of a cluster role


class ClusterNetworkResource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    address: str
    address_mask: str
    role: NetworkRole = NetworkRole.CLUSTER_AND_CLIENT
