# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/config/models.py

from __future__ import annotations

import ipaddress
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator


class SetupAction(str, Enum):
    INSTALL = "Install"
    INSTALL_FAILOVER_CLUSTER = "InstallFailoverCluster"
    ADD_NODE = "AddNode"
    PREPARE_FAILOVER_CLUSTER = "PrepareFailoverCluster"
    COMPLETE_FAILOVER_CLUSTER = "CompleteFailoverCluster"


# Actions that touch a failover cluster at all
CLUSTER_ACTIONS = frozenset({
    SetupAction.INSTALL_FAILOVER_CLUSTER,
    SetupAction.ADD_NODE,
    SetupAction.PREPARE_FAILOVER_CLUSTER,
    SetupAction.COMPLETE_FAILOVER_CLUSTER,
})

# Actions that need cluster disks resolved
CLUSTER_STORAGE_ACTIONS = frozenset({
    SetupAction.INSTALL_FAILOVER_CLUSTER,
    SetupAction.COMPLETE_FAILOVER_CLUSTER,
})

# Actions that need cluster networks resolved, and whose outcome reports cluster attributes
CLUSTER_NETWORK_ACTIONS = frozenset({
    SetupAction.INSTALL_FAILOVER_CLUSTER,
    SetupAction.COMPLETE_FAILOVER_CLUSTER,
    SetupAction.ADD_NODE,
})

# Actions that create a configured instance (accept admin accounts and security mode)
CONFIGURING_ACTIONS = frozenset({
    SetupAction.INSTALL,
    SetupAction.INSTALL_FAILOVER_CLUSTER,
    SetupAction.COMPLETE_FAILOVER_CLUSTER,
})


class SecurityMode(str, Enum):
    WINDOWS = "Windows"
    SQL = "SQL"  # mixed mode


class StartupType(str, Enum):
    AUTOMATIC = "Automatic"
    MANUAL = "Manual"
    DISABLED = "Disabled"


class AnalysisServerMode(str, Enum):
    MULTIDIMENSIONAL = "MULTIDIMENSIONAL"
    POWERPIVOT = "POWERPIVOT"
    TABULAR = "TABULAR"


class ServiceIdentity(BaseModel):
    username: str
    password: Optional[SecretStr] = None


class DesiredConfiguration(BaseModel):
    """Declared end state of one instance, plus how setup should be driven."""

    action: SetupAction = SetupAction.INSTALL
    instance_name: str
    features: List[str] = Field(default_factory=list)
    product_major_version: int

    # setup invocation
    setup_path: str = "setup.exe"
    setup_timeout_seconds: int = 7200
    setup_user: Optional[str] = None     # identity running setup, always a sysadmin
    suppress_reboot: bool = False
    force_reboot: bool = False
    use_configuration_file: bool = False

    # pass-through scalars
    instance_id: Optional[str] = None
    product_key: Optional[SecretStr] = None
    update_enabled: Optional[bool] = None
    update_source: Optional[str] = None
    install_shared_dir: Optional[str] = None
    install_shared_wow_dir: Optional[str] = None
    instance_dir: Optional[str] = None
    browser_svc_startup_type: Optional[StartupType] = None

    # database engine
    security_mode: SecurityMode = SecurityMode.WINDOWS
    sa_password: Optional[SecretStr] = None
    sql_collation: Optional[str] = None
    sql_sysadmin_accounts: List[str] = Field(default_factory=list)
    install_sql_data_dir: Optional[str] = None
    sql_user_db_dir: Optional[str] = None
    sql_user_db_log_dir: Optional[str] = None
    sql_temp_db_dir: Optional[str] = None
    sql_temp_db_log_dir: Optional[str] = None
    sql_backup_dir: Optional[str] = None

    # analysis services
    as_collation: Optional[str] = None
    as_server_mode: Optional[AnalysisServerMode] = None
    as_sysadmin_accounts: List[str] = Field(default_factory=list)
    as_data_dir: Optional[str] = None
    as_log_dir: Optional[str] = None
    as_backup_dir: Optional[str] = None
    as_temp_dir: Optional[str] = None
    as_config_dir: Optional[str] = None

    # service identities
    sql_svc_account: Optional[ServiceIdentity] = None
    agt_svc_account: Optional[ServiceIdentity] = None
    ft_svc_account: Optional[ServiceIdentity] = None
    rs_svc_account: Optional[ServiceIdentity] = None
    as_svc_account: Optional[ServiceIdentity] = None
    is_svc_account: Optional[ServiceIdentity] = None

    # service startup types
    sql_svc_startup_type: Optional[StartupType] = None
    agt_svc_startup_type: Optional[StartupType] = None
    rs_svc_startup_type: Optional[StartupType] = None
    as_svc_startup_type: Optional[StartupType] = None
    is_svc_startup_type: Optional[StartupType] = None

    # failover cluster (ignored for non-cluster actions)
    failover_cluster_group_name: Optional[str] = None
    failover_cluster_network_name: Optional[str] = None
    failover_cluster_ip_addresses: List[str] = Field(default_factory=list)

    @field_validator("features", mode="before")
    @classmethod
    def _normalize_features(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        seen: List[str] = []
        for tag in value:
            tag = str(tag).strip().upper()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @field_validator("failover_cluster_ip_addresses")
    @classmethod
    def _check_ip_addresses(cls, value: List[str]) -> List[str]:
        out: List[str] = []
        for address in value:
            try:
                out.append(str(ipaddress.IPv4Address(address.strip())))
            except ValueError as e:
                raise ValueError(f"invalid cluster IPv4 address '{address}': {e}") from e
        return out

    @model_validator(mode="after")
    def _check_sa_password(self) -> "DesiredConfiguration":
        # mixed mode cannot be configured without an SA password
        if (
            self.security_mode is SecurityMode.SQL
            and self.sa_password is None
            and self.action in CONFIGURING_ACTIONS
            and "SQLENGINE" in self.features
        ):
            raise ValueError("security_mode SQL requires sa_password")
        return self

    @property
    def is_cluster_action(self) -> bool:
        return self.action in CLUSTER_ACTIONS

    def engine_directories(self) -> List[str]:
        """Non-empty engine directories, the ones that must live on cluster disks."""
        dirs = [
            self.install_sql_data_dir,
            self.sql_user_db_dir,
            self.sql_user_db_log_dir,
            self.sql_temp_db_dir,
            self.sql_temp_db_log_dir,
            self.sql_backup_dir,
        ]
        return [d for d in dirs if d]
