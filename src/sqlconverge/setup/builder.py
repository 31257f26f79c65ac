# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/setup/builder.py

from __future__ import annotations

import getpass
import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from ..config.models import (
    CLUSTER_ACTIONS,
    CONFIGURING_ACTIONS,
    DesiredConfiguration,
    SecurityMode,
    ServiceIdentity,
    StartupType,
)
from ..features.diff import ANALYSIS, ENGINE, FULLTEXT, INTEGRATION, REPORTING
from ..identity.classifier import ServiceType, service_account_arguments
from .arguments import FEATURES_KEY, InstallerArguments

log = logging.getLogger("sqlconverge")

CLUSTER_SKIP_RULES = ["Cluster_VerifyForErrors"]


@dataclass
class BuildContext:
    desired: DesiredConfiguration
    features: List[str]                          # features this pass installs
    cluster_disks: List[str] = field(default_factory=list)
    cluster_ip_addresses: List[str] = field(default_factory=list)
    setup_user: Optional[str] = None

    def has(self, feature: str) -> bool:
        return feature in self.features


def current_user() -> str:
    domain = os.environ.get("USERDOMAIN")
    user = getpass.getuser()
    return f"{domain}\\{user}" if domain else user


def _dir(value: Optional[str]) -> Optional[str]:
    if not value:
        return value
    return value.rstrip("\\/")


def _add_if(args: InstallerArguments, key: str, value) -> None:
    if value is None:
        return
    if isinstance(value, StartupType):
        value = value.value
    args.add(key, value)


def _add_dir(args: InstallerArguments, key: str, value: Optional[str]) -> None:
    _add_if(args, key, _dir(value))


def _add_identity(
    args: InstallerArguments,
    identity: Optional[ServiceIdentity],
    service_type: ServiceType,
) -> None:
    if identity is not None:
        args.extend(service_account_arguments(identity, service_type))


# --------------------------------------------------------------------------
# rule functions, applied in a fixed order by build_arguments()
# --------------------------------------------------------------------------

def _base(ctx: BuildContext, args: InstallerArguments) -> None:
    d = ctx.desired
    args.add("QUIET", True)
    args.add("IACCEPTSQLSERVERLICENSETERMS", True)
    args.add("ACTION", d.action.value)
    args.add(FEATURES_KEY, list(ctx.features))
    args.add("INSTANCENAME", d.instance_name)


def _pass_through(ctx: BuildContext, args: InstallerArguments) -> None:
    d = ctx.desired
    _add_if(args, "INSTANCEID", d.instance_id)
    if d.product_key is not None:
        args.add("PID", d.product_key.get_secret_value(), secret=True)
    _add_if(args, "UPDATEENABLED", d.update_enabled)
    _add_dir(args, "UPDATESOURCE", d.update_source)
    _add_dir(args, "INSTALLSHAREDDIR", d.install_shared_dir)
    _add_dir(args, "INSTALLSHAREDWOWDIR", d.install_shared_wow_dir)
    _add_dir(args, "INSTANCEDIR", d.instance_dir)
    # unset means leave the browser service alone
    _add_if(args, "BROWSERSVCSTARTUPTYPE", d.browser_svc_startup_type)


def _engine(ctx: BuildContext, args: InstallerArguments) -> None:
    if not ctx.has(ENGINE):
        return
    d = ctx.desired

    if d.action in CONFIGURING_ACTIONS:
        args.add("SECURITYMODE", d.security_mode.value)
        if d.security_mode is SecurityMode.SQL and d.sa_password is not None:
            args.add("SAPWD", d.sa_password.get_secret_value(), secret=True)

        admins = [ctx.setup_user or current_user()]
        admins += [a for a in d.sql_sysadmin_accounts if a not in admins]
        args.add("SQLSYSADMINACCOUNTS", admins)

    _add_if(args, "SQLCOLLATION", d.sql_collation)
    _add_dir(args, "INSTALLSQLDATADIR", d.install_sql_data_dir)
    _add_dir(args, "SQLUSERDBDIR", d.sql_user_db_dir)
    _add_dir(args, "SQLUSERDBLOGDIR", d.sql_user_db_log_dir)
    _add_dir(args, "SQLTEMPDBDIR", d.sql_temp_db_dir)
    _add_dir(args, "SQLTEMPDBLOGDIR", d.sql_temp_db_log_dir)
    _add_dir(args, "SQLBACKUPDIR", d.sql_backup_dir)

    _add_identity(args, d.sql_svc_account, ServiceType.DATABASE_ENGINE)
    _add_identity(args, d.agt_svc_account, ServiceType.AGENT)
    _add_if(args, "SQLSVCSTARTUPTYPE", d.sql_svc_startup_type)
    _add_if(args, "AGTSVCSTARTUPTYPE", d.agt_svc_startup_type)


def _full_text(ctx: BuildContext, args: InstallerArguments) -> None:
    if ctx.has(FULLTEXT):
        _add_identity(args, ctx.desired.ft_svc_account, ServiceType.FULL_TEXT)


def _reporting(ctx: BuildContext, args: InstallerArguments) -> None:
    if not ctx.has(REPORTING):
        return
    _add_identity(args, ctx.desired.rs_svc_account, ServiceType.REPORTING)
    _add_if(args, "RSSVCSTARTUPTYPE", ctx.desired.rs_svc_startup_type)


def _analysis(ctx: BuildContext, args: InstallerArguments) -> None:
    if not ctx.has(ANALYSIS):
        return
    d = ctx.desired

    if d.action in CONFIGURING_ACTIONS:
        admins = [ctx.setup_user or current_user()]
        admins += [a for a in d.as_sysadmin_accounts if a not in admins]
        args.add("ASSYSADMINACCOUNTS", admins)
        if d.as_server_mode is not None:
            args.add("ASSERVERMODE", d.as_server_mode.value)

    _add_if(args, "ASCOLLATION", d.as_collation)
    _add_dir(args, "ASDATADIR", d.as_data_dir)
    _add_dir(args, "ASLOGDIR", d.as_log_dir)
    _add_dir(args, "ASBACKUPDIR", d.as_backup_dir)
    _add_dir(args, "ASTEMPDIR", d.as_temp_dir)
    _add_dir(args, "ASCONFIGDIR", d.as_config_dir)
    _add_identity(args, d.as_svc_account, ServiceType.ANALYSIS)
    _add_if(args, "ASSVCSTARTUPTYPE", d.as_svc_startup_type)


def _integration(ctx: BuildContext, args: InstallerArguments) -> None:
    if not ctx.has(INTEGRATION):
        return
    _add_identity(args, ctx.desired.is_svc_account, ServiceType.INTEGRATION)
    _add_if(args, "ISSVCSTARTUPTYPE", ctx.desired.is_svc_startup_type)


def _cluster(ctx: BuildContext, args: InstallerArguments) -> None:
    d = ctx.desired
    if d.action not in CLUSTER_ACTIONS:
        return
    args.add("SKIPRULES", CLUSTER_SKIP_RULES)
    _add_if(args, "FAILOVERCLUSTERGROUP", d.failover_cluster_group_name)
    _add_if(args, "FAILOVERCLUSTERNETWORKNAME", d.failover_cluster_network_name)
    if ctx.cluster_disks:
        args.add("FAILOVERCLUSTERDISKS", ctx.cluster_disks)
    if ctx.cluster_ip_addresses:
        args.add("FAILOVERCLUSTERIPADDRESSES", ctx.cluster_ip_addresses)


RULES: Sequence[Callable[[BuildContext, InstallerArguments], None]] = (
    _base,
    _pass_through,
    _engine,
    _full_text,
    _reporting,
    _analysis,
    _integration,
    _cluster,
)


def build_arguments(ctx: BuildContext) -> InstallerArguments:
    args = InstallerArguments()
    for rule in RULES:
        rule(ctx, args)
    log.debug("Built %d installer arguments: %s", len(args), args.redacted())
    return args
