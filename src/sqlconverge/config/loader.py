# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/config/loader.py

import logging
import os
from pathlib import Path

import yaml

from .models import DesiredConfiguration

log = logging.getLogger("sqlconverge")


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_secrets_file(config_path: Path) -> Path | None:
    """
    Locate the secrets file for an instance config using this priority:

    1. SQLCONVERGE_SECRETS_FILE environment variable (explicit override)
    2. <config stem>.secrets.yaml beside the config, for one instance only
    3. secrets.yaml beside the config, shared by every instance in the directory
    """
    env = os.environ.get("SQLCONVERGE_SECRETS_FILE")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("SQLCONVERGE_SECRETS_FILE=%s does not exist, skipping", env)
        return None

    for candidate in (
        config_path.with_name(f"{config_path.stem}.secrets.yaml"),
        config_path.parent / "secrets.yaml",
    ):
        if candidate.is_file():
            return candidate

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    return yaml.safe_load(expanded) or {}


def load_config(path: str | Path) -> DesiredConfiguration:
    """
    Load and validate the desired configuration of one instance.

    Passwords (``sa_password``, ``product_key``, ``*_svc_account.password``)
    should not live in the instance file. Either put them in a secrets file
    mirroring its structure (``<instance>.secrets.yaml`` or a shared
    ``secrets.yaml``), which is deep-merged before validation, or
    reference ``${ENV_VAR}`` placeholders that are expanded at load time.
    """
    path = Path(path)
    data = _load_yaml(path)

    secrets_path = _find_secrets_file(path)
    if secrets_path:
        log.debug("Merging secrets from %s", secrets_path)
        _deep_merge(data, _load_yaml(secrets_path))
    else:
        log.debug("No secrets file found, proceeding without secrets merge")

    desired = DesiredConfiguration.model_validate(data)
    log.debug(
        "Loaded %s: instance=%s action=%s features=%s",
        path, desired.instance_name, desired.action.value, ",".join(desired.features),
    )
    return desired
