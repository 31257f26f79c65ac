# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/logging/log.py

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sqlconverge.config.models import DesiredConfiguration


def _file_stem(name: str, desired: DesiredConfiguration | None) -> str:
    if desired is None:
        return name
    # instance names may carry characters a file name cannot (e.g. HOST\INST)
    instance = re.sub(r"[^A-Za-z0-9_.-]", "_", desired.instance_name)
    return f"{name}-{instance}"


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "sqlconverge",
    verbose: bool = False,
    desired: DesiredConfiguration | None = None,
) -> tuple[logging.Logger, str, Path]:
    """
    Set up logging for one reconciliation pass.

    Setup command lines and installer output go to a per-run file at DEBUG.
    The console gets INFO, or DEBUG with ``verbose``. When *desired* is given,
    the instance name is part of the file name and the run header records what
    the pass was asked to do. Returns (logger, run_id, log_path).
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".sqlconverge" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{_file_stem(name, desired)}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(formatter)

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.info("=== sqlconverge pass started ===")
    logger.info(f"run_id={run_id}")
    if desired is not None:
        logger.info(
            f"instance={desired.instance_name} action={desired.action.value} "
            f"version={desired.product_major_version} features={','.join(desired.features) or '-'}"
        )
        if desired.is_cluster_action:
            logger.info(f"cluster_group={desired.failover_cluster_group_name or '-'}")
    logger.info(f"log_file={log_path}")

    return logger, run_id, log_path
