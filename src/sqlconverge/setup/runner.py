# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/setup/runner.py

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from typing import Optional

from ..errors import InstallerExecutionError

log = logging.getLogger("sqlconverge")


@dataclass
class SetupRunner:
    """
    Runs the installer executable and waits for it to exit.

    Only the redacted command line is ever logged. Exit-code policy is left to
    the caller. A timeout, or a setup path that cannot be started, raises
    InstallerExecutionError.
    """

    label: Optional[str] = None

    def run(
        self,
        path: str,
        arguments: str,
        *,
        redacted: str,
        timeout: int,
    ) -> subprocess.CompletedProcess:
        label = self.label or "setup"
        cmd_str = f'"{path}" {arguments}'

        log.info(f"[{label}] $ \"{path}\" {redacted}")

        # Windows hands the command line to the installer verbatim
        cmd = cmd_str if os.name == "nt" else shlex.split(cmd_str)

        start = time.time()
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                check=False,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            log.error(f"[{label}] timed out after {timeout}s")
            output = e.stdout if isinstance(e.stdout, str) else ""
            raise InstallerExecutionError(None, output=output or "", timed_out=True) from e
        except OSError as e:
            # missing or non-executable setup path
            log.error(f"[{label}] could not start: {e}")
            raise InstallerExecutionError(None, output=str(e)) from e

        duration = time.time() - start

        if result.stdout:
            log.debug(f"[{label}][stdout]\n{result.stdout.rstrip()}")
        if result.stderr:
            log.debug(f"[{label}][stderr]\n{result.stderr.rstrip()}")
        log.info(f"[{label}][exit {result.returncode}] ({duration:.2f}s)")

        return result
