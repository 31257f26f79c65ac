# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/sqlconverge/host/reboot.py

from __future__ import annotations

import logging
import os

log = logging.getLogger("sqlconverge")

SESSION_MANAGER_KEY = r"SYSTEM\CurrentControlSet\Control\Session Manager"
PENDING_RENAME_VALUE = "PendingFileRenameOperations"


class PendingFileRenameIndicator:
    """Reports a pending reboot when Session Manager has queued file renames."""

    def is_reboot_pending(self) -> bool:
        import winreg  # Windows only

        try:
            with winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, SESSION_MANAGER_KEY) as key:
                value, _ = winreg.QueryValueEx(key, PENDING_RENAME_VALUE)
        except FileNotFoundError:
            return False

        pending = bool(value)
        log.debug("%s present=%s", PENDING_RENAME_VALUE, pending)
        return pending


class NeverPendingIndicator:
    """For hosts without a pending-operation store."""

    def is_reboot_pending(self) -> bool:
        return False


def default_reboot_indicator():
    """Registry-backed indicator on Windows, a no-op elsewhere."""
    if os.name == "nt":
        return PendingFileRenameIndicator()
    return NeverPendingIndicator()
