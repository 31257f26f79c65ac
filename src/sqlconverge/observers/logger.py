# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations
import logging
from .events import BaseEvent, PassFailed, VerificationFailed, RebootSuppressed

_WARN_EVENTS = (PassFailed, VerificationFailed, RebootSuppressed)


class LoggerObserver:
    """Mirrors pass events into the run log; failures at WARNING."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(
            f"{k}={v}" for k, v in event.dict().items() if k not in ("ts", "run_id")
        )
        level = logging.WARNING if isinstance(event, _WARN_EVENTS) else logging.INFO
        self.logger.log(level, "[EVENT] %s: %s", event.__class__.__name__, fields)
