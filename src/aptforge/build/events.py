# This file is part of Aptforge, a tool for building reproducible Debian packages.
#
# Copyright 2025 Canonical Ltd.
#
# SPDX-License-Identifier: GPL-3.0-only
#
# Aptforge is free software: you can redistribute it and/or modify it under
# the terms of the GNU General Public License version 3, as published by the
# Free Software Foundation.
#
# Aptforge is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranties of MERCHANTABILITY,
# SATISFACTORY QUALITY, or FITNESS FOR A PARTICULAR PURPOSE. See the GNU
# General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with
# Aptforge. If not, see <http://www.gnu.org/licenses/>.

"""Event helpers shared by the build phases.

Each phase action produces both a human-readable log line and a structured
event in the run record.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from aptforge.core.run import RunContext


def log_phase_event(
    logger: logging.Logger,
    run: RunContext | None,
    phase: str,
    message: str,
    event_key: str,
    *,
    level: int = logging.INFO,
    **event_data: Any,
) -> None:
    """Log a phase message and record the matching structured event.

    Args:
        logger: Logger for the human-readable line.
        run: RunContext receiving the event, or None outside a CLI run.
        phase: Phase name (e.g., "fetch", "verify").
        message: Human-readable message.
        event_key: Event key for structured logging (e.g., "verify.missing").
        level: Logging level for the message.
        **event_data: Additional data to include in the event.
    """
    logger.log(level, "[%s] %s", phase, message)
    if run is not None:
        run.log_event({"event": event_key, **event_data})
