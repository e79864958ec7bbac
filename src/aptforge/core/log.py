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

"""Logging setup for the Aptforge CLI.

Logging is configured once at process start from the ``-v`` count:

    0   aptforge loggers at INFO
    1   aptforge loggers at DEBUG
    2+  every logger (GitPython included) at DEBUG
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "aptforge"


def level_for_verbosity(verbosity: int) -> tuple[int, int]:
    """Return (aptforge level, root level) for a verbosity count."""
    if verbosity <= 0:
        return logging.INFO, logging.WARNING
    if verbosity == 1:
        return logging.DEBUG, logging.WARNING
    return logging.DEBUG, logging.DEBUG


def setup_logging(verbosity: int = 0, console: Console | None = None) -> logging.Logger:
    """Install a Rich handler on the root logger and return the aptforge logger."""
    app_level, root_level = level_for_verbosity(verbosity)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=verbosity > 1,
        markup=False,
        rich_tracebacks=verbosity > 1,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing, RichHandler):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(root_level)

    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.setLevel(app_level)
    return app_logger
