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

"""Implementation of `aptforge init` command.

Creates the user configuration file and the workspace directories.
"""

from __future__ import annotations

import logging

import typer

from aptforge.commands.common import command_run, get_state, load_cli_config
from aptforge.config import get_config_path
from aptforge.core.exceptions import WorkspaceIOError
from aptforge.core.paths import ensure_directories

logger = logging.getLogger(__name__)


def init(ctx: typer.Context) -> None:
    """Initialize the Aptforge configuration and workspace directories."""
    state = get_state(ctx)
    # Loading the config writes the defaults on first use.
    cfg = load_cli_config()

    with command_run("init", cfg) as run:
        try:
            created = ensure_directories(state.paths)
        except OSError as e:
            raise WorkspaceIOError(message=f"Failed to create workspace in {state.paths.root}: {e}") from e
        for path in created:
            logger.info("[init] Workspace directory: %s", path)
        logger.info("[init] Configuration: %s", get_config_path())
        run.write_summary(directories=[str(p) for p in created], config=str(get_config_path()))
