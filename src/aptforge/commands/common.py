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

"""State and error handling shared by the CLI commands."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import typer

from aptforge.config import load_config
from aptforge.core.exceptions import AptforgeError, ConfigError
from aptforge.core.paths import WorkspacePaths
from aptforge.core.run import RunContext

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Options given before the subcommand."""

    paths: WorkspacePaths


def get_state(ctx: typer.Context) -> AppState:
    state = ctx.find_object(AppState)
    if state is None:
        # Commands invoked without the app callback (e.g. in tests)
        state = AppState(paths=WorkspacePaths.from_root(Path.cwd()))
    return state


def load_cli_config() -> dict[str, Any]:
    """Load the user config, exiting with the ConfigError exit code on failure."""
    try:
        return load_config()
    except ConfigError as e:
        logger.error("%s", e.message)
        raise typer.Exit(e.exit_code) from e


@contextlib.contextmanager
def command_run(command: str, cfg: dict[str, Any]) -> Iterator[RunContext]:
    """Run a command body inside a RunContext.

    An AptforgeError raised by the body is recorded in the run summary,
    logged, and turned into the error's exit code.
    """
    try:
        with RunContext(command, Path(cfg["paths"]["runs_root"])) as run:
            yield run
    except AptforgeError as e:
        logger.error("%s", e.message)
        raise typer.Exit(e.exit_code) from e
