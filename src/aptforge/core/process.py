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

"""Subprocess helper shared by the external tool wrappers."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from aptforge.core.exceptions import ToolError, WorkspaceIOError

logger = logging.getLogger(__name__)


def run_command(
    cmd: Sequence[str],
    *,
    label: str,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
    check: bool = True,
) -> int:
    """Run an external command to completion and return its exit code.

    Output is not captured; the tool writes straight to the terminal. There is
    no timeout.

    Args:
        cmd: Command and arguments.
        label: Short tool name used in error messages (e.g. "rsync").
        cwd: Working directory for the child process.
        env: Extra environment variables layered over os.environ.
        check: If True, a non-zero exit raises ToolError.

    Raises:
        WorkspaceIOError: If the process cannot be spawned.
        ToolError: If check is True and the command exits non-zero.
    """
    args = [str(c) for c in cmd]
    run_env = None
    if env:
        run_env = os.environ.copy()
        run_env.update(env)

    logger.debug("Executing %s (cwd=%s)", args, cwd)
    try:
        result = subprocess.run(args, cwd=cwd, env=run_env, check=False)
    except OSError as e:
        raise WorkspaceIOError(
            message=f"Failed to run {label}: {e}",
            path=str(cwd) if cwd else None,
        ) from e

    if check and result.returncode != 0:
        raise ToolError(
            message=f"Command ({label}) did not complete successfully (exit {result.returncode})",
            tool=label,
            command=args,
            returncode=result.returncode,
        )
    return result.returncode
