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

"""Exclusive lock on the shared build root.

Every build, whatever the package, takes an exclusive ``flock`` on the
``build/`` directory itself before touching anything below it. The lock is
advisory and bound to the open file description, so it is released when the
scope exits or the process dies.
"""

from __future__ import annotations

import contextlib
import fcntl
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from aptforge.core.exceptions import WorkspaceIOError

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def workspace_lock(build_root: Path) -> Iterator[int]:
    """Hold an exclusive lock on ``build_root`` for the duration of the block.

    Blocks without a timeout until the lock is free. Yields the locked file
    descriptor.

    Raises:
        WorkspaceIOError: If the build root cannot be opened or locked.
    """
    try:
        fd = os.open(build_root, os.O_RDONLY)
    except OSError as e:
        raise WorkspaceIOError(message=f"Failed to open build root {build_root}: {e}", path=str(build_root)) from e

    try:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            logger.info("Waiting for build handle on %s", build_root)
            fcntl.flock(fd, fcntl.LOCK_EX)
    except OSError as e:
        os.close(fd)
        raise WorkspaceIOError(message=f"Failed to lock build root {build_root}: {e}", path=str(build_root)) from e

    logger.info("Got build handle")
    try:
        yield fd
    finally:
        os.close(fd)
