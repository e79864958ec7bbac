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

"""Mirroring of the local APT repository to a remote host with rsync.

The order of the sync steps keeps the remote repository consistent for
clients during the upload: new pool files arrive before the indexes that
reference them, and stale pool files are removed only after the new
indexes are in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from aptforge.core.process import run_command

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "apt:/var/www/html/"

SYNC_FLAGS = "-avhPi"
DRY_RUN_SYNC_FLAGS = "-avhPicn"


@dataclass(frozen=True)
class SyncStep:
    source: str
    dest: str
    delete: bool = False


def sync_steps(signing_key: str) -> list[SyncStep]:
    """Return the sync steps in the order they must run."""
    return [
        SyncStep("pool/", "pool"),
        SyncStep("dists/", "dists", delete=True),
        SyncStep("pool/", "pool", delete=True),
        SyncStep("index.html", ""),
        SyncStep(signing_key, ""),
    ]


class Rsync:
    def __init__(self, executable: str = "rsync", cwd: Path | None = None) -> None:
        self.executable = executable
        self.cwd = cwd

    def sync_command(self, flags: str, source: str, dest: str, delete: bool) -> list[str]:
        cmd = [self.executable, flags]
        if delete:
            cmd.append("--delete")
        cmd.extend(["--", source, dest])
        return cmd

    def sync(self, flags: str, source: str, dest: str, delete: bool = False) -> None:
        """Run one rsync transfer; raises ToolError on failure."""
        run_command(self.sync_command(flags, source, dest, delete), label="rsync", cwd=self.cwd)


@dataclass
class PublishResult:
    target: str
    dry_run: bool
    synced: list[SyncStep] = field(default_factory=list)


def publish_repository(
    rsync: Rsync,
    *,
    target: str = DEFAULT_TARGET,
    signing_key: str,
    dry_run: bool = False,
) -> PublishResult:
    """Upload pool, indexes, index page and signing key to ``target``.

    In dry-run mode rsync is still invoked, with ``-n`` so nothing is
    transferred. The first failing step aborts the remaining ones.
    """
    flags = SYNC_FLAGS
    if dry_run:
        logger.info("Dry run mode is enabled")
        flags = DRY_RUN_SYNC_FLAGS

    target = target.rstrip("/")
    result = PublishResult(target=target, dry_run=dry_run)
    for step in sync_steps(signing_key):
        logger.info("Syncing %r...", step.source)
        rsync.sync(flags, step.source, f"{target}/{step.dest}", delete=step.delete)
        result.synced.append(step)
    return result
