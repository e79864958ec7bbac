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

"""Patch application for extracted source trees."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from aptforge.core.exceptions import PatchError
from aptforge.core.process import run_command

logger = logging.getLogger(__name__)


class PatchTool:
    """Wrapper around ``patch(1)``."""

    def __init__(self, executable: str = "patch") -> None:
        self.executable = executable

    def command(self, patch_file: Path) -> list[str]:
        return [self.executable, "--forward", "--strip=1", "-i", str(patch_file)]

    def apply(self, patch_file: Path, cwd: Path) -> int:
        """Apply one unified diff rooted at cwd and return patch's exit code."""
        return run_command(self.command(patch_file), label="patch", cwd=cwd, check=False)


@dataclass
class PatchResult:
    applied: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


def apply_patches(
    patches: Sequence[str],
    patch_dir: Path,
    build_dir: Path,
    tool: PatchTool,
    *,
    lenient: bool = False,
) -> PatchResult:
    """Apply patches from patch_dir to build_dir in the given order.

    With ``lenient`` a failing patch is logged and the remaining patches are
    still applied. Otherwise the first failure raises PatchError.
    """
    result = PatchResult()
    for patch in patches:
        logger.info("Applying patch: %r", patch)
        patch_file = (patch_dir / patch).resolve()
        returncode = tool.apply(patch_file, build_dir)
        if returncode == 0:
            result.applied.append(patch)
            continue

        result.failed.append(patch)
        if not lenient:
            raise PatchError(
                message=f"Patch {patch!r} failed to apply (exit {returncode})",
                tool="patch",
                command=tool.command(patch_file),
                returncode=returncode,
                patch=patch,
            )
        logger.warning("Patch %r failed to apply (exit %d), continuing", patch, returncode)
    return result
