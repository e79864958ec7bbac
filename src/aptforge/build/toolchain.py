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

"""The set of external tools a command works with.

Tests substitute fakes for any member.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from aptforge.apt.publish import Rsync
from aptforge.apt.reprepro import Reprepro
from aptforge.build.patches import PatchTool
from aptforge.build.repro_env import ReproEnv
from aptforge.gitfetch import GitTool


@dataclass
class Toolchain:
    git: GitTool
    patch: PatchTool
    repro_env: ReproEnv
    reprepro: Reprepro
    rsync: Rsync

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any], root: Path) -> Toolchain:
        """Create the real tools, with executables taken from the ``tools`` section."""
        tools = cfg.get("tools", {})
        return cls(
            git=GitTool(),
            patch=PatchTool(tools.get("patch", "patch")),
            repro_env=ReproEnv(tools.get("repro_env", "repro-env")),
            reprepro=Reprepro(tools.get("reprepro", "reprepro"), cwd=root),
            rsync=Rsync(tools.get("rsync", "rsync"), cwd=root),
        )
