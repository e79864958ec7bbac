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

"""repro-env wrapper for Aptforge builds.

repro-env runs a command inside a container pinned by a lock file, so the
same lock file and inputs produce bit-identical artifacts. Aptforge hands it
the package version through the environment and the build command as a
``sh -c`` payload:

    repro-env build --env DEB_VERSION=1.2.0-1 -f pkgs/foo/repro-env.lock -- sh -c '<cmd>'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from aptforge.core.process import run_command

VERSION_ENV = "DEB_VERSION"


@dataclass
class ReproEnvConfig:
    """Inputs for one repro-env build."""

    build_dir: Path
    lockfile: Path
    command: str
    env: dict[str, str] = field(default_factory=dict)


def build_repro_env_command(config: ReproEnvConfig, executable: str = "repro-env") -> list[str]:
    """Build the repro-env command line for a config."""
    cmd = [executable, "build"]
    for key, value in config.env.items():
        cmd.extend(["--env", f"{key}={value}"])
    cmd.extend(["-f", str(config.lockfile), "--", "sh", "-c", config.command])
    return cmd


class ReproEnv:
    def __init__(self, executable: str = "repro-env") -> None:
        self.executable = executable

    def build(self, config: ReproEnvConfig) -> int:
        """Run the build rooted at the build directory; returns the exit code."""
        return run_command(
            build_repro_env_command(config, self.executable),
            label="repro-env",
            cwd=config.build_dir,
            check=False,
        )
