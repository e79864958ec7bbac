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

"""Workspace layout helpers for Aptforge.

All paths are relative to a working root:

    pkgs/<name>/build.toml       package definition
    pkgs/<name>/<patch>          patches referenced by the definition
    pkgs/<name>/repro-env.lock   lock file handed to repro-env
    sources/<name>               bare git mirror
    build/<name>                 extraction and build output
    build/                       shared build root, also the lock scope
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

PACKAGE_DEFINITION = "build.toml"
REPRO_ENV_LOCKFILE = "repro-env.lock"


@dataclass(frozen=True)
class WorkspacePaths:
    """Resolved locations of everything Aptforge reads or writes."""

    root: Path

    @classmethod
    def from_root(cls, root: Path | str) -> WorkspacePaths:
        return cls(root=Path(root).expanduser().resolve())

    @property
    def pkgs_dir(self) -> Path:
        return self.root / "pkgs"

    @property
    def sources_dir(self) -> Path:
        return self.root / "sources"

    @property
    def build_root(self) -> Path:
        return self.root / "build"

    def package_dir(self, name: str) -> Path:
        return self.pkgs_dir / name

    def package_definition(self, name: str) -> Path:
        return self.package_dir(name) / PACKAGE_DEFINITION

    def repro_env_lockfile(self, name: str) -> Path:
        return self.package_dir(name) / REPRO_ENV_LOCKFILE

    def mirror_path(self, name: str) -> Path:
        return self.sources_dir / name

    def build_dir(self, name: str) -> Path:
        return self.build_root / name


def ensure_directories(paths: WorkspacePaths) -> list[Path]:
    """Create the top-level workspace directories.

    Returns the list of directories that were ensured.
    """
    required = [paths.pkgs_dir, paths.sources_dir, paths.build_root]
    for p in required:
        p.mkdir(parents=True, exist_ok=True)
    return required
