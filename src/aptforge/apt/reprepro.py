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

"""Inclusion of built packages into the reprepro-managed APT repository.

reprepro runs from the workspace root, where its ``conf/`` directory and the
``pool/`` and ``dists/`` trees it maintains live.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from aptforge.core.exceptions import PreconditionError
from aptforge.core.paths import WorkspacePaths
from aptforge.core.process import run_command
from aptforge.package import PackageConfig
from aptforge.status import BuildStatus, evaluate_build_status

logger = logging.getLogger(__name__)


class Reprepro:
    def __init__(self, executable: str = "reprepro", cwd: Path | None = None) -> None:
        self.executable = executable
        self.cwd = cwd

    def includedeb_command(self, distribution: str, path: Path) -> list[str]:
        return [self.executable, "includedeb", distribution, str(path)]

    def includedeb(self, distribution: str, path: Path) -> None:
        """Add one .deb to a distribution; raises ToolError on failure."""
        run_command(self.includedeb_command(distribution, path), label="reprepro", cwd=self.cwd)


@dataclass
class IncludeResult:
    """Result of including a package's artifacts."""

    package: str
    distribution: str
    dry_run: bool
    included: list[Path] = field(default_factory=list)


def include_package(
    paths: WorkspacePaths,
    name: str,
    distribution: str,
    config: PackageConfig,
    reprepro: Reprepro,
    *,
    dry_run: bool = False,
) -> IncludeResult:
    """Add every checksummed artifact of a built package to ``distribution``.

    Raises:
        PreconditionError: If the package is not fully built. reprepro is not
            invoked in that case.
        ToolError: On the first failing reprepro invocation.
    """
    build_dir = paths.build_dir(name)
    status = evaluate_build_status(config.checksums, build_dir)
    if status is not BuildStatus.BUILT:
        raise PreconditionError(
            message=f"Package {name} needs to be built first, missing files or mismatched checksum",
        )

    if dry_run:
        logger.info("Dry run mode is enabled")

    result = IncludeResult(package=name, distribution=distribution, dry_run=dry_run)
    for rule in config.checksums:
        artifact = build_dir / rule.path
        logger.info("Running %s...", reprepro.includedeb_command(distribution, artifact))
        if not dry_run:
            reprepro.includedeb(distribution, artifact)
        result.included.append(artifact)
    return result
