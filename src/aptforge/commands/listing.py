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

"""Implementation of `aptforge list` command."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console
from rich.text import Text

from aptforge.commands.common import command_run, get_state, load_cli_config
from aptforge.core.exceptions import WorkspaceIOError
from aptforge.core.paths import PACKAGE_DEFINITION, WorkspacePaths
from aptforge.package import PackageConfig, load_package_config
from aptforge.status import BuildStatus, evaluate_build_status

BUILT_MARKER = "[built]"


@dataclass
class PackageListing:
    name: str
    config: PackageConfig
    status: BuildStatus


def collect_listings(paths: WorkspacePaths) -> list[PackageListing]:
    """Load every package under ``pkgs/`` with its build status, sorted by name."""
    try:
        entries = sorted((p for p in paths.pkgs_dir.iterdir() if p.is_dir()), key=lambda p: p.name)
    except OSError as e:
        raise WorkspaceIOError(message=f"Failed to list {paths.pkgs_dir}: {e}", path=str(paths.pkgs_dir)) from e

    listings = []
    for entry in entries:
        config = load_package_config(entry / PACKAGE_DEFINITION)
        status = evaluate_build_status(config.checksums, paths.build_dir(entry.name))
        listings.append(PackageListing(entry.name, config, status))
    return listings


def format_listing(listing: PackageListing) -> Text:
    """Render one package line: built marker, name, version and repository."""
    meta = listing.config.meta
    marker = BUILT_MARKER if listing.status.is_built else ""
    return Text.assemble(
        (f"{marker:>7}", "green"),
        " ",
        (f"{listing.name:>18}", "bold"),
        " ",
        (f"{meta.version:>8}{meta.suffix}", "cyan"),
        f": {meta.repo}",
    )


def list_packages(ctx: typer.Context) -> None:
    """List all configured packages."""
    state = get_state(ctx)
    cfg = load_cli_config()
    console = Console(highlight=False)

    with command_run("list", cfg) as run:
        listings = collect_listings(state.paths)
        for listing in listings:
            console.print(format_listing(listing), soft_wrap=True)
        run.write_summary(
            packages={item.name: item.status.value for item in listings},
        )
