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

"""Implementation of `aptforge include` command."""

from __future__ import annotations

import typer

from aptforge.apt.reprepro import include_package
from aptforge.build.toolchain import Toolchain
from aptforge.build.tools import require_tools
from aptforge.commands.common import command_run, get_state, load_cli_config
from aptforge.package import load_package_config


def include(
    ctx: typer.Context,
    distribution: str = typer.Argument(..., help="The code name of the distribution to add it to (e.g. `stable`)"),
    name: str = typer.Argument(..., help="The name of the package which files should be added"),
    dry_run: bool = typer.Option(False, "-n", "--dry-run", help="Do not actually run reprepro"),
) -> None:
    """Add all files of a package with reprepro."""
    state = get_state(ctx)
    cfg = load_cli_config()

    with command_run("include", cfg) as run:
        config = load_package_config(state.paths.package_definition(name))
        if not dry_run:
            require_tools(["reprepro"], cfg)

        toolchain = Toolchain.from_config(cfg, state.paths.root)
        result = include_package(
            state.paths,
            name,
            distribution,
            config,
            toolchain.reprepro,
            dry_run=dry_run,
        )
        run.write_summary(
            package=name,
            distribution=distribution,
            dry_run=dry_run,
            included=[str(p) for p in result.included],
        )
