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

"""Implementation of `aptforge build` command."""

from __future__ import annotations

import logging

import typer

from aptforge.build.coordinator import BuildCoordinator, BuildOptions
from aptforge.build.toolchain import Toolchain
from aptforge.build.tools import require_tools
from aptforge.commands.common import command_run, get_state, load_cli_config
from aptforge.package import PackageConfig, load_package_config


def tools_for_build(config: PackageConfig, options: BuildOptions) -> list[str]:
    """Return the tool keys a build with these options will invoke."""
    keys: list[str] = []
    if not (options.skip_fetch and options.skip_extract):
        keys.append("git")
    if not options.skip_extract and config.meta.patches:
        keys.append("patch")
    if not options.skip_build:
        keys.append("repro_env")
    return keys


def build(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="The package that should be built"),
    skip_fetch: bool = typer.Option(False, "--skip-fetch", help="Skip fetching source code"),
    skip_extract: bool = typer.Option(False, "--skip-extract", help="Skip unpacking the source code"),
    skip_build: bool = typer.Option(False, "--skip-build", help="Skip running the build"),
) -> None:
    """Build a project into a .deb package."""
    state = get_state(ctx)
    cfg = load_cli_config()
    options = BuildOptions(skip_fetch=skip_fetch, skip_extract=skip_extract, skip_build=skip_build)

    with command_run("build", cfg) as run:
        config = load_package_config(state.paths.package_definition(name))
        require_tools(tools_for_build(config, options), cfg)

        coordinator = BuildCoordinator(
            state.paths,
            Toolchain.from_config(cfg, state.paths.root),
            lenient_patches=bool(cfg["behavior"].get("lenient_patches", False)),
            logger=logging.getLogger("aptforge.build"),
            run=run,
        )
        report = coordinator.run(name, config, options)
        run.write_summary(
            package=name,
            version=config.meta.full_version,
            checkout=report.checkout,
            phases=[p.value for p in report.phases],
            build_status=report.status.value,
        )
