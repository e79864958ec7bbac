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

"""Implementation of `aptforge publish` command."""

from __future__ import annotations

import typer

from aptforge.apt.publish import DEFAULT_TARGET, publish_repository
from aptforge.build.toolchain import Toolchain
from aptforge.build.tools import require_tools
from aptforge.commands.common import command_run, get_state, load_cli_config


def publish(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "-n", "--dry-run", help="Do not actually upload, instead do a dry-run"),
    target: str = typer.Option("", "--target", help=f"The target to upload to (default: publish.target, {DEFAULT_TARGET})"),
) -> None:
    """Publish the reprepro repository."""
    state = get_state(ctx)
    cfg = load_cli_config()
    publish_cfg = cfg["publish"]

    with command_run("publish", cfg) as run:
        require_tools(["rsync"], cfg)
        toolchain = Toolchain.from_config(cfg, state.paths.root)
        result = publish_repository(
            toolchain.rsync,
            target=target or publish_cfg.get("target", DEFAULT_TARGET),
            signing_key=publish_cfg["signing_key"],
            dry_run=dry_run,
        )
        run.write_summary(
            target=result.target,
            dry_run=dry_run,
            synced=[step.source for step in result.synced],
        )
