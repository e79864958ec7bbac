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

"""CLI application definition for Aptforge."""

from __future__ import annotations

from pathlib import Path

import typer
from typer import Typer

from aptforge.commands.build import build
from aptforge.commands.common import AppState
from aptforge.commands.include import include
from aptforge.commands.init import init
from aptforge.commands.listing import list_packages
from aptforge.commands.publish import publish
from aptforge.core.log import setup_logging
from aptforge.core.paths import WorkspacePaths

app: Typer = Typer(
    name="aptforge",
    help="Build reproducible Debian packages and publish them to an APT repository.",
    add_completion=False,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: int = typer.Option(0, "-v", "--verbose", count=True, help="Increase logging output (can be used multiple times)"),
    directory: Path = typer.Option(Path("."), "-C", "--directory", help="Workspace root containing pkgs/, sources/ and build/"),
) -> None:
    setup_logging(verbose)
    ctx.obj = AppState(paths=WorkspacePaths.from_root(directory))


# Register commands
app.command(name="init")(init)
app.command(name="build")(build)
app.command(name="list")(list_packages)
app.command(name="include")(include)
app.command(name="publish")(publish)
