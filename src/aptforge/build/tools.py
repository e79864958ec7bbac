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

"""External tool validation for Aptforge commands.

Each command needs a different subset of git, patch, repro-env, reprepro
and rsync. Commands check for their tools up front so a missing tool fails
before anything is modified.
"""

from __future__ import annotations

import shutil
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import git

from aptforge.core.exceptions import ToolError

# git is driven through GitPython, which picks its own executable
# (GIT_PYTHON_GIT_EXECUTABLE), so it is not configurable here.
DEFAULT_EXECUTABLES: dict[str, str] = {
    "patch": "patch",
    "repro_env": "repro-env",
    "reprepro": "reprepro",
    "rsync": "rsync",
}

# Installation instructions per tool
INSTALL_INSTRUCTIONS: dict[str, str] = {
    "git": "apt install git",
    "patch": "apt install patch",
    "repro_env": "see https://github.com/kpcyrd/repro-env",
    "reprepro": "apt install reprepro",
    "rsync": "apt install rsync",
}


@dataclass
class ToolCheck:
    """Result of checking for required external tools."""

    tools: dict[str, Path | None] = field(default_factory=dict)
    missing: list[str] = field(default_factory=list)

    def is_complete(self) -> bool:
        return len(self.missing) == 0


def resolve_executables(overrides: Mapping[str, str] | None = None) -> dict[str, str]:
    """Map each tool key to the executable name that will actually be run."""
    executables = {**DEFAULT_EXECUTABLES, **(overrides or {})}
    executables["git"] = git.Git.GIT_PYTHON_GIT_EXECUTABLE or "git"
    return executables


def find_tool(name: str) -> Path | None:
    """Find an executable tool in PATH."""
    path = shutil.which(name)
    if path:
        return Path(path)
    return None


def check_required_tools(keys: Sequence[str], executables: Mapping[str, str] | None = None) -> ToolCheck:
    """Check that the executables for the given tool keys are on PATH."""
    executables = resolve_executables(executables)
    result = ToolCheck()
    for key in keys:
        exe = executables[key]
        path = find_tool(exe)
        result.tools[exe] = path
        if path is None:
            result.missing.append(key)
    return result


def get_missing_tools_message(missing: Sequence[str], executables: Mapping[str, str] | None = None) -> str:
    """Generate a user-friendly message for installing missing tools."""
    if not missing:
        return ""

    executables = resolve_executables(executables)
    lines = ["The following required tools are missing:"]
    for key in missing:
        instruction = INSTALL_INSTRUCTIONS.get(key, f"Install {executables[key]}")
        lines.append(f"  - {executables[key]}: {instruction}")
    return "\n".join(lines)


def require_tools(keys: Sequence[str], cfg: Mapping[str, Any]) -> None:
    """Raise ToolError if any of the tools named by ``keys`` is not installed."""
    executables = cfg.get("tools", {})
    check = check_required_tools(keys, executables)
    if not check.is_complete():
        raise ToolError(
            message=get_missing_tools_message(check.missing, executables),
            tool=", ".join(check.missing),
        )
