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

"""Aptforge-specific exception types with associated exit codes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AptforgeError(Exception):
    """Base class for Aptforge errors with an exit code."""

    message: str = "An error occurred"
    exit_code: int = field(default=1)

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


@dataclass
class ConfigError(AptforgeError):
    exit_code: int = field(default=1)


@dataclass
class WorkspaceIOError(AptforgeError):
    """Filesystem access or process spawn failure."""

    exit_code: int = field(default=2)
    path: str | None = None


@dataclass
class PackageParseError(AptforgeError):
    """A package definition file is malformed."""

    exit_code: int = field(default=3)
    path: str | None = None


@dataclass
class ToolError(AptforgeError):
    """An external tool exited non-zero or is not installed."""

    exit_code: int = field(default=4)
    tool: str = ""
    command: list[str] = field(default_factory=list)
    returncode: int | None = None


@dataclass
class PatchError(ToolError):
    exit_code: int = field(default=5)
    patch: str = ""


@dataclass
class ChecksumMismatchError(AptforgeError):
    """Raised once at the end of a build when any artifact failed verification."""

    exit_code: int = field(default=6)
    failures: list[str] = field(default_factory=list)


@dataclass
class PreconditionError(AptforgeError):
    exit_code: int = field(default=7)
