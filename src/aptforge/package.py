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

"""Package definitions (``pkgs/<name>/build.toml``).

A definition looks like::

    [meta]
    repo = "https://github.com/example/foo.git"
    version = "1.2.0"
    suffix = "-1"
    checkout = "v1.2.0"
    patches = ["0001-fix-build.patch"]

    [build]
    cmd = "make deb"

    [[checksums]]
    path = "out/foo_1.2.0-1_amd64.deb"
    checksum = "sha256:..."
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from aptforge.checksum import ChecksumResult, validate_checksum, verify_checksum
from aptforge.core.exceptions import PackageParseError, WorkspaceIOError


@dataclass(frozen=True)
class ChecksumRule:
    """An artifact the build must produce, relative to the build directory."""

    path: str
    checksum: str

    def verify(self, build_dir: Path) -> ChecksumResult:
        return verify_checksum(build_dir / self.path, self.checksum)


@dataclass(frozen=True)
class Meta:
    repo: str
    version: str
    suffix: str = ""
    checkout: str | None = None
    patches: tuple[str, ...] = ()

    @property
    def full_version(self) -> str:
        """Version string handed to the build (version plus suffix)."""
        return f"{self.version}{self.suffix}"


@dataclass(frozen=True)
class BuildSpec:
    cmd: str


@dataclass(frozen=True)
class PackageConfig:
    meta: Meta
    build: BuildSpec
    checksums: tuple[ChecksumRule, ...] = field(default_factory=tuple)


def resolve_checkout(meta: Meta) -> str:
    """Return the git reference to extract: the explicit checkout or ``v<version>``."""
    if meta.checkout:
        return meta.checkout
    return f"v{meta.version}"


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    if value is None:
        raise PackageParseError(message=f"Missing [{key}] section")
    if not isinstance(value, dict):
        raise PackageParseError(message=f"[{key}] must be a table")
    return value


def _string(section: Mapping[str, Any], key: str, where: str, *, required: bool) -> str | None:
    value = section.get(key)
    if value is None:
        if required:
            raise PackageParseError(message=f"Missing required field {where}.{key}")
        return None
    if not isinstance(value, str):
        raise PackageParseError(message=f"{where}.{key} must be a string")
    return value


def _check_artifact_path(path: str) -> None:
    pure = PurePosixPath(path)
    if not path or pure.is_absolute() or ".." in pure.parts:
        raise PackageParseError(message=f"Checksum path {path!r} must be relative to the build directory")


def _parse_checksums(raw: Any) -> tuple[ChecksumRule, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise PackageParseError(message="checksums must be an array of tables")

    rules: list[ChecksumRule] = []
    for i, entry in enumerate(raw):
        where = f"checksums[{i}]"
        if not isinstance(entry, dict):
            raise PackageParseError(message=f"{where} must be a table")
        path = _string(entry, "path", where, required=True)
        checksum = _string(entry, "checksum", where, required=True)
        assert path is not None and checksum is not None
        _check_artifact_path(path)
        validate_checksum(checksum)
        rules.append(ChecksumRule(path=path, checksum=checksum))
    return tuple(rules)


def parse_package_config(data: Mapping[str, Any]) -> PackageConfig:
    """Build a PackageConfig from already-decoded TOML data."""
    meta_raw = _section(data, "meta")
    build_raw = _section(data, "build")

    repo = _string(meta_raw, "repo", "meta", required=True)
    version = _string(meta_raw, "version", "meta", required=True)
    suffix = _string(meta_raw, "suffix", "meta", required=False) or ""
    checkout = _string(meta_raw, "checkout", "meta", required=False)

    patches_raw = meta_raw.get("patches", [])
    if not isinstance(patches_raw, list) or not all(isinstance(p, str) for p in patches_raw):
        raise PackageParseError(message="meta.patches must be a list of strings")

    cmd = _string(build_raw, "cmd", "build", required=True)
    assert repo is not None and version is not None and cmd is not None

    return PackageConfig(
        meta=Meta(
            repo=repo,
            version=version,
            suffix=suffix,
            checkout=checkout,
            patches=tuple(patches_raw),
        ),
        build=BuildSpec(cmd=cmd),
        checksums=_parse_checksums(data.get("checksums")),
    )


def load_package_config(path: Path) -> PackageConfig:
    """Read and validate a package definition file.

    Raises:
        WorkspaceIOError: If the file cannot be read.
        PackageParseError: If the file is not valid TOML or misses required fields.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise WorkspaceIOError(message=f"Failed to read {path}: {e}", path=str(path)) from e
    except UnicodeDecodeError as e:
        raise PackageParseError(message=f"{path} is not valid UTF-8: {e}", path=str(path)) from e

    try:
        data = tomllib.loads(text)
        return parse_package_config(data)
    except tomllib.TOMLDecodeError as e:
        raise PackageParseError(message=f"Invalid TOML in {path}: {e}", path=str(path)) from e
    except PackageParseError as e:
        raise PackageParseError(message=f"{path}: {e.message}", path=str(path)) from e
