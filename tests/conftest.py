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

"""Pytest fixtures and configuration for Aptforge tests."""

from __future__ import annotations

import hashlib
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from aptforge.build.toolchain import Toolchain
from aptforge.core.paths import WorkspacePaths, ensure_directories


def sha256_of(content: bytes) -> str:
    return "sha256:" + hashlib.sha256(content).hexdigest()


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def temp_home(monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """Create a temporary home directory and set HOME/XDG paths."""
    with tempfile.TemporaryDirectory() as tmpdir:
        home = Path(tmpdir)
        monkeypatch.setenv("HOME", str(home))
        monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
        monkeypatch.setattr(Path, "home", lambda: home)
        yield home


@pytest.fixture
def mock_config(temp_home: Path) -> Path:
    """Create a minimal config file in the temp home."""
    config_dir = temp_home / ".config" / "aptforge"
    config_dir.mkdir(parents=True, exist_ok=True)
    config_file = config_dir / "config.yaml"
    config_file.write_text("""
paths:
  runs_root: "~/.cache/aptforge/runs"

tools:
  patch: "patch"
  repro_env: "repro-env"
  reprepro: "reprepro"
  rsync: "rsync"

publish:
  target: "apt:/var/www/html/"
  signing_key: "archive-key.pgp"

behavior:
  lenient_patches: false
""")
    return config_file


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspacePaths:
    """An empty workspace with pkgs/, sources/ and build/."""
    paths = WorkspacePaths.from_root(tmp_path / "work")
    ensure_directories(paths)
    return paths


PackageWriter = Callable[..., Path]


@pytest.fixture
def write_package(workspace: WorkspacePaths) -> PackageWriter:
    """Write ``pkgs/<name>/build.toml`` and return its path."""

    def _write(
        name: str,
        *,
        repo: str = "https://example.com/foo.git",
        version: str = "1.2.0",
        suffix: str | None = None,
        checkout: str | None = None,
        patches: list[str] | None = None,
        cmd: str = "make deb",
        checksums: list[tuple[str, str]] | None = None,
    ) -> Path:
        lines = ["[meta]", f'repo = "{repo}"', f'version = "{version}"']
        if suffix is not None:
            lines.append(f'suffix = "{suffix}"')
        if checkout is not None:
            lines.append(f'checkout = "{checkout}"')
        if patches is not None:
            lines.append("patches = [" + ", ".join(f'"{p}"' for p in patches) + "]")
        lines += ["", "[build]", f'cmd = "{cmd}"']
        for path, checksum in checksums or []:
            lines += ["", "[[checksums]]", f'path = "{path}"', f'checksum = "{checksum}"']

        definition = workspace.package_definition(name)
        definition.parent.mkdir(parents=True, exist_ok=True)
        definition.write_text("\n".join(lines) + "\n")
        return definition

    return _write


class FakeGit:
    """Records git calls; archive writes a fixed file tree."""

    def __init__(self, tree: dict[str, bytes] | None = None) -> None:
        self.calls: list[tuple] = []
        self.tree = tree if tree is not None else {"README": b"hello\n"}

    def init_bare(self, path: Path) -> None:
        self.calls.append(("init_bare", path))
        path.mkdir(parents=True)

    def add_remote(self, path: Path, url: str, name: str = "origin") -> None:
        self.calls.append(("add_remote", path, url))

    def fetch(self, path: Path, remote: str = "origin") -> None:
        self.calls.append(("fetch", path))

    def archive(self, path: Path, ref: str, dest: Path) -> None:
        self.calls.append(("archive", path, ref, dest))
        for rel, content in self.tree.items():
            target = dest / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)


class FakePatch:
    def __init__(self, returncodes: dict[str, int] | None = None) -> None:
        self.returncodes = returncodes or {}
        self.calls: list[tuple[Path, Path]] = []

    def command(self, patch_file: Path) -> list[str]:
        return ["patch", "--forward", "--strip=1", "-i", str(patch_file)]

    def apply(self, patch_file: Path, cwd: Path) -> int:
        self.calls.append((patch_file, cwd))
        return self.returncodes.get(patch_file.name, 0)


class FakeReproEnv:
    """Writes the configured artifacts into the build directory."""

    def __init__(self, outputs: dict[str, bytes] | None = None, returncode: int = 0) -> None:
        self.outputs = outputs or {}
        self.returncode = returncode
        self.calls: list = []

    def build(self, config) -> int:
        self.calls.append(config)
        for rel, content in self.outputs.items():
            target = config.build_dir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        return self.returncode


class FakeReprepro:
    def __init__(self) -> None:
        self.calls: list[tuple[str, Path]] = []

    def includedeb_command(self, distribution: str, path: Path) -> list[str]:
        return ["reprepro", "includedeb", distribution, str(path)]

    def includedeb(self, distribution: str, path: Path) -> None:
        self.calls.append((distribution, path))


class FakeRsync:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str, bool]] = []

    def sync(self, flags: str, source: str, dest: str, delete: bool = False) -> None:
        self.calls.append((flags, source, dest, delete))


@pytest.fixture
def fake_toolchain() -> Toolchain:
    return Toolchain(
        git=FakeGit(),  # type: ignore[arg-type]
        patch=FakePatch(),  # type: ignore[arg-type]
        repro_env=FakeReproEnv(),  # type: ignore[arg-type]
        reprepro=FakeReprepro(),  # type: ignore[arg-type]
        rsync=FakeRsync(),  # type: ignore[arg-type]
    )
