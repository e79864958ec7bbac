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

"""Tests for the `aptforge include` and `aptforge publish` commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import PackageWriter, sha256_of
from typer.testing import CliRunner

from aptforge.build.toolchain import Toolchain
from aptforge.cli import app
from aptforge.commands import include as include_cmd
from aptforge.commands import publish as publish_cmd
from aptforge.core.paths import WorkspacePaths

runner = CliRunner()


def last_summary(temp_home: Path) -> dict:
    runs = sorted((temp_home / ".cache" / "aptforge" / "runs").iterdir())
    return json.loads((runs[-1] / "summary.json").read_text())


@pytest.fixture
def patched_tools(monkeypatch: pytest.MonkeyPatch, fake_toolchain: Toolchain) -> Toolchain:
    required: list[list[str]] = []
    monkeypatch.setattr(Toolchain, "from_config", staticmethod(lambda cfg, root: fake_toolchain))
    monkeypatch.setattr(include_cmd, "require_tools", lambda keys, cfg: required.append(list(keys)))
    monkeypatch.setattr(publish_cmd, "require_tools", lambda keys, cfg: required.append(list(keys)))
    fake_toolchain.required = required  # type: ignore[attr-defined]
    return fake_toolchain


@pytest.fixture
def built_foo(workspace: WorkspacePaths, write_package: PackageWriter) -> None:
    write_package("foo", checksums=[("out/foo.deb", sha256_of(b"foo"))])
    out = workspace.build_dir("foo") / "out"
    out.mkdir(parents=True)
    (out / "foo.deb").write_bytes(b"foo")


@pytest.mark.usefixtures("mock_config", "built_foo")
class TestIncludeCommand:
    def test_include(self, temp_home: Path, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        result = runner.invoke(app, ["-C", str(workspace.root), "include", "stable", "foo"])

        assert result.exit_code == 0
        assert patched_tools.reprepro.calls == [  # type: ignore[attr-defined]
            ("stable", workspace.build_dir("foo") / "out/foo.deb"),
        ]
        assert patched_tools.required == [["reprepro"]]  # type: ignore[attr-defined]
        summary = last_summary(temp_home)
        assert summary["distribution"] == "stable"
        assert summary["dry_run"] is False

    def test_dry_run(self, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        result = runner.invoke(app, ["-C", str(workspace.root), "include", "-n", "stable", "foo"])

        assert result.exit_code == 0
        assert patched_tools.reprepro.calls == []  # type: ignore[attr-defined]
        assert patched_tools.required == []  # type: ignore[attr-defined]

    def test_not_built(self, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        (workspace.build_dir("foo") / "out" / "foo.deb").write_bytes(b"tampered")
        result = runner.invoke(app, ["-C", str(workspace.root), "include", "stable", "foo"])

        assert result.exit_code == 7
        assert patched_tools.reprepro.calls == []  # type: ignore[attr-defined]


@pytest.mark.usefixtures("mock_config")
class TestPublishCommand:
    def test_target_from_config(self, temp_home: Path, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        result = runner.invoke(app, ["-C", str(workspace.root), "publish"])

        assert result.exit_code == 0
        calls = patched_tools.rsync.calls  # type: ignore[attr-defined]
        assert [c[1] for c in calls] == ["pool/", "dists/", "pool/", "index.html", "archive-key.pgp"]
        assert calls[0] == ("-avhPi", "pool/", "apt:/var/www/html/pool", False)
        assert patched_tools.required == [["rsync"]]  # type: ignore[attr-defined]
        assert last_summary(temp_home)["target"] == "apt:/var/www/html"

    def test_target_option_and_dry_run(self, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        result = runner.invoke(
            app,
            ["-C", str(workspace.root), "publish", "--dry-run", "--target", "mirror:/srv/apt/"],
        )

        assert result.exit_code == 0
        calls = patched_tools.rsync.calls  # type: ignore[attr-defined]
        assert all(flags == "-avhPicn" for flags, *_ in calls)
        assert calls[1] == ("-avhPicn", "dists/", "mirror:/srv/apt/dists", True)
