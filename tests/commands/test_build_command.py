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

"""Tests for the `aptforge build` command."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest
from conftest import PackageWriter, sha256_of
from typer.testing import CliRunner

from aptforge.build.coordinator import BuildOptions
from aptforge.build.toolchain import Toolchain
from aptforge.cli import app
from aptforge.commands import build as build_cmd
from aptforge.core.paths import WorkspacePaths
from aptforge.package import BuildSpec, Meta, PackageConfig

runner = CliRunner()

FOO_DEB = b"foo deb"


def last_summary(temp_home: Path) -> dict:
    runs = sorted((temp_home / ".cache" / "aptforge" / "runs").iterdir())
    return json.loads((runs[-1] / "summary.json").read_text())


@pytest.fixture
def patched_tools(monkeypatch: pytest.MonkeyPatch, fake_toolchain: Toolchain) -> Toolchain:
    """Route the build command to the fake toolchain and skip PATH checks."""
    required: list[list[str]] = []
    monkeypatch.setattr(Toolchain, "from_config", staticmethod(lambda cfg, root: fake_toolchain))
    monkeypatch.setattr(build_cmd, "require_tools", lambda keys, cfg: required.append(list(keys)))
    fake_toolchain.required = required  # type: ignore[attr-defined]
    return fake_toolchain


class TestToolsForBuild:
    def _config(self, patches: tuple[str, ...] = ()) -> PackageConfig:
        return PackageConfig(meta=Meta(repo="r", version="1", patches=patches), build=BuildSpec(cmd="x"))

    def test_full_build(self) -> None:
        assert build_cmd.tools_for_build(self._config(("a.patch",)), BuildOptions()) == ["git", "patch", "repro_env"]

    def test_without_patches(self) -> None:
        assert build_cmd.tools_for_build(self._config(), BuildOptions()) == ["git", "repro_env"]

    def test_verify_only(self) -> None:
        options = BuildOptions(skip_fetch=True, skip_extract=True, skip_build=True)
        assert build_cmd.tools_for_build(self._config(("a.patch",)), options) == []


@pytest.mark.usefixtures("mock_config")
class TestBuildCommand:
    """End-to-end runs of `aptforge build` with fake tools."""

    def test_successful_build(
        self,
        temp_home: Path,
        workspace: WorkspacePaths,
        write_package: PackageWriter,
        patched_tools: Toolchain,
    ) -> None:
        write_package("foo", suffix="-1", checksums=[("out/foo.deb", sha256_of(FOO_DEB))])
        patched_tools.repro_env.outputs = {"out/foo.deb": FOO_DEB}  # type: ignore[attr-defined]

        result = runner.invoke(app, ["-C", str(workspace.root), "build", "foo"])

        assert result.exit_code == 0
        assert patched_tools.required == [["git", "repro_env"]]  # type: ignore[attr-defined]
        summary = last_summary(temp_home)
        assert summary["status"] == "success"
        assert summary["package"] == "foo"
        assert summary["version"] == "1.2.0-1"
        assert summary["checkout"] == "v1.2.0"
        assert summary["build_status"] == "built"
        assert summary["phases"] == ["fetch", "lock", "extract", "build", "verify", "done"]

    def test_missing_artifact_exit_code(
        self,
        temp_home: Path,
        workspace: WorkspacePaths,
        write_package: PackageWriter,
        patched_tools: Toolchain,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        caplog.set_level(logging.INFO, logger="aptforge")
        write_package(
            "foo",
            checksums=[("out/foo.deb", sha256_of(FOO_DEB)), ("out/foo.changes", sha256_of(b"changes"))],
        )
        patched_tools.repro_env.outputs = {"out/foo.deb": FOO_DEB}  # type: ignore[attr-defined]

        result = runner.invoke(app, ["-C", str(workspace.root), "build", "foo"])

        assert result.exit_code == 6
        assert "Missing compiled artifact 'out/foo.changes'" in caplog.text
        assert "Some artifact checksums mismatched" in caplog.text
        summary = last_summary(temp_home)
        assert summary["status"] == "failed"
        assert summary["exit_code"] == 6

    def test_skip_flags(
        self,
        workspace: WorkspacePaths,
        write_package: PackageWriter,
        patched_tools: Toolchain,
    ) -> None:
        write_package("foo")
        result = runner.invoke(
            app,
            ["-C", str(workspace.root), "build", "foo", "--skip-fetch", "--skip-extract", "--skip-build"],
        )
        assert result.exit_code == 0
        assert patched_tools.git.calls == []  # type: ignore[attr-defined]
        assert patched_tools.repro_env.calls == []  # type: ignore[attr-defined]

    def test_unknown_package(self, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        result = runner.invoke(app, ["-C", str(workspace.root), "build", "nope"])
        assert result.exit_code == 2

    def test_invalid_definition(self, workspace: WorkspacePaths, patched_tools: Toolchain) -> None:
        definition = workspace.package_definition("foo")
        definition.parent.mkdir(parents=True)
        definition.write_text('[meta]\nrepo = "r"\n')
        result = runner.invoke(app, ["-C", str(workspace.root), "build", "foo"])
        assert result.exit_code == 3

    def test_lenient_patches_from_config(
        self,
        mock_config: Path,
        workspace: WorkspacePaths,
        write_package: PackageWriter,
        patched_tools: Toolchain,
    ) -> None:
        mock_config.write_text(mock_config.read_text().replace("lenient_patches: false", "lenient_patches: true"))
        patched_tools.patch.returncodes = {"0001-fix.patch": 1}  # type: ignore[attr-defined]
        write_package("foo", patches=["0001-fix.patch"])

        result = runner.invoke(app, ["-C", str(workspace.root), "build", "foo"])
        assert result.exit_code == 0
        assert len(patched_tools.repro_env.calls) == 1  # type: ignore[attr-defined]

    def test_failed_patch_exit_code(
        self,
        workspace: WorkspacePaths,
        write_package: PackageWriter,
        patched_tools: Toolchain,
    ) -> None:
        patched_tools.patch.returncodes = {"0001-fix.patch": 1}  # type: ignore[attr-defined]
        write_package("foo", patches=["0001-fix.patch"])

        result = runner.invoke(app, ["-C", str(workspace.root), "build", "foo"])
        assert result.exit_code == 5
