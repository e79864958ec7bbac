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

"""Tests for aptforge.build.repro_env module."""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest import mock

from aptforge.build.repro_env import VERSION_ENV, ReproEnv, ReproEnvConfig, build_repro_env_command


def _config(tmp_path: Path) -> ReproEnvConfig:
    return ReproEnvConfig(
        build_dir=tmp_path / "build" / "foo",
        lockfile=tmp_path / "pkgs" / "foo" / "repro-env.lock",
        command="make deb",
        env={VERSION_ENV: "1.2.0-1"},
    )


class TestBuildReproEnvCommand:
    def test_command_line(self, tmp_path: Path) -> None:
        assert build_repro_env_command(_config(tmp_path)) == [
            "repro-env",
            "build",
            "--env",
            "DEB_VERSION=1.2.0-1",
            "-f",
            str(tmp_path / "pkgs" / "foo" / "repro-env.lock"),
            "--",
            "sh",
            "-c",
            "make deb",
        ]

    def test_custom_executable(self, tmp_path: Path) -> None:
        assert build_repro_env_command(_config(tmp_path), "/opt/bin/repro-env")[0] == "/opt/bin/repro-env"

    def test_command_passed_as_single_argument(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        config.command = "cargo build --release && make deb"
        assert build_repro_env_command(config)[-1] == "cargo build --release && make deb"


class TestReproEnv:
    def test_runs_in_build_dir(self, tmp_path: Path) -> None:
        config = _config(tmp_path)
        with mock.patch(
            "aptforge.core.process.subprocess.run",
            return_value=subprocess.CompletedProcess(args=[], returncode=2),
        ) as run:
            assert ReproEnv().build(config) == 2

        assert run.call_args.kwargs["cwd"] == config.build_dir
        assert run.call_args.args[0][:2] == ["repro-env", "build"]
