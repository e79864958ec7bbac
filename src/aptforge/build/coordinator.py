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

"""Build sequencing for a single package.

A build walks through these phases:

    fetch -> lock -> extract -> patch -> build -> verify -> done

fetch, extract (together with patch) and build can each be skipped. Locking
and verification always run. Everything from extraction to verification
happens while holding the exclusive lock on the build root, so concurrent
Aptforge processes never modify ``build/`` at the same time.

Verification checks every artifact before failing, so one run reports all
missing and mismatched files. The artifacts alone decide the result: a
non-zero exit of the build command is logged, and the run still succeeds
when every checksum matches.
"""

from __future__ import annotations

import enum
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from aptforge.build.events import log_phase_event
from aptforge.build.lock import workspace_lock
from aptforge.build.patches import PatchResult, apply_patches
from aptforge.build.repro_env import VERSION_ENV, ReproEnvConfig
from aptforge.checksum import ChecksumOutcome
from aptforge.core.exceptions import ChecksumMismatchError, WorkspaceIOError
from aptforge.gitfetch import FetchResult, extract_source, fetch_source
from aptforge.package import PackageConfig, resolve_checkout
from aptforge.status import BuildStatus, RuleResult, aggregate_status

if TYPE_CHECKING:
    from aptforge.build.toolchain import Toolchain
    from aptforge.core.paths import WorkspacePaths
    from aptforge.core.run import RunContext


class BuildPhase(enum.Enum):
    FETCHING = "fetch"
    LOCKING = "lock"
    EXTRACTING = "extract"
    PATCHING = "patch"
    BUILDING = "build"
    VERIFYING = "verify"
    DONE = "done"


@dataclass(frozen=True)
class BuildOptions:
    skip_fetch: bool = False
    skip_extract: bool = False
    skip_build: bool = False


@dataclass
class BuildReport:
    """What happened during one build run."""

    package: str
    phases: list[BuildPhase] = field(default_factory=list)
    fetch: FetchResult | None = None
    checkout: str | None = None
    patches: PatchResult | None = None
    build_returncode: int | None = None
    results: list[RuleResult] = field(default_factory=list)

    @property
    def status(self) -> BuildStatus:
        return aggregate_status(self.results)

    @property
    def failures(self) -> list[RuleResult]:
        return [r for r in self.results if not r.result.ok]


class BuildCoordinator:
    """Runs the build phases for one package against a workspace."""

    def __init__(
        self,
        paths: WorkspacePaths,
        toolchain: Toolchain,
        *,
        lenient_patches: bool = False,
        logger: logging.Logger | None = None,
        run: RunContext | None = None,
    ) -> None:
        self.paths = paths
        self.toolchain = toolchain
        self.lenient_patches = lenient_patches
        self.logger = logger or logging.getLogger(__name__)
        self.run_context = run

    def _event(self, phase: BuildPhase, message: str, event: str, *, level: int = logging.INFO, **data: object) -> None:
        log_phase_event(self.logger, self.run_context, phase.value, message, f"{phase.value}.{event}", level=level, **data)

    def run(self, name: str, config: PackageConfig, options: BuildOptions | None = None) -> BuildReport:
        """Build ``name`` and verify its artifacts.

        Raises:
            ToolError: If fetching or extraction fails.
            PatchError: If a patch fails and patches are not lenient.
            ChecksumMismatchError: If any artifact is missing or mismatched.
            WorkspaceIOError: On filesystem failures.
        """
        options = options or BuildOptions()
        report = BuildReport(package=name)

        if not options.skip_fetch:
            self._event(BuildPhase.FETCHING, "Preparing git checkout", "start", repo=config.meta.repo)
            report.fetch = fetch_source(self.paths, name, config.meta, self.toolchain.git)
            report.phases.append(BuildPhase.FETCHING)

        build_dir = self.paths.build_dir(name)
        try:
            build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise WorkspaceIOError(message=f"Failed to create {build_dir}: {e}", path=str(build_dir)) from e

        self._event(BuildPhase.LOCKING, "Acquiring build handle", "acquire", build_root=str(self.paths.build_root))
        with workspace_lock(self.paths.build_root):
            report.phases.append(BuildPhase.LOCKING)

            if not options.skip_extract:
                self._extract(name, config, build_dir, report)
                self._patch(name, config, build_dir, report)

            if not options.skip_build:
                self._build(name, config, build_dir, report)

            self._verify(config, build_dir, report)

        report.phases.append(BuildPhase.DONE)

        if report.failures:
            raise ChecksumMismatchError(
                message="Some artifact checksums mismatched",
                failures=[r.rule.path for r in report.failures],
            )
        return report

    def _extract(self, name: str, config: PackageConfig, build_dir: Path, report: BuildReport) -> None:
        try:
            shutil.rmtree(build_dir)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise WorkspaceIOError(message=f"Failed to remove {build_dir}: {e}", path=str(build_dir)) from e

        ref = resolve_checkout(config.meta)
        self._event(BuildPhase.EXTRACTING, f"Extracting {ref}", "start", ref=ref, build_dir=str(build_dir))
        extract_source(self.paths, name, ref, self.toolchain.git)
        report.checkout = ref
        report.phases.append(BuildPhase.EXTRACTING)

    def _patch(self, name: str, config: PackageConfig, build_dir: Path, report: BuildReport) -> None:
        if not config.meta.patches:
            return
        report.patches = apply_patches(
            config.meta.patches,
            self.paths.package_dir(name),
            build_dir,
            self.toolchain.patch,
            lenient=self.lenient_patches,
        )
        self._event(
            BuildPhase.PATCHING,
            f"Applied {len(report.patches.applied)} of {len(config.meta.patches)} patches",
            "done",
            applied=report.patches.applied,
            failed=report.patches.failed,
        )
        report.phases.append(BuildPhase.PATCHING)

    def _build(self, name: str, config: PackageConfig, build_dir: Path, report: BuildReport) -> None:
        self._event(BuildPhase.BUILDING, "Starting build", "start", version=config.meta.full_version)
        self.logger.debug("Executing command: %r", config.build.cmd)
        returncode = self.toolchain.repro_env.build(
            ReproEnvConfig(
                build_dir=build_dir.resolve(),
                lockfile=self.paths.repro_env_lockfile(name).resolve(),
                command=config.build.cmd,
                env={VERSION_ENV: config.meta.full_version},
            )
        )
        report.build_returncode = returncode
        report.phases.append(BuildPhase.BUILDING)
        if returncode != 0:
            self._event(
                BuildPhase.BUILDING,
                f"Build command exited with status {returncode}",
                "failed",
                level=logging.ERROR,
                returncode=returncode,
            )

    def _verify(self, config: PackageConfig, build_dir: Path, report: BuildReport) -> None:
        for rule in config.checksums:
            self.logger.info("Checking expected checksum for %r", rule.path)
            r = RuleResult(rule, rule.verify(build_dir))
            report.results.append(r)
            if r.outcome is ChecksumOutcome.MISSING:
                self._event(
                    BuildPhase.VERIFYING,
                    f"Missing compiled artifact {r.rule.path!r}",
                    "missing",
                    level=logging.ERROR,
                    path=r.rule.path,
                )
            elif r.outcome is ChecksumOutcome.MISMATCH:
                self._event(
                    BuildPhase.VERIFYING,
                    f"Compiled artifact {r.rule.path!r} ({r.result.calculated}) does not match "
                    f"expected checksum ({r.rule.checksum})",
                    "mismatch",
                    level=logging.ERROR,
                    path=r.rule.path,
                    calculated=r.result.calculated,
                    expected=r.rule.checksum,
                )
        report.phases.append(BuildPhase.VERIFYING)
        self._event(BuildPhase.VERIFYING, f"Build status: {report.status.value}", "done", status=report.status.value)
