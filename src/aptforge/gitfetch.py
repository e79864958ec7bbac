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

"""Source mirroring and extraction.

Each package's upstream repository is mirrored into a bare repository under
``sources/<name>``. Builds never work inside the mirror: the requested
reference is exported with ``git archive`` and unpacked into the build
directory, so the build tree carries no git metadata.
"""

from __future__ import annotations

import logging
import tarfile
from dataclasses import dataclass
from pathlib import Path

import git

from aptforge.core.exceptions import ToolError, WorkspaceIOError
from aptforge.core.paths import WorkspacePaths
from aptforge.package import Meta

logger = logging.getLogger(__name__)

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH = "main"


@dataclass
class FetchResult:
    """Result of a mirror fetch."""

    package: str
    path: Path
    created: bool = False


def _git_error(action: str, path: Path, e: Exception) -> ToolError:
    return ToolError(message=f"git {action} failed for {path}: {e}", tool="git")


class GitTool:
    """The git invocations Aptforge needs, driven through GitPython."""

    def init_bare(self, path: Path) -> None:
        try:
            git.Repo.init(path, bare=True, mkdir=True, initial_branch=DEFAULT_BRANCH, quiet=True)
        except git.GitCommandError as e:
            raise _git_error("init", path, e) from e

    def add_remote(self, path: Path, url: str, name: str = DEFAULT_REMOTE) -> None:
        try:
            git.Repo(path).create_remote(name, url)
        except (git.GitCommandError, git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise _git_error("remote add", path, e) from e

    def fetch(self, path: Path, remote: str = DEFAULT_REMOTE) -> None:
        try:
            git.Repo(path).remote(remote).fetch()
        except (git.GitCommandError, git.InvalidGitRepositoryError, git.NoSuchPathError, ValueError) as e:
            raise _git_error("fetch", path, e) from e

    def archive(self, path: Path, ref: str, dest: Path) -> None:
        """Stream ``git archive --format tar <ref>`` and unpack it into dest."""
        try:
            repo = git.Repo(path)
        except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
            raise _git_error("archive", path, e) from e

        repo.git.set_persistent_git_options(c="core.abbrev=no")
        proc = repo.git.archive("--format", "tar", ref, as_process=True)
        read_error: tarfile.TarError | None = None
        try:
            with tarfile.open(fileobj=proc.stdout, mode="r|") as archive:
                archive.extractall(dest, filter="tar")
            # Drain trailing padding so git can exit.
            proc.stdout.read()
        except tarfile.TarError as e:
            read_error = e
            proc.stdout.read()
        except OSError as e:
            raise WorkspaceIOError(message=f"Failed to unpack {ref} into {dest}: {e}", path=str(dest)) from e

        try:
            proc.wait()
        except git.GitCommandError as e:
            raise ToolError(
                message=f"git archive of {ref!r} failed in {path}: {e.stderr.strip() or e}",
                tool="git",
                returncode=e.status if isinstance(e.status, int) else None,
            ) from e
        if read_error is not None:
            raise ToolError(message=f"git archive of {ref!r} produced an unreadable tar stream: {read_error}", tool="git")


def fetch_source(paths: WorkspacePaths, name: str, meta: Meta, git_tool: GitTool) -> FetchResult:
    """Ensure ``sources/<name>`` mirrors ``meta.repo`` and fetch all its refs.

    Safe to call repeatedly.
    """
    mirror = paths.mirror_path(name)
    result = FetchResult(package=name, path=mirror)

    if not mirror.exists():
        logger.info("Creating mirror of %s at %s", meta.repo, mirror)
        git_tool.init_bare(mirror)
        git_tool.add_remote(mirror, meta.repo)
        result.created = True

    logger.debug("Fetching %s into %s", meta.repo, mirror)
    git_tool.fetch(mirror)
    return result


def extract_source(paths: WorkspacePaths, name: str, ref: str, git_tool: GitTool) -> Path:
    """Unpack ``ref`` from the package mirror into ``build/<name>``.

    The build directory must not exist or be empty; clearing it is the
    caller's job.
    """
    build_dir = paths.build_dir(name)
    build_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Extracting %s from %s", ref, paths.mirror_path(name))
    git_tool.archive(paths.mirror_path(name), ref, build_dir)
    return build_dir
