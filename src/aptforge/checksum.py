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

"""Artifact checksum verification.

Expected checksums are written as ``<algorithm>:<hex digest>``, for example
``sha256:9f86d0...``. A verified file is in one of three states: missing,
present with a different digest, or matching.
"""

from __future__ import annotations

import enum
import hashlib
from dataclasses import dataclass
from pathlib import Path

from aptforge.core.exceptions import PackageParseError, WorkspaceIOError

SUPPORTED_ALGORITHMS = ("sha256",)

DIGEST_LENGTHS = {"sha256": 64}


class ChecksumOutcome(enum.Enum):
    MISSING = "missing"
    MISMATCH = "mismatch"
    MATCH = "match"


@dataclass(frozen=True)
class ChecksumResult:
    """Outcome of verifying one file.

    ``calculated`` is the formatted digest of the file on disk; it is None
    only when the file is missing.
    """

    outcome: ChecksumOutcome
    calculated: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is ChecksumOutcome.MATCH


def split_checksum(value: str) -> tuple[str, str]:
    """Split ``algorithm:digest`` and check the algorithm is supported.

    The digest itself is not inspected, so a malformed digest simply never
    matches a computed one.

    Raises:
        PackageParseError: If the value is not a supported checksum string.
    """
    algorithm, sep, digest = value.partition(":")
    if not sep or not digest:
        raise PackageParseError(message=f"Checksum {value!r} is not of the form <algorithm>:<digest>")
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise PackageParseError(
            message=f"Unsupported checksum algorithm {algorithm!r} (supported: {', '.join(SUPPORTED_ALGORITHMS)})"
        )
    return algorithm, digest


def validate_checksum(value: str) -> str:
    """Check that ``value`` is a well-formed checksum as written in a package definition.

    Raises:
        PackageParseError: If the algorithm is unsupported or the digest is not
            lowercase hex of the right length.
    """
    algorithm, digest = split_checksum(value)
    if len(digest) != DIGEST_LENGTHS[algorithm] or any(c not in "0123456789abcdef" for c in digest):
        raise PackageParseError(message=f"Checksum {value!r} is not a lowercase hex {algorithm} digest")
    return value


def compute_checksum(path: Path, algorithm: str = "sha256") -> str:
    """Hash the full content of a file and return ``<algorithm>:<hex>``."""
    h = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return f"{algorithm}:{h.hexdigest()}"


def verify_checksum(path: Path, expected: str) -> ChecksumResult:
    """Compare a file's digest with an expected checksum string.

    A missing file is a normal outcome and does not raise.

    Raises:
        PackageParseError: If ``expected`` uses an unsupported algorithm.
        WorkspaceIOError: On any I/O failure other than the file not existing.
    """
    algorithm, _ = split_checksum(expected)
    try:
        calculated = compute_checksum(path, algorithm)
    except FileNotFoundError:
        return ChecksumResult(ChecksumOutcome.MISSING)
    except OSError as e:
        raise WorkspaceIOError(message=f"Failed to read artifact {path}: {e}", path=str(path)) from e

    if calculated != expected:
        return ChecksumResult(ChecksumOutcome.MISMATCH, calculated)
    return ChecksumResult(ChecksumOutcome.MATCH, calculated)
