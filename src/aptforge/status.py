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

"""Build status evaluation from on-disk artifacts."""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from aptforge.checksum import ChecksumOutcome, ChecksumResult
from aptforge.package import ChecksumRule


class BuildStatus(enum.Enum):
    BUILT = "built"
    NOT_BUILT = "not-built"
    # No checksum rules exist, so nothing can prove the build completed.
    UNKNOWN = "unknown"

    @property
    def is_built(self) -> bool:
        return self is BuildStatus.BUILT


@dataclass(frozen=True)
class RuleResult:
    rule: ChecksumRule
    result: ChecksumResult

    @property
    def outcome(self) -> ChecksumOutcome:
        return self.result.outcome


def verify_rules(rules: Iterable[ChecksumRule], build_dir: Path) -> list[RuleResult]:
    """Verify every rule against the build directory, in order."""
    return [RuleResult(rule, rule.verify(build_dir)) for rule in rules]


def aggregate_status(results: Iterable[RuleResult]) -> BuildStatus:
    status = BuildStatus.UNKNOWN
    for r in results:
        if not r.result.ok:
            status = BuildStatus.NOT_BUILT
        elif status is BuildStatus.UNKNOWN:
            status = BuildStatus.BUILT
    return status


def evaluate_build_status(rules: Iterable[ChecksumRule], build_dir: Path) -> BuildStatus:
    """Collapse all checksum rules of a package into one BuildStatus.

    Every rule is checked even after a failure.
    """
    return aggregate_status(verify_rules(rules, build_dir))
