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

"""User configuration for Aptforge."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from aptforge.core.exceptions import ConfigError

DEFAULT_CONFIG: dict[str, Any] = {
    "paths": {
        "runs_root": "~/.cache/aptforge/runs",
    },
    "tools": {
        "patch": "patch",
        "repro_env": "repro-env",
        "reprepro": "reprepro",
        "rsync": "rsync",
    },
    "publish": {
        "target": "apt:/var/www/html/",
        "signing_key": "archive-key.pgp",
    },
    "behavior": {"lenient_patches": False},
}


def get_config_path() -> Path:
    """Return the path to the config file."""
    return Path.home() / ".config" / "aptforge" / "config.yaml"


def ensure_config_exists() -> None:
    """Create the config file with defaults if it does not exist."""
    cfg_path = get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if not cfg_path.exists():
        cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG))


def load_config() -> dict[str, Any]:
    """Load configuration from disk and merge with defaults.

    Top-level sections are merged shallowly: a section present in the file
    overrides individual keys of the default section.

    Raises:
        ConfigError: If the file is not valid YAML or not a mapping.
    """
    ensure_config_exists()
    cfg_path = get_config_path()
    try:
        raw = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ConfigError(message=f"Invalid configuration in {cfg_path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(message=f"Configuration in {cfg_path} must be a mapping")

    merged: dict[str, Any] = {}
    for key, val in DEFAULT_CONFIG.items():
        if key in raw and isinstance(raw[key], dict):
            merged[key] = {**val, **raw[key]}
        elif isinstance(val, dict):
            merged[key] = dict(val)
        else:
            merged[key] = raw.get(key, val)

    for pkey, pval in merged.get("paths", {}).items():
        merged["paths"][pkey] = str(Path(pval).expanduser())

    return merged

