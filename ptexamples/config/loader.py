# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
YAML config loading for the example commands.

A file passed with --config goes through three stages:
  1. Read the text and parse it with yaml.safe_load
  2. Check that the top level is a mapping
  3. Validate the mapping into a frozen PtExamplesConfig

Each stage fails with its own error type. Once a path is given there is no
silent fallback to the built-in defaults; that only happens without --config.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ptexamples.config.exceptions import ConfigLoadError, ConfigValidationError
from ptexamples.config.schema import PtExamplesConfig


def _parse_yaml(config_path: Path) -> dict[str, Any]:
    """
    Parse `config_path` into a plain mapping.

    Raises:
        ConfigLoadError: Missing file, unreadable file, bad YAML, or a
            top level that is not a mapping.
    """
    if not config_path.is_file():
        reason = "is not a file" if config_path.exists() else "not found"
        raise ConfigLoadError(f"Config file {reason}: {config_path}")

    try:
        parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"{config_path} must hold a YAML mapping with a 'global' section, "
            f"got {type(parsed).__name__}"
        )
    return parsed


def load_config(config_path: Path) -> PtExamplesConfig:
    """
    Load and validate a config file.

    Raises:
        ConfigLoadError: The file could not be read or parsed.
        ConfigValidationError: Missing fields, wrong types, out-of-range
            values or unknown keys.
    """
    raw = _parse_yaml(config_path)
    try:
        return PtExamplesConfig.model_validate(raw)
    except ValidationError as err:
        raise ConfigValidationError(f"Invalid config {config_path}:\n{err}") from err
