"""Configuration loader with YAML and environment variable support.

This module provides a configuration loader that reads from ~/.config/vslparser/config.yaml
and allows environment variable overrides using VSLPARSER_* prefix.

Environment variables:
- VSLPARSER_READER_ENCODING: Override reader.encoding
- VSLPARSER_READER_ERRORS: Override reader.errors
- VSLPARSER_COMMAND: Override command.argv (split like a shell command line)
- VSLPARSER_OUTPUT_FORMAT: Override output.format
- VSLPARSER_OUTPUT_KINDS: Override output.kinds (comma-separated, e.g. "Request,BeReq")
"""

import os
import shlex
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from vslparser.models.config import Config


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Unlike most settings files, the config file is optional: every setting
    has a default.

    Args:
        config_path: Path to config file. If None, uses ~/.config/vslparser/config.yaml

    Returns:
        Validated Config object

    Raises:
        ValueError: If the config file is not valid YAML or fails validation
    """
    if config_path is None:
        config_path = Path.home() / ".config" / "vslparser" / "config.yaml"

    if config_path.exists():
        with config_path.open() as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {config_path} must be a mapping")
    else:
        data = {}

    data = _apply_env_overrides(data)

    # Pydantic will validate the structure
    return Config(**data)


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to configuration data.

    Environment variables use the format: VSLPARSER_SECTION_KEY
    For example: VSLPARSER_OUTPUT_FORMAT sets data['output']['format']

    Args:
        data: Base configuration dictionary from YAML

    Returns:
        Configuration dictionary with environment overrides applied
    """
    for section in ("reader", "command", "output"):
        if data.get(section) is None:
            data[section] = {}

    if env_encoding := os.getenv("VSLPARSER_READER_ENCODING"):
        data["reader"]["encoding"] = env_encoding

    if env_errors := os.getenv("VSLPARSER_READER_ERRORS"):
        data["reader"]["errors"] = env_errors

    if env_command := os.getenv("VSLPARSER_COMMAND"):
        data["command"]["argv"] = shlex.split(env_command)

    if env_format := os.getenv("VSLPARSER_OUTPUT_FORMAT"):
        data["output"]["format"] = env_format

    if env_kinds := os.getenv("VSLPARSER_OUTPUT_KINDS"):
        data["output"]["kinds"] = [k.strip() for k in env_kinds.split(",") if k.strip()]

    return data
