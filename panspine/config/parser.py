#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Configuration parser — layered YAML settings for graph, walk, feature and
output options.

Layers, lowest first: DEFAULT_CONFIG, the packaged defaults.yaml, a user
YAML file, then CLI overrides.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import copy
import os
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..graph_core.errors import PanSpineError
from .schema import DEFAULT_CONFIG, _deep_merge, validate_config

_ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-(.*?))?\}')
_PACKAGED_DEFAULTS = Path(__file__).parent / "defaults.yaml"


class ConfigValidationError(PanSpineError):
    """Raised when a configuration file cannot be read or fails validation."""
    pass


def substitute_env(value: Any) -> Any:
    """
    Expand ${VAR} and ${VAR:-fallback} in every string of a nested value.

    Unset variables without a fallback expand to ''.
    """
    if isinstance(value, dict):
        return {k: substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_env(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(2) or ''), value)
    return value


def coerce_like(value: Any, reference: Any) -> Any:
    """
    Convert strings to the scalar type of the matching default.

    ${VAR} substitution always yields text; '3' under an int default becomes
    3 and 'false' under a bool default becomes False. Text that does not
    parse as the expected type is left alone for validate_config to report.
    """
    if isinstance(value, dict) and isinstance(reference, dict):
        return {k: coerce_like(v, reference[k]) if k in reference else v for k, v in value.items()}
    if not isinstance(value, str) or not isinstance(reference, (bool, int, float)):
        return value
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    if isinstance(reference, bool):
        return parsed if isinstance(parsed, bool) else value
    if isinstance(parsed, bool) or not isinstance(parsed, (int, float)):
        return value
    if isinstance(reference, int):
        return parsed if isinstance(parsed, int) else value
    return float(parsed)


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML in config file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigValidationError(f"Config file {path} must contain a mapping at the top level")
    return data


class ConfigParser:
    """
    Merged PanSpine settings with dotted access.

    Example:
        parser = ConfigParser('panspine.yaml')
        parser.merge_cli_overrides({'features.max_paths_per_event': 4})
        parser.validate()
        service = PangenomeService(parser.to_dict())
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        self.config_file = Path(config_file) if config_file else None

        self._config = copy.deepcopy(DEFAULT_CONFIG)
        if _PACKAGED_DEFAULTS.exists():
            self._config = _deep_merge(self._config, _read_yaml(_PACKAGED_DEFAULTS))

        if self.config_file:
            if not self.config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_file}")
            user_config = _read_yaml(self.config_file)
            merged = substitute_env(_deep_merge(self._config, user_config))
            self._config = coerce_like(merged, DEFAULT_CONFIG)

    def merge_cli_overrides(self, overrides: Dict[str, Any]):
        """
        Apply dotted-key overrides ('walk.mode', 'features.max_paths_per_event').

        None values are skipped, so CLI options left unset keep the file value.
        """
        for dotted, value in overrides.items():
            if value is None:
                continue
            *parents, leaf = dotted.split('.')
            section = self._config
            for name in parents:
                if not isinstance(section.get(name), dict):
                    section[name] = {}
                section = section[name]
            section[leaf] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. get('output.logging.level')."""
        node = self._config
        for name in key.split('.'):
            if not isinstance(node, dict) or name not in node:
                return default
            node = node[name]
        return node

    def get_graph_config(self) -> Dict[str, Any]:
        return self._config.get('graph', {})

    def get_walk_config(self) -> Dict[str, Any]:
        return self._config.get('walk', {})

    def get_features_config(self) -> Dict[str, Any]:
        return self._config.get('features', {})

    def get_output_config(self) -> Dict[str, Any]:
        return self._config.get('output', {})

    def to_dict(self) -> Dict[str, Any]:
        """Deep copy of the merged settings."""
        return copy.deepcopy(self._config)

    def validate(self) -> bool:
        """
        Raises:
            ConfigValidationError: listing every problem found by validate_config
        """
        errors = validate_config(self._config)
        if errors:
            raise ConfigValidationError("Invalid configuration:\n  " + "\n  ".join(errors))
        return True

    def __repr__(self) -> str:
        return f"ConfigParser(config_file={self.config_file})"

# PanSpine v0.1.0
# Any usage is subject to this software's license.
