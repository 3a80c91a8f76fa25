"""
PanSpine v0.1.0

Configuration schema for PanSpine.

Defines all available configuration parameters with defaults and validation.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


VALID_WALK_MODES = ('auto', 'endpoint', 'blockcut')
VALID_DIRECTIONS = ('as_is', 'force_start', 'ascending_id', 'descending_id', 'edge_flow')
VALID_FORMATS = ('json', 'tsv', 'both')
VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')
TEMPLATES = ('default', 'fast', 'exhaustive')


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Graph Construction
    # ========================================================================
    'graph': {
        'assembly_key_delim': '#',  # name#haplotype#sequence_id
    },

    # ========================================================================
    # Walk Extraction
    # ========================================================================
    'walk': {
        'mode': 'auto',  # 'auto', 'endpoint', 'blockcut'
        'direction': 'edge_flow',  # 'as_is', 'force_start', 'ascending_id', 'descending_id', 'edge_flow'
        'start_node': None,  # Required for 'force_start'
    },

    # ========================================================================
    # Feature Analysis
    # ========================================================================
    'features': {
        'locus_start_bp': 0,
        'include_adjacent': True,  # Pills between neighboring spine nodes
        'include_upstream': True,  # Mirror (R, L) events
        'allow_mid_spine_reentry': True,
        'include_dangling': True,
        'include_off_spine_components': True,
        'max_paths_per_event': 8,
        'max_region_nodes': 5000,
        'max_region_edges': 8000,
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'format': 'json',  # 'json', 'tsv', 'both'
        'indent': 2,

        # Logging
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': None,
        },
    },
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f)

            # Deep merge user config into defaults
            if user_config:
                config = _deep_merge(config, user_config)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def save_config_template(output_path: Path, template: str = 'default'):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
        template: Template type ('default', 'fast', 'exhaustive')
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template '{template}' (choose from {', '.join(TEMPLATES)})")

    config = copy.deepcopy(DEFAULT_CONFIG)

    # Customize for specific templates
    if template == 'fast':
        config['features']['max_paths_per_event'] = 2
        config['features']['max_region_nodes'] = 500
        config['features']['max_region_edges'] = 1000
        config['features']['include_upstream'] = False
        config['features']['include_off_spine_components'] = False

    elif template == 'exhaustive':
        config['features']['max_paths_per_event'] = 32
        config['features']['max_region_nodes'] = 50000
        config['features']['max_region_edges'] = 100000
        config['output']['format'] = 'both'

    with open(output_path, 'w') as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    delim = config.get('graph', {}).get('assembly_key_delim')
    if not isinstance(delim, str) or not delim:
        errors.append("graph.assembly_key_delim must be a non-empty string")

    # Validate walk settings
    walk = config.get('walk', {})
    if walk.get('mode') not in VALID_WALK_MODES:
        errors.append(f"Invalid walk mode: {walk.get('mode')}")
    if walk.get('direction') not in VALID_DIRECTIONS:
        errors.append(f"Invalid walk direction: {walk.get('direction')}")
    if walk.get('direction') == 'force_start' and not walk.get('start_node'):
        errors.append("walk.start_node is required when direction is 'force_start'")

    # Validate feature limits
    features = config.get('features', {})
    for key in ('max_paths_per_event', 'max_region_nodes', 'max_region_edges'):
        value = features.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            errors.append(f"features.{key} must be a non-negative integer (got {value!r})")
    if features.get('max_region_nodes') == 0:
        errors.append("features.max_region_nodes must be at least 1")
    start = features.get('locus_start_bp')
    if isinstance(start, bool) or not isinstance(start, int):
        errors.append(f"features.locus_start_bp must be an integer (got {start!r})")
    for key in ('include_adjacent', 'include_upstream', 'allow_mid_spine_reentry',
                'include_dangling', 'include_off_spine_components'):
        if not isinstance(features.get(key), bool):
            errors.append(f"features.{key} must be true or false")

    # Validate output
    output = config.get('output', {})
    if output.get('format') not in VALID_FORMATS:
        errors.append(f"Invalid output format: {output.get('format')}")
    level = str(output.get('logging', {}).get('level', '')).upper()
    if level not in VALID_LOG_LEVELS:
        errors.append(f"Invalid logging level: {output.get('logging', {}).get('level')}")

    return errors
