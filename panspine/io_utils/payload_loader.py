#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Payload Loader — reads a pangenome graph payload ({node, edge, sequence})
from a local JSON file, plain or gzip-compressed.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import gzip
import json
import logging
from pathlib import Path
from typing import Any, Dict, TextIO, Union

from ..graph_core.errors import MalformedPayload
from ..graph_core.graph_builder import PangenomeGraph, build_graph_from_payload

logger = logging.getLogger(__name__)

PAYLOAD_SECTIONS = ('node', 'edge', 'sequence')


def is_gzipped(filepath: Union[str, Path]) -> bool:
    """Check the extension for gzip compression."""
    return Path(filepath).suffix in ('.gz', '.gzip')


def open_file(filepath: Union[str, Path], mode: str = 'r') -> TextIO:
    """Open a text file with automatic gzip detection."""
    filepath = Path(filepath)
    if is_gzipped(filepath):
        return gzip.open(filepath, 'rt' if 'r' in mode else 'wt')
    return open(filepath, mode)


def load_payload(filepath: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a graph payload from disk.

    Args:
        filepath: JSON file (optionally .gz)

    Returns:
        Payload dict with 'node', 'edge' and 'sequence' keys (missing
        sections default to empty)

    Raises:
        FileNotFoundError: if the file does not exist
        MalformedPayload: if the file is not JSON or not a JSON object
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Payload file not found: {filepath}")

    try:
        with open_file(filepath) as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Invalid JSON in {filepath}: {e}")

    if not isinstance(payload, dict):
        raise MalformedPayload(f"Payload in {filepath} must be a JSON object")

    missing = [key for key in PAYLOAD_SECTIONS if key not in payload]
    if missing:
        logger.warning(f"Payload {filepath.name} has no {', '.join(missing)} section(s)")
    payload.setdefault('node', {})
    payload.setdefault('edge', [])
    payload.setdefault('sequence', {})

    logger.info(
        f"Loaded payload {filepath.name}: {len(payload['node'])} nodes, "
        f"{len(payload['edge'])} edges, {len(payload['sequence'])} sequences"
    )
    return payload


def load_graph(filepath: Union[str, Path], assembly_key_delim: str = "#") -> PangenomeGraph:
    """Load a payload file and build its graph."""
    return build_graph_from_payload(load_payload(filepath), assembly_key_delim=assembly_key_delim)

# PanSpine v0.1.0
# Any usage is subject to this software's license.
