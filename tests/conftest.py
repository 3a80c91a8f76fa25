#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Pytest configuration and shared fixtures.

Graph fixtures are small payloads in the loader format
({node, edge, sequence}). Spine segments belong to assembly 'ref',
off-spine segments to assembly 'alt'.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

import json
import shutil
import tempfile
from pathlib import Path

import pytest

from panspine.graph_core import build_graph_from_payload


def make_payload(nodes, edges, sequences=None):
    """
    Build a loader payload.

    Args:
        nodes: [(signed_id, length_or_None, [assembly names])]
        edges: [(from, to)]
        sequences: optional {signed_id: bases}
    """
    node_map = {}
    for node_id, length, assemblies in nodes:
        record = {
            'assembly': [
                {'assembly_name': name, 'haplotype': '1', 'sequence_id': 'chr1'}
                for name in assemblies
            ],
        }
        if length is not None:
            record['length'] = length
        node_map[node_id] = record
    return {
        'node': node_map,
        'edge': [{'starting_node': a, 'ending_node': b} for a, b in edges],
        'sequence': dict(sequences or {}),
    }


@pytest.fixture
def payload_factory():
    """The make_payload builder, for tests that need a custom graph."""
    return make_payload


@pytest.fixture
def temp_output_dir():
    """Create temporary output directory for tests."""
    temp_dir = tempfile.mkdtemp(prefix="panspine_test_")
    yield Path(temp_dir)
    # Cleanup after test
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def chain_payload():
    """Linear ref chain 1+ - 2+ - 3+."""
    return make_payload(
        [('1+', 10, ['ref']), ('2+', 20, ['ref']), ('3+', 30, ['ref'])],
        [('1+', '2+'), ('2+', '3+')],
    )


@pytest.fixture
def pill_payload():
    """
    Spine X(1+, 100bp) - Y(2+, 50bp) with M(3+, 10bp) bridging X and Y.
    """
    return make_payload(
        [('1+', 100, ['ref']), ('2+', 50, ['ref']), ('3+', 10, ['alt'])],
        [('1+', '2+'), ('1+', '3+'), ('3+', '2+')],
    )


@pytest.fixture
def parallel_payload():
    """
    Spine L(1+) - S(2+, 100bp) - R(3+); two single-node routes L -> M1(4+) -> R
    and L -> M2(5+) -> R.
    """
    return make_payload(
        [('1+', 10, ['ref']), ('2+', 100, ['ref']), ('3+', 10, ['ref']),
         ('4+', 10, ['alt']), ('5+', 20, ['alt'])],
        [('1+', '2+'), ('2+', '3+'), ('1+', '4+'), ('4+', '3+'), ('1+', '5+'), ('5+', '3+')],
    )


@pytest.fixture
def dangling_payload():
    """Spine 1+ - 2+ with a blob 3+ - 4+ hanging off 1+ only."""
    return make_payload(
        [('1+', 10, ['ref']), ('2+', 10, ['ref']), ('3+', 5, ['alt']), ('4+', 5, ['alt'])],
        [('1+', '2+'), ('1+', '3+'), ('3+', '4+')],
    )


@pytest.fixture
def long_detour_payload():
    """Spine 1+ - 2+ with a ten-node detour 10+ ... 19+ between them."""
    detour = [f"{i}+" for i in range(10, 20)]
    nodes = [('1+', 10, ['ref']), ('2+', 10, ['ref'])] + [(n, 1, ['alt']) for n in detour]
    edges = [('1+', '2+'), ('1+', detour[0])]
    edges += list(zip(detour, detour[1:]))
    edges.append((detour[-1], '2+'))
    return make_payload(nodes, edges)


@pytest.fixture
def cyclic_payload():
    """Ref triangle 1+ 2+ 3+ with a tail 3+ - 4+."""
    return make_payload(
        [('1+', 10, ['ref']), ('2+', 10, ['ref']), ('3+', 10, ['ref']), ('4+', 10, ['ref'])],
        [('1+', '2+'), ('2+', '3+'), ('3+', '1+'), ('3+', '4+')],
    )


@pytest.fixture
def chain_graph(chain_payload):
    return build_graph_from_payload(chain_payload)


@pytest.fixture
def pill_graph(pill_payload):
    return build_graph_from_payload(pill_payload)


@pytest.fixture
def parallel_graph(parallel_payload):
    return build_graph_from_payload(parallel_payload)


@pytest.fixture
def dangling_graph(dangling_payload):
    return build_graph_from_payload(dangling_payload)


@pytest.fixture
def payload_file(temp_output_dir, parallel_payload):
    """parallel_payload written to disk."""
    path = temp_output_dir / "graph.json"
    with open(path, 'w') as f:
        json.dump(parallel_payload, f)
    return path

# PanSpine v0.1.0
# Any usage is subject to this software's license.
