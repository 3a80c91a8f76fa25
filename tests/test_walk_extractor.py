#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for assembly walk extraction.

Covers:
  - Component classification and endpoint selection
  - Endpoint and block-cut walk strategies and their fallbacks
  - Direction policies
  - Per-component paths and diagnostics on assembly walks
"""

import json

import networkx as nx
import pytest

from panspine.graph_core import (
    ComponentShape, DiagnosticKind, DirectionPolicy, WalkMode, build_graph_from_payload,
    create_assembly_walk, create_assembly_walks, parse_signed_id,
)
from panspine.graph_core.walk_extractor import (
    SINGLETON_MODE, classify_component, endpoint_walk, extract_walk, orient_path,
)


def ids(nodes):
    return [str(n) for n in nodes]


STAR = {1: [2, 3, 4], 2: [1], 3: [1], 4: [1]}
CHAIN = {1: [2], 2: [1, 3], 3: [2]}


class TestComponentStrategies:
    """Walk strategies on plain adjacency mappings."""

    def test_classify_chain_and_star(self):
        assert classify_component(CHAIN, [1, 2, 3]) is ComponentShape.CHAINLIKE
        assert classify_component(STAR, [1, 2, 3, 4]) is ComponentShape.CYCLIC
        assert classify_component({7: []}, [7]) is ComponentShape.CHAINLIKE

    def test_endpoint_walk_prefers_low_residual_degree(self):
        assert endpoint_walk(STAR, [1, 2, 3, 4]) == [2, 1, 3]

    def test_blockcut_walk_on_chain(self):
        nodes, mode = extract_walk(CHAIN, [1, 2, 3], WalkMode.BLOCKCUT)
        assert nodes == [1, 2, 3]
        assert mode == WalkMode.BLOCKCUT.value

    def test_singleton_component(self):
        nodes, mode = extract_walk({5: []}, [5], WalkMode.BLOCKCUT)
        assert nodes == [5]
        assert mode == SINGLETON_MODE

    def test_walk_is_simple_path(self):
        # two squares sharing vertex 3
        adj = {1: [2, 4], 2: [1, 3], 3: [2, 4, 5, 6], 4: [1, 3], 5: [3, 7], 6: [3, 7], 7: [5, 6]}
        nodes, _ = extract_walk(adj, list(adj), WalkMode.AUTO)
        assert len(nodes) == len(set(nodes))
        for a, b in zip(nodes, nodes[1:]):
            assert b in adj[a]


class TestAssemblyWalk:
    """create_assembly_walk over built graphs."""

    def test_linear_chain(self, chain_graph):
        walk = create_assembly_walk(chain_graph, 'ref')
        assert len(walk.paths) == 1
        path = walk.primary
        assert ids(path.nodes) == ['1+', '2+', '3+']
        assert path.edges == ['edge:1+:2+', 'edge:2+:3+']
        assert path.length_bp == 60
        assert path.mode == WalkMode.ENDPOINT.value
        assert walk.diagnostics.warnings == []
        assert walk.diagnostics.induced_nodes == 3
        assert walk.diagnostics.induced_edges == 2

    def test_cyclic_component_uses_blockcut(self, cyclic_payload):
        graph = build_graph_from_payload(cyclic_payload)
        path = create_assembly_walk(graph, 'ref').primary
        assert path.mode == WalkMode.BLOCKCUT.value
        assert ids(path.nodes) == ['2+', '3+', '4+']
        assert len(path.edges) == len(path.nodes) - 1

    def test_unknown_assembly_is_empty_walk(self, chain_graph):
        walk = create_assembly_walk(chain_graph, 'nope')
        assert walk.is_empty
        assert walk.primary is None
        assert walk.diagnostics.kinds() == [DiagnosticKind.EMPTY_WALK]

    def test_disconnected_assembly(self, payload_factory):
        payload = payload_factory(
            [('1+', 10, ['ref']), ('2+', 10, ['ref']), ('5+', 5, ['ref'])],
            [('1+', '2+')],
        )
        walk = create_assembly_walk(build_graph_from_payload(payload), 'ref')
        assert [p.length_bp for p in walk.paths] == [20, 5]
        assert walk.paths[1].mode == SINGLETON_MODE
        assert DiagnosticKind.DISCONNECTED_COMPONENT in walk.diagnostics.kinds()
        assert walk.diagnostics.component_count == 2

    def test_equal_length_paths_ordered_by_smallest_id(self, payload_factory):
        payload = payload_factory([('9+', 5, ['ref']), ('3+', 5, ['ref'])], [])
        walk = create_assembly_walk(build_graph_from_payload(payload), 'ref')
        assert [ids(p.nodes) for p in walk.paths] == [['3+'], ['9+']]

    def test_walks_for_all_keys(self, chain_graph):
        walks = create_assembly_walks(chain_graph)
        assert sorted(walks) == ['ref', 'ref#1#chr1']
        assert ids(walks['ref#1#chr1'].primary.nodes) == ['1+', '2+', '3+']

    def test_walk_serializes_to_json(self, cyclic_payload):
        walk = create_assembly_walk(build_graph_from_payload(cyclic_payload), 'ref')
        data = json.loads(json.dumps(walk.to_dict()))
        assert data['paths'][0]['leftEndpoint'] == '2+'
        assert data['assemblyKey'] == 'ref'


class TestWalkValidity:
    """Walk invariants on random graphs."""

    @pytest.mark.parametrize("seed", range(6))
    @pytest.mark.parametrize("mode", ['auto', 'endpoint', 'blockcut'])
    def test_paths_are_simple_and_edge_aligned(self, payload_factory, seed, mode):
        graph_nx = nx.gnm_random_graph(25, 32, seed=seed)
        nodes = [(f"{n}+", n + 1, ['ref']) for n in graph_nx.nodes]
        edges = [(f"{a}+", f"{b}+") for a, b in graph_nx.edges]
        graph = build_graph_from_payload(payload_factory(nodes, edges))

        walk = create_assembly_walk(graph, 'ref', mode=mode)
        n_missing = walk.diagnostics.kinds().count(DiagnosticKind.MISSING_EDGE)
        assert n_missing == 0
        assert len(walk.paths) == walk.diagnostics.component_count
        for path in walk.paths:
            assert len(path.nodes) == len(set(path.nodes))
            assert len(path.edges) == len(path.nodes) - 1


class TestDirectionPolicies:
    """Path orientation."""

    def test_ascending_and_descending(self, chain_graph):
        asc = create_assembly_walk(chain_graph, 'ref', direction=DirectionPolicy.ASCENDING_ID)
        desc = create_assembly_walk(chain_graph, 'ref', direction=DirectionPolicy.DESCENDING_ID)
        assert ids(asc.primary.nodes) == ['1+', '2+', '3+']
        assert ids(desc.primary.nodes) == ['3+', '2+', '1+']

    def test_edge_flow_follows_edge_direction(self, payload_factory):
        payload = payload_factory(
            [('1+', 1, ['ref']), ('2+', 1, ['ref']), ('3+', 1, ['ref'])],
            [('3+', '2+'), ('2+', '1+')],
        )
        graph = build_graph_from_payload(payload)
        walk = create_assembly_walk(graph, 'ref', direction='edge_flow')
        assert ids(walk.primary.nodes) == ['3+', '2+', '1+']
        as_is = create_assembly_walk(graph, 'ref', direction='as_is')
        assert ids(as_is.primary.nodes) == ['1+', '2+', '3+']

    def test_force_start_at_endpoint(self, chain_graph):
        walk = create_assembly_walk(
            chain_graph, 'ref', direction=DirectionPolicy.FORCE_START, start_node='3+'
        )
        assert ids(walk.primary.nodes) == ['3+', '2+', '1+']
        assert walk.diagnostics.warnings == []

    def test_force_start_at_interior_node_keeps_path(self, chain_graph):
        walk = create_assembly_walk(
            chain_graph, 'ref', direction=DirectionPolicy.FORCE_START, start_node='2+'
        )
        assert ids(walk.primary.nodes) == ['1+', '2+', '3+']
        assert walk.diagnostics.kinds() == [DiagnosticKind.START_NODE_IGNORED]

    def test_force_start_outside_assembly(self, chain_graph):
        walk = create_assembly_walk(
            chain_graph, 'ref', direction=DirectionPolicy.FORCE_START, start_node='99+'
        )
        assert ids(walk.primary.nodes) == ['1+', '2+', '3+']
        assert walk.diagnostics.kinds() == [DiagnosticKind.START_NODE_IGNORED]

    def test_force_start_places_its_component_first(self, payload_factory):
        payload = payload_factory(
            [('1+', 10, ['ref']), ('2+', 10, ['ref']), ('5+', 5, ['ref'])],
            [('1+', '2+')],
        )
        walk = create_assembly_walk(
            build_graph_from_payload(payload), 'ref',
            direction=DirectionPolicy.FORCE_START, start_node='5+',
        )
        assert ids(walk.primary.nodes) == ['5+']

    def test_orient_short_paths_untouched(self, chain_graph):
        node = parse_signed_id('2+')
        assert orient_path(chain_graph, [node], DirectionPolicy.DESCENDING_ID) == ([node], True)

    def test_invalid_policy(self, chain_graph):
        with pytest.raises(ValueError):
            create_assembly_walk(chain_graph, 'ref', direction='sideways')
