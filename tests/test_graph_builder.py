#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for graph construction from loader payloads.

Covers:
  - Node lengths (explicit, sequence fallback, default 0)
  - Assembly membership keys (bare and full contig keys)
  - Directed edges, repeated variants, self-loops
  - Endpoint resolution and skipping of unknown endpoints
  - Malformed identifiers and payload shapes
  - Graph statistics
"""

import pytest

from panspine.graph_core import (
    MalformedIdentifier, MalformedPayload, Port, build_graph, build_graph_from_payload,
    parse_signed_id,
)


def sid(raw):
    return parse_signed_id(raw)


class TestNodes:
    """Node table construction."""

    def test_explicit_length(self, chain_graph):
        assert chain_graph.length_of(sid("2+")) == 20

    def test_sequence_length_fallback(self, payload_factory):
        payload = payload_factory([('1+', None, ['ref'])], [], sequences={'1+': 'ACGTA'})
        graph = build_graph_from_payload(payload)
        assert graph.length_of(sid("1+")) == 5
        assert graph.nodes[sid("1+")].sequence == 'ACGTA'

    def test_length_defaults_to_zero(self, payload_factory):
        graph = build_graph_from_payload(payload_factory([('1+', None, [])], []))
        assert graph.length_of(sid("1+")) == 0

    def test_unknown_node_length_is_zero(self, chain_graph):
        assert chain_graph.length_of(sid("99+")) == 0

    def test_assembly_keys(self, chain_graph):
        assert chain_graph.assembly_keys() == ['ref', 'ref#1#chr1']
        assert chain_graph.nodes_for_assembly('ref') == {sid("1+"), sid("2+"), sid("3+")}
        assert chain_graph.nodes_for_assembly('ref#1#chr1') == chain_graph.nodes_for_assembly('ref')

    def test_incomplete_assembly_entry_gives_bare_key_only(self):
        graph = build_graph(
            {'1+': {'assembly': [{'assembly_name': 'hg', 'haplotype': None, 'sequence_id': 'c'}]}},
            [],
        )
        assert graph.assembly_keys() == ['hg']

    def test_custom_delimiter(self, chain_payload):
        graph = build_graph_from_payload(chain_payload, assembly_key_delim='|')
        assert 'ref|1|chr1' in graph.assembly_keys()


class TestEdges:
    """Edge table, adjacency and variants."""

    def test_directed_and_undirected_views(self, chain_graph):
        a, b = sid("1+"), sid("2+")
        assert chain_graph.has_directed_edge(a, b)
        assert not chain_graph.has_directed_edge(b, a)
        assert chain_graph.has_edge_between(b, a)
        assert a in chain_graph.neighbors(b) and b in chain_graph.neighbors(a)
        assert chain_graph.edge_key_between(b, a) == "edge:1+:2+"

    def test_repeated_pair_recorded_as_variants(self, payload_factory):
        payload = payload_factory(
            [('1+', 1, []), ('2+', 1, [])],
            [('1+', '2+'), ('1+', '2+')],
        )
        graph = build_graph_from_payload(payload)
        assert len(graph.edges) == 1
        assert len(graph.edges["edge:1+:2+"].variants) == 2
        assert graph.neighbors(sid("1+")) == (sid("2+"),)

    def test_self_loop_not_in_adjacency(self, payload_factory):
        graph = build_graph_from_payload(payload_factory([('1+', 1, [])], [('1+', '1+')]))
        assert graph.edges["edge:1+:1+"].is_self_loop
        assert graph.neighbors(sid("1+")) == ()
        assert graph.statistics()['self_loop_count'] == 1

    def test_unknown_endpoint_skipped(self, payload_factory, caplog):
        payload = payload_factory([('1+', 1, []), ('2+', 1, [])], [('1+', '2+'), ('1+', '77+')])
        graph = build_graph_from_payload(payload)
        assert list(graph.edges) == ["edge:1+:2+"]
        assert any("missing endpoint" in r.message for r in caplog.records)

    def test_opposite_orientation_resolves_by_bare_id(self, payload_factory):
        payload = payload_factory([('1+', 1, []), ('2+', 1, [])], [('1+', '2-')])
        graph = build_graph_from_payload(payload)
        edge = graph.edges["edge:1+:2+"]
        assert edge.variants[0].to_ref == sid("2-")
        assert edge.variants[0].to_port is Port.START
        assert edge.variants[0].from_port is Port.END

    def test_edges_for_path_flags_missing_pairs(self, chain_graph):
        keys, missing = chain_graph.edges_for_path([sid("1+"), sid("2+"), sid("3+")])
        assert keys == ["edge:1+:2+", "edge:2+:3+"]
        assert missing == []
        keys, missing = chain_graph.edges_for_path([sid("1+"), sid("3+")])
        assert keys == [] and missing == [(sid("1+"), sid("3+"))]


class TestMalformedInput:
    """Hard construction errors."""

    def test_malformed_node_id(self):
        with pytest.raises(MalformedIdentifier):
            build_graph({'12': {}}, [])

    def test_malformed_edge_endpoint(self):
        with pytest.raises(MalformedIdentifier):
            build_graph({'1+': {}}, [{'starting_node': '1+', 'ending_node': '1'}])

    def test_payload_must_be_mapping(self):
        with pytest.raises(MalformedPayload):
            build_graph_from_payload(["not", "a", "payload"])

    def test_edges_must_be_list(self):
        with pytest.raises(MalformedPayload):
            build_graph_from_payload({'node': {}, 'edge': {'1+': '2+'}, 'sequence': {}})


class TestStatistics:
    """Graph summary statistics."""

    def test_chain_statistics(self, chain_graph):
        stats = chain_graph.statistics()
        assert stats['node_count'] == 3
        assert stats['edge_count'] == 2
        assert stats['component_count'] == 1
        assert stats['is_cyclic'] is False
        assert stats['total_length_bp'] == 60

    def test_cyclic_statistics(self, cyclic_payload):
        stats = build_graph_from_payload(cyclic_payload).statistics()
        assert stats['is_cyclic'] is True
        assert stats['average_degree'] == pytest.approx(2.0)
