#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for payload loading and report export.
"""

import gzip
import json

import pytest

from panspine.graph_core import (
    MalformedPayload, assess_graph_features, build_spine, create_assembly_walk,
)
from panspine.io_utils import (
    export_features_tsv, export_report_json, export_walks_tsv, load_graph, load_payload,
)
from panspine.io_utils.report_export import FEATURE_TSV_COLUMNS


@pytest.fixture
def parallel_report(parallel_graph):
    spine = build_spine(parallel_graph, create_assembly_walk(parallel_graph, 'ref'))
    return assess_graph_features(parallel_graph, spine)


class TestPayloadLoader:
    """JSON payload files."""

    def test_plain_json(self, payload_file):
        payload = load_payload(payload_file)
        assert set(payload) >= {'node', 'edge', 'sequence'}
        assert len(payload['node']) == 5

    def test_gzip_json(self, temp_output_dir, chain_payload):
        path = temp_output_dir / "graph.json.gz"
        with gzip.open(path, 'wt') as f:
            json.dump(chain_payload, f)
        graph = load_graph(path)
        assert len(graph.nodes) == 3

    def test_missing_sections_default_empty(self, temp_output_dir):
        path = temp_output_dir / "partial.json"
        path.write_text(json.dumps({'node': {'1+': {'length': 4}}}))
        payload = load_payload(path)
        assert payload['edge'] == [] and payload['sequence'] == {}

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(FileNotFoundError):
            load_payload(temp_output_dir / "none.json")

    def test_invalid_json(self, temp_output_dir):
        path = temp_output_dir / "bad.json"
        path.write_text("{not json")
        with pytest.raises(MalformedPayload):
            load_payload(path)

    def test_non_object_json(self, temp_output_dir):
        path = temp_output_dir / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(MalformedPayload):
            load_payload(path)


class TestReportExport:
    """JSON and TSV writers."""

    def test_report_json(self, temp_output_dir, parallel_report):
        path = temp_output_dir / "report.json"
        written = export_report_json(parallel_report, path)
        with open(path) as f:
            assert json.load(f) == written
        assert [e['id'] for e in written['events']] == ['1+~3+', '3+~1+']

    def test_features_tsv(self, temp_output_dir, parallel_report):
        path = temp_output_dir / "features.tsv"
        export_features_tsv(parallel_report, path)
        lines = path.read_text().splitlines()
        assert lines[0].startswith("#")
        assert lines[1].split("\t") == list(FEATURE_TSV_COLUMNS)
        row = dict(zip(FEATURE_TSV_COLUMNS, lines[2].split("\t")))
        assert row['id'] == '1+~3+'
        assert row['type'] == 'parallel_bundle'
        assert row['n_paths'] == '2'
        assert row['parent_id'] == '3+~1+'
        assert row['truncated'] == 'false'
        assert len(lines) == 4

    def test_walks_tsv(self, temp_output_dir, parallel_graph):
        path = temp_output_dir / "walks.tsv"
        walks = [create_assembly_walk(parallel_graph, key) for key in ('ref', 'alt')]
        export_walks_tsv(walks, path)
        lines = path.read_text().splitlines()
        assert lines[1] == "assembly_key\tpath_index\tmode\tlength_bp\tpath"
        assert lines[2] == "ref\t0\tendpoint\t120\t1+,2+,3+"
        assert len(lines) == 5
