#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for the PangenomeService facade.
"""

import pytest

from panspine.graph_core import FeatureType, MissingGraph, PanSpineError, WalkMode
from panspine.utils.pipeline import PangenomeService


@pytest.fixture
def service(parallel_payload):
    svc = PangenomeService()
    svc.load_data(parallel_payload)
    return svc


class TestMissingGraph:
    """Every analysis call needs a loaded graph."""

    @pytest.mark.parametrize("call", [
        lambda s: s.graph,
        lambda s: s.list_assembly_keys(),
        lambda s: s.get_assembly_walk('ref'),
        lambda s: s.get_all_assembly_walks(),
        lambda s: s.get_spine_features('ref'),
        lambda s: s.any_bp_extent('1+'),
    ])
    def test_raises_before_load(self, call):
        svc = PangenomeService()
        assert not svc.is_loaded
        with pytest.raises(MissingGraph):
            call(svc)

    def test_lookup_before_report(self, service):
        with pytest.raises(PanSpineError, match="get_spine_features"):
            service.bp_extent_on_spine('1+')


class TestServiceFlow:
    """Load, walk, assess, look up."""

    def test_walks_use_config_defaults(self, service):
        assert service.list_assembly_keys() == ['alt', 'alt#1#chr1', 'ref', 'ref#1#chr1']
        walk = service.get_assembly_walk('ref')
        assert [str(n) for n in walk.primary.nodes] == ['1+', '2+', '3+']

    def test_walk_overrides(self, service):
        walk = service.get_assembly_walk('ref', direction='descending_id', mode=WalkMode.BLOCKCUT)
        assert [str(n) for n in walk.primary.nodes] == ['3+', '2+', '1+']
        assert walk.primary.mode == 'blockcut'

    def test_config_sets_walk_direction(self, parallel_payload):
        svc = PangenomeService({'walk': {'direction': 'descending_id'}})
        svc.load_data(parallel_payload)
        assert str(svc.get_assembly_walk('ref').primary.nodes[0]) == '3+'

    def test_all_walks(self, service):
        walks = service.get_all_assembly_walks()
        assert set(walks) == set(service.list_assembly_keys())
        assert walks['alt'].diagnostics.component_count == 2

    def test_features_and_lookups(self, service):
        report = service.get_spine_features('ref', include_upstream=False)
        assert service.report is report
        assert report.feature('1+~3+').type is FeatureType.PARALLEL_BUNDLE
        assert service.bp_extent_on_spine('2+')['bpEnd'] == 110
        assert service.projected_bp_in_feature('1+', '1+~3+')['bpStart'] == 10
        assert service.projected_bp_in_feature('1+', 'no~such') is None
        assert service.any_bp_extent('5+')['projected'] is True

    def test_locus_start_from_config(self, parallel_payload):
        svc = PangenomeService({'features': {'locus_start_bp': 1000}})
        svc.load_data(parallel_payload)
        report = svc.get_spine_features('ref')
        assert report.spine.nodes[0].bp_start == 1000
        assert report.feature('1+~3+').anchors.span_start == 1010

    def test_unknown_assembly_gives_empty_report(self, service):
        report = service.get_spine_features('missing')
        assert len(report.spine) == 0
        assert report.events == []

    def test_reload_clears_report(self, service, chain_payload):
        service.get_spine_features('ref')
        service.load_data(chain_payload)
        assert service.report is None

    def test_load_file(self, payload_file):
        svc = PangenomeService()
        graph = svc.load_file(payload_file)
        assert len(graph.nodes) == 5
