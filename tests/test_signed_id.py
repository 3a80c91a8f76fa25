#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tests for signed node identifiers and edge keys.

Covers:
  - Parsing '<id><sign>' and rejecting malformed identifiers
  - Numeric-first ordering with '+' before '-'
  - Edge key rendering and parsing
  - Port resolution for edge endpoints
"""

import pytest

from panspine.graph_core.errors import MalformedIdentifier
from panspine.graph_core.signed_id import (
    Port, Sign, SignedId, edge_key_of, edge_key_parts, parse_signed_id,
    port_for_endpoint, undirected_pair,
)


class TestParsing:
    """Parsing of signed identifiers."""

    def test_parse_forward_and_reverse(self):
        fwd = parse_signed_id("2918+")
        rev = parse_signed_id("2918-")
        assert fwd.bare == "2918" and fwd.sign is Sign.FORWARD
        assert rev.bare == "2918" and rev.sign is Sign.REVERSE
        assert fwd != rev

    def test_sign_is_part_of_identity(self):
        assert parse_signed_id("7+") == SignedId("7", Sign.FORWARD)
        assert hash(parse_signed_id("7+")) == hash(SignedId("7", Sign.FORWARD))
        assert len({parse_signed_id("7+"), parse_signed_id("7-")}) == 2

    def test_str_round_trips(self):
        assert str(parse_signed_id("42-")) == "42-"

    def test_non_numeric_bare_id(self):
        node = parse_signed_id("chr1_seg+")
        assert node.bare == "chr1_seg"
        assert node.numeric_id is None

    def test_passes_signed_id_through(self):
        node = SignedId("3", Sign.REVERSE)
        assert parse_signed_id(node) is node

    @pytest.mark.parametrize("raw", ["12", "", "+", "-", "12*", None, 12])
    def test_malformed_identifiers_raise(self, raw):
        with pytest.raises(MalformedIdentifier):
            parse_signed_id(raw)

    def test_malformed_identifier_is_value_error(self):
        with pytest.raises(ValueError):
            parse_signed_id("abc")


class TestOrdering:
    """Deterministic ordering of signed ids."""

    def test_numeric_not_lexicographic(self):
        assert parse_signed_id("2+") < parse_signed_id("10+")

    def test_forward_before_reverse(self):
        assert parse_signed_id("5+") < parse_signed_id("5-")

    def test_non_numeric_after_numeric(self):
        ids = [parse_signed_id(x) for x in ["b+", "100+", "a-", "3-"]]
        assert [str(x) for x in sorted(ids)] == ["3-", "100+", "a-", "b+"]

    def test_undirected_pair_is_order_independent(self):
        a, b = parse_signed_id("9+"), parse_signed_id("4-")
        assert undirected_pair(a, b) == undirected_pair(b, a) == (b, a)


class TestEdgeKeys:
    """Edge key format and parsing."""

    def test_edge_key_format(self):
        assert edge_key_of(parse_signed_id("1+"), parse_signed_id("2-")) == "edge:1+:2-"

    def test_edge_key_parts(self):
        a, b = edge_key_parts("edge:10-:11+")
        assert (str(a), str(b)) == ("10-", "11+")

    def test_bad_edge_key(self):
        with pytest.raises(MalformedIdentifier):
            edge_key_parts("1+:2+")


class TestPorts:
    """Port interpretation of edge endpoints."""

    def test_matching_sign_attaches_at_end(self):
        assert port_for_endpoint(parse_signed_id("4+"), parse_signed_id("4+")) is Port.END

    def test_opposite_sign_attaches_at_start(self):
        assert port_for_endpoint(parse_signed_id("4-"), parse_signed_id("4+")) is Port.START
