#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Spine — the reference-like walk features are anchored against, annotated
with cumulative bp coordinates from a caller-supplied origin.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union
import logging

import numpy as np

from .graph_builder import PangenomeGraph
from .signed_id import SignedId, SignedLike, parse_signed_id
from .walk_extractor import Walk, WalkPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpineNode:
    """A spine position: [bp_start, bp_end) in locus coordinates."""
    id: SignedId
    index: int
    bp_start: int
    bp_end: int

    @property
    def length_bp(self) -> int:
        return self.bp_end - self.bp_start

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'index': self.index,
            'bpStart': self.bp_start,
            'bpEnd': self.bp_end,
            'lenBp': self.length_bp,
        }


@dataclass
class Spine:
    """
    Ordered spine nodes with contiguous bp extents.

    bp_end of each node equals bp_start of the next, starting at
    locus_start_bp.
    """
    nodes: List[SpineNode] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)
    locus_start_bp: int = 0
    assembly_key: Optional[str] = None

    def __post_init__(self):
        self._by_id = {node.id: node for node in self.nodes}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id) -> bool:
        return node_id in self._by_id

    @property
    def node_ids(self) -> List[SignedId]:
        return [node.id for node in self.nodes]

    @property
    def length_bp(self) -> int:
        if not self.nodes:
            return 0
        return self.nodes[-1].bp_end - self.locus_start_bp

    def get(self, node_id: SignedLike) -> Optional[SpineNode]:
        return self._by_id.get(parse_signed_id(node_id))

    def index_of(self, node_id: SignedId) -> int:
        """Spine position, or -1 when the node is off-spine."""
        node = self._by_id.get(node_id)
        return node.index if node else -1

    def bp_start(self, node_id: SignedId) -> int:
        return self._by_id[node_id].bp_start

    def bp_end(self, node_id: SignedId) -> int:
        return self._by_id[node_id].bp_end

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assemblyKey': self.assembly_key,
            'nodes': [node.to_dict() for node in self.nodes],
            'edges': list(self.edges),
            'locusStartBp': self.locus_start_bp,
            'lengthBp': self.length_bp,
        }


def build_spine(
    graph: PangenomeGraph,
    walk: Union[Walk, WalkPath, Sequence[SignedLike]],
    locus_start_bp: int = 0,
    assembly_key: Optional[str] = None,
) -> Spine:
    """
    Annotate a walk's primary path with cumulative bp coordinates.

    Args:
        graph: Graph providing node lengths and edges
        walk: A Walk (its first path is used), a WalkPath, or plain node ids
        locus_start_bp: Coordinate of the first spine node's start
        assembly_key: Recorded on the spine; taken from the Walk when omitted

    Returns:
        Spine; empty when the walk has no path
    """
    edges: Optional[List[str]] = None
    if isinstance(walk, Walk):
        assembly_key = assembly_key or walk.assembly_key
        walk = walk.primary
    if walk is None:
        logger.warning(f"No walk available for spine of {assembly_key}; spine is empty")
        return Spine(locus_start_bp=int(locus_start_bp), assembly_key=assembly_key)
    if isinstance(walk, WalkPath):
        edges = list(walk.edges)
        ids = list(walk.nodes)
    else:
        ids = [parse_signed_id(n) for n in walk]
    if edges is None:
        edges, _ = graph.edges_for_path(ids)

    lengths = np.array([graph.length_of(n) for n in ids], dtype=np.int64)
    ends = int(locus_start_bp) + np.cumsum(lengths)
    starts = ends - lengths

    nodes = [
        SpineNode(id=node_id, index=i, bp_start=int(starts[i]), bp_end=int(ends[i]))
        for i, node_id in enumerate(ids)
    ]
    spine = Spine(nodes=nodes, edges=edges, locus_start_bp=int(locus_start_bp), assembly_key=assembly_key)
    logger.info(f"Spine {assembly_key or ''}: {len(nodes)} nodes, {spine.length_bp:,} bp")
    return spine

# PanSpine v0.1.0
# Any usage is subject to this software's license.
