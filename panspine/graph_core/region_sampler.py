#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Region & Path Sampler — grows the off-spine region between two anchors and
samples edge-disjoint, node-weighted shortest alternate paths through it.

Sampling is destructive on a private scratch copy of the region adjacency:
after each path its edges are removed, so no two returned paths share an
edge. The shared graph adjacency is never touched.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import heapq
import logging

import numpy as np

from .graph_builder import PangenomeGraph
from .signed_id import SignedId, undirected_pair
from .spine import Spine

logger = logging.getLogger(__name__)

RegionAdjacency = Dict[SignedId, List[SignedId]]


# ============================================================================
#                           DATA STRUCTURES
# ============================================================================

@dataclass
class Region:
    """
    Nodes bounded by two anchors.

    Attributes:
        members: Every region node in discovery order (anchors first, then
            off-spine growth, then the spine window when mid-spine re-entry
            is allowed)
        off_spine: Off-spine members only
        truncated: A node or edge cap was hit
    """
    left: SignedId
    right: Optional[SignedId]
    members: List[SignedId] = field(default_factory=list)
    off_spine: List[SignedId] = field(default_factory=list)
    truncated: bool = False


@dataclass
class PathNodeCoordinate:
    """Dual coordinate of one node on an alternate path."""
    id: SignedId
    is_spine: bool
    length_bp: int
    alt_start_bp: int
    alt_end_bp: int
    ref_bp_start: float
    ref_bp_end: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'isSpine': self.is_spine,
            'lenBp': self.length_bp,
            'altStartBp': self.alt_start_bp,
            'altEndBp': self.alt_end_bp,
            'refBpStart': self.ref_bp_start,
            'refBpEnd': self.ref_bp_end,
        }


@dataclass
class AltPath:
    """An alternate route between two anchors with per-node coordinates."""
    nodes: List[SignedId]
    edges: List[str]
    alt_len_bp: int
    nodes_detailed: List[PathNodeCoordinate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [str(n) for n in self.nodes],
            'edges': list(self.edges),
            'altLenBp': self.alt_len_bp,
            'nodesDetailed': [c.to_dict() for c in self.nodes_detailed],
        }


@dataclass
class SamplingResult:
    paths: List[List[SignedId]] = field(default_factory=list)
    removed_spine_leg: bool = False
    truncated_paths: bool = False


# ============================================================================
#                           REGION SAMPLER
# ============================================================================

class RegionSampler:
    """
    Region growth and edge-disjoint path sampling over one spine.

    Args:
        graph: Full pangenome graph (read-only)
        spine: Spine the anchors sit on
        max_paths: Maximum sampled alternate paths per feature
        max_region_nodes: Cap on region size
        max_region_edges: Cap on region-local adjacency edges
        allow_mid_spine_reentry: Add the spine window between anchors to the region
    """

    def __init__(
        self,
        graph: PangenomeGraph,
        spine: Spine,
        max_paths: int = 8,
        max_region_nodes: int = 5000,
        max_region_edges: int = 8000,
        allow_mid_spine_reentry: bool = True,
    ):
        self.graph = graph
        self.spine = spine
        self.max_paths = max(0, int(max_paths))
        self.max_region_nodes = max(1, int(max_region_nodes))
        self.max_region_edges = max(0, int(max_region_edges))
        self.allow_mid_spine_reentry = allow_mid_spine_reentry
        self.logger = logging.getLogger(f"{__name__}.RegionSampler")

    def is_spine(self, node_id: SignedId) -> bool:
        return node_id in self.spine

    # ------------------------------------------------------------------
    # Region growth
    # ------------------------------------------------------------------

    def grow_off_spine(self, seed: SignedId) -> Tuple[List[SignedId], bool]:
        """
        BFS from seed through off-spine nodes only.

        Returns:
            (seed followed by reached off-spine nodes, whether the node cap stopped growth)
        """
        order = [seed]
        seen = {seed}
        queue = deque([seed])
        while queue:
            node = queue.popleft()
            for nb in self.graph.neighbors(node):
                if nb in seen or self.is_spine(nb):
                    continue
                if len(order) >= self.max_region_nodes:
                    return order, True
                seen.add(nb)
                order.append(nb)
                queue.append(nb)
        return order, False

    def grow_region(self, left: SignedId, right: Optional[SignedId] = None) -> Region:
        """
        Region between two anchors: the intersection of the off-spine growths
        from each anchor, or the full growth from the left anchor when there
        is no right anchor.
        """
        left_growth, truncated = self.grow_off_spine(left)

        if right is None:
            members = list(left_growth)
        elif right == left:
            members = list(left_growth)
        else:
            right_growth, right_truncated = self.grow_off_spine(right)
            truncated = truncated or right_truncated
            right_set = set(right_growth)
            members = [left, right] + [n for n in left_growth[1:] if n in right_set]
            if self.allow_mid_spine_reentry:
                i, j = sorted((self.spine.index_of(left), self.spine.index_of(right)))
                members += [s.id for s in self.spine.nodes[i:j + 1] if s.id not in (left, right)]

        if len(members) > self.max_region_nodes:
            members = members[:self.max_region_nodes]
            truncated = True

        region = Region(
            left=left,
            right=right,
            members=members,
            off_spine=[n for n in members if not self.is_spine(n)],
            truncated=truncated,
        )
        if truncated:
            self.logger.warning(
                f"Region {left}~{right}: capped at {self.max_region_nodes} nodes"
            )
        return region

    def region_adjacency(self, region: Region) -> Tuple[RegionAdjacency, bool]:
        """
        Region-local adjacency, capped at max_region_edges undirected edges.

        Returns:
            (adjacency over region members, whether the edge cap was hit)
        """
        inside = set(region.members)
        adjacency: RegionAdjacency = {node: [] for node in region.members}
        seen: Set[Tuple[SignedId, SignedId]] = set()
        n_edges = 0
        for node in region.members:
            for nb in self.graph.neighbors(node):
                if nb not in inside:
                    continue
                pair = undirected_pair(node, nb)
                if pair in seen:
                    continue
                if n_edges >= self.max_region_edges:
                    self.logger.warning(
                        f"Region {region.left}~{region.right}: capped at {self.max_region_edges} edges"
                    )
                    return adjacency, True
                seen.add(pair)
                adjacency[node].append(nb)
                adjacency[nb].append(node)
                n_edges += 1
        return adjacency, False

    def region_edges(self, region: Region) -> Tuple[List[str], List[str]]:
        """
        Edge keys inside the region.

        Returns:
            (edges between off-spine members, edges joining off-spine members to spine members)
        """
        inside = set(region.members)
        internal: List[str] = []
        anchor: List[str] = []
        seen: Set[Tuple[SignedId, SignedId]] = set()
        for node in region.off_spine:
            for nb in self.graph.neighbors(node):
                if nb not in inside:
                    continue
                pair = undirected_pair(node, nb)
                if pair in seen:
                    continue
                seen.add(pair)
                key = self.graph.edge_key_between(node, nb)
                if key is None:
                    continue
                if self.is_spine(nb):
                    anchor.append(key)
                else:
                    internal.append(key)
        return internal, anchor

    # ------------------------------------------------------------------
    # Path sampling
    # ------------------------------------------------------------------

    def shortest_path(
        self,
        adjacency: RegionAdjacency,
        source: SignedId,
        sink: SignedId,
        banned: Optional[Tuple[SignedId, SignedId]] = None,
    ) -> Optional[Tuple[int, List[SignedId]]]:
        """
        Node-weighted Dijkstra: entering a node costs its length, the sink is free.

        Args:
            banned: An undirected edge to ignore

        Returns:
            (cost, node list source..sink) or None when unreachable
        """
        if source not in adjacency or sink not in adjacency:
            return None
        dist = {source: 0}
        prev: Dict[SignedId, SignedId] = {}
        heap = [(0, source)]
        done = set()
        while heap:
            cost, node = heapq.heappop(heap)
            if node in done:
                continue
            done.add(node)
            if node == sink:
                path = [sink]
                while path[-1] != source:
                    path.append(prev[path[-1]])
                path.reverse()
                return cost, path
            for nb in adjacency.get(node, ()):
                if nb in done:
                    continue
                if banned is not None and undirected_pair(node, nb) == banned:
                    continue
                step = 0 if nb == sink else self.graph.length_of(nb)
                new_cost = cost + step
                if nb not in dist or new_cost < dist[nb]:
                    dist[nb] = new_cost
                    prev[nb] = node
                    heapq.heappush(heap, (new_cost, nb))
        return None

    def shortest_loop(self, adjacency: RegionAdjacency, anchor: SignedId) -> Optional[List[SignedId]]:
        """
        Cheapest cycle leaving and re-entering anchor through two different legs.

        Each first leg anchor-a is tried in turn with that edge banned for the
        return search.
        """
        best: Optional[Tuple[int, List[SignedId]]] = None
        for first in sorted(adjacency.get(anchor, ())):
            found = self.shortest_path(adjacency, first, anchor, banned=undirected_pair(anchor, first))
            if found is None:
                continue
            cost = self.graph.length_of(first) + found[0]
            loop = [anchor] + found[1]
            if best is None or cost < best[0]:
                best = (cost, loop)
        return best[1] if best else None

    def sample_paths(self, adjacency: RegionAdjacency, left: SignedId, right: SignedId) -> SamplingResult:
        """
        Up to max_paths edge-disjoint alternate paths from left to right.

        Pure spine legs are discarded and their edges removed. Stops when no
        path remains, the cap is reached, or a path signature repeats.
        """
        scratch = {node: list(nbrs) for node, nbrs in adjacency.items()}
        result = SamplingResult()
        signatures: Set[Tuple[SignedId, ...]] = set()

        while len(result.paths) < self.max_paths:
            if left == right:
                path = self.shortest_loop(scratch, left)
            else:
                found = self.shortest_path(scratch, left, right)
                path = found[1] if found else None
            if path is None:
                break

            signature = tuple(path)
            if signature in signatures:
                self.logger.debug(f"Repeated path signature {left}~{right}, stopping")
                break
            signatures.add(signature)

            _remove_path_edges(scratch, path)
            if not any(not self.is_spine(n) for n in path[1:-1]):
                result.removed_spine_leg = True
                continue
            result.paths.append(path)

        result.truncated_paths = self.max_paths > 0 and len(result.paths) >= self.max_paths
        return result

    # ------------------------------------------------------------------
    # Coordinate projection
    # ------------------------------------------------------------------

    def decorate_path(self, path: List[SignedId], span_start: int, span_end: int) -> AltPath:
        """
        Alternate and reference coordinates for every node on the path.

        Only interior nodes advance the alternate coordinate; the two anchors
        occupy zero alternate length at either end. Spine nodes keep their
        exact spine extent; off-spine nodes are placed by linear
        interpolation of their alternate-path position over
        [span_start, span_end].
        """
        lengths = np.array([self.graph.length_of(n) for n in path], dtype=np.int64)
        alt_lengths = lengths.copy()
        if len(path):
            alt_lengths[0] = 0
            alt_lengths[-1] = 0
        alt_ends = np.cumsum(alt_lengths)
        alt_starts = alt_ends - alt_lengths
        total_alt = int(alt_ends[-1]) if len(path) else 0
        span_len = max(0, span_end - span_start)

        detailed: List[PathNodeCoordinate] = []
        for i, node in enumerate(path):
            alt_start, alt_end = int(alt_starts[i]), int(alt_ends[i])
            spine_node = self.spine.get(node)
            if spine_node is not None:
                ref_start, ref_end = spine_node.bp_start, spine_node.bp_end
            else:
                t0 = alt_start / total_alt if total_alt > 0 else 0.0
                t1 = alt_end / total_alt if total_alt > 0 else t0
                ref_start = span_start + t0 * span_len
                ref_end = span_start + t1 * span_len
            detailed.append(PathNodeCoordinate(
                id=node,
                is_spine=spine_node is not None,
                length_bp=int(lengths[i]),
                alt_start_bp=alt_start,
                alt_end_bp=alt_end,
                ref_bp_start=ref_start,
                ref_bp_end=ref_end,
            ))

        edges, _ = self.graph.edges_for_path(path)
        return AltPath(nodes=list(path), edges=edges, alt_len_bp=total_alt, nodes_detailed=detailed)


def _remove_path_edges(adjacency: RegionAdjacency, path: List[SignedId]):
    for a, b in zip(path, path[1:]):
        if b in adjacency.get(a, ()):
            adjacency[a].remove(b)
        if a in adjacency.get(b, ()):
            adjacency[b].remove(a)

# PanSpine v0.1.0
# Any usage is subject to this software's license.
