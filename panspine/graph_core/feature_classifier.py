#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Feature Classifier — discovers anchor pairs along a spine, turns each into
a typed feature (pill, simple bubble, braid, parallel bundle, dangling),
and relates features to each other by span containment and overlap.

Pipeline:
1. Anchor discovery: BFS from each spine node through off-spine neighbors
2. Region growth + edge-disjoint path sampling per candidate
3. Initial typing (dangling / pill / simple_bubble)
4. Relational analysis over non-dangling features
5. Type refinement (parallel_bundle, braid)
6. Off-spine component summary

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from collections import Counter, deque
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple
import logging

from .graph_builder import PangenomeGraph
from .region_sampler import RegionSampler
from .report import (
    Feature, FeatureAnchors, FeatureRegion, FeatureRelations, FeatureReport,
    FeatureStats, FeatureType, OffSpineComponent, Orientation,
)
from .signed_id import SignedId, undirected_pair
from .spine import Spine

logger = logging.getLogger(__name__)


# ============================================================================
#                           OPTIONS & CANDIDATES
# ============================================================================

@dataclass
class FeatureOptions:
    """Feature analysis options."""
    locus_start_bp: int = 0
    include_adjacent: bool = True
    include_upstream: bool = True
    allow_mid_spine_reentry: bool = True
    include_dangling: bool = True
    include_off_spine_components: bool = True
    max_paths_per_event: int = 8
    max_region_nodes: int = 5000
    max_region_edges: int = 8000

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]] = None) -> "FeatureOptions":
        """Build from a config section; unknown keys are ignored."""
        values = values or {}
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known and v is not None})

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class AnchorCandidate:
    """A spine node pair (or lone left anchor) that bounds an off-spine excursion."""
    left: SignedId
    right: Optional[SignedId]
    orientation: Orientation

    @property
    def feature_id(self) -> str:
        right = str(self.right) if self.right is not None else "null"
        return f"{self.left}~{right}"


def discover_anchor_candidates(
    graph: PangenomeGraph,
    spine: Spine,
    options: Optional[FeatureOptions] = None,
) -> List[AnchorCandidate]:
    """
    BFS from each spine node through its off-spine neighbors.

    Every spine node the exploration touches yields a forward or upstream
    pair. An exploration where two different first legs meet off-spine and
    no other spine node is touched is a loop back to the same node (pill).
    An exploration that touches nothing is a dangling candidate, recorded
    once per distinct off-spine member set.
    """
    options = options or FeatureOptions()
    candidates: List[AnchorCandidate] = []
    seen_pairs: Set[Tuple[SignedId, SignedId]] = set()
    seen_blobs: Set[Tuple[SignedId, ...]] = set()

    def add_pair(left: SignedId, right: SignedId, orientation: Orientation):
        if (left, right) in seen_pairs:
            return
        seen_pairs.add((left, right))
        candidates.append(AnchorCandidate(left, right, orientation))

    for spine_node in spine.nodes:
        left, i = spine_node.id, spine_node.index
        first_hops = [nb for nb in graph.neighbors(left) if nb not in spine]
        if not first_hops:
            continue

        seen = {left}
        leg_of: Dict[SignedId, SignedId] = {hop: hop for hop in first_hops}
        queue = deque(first_hops)
        touched_spine = False
        loops_back = False

        while queue:
            node = queue.popleft()
            for nb in graph.neighbors(node):
                if nb == left:
                    continue
                if nb in spine:
                    if nb in seen:
                        continue
                    seen.add(nb)
                    touched_spine = True
                    j = spine.index_of(nb)
                    if not options.include_adjacent and j == i + 1:
                        continue
                    if not options.include_upstream and j < i:
                        continue
                    add_pair(left, nb, Orientation.FORWARD if j > i else Orientation.UPSTREAM)
                    continue
                if nb in leg_of:
                    if leg_of[nb] != leg_of[node]:
                        loops_back = True
                    continue
                leg_of[nb] = leg_of[node]
                queue.append(nb)

        if touched_spine:
            continue
        if loops_back:
            add_pair(left, left, Orientation.PILL)
        elif options.include_dangling:
            signature = tuple(sorted(leg_of))
            if signature not in seen_blobs:
                seen_blobs.add(signature)
                candidates.append(AnchorCandidate(left, None, Orientation.DANGLING))

    logger.debug(f"Discovered {len(candidates)} anchor candidates over {len(spine)} spine nodes")
    return candidates


# ============================================================================
#                           FEATURE CLASSIFIER
# ============================================================================

class FeatureClassifier:
    """
    Builds the Feature Report for one spine.

    The graph and spine are only read; path sampling works on per-region
    scratch adjacencies owned by RegionSampler.
    """

    def __init__(self, graph: PangenomeGraph, spine: Spine, options: Optional[FeatureOptions] = None):
        self.graph = graph
        self.spine = spine
        self.options = options or FeatureOptions()
        self.sampler = RegionSampler(
            graph,
            spine,
            max_paths=self.options.max_paths_per_event,
            max_region_nodes=self.options.max_region_nodes,
            max_region_edges=self.options.max_region_edges,
            allow_mid_spine_reentry=self.options.allow_mid_spine_reentry,
        )
        self.logger = logging.getLogger(f"{__name__}.FeatureClassifier")

    def assess(self) -> FeatureReport:
        """Run discovery, sampling, typing and relational analysis."""
        candidates = discover_anchor_candidates(self.graph, self.spine, self.options)
        events = [self.build_feature(c) for c in candidates]

        proper = [e for e in events if not e.is_dangling]
        self.assign_relations(proper)
        self.refine_types(proper)

        off_spine = self.off_spine_components() if self.options.include_off_spine_components else []

        report = FeatureReport(spine=self.spine, events=events, off_spine=off_spine)
        counts = {k: v for k, v in report.type_counts().items() if v}
        self.logger.info(
            f"Assessed {len(events)} features over {len(self.spine)} spine nodes: {counts}; "
            f"{len(off_spine)} off-spine components"
        )
        return report

    # ------------------------------------------------------------------

    def build_feature(self, candidate: AnchorCandidate) -> Feature:
        """Region, sampled paths and initial type for one anchor candidate."""
        left, right = candidate.left, candidate.right
        spine = self.spine

        span_start = spine.bp_end(left)
        span_end = spine.bp_start(right) if right is not None else span_start
        if right == left:
            span_end = span_start
        ref_len = max(0, span_end - span_start) if right is not None else 0

        anchors = FeatureAnchors(
            left_id=left,
            right_id=right,
            span_start=span_start,
            span_end=span_end,
            ref_len_bp=ref_len,
            orientation=candidate.orientation,
            left_bp_start=spine.bp_start(left),
            left_bp_end=spine.bp_end(left),
            right_bp_start=spine.bp_start(right) if right is not None else None,
            right_bp_end=spine.bp_end(right) if right is not None else None,
        )

        region = self.sampler.grow_region(left, right)
        adjacency, edges_truncated = self.sampler.region_adjacency(region)
        internal_edges, anchor_edges = self.sampler.region_edges(region)

        paths = []
        stats = FeatureStats()
        if right is not None:
            sampled = self.sampler.sample_paths(adjacency, left, right)
            paths = [self.sampler.decorate_path(p, span_start, span_end) for p in sampled.paths]
            alt_lengths = [p.alt_len_bp for p in paths]
            stats = FeatureStats(
                n_paths=len(paths),
                min_alt_len_bp=min(alt_lengths) if alt_lengths else 0,
                max_alt_len_bp=max(alt_lengths) if alt_lengths else 0,
                truncated_paths=sampled.truncated_paths,
                removed_spine_leg=sampled.removed_spine_leg,
            )

        if right is None:
            feature_type = FeatureType.DANGLING
        elif right == left or ref_len == 0:
            feature_type = FeatureType.PILL
        else:
            feature_type = FeatureType.SIMPLE_BUBBLE

        feature = Feature(
            id=candidate.feature_id,
            type=feature_type,
            anchors=anchors,
            region=FeatureRegion(
                nodes=list(region.off_spine),
                edges=internal_edges,
                anchor_edges=anchor_edges,
                truncated=region.truncated or edges_truncated,
            ),
            paths=paths,
            stats=stats,
        )
        self.logger.debug(
            f"{feature.id}: {feature_type.value}, {len(region.off_spine)} region nodes, "
            f"{stats.n_paths} paths"
        )
        return feature

    @staticmethod
    def assign_relations(features: List[Feature]):
        """
        Same-anchor groups, parent/child by span containment, overlap groups
        by partial overlap.

        Same-anchor group ids are numbered from 1 in feature order, one per
        ordered (left, right) anchor pair. Overlap groups are assigned in one
        pass over the sorted intervals: a pair joins the first group id
        already held by either member, else opens a new group. Groups are
        never merged afterwards.
        """
        group_of: Dict[Tuple[SignedId, Optional[SignedId]], int] = {}
        for feature in features:
            key = (feature.anchors.left_id, feature.anchors.right_id)
            if key not in group_of:
                group_of[key] = len(group_of) + 1
            feature.relations = FeatureRelations(same_anchor_group=group_of[key])

        ordered = sorted(features, key=lambda f: f.anchors.interval)
        next_group = 1
        for i, a in enumerate(ordered):
            a_start, a_end = a.anchors.interval
            for b in ordered[i + 1:]:
                b_start, b_end = b.anchors.interval
                if a_start <= b_start and a_end >= b_end:
                    b.relations.parent_id = a.id
                    a.relations.children_ids.append(b.id)
                elif b_start <= a_start and b_end >= a_end:
                    a.relations.parent_id = b.id
                    b.relations.children_ids.append(a.id)
                elif not (a_end <= b_start or b_end <= a_start):
                    group = a.relations.overlap_group or b.relations.overlap_group
                    if group is None:
                        group = next_group
                        next_group += 1
                    a.relations.overlap_group = group
                    b.relations.overlap_group = group

    @staticmethod
    def refine_types(features: List[Feature]):
        """Promote non-pill bubbles to parallel_bundle or braid."""
        group_sizes = Counter(f.relations.same_anchor_group for f in features)
        for feature in features:
            if feature.type is FeatureType.PILL:
                continue
            if group_sizes[feature.relations.same_anchor_group] > 1 or feature.stats.n_paths >= 2:
                feature.type = FeatureType.PARALLEL_BUNDLE
            elif feature.relations.children_ids or feature.relations.overlap_group is not None:
                feature.type = FeatureType.BRAID
            else:
                feature.type = FeatureType.SIMPLE_BUBBLE

    def off_spine_components(self) -> List[OffSpineComponent]:
        """Connected components of the graph with every spine node removed."""
        visited: Set[SignedId] = set()
        components: List[OffSpineComponent] = []
        for start in self.graph.nodes:
            if start in visited or start in self.spine:
                continue
            visited.add(start)
            members = []
            queue = deque([start])
            while queue:
                node = queue.popleft()
                members.append(node)
                for nb in self.graph.neighbors(node):
                    if nb in visited or nb in self.spine:
                        continue
                    visited.add(nb)
                    queue.append(nb)

            edges = []
            seen_pairs = set()
            for node in members:
                for nb in self.graph.neighbors(node):
                    if nb in self.spine:
                        continue
                    pair = undirected_pair(node, nb)
                    if pair in seen_pairs:
                        continue
                    seen_pairs.add(pair)
                    key = self.graph.edge_key_between(node, nb)
                    if key is not None:
                        edges.append(key)
            components.append(OffSpineComponent(nodes=members, edges=edges))
        return components


def assess_graph_features(
    graph: PangenomeGraph,
    spine: Spine,
    options: Optional[FeatureOptions] = None,
) -> FeatureReport:
    """Feature Report for a graph against one spine."""
    return FeatureClassifier(graph, spine, options).assess()

# PanSpine v0.1.0
# Any usage is subject to this software's license.
