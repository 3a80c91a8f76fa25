#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Feature Report — typed feature records, the report handed to rendering
collaborators, and the bp coordinate helpers used for tooltips.

Features refer to each other by string id only, so a report serializes to
plain nested dicts and lists.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .region_sampler import AltPath
from .signed_id import SignedId, SignedLike, parse_signed_id
from .spine import Spine


class FeatureType(str, Enum):
    """Structural feature categories."""
    PILL = "pill"
    SIMPLE_BUBBLE = "simple_bubble"
    BRAID = "braid"
    PARALLEL_BUNDLE = "parallel_bundle"
    DANGLING = "dangling"


class Orientation(str, Enum):
    """Where the right anchor sits relative to the left one."""
    FORWARD = "forward"
    UPSTREAM = "upstream"
    PILL = "pill"
    DANGLING = "dangling"


@dataclass
class FeatureAnchors:
    left_id: SignedId
    right_id: Optional[SignedId]
    span_start: int
    span_end: int
    ref_len_bp: int
    orientation: Orientation
    left_bp_start: int = 0
    left_bp_end: int = 0
    right_bp_start: Optional[int] = None
    right_bp_end: Optional[int] = None

    @property
    def interval(self):
        """Span as a (low, high) pair."""
        return min(self.span_start, self.span_end), max(self.span_start, self.span_end)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'leftId': str(self.left_id),
            'rightId': str(self.right_id) if self.right_id is not None else None,
            'spanStart': self.span_start,
            'spanEnd': self.span_end,
            'refLenBp': self.ref_len_bp,
            'orientation': self.orientation.value,
            'leftBpStart': self.left_bp_start,
            'leftBpEnd': self.left_bp_end,
            'rightBpStart': self.right_bp_start,
            'rightBpEnd': self.right_bp_end,
        }


@dataclass
class FeatureRegion:
    nodes: List[SignedId] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)
    anchor_edges: List[str] = field(default_factory=list)
    truncated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [str(n) for n in self.nodes],
            'edges': list(self.edges),
            'anchorEdges': list(self.anchor_edges),
            'truncated': self.truncated,
        }


@dataclass
class FeatureStats:
    n_paths: int = 0
    min_alt_len_bp: int = 0
    max_alt_len_bp: int = 0
    truncated_paths: bool = False
    removed_spine_leg: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nPaths': self.n_paths,
            'minAltLenBp': self.min_alt_len_bp,
            'maxAltLenBp': self.max_alt_len_bp,
            'truncatedPaths': self.truncated_paths,
            'removedSpineLeg': self.removed_spine_leg,
        }


@dataclass
class FeatureRelations:
    parent_id: Optional[str] = None
    children_ids: List[str] = field(default_factory=list)
    overlap_group: Optional[int] = None
    same_anchor_group: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'parentId': self.parent_id,
            'childrenIds': list(self.children_ids),
            'overlapGroup': self.overlap_group,
            'sameAnchorGroup': self.same_anchor_group,
        }


@dataclass
class Feature:
    """One structural feature anchored on the spine."""
    id: str
    type: FeatureType
    anchors: FeatureAnchors
    region: FeatureRegion
    paths: List[AltPath] = field(default_factory=list)
    stats: FeatureStats = field(default_factory=FeatureStats)
    relations: FeatureRelations = field(default_factory=FeatureRelations)

    @property
    def is_dangling(self) -> bool:
        return self.anchors.right_id is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'type': self.type.value,
            'anchors': self.anchors.to_dict(),
            'region': self.region.to_dict(),
            'paths': [p.to_dict() for p in self.paths],
            'stats': self.stats.to_dict(),
            'relations': self.relations.to_dict(),
        }


@dataclass
class OffSpineComponent:
    """Connected component of the graph with the spine removed."""
    nodes: List[SignedId] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [str(n) for n in self.nodes],
            'edges': list(self.edges),
            'size': self.size,
        }


@dataclass
class FeatureReport:
    """Spine, its features and the off-spine components."""
    spine: Spine
    events: List[Feature] = field(default_factory=list)
    off_spine: List[OffSpineComponent] = field(default_factory=list)

    def feature(self, feature_id: str) -> Optional[Feature]:
        for event in self.events:
            if event.id == feature_id:
                return event
        return None

    def by_type(self, feature_type) -> List[Feature]:
        feature_type = FeatureType(feature_type)
        return [e for e in self.events if e.type is feature_type]

    def type_counts(self) -> Dict[str, int]:
        counts = {t.value: 0 for t in FeatureType}
        for event in self.events:
            counts[event.type.value] += 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            'spine': self.spine.to_dict(),
            'events': [e.to_dict() for e in self.events],
            'offSpine': [c.to_dict() for c in self.off_spine],
        }


# ============================================================================
#                       COORDINATE HELPERS
# ============================================================================

def bp_extent_on_spine(spine: Spine, node_id: SignedLike) -> Optional[Dict[str, Any]]:
    """Exact spine extent of a node, or None when it is off-spine."""
    node = spine.get(node_id)
    if node is None:
        return None
    return {'bpStart': node.bp_start, 'bpEnd': node.bp_end, 'projected': False}


def projected_bp_in_feature(node_id: SignedLike, feature: Feature) -> Optional[Dict[str, Any]]:
    """
    Reference extent of a node as seen from one feature.

    Anchors map to the span ends; path nodes use their recorded reference
    coordinates, flagged projected unless they sit on the spine.
    """
    node_id = parse_signed_id(node_id)
    anchors = feature.anchors
    if node_id == anchors.left_id:
        return {'bpStart': anchors.span_start, 'bpEnd': anchors.span_start, 'projected': False}
    if anchors.right_id is not None and node_id == anchors.right_id:
        return {'bpStart': anchors.span_end, 'bpEnd': anchors.span_end, 'projected': False}
    for path in feature.paths:
        for coord in path.nodes_detailed:
            if coord.id == node_id:
                return {
                    'bpStart': coord.ref_bp_start,
                    'bpEnd': coord.ref_bp_end,
                    'projected': not coord.is_spine,
                }
    return None


def any_bp_extent(node_id: SignedLike, report: FeatureReport) -> Optional[Dict[str, Any]]:
    """Spine extent when the node is on the spine, else the first feature projection."""
    node_id = parse_signed_id(node_id)
    exact = bp_extent_on_spine(report.spine, node_id)
    if exact is not None:
        return exact
    for event in report.events:
        projected = projected_bp_in_feature(node_id, event)
        if projected is not None:
            return projected
    return None

# PanSpine v0.1.0
# Any usage is subject to this software's license.
