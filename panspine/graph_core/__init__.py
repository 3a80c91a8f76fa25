"""
PanSpine graph core: graph model, component analysis, walk extraction and
spine feature classification.
"""

from .errors import (
    DiagnosticKind, MalformedIdentifier, MalformedPayload, MissingGraph,
    PanSpineError, WalkDiagnostic,
)
from .signed_id import (
    Port, Sign, SignedId, edge_key_of, edge_key_parts, parse_signed_id,
)
from .graph_builder import (
    EdgeVariant, PangenomeEdge, PangenomeGraph, PangenomeNode, build_graph,
    build_graph_from_payload,
)
from .components import (
    BiconnectedDecomposition, BlockCutTree, biconnected_components,
    build_block_cut_tree, connected_components, induced_adjacency,
)
from .walk_extractor import (
    ComponentShape, DirectionPolicy, Walk, WalkDiagnostics, WalkMode, WalkPath,
    classify_component, create_assembly_walk, create_assembly_walks, extract_walk,
)
from .spine import Spine, SpineNode, build_spine
from .region_sampler import AltPath, PathNodeCoordinate, Region, RegionSampler
from .report import (
    Feature, FeatureReport, FeatureType, OffSpineComponent, Orientation,
    any_bp_extent, bp_extent_on_spine, projected_bp_in_feature,
)
from .feature_classifier import (
    AnchorCandidate, FeatureClassifier, FeatureOptions, assess_graph_features,
    discover_anchor_candidates,
)

__all__ = [
    # Errors
    'PanSpineError', 'MalformedIdentifier', 'MalformedPayload', 'MissingGraph',
    'DiagnosticKind', 'WalkDiagnostic',
    # Identity
    'Sign', 'Port', 'SignedId', 'parse_signed_id', 'edge_key_of', 'edge_key_parts',
    # Graph
    'PangenomeNode', 'EdgeVariant', 'PangenomeEdge', 'PangenomeGraph',
    'build_graph', 'build_graph_from_payload',
    # Components
    'induced_adjacency', 'connected_components', 'biconnected_components',
    'BiconnectedDecomposition', 'BlockCutTree', 'build_block_cut_tree',
    # Walks
    'WalkMode', 'ComponentShape', 'DirectionPolicy', 'WalkPath', 'Walk',
    'WalkDiagnostics', 'classify_component', 'extract_walk',
    'create_assembly_walk', 'create_assembly_walks',
    # Spine & features
    'Spine', 'SpineNode', 'build_spine',
    'Region', 'RegionSampler', 'AltPath', 'PathNodeCoordinate',
    'FeatureType', 'Orientation', 'Feature', 'OffSpineComponent', 'FeatureReport',
    'bp_extent_on_spine', 'projected_bp_in_feature', 'any_bp_extent',
    'FeatureOptions', 'AnchorCandidate', 'FeatureClassifier',
    'discover_anchor_candidates', 'assess_graph_features',
]
