#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Walk Extractor — one simple walk per connected component of an assembly's
induced subgraph.

Two strategies are used:
- Endpoint walk: pick two endpoints (degree-1 nodes, else a two-pass BFS
  diameter) and walk greedily, preferring the unvisited neighbor with the
  fewest unvisited neighbors of its own.
- Block-cut walk: route between the endpoint blocks on the block-cut tree
  and stitch block-restricted BFS paths at the articulation vertices.

Fallback chain: block-cut walk -> endpoint walk -> singleton -> diagnostic.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple
import logging

from .components import (
    Adjacency, bfs_farthest, bfs_path, biconnected_components,
    build_block_cut_tree, connected_components, count_edges,
    induced_adjacency,
)
from .errors import DiagnosticKind, WalkDiagnostic
from .graph_builder import PangenomeGraph
from .signed_id import SignedId, SignedLike, parse_signed_id

logger = logging.getLogger(__name__)


# ============================================================================
#                         ENUMS & CONSTANTS
# ============================================================================

class WalkMode(str, Enum):
    """Walk extraction strategy."""
    AUTO = "auto"
    ENDPOINT = "endpoint"
    BLOCKCUT = "blockcut"


class ComponentShape(str, Enum):
    """Shape of a connected component, used by auto mode."""
    CHAINLIKE = "chainlike"
    CYCLIC = "cyclic"


class DirectionPolicy(str, Enum):
    """How an extracted path is oriented."""
    AS_IS = "as_is"
    FORCE_START = "force_start"
    ASCENDING_ID = "ascending_id"
    DESCENDING_ID = "descending_id"
    EDGE_FLOW = "edge_flow"


SINGLETON_MODE = "singleton"


# ============================================================================
#                           DATA STRUCTURES
# ============================================================================

@dataclass
class WalkPath:
    """
    One oriented simple path through a connected component.

    Attributes:
        nodes: Ordered node ids, no repeats
        edges: Edge keys aligned to consecutive node pairs that have an edge
        length_bp: Sum of node lengths
        mode: Strategy that produced the path ('endpoint', 'blockcut' or 'singleton')
    """
    nodes: List[SignedId] = field(default_factory=list)
    edges: List[str] = field(default_factory=list)
    length_bp: int = 0
    mode: str = WalkMode.ENDPOINT.value

    @property
    def left_endpoint(self) -> Optional[SignedId]:
        return self.nodes[0] if self.nodes else None

    @property
    def right_endpoint(self) -> Optional[SignedId]:
        return self.nodes[-1] if self.nodes else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [str(n) for n in self.nodes],
            'edges': list(self.edges),
            'leftEndpoint': str(self.left_endpoint) if self.nodes else None,
            'rightEndpoint': str(self.right_endpoint) if self.nodes else None,
            'lengthBp': self.length_bp,
            'mode': self.mode,
        }


@dataclass
class WalkDiagnostics:
    """Induced subgraph size and the non-fatal warnings raised while walking."""
    induced_nodes: int = 0
    induced_edges: int = 0
    component_count: int = 0
    warnings: List[WalkDiagnostic] = field(default_factory=list)

    def add(self, kind: DiagnosticKind, message: str, assembly_key: Optional[str] = None,
            node_id: Optional[SignedId] = None):
        logger.warning(f"{kind.value}: {message}")
        self.warnings.append(WalkDiagnostic(
            kind=kind,
            message=message,
            assembly_key=assembly_key,
            node_id=str(node_id) if node_id is not None else None,
        ))

    def kinds(self) -> List[DiagnosticKind]:
        return [w.kind for w in self.warnings]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'inducedNodes': self.induced_nodes,
            'inducedEdges': self.induced_edges,
            'componentCount': self.component_count,
            'warnings': [w.to_dict() for w in self.warnings],
        }


@dataclass
class Walk:
    """All component paths for one assembly key, largest first."""
    assembly_key: str
    paths: List[WalkPath] = field(default_factory=list)
    diagnostics: WalkDiagnostics = field(default_factory=WalkDiagnostics)

    @property
    def primary(self) -> Optional[WalkPath]:
        """The path a spine is built from."""
        return self.paths[0] if self.paths else None

    @property
    def is_empty(self) -> bool:
        return not self.paths

    def to_dict(self) -> Dict[str, Any]:
        return {
            'assemblyKey': self.assembly_key,
            'paths': [p.to_dict() for p in self.paths],
            'diagnostics': self.diagnostics.to_dict(),
        }


class ComponentWalk(NamedTuple):
    nodes: List
    mode: str


# ============================================================================
#                       COMPONENT CLASSIFICATION
# ============================================================================

def classify_component(adjacency: Adjacency, component: Sequence) -> ComponentShape:
    """
    Chain-like iff the component has exactly two degree-1 endpoints, no node
    of degree above 2 and no more edges than nodes. Singletons are chain-like.
    """
    if len(component) <= 1:
        return ComponentShape.CHAINLIKE
    degrees = [len(adjacency.get(node, ())) for node in component]
    endpoints = sum(1 for d in degrees if d == 1)
    n_edges = count_edges(adjacency, component)
    if endpoints == 2 and max(degrees) <= 2 and n_edges <= len(component):
        return ComponentShape.CHAINLIKE
    return ComponentShape.CYCLIC


def choose_endpoints(adjacency: Adjacency, component: Sequence) -> Tuple[Any, Any]:
    """
    Two degree-1 nodes (lowest ids) when available, else the ends of a
    two-pass farthest BFS starting from the lowest id.
    """
    ordered = sorted(component, key=_sort_key)
    leaves = [node for node in ordered if len(adjacency.get(node, ())) == 1]
    if len(leaves) >= 2:
        return leaves[0], leaves[1]
    seed = ordered[0]
    first, _ = bfs_farthest(adjacency, seed)
    second, _ = bfs_farthest(adjacency, first)
    return first, second


# ============================================================================
#                           WALK STRATEGIES
# ============================================================================

def endpoint_walk(adjacency: Adjacency, component: Sequence) -> List:
    """
    Greedy walk from one chosen endpoint.

    At each step the unvisited neighbor with the lowest residual degree
    (count of its own unvisited neighbors) is taken, ties broken by id.
    """
    if not component:
        return []
    start, _ = choose_endpoints(adjacency, component)
    members = set(component)
    visited = {start}
    walk = [start]
    current = start
    while True:
        candidates = [nb for nb in adjacency.get(current, ()) if nb in members and nb not in visited]
        if not candidates:
            break

        def residual(node):
            return sum(1 for x in adjacency.get(node, ()) if x in members and x not in visited)

        candidates.sort(key=lambda nb: (residual(nb), _sort_key(nb)))
        current = candidates[0]
        visited.add(current)
        walk.append(current)
    return walk


def block_cut_walk(adjacency: Adjacency, component: Sequence) -> List:
    """
    Walk stitched from per-block BFS paths along the block-cut tree route
    between the blocks of the two chosen endpoints.

    Returns an empty list when the component has no blocks.
    """
    sub = induced_adjacency(adjacency, component)
    decomposition = biconnected_components(sub)
    if not decomposition.blocks:
        return []

    start, goal = choose_endpoints(sub, component)
    start_block = decomposition.block_of(start)
    goal_block = decomposition.block_of(goal)
    if start_block < 0 or goal_block < 0:
        return bfs_path(sub, start, goal) or []

    tree = build_block_cut_tree(decomposition)
    route = tree.route(start_block, goal_block)
    if route is None:
        return bfs_path(sub, start, goal) or []

    walk: List = []
    entry = start
    for i, label in enumerate(route):
        if not label.startswith("B#"):
            continue
        block = decomposition.blocks[tree.block_index(label)]
        exit_node = goal
        if i + 1 < len(route):
            exit_node = tree.vertex_of(route[i + 1])
        segment = bfs_path(sub, entry, exit_node, allowed=block)
        if not segment:
            logger.debug(f"Block {label}: no path {entry} -> {exit_node}, stopping stitch")
            break
        if walk and walk[-1] == segment[0]:
            segment = segment[1:]
        walk.extend(segment)
        entry = exit_node

    return walk or (bfs_path(sub, start, goal) or [])


def select_mode(adjacency: Adjacency, component: Sequence, mode: WalkMode = WalkMode.AUTO) -> WalkMode:
    """Resolve auto mode for one component."""
    mode = WalkMode(mode)
    if mode is not WalkMode.AUTO:
        return mode
    if classify_component(adjacency, component) is ComponentShape.CHAINLIKE:
        return WalkMode.ENDPOINT
    return WalkMode.BLOCKCUT


def extract_walk(
    adjacency: Adjacency,
    component: Sequence,
    mode: WalkMode = WalkMode.AUTO,
) -> ComponentWalk:
    """
    Best-effort simple walk through one connected component.

    Returns:
        ComponentWalk(nodes, mode used); nodes is empty only when every
        fallback failed
    """
    chosen = select_mode(adjacency, component, mode)
    nodes: List = []
    used = chosen.value

    if chosen is WalkMode.BLOCKCUT:
        nodes = block_cut_walk(adjacency, component)
        if nodes and len(set(nodes)) != len(nodes):
            logger.debug("Block-cut walk repeated a vertex, falling back to endpoint walk")
            nodes = []
        if not nodes:
            used = WalkMode.ENDPOINT.value
    if not nodes:
        nodes = endpoint_walk(adjacency, component)
    if not nodes and len(component) == 1:
        nodes = [component[0]]
    if len(component) == 1 and nodes:
        used = SINGLETON_MODE
    return ComponentWalk(nodes, used)


# ============================================================================
#                       DIRECTION NORMALIZATION
# ============================================================================

def edge_flow_score(graph: PangenomeGraph, nodes: Sequence[SignedId]) -> int:
    """+1 per consecutive pair with a directed edge a->b, -1 when only b->a exists."""
    score = 0
    for a, b in zip(nodes, nodes[1:]):
        if graph.has_directed_edge(a, b):
            score += 1
        elif graph.has_directed_edge(b, a):
            score -= 1
    return score


def orient_path(
    graph: PangenomeGraph,
    nodes: List[SignedId],
    policy: DirectionPolicy = DirectionPolicy.EDGE_FLOW,
    start_node: Optional[SignedId] = None,
) -> Tuple[List[SignedId], bool]:
    """
    Orient a path under a direction policy.

    Returns:
        (oriented nodes, whether a requested start node could be honored)
    """
    policy = DirectionPolicy(policy)
    if policy is DirectionPolicy.AS_IS:
        return list(nodes), True

    reversed_nodes = list(reversed(nodes))
    if policy is DirectionPolicy.FORCE_START:
        if start_node is None or not nodes or start_node == nodes[0]:
            return list(nodes), True
        if start_node == nodes[-1]:
            return reversed_nodes, True
        return list(nodes), False
    if len(nodes) < 2:
        return list(nodes), True
    if policy is DirectionPolicy.ASCENDING_ID:
        return (reversed_nodes if nodes[-1] < nodes[0] else list(nodes)), True
    if policy is DirectionPolicy.DESCENDING_ID:
        return (reversed_nodes if nodes[0] < nodes[-1] else list(nodes)), True

    forward = edge_flow_score(graph, nodes)
    backward = edge_flow_score(graph, reversed_nodes)
    return (reversed_nodes if backward > forward else list(nodes)), True


# ============================================================================
#                           ASSEMBLY WALKS
# ============================================================================

def create_assembly_walk(
    graph: PangenomeGraph,
    assembly_key: str,
    mode: WalkMode = WalkMode.AUTO,
    direction: DirectionPolicy = DirectionPolicy.EDGE_FLOW,
    start_node: Optional[SignedLike] = None,
) -> Walk:
    """
    Extract one oriented path per connected component of an assembly.

    Args:
        graph: Built pangenome graph
        assembly_key: Bare assembly name or full contig key
        mode: Walk strategy, 'auto' picks per component
        direction: Orientation policy applied to each path
        start_node: Requested first node for 'force_start'; its component
            is also placed first

    Returns:
        Walk with paths ordered largest bp first
    """
    walk = Walk(assembly_key=assembly_key)
    diag = walk.diagnostics
    start = parse_signed_id(start_node, "start node") if start_node is not None else None

    members = graph.nodes_for_assembly(assembly_key)
    if not members:
        diag.add(DiagnosticKind.EMPTY_WALK,
                 f"No nodes carry assembly key '{assembly_key}'", assembly_key)
        return walk

    sub = induced_adjacency(graph.adjacency, members)
    components = connected_components(sub)
    diag.induced_nodes = len(sub)
    diag.induced_edges = count_edges(sub)
    diag.component_count = len(components)
    if len(components) > 1:
        diag.add(DiagnosticKind.DISCONNECTED_COMPONENT,
                 f"Assembly '{assembly_key}' spans {len(components)} disconnected components; "
                 f"one path per component", assembly_key)

    for component in components:
        nodes, used = extract_walk(sub, component, mode)
        if not nodes:
            diag.add(DiagnosticKind.EMPTY_WALK,
                     f"No walk found for component of {len(component)} nodes; skipped",
                     assembly_key, min(component))
            continue

        nodes, honored = orient_path(graph, nodes, direction, start)
        if start is not None and start in component and not honored:
            diag.add(DiagnosticKind.START_NODE_IGNORED,
                     f"Start node {start} is not a path endpoint; orientation kept",
                     assembly_key, start)

        edges, missing = graph.edges_for_path(nodes)
        for a, b in missing:
            diag.add(DiagnosticKind.MISSING_EDGE,
                     f"No edge between consecutive nodes {a} and {b}", assembly_key, a)

        walk.paths.append(WalkPath(
            nodes=nodes,
            edges=edges,
            length_bp=sum(graph.length_of(n) for n in nodes),
            mode=used,
        ))
        logger.debug(f"{assembly_key}: {used} walk over {len(nodes)}/{len(component)} nodes")

    walk.paths.sort(key=lambda p: (-p.length_bp, min(p.nodes).sort_key()))
    if start is not None:
        if start not in members:
            diag.add(DiagnosticKind.START_NODE_IGNORED,
                     f"Start node {start} is not part of assembly '{assembly_key}'",
                     assembly_key, start)
        else:
            walk.paths.sort(key=lambda p: start not in p.nodes)

    logger.info(
        f"Walk for {assembly_key}: {len(walk.paths)} path(s), "
        f"{len(diag.warnings)} warning(s)"
    )
    return walk


def create_assembly_walks(
    graph: PangenomeGraph,
    assembly_keys: Optional[Sequence[str]] = None,
    **kwargs,
) -> Dict[str, Walk]:
    """Walks for the given keys, or for every key in the graph."""
    keys = sorted(assembly_keys) if assembly_keys is not None else graph.assembly_keys()
    return {key: create_assembly_walk(graph, key, **kwargs) for key in keys}


def _sort_key(node):
    key = getattr(node, "sort_key", None)
    return key() if callable(key) else (str(node),)

# PanSpine v0.1.0
# Any usage is subject to this software's license.
