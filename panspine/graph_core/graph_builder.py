#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Graph Builder — ingests raw node / edge / sequence records into an
immutable pangenome graph: node table, directed edge table with per-edge
sign metadata, undirected adjacency view, and assembly membership index.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple
import logging
import math

from .components import connected_components, count_edges
from .errors import MalformedIdentifier, MalformedPayload
from .signed_id import (
    Port, SignedId, SignedLike, edge_key_of, parse_signed_id, port_for_endpoint,
)

logger = logging.getLogger(__name__)


# ============================================================================
#                           GRAPH RECORDS
# ============================================================================

@dataclass(frozen=True)
class PangenomeNode:
    """
    A signed genomic segment.

    Attributes:
        id: Signed identity
        length_bp: Segment length; explicit length, else sequence length, else 0
        assemblies: Assembly keys this segment belongs to (bare and full contig keys)
        sequence: Bases, when the payload carries them
    """
    id: SignedId
    length_bp: int = 0
    assemblies: FrozenSet[str] = frozenset()
    sequence: Optional[str] = None


@dataclass(frozen=True)
class EdgeVariant:
    """One occurrence of an ordered signed pair in the input edge list."""
    raw_index: int
    from_ref: SignedId  # endpoint as written in the record
    to_ref: SignedId
    from_port: Port
    to_port: Port


@dataclass
class PangenomeEdge:
    """
    Directed edge keyed by its ordered (from, to) pair.

    Repeated occurrences of the same pair are recorded as variants rather
    than collapsed.
    """
    key: str
    source: SignedId
    target: SignedId
    variants: List[EdgeVariant] = field(default_factory=list)

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target


class PangenomeGraph:
    """
    Immutable pangenome variation graph.

    Built once per payload by build_graph(); all traversal algorithms use the
    undirected `adjacency` view, while `edges` and `directed_out` keep the
    original direction for downstream interpretation.
    """

    def __init__(
        self,
        nodes: Dict[SignedId, PangenomeNode],
        edges: Dict[str, PangenomeEdge],
        adjacency: Dict[SignedId, Tuple[SignedId, ...]],
        directed_out: Dict[SignedId, FrozenSet[SignedId]],
        assembly_index: Dict[str, FrozenSet[SignedId]],
        locus: Any = None,
    ):
        self.nodes = nodes
        self.edges = edges
        self.adjacency = adjacency
        self.directed_out = directed_out
        self.assembly_index = assembly_index
        self.locus = locus

    def __repr__(self) -> str:
        return (
            f"PangenomeGraph(nodes={len(self.nodes)}, edges={len(self.edges)}, "
            f"assemblies={len(self.assembly_index)})"
        )

    def has_node(self, node_id: SignedLike) -> bool:
        return parse_signed_id(node_id) in self.nodes

    def length_of(self, node_id: SignedId) -> int:
        """Length in bp, 0 for unknown nodes."""
        node = self.nodes.get(node_id)
        return node.length_bp if node else 0

    def neighbors(self, node_id: SignedId) -> Tuple[SignedId, ...]:
        return self.adjacency.get(node_id, ())

    def has_directed_edge(self, a: SignedId, b: SignedId) -> bool:
        return b in self.directed_out.get(a, ())

    def has_edge_between(self, a: SignedId, b: SignedId) -> bool:
        """True when a->b or b->a exists."""
        return self.has_directed_edge(a, b) or self.has_directed_edge(b, a)

    def edge_key_between(self, a: SignedId, b: SignedId) -> Optional[str]:
        """Key of the edge a->b, else b->a, else None."""
        forward = edge_key_of(a, b)
        if forward in self.edges:
            return forward
        reverse = edge_key_of(b, a)
        if reverse in self.edges:
            return reverse
        return None

    def edges_for_path(self, nodes: List[SignedId]) -> Tuple[List[str], List[Tuple[SignedId, SignedId]]]:
        """
        Edge keys aligned to consecutive node pairs.

        Returns:
            (edge keys found, consecutive pairs with no edge in either direction)
        """
        keys: List[str] = []
        missing: List[Tuple[SignedId, SignedId]] = []
        for a, b in zip(nodes, nodes[1:]):
            key = self.edge_key_between(a, b)
            if key is None:
                missing.append((a, b))
            else:
                keys.append(key)
        return keys, missing

    def assembly_keys(self) -> List[str]:
        return sorted(self.assembly_index)

    def nodes_for_assembly(self, assembly_key: str) -> FrozenSet[SignedId]:
        return self.assembly_index.get(assembly_key, frozenset())

    def statistics(self) -> Dict[str, Any]:
        """Summary counts for reporting."""
        n_nodes = len(self.nodes)
        n_edges = count_edges(self.adjacency)
        components = connected_components(self.adjacency)
        total_degree = sum(len(nbrs) for nbrs in self.adjacency.values())
        return {
            'node_count': n_nodes,
            'edge_count': len(self.edges),
            'variant_count': sum(len(e.variants) for e in self.edges.values()),
            'undirected_edge_count': n_edges,
            'self_loop_count': sum(1 for e in self.edges.values() if e.is_self_loop),
            'component_count': len(components),
            'average_degree': total_degree / n_nodes if n_nodes else 0.0,
            'is_cyclic': n_edges > n_nodes - len(components),
            'assembly_count': len(self.assembly_index),
            'total_length_bp': sum(n.length_bp for n in self.nodes.values()),
        }


# ============================================================================
#                               BUILDERS
# ============================================================================

def _explicit_length(record: Mapping, node_id: SignedId) -> Optional[int]:
    raw = record.get('length')
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if not math.isfinite(raw):
        return None
    if raw < 0:
        logger.warning(f"Node {node_id}: negative length {raw} ignored")
        return None
    return int(raw)


def _assembly_keys(record: Mapping, delim: str) -> FrozenSet[str]:
    keys = set()
    for entry in record.get('assembly') or []:
        if not isinstance(entry, Mapping):
            continue
        name = entry.get('assembly_name')
        if name:
            keys.add(str(name))
        parts = (name, entry.get('haplotype'), entry.get('sequence_id'))
        if all(p is not None and p != "" for p in parts):
            keys.add(delim.join(str(p) for p in parts))
    return frozenset(keys)


def build_graph(
    node_records: Mapping[str, Any],
    edge_records: Iterable[Mapping[str, Any]],
    sequence_records: Optional[Mapping[str, str]] = None,
    assembly_key_delim: str = "#",
    locus: Any = None,
) -> PangenomeGraph:
    """
    Build a PangenomeGraph from raw records.

    Args:
        node_records: {'<id><sign>': {length?, assembly?: [{assembly_name, haplotype, sequence_id}]}}
        edge_records: [{starting_node, ending_node}, ...]
        sequence_records: {'<id><sign>': bases}, used as a length fallback
        assembly_key_delim: Delimiter for full contig keys (name#haplotype#sequence_id)
        locus: Optional locus metadata carried through unchanged

    Returns:
        PangenomeGraph

    Raises:
        MalformedIdentifier: if any node key or edge endpoint is not a signed id
    """
    sequences = sequence_records or {}

    nodes: Dict[SignedId, PangenomeNode] = {}
    by_bare: Dict[str, List[SignedId]] = defaultdict(list)
    index: Dict[str, set] = defaultdict(set)

    for raw_id, record in node_records.items():
        node_id = parse_signed_id(raw_id, "node")
        record = record if isinstance(record, Mapping) else {}

        seq = sequences.get(raw_id)
        seq = seq if isinstance(seq, str) else None
        length = _explicit_length(record, node_id)
        if length is None:
            length = len(seq) if seq is not None else 0

        assemblies = _assembly_keys(record, assembly_key_delim)
        nodes[node_id] = PangenomeNode(
            id=node_id, length_bp=length, assemblies=assemblies, sequence=seq
        )
        by_bare[node_id.bare].append(node_id)
        for key in assemblies:
            index[key].add(node_id)

    def resolve(ref: SignedId) -> Optional[SignedId]:
        if ref in nodes:
            return ref
        candidates = by_bare.get(ref.bare)
        return min(candidates) if candidates else None

    edges: Dict[str, PangenomeEdge] = {}
    neighbor_sets: Dict[SignedId, set] = {node_id: set() for node_id in nodes}
    out_sets: Dict[SignedId, set] = {node_id: set() for node_id in nodes}
    skipped = 0

    for raw_index, record in enumerate(edge_records):
        if not isinstance(record, Mapping):
            raise MalformedIdentifier(record, "edge record")
        from_ref = parse_signed_id(record.get('starting_node'), "edge endpoint")
        to_ref = parse_signed_id(record.get('ending_node'), "edge endpoint")

        source = resolve(from_ref)
        target = resolve(to_ref)
        if source is None or target is None:
            skipped += 1
            logger.warning(
                f"Skipping edge[{raw_index}] due to missing endpoint(s): {from_ref} or {to_ref}"
            )
            continue

        key = edge_key_of(source, target)
        edge = edges.get(key)
        if edge is None:
            edge = PangenomeEdge(key=key, source=source, target=target)
            edges[key] = edge
        edge.variants.append(EdgeVariant(
            raw_index=raw_index,
            from_ref=from_ref,
            to_ref=to_ref,
            from_port=port_for_endpoint(from_ref, source),
            to_port=port_for_endpoint(to_ref, target),
        ))

        out_sets[source].add(target)
        if source != target:
            neighbor_sets[source].add(target)
            neighbor_sets[target].add(source)

    adjacency = {nid: tuple(sorted(nbrs)) for nid, nbrs in neighbor_sets.items()}
    directed_out = {nid: frozenset(outs) for nid, outs in out_sets.items()}
    assembly_index = {key: frozenset(members) for key, members in index.items()}

    graph = PangenomeGraph(
        nodes=nodes,
        edges=edges,
        adjacency=adjacency,
        directed_out=directed_out,
        assembly_index=assembly_index,
        locus=locus,
    )
    logger.info(
        f"Built graph: {len(nodes)} nodes, {len(edges)} edges "
        f"({skipped} skipped), {len(assembly_index)} assembly keys"
    )
    return graph


def build_graph_from_payload(payload: Mapping[str, Any], assembly_key_delim: str = "#") -> PangenomeGraph:
    """
    Build a graph from a loader payload {node, edge, sequence[, locus]}.

    Raises:
        MalformedPayload: if the payload or its maps have the wrong shape
        MalformedIdentifier: if any identifier is malformed
    """
    if not isinstance(payload, Mapping):
        raise MalformedPayload(f"Payload must be a mapping, got {type(payload).__name__}")

    node_records = payload.get('node') or {}
    edge_records = payload.get('edge') or []
    sequence_records = payload.get('sequence') or {}

    if not isinstance(node_records, Mapping):
        raise MalformedPayload("Payload 'node' must be a mapping of signed id -> record")
    if not isinstance(edge_records, list):
        raise MalformedPayload("Payload 'edge' must be a list of {starting_node, ending_node}")
    if not isinstance(sequence_records, Mapping):
        raise MalformedPayload("Payload 'sequence' must be a mapping of signed id -> bases")

    return build_graph(
        node_records,
        edge_records,
        sequence_records,
        assembly_key_delim=assembly_key_delim,
        locus=payload.get('locus'),
    )

# PanSpine v0.1.0
# Any usage is subject to this software's license.
