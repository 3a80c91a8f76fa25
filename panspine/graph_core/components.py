#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PanSpine v0.1.0

Connected & Biconnected Component Analyzer — induced adjacency, connected
components, iterative Tarjan biconnected decomposition and the block-cut
tree used to route walks through cyclic regions.

All functions work on plain undirected adjacency mappings
(node -> sequence of neighbors) and never mutate their input.

Author: PanSpine Development Team
License: MIT License - See LICENSE
"""

from collections import deque
from dataclasses import dataclass, field
from typing import (
    Dict, FrozenSet, Hashable, Iterable, Iterator, List, Mapping, Optional,
    Sequence, Set, Tuple,
)
import logging

logger = logging.getLogger(__name__)

Adjacency = Mapping[Hashable, Sequence[Hashable]]


# ============================================================================
#                       INDUCED SUBGRAPHS & COMPONENTS
# ============================================================================

def induced_adjacency(adjacency: Adjacency, allowed: Iterable) -> Dict[Hashable, List]:
    """
    Restrict an adjacency to an allowed node set.

    Args:
        adjacency: Full undirected adjacency
        allowed: Nodes to keep

    Returns:
        New adjacency containing only allowed nodes and edges between them
    """
    allowed = list(allowed)
    allow = set(allowed)
    # adjacency order first, so results do not depend on set iteration order
    order = [node for node in adjacency if node in allow]
    order += sorted((node for node in allow if node not in adjacency), key=_sort_key)
    out: Dict[Hashable, List] = {}
    for node in order:
        out[node] = [nb for nb in adjacency.get(node, ()) if nb in allow]
    return out


def degree_map(adjacency: Adjacency) -> Dict[Hashable, int]:
    """Number of neighbors per node."""
    return {node: len(nbrs or ()) for node, nbrs in adjacency.items()}


def count_edges(adjacency: Adjacency, nodes: Optional[Iterable] = None) -> int:
    """Undirected edge count, optionally restricted to edges leaving `nodes`."""
    keys = adjacency.keys() if nodes is None else nodes
    return sum(len(adjacency.get(node, ())) for node in keys) // 2


def connected_components(adjacency: Adjacency, allowed: Optional[Iterable] = None) -> List[List]:
    """
    Partition the (optionally restricted) node set into connected components.

    Components are returned in discovery order; members of each component
    are listed in BFS order from the component's first node.
    """
    if allowed is None:
        allow = None
        roots = list(adjacency.keys())
    else:
        allowed = list(allowed)
        allow = set(allowed)
        roots = [n for n in adjacency if n in allow]
        # allowed nodes missing from the adjacency are isolated singletons
        roots += [n for n in allowed if n not in adjacency]

    visited: Set = set()
    components: List[List] = []
    for root in roots:
        if root in visited:
            continue
        visited.add(root)
        queue = deque([root])
        component = []
        while queue:
            node = queue.popleft()
            component.append(node)
            for nb in adjacency.get(node, ()):
                if nb in visited or (allow is not None and nb not in allow):
                    continue
                visited.add(nb)
                queue.append(nb)
        components.append(component)
    return components


def bfs_path(
    adjacency: Adjacency,
    start,
    goal,
    allowed: Optional[Set] = None,
) -> Optional[List]:
    """
    Shortest hop path from start to goal, restricted to `allowed` when given.

    Returns:
        Node list including both ends, or None when unreachable
    """
    allow = allowed if allowed is not None else adjacency.keys()
    if start not in allow or goal not in allow:
        return None
    if start == goal:
        return [start]

    prev = {start: None}
    queue = deque([start])
    while queue:
        node = queue.popleft()
        for nb in adjacency.get(node, ()):
            if nb not in allow or nb in prev:
                continue
            prev[nb] = node
            if nb == goal:
                path = [goal]
                cur = node
                while cur is not None:
                    path.append(cur)
                    cur = prev[cur]
                path.reverse()
                return path
            queue.append(nb)
    return None


def bfs_farthest(adjacency: Adjacency, start) -> Tuple[Hashable, Dict]:
    """
    Farthest node (last dequeued) from start, plus the BFS parent map.
    """
    parent = {start: None}
    queue = deque([start])
    last = start
    while queue:
        node = queue.popleft()
        last = node
        for nb in adjacency.get(node, ()):
            if nb not in parent:
                parent[nb] = node
                queue.append(nb)
    return last, parent


# ============================================================================
#                       BICONNECTED DECOMPOSITION
# ============================================================================

@dataclass
class BiconnectedDecomposition:
    """
    Result of a biconnected decomposition.

    Attributes:
        blocks: Member vertex sets, one per biconnected block
        articulation_points: Vertices whose removal disconnects their component
    """
    blocks: List[FrozenSet] = field(default_factory=list)
    articulation_points: FrozenSet = frozenset()

    def block_of(self, vertex) -> int:
        """Index of the first block containing vertex, or -1."""
        for idx, block in enumerate(self.blocks):
            if vertex in block:
                return idx
        return -1

    def blocks_containing(self, vertex) -> List[int]:
        return [idx for idx, block in enumerate(self.blocks) if vertex in block]


def _pop_block(edge_stack: List[Tuple], until: Optional[Tuple]) -> FrozenSet:
    members = set()
    while edge_stack:
        x, y = edge_stack.pop()
        members.add(x)
        members.add(y)
        if until is not None and (x, y) == until:
            break
    return frozenset(members)


def biconnected_components(adjacency: Adjacency) -> BiconnectedDecomposition:
    """
    Tarjan biconnected decomposition with an explicit DFS stack.

    Each DFS frame carries (vertex, parent, neighbor iterator) so that long
    linear chains never hit the interpreter recursion limit. The edge stack
    is local to the call, which keeps the analyzer reentrant.

    Isolated vertices belong to no block. Self-loops are ignored.
    """
    disc: Dict[Hashable, int] = {}
    low: Dict[Hashable, int] = {}
    blocks: List[FrozenSet] = []
    articulation: Set = set()
    clock = 0

    for root in adjacency:
        if root in disc:
            continue
        disc[root] = low[root] = clock
        clock += 1
        edge_stack: List[Tuple] = []
        root_children = 0
        stack: List[Tuple[Hashable, Optional[Hashable], Iterator]] = [
            (root, None, iter(adjacency.get(root, ())))
        ]

        while stack:
            node, parent, neighbors = stack[-1]
            descended = False
            for nb in neighbors:
                if nb == node:
                    continue
                if nb not in disc:
                    # tree edge
                    edge_stack.append((node, nb))
                    disc[nb] = low[nb] = clock
                    clock += 1
                    if parent is None:
                        root_children += 1
                    stack.append((nb, node, iter(adjacency.get(nb, ()))))
                    descended = True
                    break
                if nb != parent and disc[nb] < disc[node]:
                    # back edge; disc check keeps each one pushed once
                    edge_stack.append((node, nb))
                    low[node] = min(low[node], disc[nb])
            if descended:
                continue

            stack.pop()
            if parent is None:
                continue
            low[parent] = min(low[parent], low[node])
            if low[node] >= disc[parent]:
                parent_is_root = stack[-1][1] is None
                if not parent_is_root:
                    articulation.add(parent)
                blocks.append(_pop_block(edge_stack, (parent, node)))

        if root_children > 1:
            articulation.add(root)
        if edge_stack:
            blocks.append(_pop_block(edge_stack, None))

    logger.debug(
        f"Biconnected decomposition: {len(blocks)} blocks, "
        f"{len(articulation)} articulation points"
    )
    return BiconnectedDecomposition(blocks=blocks, articulation_points=frozenset(articulation))


# ============================================================================
#                           BLOCK-CUT TREE
# ============================================================================

@dataclass
class BlockCutTree:
    """
    Bipartite forest of blocks ('B#i') and articulation points ('A#<id>').

    Used only as a routing skeleton between blocks; never mutated after
    construction.
    """
    adjacency: Dict[str, Tuple[str, ...]]
    decomposition: BiconnectedDecomposition
    articulation_labels: Dict[str, Hashable] = field(default_factory=dict)

    @staticmethod
    def block_label(index: int) -> str:
        return f"B#{index}"

    @staticmethod
    def articulation_label(vertex) -> str:
        return f"A#{vertex}"

    @staticmethod
    def block_index(label: str) -> int:
        return int(label[2:])

    def vertex_of(self, label: str):
        """Graph vertex behind an articulation label."""
        return self.articulation_labels[label]

    def route(self, start_block: int, goal_block: int) -> Optional[List[str]]:
        """
        BFS path of labels between two blocks (alternating B, A, B, ...).

        Returns:
            Label list, or None when the blocks lie in different trees
        """
        start = self.block_label(start_block)
        goal = self.block_label(goal_block)
        path = bfs_path(self.adjacency, start, goal)
        return path


def build_block_cut_tree(decomposition: BiconnectedDecomposition) -> BlockCutTree:
    """Connect every block to each articulation point it contains."""
    links: Dict[str, List[str]] = {}
    labels: Dict[str, Hashable] = {}

    for idx, block in enumerate(decomposition.blocks):
        b_label = BlockCutTree.block_label(idx)
        links.setdefault(b_label, [])
        for vertex in sorted(block, key=_sort_key):
            if vertex not in decomposition.articulation_points:
                continue
            a_label = BlockCutTree.articulation_label(vertex)
            labels[a_label] = vertex
            links.setdefault(a_label, [])
            links[b_label].append(a_label)
            links[a_label].append(b_label)

    adjacency = {label: tuple(nbrs) for label, nbrs in links.items()}
    return BlockCutTree(adjacency=adjacency, decomposition=decomposition, articulation_labels=labels)


def _sort_key(vertex):
    key = getattr(vertex, "sort_key", None)
    return key() if callable(key) else (str(vertex),)

# PanSpine v0.1.0
# Any usage is subject to this software's license.
