import logging
import operator
from typing import Iterable, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from tree_queries.errors import InvalidIndex, MalformedTree

logger = logging.getLogger(__name__)


class Tree:
    """
    Rooted tree on nodes 1..n given as n-1 undirected edges.
    Adjacency keeps the input order so every traversal is deterministic.
    """

    def __init__(self, n: int, edges: Iterable[Tuple[int, int]], values: Optional[Sequence[int]] = None,
                 root: int = 1):
        if n < 1:
            raise MalformedTree("a tree needs at least one node")
        self.n = n
        self.adj = [[] for _ in range(n + 1)]
        n_edges = 0
        for u, v in edges:
            if not (1 <= u <= n and 1 <= v <= n):
                raise MalformedTree(f"edge ({u}, {v}) has an endpoint outside 1..{n}")
            self.adj[u].append(v)
            self.adj[v].append(u)
            n_edges += 1
        if n_edges != n - 1:
            raise MalformedTree(f"a tree on {n} nodes has {n - 1} edges, got {n_edges}")
        self.root = self.check_node(root)

        # slot 0 is unused so node ids index directly
        self.values = np.zeros(n + 1, dtype=np.int64)
        if values is not None:
            if len(values) != n:
                raise MalformedTree(f"expected {n} node values, got {len(values)}")
            self.values[1:] = values

    def check_node(self, node: int) -> int:
        try:
            node = operator.index(node)
        except TypeError:
            raise InvalidIndex(f"node {node!r} is not an integer id") from None
        if not 1 <= node <= self.n:
            raise InvalidIndex(f"node {node} is not in 1..{self.n}")
        return node


class Flattening(NamedTuple):
    entry: np.ndarray   # entry[v], position of v in visit order
    exit: np.ndarray    # exit[v], entry index of the last node of v's subtree
    order: np.ndarray   # order[i], node with entry index i
    values: np.ndarray  # values[i], value of order[i]


class EulerTour(NamedTuple):
    sequence: np.ndarray  # 2n-1 nodes, each node again after every child returns
    first: np.ndarray     # first[v], first occurrence of v in the sequence
    height: np.ndarray    # height[v], depth below the root (root is 0)


def walk(tree: Tree, root: int):
    """
    Iterative dfs yielding ("enter", node, parent) and ("leave", node, parent) events.
    A node is either unvisited or fully processed, once it is left it's never entered again.
    """
    visited = np.zeros(tree.n + 1, dtype=bool)
    visited[root] = True
    yield "enter", root, 0
    # stack of (node, parent, iterator over remaining neighbours)
    stack = [(root, 0, iter(tree.adj[root]))]
    while stack:
        node, parent, neighbours = stack[-1]
        for child in neighbours:
            if child == parent or visited[child]:
                continue
            visited[child] = True
            yield "enter", child, node
            stack.append((child, node, iter(tree.adj[child])))
            break
        else:
            stack.pop()
            yield "leave", node, parent

    missing = tree.n - int(visited[1:].sum())
    if missing:
        raise MalformedTree(f"{missing} node(s) are not reachable from root {root}")


def flatten(tree: Tree, root: Optional[int] = None) -> Flattening:
    """
    Single-entry dfs: every node gets one index, and the subtree of v is
    exactly the contiguous range [entry[v], exit[v]].
    """
    root = tree.root if root is None else tree.check_node(root)
    entry = np.zeros(tree.n + 1, dtype=np.int64)
    exit_ = np.zeros(tree.n + 1, dtype=np.int64)
    order = np.zeros(tree.n, dtype=np.int64)
    timer = 0
    for event, node, _ in walk(tree, root):
        if event == "enter":
            entry[node] = timer
            order[timer] = node
            timer += 1
        else:
            # unlike the euler tour, the node isn't recorded again on the way out
            exit_[node] = timer - 1
    logger.debug("flattened %d nodes from root %d", tree.n, root)
    return Flattening(entry, exit_, order, tree.values[order].copy())


def euler_tour(tree: Tree, root: Optional[int] = None) -> EulerTour:
    """
    Double-entry tour: a node is recorded when it's reached and again each
    time one of its children returns, so the tour has 2n-1 entries.
    """
    root = tree.root if root is None else tree.check_node(root)
    sequence = []
    first = np.full(tree.n + 1, -1, dtype=np.int64)
    height = np.zeros(tree.n + 1, dtype=np.int64)
    for event, node, parent in walk(tree, root):
        if event == "enter":
            height[node] = height[parent] + 1 if parent else 0
            first[node] = len(sequence)
            sequence.append(node)
        elif parent:
            sequence.append(parent)
    logger.debug("euler tour of %d nodes has %d entries", tree.n, len(sequence))
    return EulerTour(np.array(sequence, dtype=np.int64), first, height)
