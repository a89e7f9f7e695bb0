import heapq
import logging

import numpy as np

from tree_queries.flatten import Tree, flatten, walk
from tree_queries.segment_tree import SUM, Operation, SegmentTree, to_int64

logger = logging.getLogger(__name__)


class SubtreeQueries:
    """
    Subtree aggregates on a tree with point updates.
    The tree is flattened once so the subtree of v is the range [entry[v], exit[v]]
    of the visit order, then every call becomes a segment tree call on that range.
    """

    def __init__(self, tree: Tree, operation: Operation = SUM):
        self.tree = tree
        self.flat = flatten(tree)
        self.store = SegmentTree(self.flat.values, operation)

    def update_node(self, node: int, value: int):
        node = self.tree.check_node(node)
        self.store.update(int(self.flat.entry[node]), value)

    def subtree_aggregate(self, node: int) -> int:
        node = self.tree.check_node(node)
        return self.store.query(int(self.flat.entry[node]), int(self.flat.exit[node]))

    def subtree_size(self, node: int) -> int:
        node = self.tree.check_node(node)
        return int(self.flat.exit[node] - self.flat.entry[node] + 1)


class DeferredSubtreeSums:
    """
    Subtree sums kept directly on the nodes, with writes buffered until the next read.

    update_node only records the new value (the last write to a node wins).
    flush applies the whole buffer in one pass: each written node carries new - old,
    carries are pushed towards the root deepest node first and merged where two
    ancestor chains meet, so no ancestor is visited or counted twice.
    A sum that doesn't fit in int64 raises OverflowError before any node is changed,
    the buffered writes stay pending until the offending node is written again.
    """

    def __init__(self, tree: Tree):
        self.tree = tree
        self.parent = np.zeros(tree.n + 1, dtype=np.int64)
        self.depth = np.zeros(tree.n + 1, dtype=np.int64)
        self.own = tree.values.copy()
        self.sums = tree.values.copy()
        self._pending = {}
        for event, node, parent in walk(tree, tree.root):
            if event == "enter":
                self.parent[node] = parent
                self.depth[node] = self.depth[parent] + 1 if parent else 0
            elif parent:
                # children are closed before their parent, so sums[node] is final here
                self.sums[parent] = to_int64(int(self.sums[parent]) + int(self.sums[node]))

    @property
    def pending(self) -> int:
        """Number of nodes with a buffered write"""
        return len(self._pending)

    def update_node(self, node: int, value: int):
        node = self.tree.check_node(node)
        self._pending[node] = to_int64(value)

    def flush(self):
        if not self._pending:
            return
        carry = {}
        heap = []
        for node, value in self._pending.items():
            carry[node] = value - int(self.own[node])
            heapq.heappush(heap, (-int(self.depth[node]), node))

        sums = {}
        while heap:
            _, node = heapq.heappop(heap)
            diff = carry.pop(node)
            sums[node] = to_int64(int(self.sums[node]) + diff)
            parent = int(self.parent[node])
            if parent == 0:
                continue
            if parent in carry:
                carry[parent] += diff
            else:
                carry[parent] = diff
                heapq.heappush(heap, (-int(self.depth[parent]), parent))

        # every new sum fits, now it's safe to write
        for node, value in self._pending.items():
            self.own[node] = value
        for node, value in sums.items():
            self.sums[node] = value
        logger.debug("flushed %d pending updates touching %d nodes", len(self._pending), len(sums))
        self._pending.clear()

    def subtree_aggregate(self, node: int) -> int:
        node = self.tree.check_node(node)
        self.flush()
        return int(self.sums[node])


if __name__ == '__main__':

    args = {
        "n": 5,
        "edges": [(1, 2), (1, 3), (2, 4), (2, 5)],
        "values": [10, 20, 30, 40, 50],
        # (1, node, value) sets a value, (2, node) asks for the subtree sum
        "queries": [(2, 2), (1, 4, 100), (2, 1), (2, 3)],
    }

    logging.basicConfig(level=logging.DEBUG)

    tree = Tree(args["n"], args["edges"], args["values"])
    eager = SubtreeQueries(tree)
    deferred = DeferredSubtreeSums(tree)
    for query_type, *params in args["queries"]:
        if query_type == 1:
            eager.update_node(*params)
            deferred.update_node(*params)
        else:
            print(f"subtree({params[0]}) = {eager.subtree_aggregate(*params)} "
                  f"(deferred: {deferred.subtree_aggregate(*params)})")
