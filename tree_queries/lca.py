import logging

from tree_queries.flatten import Tree, euler_tour
from tree_queries.segment_tree import Operation, SegmentTree

logger = logging.getLogger(__name__)


class EulerTourLCA:
    """
    Lowest common ancestor through range minimum on the euler tour.
    Between the first occurrences of u and v the tour passes through lca(u, v)
    and never climbs above it, so the shallowest node in that range is the answer.
    """

    def __init__(self, tree: Tree):
        self.tree = tree
        self.tour = euler_tour(tree)
        height = self.tour.height

        def shallower(a: int, b: int) -> int:
            # -1 is the identity, it only shows up for ranges outside the query
            if a == -1:
                return b
            if b == -1:
                return a
            return a if height[a] <= height[b] else b

        self.store = SegmentTree(self.tour.sequence, Operation("shallowest", shallower, -1))

    def lca(self, u: int, v: int) -> int:
        u, v = self.tree.check_node(u), self.tree.check_node(v)
        lo, hi = sorted((int(self.tour.first[u]), int(self.tour.first[v])))
        return self.store.query(lo, hi)

    def depth(self, node: int) -> int:
        node = self.tree.check_node(node)
        return int(self.tour.height[node])

    def distance(self, u: int, v: int) -> int:
        """Number of edges on the path between u and v"""
        return self.depth(u) + self.depth(v) - 2 * self.depth(self.lca(u, v))


if __name__ == '__main__':

    args = {
        "n": 5,
        "edges": [(1, 2), (1, 3), (2, 4), (2, 5)],
        "pairs": [(4, 5), (4, 3), (2, 4), (1, 1)],
    }

    logging.basicConfig(level=logging.DEBUG)

    lca = EulerTourLCA(Tree(args["n"], args["edges"]))
    for u, v in args["pairs"]:
        print(f"lca({u}, {v}) = {lca.lca(u, v)}, distance = {lca.distance(u, v)}")
