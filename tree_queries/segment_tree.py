import logging
import operator
from typing import Callable, NamedTuple, Sequence

import numpy as np

from tree_queries.errors import InvalidIndex, InvalidRange

logger = logging.getLogger(__name__)

INT64_MAX = int(np.iinfo(np.int64).max)
INT64_MIN = int(np.iinfo(np.int64).min)


class Operation(NamedTuple):
    """An associative combine function and its identity element"""
    name: str
    combine: Callable[[int, int], int]
    identity: int

    @staticmethod
    def from_name(name: str) -> "Operation":
        try:
            return OPERATIONS[name.lower()]
        except KeyError:
            raise ValueError(f"unknown operation {name!r}, expected one of {sorted(OPERATIONS)}") from None


SUM = Operation("sum", operator.add, 0)
MIN = Operation("min", min, INT64_MAX)
MAX = Operation("max", max, INT64_MIN)

OPERATIONS = {op.name: op for op in (SUM, MIN, MAX)}


def to_int64(value: int) -> int:
    """Python int of value, OverflowError if it doesn't fit in an int64 slot"""
    value = operator.index(value)
    if not INT64_MIN <= value <= INT64_MAX:
        raise OverflowError(f"{value} does not fit in int64")
    return value


class SegmentTree:
    """
    Segment tree over a fixed length sequence of int64 values.
    The tree lives in a flat array of size 4n, node i has children 2i+1 and 2i+2,
    and covers the inclusive range [l, r] of the sequence.
    Each node stores operation.combine(left child, right child), a leaf stores the value itself.
    build: O(n), query: O(log n), update: O(log n)
    """

    def __init__(self, values: Sequence[int], operation: Operation = SUM):
        data = np.asarray(values, dtype=np.int64)
        if data.ndim != 1 or len(data) == 0:
            raise ValueError("segment tree needs a non-empty 1-d sequence of values")
        self.n = len(data)
        self.operation = operation
        # bind once, these are used on every step of the recursion
        self._combine = operation.combine
        self._identity = operation.identity
        self.tree = np.full(4 * self.n, operation.identity, dtype=np.int64)
        self._build(data, 0, 0, self.n - 1)
        logger.debug("built %s segment tree over %d values", operation.name, self.n)

    def __len__(self) -> int:
        return self.n

    def __repr__(self):
        return f"{self.__class__.__name__}({self.values().tolist()}, operation={self.operation.name})"

    def __getitem__(self, index: int) -> int:
        index = self._check_index(index)
        return self._leaf(0, 0, self.n - 1, index)

    def _mid(self, l: int, r: int) -> int:
        return l + (r - l) // 2

    def _build(self, data: np.ndarray, i: int, l: int, r: int) -> int:
        # leaves first, then every parent is combined from its two children
        if l == r:
            self.tree[i] = data[l]
        else:
            mid = self._mid(l, r)
            self.tree[i] = self._combine(int(self._build(data, i * 2 + 1, l, mid)),
                                         int(self._build(data, i * 2 + 2, mid + 1, r)))
        return self.tree[i]

    def _query(self, i: int, l: int, r: int, ql: int, qr: int) -> int:
        # case 1: node range lies completely inside the query range
        if ql <= l and r <= qr:
            return int(self.tree[i])
        # case 2: node range is outside the query range, contributes nothing
        if r < ql or qr < l:
            return self._identity
        # case 3: partial overlap, split into the two halves
        mid = self._mid(l, r)
        return self._combine(self._query(i * 2 + 1, l, mid, ql, qr),
                             self._query(i * 2 + 2, mid + 1, r, ql, qr))

    def _update(self, i: int, l: int, r: int, index: int, value: int, writes: list) -> int:
        # only collects the new aggregates on the leaf-to-root path, nothing is stored yet
        if l == r:
            writes.append((i, value))
            return value
        mid = self._mid(l, r)
        if index <= mid:
            left = self._update(i * 2 + 1, l, mid, index, value, writes)
            right = int(self.tree[i * 2 + 2])
        else:
            left = int(self.tree[i * 2 + 1])
            right = self._update(i * 2 + 2, mid + 1, r, index, value, writes)
        combined = self._combine(left, right)
        writes.append((i, combined))
        return combined

    def _leaf(self, i: int, l: int, r: int, index: int) -> int:
        while l != r:
            mid = self._mid(l, r)
            if index <= mid:
                i, r = i * 2 + 1, mid
            else:
                i, l = i * 2 + 2, mid + 1
        return int(self.tree[i])

    def _check_index(self, index: int) -> int:
        try:
            index = operator.index(index)
        except TypeError:
            raise InvalidIndex(f"index {index!r} is not an integer") from None
        if not 0 <= index < self.n:
            raise InvalidIndex(f"index {index} out of range [0, {self.n})")
        return index

    def query(self, lo: int, hi: int) -> int:
        """Combine of the values in the inclusive range [lo, hi]"""
        try:
            lo, hi = operator.index(lo), operator.index(hi)
        except TypeError:
            raise InvalidRange(f"query range [{lo!r}, {hi!r}] is not a pair of integers") from None
        if lo > hi or lo < 0 or hi >= self.n:
            raise InvalidRange(f"query range [{lo}, {hi}] is not inside [0, {self.n})")
        return self._query(0, 0, self.n - 1, lo, hi)

    def update(self, index: int, value: int):
        """
        Set the value at index and recompute every ancestor of its leaf.
        The whole path is computed before anything is written, so an aggregate
        that doesn't fit in int64 raises OverflowError and leaves the tree as it was.
        """
        index = self._check_index(index)
        writes = []
        self._update(0, 0, self.n - 1, index, to_int64(value), writes)
        for _, aggregate in writes:
            to_int64(aggregate)
        for i, aggregate in writes:
            self.tree[i] = aggregate

    def total(self) -> int:
        return int(self.tree[0])

    def values(self) -> np.ndarray:
        return np.array([self._leaf(0, 0, self.n - 1, k) for k in range(self.n)], dtype=np.int64)


if __name__ == '__main__':

    args = {
        "values": [3, 1, 4, 2, 5],
        "operation": "min",
        "queries": [(0, 4), (1, 3), (2, 2)],
    }

    logging.basicConfig(level=logging.DEBUG)

    tree = SegmentTree(args["values"], Operation.from_name(args["operation"]))
    for lo, hi in args["queries"]:
        print(f"{args['operation']}[{lo}, {hi}] = {tree.query(lo, hi)}")
    tree.update(1, 7)
    print(f"after update(1, 7): {tree}")
