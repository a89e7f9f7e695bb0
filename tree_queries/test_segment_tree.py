from functools import reduce

import numpy as np
import pytest

from tree_queries.errors import InvalidIndex, InvalidRange
from tree_queries.segment_tree import INT64_MAX, INT64_MIN, MAX, MIN, SUM, Operation, SegmentTree

OPS = [SUM, MIN, MAX]


def naive(op: Operation, values, lo: int, hi: int) -> int:
    return reduce(op.combine, (int(v) for v in values[lo:hi + 1]), op.identity)


def test_build():
    tree = SegmentTree([1, 2, 3, 4, 5])
    # root covers [0, 4], left child [0, 2], right child [3, 4]
    assert tree.tree[0] == 15, f"Root value incorrect, expected 15 but got {tree.tree[0]}"
    assert tree.tree[1] == 6, f"Left child of root incorrect, expected 6 but got {tree.tree[1]}"
    assert tree.tree[2] == 9, f"Right child of root incorrect, expected 9 but got {tree.tree[2]}"
    assert len(tree.tree) == 20


def test_query():
    tree = SegmentTree([1, 2, 3, 4, 5])
    result = tree.query(0, 4)
    assert result == 15, f"Full range sum incorrect, expected 15 but got {result}"
    result = tree.query(1, 3)
    assert result == 9, f"Partial range sum incorrect, expected 9 but got {result}"
    result = tree.query(2, 2)
    assert result == 3, f"Single element query incorrect, expected 3 but got {result}"

    tree = SegmentTree([3, 1, 4, 2, 5], MIN)
    assert tree.query(0, 4) == 1
    assert tree.query(2, 4) == 2
    tree = SegmentTree([3, 1, 4, 2, 5], MAX)
    assert tree.query(0, 3) == 4
    assert tree.query(0, 1) == 3


def test_query_matches_naive_fold():
    rng = np.random.default_rng(1993)
    for n in [1, 2, 3, 7, 64, 100, 1000, 10000]:
        values = rng.integers(-10**9, 10**9, size=n)
        for op in OPS:
            tree = SegmentTree(values, op)
            for _ in range(50):
                lo, hi = sorted(rng.integers(0, n, size=2))
                expected = naive(op, values, lo, hi)
                result = tree.query(lo, hi)
                assert result == expected, f"{op.name}[{lo}, {hi}] expected {expected} but got {result}"


def test_update_visibility():
    rng = np.random.default_rng(7)
    values = rng.integers(-1000, 1000, size=37)
    for op in OPS:
        tree = SegmentTree(values, op)
        current = values.copy()
        for _ in range(100):
            index = int(rng.integers(0, len(values)))
            value = int(rng.integers(-1000, 1000))
            tree.update(index, value)
            current[index] = value
            assert tree.query(index, index) == value
            assert tree[index] == value
            lo, hi = sorted(rng.integers(0, len(values), size=2))
            assert tree.query(lo, hi) == naive(op, current, lo, hi)
        assert tree.values().tolist() == current.tolist()


def test_update_untouched_ranges():
    values = list(range(10))
    tree = SegmentTree(values)
    before_left, before_right = tree.query(0, 4), tree.query(6, 9)
    tree.update(5, 500)
    assert tree.query(0, 4) == before_left
    assert tree.query(6, 9) == before_right
    assert tree.query(4, 6) == 4 + 500 + 6
    assert tree.total() == sum(values) - 5 + 500


def test_update_idempotent():
    rng = np.random.default_rng(11)
    values = rng.integers(-50, 50, size=20)
    for op in OPS:
        once, twice = SegmentTree(values, op), SegmentTree(values, op)
        once.update(13, 42)
        twice.update(13, 42)
        twice.update(13, 42)
        for lo in range(20):
            for hi in range(lo, 20):
                assert once.query(lo, hi) == twice.query(lo, hi)
        assert np.array_equal(once.tree, twice.tree)


def test_single_value():
    for op in OPS:
        tree = SegmentTree([-7], op)
        assert tree.query(0, 0) == -7, f"{op.name} over one value should return it"
        tree.update(0, 3)
        assert tree.query(0, 0) == 3


def test_sentinels_are_not_answers():
    assert SegmentTree([INT64_MAX, 5], MIN).query(0, 1) == 5
    assert SegmentTree([INT64_MIN, -5], MAX).query(0, 1) == -5
    assert SegmentTree([INT64_MAX], MIN).query(0, 0) == INT64_MAX


def test_sum_uses_64_bits():
    big = 2 * 10**9
    tree = SegmentTree([big] * 1000)
    assert tree.query(0, 999) == big * 1000


def test_invalid_range():
    tree = SegmentTree([1, 2, 3])
    before = tree.tree.copy()
    for lo, hi in [(2, 1), (-1, 1), (0, 3), (3, 3)]:
        with pytest.raises(InvalidRange):
            tree.query(lo, hi)
    assert np.array_equal(tree.tree, before)
    # still an IndexError for callers that only know the builtins
    with pytest.raises(IndexError):
        tree.query(0, 5)


def test_invalid_index():
    tree = SegmentTree([1, 2, 3], MAX)
    before = tree.tree.copy()
    for index in [-1, 3, 100]:
        with pytest.raises(InvalidIndex):
            tree.update(index, 9)
        with pytest.raises(InvalidIndex):
            tree[index]
    assert np.array_equal(tree.tree, before)


def test_empty_rejected():
    with pytest.raises(ValueError):
        SegmentTree([])


def test_operation_from_name():
    assert Operation.from_name("SUM") is SUM
    assert Operation.from_name("min") is MIN
    assert Operation.from_name("max") is MAX
    with pytest.raises(ValueError):
        Operation.from_name("xor")


def test_store_copies_input():
    values = np.array([1, 2, 3], dtype=np.int64)
    tree = SegmentTree(values)
    values[0] = 100
    assert tree.query(0, 2) == 6


def test_leaf_reads():
    values = [1, 2, 3, 4, 5]
    tree = SegmentTree(values)
    reads = [tree[k] for k in range(len(values))]
    assert reads == values, f"leaf reads expected {values} but got {reads}"
    tree = SegmentTree([9, -3, 7], MIN)
    assert [tree[k] for k in range(3)] == [9, -3, 7]
    assert tree[np.int64(2)] == 7


def test_update_overflow_leaves_tree_unchanged():
    tree = SegmentTree([INT64_MAX - 10, 0])
    before = tree.tree.copy()
    with pytest.raises(OverflowError):
        tree.update(1, 100)
    assert np.array_equal(tree.tree, before), "a failed update must not touch the tree"
    assert tree[1] == 0
    assert tree.total() == INT64_MAX - 10
    # a value that fits still goes through afterwards
    tree.update(1, 10)
    assert tree.total() == INT64_MAX


def test_update_value_outside_int64():
    for op in OPS:
        tree = SegmentTree([1, 2, 3], op)
        before = tree.tree.copy()
        with pytest.raises(OverflowError):
            tree.update(0, INT64_MAX + 1)
        assert np.array_equal(tree.tree, before)


def test_non_integer_bounds():
    tree = SegmentTree([1, 2, 3])
    with pytest.raises(InvalidIndex):
        tree.update(1.5, 4)
    with pytest.raises(InvalidIndex):
        tree[1.0]
    with pytest.raises(InvalidRange):
        tree.query(0.5, 2)
    with pytest.raises(InvalidRange):
        tree.query(0, "2")
    assert tree.values().tolist() == [1, 2, 3]


if __name__ == '__main__':
    test_build()
    test_query()
    test_query_matches_naive_fold()
    test_update_visibility()
    test_update_untouched_ranges()
    test_update_idempotent()
    test_single_value()
    test_sentinels_are_not_answers()
    test_sum_uses_64_bits()
    test_invalid_range()
    test_invalid_index()
    test_empty_rejected()
    test_operation_from_name()
    test_store_copies_input()
    test_leaf_reads()
    test_update_overflow_leaves_tree_unchanged()
    test_update_value_outside_int64()
    test_non_integer_bounds()
    print("segment tree tests passed")
