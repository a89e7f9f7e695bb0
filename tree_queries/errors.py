class TreeQueryError(Exception):
    pass


class InvalidRange(TreeQueryError, IndexError):
    """Query bounds outside [0, n) or lo > hi."""


class InvalidIndex(TreeQueryError, IndexError):
    """Point index outside [0, n), or a node id the tree doesn't have."""


class MalformedTree(TreeQueryError, ValueError):
    """Edges don't form a connected acyclic graph on nodes 1..n."""
