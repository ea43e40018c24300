"""Node types of a fitted regression tree.

A tree is a tagged variant: every node is either a :class:`LeafNode` or an
:class:`InternalNode` that owns exactly two children.  Nodes are frozen; the
pruner builds new nodes instead of editing existing ones.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class SplitRule:
    """Binary partition of a node's rows.

    For ``kind="numeric"`` rows with ``x < threshold`` go left and
    ``x >= threshold`` go right.  For ``kind="categorical"`` the threshold is
    a ``frozenset`` and rows whose category is in it go left; categories never
    seen during fitting therefore go right.
    """

    feature_index: int
    kind: str
    threshold: Any

    def goes_left(self, value) -> bool:
        if self.kind == "numeric":
            return float(value) < self.threshold
        return value in self.threshold

    def left_mask(self, values: np.ndarray) -> np.ndarray:
        if self.kind == "numeric":
            return np.asarray(values, dtype=float) < self.threshold
        return np.fromiter((v in self.threshold for v in values), dtype=bool, count=len(values))

    def describe(self, name: str, left: bool = True) -> str:
        if self.kind == "numeric":
            op = "<" if left else ">="
            return f"{name} {op} {self.threshold:.6g}"
        S = "{" + ", ".join(sorted(map(str, self.threshold))) + "}"
        return f"{name} {'IN' if left else 'NOT IN'} {S}"


@dataclass(frozen=True, eq=False)
class LeafNode:
    """Terminal node predicting the mean target of its training rows."""

    value: float
    n_samples: int
    sse: float

    is_leaf = True

    @property
    def n_leaves(self) -> int:
        return 1

    @property
    def depth(self) -> int:
        return 0

    @property
    def subtree_sse(self) -> float:
        return self.sse


@dataclass(frozen=True, eq=False)
class InternalNode:
    """Node that routes rows to ``left``/``right`` according to ``split``.

    ``value``, ``n_samples`` and ``sse`` describe the node's own training rows
    as if it were collapsed to a leaf; the pruner relies on them.
    """

    value: float
    n_samples: int
    sse: float
    split: SplitRule
    left: "Node" = field(repr=False)
    right: "Node" = field(repr=False)
    n_leaves: int = field(init=False)
    depth: int = field(init=False)
    subtree_sse: float = field(init=False)

    is_leaf = False

    def __post_init__(self):
        object.__setattr__(self, "n_leaves", self.left.n_leaves + self.right.n_leaves)
        object.__setattr__(self, "depth", 1 + max(self.left.depth, self.right.depth))
        object.__setattr__(self, "subtree_sse", self.left.subtree_sse + self.right.subtree_sse)

    def collapse(self) -> LeafNode:
        return LeafNode(value=self.value, n_samples=self.n_samples, sse=self.sse)

    @property
    def sse_reduction(self) -> float:
        """Training SSE removed by this node's split alone."""
        return self.sse - self.left.sse - self.right.sse


Node = Union[LeafNode, InternalNode]


def iter_nodes(node: Node, path: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Node]]:
    """Yield ``(path, node)`` pairs in pre-order; paths are tuples of ``"L"``/``"R"``."""
    yield path, node
    if not node.is_leaf:
        yield from iter_nodes(node.left, path + ("L",))
        yield from iter_nodes(node.right, path + ("R",))


def iter_leaves(node: Node) -> Iterator[LeafNode]:
    for _, n in iter_nodes(node):
        if n.is_leaf:
            yield n


def sse_reduction_by_feature(node: Node, n_features: int) -> np.ndarray:
    """Total SSE reduction credited to each feature over the tree's splits."""
    out = np.zeros(n_features, dtype=float)
    for _, n in iter_nodes(node):
        if not n.is_leaf:
            out[n.split.feature_index] += n.sse_reduction
    return out


def predict_rows(node: Node, columns, idx: np.ndarray, out: np.ndarray) -> None:
    """Write the leaf prediction of each row in ``idx`` into ``out[idx]``.

    ``columns`` holds one array per feature.  Rows are routed in bulk by
    partitioning ``idx`` at every internal node.
    """
    if idx.size == 0:
        return
    if node.is_leaf:
        out[idx] = node.value
        return
    mask = node.split.left_mask(columns[node.split.feature_index][idx])
    predict_rows(node.left, columns, idx[mask], out)
    predict_rows(node.right, columns, idx[~mask], out)


def apply_rows(node: Node, columns, idx: np.ndarray, out: np.ndarray, next_id: int = 0) -> int:
    """Write the pre-order leaf number of each row into ``out[idx]``.

    Returns the next unused leaf number.
    """
    if node.is_leaf:
        out[idx] = next_id
        return next_id + 1
    mask = node.split.left_mask(columns[node.split.feature_index][idx])
    next_id = apply_rows(node.left, columns, idx[mask], out, next_id)
    return apply_rows(node.right, columns, idx[~mask], out, next_id)
