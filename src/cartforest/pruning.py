"""Cost-complexity (weakest-link) pruning of fitted regression trees.

For a penalty ``alpha`` the cost of a subtree ``T`` is
``SSE(T) + alpha * leaves(T)``.  Starting from the fully grown tree, the
internal node whose collapse raises the training SSE least per removed leaf,

    g(t) = (SSE(t) - SSE(T_t)) / (leaves(T_t) - 1),

is collapsed repeatedly until only the root is left.  The recorded sequence of
subtrees contains the cost-minimising subtree for every ``alpha``.

Node statistics (``sse``) are stored from the training rows while growing, so
the path is computed from the tree alone.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .nodes import InternalNode, Node, iter_nodes


@dataclass(frozen=True)
class CostComplexityPath:
    """Pruning sequence of one tree.

    Attributes
    ----------
    ccp_alphas : ndarray
        Effective penalty at which each subtree becomes optimal; starts at 0
        and never decreases.
    n_leaves : ndarray
        Leaf count of each subtree; never increases.
    impurities : ndarray
        Total training SSE of each subtree's leaves.
    trees : tuple
        The subtrees themselves, from the unpruned tree to the root leaf.
    """

    ccp_alphas: np.ndarray
    n_leaves: np.ndarray
    impurities: np.ndarray
    trees: Tuple[Node, ...]

    def __len__(self) -> int:
        return len(self.trees)

    def select(self, alpha: float) -> Node:
        """Smallest subtree on the path whose effective alpha is <= ``alpha``."""
        if alpha <= 0:
            return self.trees[0]
        k = int(np.searchsorted(self.ccp_alphas, alpha, side="right")) - 1
        return self.trees[max(k, 0)]


def _weakest_link(root: Node):
    """Return ``(g, path)`` of the internal node with the smallest g (first in pre-order)."""
    best = None
    for path, node in iter_nodes(root):
        if node.is_leaf:
            continue
        g = (node.sse - node.subtree_sse) / (node.n_leaves - 1)
        if best is None or g < best[0]:
            best = (g, path)
    return best


def _collapse_at(node: Node, path: Tuple[str, ...]) -> Node:
    if not path:
        return node.collapse()
    if path[0] == "L":
        left, right = _collapse_at(node.left, path[1:]), node.right
    else:
        left, right = node.left, _collapse_at(node.right, path[1:])
    return InternalNode(value=node.value, n_samples=node.n_samples, sse=node.sse,
                        split=node.split, left=left, right=right)


def cost_complexity_path(tree: Node) -> CostComplexityPath:
    """Compute the weakest-link pruning path of ``tree``.

    Parameters
    ----------
    tree : LeafNode or InternalNode
        A fitted tree, usually unpruned.

    Returns
    -------
    CostComplexityPath
        One entry per collapse plus the starting tree.  A leaf-only tree gives
        a single-entry path.
    """
    alphas = [0.0]
    leaves = [tree.n_leaves]
    impurities = [tree.subtree_sse]
    trees = [tree]
    current = tree
    while not current.is_leaf:
        g, path = _weakest_link(current)
        current = _collapse_at(current, path)
        alphas.append(max(alphas[-1], float(g)))
        leaves.append(current.n_leaves)
        impurities.append(current.subtree_sse)
        trees.append(current)
    return CostComplexityPath(ccp_alphas=np.asarray(alphas, dtype=float),
                              n_leaves=np.asarray(leaves, dtype=int),
                              impurities=np.asarray(impurities, dtype=float),
                              trees=tuple(trees))


def prune_tree(tree: Node, alpha: float) -> Node:
    """Subtree of ``tree`` minimising ``SSE + alpha * leaves``.

    ``alpha <= 0`` returns ``tree`` unchanged; ``alpha`` at or above the last
    effective alpha of the path returns the root collapsed to a single leaf.
    """
    if alpha <= 0:
        return tree
    return cost_complexity_path(tree).select(alpha)
