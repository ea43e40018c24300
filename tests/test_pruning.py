import numpy as np
import pytest
from cartforest import CARTRegressor, cost_complexity_path, prune_tree


def _step_tree():
    X = np.array([[1.0], [2.0], [3.0], [4.0]])
    y = np.array([0.0, 0.0, 10.0, 10.0])
    return CARTRegressor(min_node_size=1).fit(X, y).tree_


def test_step_tree_path():
    path = cost_complexity_path(_step_tree())
    assert list(path.n_leaves) == [2, 1]
    assert np.allclose(path.ccp_alphas, [0.0, 100.0])
    assert np.allclose(path.impurities, [0.0, 100.0])


def test_prune_tree_boundaries():
    tree = _step_tree()
    assert prune_tree(tree, 0.0) is tree
    assert prune_tree(tree, -5.0) is tree
    assert prune_tree(tree, 99.0).n_leaves == 2
    root = prune_tree(tree, 100.0)
    assert root.is_leaf
    assert root.value == pytest.approx(5.0)
    assert prune_tree(tree, 1e9).is_leaf


def test_path_is_monotone(housing):
    X, y = housing
    path = CARTRegressor(min_node_size=5).cost_complexity_pruning_path(X, y)
    assert path.n_leaves[0] > 1
    assert path.n_leaves[-1] == 1
    assert np.all(np.diff(path.ccp_alphas) >= 0)
    assert np.all(np.diff(path.n_leaves) <= 0)
    assert np.all(np.diff(path.impurities) >= -1e-9)


def test_leaf_counts_non_increasing_in_alpha(housing):
    X, y = housing
    tree = CARTRegressor(min_node_size=5).fit(X, y).tree_
    alphas = np.concatenate([[0.0], np.geomspace(1e-3, 1e5, 40)])
    leaves = [prune_tree(tree, a).n_leaves for a in alphas]
    assert all(a >= b for a, b in zip(leaves, leaves[1:]))
    assert leaves[0] == tree.n_leaves
    assert leaves[-1] == 1


def test_selected_subtree_minimises_cost(housing):
    X, y = housing
    path = cost_complexity_path(CARTRegressor(min_node_size=5).fit(X, y).tree_)
    for alpha in (0.5, 5.0, 50.0, 500.0):
        chosen = path.select(alpha)
        costs = path.impurities + alpha * path.n_leaves
        chosen_cost = chosen.subtree_sse + alpha * chosen.n_leaves
        assert chosen_cost <= costs.min() + 1e-6 * max(1.0, costs.min())


def test_ccp_alpha_prunes_fitted_tree(housing):
    X, y = housing
    full = CARTRegressor(min_node_size=5).fit(X, y)
    pruned = CARTRegressor(min_node_size=5, ccp_alpha=50.0).fit(X, y)
    assert pruned.get_n_leaves() < full.get_n_leaves()
    assert pruned.full_tree_.n_leaves == full.get_n_leaves()
    assert pruned.get_n_leaves() == prune_tree(full.tree_, 50.0).n_leaves


def test_pruning_does_not_modify_input_tree(housing):
    X, y = housing
    tree = CARTRegressor(min_node_size=5).fit(X, y).tree_
    n_before = tree.n_leaves
    cost_complexity_path(tree)
    assert tree.n_leaves == n_before


def test_leaf_only_tree_path():
    X = np.arange(10, dtype=float).reshape(10, 1)
    tree = CARTRegressor(min_node_size=10).fit(X, X[:, 0]).tree_
    path = cost_complexity_path(tree)
    assert len(path) == 1
    assert path.select(10.0) is tree
