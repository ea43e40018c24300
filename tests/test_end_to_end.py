"""Housing walkthrough: single tree, pruning, bagging and random forest on a 506 x 13 table."""
import numpy as np
import pytest
from sklearn.model_selection import train_test_split

from cartforest import CARTRegressor, CrossValidationTuner, ForestRegressor, param_candidates
from cartforest.metrics import root_mean_squared_error

from conftest import HOUSING_FEATURES


def _brute_force_root_split(X, y, min_node_size):
    best = (np.inf, None, None)
    for j in range(X.shape[1]):
        values = np.unique(X[:, j])
        for lo, hi in zip(values[:-1], values[1:]):
            thr = 0.5 * (lo + hi)
            left = X[:, j] < thr
            if left.sum() < min_node_size or (~left).sum() < min_node_size:
                continue
            yl, yr = y[left], y[~left]
            sse = ((yl - yl.mean()) ** 2).sum() + ((yr - yr.mean()) ** 2).sum()
            if sse < best[0]:
                best = (sse, j, thr)
    return best


@pytest.fixture
def housing_split(housing):
    X, y = housing
    return train_test_split(X, y, train_size=380, test_size=126, random_state=1)


def test_root_split_matches_brute_force(housing_split):
    X_train, X_test, y_train, y_test = housing_split
    assert X_train.shape == (380, 13)
    regr = CARTRegressor(min_node_size=10, feature_names=HOUSING_FEATURES).fit(X_train, y_train)

    sse, j, thr = _brute_force_root_split(X_train, y_train, 10)
    root = regr.tree_
    assert root.split.feature_index == j
    assert root.split.threshold == pytest.approx(thr)
    assert root.left.sse + root.right.sse == pytest.approx(sse)
    assert regr.feature_names_[j] == "rm"


def test_walkthrough(housing_split):
    X_train, X_test, y_train, y_test = housing_split

    full = CARTRegressor(min_node_size=10).fit(X_train, y_train)
    path = full.cost_complexity_pruning_path(X_train, y_train)
    tuner = CrossValidationTuner(CARTRegressor(min_node_size=10),
                                 param_candidates("ccp_alpha", np.unique(path.ccp_alphas)),
                                 cv=10, random_state=0).fit(X_train, y_train)
    pruned = tuner.best_estimator_
    assert pruned.get_n_leaves() <= full.get_n_leaves()
    tree_rmse = root_mean_squared_error(y_test, pruned.predict(X_test))

    bagging = ForestRegressor(n_estimators=100, min_node_size=5, random_state=1).fit(X_train, y_train)
    forest = ForestRegressor(n_estimators=100, max_features="third", min_node_size=5,
                             random_state=1).fit(X_train, y_train)
    bag_rmse = root_mean_squared_error(y_test, bagging.predict(X_test))
    rf_rmse = root_mean_squared_error(y_test, forest.predict(X_test))

    assert np.isfinite(bagging.oob_score_) and np.isfinite(forest.oob_score_)
    assert bag_rmse < tree_rmse
    assert rf_rmse < tree_rmse * 1.1
    assert int(np.argmax(forest.feature_importances_)) == HOUSING_FEATURES.index("rm")
