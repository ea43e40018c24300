import numpy as np
import pytest
from cartforest import (
    CARTRegressor,
    ForestRegressor,
    InsufficientTreesError,
    InsufficientTreesWarning,
    InvalidConfigurationError,
)
from cartforest.metrics import root_mean_squared_error


def test_single_tree_forest_equals_its_tree(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=1, min_node_size=5, random_state=3)
    with pytest.warns(InsufficientTreesWarning):
        forest.fit(X, y)
    assert np.array_equal(forest.predict(X), forest.predict_all(X)[0])

    idx = forest.bootstrap_samples_[0].indices
    tree = CARTRegressor(min_node_size=5).fit(X[idx], y[idx])
    assert np.array_equal(forest.predict(X), tree.predict(X))


def test_prediction_is_mean_of_trees(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=8, max_features=2, random_state=0).fit(X, y)
    per_tree = forest.predict_all(X[:10])
    assert per_tree.shape == (8, 10)
    assert np.allclose(forest.predict(X[:10]), per_tree.mean(axis=0))


def test_invalid_tree_count(small_regression):
    X, y = small_regression
    with pytest.raises(InvalidConfigurationError):
        ForestRegressor(n_estimators=0).fit(X, y)
    with pytest.raises(InvalidConfigurationError):
        ForestRegressor(n_estimators=3, min_node_size=0).fit(X, y)
    with pytest.raises(InvalidConfigurationError):
        ForestRegressor(n_estimators=3, max_categories_exhaustive=25).fit(X, y)


def test_oob_error_with_full_coverage(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=60, max_features="third", random_state=1).fit(X, y)
    assert (forest.oob_counts_ > 0).all()
    assert np.isfinite(forest.oob_score_)
    assert forest.oob_error() == pytest.approx(forest.oob_score_)
    assert forest.oob_score_ == pytest.approx(root_mean_squared_error(y, forest.oob_prediction_))
    # out-of-bag error is an honest estimate, so it exceeds the training error
    assert forest.oob_score_ > root_mean_squared_error(y, forest.predict(X))


def test_uncovered_rows_are_reported(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=2, random_state=0)
    with pytest.warns(InsufficientTreesWarning):
        forest.fit(X, y)
    assert np.isnan(forest.oob_score_)
    assert np.isnan(forest.oob_prediction_[forest.oob_counts_ == 0]).all()
    with pytest.raises(InsufficientTreesError) as excinfo:
        forest.oob_error()
    assert set(excinfo.value.uncovered_rows) == set(np.flatnonzero(forest.oob_counts_ == 0))
    assert np.isfinite(forest.oob_error(strict=False))


def test_same_seed_same_forest_for_any_n_jobs(small_regression):
    X, y = small_regression
    a = ForestRegressor(n_estimators=6, max_features=2, random_state=9).fit(X, y)
    b = ForestRegressor(n_estimators=6, max_features=2, random_state=9, n_jobs=2).fit(X, y)
    assert np.array_equal(a.predict(X), b.predict(X))
    assert np.array_equal(a.oob_prediction_, b.oob_prediction_, equal_nan=True)


def test_larger_forest_extends_smaller_one(small_regression):
    X, y = small_regression
    small = ForestRegressor(n_estimators=4, max_features=2, random_state=5).fit(X, y)
    large = ForestRegressor(n_estimators=10, max_features=2, random_state=5).fit(X, y)
    assert np.array_equal(small.predict_all(X), large.predict_all(X)[:4])


def test_more_trees_reduce_prediction_variance(small_regression):
    X, y = small_regression
    x0 = X[:1]

    def spread(n_estimators):
        preds = [ForestRegressor(n_estimators=n_estimators, max_features=2,
                                 random_state=seed).fit(X, y).predict(x0)[0]
                 for seed in range(10)]
        return np.var(preds)

    assert spread(100) < spread(10)


def test_refit_with_seed_object_is_reproducible(small_regression):
    X, y = small_regression
    for seed in (np.random.SeedSequence(4), np.random.default_rng(4)):
        forest = ForestRegressor(n_estimators=5, max_features=2, random_state=seed)
        first = forest.fit(X, y).predict_all(X)
        second = forest.fit(X, y).predict_all(X)
        assert np.array_equal(first, second)


def test_bagging_uses_all_features(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=3, random_state=0).fit(X, y)
    assert forest.max_features_ == X.shape[1]


def test_forest_feature_importances(small_regression):
    X, y = small_regression
    forest = ForestRegressor(n_estimators=20, max_features=3, random_state=2).fit(X, y)
    imp = forest.feature_importances_
    assert imp.sum() == pytest.approx(1.0)
    assert int(np.argmax(imp)) == 0
    assert forest.sse_reduction_.shape == (5,)


def test_tree_failure_aborts_fit(small_regression, monkeypatch):
    X, y = small_regression

    def boom(self, idx):
        raise RuntimeError("tree failed")

    monkeypatch.setattr("cartforest.forest.TreeGrower.grow", boom)
    forest = ForestRegressor(n_estimators=3, random_state=0)
    with pytest.raises(RuntimeError):
        forest.fit(X, y)
    assert not hasattr(forest, "estimators_")


def test_forest_not_fitted():
    with pytest.raises(ValueError):
        ForestRegressor().predict([[1.0]])
