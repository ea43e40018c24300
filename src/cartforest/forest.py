"""Bagged regression trees and random forests with out-of-bag error.

Each tree is grown on its own bootstrap sample with :class:`TreeGrower`;
``max_features=None`` gives plain bagging, a smaller value gives a random
forest.  Predictions are the unweighted mean of the trees.
"""
from __future__ import annotations

import warnings
from typing import Iterable, List, Optional

import numpy as np
from joblib import Parallel, delayed
from loguru import logger
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.exceptions import NotFittedError

from .bootstrap import (
    BootstrapSample,
    RandomStateLike,
    as_generator,
    draw_bootstrap,
    root_seed_sequence,
)
from .exceptions import (
    DegenerateTargetWarning,
    EmptyInputError,
    InsufficientTreesError,
    InsufficientTreesWarning,
)
from .logging import fit_log_level
from .metrics import root_mean_squared_error
from .nodes import Node, predict_rows, sse_reduction_by_feature
from .regressor import (
    MAX_CATEGORIES_EXHAUSTIVE,
    FeatureSchema,
    TreeGrower,
    _check_int,
    _NOT_FITTED,
    as_2d_object_array,
    as_target,
    resolve_max_features,
)


def _grow_one(columns, y, is_cat, seed_seq, params: dict):
    """Draw one bootstrap sample and grow a tree on it.

    The tree's seed sequence is split into a bootstrap stream and a
    split-sampling stream, so the result depends only on ``seed_seq``.
    """
    boot_seq, split_seq = seed_seq.spawn(2)
    sample = draw_bootstrap(y.shape[0], boot_seq)
    grower = TreeGrower(columns, y, is_cat, rng=as_generator(split_seq), **params)
    return grower.grow(sample.indices), sample


class ForestRegressor(RegressorMixin, BaseEstimator):
    """
    Ensemble of least-squares regression trees grown on bootstrap samples.

    Parameters
    ----------
    n_estimators : int, default=100
        Number of trees (B).
    max_features : int, float, {"sqrt", "third"} or None, default=None
        Features sampled at every split (m).  ``None`` uses all features, which
        is bagging; ``"third"`` is the usual random-forest choice for
        regression.
    min_node_size : int, default=5
        Minimum rows on either side of a split in every tree.
    max_depth : int or None, default=None
        Depth limit per tree.
    categorical_features, infer_categorical, feature_names
        As in :class:`~cartforest.CARTRegressor`.
    random_state : int, SeedSequence or Generator, optional
        Root seed.  Tree ``b`` always uses the ``b``-th child of this seed, so
        results do not depend on ``n_jobs`` and the first B trees of a larger
        forest equal a forest of B trees.  ``SeedSequence`` and ``Generator`` seeds
        are copied, never spawned from, so refitting rebuilds the same forest.
    n_jobs : int, optional
        Number of joblib workers growing trees; ``None`` means 1.
    verbose : int, default=0
        Fit summaries are logged at INFO instead of DEBUG when positive.

    Attributes
    ----------
    estimators_ : list
        Root node of every tree.
    bootstrap_samples_ : list[BootstrapSample]
        The draw behind every tree.
    oob_prediction_ : ndarray
        Mean out-of-bag prediction per training row; NaN where a row was in
        every bootstrap sample.
    oob_counts_ : ndarray
        Number of trees for which each training row was out-of-bag.
    oob_score_ : float
        Out-of-bag RMSE, or NaN when some row was never out-of-bag (see
        :meth:`oob_error`).
    max_features_ : int
    """

    def __init__(self,
                 n_estimators: int = 100,
                 max_features=None,
                 min_node_size: int = 5,
                 max_depth: Optional[int] = None,
                 categorical_features: Optional[Iterable[int | str]] = None,
                 infer_categorical: bool = True,
                 feature_names: Optional[List[str]] = None,
                 max_categories_exhaustive: int = 12,
                 random_state: RandomStateLike = None,
                 n_jobs: Optional[int] = None,
                 verbose: int = 0):
        self.n_estimators = n_estimators
        self.max_features = max_features
        self.min_node_size = min_node_size
        self.max_depth = max_depth
        self.categorical_features = categorical_features
        self.infer_categorical = infer_categorical
        self.feature_names = feature_names
        self.max_categories_exhaustive = max_categories_exhaustive
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.verbose = verbose

    def fit(self, X, y):
        n_estimators = _check_int("n_estimators", self.n_estimators, 1)
        params = dict(
            min_node_size=_check_int("min_node_size", self.min_node_size, 1),
            max_depth=_check_int("max_depth", self.max_depth, 1, allow_none=True),
            max_categories_exhaustive=_check_int(
                "max_categories_exhaustive", self.max_categories_exhaustive, 2,
                maximum=MAX_CATEGORIES_EXHAUSTIVE),
        )
        X, df_names = as_2d_object_array(X)
        if X.shape[0] == 0:
            raise EmptyInputError("Cannot fit a forest on zero rows.")
        y = as_target(y, X.shape[0])
        schema = FeatureSchema.infer(X, self.feature_names if self.feature_names is not None else df_names,
                                     self.categorical_features, self.infer_categorical)
        columns = schema.encode(X)
        params["max_features"] = resolve_max_features(self.max_features, schema.n_features)

        children = root_seed_sequence(self.random_state).spawn(n_estimators)
        results = Parallel(n_jobs=self.n_jobs)(
            delayed(_grow_one)(columns, y, schema.is_cat, child, params) for child in children
        )

        self._schema = schema
        self.feature_names_ = schema.feature_names
        self.is_cat_ = schema.is_cat
        self.n_features_in_ = schema.n_features
        self.max_features_ = params["max_features"]
        self.estimators_: List[Node] = [tree for tree, _ in results]
        self.bootstrap_samples_: List[BootstrapSample] = [sample for _, sample in results]
        self._compute_oob(columns, y)

        if y.min() == y.max():
            msg = "Training target is constant; every tree is a single leaf."
            logger.warning(msg)
            warnings.warn(msg, DegenerateTargetWarning, stacklevel=2)
        logger.log(fit_log_level(self.verbose),
                   "Fitted {} trees (m={}) on {} rows; OOB RMSE {:.4f}, mean leaves {:.1f}",
                   n_estimators, self.max_features_, X.shape[0], self.oob_score_,
                   float(np.mean([t.n_leaves for t in self.estimators_])))
        return self

    def _compute_oob(self, columns, y: np.ndarray) -> None:
        n = y.shape[0]
        sums = np.zeros(n, dtype=float)
        counts = np.zeros(n, dtype=int)
        buf = np.empty(n, dtype=float)
        for tree, sample in zip(self.estimators_, self.bootstrap_samples_):
            oob = sample.oob_indices
            if oob.size == 0:
                continue
            predict_rows(tree, columns, oob, buf)
            sums[oob] += buf[oob]
            counts[oob] += 1

        covered = counts > 0
        pred = np.full(n, np.nan)
        pred[covered] = sums[covered] / counts[covered]
        self.oob_prediction_ = pred
        self.oob_counts_ = counts
        self._oob_rmse_covered = (root_mean_squared_error(y[covered], pred[covered])
                                  if covered.any() else float("nan"))
        if covered.all():
            self.oob_score_ = self._oob_rmse_covered
        else:
            self.oob_score_ = float("nan")
            n_missing = int((~covered).sum())
            msg = (f"{n_missing} of {n} training rows were never out-of-bag with "
                   f"{len(self.estimators_)} trees; the OOB error is undefined.")
            logger.warning(msg)
            warnings.warn(msg, InsufficientTreesWarning, stacklevel=3)

    def oob_error(self, strict: bool = True) -> float:
        """Out-of-bag RMSE.

        Parameters
        ----------
        strict : bool, default=True
            When True, raise if any training row was never out-of-bag.  When
            False, return the RMSE over the rows that were out-of-bag for at
            least one tree.

        Raises
        ------
        InsufficientTreesError
            In strict mode, when some row was in every bootstrap sample.
        """
        self._check_fitted()
        uncovered = np.flatnonzero(self.oob_counts_ == 0)
        if strict and uncovered.size:
            raise InsufficientTreesError(uncovered, len(self.estimators_))
        return self._oob_rmse_covered

    def predict(self, X):
        """Unweighted mean of the per-tree predictions."""
        return self.predict_all(X).mean(axis=0)

    def predict_all(self, X) -> np.ndarray:
        """Per-tree predictions, shape ``(n_estimators, n_rows)``."""
        self._check_fitted()
        X, _ = as_2d_object_array(X)
        columns = self._schema.encode(X)
        n = X.shape[0]
        idx = np.arange(n)
        out = np.empty((len(self.estimators_), n), dtype=float)
        for b, tree in enumerate(self.estimators_):
            predict_rows(tree, columns, idx, out[b])
        return out

    @property
    def sse_reduction_(self) -> np.ndarray:
        """Per-feature SSE reduction summed over all trees."""
        self._check_fitted()
        return np.sum([sse_reduction_by_feature(t, self.n_features_in_) for t in self.estimators_], axis=0)

    @property
    def feature_importances_(self) -> np.ndarray:
        red = self.sse_reduction_
        total = red.sum()
        return red / total if total > 0 else red

    def _check_fitted(self):
        if getattr(self, "estimators_", None) is None:
            raise NotFittedError(_NOT_FITTED)
