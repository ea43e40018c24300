"""K-fold cross-validation over an ordered list of hyperparameter candidates.

The folds are drawn once per run and shared by every candidate, so candidate
scores are paired comparisons on identical train/validation splits.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from joblib import Parallel, delayed
from loguru import logger
from sklearn.base import BaseEstimator, clone
from sklearn.exceptions import NotFittedError
from sklearn.model_selection import KFold

from .bootstrap import RandomStateLike, as_generator
from .exceptions import EmptyInputError, InvalidConfigurationError, TuningTimeoutError
from .logging import fit_log_level
from .metrics import root_mean_squared_error
from .regressor import _NOT_FITTED, _check_int

# Mean scores closer than this (relative) count as a tie.
_TIE_RTOL = 1e-9


def param_candidates(name: str, values: Sequence[Any]) -> List[Dict[str, Any]]:
    """Candidate list sweeping a single parameter, e.g. ``param_candidates("ccp_alpha", alphas)``."""
    return [{name: v} for v in values]


def make_folds(n_rows: int, k: int, random_state: RandomStateLike = None) -> List[np.ndarray]:
    """Shuffle ``range(n_rows)`` into ``k`` disjoint folds whose sizes differ by at most one.

    Raises
    ------
    InvalidConfigurationError
        If ``k < 2`` or ``k > n_rows``.
    """
    k = _check_int("cv", k, 2)
    if k > n_rows:
        raise InvalidConfigurationError(f"cv={k} folds cannot be made from {n_rows} rows.")
    seed = int(as_generator(random_state).integers(0, 2**32 - 1))
    kf = KFold(n_splits=k, shuffle=True, random_state=seed)
    return [test for _, test in kf.split(np.zeros((n_rows, 1)))]


def _model_complexity(estimator) -> float:
    """Leaf count for single trees, features per split for forests."""
    if hasattr(estimator, "get_n_leaves"):
        return float(estimator.get_n_leaves())
    return float(getattr(estimator, "max_features_", 0))


def _take(X, idx: np.ndarray):
    if hasattr(X, "iloc"):
        return X.iloc[idx]
    return X[idx]


def _fit_and_score(estimator, params: Mapping[str, Any], X, y: np.ndarray,
                   train: np.ndarray, test: np.ndarray,
                   complexity: Callable[[Any], float]) -> Tuple[float, float]:
    est = clone(estimator).set_params(**params)
    est.fit(_take(X, train), y[train])
    pred = est.predict(_take(X, test))
    return root_mean_squared_error(y[test], pred), complexity(est)


@dataclass(frozen=True)
class TuningResult:
    """Scores of one tuning run, ready for curve plotting.

    Attributes
    ----------
    candidates : tuple of dict
        Parameter settings in the order they were given.
    fold_scores : ndarray of shape (n_candidates, k)
        Validation RMSE per candidate and held-out fold.
    complexities : ndarray of shape (n_candidates,)
        Mean fitted complexity per candidate, used to break ties.
    best_index : int
    """

    candidates: Tuple[Dict[str, Any], ...]
    fold_scores: np.ndarray
    complexities: np.ndarray
    best_index: int

    @property
    def mean_scores(self) -> np.ndarray:
        return self.fold_scores.mean(axis=1)

    @property
    def std_scores(self) -> np.ndarray:
        return self.fold_scores.std(axis=1)

    @property
    def best_params(self) -> Dict[str, Any]:
        return dict(self.candidates[self.best_index])

    @property
    def best_score(self) -> float:
        return float(self.mean_scores[self.best_index])

    def as_records(self) -> List[Dict[str, Any]]:
        """One dict per candidate: its parameters plus ``mean_rmse``, ``std_rmse`` and ``complexity``."""
        return [
            {**params, "mean_rmse": float(m), "std_rmse": float(s), "complexity": float(c)}
            for params, m, s, c in zip(self.candidates, self.mean_scores, self.std_scores,
                                       self.complexities)
        ]


def select_best(mean_scores: np.ndarray, complexities: np.ndarray) -> int:
    """Index of the lowest mean score; ties go to the simplest, then the earliest candidate."""
    best = mean_scores.min()
    tied = np.flatnonzero(np.isclose(mean_scores, best, rtol=_TIE_RTOL, atol=0.0))
    return int(tied[np.argmin(complexities[tied])])


class CrossValidationTuner(BaseEstimator):
    """
    Pick a hyperparameter setting by k-fold cross-validated RMSE.

    Parameters
    ----------
    estimator : estimator
        Unfitted regressor with ``fit``/``predict`` and ``set_params``,
        e.g. :class:`~cartforest.CARTRegressor` or :class:`~cartforest.ForestRegressor`.
    candidates : sequence of dict
        Ordered parameter settings to try; see :func:`param_candidates`.
    cv : int, default=10
        Number of folds.
    random_state : int, SeedSequence or Generator, optional
        Seed for the fold assignment.
    complexity : callable, optional
        ``complexity(fitted_estimator) -> float`` used to break score ties in
        favour of simpler models.  Defaults to the leaf count for trees and
        ``max_features_`` for forests.
    refit : bool, default=True
        Refit the winning setting on all rows as ``best_estimator_``.
    n_jobs : int, optional
        joblib workers for the folds of a candidate.
    timeout : float, optional
        Seconds after which the run is abandoned before the next candidate.
    verbose : int, default=0
        Per-candidate scores are logged at INFO instead of DEBUG when positive.

    Attributes
    ----------
    cv_results_ : TuningResult
    folds_ : list of ndarray
        Validation indices of each fold.
    best_index_, best_params_, best_score_
    best_estimator_ : estimator
        Only when ``refit=True``.
    """

    def __init__(self, estimator, candidates: Sequence[Mapping[str, Any]], cv: int = 10,
                 random_state: RandomStateLike = None,
                 complexity: Optional[Callable[[Any], float]] = None,
                 refit: bool = True, n_jobs: Optional[int] = None,
                 timeout: Optional[float] = None, verbose: int = 0):
        self.estimator = estimator
        self.candidates = candidates
        self.cv = cv
        self.random_state = random_state
        self.complexity = complexity
        self.refit = refit
        self.n_jobs = n_jobs
        self.timeout = timeout
        self.verbose = verbose

    def fit(self, X, y):
        candidates = [dict(c) for c in self.candidates]
        if not candidates:
            raise InvalidConfigurationError("candidates must not be empty.")
        if not hasattr(X, "iloc"):
            X = np.asarray(X, dtype=object)
        y = np.asarray(y, dtype=float).ravel()
        n = y.shape[0]
        if n == 0:
            raise EmptyInputError("Cannot tune on zero rows.")
        if X.shape[0] != n:
            raise InvalidConfigurationError("X and y must have the same number of rows.")

        folds = make_folds(n, self.cv, self.random_state)
        all_rows = np.arange(n)
        trains = [np.setdiff1d(all_rows, test, assume_unique=True) for test in folds]
        complexity = self.complexity if self.complexity is not None else _model_complexity
        level = fit_log_level(self.verbose)

        scores = np.empty((len(candidates), len(folds)), dtype=float)
        comps = np.empty(len(candidates), dtype=float)
        start = time.monotonic()
        for c, params in enumerate(candidates):
            if self.timeout is not None and c > 0 and time.monotonic() - start > self.timeout:
                raise TuningTimeoutError(
                    f"Tuning exceeded {self.timeout}s after {c} of {len(candidates)} candidates.")
            out = Parallel(n_jobs=self.n_jobs)(
                delayed(_fit_and_score)(self.estimator, params, X, y, train, test, complexity)
                for train, test in zip(trains, folds)
            )
            scores[c] = [s for s, _ in out]
            comps[c] = float(np.mean([k for _, k in out]))
            logger.log(level, "Candidate {} {}: mean RMSE {:.4f} (sd {:.4f})",
                       c, params, scores[c].mean(), scores[c].std())

        best = select_best(scores.mean(axis=1), comps)
        self.cv_results_ = TuningResult(candidates=tuple(candidates), fold_scores=scores,
                                        complexities=comps, best_index=best)
        self.folds_ = folds
        self.best_index_ = best
        self.best_params_ = self.cv_results_.best_params
        self.best_score_ = self.cv_results_.best_score
        logger.log(level, "Selected {} with mean RMSE {:.4f}", self.best_params_, self.best_score_)

        if self.refit:
            self.best_estimator_ = clone(self.estimator).set_params(**self.best_params_).fit(X, y)
        return self

    def predict(self, X):
        if getattr(self, "best_estimator_", None) is None:
            raise NotFittedError(_NOT_FITTED)
        return self.best_estimator_.predict(X)
