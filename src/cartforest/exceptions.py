"""Errors and warnings raised by cartforest.

Configuration problems subclass ``ValueError`` so that code written against
scikit-learn estimators keeps catching them; everything shares
:class:`CartForestError` as a common base.
"""
from __future__ import annotations

from typing import Sequence


class CartForestError(Exception):
    """Base class for all cartforest errors."""


class InvalidConfigurationError(CartForestError, ValueError):
    """Raised when a hyperparameter or input shape is invalid.

    Examples: ``min_node_size < 1``, ``max_depth < 1``, ``n_estimators < 1``,
    a fold count outside ``[2, n_rows]`` or ``X``/``y`` length mismatch.
    """


class EmptyInputError(CartForestError, ValueError):
    """Raised when a fit or a bootstrap draw is requested on zero rows."""


class InsufficientTreesError(CartForestError, RuntimeError):
    """Raised when the out-of-bag error is undefined.

    Some training rows were drawn into every bootstrap sample, so no tree can
    score them out-of-bag.  Grow more trees.

    Attributes
    ----------
    uncovered_rows : list[int]
        Training row indices that were never out-of-bag.
    n_estimators : int
        Size of the ensemble that was inspected.
    """

    def __init__(self, uncovered_rows: Sequence[int], n_estimators: int):
        self.uncovered_rows = [int(i) for i in uncovered_rows]
        self.n_estimators = int(n_estimators)
        shown = ", ".join(map(str, self.uncovered_rows[:10]))
        if len(self.uncovered_rows) > 10:
            shown += ", ..."
        super().__init__(
            f"{len(self.uncovered_rows)} training row(s) were never out-of-bag "
            f"across {self.n_estimators} tree(s) (rows: {shown}); "
            "increase n_estimators to obtain an out-of-bag error."
        )


class TuningTimeoutError(CartForestError, TimeoutError):
    """Raised when a cross-validation run exceeds its time budget.

    The budget is checked between candidates, so the run stops after the
    candidate that crossed the limit.
    """


class InsufficientTreesWarning(UserWarning):
    """Emitted by ``ForestRegressor.fit`` when some rows were never out-of-bag."""


class DegenerateTargetWarning(UserWarning):
    """Emitted when the training target is constant and the tree is a single leaf."""
