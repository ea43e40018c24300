"""Scoring helpers shared by the forest and the tuner."""
from __future__ import annotations

import numpy as np
from sklearn.metrics import mean_squared_error


def root_mean_squared_error(y_true, y_pred) -> float:
    """Root-mean-squared error between ``y_true`` and ``y_pred``."""
    return float(np.sqrt(mean_squared_error(np.asarray(y_true, dtype=float),
                                            np.asarray(y_pred, dtype=float))))
