# cartforest/__init__.py
"""
cartforest: least-squares regression trees, cost-complexity pruning, bagging
and random forests in pure Python (scikit-learn style).

Exports:
    - CARTRegressor
    - ForestRegressor
    - CrossValidationTuner
"""
from loguru import logger

from .bootstrap import BootstrapSample, draw_bootstrap, spawn_generators
from .exceptions import (
    CartForestError,
    DegenerateTargetWarning,
    EmptyInputError,
    InsufficientTreesError,
    InsufficientTreesWarning,
    InvalidConfigurationError,
    TuningTimeoutError,
)
from .forest import ForestRegressor
from .logging import PACKAGE_NAME, enable_logging
from .nodes import InternalNode, LeafNode, SplitRule
from .pruning import CostComplexityPath, cost_complexity_path, prune_tree
from .regressor import CARTRegressor
from .tuning import CrossValidationTuner, TuningResult, make_folds, param_candidates

logger.disable(PACKAGE_NAME)

__all__ = [
    "CARTRegressor",
    "ForestRegressor",
    "CrossValidationTuner",
    "TuningResult",
    "CostComplexityPath",
    "cost_complexity_path",
    "prune_tree",
    "BootstrapSample",
    "draw_bootstrap",
    "spawn_generators",
    "make_folds",
    "param_candidates",
    "LeafNode",
    "InternalNode",
    "SplitRule",
    "enable_logging",
    "CartForestError",
    "InvalidConfigurationError",
    "EmptyInputError",
    "InsufficientTreesError",
    "TuningTimeoutError",
    "InsufficientTreesWarning",
    "DegenerateTargetWarning",
]
__version__ = "0.1.0"
