"""CART regression tree (least-squares splitting) with a scikit-learn style API.

The tree is grown by recursive binary splitting: at each node every candidate
threshold of every (sampled) feature is scored by the summed squared error of
the two children around their means, and the best one is kept.  Setting
``max_features`` below the number of columns turns the builder into the
per-split feature-sampling variant used inside random forests; there is no
separate tree class for it.
"""
from __future__ import annotations

import math
import numbers
import warnings
from typing import Any, Iterable, List, Optional, Tuple

import numpy as np
from loguru import logger
from sklearn.base import BaseEstimator, RegressorMixin, clone
from sklearn.exceptions import NotFittedError

from .bootstrap import RandomStateLike, as_generator
from .exceptions import DegenerateTargetWarning, EmptyInputError, InvalidConfigurationError
from .logging import fit_log_level
from .nodes import (
    InternalNode,
    LeafNode,
    Node,
    SplitRule,
    apply_rows,
    iter_leaves,
    predict_rows,
    sse_reduction_by_feature,
)
from .pruning import CostComplexityPath, cost_complexity_path, prune_tree

# A split must remove more than this fraction of the parent SSE to be kept.
_SPLIT_TOLERANCE = 1e-12

_NOT_FITTED = "Estimator not fitted. Call fit(...) first."

# Exhaustive subset search builds a 2**(k-1) x k mask matrix.
MAX_CATEGORIES_EXHAUSTIVE = 20

# ----------------------------- Helpers -----------------------------


def _is_missing(v: Any) -> bool:
    if v is None:
        return True
    try:
        return bool(np.isnan(v))
    except (TypeError, ValueError):
        return False


def _check_int(name: str, value, minimum: int, allow_none: bool = False,
               maximum: Optional[int] = None) -> Optional[int]:
    if value is None and allow_none:
        return None
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}.")
    if value < minimum:
        raise InvalidConfigurationError(f"{name} must be >= {minimum}, got {value}.")
    if maximum is not None and value > maximum:
        raise InvalidConfigurationError(f"{name} must be <= {maximum}, got {value}.")
    return int(value)


def resolve_max_features(max_features, n_features: int) -> int:
    """Number of features sampled per split for ``max_features``.

    ``None`` means all features, ``"sqrt"`` floor(sqrt(p)), ``"third"`` floor(p/3)
    (the usual regression-forest default), an int is used as is, and a float in
    ``(0, 1]`` is a fraction of ``p``.  Results are at least 1.
    """
    p = int(n_features)
    if max_features is None:
        return p
    if isinstance(max_features, str):
        if max_features == "sqrt":
            return max(1, int(math.sqrt(p)))
        if max_features == "third":
            return max(1, p // 3)
        raise InvalidConfigurationError(f"Unknown max_features {max_features!r}.")
    if isinstance(max_features, bool):
        raise InvalidConfigurationError("max_features must not be a bool.")
    if isinstance(max_features, numbers.Integral):
        if not 1 <= max_features <= p:
            raise InvalidConfigurationError(
                f"max_features must be in [1, {p}], got {max_features}.")
        return int(max_features)
    if isinstance(max_features, numbers.Real):
        if not 0.0 < max_features <= 1.0:
            raise InvalidConfigurationError(
                f"A float max_features must be in (0, 1], got {max_features}.")
        return max(1, int(max_features * p))
    raise InvalidConfigurationError(f"Invalid max_features {max_features!r}.")


# ----------------------------- Data preparation -----------------------------


class FeatureSchema:
    """Column layout learned at fit time and reused to encode new rows.

    Numeric columns become float arrays; categorical columns stay object arrays.
    """

    def __init__(self, feature_names: List[str], is_cat: np.ndarray):
        self.feature_names = feature_names
        self.is_cat = is_cat

    @property
    def n_features(self) -> int:
        return len(self.feature_names)

    @classmethod
    def infer(cls, X: np.ndarray, feature_names=None, categorical_features=None,
              infer_categorical: bool = True) -> "FeatureSchema":
        m = X.shape[1]
        names = list(feature_names) if feature_names is not None else [f"X[{j}]" for j in range(m)]
        if len(names) != m:
            raise InvalidConfigurationError("feature_names length must match X.shape[1]")
        is_cat = np.zeros(m, dtype=bool)
        if categorical_features is not None:
            name_to_idx = {n: i for i, n in enumerate(names)}
            for c in categorical_features:
                if isinstance(c, str):
                    if c not in name_to_idx:
                        raise InvalidConfigurationError(f"Unknown categorical feature {c!r}.")
                    is_cat[name_to_idx[c]] = True
                else:
                    j = int(c)
                    if not 0 <= j < m:
                        raise InvalidConfigurationError(f"Categorical feature index {j} out of range.")
                    is_cat[j] = True
        if infer_categorical:
            for j in range(m):
                if is_cat[j]:
                    continue
                col = X[:, j]
                if any(isinstance(v, (str, bool, np.bool_)) for v in col):
                    is_cat[j] = True
        return cls(names, is_cat)

    def encode(self, X: np.ndarray) -> List[np.ndarray]:
        if X.shape[1] != self.n_features:
            raise InvalidConfigurationError(
                f"X has {X.shape[1]} features, but the model was fitted with {self.n_features}.")
        columns = []
        for j in range(self.n_features):
            col = X[:, j]
            if any(_is_missing(v) for v in col):
                raise InvalidConfigurationError(
                    f"Feature {self.feature_names[j]!r} has missing values; they are not supported.")
            if self.is_cat[j]:
                columns.append(col.astype(object))
            else:
                try:
                    columns.append(col.astype(float))
                except (TypeError, ValueError) as e:
                    raise InvalidConfigurationError(
                        f"Feature {self.feature_names[j]!r} is not numeric; "
                        "declare it in categorical_features.") from e
        return columns


def as_2d_object_array(X) -> Tuple[np.ndarray, Optional[List[str]]]:
    """Convert ``X`` (array-like or DataFrame) to a 2-D object array plus column names."""
    names = [str(c) for c in X.columns] if hasattr(X, "columns") else None
    X = np.asarray(X, dtype=object)
    if X.ndim != 2:
        raise InvalidConfigurationError(f"X must be 2-dimensional, got shape {X.shape}.")
    return X, names


def as_target(y, n_rows: int) -> np.ndarray:
    y = np.asarray(y, dtype=float).ravel()
    if y.shape[0] != n_rows:
        raise InvalidConfigurationError("X and y must have the same number of rows.")
    if np.isnan(y).any():
        raise InvalidConfigurationError("y contains missing values.")
    return y


# ----------------------------- Tree growing -----------------------------


class TreeGrower:
    """Recursive least-squares tree builder over pre-encoded columns.

    Parameters
    ----------
    columns : list of ndarray
        One array per feature covering all training rows.
    y : ndarray
        Training target.
    is_cat : ndarray of bool
        Categorical mask per feature.
    min_node_size : int
        Minimum rows on either side of a split.  Nodes with fewer than
        ``2 * min_node_size`` rows are not split.
    max_depth : int or None
        Depth at which nodes become leaves (root is depth 0).
    max_features : int
        Features sampled per split; equal to ``len(columns)`` for a plain tree.
    rng : numpy.random.Generator
        Stream used for per-split feature sampling.
    max_categories_exhaustive : int
        Up to this many categories every subset is tried; above it, prefixes
        of the categories ordered by mean target.
    """

    def __init__(self, columns: List[np.ndarray], y: np.ndarray, is_cat: np.ndarray, *,
                 min_node_size: int, max_depth: Optional[int], max_features: int,
                 rng: np.random.Generator, max_categories_exhaustive: int = 12):
        self.columns = columns
        self.y = y
        self.is_cat = is_cat
        self.min_node_size = min_node_size
        self.max_depth = max_depth
        self.max_features = max_features
        self.rng = rng
        self.max_categories_exhaustive = max_categories_exhaustive
        self.n_features = len(columns)

    def grow(self, idx: np.ndarray) -> Node:
        """Grow a tree on the rows ``idx`` (repeats allowed, as in a bootstrap draw)."""
        idx = np.asarray(idx, dtype=np.intp)
        if idx.size == 0:
            raise EmptyInputError("Cannot grow a tree on zero rows.")
        return self._grow(idx, 0)

    def _grow(self, idx: np.ndarray, depth: int) -> Node:
        yy = self.y[idx]
        mu = float(yy.mean())
        sse = float(((yy - mu) ** 2).sum())
        n = int(idx.size)

        if n < 2 * self.min_node_size:
            return LeafNode(value=mu, n_samples=n, sse=sse)
        if self.max_depth is not None and depth >= self.max_depth:
            return LeafNode(value=mu, n_samples=n, sse=sse)
        if sse <= 0.0 or yy.min() == yy.max():
            return LeafNode(value=mu, n_samples=n, sse=sse)

        best = self._best_split(idx, yy - mu, sse)
        if best is None:
            return LeafNode(value=mu, n_samples=n, sse=sse)
        rule, child_sse = best
        if sse - child_sse <= _SPLIT_TOLERANCE * sse:
            return LeafNode(value=mu, n_samples=n, sse=sse)

        mask = rule.left_mask(self.columns[rule.feature_index][idx])
        left = self._grow(idx[mask], depth + 1)
        right = self._grow(idx[~mask], depth + 1)
        return InternalNode(value=mu, n_samples=n, sse=sse, split=rule, left=left, right=right)

    def _candidate_features(self) -> np.ndarray:
        if self.max_features >= self.n_features:
            return np.arange(self.n_features)
        return np.sort(self.rng.choice(self.n_features, size=self.max_features, replace=False))

    def _best_split(self, idx: np.ndarray, resid: np.ndarray, sse_parent: float):
        """Return ``(SplitRule, total child SSE)`` for the best candidate, or None.

        ``resid`` is the node target centred on the node mean, which keeps the
        prefix-sum SSE formula well conditioned.
        """
        best = None
        best_sse = math.inf
        # later features must beat the incumbent by more than rounding noise
        tie = _SPLIT_TOLERANCE * max(sse_parent, 1e-300)
        for j in self._candidate_features():
            if self.is_cat[j]:
                found = self._best_categorical(j, idx, resid, tie)
            else:
                found = self._best_numeric(j, idx, resid, tie)
            if found is not None and found[1] < best_sse - tie:
                best, best_sse = found, found[1]
        return best

    def _best_numeric(self, j: int, idx: np.ndarray, resid: np.ndarray, tie: float = 0.0):
        vals = self.columns[j][idx]
        order = np.argsort(vals, kind="mergesort")
        v = vals[order]
        r = resid[order]
        n = v.size
        mns = self.min_node_size

        cs = np.cumsum(r)[:-1]
        cs2 = np.cumsum(r * r)[:-1]
        S, S2 = float(r.sum()), float((r * r).sum())
        nl = np.arange(1, n, dtype=float)
        nr = n - nl
        total = (cs2 - cs * cs / nl) + ((S2 - cs2) - (S - cs) ** 2 / nr)

        valid = (v[:-1] != v[1:]) & (nl >= mns) & (nr >= mns)
        if not valid.any():
            return None
        total = np.where(valid, total, np.inf)
        # near-equal totals count as ties; the smallest threshold wins
        i = int(np.flatnonzero(total <= total.min() + tie)[0])
        thr = 0.5 * (v[i] + v[i + 1])
        if thr <= v[i]:
            thr = v[i + 1]
        return SplitRule(feature_index=int(j), kind="numeric", threshold=float(thr)), float(total[i])

    def _best_categorical(self, j: int, idx: np.ndarray, resid: np.ndarray, tie: float = 0.0):
        vals = self.columns[j][idx]
        cats = sorted(set(vals), key=lambda c: (str(type(c)), str(c)))
        k = len(cats)
        if k < 2:
            return None
        pos = {c: i for i, c in enumerate(cats)}
        codes = np.fromiter((pos[v] for v in vals), dtype=np.intp, count=vals.size)
        cnt = np.bincount(codes, minlength=k).astype(float)
        s = np.bincount(codes, weights=resid, minlength=k)
        s2 = np.bincount(codes, weights=resid * resid, minlength=k)

        if k <= self.max_categories_exhaustive:
            # first category fixed on the left so each partition appears once
            masks = np.arange(0, (1 << (k - 1)) - 1)
            bits = ((masks[:, None] >> np.arange(k - 1)) & 1).astype(bool)
            left = np.hstack([np.ones((masks.size, 1), dtype=bool), bits])
            ordered = None
        else:
            means = s / cnt
            ordered = np.argsort(means, kind="mergesort")
            left = np.zeros((k - 1, k), dtype=bool)
            for t in range(1, k):
                left[t - 1, ordered[:t]] = True

        L = left.astype(float)
        nl, sl, s2l = L @ cnt, L @ s, L @ s2
        nr, sr, s2r = cnt.sum() - nl, s.sum() - sl, s2.sum() - s2l
        valid = (nl >= self.min_node_size) & (nr >= self.min_node_size)
        if not valid.any():
            return None
        with np.errstate(divide="ignore", invalid="ignore"):
            total = (s2l - sl * sl / nl) + (s2r - sr * sr / nr)
        total = np.where(valid, total, np.inf)
        i = int(np.flatnonzero(total <= total.min() + tie)[0])
        subset = frozenset(c for c, flag in zip(cats, left[i]) if flag)
        return SplitRule(feature_index=int(j), kind="categorical", threshold=subset), float(total[i])


# ----------------------------- Regressor -----------------------------


class CARTRegressor(RegressorMixin, BaseEstimator):
    r"""
    CARTRegressor(min_node_size=5, max_depth=None, max_features=None, ccp_alpha=0.0,
                  categorical_features=None, infer_categorical=True, feature_names=None,
                  max_categories_exhaustive=12, random_state=None, verbose=0)

    A least-squares regression tree with a scikit-learn–style API.

    **Core behavior**

    - **Split criterion**: total child **SSE**. Numeric thresholds are the midpoints
      between consecutive distinct sorted values; rows with ``x < threshold`` go left.
      Categorical features use subset splits (exhaustive up to
      `max_categories_exhaustive`, ordered-by-mean scan otherwise).
    - **Ties**: the first feature in column order wins, then the smallest threshold.
    - **Stopping**: a node becomes a leaf when it has fewer than ``2 * min_node_size``
      rows, sits at `max_depth`, or no candidate split lowers its SSE.
    - **Feature sampling**: with `max_features` below the column count, a fresh random
      subset of features is considered at every split (random-forest trees).
    - **Post-pruning**: cost-complexity (weakest-link) pruning controlled by `ccp_alpha`.

    Parameters
    ----------
    min_node_size : int, default=5
        Minimum number of training rows on either side of any split.
    max_depth : int or None, default=None
        Maximum depth; ``None`` grows until the other stopping rules apply.
    max_features : int, float, {"sqrt", "third"} or None, default=None
        Features considered per split.  ``None`` uses all of them.
    ccp_alpha : float, default=0.0
        Complexity penalty per leaf; ``0`` keeps the fully grown tree.
    categorical_features : sequence of int or str, optional
        Indices or names of categorical columns.
    infer_categorical : bool, default=True
        Also treat columns holding strings or booleans as categorical.
    feature_names : sequence of str, optional
        Column names; taken from a DataFrame's columns when omitted.
    max_categories_exhaustive : int, default=12
        Up to this cardinality every category subset is evaluated.  At most
        20, since the search is exponential in this value.
    random_state : int, SeedSequence or Generator, optional
        Seed for per-split feature sampling.  Unused when all features are used.
    verbose : int, default=0
        Fit summaries are logged at INFO instead of DEBUG when positive.

    Attributes
    ----------
    tree_ : LeafNode or InternalNode
        Root of the fitted (and possibly pruned) tree.
    full_tree_ : LeafNode or InternalNode
        Root of the tree before pruning.
    max_features_ : int
        Resolved number of features sampled per split.
    n_features_in_ : int
    feature_names_ : list[str]
    is_cat_ : ndarray of bool
    """

    def __init__(self,
                 min_node_size: int = 5,
                 max_depth: Optional[int] = None,
                 max_features=None,
                 ccp_alpha: float = 0.0,
                 categorical_features: Optional[Iterable[int | str]] = None,
                 infer_categorical: bool = True,
                 feature_names: Optional[List[str]] = None,
                 max_categories_exhaustive: int = 12,
                 random_state: RandomStateLike = None,
                 verbose: int = 0):
        self.min_node_size = min_node_size
        self.max_depth = max_depth
        self.max_features = max_features
        self.ccp_alpha = ccp_alpha
        self.categorical_features = categorical_features
        self.infer_categorical = infer_categorical
        self.feature_names = feature_names
        self.max_categories_exhaustive = max_categories_exhaustive
        self.random_state = random_state
        self.verbose = verbose

    # ----------------------------- Public API -----------------------------

    def fit(self, X, y):
        min_node_size, max_depth = self._check_growth_params()
        if not isinstance(self.ccp_alpha, numbers.Real) or self.ccp_alpha < 0:
            raise InvalidConfigurationError(f"ccp_alpha must be >= 0, got {self.ccp_alpha!r}.")

        X, df_names = as_2d_object_array(X)
        if X.shape[0] == 0:
            raise EmptyInputError("Cannot fit a tree on zero rows.")
        y = as_target(y, X.shape[0])
        schema = FeatureSchema.infer(X, self.feature_names if self.feature_names is not None else df_names,
                                     self.categorical_features, self.infer_categorical)
        columns = schema.encode(X)

        self._schema = schema
        self.feature_names_ = schema.feature_names
        self.is_cat_ = schema.is_cat
        self.n_features_in_ = schema.n_features
        self.max_features_ = resolve_max_features(self.max_features, schema.n_features)

        grower = TreeGrower(columns, y, schema.is_cat,
                            min_node_size=min_node_size, max_depth=max_depth,
                            max_features=self.max_features_, rng=as_generator(self.random_state),
                            max_categories_exhaustive=self.max_categories_exhaustive)
        self.full_tree_ = grower.grow(np.arange(X.shape[0]))
        self.tree_ = prune_tree(self.full_tree_, float(self.ccp_alpha)) if self.ccp_alpha > 0 else self.full_tree_

        if y.min() == y.max():
            msg = "Training target is constant; the fitted tree is a single leaf."
            logger.warning(msg)
            warnings.warn(msg, DegenerateTargetWarning, stacklevel=2)
        logger.log(fit_log_level(self.verbose),
                   "Fitted tree on {} rows x {} features: {} leaves (unpruned {}), depth {}",
                   X.shape[0], schema.n_features, self.tree_.n_leaves,
                   self.full_tree_.n_leaves, self.tree_.depth)
        return self

    def predict(self, X):
        self._check_fitted()
        columns, n = self._encode(X)
        out = np.empty(n, dtype=float)
        predict_rows(self.tree_, columns, np.arange(n), out)
        return out

    def apply(self, X):
        """Index of the leaf (numbered in pre-order) that each row lands in."""
        self._check_fitted()
        columns, n = self._encode(X)
        out = np.empty(n, dtype=np.intp)
        apply_rows(self.tree_, columns, np.arange(n), out)
        return out

    def get_n_leaves(self) -> int:
        self._check_fitted()
        return self.tree_.n_leaves

    def get_depth(self) -> int:
        self._check_fitted()
        return self.tree_.depth

    def cost_complexity_pruning_path(self, X, y) -> CostComplexityPath:
        """Grow an unpruned tree on ``X, y`` and return its weakest-link pruning path.

        The estimator itself is left untouched.
        """
        est = clone(self).set_params(ccp_alpha=0.0)
        est.fit(X, y)
        return cost_complexity_path(est.tree_)

    @property
    def sse_reduction_(self) -> np.ndarray:
        """Total training-SSE reduction achieved by splits on each feature."""
        self._check_fitted()
        return sse_reduction_by_feature(self.tree_, self.n_features_in_)

    @property
    def feature_importances_(self) -> np.ndarray:
        red = self.sse_reduction_
        total = red.sum()
        return red / total if total > 0 else red

    # ----------------------------- Pretty / Rules / Graphviz -----------------------------

    def _maybe_feature_names(self, feature_names):
        return list(feature_names) if feature_names is not None else self.feature_names_

    def export_text(self, feature_names: Optional[List[str]] = None) -> str:
        """Indented ``if/else`` rendering of the fitted tree."""
        self._check_fitted()
        fn = self._maybe_feature_names(feature_names)
        lines: List[str] = []
        self._text_node(self.tree_, "", fn, lines)
        return "\n".join(lines)

    def _text_node(self, node: Node, indent: str, fn, lines: List[str]):
        if node.is_leaf:
            lines.append(f"{indent}Predict {node.value:.4f} (N={node.n_samples})")
            return
        name = fn[node.split.feature_index]
        lines.append(f"{indent}if {node.split.describe(name)}:")
        self._text_node(node.left, indent + "  ", fn, lines)
        lines.append(f"{indent}else:")
        self._text_node(node.right, indent + "  ", fn, lines)

    def print_tree(self, feature_names: Optional[List[str]] = None) -> None:
        """Pretty‑print the fitted regression tree to ``stdout``."""
        print(self.export_text(feature_names))

    def export_rules(self, feature_names: Optional[List[str]] = None) -> List[str]:
        """
        Export all decision rules in the fitted regression tree.

        Each rule describes a path from the root to a leaf and reports the
        predicted value along with the number of training rows in the leaf.

        Returns
        -------
        list[str]
            Strings of the form ``"<antecedent> => value=<prediction> (N=<rows>)"``.
        """
        self._check_fitted()
        fn = self._maybe_feature_names(feature_names)
        rules: List[str] = []
        self._collect_rules(self.tree_, [], rules, fn)
        return rules

    def _collect_rules(self, node: Node, parts: List[str], rules: List[str], fn):
        if node.is_leaf:
            antecedent = " AND ".join(parts) if parts else "<root>"
            rules.append(f"{antecedent} => value={node.value:.6g} (N={node.n_samples})")
            return
        name = fn[node.split.feature_index]
        self._collect_rules(node.left, parts + [node.split.describe(name, left=True)], rules, fn)
        self._collect_rules(node.right, parts + [node.split.describe(name, left=False)], rules, fn)

    def predict_rule(self, X, feature_names: Optional[List[str]] = None) -> List[str]:
        """Return the decision rule antecedent followed by each input row."""
        self._check_fitted()
        Xp, _ = as_2d_object_array(X)
        fn = self._maybe_feature_names(feature_names)
        return [self._trace_rule(x, fn) for x in Xp]

    def _trace_rule(self, x, fn) -> str:
        parts = []
        node = self.tree_
        while not node.is_leaf:
            rule = node.split
            left = rule.goes_left(x[rule.feature_index])
            parts.append(rule.describe(fn[rule.feature_index], left=left))
            node = node.left if left else node.right
        return " AND ".join(parts) if parts else "<root>"

    def export_graphviz(self, filename: str = "cart_tree", feature_names: Optional[List[str]] = None,
                        format: str = "png") -> str:
        """
        Export the regression tree with Graphviz.

        If ``format='dot'`` the DOT source is written directly to disk without
        invoking the external ``dot`` binary.  For other formats the method
        calls Graphviz and falls back to writing a ``.dot`` file when the
        binary is unavailable.

        Returns
        -------
        str
            Path to the written file.
        """
        self._check_fitted()
        fn = self._maybe_feature_names(feature_names)
        try:
            from graphviz import Digraph
        except ImportError as e:
            raise RuntimeError("Please install the 'graphviz' Python package.") from e
        dot = Digraph(comment="CARTRegressor", format=format)
        self._add_graph_nodes(dot, self.tree_, "root", fn)
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        try:
            dot.render(filename, cleanup=True)
            return f"{filename}.{format}"
        except Exception as e:
            logger.warning("Graphviz rendering failed ({}); writing DOT source instead", e)
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path

    def _add_graph_nodes(self, dot, node: Node, node_id: str, fn):
        if node.is_leaf:
            dot.node(node_id, f"Leaf\nvalue={node.value:.6g}\nN={node.n_samples}")
            return
        dot.node(node_id, f"{node.split.describe(fn[node.split.feature_index])}\nN={node.n_samples}")
        left_id, right_id = node_id + "L", node_id + "R"
        dot.edge(node_id, left_id, label="True")
        dot.edge(node_id, right_id, label="False")
        self._add_graph_nodes(dot, node.left, left_id, fn)
        self._add_graph_nodes(dot, node.right, right_id, fn)

    # ----------------------------- Internals -----------------------------

    def _check_growth_params(self) -> Tuple[int, Optional[int]]:
        min_node_size = _check_int("min_node_size", self.min_node_size, 1)
        max_depth = _check_int("max_depth", self.max_depth, 1, allow_none=True)
        _check_int("max_categories_exhaustive", self.max_categories_exhaustive, 2,
                   maximum=MAX_CATEGORIES_EXHAUSTIVE)
        return min_node_size, max_depth

    def _check_fitted(self):
        if getattr(self, "tree_", None) is None:
            raise NotFittedError(_NOT_FITTED)

    def _encode(self, X) -> Tuple[List[np.ndarray], int]:
        X, _ = as_2d_object_array(X)
        return self._schema.encode(X), X.shape[0]

    @property
    def leaves_(self) -> List[LeafNode]:
        self._check_fitted()
        return list(iter_leaves(self.tree_))
