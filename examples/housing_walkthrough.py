import sys
from time import perf_counter

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from cartforest import (
    CARTRegressor,
    CrossValidationTuner,
    ForestRegressor,
    enable_logging,
    param_candidates,
)
from cartforest.metrics import root_mean_squared_error

# usage: python housing_walkthrough.py housing.csv   (506 rows, 13 features, target "value")
path = sys.argv[1] if len(sys.argv) > 1 else "housing.csv"
df = pd.read_csv(path)
y = df["value"].values
Xdf = df.drop(columns=["value"])
feats = list(Xdf.columns)

X_train, X_test, y_train, y_test = train_test_split(Xdf, y, train_size=380, random_state=1)
handle = enable_logging(level="INFO")

# single tree, then pruning penalty chosen by 10-fold CV
t0 = perf_counter()
full = CARTRegressor(min_node_size=10, verbose=1).fit(X_train, y_train)
print(f"fit: {perf_counter()-t0:.3f} s, {full.get_n_leaves()} leaves")
full.print_tree()

ccp = full.cost_complexity_pruning_path(X_train, y_train)
tuner = CrossValidationTuner(CARTRegressor(min_node_size=10),
                             param_candidates("ccp_alpha", np.unique(ccp.ccp_alphas)),
                             cv=10, random_state=0, verbose=1).fit(X_train, y_train)
pruned = tuner.best_estimator_
print(f"pruned tree: {pruned.get_n_leaves()} leaves, "
      f"test RMSE {root_mean_squared_error(y_test, pruned.predict(X_test)):.3f}")
for rule in pruned.export_rules():
    print(rule)

try:
    pruned.export_graphviz("housing_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")

# bagging (all features) vs random forest (a third of the features per split)
for name, max_features in [("bagging", None), ("random forest", "third")]:
    forest = ForestRegressor(n_estimators=500, max_features=max_features, min_node_size=5,
                             random_state=1, n_jobs=-1).fit(X_train, y_train)
    test_rmse = root_mean_squared_error(y_test, forest.predict(X_test))
    print(f"{name}: OOB RMSE {forest.oob_score_:.3f}, test RMSE {test_rmse:.3f}")
    importances = pd.Series(forest.feature_importances_, index=feats).sort_values(ascending=False)
    print(importances.head(5).to_string())

handle.disable()
