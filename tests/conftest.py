import numpy as np
import pytest

HOUSING_FEATURES = ["crim", "zn", "indus", "chas", "nox", "rm", "age",
                    "dis", "rad", "tax", "ptratio", "black", "lstat"]


def make_housing_like(n_rows=506, seed=0):
    """Synthetic stand-in for the 506 x 13 housing table with target ``value``."""
    rng = np.random.default_rng(seed)
    X = rng.normal(size=(n_rows, len(HOUSING_FEATURES)))
    X[:, 3] = rng.integers(0, 2, size=n_rows)
    value = (22.0 + 6.0 * X[:, 5] - 4.0 * np.abs(X[:, 12]) + 1.5 * X[:, 3]
             + 2.0 * (X[:, 7] > 0.5) + rng.normal(scale=1.0, size=n_rows))
    return X, value


@pytest.fixture
def housing():
    return make_housing_like()


@pytest.fixture
def small_regression():
    rng = np.random.default_rng(1)
    X = rng.uniform(-2, 2, size=(150, 5))
    y = 3.0 * X[:, 0] + np.sin(2 * X[:, 1]) + rng.normal(scale=0.3, size=150)
    return X, y
