import numpy as np
import pytest
from loguru import logger

from cartforest import CARTRegressor, ForestRegressor, enable_logging


@pytest.fixture
def xy():
    X = np.arange(40, dtype=float).reshape(20, 2)
    return X, X[:, 0] * 2.0


def test_silent_by_default(xy):
    X, y = xy
    seen = []
    handler_id = logger.add(seen.append, level="TRACE")
    try:
        CARTRegressor(verbose=1).fit(X, y)
    finally:
        logger.remove(handler_id)
    assert not [m for m in seen if m.record["name"].startswith("cartforest")]


def test_enable_logging_routes_fit_messages(xy):
    X, y = xy
    messages = []
    handle = enable_logging(level="DEBUG", sink=messages.append)
    try:
        CARTRegressor(verbose=1).fit(X, y)
        ForestRegressor(n_estimators=20, random_state=0).fit(X, y)
    finally:
        handle.disable()
    text = "".join(str(m) for m in messages)
    assert "Fitted tree" in text
    assert "cartforest.regressor" in text

    messages.clear()
    CARTRegressor(verbose=1).fit(X, y)
    assert messages == []


def test_handle_as_context_manager(xy):
    X, y = xy
    messages = []
    with enable_logging(level="INFO", sink=messages.append):
        CARTRegressor(verbose=0).fit(X, y)
        assert not any("Fitted tree" in str(m) for m in messages)
        CARTRegressor(verbose=1).fit(X, y)
    assert any("Fitted tree" in str(m) for m in messages)


def test_level_is_respected_on_stderr(xy, capfd):
    X, y = xy
    messages = []
    with enable_logging(level="WARNING", sink=messages.append):
        CARTRegressor(verbose=1).fit(X, y)
    assert "Fitted tree" not in capfd.readouterr().err
    assert messages == []
