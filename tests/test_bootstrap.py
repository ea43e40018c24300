import numpy as np
import pytest
from cartforest import EmptyInputError, draw_bootstrap, spawn_generators


def test_oob_fraction_near_one_over_e():
    sample = draw_bootstrap(1000, 42)
    assert 0.30 <= sample.oob_fraction <= 0.43


def test_draw_covers_range_and_complement():
    sample = draw_bootstrap(200, 7)
    assert sample.indices.shape == (200,)
    assert sample.indices.min() >= 0 and sample.indices.max() < 200
    drawn = set(sample.indices.tolist())
    oob = set(sample.oob_indices.tolist())
    assert drawn.isdisjoint(oob)
    assert drawn | oob == set(range(200))
    assert np.array_equal(sample.oob_indices, np.sort(sample.oob_indices))
    assert sample.oob_mask().sum() == len(oob)


def test_draw_is_reproducible():
    a = draw_bootstrap(50, 3)
    b = draw_bootstrap(50, np.random.default_rng(3))
    c = draw_bootstrap(50, 4)
    assert np.array_equal(a.indices, b.indices)
    assert not np.array_equal(a.indices, c.indices)


def test_zero_rows_rejected():
    with pytest.raises(EmptyInputError):
        draw_bootstrap(0, 1)


def test_spawned_generators_are_prefix_stable():
    short = [g.integers(0, 1000, size=5) for g in spawn_generators(11, 3)]
    long = [g.integers(0, 1000, size=5) for g in spawn_generators(11, 6)]
    for a, b in zip(short, long):
        assert np.array_equal(a, b)
    assert not np.array_equal(long[0], long[1])


def test_seed_objects_are_not_consumed():
    seq = np.random.SeedSequence(5)
    gen = np.random.default_rng(5)
    for seed in (seq, gen):
        a = [g.integers(0, 1000, size=4) for g in spawn_generators(seed, 3)]
        b = [g.integers(0, 1000, size=4) for g in spawn_generators(seed, 3)]
        assert all(np.array_equal(x, y) for x, y in zip(a, b))


def test_single_row():
    sample = draw_bootstrap(1, 0)
    assert list(sample.indices) == [0]
    assert sample.oob_indices.size == 0
