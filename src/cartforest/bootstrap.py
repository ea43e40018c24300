"""Bootstrap resampling with out-of-bag bookkeeping.

Every draw takes its own :class:`numpy.random.Generator` (or something that
can seed one) so that parallel units of work stay reproducible regardless of
execution order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

import numpy as np

from .exceptions import EmptyInputError

RandomStateLike = Union[None, int, np.random.SeedSequence, np.random.Generator]


@dataclass(frozen=True)
class BootstrapSample:
    """A bootstrap draw over ``n`` rows.

    Attributes
    ----------
    indices : ndarray of shape (n,)
        Row indices drawn uniformly with replacement.
    oob_indices : ndarray
        Sorted indices that never appear in ``indices``.
    """

    indices: np.ndarray
    oob_indices: np.ndarray

    @property
    def n_rows(self) -> int:
        return int(self.indices.shape[0])

    @property
    def oob_fraction(self) -> float:
        return self.oob_indices.shape[0] / self.n_rows

    def oob_mask(self) -> np.ndarray:
        mask = np.zeros(self.n_rows, dtype=bool)
        mask[self.oob_indices] = True
        return mask


def as_generator(random_state: RandomStateLike) -> np.random.Generator:
    """Turn a seed, ``SeedSequence`` or ``Generator`` into a ``Generator``."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


def root_seed_sequence(random_state: RandomStateLike) -> np.random.SeedSequence:
    """Return a fresh ``SeedSequence`` to spawn children from.

    ``SeedSequence`` and ``Generator`` inputs are copied rather than spawned from
    directly: spawning advances their child counter, and repeated calls must
    hand out the same children.
    """
    if isinstance(random_state, np.random.Generator):
        random_state = random_state.bit_generator.seed_seq
    if isinstance(random_state, np.random.SeedSequence):
        return np.random.SeedSequence(random_state.entropy, spawn_key=random_state.spawn_key,
                                      pool_size=random_state.pool_size)
    return np.random.SeedSequence(random_state)


def spawn_generators(random_state: RandomStateLike, count: int) -> List[np.random.Generator]:
    """Derive ``count`` independent generators from one seed.

    Children come from :meth:`numpy.random.SeedSequence.spawn`, so the first
    ``k`` generators are the same whatever ``count`` is, and the same seed object
    gives the same generators on every call.
    """
    return [np.random.default_rng(child) for child in root_seed_sequence(random_state).spawn(count)]


def draw_bootstrap(n: int, random_state: RandomStateLike = None) -> BootstrapSample:
    """Draw ``n`` row indices from ``[0, n)`` with replacement.

    Parameters
    ----------
    n : int
        Number of training rows.
    random_state : int, SeedSequence or Generator, optional
        Source of randomness for this draw.

    Returns
    -------
    BootstrapSample
        The draw and its out-of-bag complement.  For large ``n`` roughly
        ``1/e`` (about 36.8%) of the rows are out-of-bag.

    Raises
    ------
    EmptyInputError
        If ``n < 1``.
    """
    n = int(n)
    if n < 1:
        raise EmptyInputError("Cannot draw a bootstrap sample from zero rows.")
    rng = as_generator(random_state)
    indices = rng.integers(0, n, size=n)
    counts = np.bincount(indices, minlength=n)
    oob = np.flatnonzero(counts == 0)
    return BootstrapSample(indices=indices, oob_indices=oob)
