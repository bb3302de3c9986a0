#!/usr/bin/env python
# -*- coding: utf-8 -*-

""" Utility functions

Seeded randomness, label/array conversion helpers and distribution checks shared
by the belief, model and agent modules.
"""

import math

import numpy as np

NORM_TOL = 1e-6 # tolerance used when checking that distributions sum to one


class Random(object):
    """
    Seeded source of randomness owned by a single agent.

    Wraps a ``numpy.random.Generator`` so that every agent carries its own stream
    of draws. Two generators built from the same seed produce the same sequence,
    which is what makes action selection reproducible. The generator is plain
    mutable state: it is not thread-safe and must not be shared between agents
    that run concurrently.

    >>> rng = Random(42)
    >>> u = rng.next()          # uniform draw in [0, 1)
    >>> z = rng.gaussian()      # standard normal draw
    >>> rng.reset(42)           # replay the same sequence
    """

    def __init__(self, seed=None):
        self.reset(seed)

    def reset(self, seed=None):
        """
        Restart the generator from ``seed``. ``None`` seeds from operating system entropy.

        Integer seeds are reduced to their low 32 bits, so negative seeds are
        accepted and ``seed`` and ``seed + 2**32`` give the same sequence.
        """
        if seed is not None:
            seed = int(seed) & 0xFFFFFFFF
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next(self):
        """
        Draw a uniform float in ``[0, 1)``.
        """
        return float(self._rng.random())

    def gaussian(self):
        """
        Draw from N(0, 1) with the Box-Muller transform.

        Two uniform draws are consumed per call. The first draw is reflected to
        ``(0, 1]`` so the logarithm is always finite.
        """
        u1 = 1.0 - self.next()
        u2 = self.next()
        return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def sample_index(probabilities, random):
    """
    Sample an index from a categorical distribution by walking its cumulative sum.

    Parameters
    ----------
    probabilities: 1D ``numpy.ndarray`` or ``list``
        Probability of each index.
    random: ``Random``
        Source of the single uniform draw used for sampling.

    Returns
    -------
    index: ``int``
        First index whose cumulative probability exceeds the draw. If floating
        point rounding leaves the draw above the final cumulative value, the last
        index is returned.
    """
    u = random.next()
    cumulative = 0.0
    for idx, p in enumerate(probabilities):
        cumulative += p
        if u < cumulative:
            return idx
    return len(probabilities) - 1


def is_normalized(dist, axis=0, tol=NORM_TOL):
    """
    Check that ``dist`` sums to one along ``axis`` (every slice, for arrays with more than one dimension).
    """
    return np.allclose(np.asarray(dist).sum(axis=axis), 1.0, atol=tol)


def labels_to_index(labels):
    """
    Map each label to its position in ``labels``.
    """
    return {label: idx for idx, label in enumerate(labels)}


def dist_to_vector(dist, labels):
    """
    Convert a mapping ``label -> value`` into a vector ordered by ``labels``.

    Labels absent from the mapping read as 0, mirroring the permissive lookup
    used everywhere else in the package.
    """
    return np.array([float(dist.get(label, 0.0)) for label in labels], dtype=float)


def vector_to_dist(vector, labels):
    """
    Convert a vector ordered by ``labels`` back into a plain ``dict`` of floats.
    """
    return {label: float(value) for label, value in zip(labels, vector)}


def check_unknown_labels(keys, labels, what):
    """
    Raise ``ValueError`` if any of ``keys`` is not one of the declared ``labels``.
    """
    unknown = [key for key in keys if key not in labels]
    if unknown:
        raise ValueError(
            f"Unknown {what} {unknown}; declared {what}s are {list(labels)}"
        )


def check_positive(arr, what):
    """
    Raise ``ValueError`` unless every entry of ``arr`` is a finite, strictly positive number.
    """
    arr = np.asarray(arr, dtype=float)
    if not np.all(np.isfinite(arr)) or np.any(arr <= 0):
        raise ValueError(f"{what} must be finite and strictly positive")
