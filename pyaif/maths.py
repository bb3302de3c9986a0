#!/usr/bin/env python
# -*- coding: utf-8 -*-
# pylint: disable=no-member

""" Functions

Elementary vector maths used throughout the package: softmax/softmin, guarded
normalisation, entropy and KL divergence.
"""

import numpy as np
from scipy import special

KL_FLOOR = 1e-10 # substituted for q(s) = 0 inside kl_div()


def softmax(dist, beta=1.0):
    """
    Computes the softmax function on a vector of values, scaled by the precision ``beta``.

    P(i) = exp(beta * x_i) / sum_j exp(beta * x_j)

    Higher ``beta`` concentrates the mass on the maximum; ``beta = 0`` gives the
    uniform distribution.
    """
    dist = np.asarray(dist, dtype=float)
    return special.softmax(beta * dist)


def softmin(dist, beta=1.0):
    """
    Softmax of the negated values, so that lower values get higher probability.

    Used to turn expected free energies (lower is better) into a distribution
    over policies: P(pi) ∝ exp(-beta * G(pi)).
    """
    return softmax(-np.asarray(dist, dtype=float), beta)


def norm_dist(dist, axis=0):
    """
    Normalizes an array along ``axis`` so that every slice sums to one.

    Slices whose sum is zero are returned as all zeros rather than NaN.
    """
    dist = np.asarray(dist, dtype=float)
    totals = dist.sum(axis=axis, keepdims=True)
    safe = np.where(totals > 0, totals, 1.0)
    return np.where(totals > 0, dist / safe, 0.0)


def normalize(vector):
    """
    Normalize a 1D vector to sum to one (all zeros if it sums to zero).
    """
    return norm_dist(vector, axis=0)


def dot(a, b):
    """
    Inner product of two equally sized vectors.
    """
    return float(np.dot(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))


def entropy(dist):
    """
    Shannon entropy ``-sum p log p`` in nats, skipping zero-probability entries.
    """
    return float(special.entr(np.asarray(dist, dtype=float)).sum())


def kl_div(p, q):
    """
    Kullback-Leibler divergence ``KL(p || q) = sum p log(p / q)`` over entries with ``p > 0``.

    Where ``q`` is zero but ``p`` is not, ``q`` is replaced by ``KL_FLOOR`` so the
    result stays finite. This is a numerical-stability concession: the true
    divergence is infinite in that case.

    Parameters
    ----------
    p: 1D ``numpy.ndarray``
        The distribution the divergence is measured from.
    q: 1D ``numpy.ndarray``
        The reference distribution, aligned with ``p``.

    Returns
    -------
    kl: ``float``
    """
    p = np.asarray(p, dtype=float)
    q = np.asarray(q, dtype=float)
    q = np.where(q > 0, q, KL_FLOOR)
    return float(special.xlogy(p, p / q).sum())
