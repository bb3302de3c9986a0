#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
BELIEFS OVER HIDDEN STATES

An Active Inference agent never sees the true state of the world. Instead it keeps
a belief Q(s): a probability distribution over the states the world could be in.
This module provides the two kinds of belief the agent supports:

1. DISCRETE BELIEFS (``DiscreteBelief``):
   - A categorical distribution over a finite, ordered set of named states
   - Updated with Bayes' rule when an observation arrives
   - Example: {"light_on": 0.8, "light_off": 0.2}

2. GAUSSIAN BELIEFS (``GaussianBelief``):
   - A 1-D Normal distribution N(mean, variance) over a continuous state
   - Updated with a Kalman filter (see ``pyaif.observation.GaussianObservation``)

Both kinds are treated as values: updates return new beliefs, and the agent hands
out copies so that callers can never mutate its internal state.
"""

import math

import numpy as np

from pyaif import utils
from pyaif.inference import update_posterior_states
from pyaif.maths import entropy, kl_div


class DiscreteBelief(object):
    """
    Categorical belief over a finite set of states.

    The order of the states is the order of the mapping used to build the belief,
    and it is the order used to break ties in ``argmax``.

    >>> belief = DiscreteBelief({"sunny": 0.7, "rainy": 0.3})
    >>> belief.argmax()
    'sunny'
    >>> posterior = belief.update({"sunny": 0.1, "rainy": 0.9})
    >>> posterior.argmax()
    'rainy'

    Parameters
    ----------
    distribution: ``dict``
        Mapping from state label to probability. Values must be non-negative and
        should sum to one (they are not renormalised here).
    """

    def __init__(self, distribution):
        if isinstance(distribution, DiscreteBelief):
            distribution = distribution.to_dict()
        if not isinstance(distribution, dict):
            raise TypeError(
                'Discrete belief must be built from a dict mapping states to probabilities'
            )
        if len(distribution) == 0:
            raise ValueError("Discrete belief needs at least one state")

        self._states = tuple(distribution.keys())
        self._index = utils.labels_to_index(self._states)
        self._values = np.array([float(distribution[s]) for s in self._states], dtype=float)

        if np.any(self._values < 0) or not np.all(np.isfinite(self._values)):
            raise ValueError("Discrete belief probabilities must be finite and non-negative")

    @classmethod
    def from_vector(cls, states, values):
        """
        Build a belief from a state ordering and an aligned probability vector.
        """
        return cls(utils.vector_to_dist(values, states))

    @property
    def states(self):
        return self._states

    @property
    def values(self):
        return self._values.copy()

    def probability(self, state):
        """
        Probability of ``state``, or 0 if the state is not part of this belief.
        """
        idx = self._index.get(state)
        if idx is None:
            return 0.0
        return float(self._values[idx])

    def aligned(self, states):
        """
        Probability vector re-ordered to ``states``. States this belief does not know read as 0.
        """
        return np.array([self.probability(s) for s in states], dtype=float)

    def argmax(self):
        """
        Most probable state (MAP estimate).

        Scans the states in order and keeps the first one whose probability is
        strictly greater than the best seen so far, so ties go to the earliest state.
        """
        best_state = self._states[0]
        best_prob = 0.0
        for state, prob in zip(self._states, self._values):
            if prob > best_prob:
                best_prob = prob
                best_state = state
        return best_state

    def entropy(self):
        """
        Shannon entropy of the belief in nats.
        """
        return entropy(self._values)

    def kl(self, other):
        """
        KL divergence ``KL(self || other)``, measured over the states of this belief.

        A state that ``other`` assigns zero probability to is scored against a
        floor of 1e-10 instead of producing an infinite divergence.
        """
        return kl_div(self._values, other.aligned(self._states))

    def update(self, likelihood):
        """
        Bayesian belief update: posterior(s) ∝ likelihood(s) × prior(s).

        Parameters
        ----------
        likelihood: ``dict`` or 1D ``numpy.ndarray``
            P(observation | state) for each state. A ``dict`` may omit states,
            which then count as likelihood 0. An array must be aligned with ``states``.

        Returns
        -------
        posterior: ``DiscreteBelief``
            New belief, normalised to sum to one. If the weighted sum is exactly
            zero the posterior is left unnormalised, i.e. all zeros.
        """
        if isinstance(likelihood, dict):
            likelihood = utils.dist_to_vector(likelihood, self._states)
        else:
            likelihood = np.asarray(likelihood, dtype=float)
            if likelihood.shape != self._values.shape:
                raise ValueError(
                    f"Likelihood vector of shape {likelihood.shape} does not match the {len(self._states)} belief states"
                )

        posterior = update_posterior_states(likelihood, self._values)

        return DiscreteBelief.from_vector(self._states, posterior)

    def copy(self):
        return DiscreteBelief.from_vector(self._states, self._values)

    def to_dict(self):
        """
        Plain ``state -> probability`` mapping, for persistence or interop.
        """
        return utils.vector_to_dist(self._values, self._states)

    def __repr__(self):
        return f"DiscreteBelief({self.to_dict()!r})"


class GaussianBelief(object):
    """
    1-D Gaussian belief N(mean, variance) over a continuous hidden state.

    >>> belief = GaussianBelief(2.0, 0.5)
    >>> round(belief.entropy(), 3)
    1.072
    """

    def __init__(self, mean, variance):
        mean = float(mean)
        variance = float(variance)
        if not math.isfinite(mean):
            raise ValueError("Gaussian belief mean must be finite")
        if not math.isfinite(variance) or variance <= 0:
            raise ValueError(f"Gaussian belief variance must be positive, got {variance}")
        self._mean = mean
        self._variance = variance

    @property
    def mean(self):
        return self._mean

    @property
    def variance(self):
        return self._variance

    def entropy(self):
        """
        Differential entropy ½ log(2πe σ²) in nats.
        """
        return 0.5 * math.log(2.0 * math.pi * math.e * self._variance)

    def copy(self):
        return GaussianBelief(self._mean, self._variance)

    def to_dict(self):
        return {"mean": self._mean, "variance": self._variance}

    def __repr__(self):
        return f"GaussianBelief(mean={self._mean!r}, variance={self._variance!r})"
