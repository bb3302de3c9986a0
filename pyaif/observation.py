#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
OBSERVATION MODELS (A)

The observation model encodes the agent's knowledge about what it will sense in
each hidden state: "If the world is in state s, what observation o will I see?"
It serves two purposes:

1. PERCEPTION: turning an observation into a belief update (what states could
   have caused what I just saw?)
2. PREDICTION: turning predicted states into predicted observations, which is
   what Expected Free Energy is scored on during planning

- ``DiscreteObservation``: fixed P(o|s) over finite observation and state sets
- ``DirichletObservation``: P(o|s) derived from learnt Dirichlet pseudo-counts
- ``GaussianObservation``: linear-Gaussian sensor y = c·x + b + ε for 1-D states
"""

import logging

import numpy as np

from pyaif import utils
from pyaif.beliefs import DiscreteBelief, GaussianBelief
from pyaif.inference import update_posterior_states_gaussian
from pyaif.learning import update_obs_likelihood_dirichlet
from pyaif.maths import norm_dist

logger = logging.getLogger(__name__)


def _parse_observations(nested, what):
    """
    Turn ``observation -> state -> value`` into (observations, states, array[observation, state]).
    """
    if not isinstance(nested, dict):
        raise TypeError(f'{what} must be a dict of the form observation -> state -> value')

    observations = tuple(nested.keys())
    if len(observations) == 0:
        raise ValueError(f"{what} must declare at least one observation")

    states = tuple(nested[observations[0]].keys())
    if len(states) == 0:
        raise ValueError(f"{what} must declare at least one state")

    index = utils.labels_to_index(states)
    arr = np.zeros((len(observations), len(states)))
    for o_idx, observation in enumerate(observations):
        utils.check_unknown_labels(nested[observation].keys(), index, "state")
        arr[o_idx, :] = utils.dist_to_vector(nested[observation], states)

    return observations, states, arr


class DiscreteObservation(object):
    """
    Fixed discrete observation model P(o|s).

    >>> observation = DiscreteObservation({
    ...     "see_safe": {"safe": 0.9, "danger": 0.1},
    ...     "see_danger": {"safe": 0.1, "danger": 0.9},
    ... })
    >>> observation.probability("see_safe", "danger")
    0.1

    Parameters
    ----------
    matrix: ``dict``
        Nested mapping ``observation -> state -> probability``. For every state the
        probabilities over observations must sum to one.
    """

    learnable = False

    def __init__(self, matrix):
        self._observations, self._states, A = _parse_observations(matrix, "Observation matrix")
        self._obs_index = utils.labels_to_index(self._observations)
        self._state_index = utils.labels_to_index(self._states)

        # For each state, P(o|s) over all observations must be a proper distribution
        assert utils.is_normalized(A), "Observation matrix is not normalized (i.e. for every state, the probabilities over observations must sum to 1.0)"
        self._A = A

    @property
    def observations(self):
        return self._observations

    @property
    def states(self):
        return self._states

    @property
    def A(self):
        """
        Observation array indexed ``[observation, state]``.
        """
        return self._A

    @property
    def matrix(self):
        """
        Nested ``observation -> state -> probability`` view of ``A``.
        """
        A = self.A
        return {
            observation: utils.vector_to_dist(A[o_idx], self._states)
            for o_idx, observation in enumerate(self._observations)
        }

    def probability(self, observation, state):
        """
        P(observation | state), or 0 if either label is unknown.
        """
        o_idx = self._obs_index.get(observation)
        s_idx = self._state_index.get(state)
        if o_idx is None or s_idx is None:
            return 0.0
        return float(self.A[o_idx, s_idx])

    def get_likelihood(self, observation):
        """
        Likelihood P(observation | s) for every state, as a mapping.

        An unknown observation returns an empty mapping, which a belief update
        reads as likelihood 0 everywhere.
        """
        o_idx = self._obs_index.get(observation)
        if o_idx is None:
            return {}
        return utils.vector_to_dist(self.A[o_idx], self._states)

    def expected_observation(self, belief):
        """
        Predicted observation distribution Q(o) = Σ_s P(o|s) Q(s).
        """
        qo = self.A.dot(belief.aligned(self._states))
        return utils.vector_to_dist(qo, self._observations)

    def update(self, belief, observation):
        """
        Bayesian posterior of ``belief`` after receiving ``observation``.
        """
        return belief.update(self.get_likelihood(observation))


class DirichletObservation(DiscreteObservation):
    """
    Learnable observation model backed by Dirichlet concentrations.

    The probabilities are the column-normalised pseudo-counts,

    P(o|s) = a[o][s] / Σ_o' a[o'][s]

    and each observation o* adds the posterior belief to its row:

    a[o*][s] += Q(s)

    A weak prior (small counts) is quickly overwritten by experience; a strong
    prior (large counts) needs a lot of evidence to move.

    >>> observation = DirichletObservation({
    ...     "see_safe": {"safe": 2, "danger": 1},
    ...     "see_danger": {"safe": 1, "danger": 2},
    ... })
    >>> observation.learn("see_safe", {"safe": 0.8, "danger": 0.2})

    Parameters
    ----------
    concentrations: ``dict``
        Nested mapping ``observation -> state -> count``, all strictly positive.
        The mapping is copied, never aliased.
    lr: ``float``, default 1.0
        Learning rate applied to every update.
    """

    learnable = True

    def __init__(self, concentrations, lr=1.0):
        self._observations, self._states, pA = _parse_observations(concentrations, "Observation concentrations")
        self._obs_index = utils.labels_to_index(self._observations)
        self._state_index = utils.labels_to_index(self._states)

        utils.check_positive(pA, "Observation concentrations")
        self.pA = pA
        self.lr = lr
        self._A = None

    @property
    def A(self):
        if self._A is None:
            self._A = norm_dist(self.pA, axis=0)
        return self._A

    @property
    def concentrations(self):
        """
        Snapshot of the pseudo-counts as ``observation -> state -> count``.
        """
        return {
            observation: utils.vector_to_dist(self.pA[o_idx], self._states)
            for o_idx, observation in enumerate(self._observations)
        }

    def learn(self, observation, posterior_dist):
        """
        Add the evidence of one observation to the concentrations.

        Parameters
        ----------
        observation:
            The observation that was received. Must be one of ``observations``.
        posterior_dist: ``dict`` or ``DiscreteBelief``
            Posterior belief over states after the observation.
        """
        if observation not in self._obs_index:
            raise KeyError(f"Unknown observation {observation!r}; declared observations are {list(self._observations)}")

        if isinstance(posterior_dist, DiscreteBelief):
            qs = posterior_dist.aligned(self._states)
        else:
            qs = utils.dist_to_vector(posterior_dist, self._states)

        self.pA = update_obs_likelihood_dirichlet(self.pA, self._obs_index[observation], qs, self.lr)
        self._A = None

        logger.debug("observation concentrations updated for %r", observation)


class GaussianObservation(object):
    """
    Linear-Gaussian observation model y = c·x + b + ε, ε ~ N(0, R).

    >>> observation = GaussianObservation(scale=1.0, noise=0.1)
    >>> posterior = observation.update(GaussianBelief(1.0, 0.1), 3.2)
    >>> round(posterior.mean, 2), round(posterior.variance, 3)
    (2.1, 0.05)

    Parameters
    ----------
    scale: ``float``
        Observation gain c.
    noise: ``float``
        Observation noise variance R, strictly positive.
    bias: ``float``, default 0.0
        Constant offset b.
    """

    learnable = False

    def __init__(self, scale, noise, bias=0.0):
        if not np.isfinite(scale) or not np.isfinite(bias):
            raise ValueError("Observation scale and bias must be finite")
        if not np.isfinite(noise) or noise <= 0:
            raise ValueError(f"Observation noise must be a positive variance, got {noise}")
        self.scale = float(scale)
        self.bias = float(bias)
        self.noise = float(noise)

    def expected_observation(self, belief):
        """
        Predicted observation mean E[y] = c·μ + b.
        """
        return self.scale * belief.mean + self.bias

    def update(self, belief, observation):
        """
        Kalman-filter posterior of ``belief`` after observing the scalar ``observation``.
        """
        mean, variance = update_posterior_states_gaussian(
            belief.mean, belief.variance, observation, self.scale, self.bias, self.noise
        )
        return GaussianBelief(mean, variance)
