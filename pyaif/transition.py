#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
TRANSITION MODELS (B)

The transition model encodes the agent's knowledge about how actions change the
world: "If I take action a while the world is in state s, where will it be next?"
It is what lets the agent imagine the future during planning.

- ``DiscreteTransition``: fixed P(s'|s, a) over a finite state set
- ``DirichletTransition``: P(s'|s, a) derived from Dirichlet pseudo-counts that
  are learnt from experience
- ``GaussianTransition``: per-action deterministic function plus process noise,
  for 1-D continuous states

Every model exposes ``actions`` and ``predict(belief, action)``, and a
``learnable`` flag telling the agent whether it also implements ``learn``.
"""

import logging
from collections import namedtuple

import numpy as np

from pyaif import utils
from pyaif.algos import run_linearized_prediction
from pyaif.beliefs import DiscreteBelief, GaussianBelief
from pyaif.learning import update_state_likelihood_dirichlet
from pyaif.maths import norm_dist

logger = logging.getLogger(__name__)


def _parse_transitions(nested, what):
    """
    Turn ``action -> state -> next_state -> value`` into (actions, states, array[next, state, action]).

    The state ordering is taken from the first action. Cells missing from the
    mapping are 0; labels outside the declared state set are a configuration error.
    """
    if not isinstance(nested, dict):
        raise TypeError(f'{what} must be a dict of the form action -> state -> next_state -> value')

    actions = tuple(nested.keys())
    if len(actions) == 0:
        raise ValueError(f"{what} must declare at least one action")

    states = tuple(nested[actions[0]].keys())
    if len(states) == 0:
        raise ValueError(f"{what} must declare at least one state")

    index = utils.labels_to_index(states)
    arr = np.zeros((len(states), len(states), len(actions)))
    for a_idx, action in enumerate(actions):
        rows = nested[action]
        utils.check_unknown_labels(rows.keys(), index, "state")
        for state, row in rows.items():
            utils.check_unknown_labels(row.keys(), index, "state")
            arr[:, index[state], a_idx] = utils.dist_to_vector(row, states)

    return actions, states, arr


def _as_vector(dist, states):
    if isinstance(dist, DiscreteBelief):
        return dist.aligned(states)
    return utils.dist_to_vector(dist, states)


class DiscreteTransition(object):
    """
    Fixed discrete transition model P(s'|s, a).

    >>> transition = DiscreteTransition({
    ...     "turn_on": {
    ...         "dark": {"dark": 0.1, "light": 0.9},
    ...         "light": {"dark": 0.0, "light": 1.0},
    ...     },
    ...     "turn_off": {
    ...         "dark": {"dark": 1.0, "light": 0.0},
    ...         "light": {"dark": 0.9, "light": 0.1},
    ...     },
    ... })
    >>> transition.predict(DiscreteBelief({"dark": 1.0, "light": 0.0}), "turn_on").to_dict()
    {'dark': 0.1, 'light': 0.9}

    Parameters
    ----------
    matrix: ``dict``
        Nested mapping ``action -> current_state -> next_state -> probability``.
        Every (action, current_state) distribution must sum to one.
    """

    learnable = False

    def __init__(self, matrix):
        self._actions, self._states, B = _parse_transitions(matrix, "Transition matrix")
        self._action_index = utils.labels_to_index(self._actions)

        # Each column B[:, s, a] is P(next_state | s, a) and must be a proper distribution
        assert utils.is_normalized(B), "Transition matrix is not normalized (i.e. every action -> state -> next_state distribution must sum to 1.0)"
        self._B = B

    @property
    def actions(self):
        return self._actions

    @property
    def states(self):
        return self._states

    @property
    def B(self):
        """
        Transition array indexed ``[next_state, state, action]``.
        """
        return self._B

    @property
    def matrix(self):
        """
        Nested ``action -> state -> next_state -> probability`` view of ``B``.
        """
        B = self.B
        return {
            action: {
                state: utils.vector_to_dist(B[:, s_idx, a_idx], self._states)
                for s_idx, state in enumerate(self._states)
            }
            for a_idx, action in enumerate(self._actions)
        }

    def get_transition(self, state, action):
        """
        P(next_state | state, action) as a mapping, or an empty mapping for unknown labels.
        """
        a_idx = self._action_index.get(action)
        if a_idx is None or state not in self._states:
            return {}
        return utils.vector_to_dist(self.B[:, self._states.index(state), a_idx], self._states)

    def predict(self, belief, action):
        """
        Propagate a belief through the transition model: P(s') = Σ_s P(s'|s, a) × P(s).

        States the belief does not know read as 0, and an unknown action yields an
        all-zero prediction.
        """
        qs = belief.aligned(self._states)
        a_idx = self._action_index.get(action)
        if a_idx is None:
            return DiscreteBelief.from_vector(self._states, np.zeros(len(self._states)))
        return DiscreteBelief.from_vector(self._states, self.B[:, :, a_idx].dot(qs))


class DirichletTransition(DiscreteTransition):
    """
    Learnable transition model backed by Dirichlet concentrations.

    The probabilities are the normalised pseudo-counts,

    P(s'|s, a) = b[a][s][s'] / Σ_s'' b[a][s][s'']

    and each observed transition adds the outer product of the belief before the
    action and the belief after its outcome:

    b[a][s][s'] += Q_prior(s) × Q_posterior(s')

    The derived matrix is cached and only recomputed on the first read after
    ``learn`` changed the counts.

    Parameters
    ----------
    concentrations: ``dict``
        Nested mapping ``action -> current_state -> next_state -> count``. Every
        count must be strictly positive. The mapping is copied, never aliased.
    lr: ``float``, default 1.0
        Learning rate applied to every update.
    """

    learnable = True

    def __init__(self, concentrations, lr=1.0):
        self._actions, self._states, pB = _parse_transitions(concentrations, "Transition concentrations")
        self._action_index = utils.labels_to_index(self._actions)

        utils.check_positive(pB, "Transition concentrations")
        self.pB = pB
        self.lr = lr
        self._B = None

    @property
    def B(self):
        if self._B is None:
            self._B = norm_dist(self.pB, axis=0)
        return self._B

    @property
    def concentrations(self):
        """
        Snapshot of the pseudo-counts as ``action -> state -> next_state -> count``.
        """
        return {
            action: {
                state: utils.vector_to_dist(self.pB[:, s_idx, a_idx], self._states)
                for s_idx, state in enumerate(self._states)
            }
            for a_idx, action in enumerate(self._actions)
        }

    def learn(self, action, prior_dist, posterior_dist):
        """
        Add the evidence of one transition to the concentrations.

        Parameters
        ----------
        action:
            The action that was taken. Must be one of ``actions``.
        prior_dist: ``dict`` or ``DiscreteBelief``
            Belief over states before the action.
        posterior_dist: ``dict`` or ``DiscreteBelief``
            Belief over states after observing the outcome.
        """
        if action not in self._action_index:
            raise KeyError(f"Unknown action {action!r}; declared actions are {list(self._actions)}")

        qs_prev = _as_vector(prior_dist, self._states)
        qs = _as_vector(posterior_dist, self._states)

        self.pB = update_state_likelihood_dirichlet(self.pB, self._action_index[action], qs_prev, qs, self.lr)
        self._B = None

        logger.debug("transition concentrations updated for action %r", action)


GaussianActionModel = namedtuple("GaussianActionModel", ["fn", "noise"])


class GaussianTransition(object):
    """
    Transition model for a 1-D continuous state driven by discrete actions.

    Each action maps to a deterministic function of the state plus process noise.
    Beliefs are propagated with the first-order (Extended Kalman) approximation

    μ' = fn(μ)
    σ²' = fn'(μ)² · σ² + noise

    >>> transition = GaussianTransition({
    ...     "accelerate": GaussianActionModel(lambda x: x + 1, 0.1),
    ...     "brake": {"fn": lambda x: 0.5 * x, "noise": 0.05},
    ... })

    Parameters
    ----------
    config: ``dict``
        Mapping ``action -> GaussianActionModel(fn, noise)``. A ``(fn, noise)``
        tuple or a ``{"fn": ..., "noise": ...}`` dict is accepted as well. Every
        ``noise`` must be a positive variance.
    """

    learnable = False

    def __init__(self, config):
        if not isinstance(config, dict):
            raise TypeError('Gaussian transition config must be a dict mapping actions to (fn, noise)')
        if len(config) == 0:
            raise ValueError("Gaussian transition model must declare at least one action")

        self._models = {}
        for action, model in config.items():
            if isinstance(model, dict):
                model = GaussianActionModel(model["fn"], model["noise"])
            else:
                model = GaussianActionModel(*model)
            if not callable(model.fn):
                raise TypeError(f"Transition function for action {action!r} must be callable")
            if not np.isfinite(model.noise) or model.noise <= 0:
                raise ValueError(f"Process noise for action {action!r} must be a positive variance, got {model.noise}")
            self._models[action] = GaussianActionModel(model.fn, float(model.noise))

        self._actions = tuple(self._models.keys())

    @property
    def actions(self):
        return self._actions

    def predict(self, belief, action):
        """
        Predict the Gaussian belief after taking ``action``.
        """
        model = self._models[action]
        mean, variance = run_linearized_prediction(model.fn, belief.mean, belief.variance, model.noise)
        return GaussianBelief(mean, variance)
