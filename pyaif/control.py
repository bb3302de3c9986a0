#!/usr/bin/env python
# -*- coding: utf-8 -*-
# pylint: disable=no-member

"""
ACTIVE INFERENCE CONTROL MODULE

This module contains the functions the agent uses to evaluate and choose actions.
Together with ``pyaif.algos.beam`` they implement the "action" part of the
perception-action loop.

KEY CONCEPTS:
=============

1. EXPECTED FREE ENERGY (EFE, G):
   - A score for a predicted belief, lower is better
   - Discrete case: G = ambiguity + risk
   - Continuous case: G = −pref(E[y])

2. AMBIGUITY (epistemic term):
   - How uncertain the observations would be in the predicted states
   - Ambiguity = −Σ_s Q(s) Σ_o P(o|s) log P(o|s)
   - States with noisy observations are ambiguous; the agent avoids them unless
     they pay off

3. RISK (pragmatic term):
   - How far the predicted observations are from the preferred ones
   - Risk = −Σ_o Q(o) C(o), with Q(o) = Σ_s P(o|s) Q(s) and C the log-preferences

4. POLICY POSTERIOR:
   - P(π) ∝ exp(−β × G(π)), optionally re-weighted by habits
   - β (precision) controls how deterministically the best policy is chosen
   - Habits are a prior over actions that does not depend on EFE
"""

import numpy as np
from scipy import special

from pyaif import utils
from pyaif.maths import norm_dist, softmin
from pyaif.preferences import resolve_preferences

DEFAULT_LOG_PREFERENCE = -10.0 # log-preference of any observation without a configured preference


def get_preference_vector(log_prefs, observations):
    """
    Align a ``observation -> log-preference`` mapping with ``observations``.

    Observations without an entry receive ``DEFAULT_LOG_PREFERENCE``, so that
    anything not explicitly wanted is treated as strongly undesired.
    """
    return np.array(
        [float(log_prefs.get(obs, DEFAULT_LOG_PREFERENCE)) for obs in observations], dtype=float
    )


def get_expected_obs(qs, A):
    """
    Predicted observation distribution Q(o) = Σ_s A[o, s] Q(s).
    """
    return np.asarray(A, dtype=float).dot(np.asarray(qs, dtype=float))


def calc_ambiguity(qs, A):
    """
    Expected entropy of observations given states under the belief ``qs``.

    Parameters
    ----------
    qs: 1D ``numpy.ndarray``
        Predicted beliefs about hidden states.
    A: 2D ``numpy.ndarray``
        Observation model, indexed ``[observation, state]``.

    Returns
    -------
    ambiguity: ``float``
        −Σ_s Q(s) Σ_o A[o, s] log A[o, s]. Zero-probability terms contribute nothing.
    """
    H_A = special.entr(np.asarray(A, dtype=float)).sum(axis=0)
    return float(np.asarray(qs, dtype=float).dot(H_A))


def calc_risk(qs, A, C):
    """
    Negative expected log-preference of predicted observations.

    Parameters
    ----------
    qs: 1D ``numpy.ndarray``
        Predicted beliefs about hidden states.
    A: 2D ``numpy.ndarray``
        Observation model, indexed ``[observation, state]``.
    C: 1D ``numpy.ndarray``
        Log-preferences aligned with the rows of ``A``.

    Returns
    -------
    risk: ``float``
        −Σ_o Q(o) C(o), summed over observations with Q(o) > 0.
    """
    qo = get_expected_obs(qs, A)
    C = np.asarray(C, dtype=float)
    possible = qo > 0
    return float(-(qo[possible] * C[possible]).sum())


def calc_expected_free_energy(qs, A, C):
    """
    Expected Free Energy of a predicted discrete belief: ambiguity + risk.
    """
    return calc_ambiguity(qs, A) + calc_risk(qs, A, C)


def compute_ambiguity(belief, observation_model):
    """
    Ambiguity of a ``DiscreteBelief`` under a discrete observation model.
    """
    return calc_ambiguity(belief.aligned(observation_model.states), observation_model.A)


def compute_risk(belief, observation_model, preferences):
    """
    Risk of a ``DiscreteBelief`` under a discrete observation model.

    ``preferences`` may be a mapping of log-preferences, a
    ``DirichletPreferences`` instance (read at call time) or ``None``.
    """
    C = get_preference_vector(resolve_preferences(preferences), observation_model.observations)
    return calc_risk(belief.aligned(observation_model.states), observation_model.A, C)


def compute_expected_free_energy(belief, observation_model, preferences):
    """
    Ambiguity + risk of a ``DiscreteBelief``, with labels resolved against ``observation_model``.
    """
    qs = belief.aligned(observation_model.states)
    C = get_preference_vector(resolve_preferences(preferences), observation_model.observations)
    return calc_expected_free_energy(qs, observation_model.A, C)


def compute_expected_free_energy_gaussian(belief, observation_model, preferences):
    """
    Expected Free Energy of a ``GaussianBelief``: −preferences(E[y]).

    The ambiguity of a linear-Gaussian sensor with fixed noise is the same for
    every belief, so it cannot change which policy is best and is left out.
    """
    return -float(preferences(observation_model.expected_observation(belief)))


def get_policy_habits(policies, habits):
    """
    Prior weight of every policy: the product of the habit weights of its actions.

    Parameters
    ----------
    policies: ``list`` of ``tuple``
        Candidate action sequences.
    habits: ``dict``
        Mapping ``action -> non-negative weight``. Unlisted actions weigh 1.

    Returns
    -------
    E: 1D ``numpy.ndarray``
        One weight per policy.
    """
    E = np.ones(len(policies))
    for p_idx, policy in enumerate(policies):
        for action in policy:
            E[p_idx] *= float(habits.get(action, 1.0))
    return E


def update_posterior_policies(G, precision=1.0, policies=None, habits=None):
    """
    Turn the cumulative Expected Free Energies of the policies into a posterior over policies.

    q_pi = softmin(G, precision), then, if habits are configured,
    q_pi ∝ q_pi × E where E are the policy habit weights.

    Parameters
    ----------
    G: 1D ``numpy.ndarray``
        Expected Free Energy of each policy.
    precision: ``float``, default 1.0
        Policy precision β. ``0`` gives a uniform posterior.
    policies: ``list`` of ``tuple``, default None
        Policies aligned with ``G``. Only needed when ``habits`` is given.
    habits: ``dict``, default None
        Habitual prior over actions. ``None`` or an empty mapping leaves the
        softmin untouched.

    Returns
    -------
    q_pi: 1D ``numpy.ndarray``
        Posterior over policies. If the habits zero out every policy the result
        is all zeros.
    """
    q_pi = softmin(G, precision)

    if habits:
        q_pi = norm_dist(q_pi * get_policy_habits(policies, habits))

    return q_pi


def sample_policy(q_pi, policies, random):
    """
    Sample a policy from the posterior ``q_pi`` with one uniform draw from ``random``.
    """
    return policies[utils.sample_index(q_pi, random)]
