#!/usr/bin/env python
# -*- coding: utf-8 -*-
# pylint: disable=no-member

"""
DIRICHLET PARAMETER LEARNING

Conjugate (Dirichlet-categorical) updates of the concentration parameters behind
the learnable observation, transition and preference models.

A Dirichlet concentration is a positive pseudo-count. The probabilities the agent
uses are the normalised counts, so adding evidence to a count makes the matching
probability grow. Evidence is weighted by the agent's beliefs: if the agent is 80%
sure it is in state A when it observes o, the count for (o, A) grows by 0.8 and
the count for (o, B) by 0.2.
"""

import numpy as np


def update_obs_likelihood_dirichlet(pA, obs_idx, qs, lr=1.0):
    """
    Update Dirichlet parameters of the observation likelihood given an observation.

    pA[o*, s] += lr × Q(s)   for the observed o*

    Parameters
    -----------
    pA: 2D ``numpy.ndarray``
        Prior Dirichlet parameters over the observation model, indexed ``[observation, state]``.
    obs_idx: ``int``
        Index of the observation that was received.
    qs: 1D ``numpy.ndarray``
        Posterior beliefs over hidden states after the observation.
    lr: ``float``, default 1.0
        Learning rate, scales the amount added.

    Returns
    -----------
    qA: 2D ``numpy.ndarray``
        Posterior Dirichlet parameters (a new array, ``pA`` is left untouched).
    """

    qA = np.array(pA, dtype=float, copy=True)
    qA[obs_idx, :] += lr * np.asarray(qs, dtype=float)

    return qA


def update_state_likelihood_dirichlet(pB, action_idx, qs_prev, qs, lr=1.0):
    """
    Update Dirichlet parameters of the transition likelihood given a state transition.

    pB[s', s, a] += lr × Q_prev(s) × Q(s')   for the action a taken

    The outer product of the belief before the action and the belief after
    observing its outcome is the agent's best estimate of the transition that
    actually happened.

    Parameters
    -----------
    pB: 3D ``numpy.ndarray``
        Prior Dirichlet parameters over the transition model, indexed ``[next_state, state, action]``.
    action_idx: ``int``
        Index of the action that was taken.
    qs_prev: 1D ``numpy.ndarray``
        Beliefs about hidden states before the action.
    qs: 1D ``numpy.ndarray``
        Beliefs about hidden states after the action's outcome was observed.
    lr: ``float``, default 1.0
        Learning rate.

    Returns
    -----------
    qB: 3D ``numpy.ndarray``
        Posterior Dirichlet parameters (a new array).
    """

    qB = np.array(pB, dtype=float, copy=True)
    qB[:, :, action_idx] += lr * np.outer(np.asarray(qs, dtype=float), np.asarray(qs_prev, dtype=float))

    return qB


def update_preferences_dirichlet(pC, obs_idx, amount=1.0):
    """
    Reinforce a preferred observation: pC[o*] += amount.
    """

    qC = np.array(pC, dtype=float, copy=True)
    qC[obs_idx] += amount

    return qC
