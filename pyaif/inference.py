#!/usr/bin/env python
# -*- coding: utf-8 -*-
# pylint: disable=no-member

"""
ACTIVE INFERENCE STATE INFERENCE MODULE

This module contains the state inference rules used by the agent. These functions
implement the "perception" part of the perception-action loop, where the agent
updates its beliefs about hidden world states based on observations.

KEY CONCEPTS:
=============

1. DISCRETE STATE INFERENCE:
   - Hidden states form a finite set (e.g. "cookie_left", "cookie_right")
   - The observation model gives P(observation | state) for every state
   - Exact Bayesian inference: multiply prior by likelihood and renormalise

2. CONTINUOUS STATE INFERENCE:
   - The hidden state is a single real number with a Gaussian belief
   - The observation model is linear-Gaussian: y = c·x + b + noise
   - The exact posterior is again Gaussian and is given by the Kalman filter

MATHEMATICAL FOUNDATION:
=======================

Bayes' Rule for State Inference:
P(hidden_state | observation) ∝ P(observation | hidden_state) × P(hidden_state)

Kalman update for y = c·x + b + ε, ε ~ N(0, R), prior N(μ, σ²):
K = σ²·c / (c²·σ² + R)
μ_post = μ + K·(y − c·μ − b)
σ²_post = (1 − K·c)·σ²
"""

import numpy as np

from pyaif.algos import run_kalman_update


def update_posterior_states(likelihood, prior):
    """
    Update marginal posterior over hidden states with Bayes' rule.

    Parameters
    ----------
    likelihood: 1D ``numpy.ndarray``
        Likelihood of the observation under each hidden state, P(o|s).
    prior: 1D ``numpy.ndarray``
        Prior beliefs about hidden states, aligned with ``likelihood``.

    Returns
    ----------
    qs: 1D ``numpy.ndarray``
        Posterior beliefs over hidden states. When the likelihood-weighted prior
        sums to exactly zero there is no evidence to normalise by; the all-zero
        vector is returned as is rather than restoring the prior.
    """

    qs = np.asarray(prior, dtype=float) * np.asarray(likelihood, dtype=float)
    total = qs.sum()
    if total > 0:
        qs = qs / total

    return qs


def update_posterior_states_gaussian(mean, variance, observation, scale, bias, noise):
    """
    Update a 1-D Gaussian belief given a scalar observation from a linear-Gaussian sensor.

    Parameters
    ----------
    mean: ``float``
        Prior mean μ.
    variance: ``float``
        Prior variance σ².
    observation: ``float``
        Observed value y.
    scale: ``float``
        Observation gain c.
    bias: ``float``
        Observation offset b.
    noise: ``float``
        Observation noise variance R.

    Returns
    ----------
    mean_post, variance_post: ``float``
        Moments of the Gaussian posterior.
    """

    return run_kalman_update(mean, variance, float(observation), scale, bias, noise)
