#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
LINEAR-GAUSSIAN INFERENCE KERNELS

Closed-form update and first-order prediction for 1-D Gaussian beliefs.

- ``run_kalman_update``: posterior after observing y = c·x + b + ε
- ``run_linearized_prediction``: propagate N(μ, σ²) through a (possibly nonlinear)
  transition function using its local slope, as in the Extended Kalman Filter
"""

FINITE_DIFFERENCE_STEP = 1e-5


def run_kalman_update(mean, variance, observation, scale, bias, noise):
    """
    Kalman-filter update of a scalar Gaussian belief.

    K = σ²·c / (c²·σ² + R)
    μ_post = μ + K·(y − c·μ − b)
    σ²_post = (1 − K·c)·σ²

    Returns
    -------
    mean_post, variance_post: ``float``
    """
    predicted_obs = scale * mean + bias
    innovation_var = scale * scale * variance + noise
    gain = variance * scale / innovation_var

    mean_post = mean + gain * (observation - predicted_obs)
    variance_post = (1.0 - gain * scale) * variance

    return mean_post, variance_post


def run_linearized_prediction(fn, mean, variance, noise, h=FINITE_DIFFERENCE_STEP):
    """
    First-order propagation of N(μ, σ²) through ``fn``.

    μ' = fn(μ)
    σ²' = fn'(μ)²·σ² + noise

    where fn'(μ) is estimated with a central finite difference of step ``h``.

    Parameters
    ----------
    fn: callable
        Deterministic transition function R -> R.
    mean: ``float``
        Current mean.
    variance: ``float``
        Current variance.
    noise: ``float``
        Process noise variance added after the transition.

    Returns
    -------
    mean_next, variance_next: ``float``
    """
    mean_next = float(fn(mean))
    derivative = (fn(mean + h) - fn(mean - h)) / (2.0 * h)
    variance_next = derivative * derivative * variance + noise

    return mean_next, float(variance_next)
