#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
PREFERENCES (C)

Preferences tell the agent which observations it wants to see. They are
log-probabilities: 0 is "as good as it gets", large negative values are
outcomes to be avoided. Observations without a configured preference are
scored with ``pyaif.control.DEFAULT_LOG_PREFERENCE``.

Preferences are either a plain mapping ``observation -> log-preference`` or a
``DirichletPreferences`` instance, whose log-preferences are derived from
learnable pseudo-counts.
"""

import logging

import numpy as np

from pyaif import utils
from pyaif.learning import update_preferences_dirichlet
from pyaif.maths import norm_dist

logger = logging.getLogger(__name__)

MIN_PREFERENCE_PROB = 1e-16 # floor applied before taking the log of a preference probability


class DirichletPreferences(object):
    """
    Learnable preferences backed by Dirichlet concentrations.

    log_pref(o) = log(max(c[o] / Σ c, 1e-16))

    The log-preferences are cached and only recomputed on the first read after
    ``learn`` changed the counts.

    >>> prefs = DirichletPreferences({"reward": 10, "no_reward": 1})
    >>> round(prefs.preferences["reward"], 4)
    -0.0953
    >>> prefs.learn("no_reward", amount=9)

    Parameters
    ----------
    concentrations: ``dict``
        Mapping ``observation -> count``, all strictly positive. The mapping is
        copied, never aliased.
    """

    learnable = True

    def __init__(self, concentrations):
        if not isinstance(concentrations, dict):
            raise TypeError('Preference concentrations must be a dict mapping observations to counts')
        if len(concentrations) == 0:
            raise ValueError("Preference concentrations must declare at least one observation")

        self._observations = tuple(concentrations.keys())
        self._obs_index = utils.labels_to_index(self._observations)

        pC = utils.dist_to_vector(concentrations, self._observations)
        utils.check_positive(pC, "Preference concentrations")
        self.pC = pC
        self._C = None

    @property
    def observations(self):
        return self._observations

    @property
    def C(self):
        """
        Log-preference vector aligned with ``observations``.
        """
        if self._C is None:
            self._C = np.log(np.maximum(norm_dist(self.pC), MIN_PREFERENCE_PROB))
        return self._C

    @property
    def preferences(self):
        """
        Current log-preferences as ``observation -> log-preference``.
        """
        return utils.vector_to_dist(self.C, self._observations)

    @property
    def concentrations(self):
        """
        Snapshot of the pseudo-counts as ``observation -> count``.
        """
        return utils.vector_to_dist(self.pC, self._observations)

    def learn(self, observation, amount=1.0):
        """
        Reinforce ``observation`` by adding ``amount`` to its count.
        """
        if observation not in self._obs_index:
            raise KeyError(f"Unknown observation {observation!r}; declared observations are {list(self._observations)}")

        self.pC = update_preferences_dirichlet(self.pC, self._obs_index[observation], amount)
        self._C = None

        logger.debug("preference concentration for %r increased by %s", observation, amount)


def resolve_preferences(preferences):
    """
    Current ``observation -> log-preference`` mapping of ``preferences``.

    Parameters
    ----------
    preferences: ``dict``, ``DirichletPreferences`` or ``None``
        ``None`` means no preferences at all, so that every observation scores
        the default log-preference.

    Returns
    -------
    log_prefs: ``dict``
        A fresh mapping. For ``DirichletPreferences`` it reflects the counts at
        the time of the call.
    """
    if preferences is None:
        return {}
    if isinstance(preferences, DirichletPreferences):
        return preferences.preferences
    if isinstance(preferences, dict):
        return {obs: float(value) for obs, value in preferences.items()}
    raise TypeError(
        'Preferences must be a dict of log-preferences or a DirichletPreferences instance'
    )
