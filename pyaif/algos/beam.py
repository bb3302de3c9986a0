#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
BEAM SEARCH OVER POLICIES

This module implements the planning search used by the agent to find good action
sequences (policies). It answers the question: "If I followed this sequence of
actions, how much Expected Free Energy (EFE) would I accumulate along the way?"

ALGORITHM OVERVIEW:
==================

Enumerating every policy costs |actions|^horizon evaluations. Beam search bounds
this by growing policies one step at a time and, after each step, keeping only
the most promising partial policies:

1. Start one beam per action: predict the belief one step ahead and score it.
2. For every remaining step of the horizon:
   - extend every surviving beam by every action
   - predict the next belief, score it, add the score to the running total
   - if a positive beam width is set and there are more candidates than that,
     keep only the ``beam_width`` candidates with the lowest cumulative EFE
3. Return the surviving beams. Their cumulative EFEs are turned into a policy
   posterior by ``pyaif.control.update_posterior_policies``.

With ``beam_width <= 0`` nothing is pruned and the search degrades to full
enumeration, in the same order as the nested loops over actions would produce.

The search itself knows nothing about the kind of belief being propagated. The
caller supplies the prediction function (usually ``transition_model.predict``)
and the scoring function (an EFE callback), so the same search serves both
discrete and Gaussian agents.
"""

import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

Beam = namedtuple("Beam", ["policy", "efe", "belief"])
Beam.__doc__ = """
Partial policy under consideration during the search.

policy: ``tuple`` of actions taken so far
efe: cumulative Expected Free Energy of those actions
belief: predicted belief after the last action of ``policy``
"""


def run_beam_search(belief, actions, predict, score, horizon=1, beam_width=0):
    """
    Grow candidate policies up to ``horizon`` steps, pruning to ``beam_width`` after each expansion.

    Parameters
    ----------
    belief: ``DiscreteBelief`` or ``GaussianBelief``
        Current belief, the root of the search. It is never modified.
    actions: ``tuple``
        Available actions, in the order they are expanded.
    predict: callable
        ``predict(belief, action) -> belief``, one-step belief propagation.
    score: callable
        ``score(belief) -> float``, Expected Free Energy of a predicted belief.
    horizon: ``int``, default 1
        Number of actions in every returned policy. Values below 1 are treated as 1.
    beam_width: ``int``, default 0
        Maximum number of beams kept after each expansion. ``0`` or negative
        disables pruning.

    Returns
    ----------
    beams: ``list`` of ``Beam``
        Surviving policies with their cumulative EFE and final predicted belief.
    """

    beams = []
    for action in actions:
        predicted = predict(belief, action)
        beams.append(Beam((action,), float(score(predicted)), predicted))

    for depth in range(1, max(1, int(horizon))):

        expanded = []
        for beam in beams:
            for action in actions:
                predicted = predict(beam.belief, action)
                expanded.append(
                    Beam(beam.policy + (action,), beam.efe + float(score(predicted)), predicted)
                )

        if beam_width > 0 and len(expanded) > beam_width:
            # sorted() is stable, so equal-EFE beams keep their expansion order
            expanded = sorted(expanded, key=lambda b: b.efe)[:beam_width]
            logger.debug("depth %d: pruned to %d of %d beams", depth + 1, beam_width, len(actions) * len(beams))

        beams = expanded

    logger.debug("beam search evaluated %d policies of length %d", len(beams), len(beams[0].policy) if beams else 0)

    return beams
