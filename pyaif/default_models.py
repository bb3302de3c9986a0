#!/usr/bin/env python
# -*- coding: utf-8 -*-

""" Functions for building ready-made generative models

Each builder returns a ``GenerativeModel`` named tuple holding an initial
belief, a transition model, an observation model and log-preferences, ready to
be passed to ``pyaif.agent.DiscreteAgent``:

>>> model = build_tmaze()
>>> agent = DiscreteAgent(*model, seed=0)
"""

from collections import namedtuple

from pyaif.beliefs import DiscreteBelief
from pyaif.observation import DirichletObservation, DiscreteObservation
from pyaif.transition import DirichletTransition, DiscreteTransition

GenerativeModel = namedtuple("GenerativeModel", ["belief", "transition_model", "observation_model", "preferences"])

REWARD_PENALTY = -10.0 # log-preference of the outcome the agent wants to avoid


def _deterministic(states, mapping):
    """
    ``state -> next_state`` into ``state -> {next_state: 1, others: 0}``.
    """
    return {
        state: {s: (1.0 if s == mapping[state] else 0.0) for s in states}
        for state in states
    }


def _identity_observations(states, prefix="see_"):
    return {
        prefix + obs_state: {s: (1.0 if s == obs_state else 0.0) for s in states}
        for obs_state in states
    }


def build_tmaze(cue_validity=0.9, reward_prob=0.95):
    """
    T-maze with an informative cue in the centre.

    The reward sits in the left or the right arm. In the centre the agent sees a
    cue that points at the rewarded arm with probability ``cue_validity``. In the
    arms it sees ``reward`` with probability ``reward_prob`` if it is in the
    rewarded arm, ``no_reward`` otherwise.

    Hidden states are ``<location>_<reward side>``: ``center_left``,
    ``center_right``, ``left_left``, ``left_right``, ``right_left``,
    ``right_right``. ``go_left`` and ``go_right`` move to the matching arm and
    keep the reward side.

    Returns
    -------
    model: ``GenerativeModel``
        Initial belief uniform over the two centre states; ``no_reward`` is the
        only dispreferred observation.
    """
    states = ["center_left", "center_right", "left_left", "left_right", "right_left", "right_right"]

    def cue(p_left):
        return {
            "center_left": p_left, "center_right": 1.0 - p_left,
            "left_left": 0.0, "left_right": 0.0, "right_left": 0.0, "right_right": 0.0,
        }

    def outcome(p_match):
        return {
            "center_left": 0.0, "center_right": 0.0,
            "left_left": p_match, "left_right": 1.0 - p_match,
            "right_left": 1.0 - p_match, "right_right": p_match,
        }

    observation_model = DiscreteObservation({
        "cue_left": cue(cue_validity),
        "cue_right": cue(1.0 - cue_validity),
        "reward": outcome(reward_prob),
        "no_reward": outcome(1.0 - reward_prob),
    })

    transition_model = DiscreteTransition({
        arm_action: _deterministic(
            states, {s: f"{arm}_{s.split('_')[1]}" for s in states}
        )
        for arm_action, arm in (("go_left", "left"), ("go_right", "right"))
    })

    belief = DiscreteBelief({s: (0.5 if s.startswith("center") else 0.0) for s in states})

    preferences = {"cue_left": 0.0, "cue_right": 0.0, "reward": 0.0, "no_reward": REWARD_PENALTY}

    return GenerativeModel(belief, transition_model, observation_model, preferences)


def build_trap(depth=2):
    """
    Deceptive trap: a chain of harmless-looking states that ends in ``doom``.

    From ``start``, ``go_trap`` walks down the chain one state per step and the
    ``depth``-th step lands in ``doom``, which is absorbing and is the only
    dispreferred observation. ``go_safe`` leads to the absorbing ``safe`` state
    from anywhere except ``doom``. Every state is observed without noise.

    Only an agent planning at least ``depth`` steps ahead can see the doom, so
    shorter horizons find both first actions equally good.

    Parameters
    ----------
    depth: ``int``, default 2
        Number of ``go_trap`` steps from ``start`` to ``doom``. ``2`` gives the
        chain ``start -> trap -> doom``, ``3`` gives ``start -> mid -> trap -> doom``.
    """
    if depth < 2:
        raise ValueError(f"Trap depth must be at least 2, got {depth}")

    if depth == 3:
        chain = ["mid", "trap"]
    else:
        chain = [f"mid_{i}" for i in range(1, depth - 1)] + ["trap"]
    states = ["start"] + chain + ["doom", "safe"]

    walk = ["start"] + chain + ["doom"]
    trap_moves = {here: there for here, there in zip(walk[:-1], walk[1:])}
    trap_moves.update({"doom": "doom", "safe": "safe"})

    safe_moves = {s: "safe" for s in states}
    safe_moves["doom"] = "doom"

    transition_model = DiscreteTransition({
        "go_trap": _deterministic(states, trap_moves),
        "go_safe": _deterministic(states, safe_moves),
    })
    observation_model = DiscreteObservation(_identity_observations(states))

    belief = DiscreteBelief({s: (1.0 if s == "start" else 0.0) for s in states})

    preferences = {f"see_{s}": 0.0 for s in states}
    preferences["see_doom"] = REWARD_PENALTY

    return GenerativeModel(belief, transition_model, observation_model, preferences)


def build_light_switch(sensor_accuracy=0.95, learnable=False, prior_strength=1.0):
    """
    A light switch the agent can turn on and off, seen through a noisy sensor.

    States ``switch_on`` / ``switch_off``, observations ``light_on`` /
    ``light_off`` (correct with probability ``sensor_accuracy``), actions
    ``turn_on`` / ``turn_off`` that set the switch with certainty. The agent
    prefers seeing the light on.

    Parameters
    ----------
    sensor_accuracy: ``float``, default 0.95
        P(light_on | switch_on) = P(light_off | switch_off).
    learnable: ``bool``, default False
        Build Dirichlet-backed models whose concentrations are the probabilities
        scaled by ``prior_strength`` (impossible transitions get a count of 0.01
        times ``prior_strength`` so every count stays positive).
    prior_strength: ``float``, default 1.0
        Pseudo-count that a probability of one maps to in the learnable models.
    """
    states = ["switch_on", "switch_off"]

    observations = {
        "light_on": {"switch_on": sensor_accuracy, "switch_off": 1.0 - sensor_accuracy},
        "light_off": {"switch_on": 1.0 - sensor_accuracy, "switch_off": sensor_accuracy},
    }
    transitions = {
        "turn_on": _deterministic(states, {s: "switch_on" for s in states}),
        "turn_off": _deterministic(states, {s: "switch_off" for s in states}),
    }

    if learnable:
        observation_model = DirichletObservation({
            obs: {s: prior_strength * p for s, p in row.items()} for obs, row in observations.items()
        })
        transition_model = DirichletTransition({
            action: {
                s: {s_next: prior_strength * max(p, 0.01) for s_next, p in row.items()}
                for s, row in rows.items()
            }
            for action, rows in transitions.items()
        })
    else:
        observation_model = DiscreteObservation(observations)
        transition_model = DiscreteTransition(transitions)

    belief = DiscreteBelief({"switch_on": 0.5, "switch_off": 0.5})
    preferences = {"light_on": 0.0, "light_off": REWARD_PENALTY}

    return GenerativeModel(belief, transition_model, observation_model, preferences)
