import math

import numpy as np
import pytest

from pyaif import control
from pyaif.algos import run_beam_search
from pyaif.beliefs import DiscreteBelief
from pyaif.observation import DiscreteObservation


class _FixedRandom(object):
    def __init__(self, value):
        self.value = value

    def next(self):
        return self.value


def _walk(position, action):
    return position + (1 if action == "up" else -1)


def _distance(position):
    return abs(position)


# Expected Free Energy


@pytest.mark.unit
def test_ambiguity_of_noiseless_and_noisy_sensors():
    qs = np.array([0.3, 0.7])
    assert control.calc_ambiguity(qs, np.eye(2)) == pytest.approx(0.0)
    assert control.calc_ambiguity(qs, np.full((2, 2), 0.5)) == pytest.approx(math.log(2))


@pytest.mark.unit
def test_risk_is_negative_expected_log_preference():
    A = np.eye(2)
    C = np.array([0.0, -10.0])
    assert control.calc_risk(np.array([1.0, 0.0]), A, C) == pytest.approx(0.0)
    assert control.calc_risk(np.array([0.25, 0.75]), A, C) == pytest.approx(7.5)
    assert control.calc_expected_free_energy(np.array([0.25, 0.75]), A, C) == pytest.approx(7.5)


@pytest.mark.unit
def test_risk_skips_impossible_observations():
    A = np.array([[1.0, 1.0], [0.0, 0.0]])
    C = np.array([0.0, -np.inf])
    assert control.calc_risk(np.array([0.5, 0.5]), A, C) == pytest.approx(0.0)


@pytest.mark.unit
def test_unlisted_observations_get_default_preference():
    C = control.get_preference_vector({"good": 0.0}, ("good", "bad"))
    assert list(C) == [0.0, control.DEFAULT_LOG_PREFERENCE]


@pytest.mark.unit
def test_label_level_helpers():
    observation = DiscreteObservation({
        "see_a": {"a": 0.5, "b": 0.0},
        "see_b": {"a": 0.5, "b": 1.0},
    })
    belief = DiscreteBelief({"b": 0.5, "a": 0.5})

    assert control.compute_ambiguity(belief, observation) == pytest.approx(0.5 * math.log(2))
    # no preferences: every observation scores the default -10
    assert control.compute_risk(belief, observation, None) == pytest.approx(10.0)
    assert control.compute_risk(belief, observation, {"see_a": 0.0, "see_b": -2.0}) == pytest.approx(1.5)
    assert control.compute_expected_free_energy(belief, observation, {"see_a": 0.0, "see_b": -2.0}) == pytest.approx(
        0.5 * math.log(2) + 1.5
    )


# Beam search


@pytest.mark.unit
def test_beam_search_without_pruning_enumerates_all_policies_in_order():
    beams = run_beam_search(0, ("up", "down"), _walk, _distance, horizon=3)

    assert len(beams) == 8
    assert [b.policy for b in beams][:3] == [("up", "up", "up"), ("up", "up", "down"), ("up", "down", "up")]
    assert beams[0].efe == pytest.approx(1 + 2 + 3)
    assert beams[0].belief == 3


@pytest.mark.unit
def test_beam_search_prunes_to_lowest_cumulative_efe():
    beams = run_beam_search(0, ("up", "down"), _walk, _distance, horizon=2, beam_width=2)

    # stable sort keeps expansion order among the two ties
    assert [b.policy for b in beams] == [("up", "down"), ("down", "up")]
    assert all(b.efe == pytest.approx(1.0) for b in beams)


@pytest.mark.unit
@pytest.mark.parametrize("horizon", [2, 3, 4])
def test_beam_width_caps_beam_count(horizon):
    beams = run_beam_search(0, ("up", "down", "stay"), lambda x, a: _walk(x, a) if a != "stay" else x, _distance,
                            horizon=horizon, beam_width=4)
    assert len(beams) <= 4
    assert all(len(b.policy) == horizon for b in beams)


@pytest.mark.unit
def test_initial_beams_are_never_pruned():
    beams = run_beam_search(0, ("up", "down", "stay"), _walk, _distance, horizon=1, beam_width=1)
    assert len(beams) == 3


@pytest.mark.unit
@pytest.mark.parametrize("horizon", [0, -3])
def test_short_horizon_is_one_step(horizon):
    beams = run_beam_search(0, ("up", "down"), _walk, _distance, horizon=horizon)
    assert [b.policy for b in beams] == [("up",), ("down",)]


# Policy posterior


@pytest.mark.unit
def test_policy_posterior_is_softmin():
    G = np.array([1.0, 2.0, 4.0])
    q_pi = control.update_posterior_policies(G, precision=2.0)
    expected = np.exp(-2.0 * G) / np.exp(-2.0 * G).sum()
    assert np.allclose(q_pi, expected)


@pytest.mark.unit
def test_zero_precision_gives_uniform_policy_posterior():
    q_pi = control.update_posterior_policies(np.array([0.0, 5.0, 50.0, 500.0]), precision=0.0)
    assert np.allclose(q_pi, 0.25)


@pytest.mark.unit
def test_habits_reweight_policies():
    policies = [("a", "a"), ("a", "b"), ("b", "a"), ("b", "b")]
    G = np.zeros(4)

    E = control.get_policy_habits(policies, {"a": 2.0})
    assert list(E) == [4.0, 2.0, 2.0, 1.0]

    q_pi = control.update_posterior_policies(G, 1.0, policies, {"a": 2.0})
    assert np.allclose(q_pi, np.array([4.0, 2.0, 2.0, 1.0]) / 9.0)

    q_pi = control.update_posterior_policies(G, 1.0, policies, {"b": 0.0})
    assert np.allclose(q_pi, [1.0, 0.0, 0.0, 0.0])


@pytest.mark.unit
def test_empty_habits_leave_softmin_untouched():
    G = np.array([1.0, 3.0])
    assert np.allclose(
        control.update_posterior_policies(G, 1.0, [("a",), ("b",)], {}),
        control.update_posterior_policies(G, 1.0),
    )


@pytest.mark.unit
def test_habits_zeroing_every_policy_give_zero_posterior():
    q_pi = control.update_posterior_policies(np.array([1.0, 2.0]), 1.0, [("a",), ("b",)], {"a": 0.0, "b": 0.0})
    assert np.all(q_pi == 0.0)


@pytest.mark.unit
def test_sample_policy():
    policies = [("a",), ("b",), ("c",)]
    q_pi = np.array([0.5, 0.0, 0.5])
    assert control.sample_policy(q_pi, policies, _FixedRandom(0.2)) == ("a",)
    assert control.sample_policy(q_pi, policies, _FixedRandom(0.7)) == ("c",)
