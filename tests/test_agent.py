from types import SimpleNamespace

import numpy as np
import pytest

from pyaif import default_models
from pyaif.agent import Agent, DiscreteAgent, GaussianAgent
from pyaif.beliefs import DiscreteBelief, GaussianBelief
from pyaif.observation import DiscreteObservation, GaussianObservation
from pyaif.transition import DiscreteTransition, GaussianTransition

COOKIE_ACTIONS = ("go_left", "go_right", "stay")


def _cookie_jar(**kwargs):
    identity = {
        "cookie_left": {"cookie_left": 1.0, "cookie_right": 0.0},
        "cookie_right": {"cookie_left": 0.0, "cookie_right": 1.0},
    }
    return DiscreteAgent(
        DiscreteBelief({"cookie_left": 0.5, "cookie_right": 0.5}),
        DiscreteTransition({action: identity for action in COOKIE_ACTIONS}),
        DiscreteObservation({
            "see_cookie": {"cookie_left": 0.9, "cookie_right": 0.1},
            "see_empty": {"cookie_left": 0.1, "cookie_right": 0.9},
        }),
        preferences={"see_cookie": 0.0, "see_empty": -5.0},
        **kwargs
    )


def _gaussian_agent(**kwargs):
    return GaussianAgent(
        GaussianBelief(0.0, 1.0),
        GaussianTransition({
            "right": (lambda x: x + 1.0, 0.1),
            "left": (lambda x: x - 1.0, 0.1),
        }),
        GaussianObservation(scale=1.0, noise=0.1),
        preferences=lambda y: -abs(y - 10.0),
        **kwargs
    )


# Construction


@pytest.mark.unit
def test_agent_rejects_invalid_configuration():
    model = default_models.build_light_switch()
    efe = lambda belief: 0.0

    with pytest.raises(TypeError):
        Agent(model.belief, model.transition_model, model.observation_model, efe_fn="not callable")
    with pytest.raises(TypeError):
        Agent(model.belief, model.transition_model, model.observation_model, efe, on_observe=42)
    with pytest.raises(TypeError):
        Agent({"switch_on": 1.0}, model.transition_model, model.observation_model, efe)
    with pytest.raises(ValueError):
        Agent(model.belief, SimpleNamespace(actions=(), predict=None), model.observation_model, efe)
    with pytest.raises(ValueError):
        Agent(model.belief, model.transition_model, model.observation_model, efe, habits={"turn_on": -1.0})


@pytest.mark.unit
def test_agent_clamps_horizon_and_precision_with_warning():
    model = default_models.build_light_switch()

    with pytest.warns(UserWarning):
        agent = DiscreteAgent(*model, planning_horizon=0)
    assert agent.planning_horizon == 1

    with pytest.warns(UserWarning):
        agent = DiscreteAgent(*model, precision=-2.0)
    assert agent.precision == 0.0


@pytest.mark.unit
def test_discrete_agent_rejects_mismatched_state_spaces():
    model = default_models.build_light_switch()
    with pytest.raises(ValueError):
        DiscreteAgent(
            DiscreteBelief({"switch_on": 0.5, "broken": 0.5}),
            model.transition_model,
            model.observation_model,
        )
    with pytest.raises(TypeError):
        DiscreteAgent(GaussianBelief(0.0, 1.0), model.transition_model, model.observation_model)


@pytest.mark.unit
def test_strict_mode_rejects_unknown_labels():
    model = default_models.build_light_switch()

    with pytest.raises(ValueError):
        DiscreteAgent(model.belief, model.transition_model, model.observation_model,
                      preferences={"ligth_on": 0.0}, strict=True)
    with pytest.raises(ValueError):
        DiscreteAgent(*model, habits={"turn_of": 0.5}, strict=True)

    # permissive by default
    agent = DiscreteAgent(model.belief, model.transition_model, model.observation_model,
                          preferences={"ligth_on": 0.0}, habits={"turn_of": 0.5})
    assert agent.act() in ("turn_on", "turn_off")


# Belief access


@pytest.mark.unit
def test_belief_is_handed_out_as_copy():
    agent = _cookie_jar()
    first = agent.belief
    assert first is not agent.belief
    assert agent.prev_belief is None

    agent.reset_belief(DiscreteBelief({"cookie_left": 1.0, "cookie_right": 0.0}))
    assert agent.state == "cookie_left"
    assert first.probability("cookie_left") == 0.5

    with pytest.raises(TypeError):
        agent.reset_belief(GaussianBelief(0.0, 1.0))


@pytest.mark.unit
def test_reset_belief_rejects_mismatched_state_space():
    model = default_models.build_light_switch()
    agent = DiscreteAgent(*model, seed=1)

    with pytest.raises(ValueError):
        agent.reset_belief(DiscreteBelief({"bogus": 1.0}))
    with pytest.raises(ValueError):
        agent.reset_belief(DiscreteBelief({"switch_on": 0.5, "switch_off": 0.25, "bogus": 0.25}))

    # the rejected belief never replaces the current one
    assert agent.export_belief() == model.belief.to_dict()
    agent.act()
    assert np.any(agent.G != 0.0)

    agent.reset_belief(DiscreteBelief({"switch_off": 1.0, "switch_on": 0.0}))
    assert agent.state == "switch_off"


@pytest.mark.unit
def test_discrete_agent_rejects_infinite_preferences():
    model = default_models.build_light_switch()
    with pytest.raises(ValueError):
        DiscreteAgent(model.belief, model.transition_model, model.observation_model,
                      preferences={"light_on": 0.0, "light_off": -np.inf})
    with pytest.raises(ValueError):
        DiscreteAgent(model.belief, model.transition_model, model.observation_model,
                      preferences={"light_on": float("nan")})


@pytest.mark.unit
def test_discrete_agent_exposes_state_uncertainty_and_export():
    agent = _cookie_jar()
    assert agent.export_belief() == {"cookie_left": 0.5, "cookie_right": 0.5}
    assert agent.uncertainty == pytest.approx(np.log(2))

    agent.observe("see_cookie")
    assert agent.state == "cookie_left"
    assert agent.export_belief()["cookie_left"] > 0.8
    assert agent.uncertainty < np.log(2)


@pytest.mark.unit
def test_free_energy_increases_after_observation():
    agent = _cookie_jar()
    before = agent.free_energy
    agent.observe("see_cookie")
    assert agent.free_energy > before


# Acting


@pytest.mark.unit
def test_same_seed_same_actions():
    a = _cookie_jar(seed=42)
    b = _cookie_jar(seed=42)
    assert [a.act() for _ in range(5)] == [b.act() for _ in range(5)]


@pytest.mark.unit
def test_different_seeds_different_actions():
    a = _cookie_jar(seed=1111)
    b = _cookie_jar(seed=1337)
    assert [a.act() for _ in range(20)] != [b.act() for _ in range(20)]


@pytest.mark.unit
def test_infer_policies_and_sample_action():
    agent = _cookie_jar(seed=0)
    with pytest.raises(RuntimeError):
        agent.sample_action()

    q_pi, G = agent.infer_policies()
    assert agent.policies == [(a,) for a in COOKIE_ACTIONS]
    assert q_pi.sum() == pytest.approx(1.0)
    assert G.shape == (3,)

    action = agent.sample_action()
    assert action in COOKIE_ACTIONS
    assert agent.action == action


@pytest.mark.unit
def test_step_equals_observe_then_act():
    stepped = _cookie_jar(seed=9001)
    manual = _cookie_jar(seed=9001)

    for observation in ("see_cookie", "see_empty", "see_cookie"):
        action = stepped.step(observation)
        manual.observe(observation)
        assert manual.act() == action
        assert manual.export_belief() == pytest.approx(stepped.export_belief())

    assert stepped.prev_action == action
    assert stepped.prev_belief.to_dict() == pytest.approx(stepped.export_belief())


@pytest.mark.unit
def test_zero_habit_action_is_never_chosen():
    for seed in range(50):
        agent = _cookie_jar(seed=seed, habits={"stay": 0.0})
        assert agent.act() != "stay"


@pytest.mark.unit
def test_zero_precision_gives_uniform_policy_posterior():
    model = default_models.build_tmaze()
    agent = DiscreteAgent(*model, precision=0.0)
    agent.observe("cue_left")
    q_pi, G = agent.infer_policies()
    assert G[0] < G[1]
    assert np.allclose(q_pi, 0.5)


@pytest.mark.unit
def test_beam_width_limits_evaluated_policies():
    model = default_models.build_trap(depth=3)
    agent = DiscreteAgent(*model, planning_horizon=3, beam_width=2)
    agent.infer_policies()
    assert len(agent.policies) == 2
    assert all(len(policy) == 3 for policy in agent.policies)


@pytest.mark.unit
def test_on_observe_receives_previous_action_and_belief():
    calls = []
    model = default_models.build_light_switch()
    agent = Agent(
        model.belief,
        model.transition_model,
        model.observation_model,
        lambda belief: 0.0,
        seed=3,
        on_observe=lambda *args: calls.append(args),
    )

    first = agent.step("light_off")
    agent.step("light_on")

    observation, belief, prev_action, prev_belief = calls[0]
    assert observation == "light_off"
    assert belief.argmax() == "switch_off"
    assert prev_action is None and prev_belief is None

    observation, belief, prev_action, prev_belief = calls[1]
    assert prev_action == first
    assert prev_belief.argmax() == "switch_off"

    # observe and act alone never trigger the callback
    agent.observe("light_on")
    agent.act()
    assert len(calls) == 2


@pytest.mark.unit
def test_belief_history():
    agent = _cookie_jar(seed=1, save_belief_hist=True)
    agent.step("see_cookie")
    agent.step("see_empty")
    assert len(agent.qs_hist) == 2
    assert len(agent.q_pi_hist) == 2
    assert agent.qs_hist[0].argmax() == "cookie_left"


# Gaussian agent


@pytest.mark.unit
def test_gaussian_agent():
    agent = _gaussian_agent(seed=5)
    assert agent.state == 0.0
    assert agent.uncertainty == 1.0

    agent.observe(3.2)
    assert 0.0 < agent.state < 3.2
    assert agent.uncertainty < 1.0
    assert set(agent.export_belief()) == {"mean", "variance"}

    q_pi, G = agent.infer_policies()
    right = agent.policies.index(("right",))
    left = agent.policies.index(("left",))
    assert G[right] < G[left]
    assert q_pi[right] > q_pi[left]


@pytest.mark.unit
def test_gaussian_agent_moves_toward_preferred_observation():
    choices = [_gaussian_agent(seed=seed, precision=3.0).act() for seed in range(100)]
    assert choices.count("right") > choices.count("left")


@pytest.mark.unit
def test_gaussian_agent_validation():
    with pytest.raises(TypeError):
        GaussianAgent(
            GaussianBelief(0.0, 1.0),
            GaussianTransition({"stay": (lambda x: x, 0.1)}),
            GaussianObservation(scale=1.0, noise=0.1),
            preferences={"y": 1.0},
        )
    with pytest.raises(TypeError):
        GaussianAgent(
            DiscreteBelief({"a": 1.0}),
            GaussianTransition({"stay": (lambda x: x, 0.1)}),
            GaussianObservation(scale=1.0, noise=0.1),
            preferences=lambda y: 0.0,
        )
