#!/usr/bin/env python
# -*- coding: utf-8 -*-

""" Agent Class

"""

import logging
import warnings

import numpy as np

from pyaif import control, utils
from pyaif.algos import run_beam_search
from pyaif.beliefs import DiscreteBelief, GaussianBelief
from pyaif.preferences import resolve_preferences

logger = logging.getLogger(__name__)


class Agent(object):
    """
    Active Inference Agent Class

    This is the generic perception-action core of an Active Inference agent. It
    keeps a belief about the hidden state of the world, updates it from incoming
    observations and chooses actions by minimising Expected Free Energy (EFE).

    THE ACTIVE INFERENCE CYCLE:
    ===========================

    1. PERCEPTION (observe):
       - Receive an observation from the environment
       - Update the belief with the observation model (Bayes' rule or Kalman filter)

    2. LEARNING (on_observe callback, only during ``step``):
       - Hand the observation, the new belief, the previous action and the
         previous belief to a callback that can update learnable models

    3. PLANNING (infer_policies):
       - Grow candidate action sequences (policies) up to ``planning_horizon``
         with beam search, scoring every predicted belief with ``efe_fn``
       - Turn the cumulative EFEs into a posterior over policies:
         P(π) ∝ exp(−β × G(π)), re-weighted by habits when configured

    4. ACTION (sample_action):
       - Sample one policy from the posterior and return its first action

    The agent knows nothing about the kind of belief it holds: the transition
    model, the observation model and ``efe_fn`` decide that. ``DiscreteAgent``
    and ``GaussianAgent`` wire these up for the two supported belief types.

    The basic usage is as follows:

    >>> my_agent = Agent(belief, transition_model, observation_model, efe_fn, seed=42)
    >>> my_agent.observe(observation)
    >>> q_pi, G = my_agent.infer_policies()
    >>> next_action = my_agent.sample_action()

    or, equivalently for a whole timestep:

    >>> next_action = my_agent.step(observation)
    """

    def __init__(
        self,
        belief,                 # Initial belief about the hidden state (copied, never aliased)
        transition_model,       # How actions change hidden states: exposes ``actions`` and ``predict``
        observation_model,      # How hidden states generate observations: exposes ``update``
        efe_fn,                 # Scores a predicted belief, lower is better
        random=None,            # Source of randomness for action sampling (a ``utils.Random``)
        seed=None,              # Seed for a new ``utils.Random`` when ``random`` is not given
        planning_horizon=1,     # Number of actions in every policy (1 = greedy)
        precision=1.0,          # Policy precision β: higher = more deterministic choices
        habits=None,            # Habitual prior over actions, ``action -> weight``
        beam_width=0,           # Policies kept after each search step (0 = no pruning)
        on_observe=None,        # Callback run by ``step`` after every observation
        save_belief_hist=False, # Whether to record beliefs and policy posteriors over time
    ):
        """
        Initialize an Active Inference Agent

        Parameters
        ----------
        belief: ``DiscreteBelief`` or ``GaussianBelief``
            Initial belief. A copy is stored.
        transition_model:
            Model exposing ``actions`` (non-empty) and ``predict(belief, action)``.
        observation_model:
            Model exposing ``update(belief, observation)``.
        efe_fn: callable
            ``efe_fn(belief) -> float``, the Expected Free Energy of a predicted belief.
        random: ``utils.Random``, default None
            Randomness source owned by this agent.
        seed: ``int``, default None
            Seed used to build the randomness source when ``random`` is None.
        planning_horizon: ``int``, default 1
            Length of the policies. Clamped to at least 1.
        precision: ``float``, default 1.0
            Inverse temperature of the policy posterior. Clamped to at least 0.
        habits: ``dict``, default None
            Non-negative prior weights over actions; unlisted actions weigh 1.
        beam_width: ``int``, default 0
            Maximum number of partial policies kept after each expansion.
            ``0`` or negative disables pruning.
        on_observe: callable, default None
            ``on_observe(observation, belief, prev_action, prev_belief)``, run by
            ``step`` between perception and planning.
        save_belief_hist: ``bool``, default False
            Record ``qs_hist`` and ``q_pi_hist``.
        """

        ### STEP 1: Validate and store the belief ###

        if not isinstance(belief, (DiscreteBelief, GaussianBelief)):
            raise TypeError(
                'belief must be a DiscreteBelief or a GaussianBelief'
            )
        self._belief = belief.copy()

        ### STEP 2: Validate and store the generative model ###

        self.transition_model = transition_model
        self.observation_model = observation_model

        self.actions = tuple(transition_model.actions)
        if len(self.actions) == 0:
            raise ValueError("Transition model must declare at least one action")

        if not callable(efe_fn):
            raise TypeError(
                'efe_fn must be callable, mapping a predicted belief to its Expected Free Energy'
            )
        self.efe_fn = efe_fn

        if on_observe is not None and not callable(on_observe):
            raise TypeError(
                'on_observe must be callable or None'
            )
        self.on_observe = on_observe

        ### STEP 3: Setup the randomness source ###

        # Every agent owns its generator, so seeded agents never interfere with each other
        self.random = random if random is not None else utils.Random(seed)

        ### STEP 4: Setup planning parameters ###

        self.planning_horizon = max(1, int(planning_horizon))
        if self.planning_horizon != planning_horizon:
            warnings.warn(
                f"`planning_horizon` must be an integer >= 1, got {planning_horizon}. Setting it to {self.planning_horizon}"
            )

        self.precision = max(0.0, float(precision))
        if precision < 0:
            warnings.warn(
                f"`precision` must be non-negative, got {precision}. Setting it to 0 (uniform policy posterior)"
            )

        self.beam_width = int(beam_width)

        if habits is not None:
            if not isinstance(habits, dict):
                raise TypeError(
                    'habits must be a dict mapping actions to non-negative weights'
                )
            if any(weight < 0 for weight in habits.values()):
                raise ValueError("Habit weights must be non-negative")
            habits = dict(habits)
        self.habits = habits

        ### STEP 5: Initialize history tracking and state variables ###

        if save_belief_hist:
            self.qs_hist = []      # Belief after each observation
            self.q_pi_hist = []    # Policy posterior after each planning call

        self.policies = None       # Policies evaluated by the last planning call
        self.q_pi = None           # Posterior over those policies
        self.G = None              # Their cumulative Expected Free Energies
        self.action = None         # Last action returned by ``sample_action``
        self.prev_action = None    # Action chosen by the previous ``step``
        self._prev_belief = None   # Belief when that action was chosen

    @property
    def belief(self):
        """
        Copy of the current belief.
        """
        return self._belief.copy()

    @property
    def prev_belief(self):
        """
        Copy of the belief recorded by the previous ``step``, or None before the first one.
        """
        return None if self._prev_belief is None else self._prev_belief.copy()

    def reset_belief(self, belief):
        """
        Replace the current belief wholesale. Learnt model parameters are kept.
        """
        if not isinstance(belief, type(self._belief)):
            raise TypeError(
                f'belief must be a {type(self._belief).__name__}, got {type(belief).__name__}'
            )
        self._belief = belief.copy()

    def observe(self, observation):
        """
        STATE INFERENCE: update the belief from one observation.

        The posterior is computed by the observation model: Bayes' rule for
        discrete beliefs, the Kalman filter for Gaussian ones.

        Parameters
        ----------
        observation:
            A label for discrete models, a scalar for Gaussian ones.

        Returns
        ---------
        belief:
            Copy of the posterior belief.
        """

        self._belief = self.observation_model.update(self._belief, observation)

        if hasattr(self, "qs_hist"):
            self.qs_hist.append(self._belief.copy())

        return self.belief

    def infer_policies(self):
        """
        POLICY INFERENCE: evaluate candidate policies and build the posterior over them.

        Policies are found with beam search from the current belief, each predicted
        step scored by ``efe_fn``. The cumulative scores are then passed through
        a softmin with precision β, re-weighted by habits if any are configured.

        Returns
        ----------
        q_pi: 1D ``numpy.ndarray``
            Posterior over policies, aligned with ``self.policies``.
        G: 1D ``numpy.ndarray``
            Cumulative Expected Free Energy of each policy. Lower is better.
        """

        beams = run_beam_search(
            self._belief,
            self.actions,
            self.transition_model.predict,
            self.efe_fn,
            horizon=self.planning_horizon,
            beam_width=self.beam_width,
        )

        policies = [beam.policy for beam in beams]
        G = np.array([beam.efe for beam in beams], dtype=float)
        q_pi = control.update_posterior_policies(G, self.precision, policies, self.habits)

        if hasattr(self, "q_pi_hist"):
            self.q_pi_hist.append(q_pi)

        self.policies = policies
        self.q_pi = q_pi
        self.G = G

        return q_pi, G

    def sample_action(self):
        """
        ACTION SELECTION: sample a policy from ``q_pi`` and commit to its first action.

        Returns
        ----------
        action:
            One of ``self.actions``.
        """

        if self.q_pi is None:
            raise RuntimeError("No policy posterior yet, call infer_policies() first")

        policy = control.sample_policy(self.q_pi, self.policies, self.random)
        action = policy[0]

        logger.debug("selected action %r from policy %r", action, policy)

        self.action = action

        return action

    def act(self):
        """
        Plan from the current belief and return the chosen action.
        """
        self.infer_policies()
        return self.sample_action()

    def step(self, observation):
        """
        One full perception-action cycle.

        1. update the belief from ``observation``
        2. run ``on_observe`` with the new belief and the previous action and belief
        3. plan and choose an action
        4. remember that action and the current belief for the next cycle

        Returns
        ----------
        action:
            The chosen action.
        """

        self.observe(observation)

        if self.on_observe is not None:
            self.on_observe(observation, self.belief, self.prev_action, self.prev_belief)

        action = self.act()

        self.prev_action = action
        self._prev_belief = self._belief.copy()

        return action


def _check_state_space(belief, transition_model, observation_model):
    states = set(belief.states)
    if states != set(transition_model.states) or states != set(observation_model.states):
        raise ValueError(
            "Belief, transition model and observation model must be defined over the same states: "
            f"{list(belief.states)}, {list(transition_model.states)}, {list(observation_model.states)}"
        )


class DiscreteAgent(Agent):
    """
    Agent over a finite set of named hidden states.

    The Expected Free Energy is derived from the observation model and the
    preferences (ambiguity + risk), and learnable observation and transition
    models are updated automatically by ``step``:

    - the observation model learns from every observation
    - the transition model learns once a previous action exists, from the belief
      before that action and the belief after observing its outcome

    >>> agent = DiscreteAgent(
    ...     DiscreteBelief({"switch_on": 0.5, "switch_off": 0.5}),
    ...     transition_model,
    ...     observation_model,
    ...     preferences={"light_on": 0.0, "light_off": -10.0},
    ...     seed=42,
    ... )
    >>> action = agent.step("light_off")   # most likely "turn_on"

    Parameters
    ----------
    preferences: ``dict`` or ``DirichletPreferences``, default None
        Log-preferences over observations. Unlisted observations score -10.
        Values must be finite: ``-inf`` makes every policy infinitely bad and
        raises ``ValueError``.
        ``DirichletPreferences`` are re-read every time a belief is scored, so
        learning them changes the agent's choices without rebuilding it.
    strict: ``bool``, default False
        Reject preference keys that are not observations of the observation
        model and habit keys that are not actions of the transition model.

    All other keyword arguments are those of ``Agent``.
    """

    def __init__(
        self,
        belief,
        transition_model,
        observation_model,
        preferences=None,
        random=None,
        seed=None,
        planning_horizon=1,
        precision=1.0,
        habits=None,
        beam_width=0,
        save_belief_hist=False,
        strict=False,
    ):

        if not isinstance(belief, DiscreteBelief):
            raise TypeError(
                'DiscreteAgent needs a DiscreteBelief'
            )

        _check_state_space(belief, transition_model, observation_model)

        # Fails early on preferences of the wrong type
        log_prefs = resolve_preferences(preferences)
        if not all(np.isfinite(value) for value in log_prefs.values()):
            raise ValueError(
                "Log-preferences must be finite, use a large negative value for unwanted observations"
            )

        if strict:
            utils.check_unknown_labels(log_prefs.keys(), observation_model.observations, "observation")
            if isinstance(habits, dict):
                utils.check_unknown_labels(habits.keys(), transition_model.actions, "action")

        self._preferences = preferences

        super().__init__(
            belief,
            transition_model,
            observation_model,
            self._expected_free_energy,
            random=random,
            seed=seed,
            planning_horizon=planning_horizon,
            precision=precision,
            habits=habits,
            beam_width=beam_width,
            on_observe=self._update_models,
            save_belief_hist=save_belief_hist,
        )

    def reset_belief(self, belief):
        """
        Replace the current belief. The new belief must cover the same states as the models.
        """
        if isinstance(belief, DiscreteBelief):
            _check_state_space(belief, self.transition_model, self.observation_model)
        super().reset_belief(belief)

    def _expected_free_energy(self, belief):
        return control.compute_expected_free_energy(belief, self.observation_model, self._preferences)

    def _update_models(self, observation, belief, prev_action, prev_belief):
        """
        PARAMETER LEARNING: add this step's evidence to the learnable models.
        """

        if self.observation_model.learnable:
            self.observation_model.learn(observation, belief)

        # The first step has no previous action, so there is no transition to learn from
        if self.transition_model.learnable and prev_action is not None:
            self.transition_model.learn(prev_action, prev_belief, belief)

    @property
    def preferences(self):
        """
        Current ``observation -> log-preference`` mapping.
        """
        return resolve_preferences(self._preferences)

    @property
    def state(self):
        """
        Most probable hidden state (MAP estimate).
        """
        return self._belief.argmax()

    @property
    def uncertainty(self):
        """
        Entropy of the current belief in nats.
        """
        return self._belief.entropy()

    @property
    def free_energy(self):
        """
        Variational Free Energy of the current belief: −entropy + ambiguity.
        """
        return -self._belief.entropy() + control.compute_ambiguity(self._belief, self.observation_model)

    def export_belief(self):
        """
        Plain ``state -> probability`` mapping of the current belief.
        """
        return self._belief.to_dict()


class GaussianAgent(Agent):
    """
    Agent over a 1-D continuous hidden state with a Gaussian belief.

    The Expected Free Energy of a predicted belief is −preferences(E[y]), where
    E[y] is the observation the observation model expects from that belief.

    Parameters
    ----------
    preferences: callable
        ``preferences(y) -> float``, how much the agent likes observing ``y``.
        Higher is better.

    All other keyword arguments are those of ``Agent``.
    """

    def __init__(
        self,
        belief,
        transition_model,
        observation_model,
        preferences,
        random=None,
        seed=None,
        planning_horizon=1,
        precision=1.0,
        habits=None,
        beam_width=0,
        on_observe=None,
        save_belief_hist=False,
    ):

        if not isinstance(belief, GaussianBelief):
            raise TypeError(
                'GaussianAgent needs a GaussianBelief'
            )
        if not callable(preferences):
            raise TypeError(
                'preferences must be a callable scoring a predicted observation'
            )
        self.preferences = preferences

        super().__init__(
            belief,
            transition_model,
            observation_model,
            self._expected_free_energy,
            random=random,
            seed=seed,
            planning_horizon=planning_horizon,
            precision=precision,
            habits=habits,
            beam_width=beam_width,
            on_observe=on_observe,
            save_belief_hist=save_belief_hist,
        )

    def _expected_free_energy(self, belief):
        return control.compute_expected_free_energy_gaussian(belief, self.observation_model, self.preferences)

    @property
    def state(self):
        """
        Posterior mean.
        """
        return self._belief.mean

    @property
    def uncertainty(self):
        """
        Posterior variance.
        """
        return self._belief.variance

    def export_belief(self):
        return self._belief.to_dict()
