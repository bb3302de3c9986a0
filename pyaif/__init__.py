from . import agent
from . import algos
from . import beliefs
from . import control
from . import default_models
from . import inference
from . import learning
from . import maths
from . import observation
from . import preferences
from . import transition
from . import utils

from .agent import Agent, DiscreteAgent, GaussianAgent
from .beliefs import DiscreteBelief, GaussianBelief
from .observation import DirichletObservation, DiscreteObservation, GaussianObservation
from .preferences import DirichletPreferences
from .transition import DirichletTransition, DiscreteTransition, GaussianActionModel, GaussianTransition
from .utils import Random
