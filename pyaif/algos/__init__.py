from .beam import Beam, run_beam_search
from .kalman import run_kalman_update, run_linearized_prediction
