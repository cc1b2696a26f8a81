"""Deep Q-Network core: replay memory, epsilon-greedy policy, target network,
minibatch targets and the update loop."""

from .agent import DQN
from .errors import CheckpointError, DQNError, InsufficientMemoryError, NotInitializedError
from .minibatch import Minibatch, bootstrap_target, build_minibatch, successor_stack
from .replay import ReplayBuffer
from .transition import (
    FRAME_SHAPE,
    FRAME_STACK,
    N_OUTPUTS,
    TERMINAL,
    ActionValue,
    Continues,
    Terminal,
    Transition,
    make_frame,
)
from .value_function import SolverConfig

__all__ = [
    "DQN",
    "SolverConfig",
    "ReplayBuffer",
    "Transition",
    "Continues",
    "Terminal",
    "TERMINAL",
    "ActionValue",
    "Minibatch",
    "make_frame",
    "build_minibatch",
    "bootstrap_target",
    "successor_stack",
    "FRAME_SHAPE",
    "FRAME_STACK",
    "N_OUTPUTS",
    "DQNError",
    "InsufficientMemoryError",
    "NotInitializedError",
    "CheckpointError",
]
