"""Experience types.

A transition records one step of play:

    (state, action, reward, next)

where `state` is a stack of the last FRAME_STACK preprocessed frames and
`next` is either `Continues(frame)` (the single new frame that advances the
stack) or `TERMINAL` (the episode ended, nothing to bootstrap from).

Frames are read-only numpy arrays. A frame normally shows up in several
consecutive stacks, so it is shared by reference and never copied or mutated
after `make_frame()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple, Sequence, Tuple, Union

import numpy as np

FRAME_SIZE = 84
FRAME_SHAPE = (FRAME_SIZE, FRAME_SIZE)
FRAME_STACK = 4
N_OUTPUTS = 18  # full ALE action set

Frame = np.ndarray
FrameStack = Tuple[Frame, ...]


def make_frame(data) -> Frame:
    """Copy `data` into a read-only (84, 84) uint8 frame."""
    frame = np.array(data, dtype=np.uint8, copy=True)
    if frame.shape != FRAME_SHAPE:
        raise ValueError(f"frame must have shape {FRAME_SHAPE}, got {frame.shape}")
    frame.flags.writeable = False
    return frame


def _is_frozen(frame: np.ndarray) -> bool:
    while isinstance(frame, np.ndarray):
        if frame.flags.writeable:
            return False
        frame = frame.base
    return True


def _as_frame(frame) -> Frame:
    """Validate `frame`; a writable array (or a view of one) is copied into a read-only frame."""
    if not isinstance(frame, np.ndarray):
        raise ValueError(f"frame must be a numpy array, got {type(frame).__name__}")
    if frame.shape != FRAME_SHAPE or frame.dtype != np.uint8:
        raise ValueError(
            f"frame must be uint8 with shape {FRAME_SHAPE}, got {frame.dtype} {frame.shape}"
        )
    if _is_frozen(frame):
        return frame
    return make_frame(frame)


@dataclass(frozen=True, slots=True, eq=False)
class Continues:
    """The episode goes on; `frame` is the newest observation."""

    frame: Frame

    def __post_init__(self) -> None:
        object.__setattr__(self, "frame", _as_frame(self.frame))


class Terminal:
    """The episode ended. Use the `TERMINAL` singleton."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "TERMINAL"


TERMINAL = Terminal()

NextOutcome = Union[Continues, Terminal]


@dataclass(frozen=True, slots=True, eq=False)
class Transition:
    """A single experience tuple."""

    state: FrameStack
    action: int
    reward: float
    next: NextOutcome

    def __post_init__(self) -> None:
        state = tuple(_as_frame(f) for f in self.state)
        if len(state) != FRAME_STACK:
            raise ValueError(f"state must hold {FRAME_STACK} frames, got {len(state)}")
        action = int(self.action)
        if action < 0:
            raise ValueError(f"action must be a non-negative action id, got {action}")
        if not isinstance(self.next, (Continues, Terminal)):
            raise ValueError(
                f"next must be Continues(frame) or TERMINAL, got {type(self.next).__name__}"
            )
        # frozen: go through object.__setattr__ to normalize fields
        object.__setattr__(self, "state", state)
        object.__setattr__(self, "action", action)
        object.__setattr__(self, "reward", float(self.reward))

    @property
    def is_terminal(self) -> bool:
        return isinstance(self.next, Terminal)


class ActionValue(NamedTuple):
    """Best legal action for one state and its estimated value."""

    action: int
    value: float


def stack_frames(stacks: Sequence[FrameStack]) -> np.ndarray:
    """Batch stacked inputs into a (B, FRAME_STACK, 84, 84) uint8 array."""
    return np.stack([np.stack(s) for s in stacks]).astype(np.uint8, copy=False)
