"""Shared test doubles: frames, transitions and tiny deterministic networks."""

from __future__ import annotations

import numpy as np
import torch
import torch.nn as nn

from deepq.transition import FRAME_SHAPE, FRAME_STACK, N_OUTPUTS, TERMINAL, Continues, Transition, make_frame


def frame(value: int = 0):
    return make_frame(np.full(FRAME_SHAPE, value, dtype=np.uint8))


def stack(*values: int):
    if not values:
        values = (0,) * FRAME_STACK
    return tuple(frame(v) for v in values)


def transition(action: int = 0, reward: float = 0.0, *, terminal: bool = False, values=(0, 1, 2, 3), nxt: int = 4):
    state = stack(*values)
    return Transition(state, action, reward, TERMINAL if terminal else Continues(frame(nxt)))


class ConstantEvaluator:
    """Returns the same action values for every input; records batch sizes."""

    def __init__(self, values):
        self.values = np.asarray(values, dtype=np.float32)
        self.calls: list[int] = []

    def forward(self, inputs):
        self.calls.append(len(inputs))
        return np.tile(self.values, (len(inputs), 1))


class PixelEvaluator:
    """Action value 1 at column (top-left pixel of the oldest frame) % N_OUTPUTS."""

    def __init__(self):
        self.calls = 0

    def forward(self, inputs):
        self.calls += 1
        q = np.zeros((len(inputs), N_OUTPUTS), dtype=np.float32)
        for b, x in enumerate(inputs):
            q[b, int(x[0, 0, 0]) % N_OUTPUTS] = 1.0
        return q


class FixedValues(nn.Module):
    """Input-independent action values held in a single parameter."""

    def __init__(self, n_outputs: int = N_OUTPUTS, values=None):
        super().__init__()
        init = torch.zeros(n_outputs) if values is None else torch.as_tensor(values, dtype=torch.float32)
        self.values = nn.Parameter(init.clone())

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        return self.values.unsqueeze(0).expand(x.shape[0], -1)


class TinyNet(nn.Module):
    """Linear map from mean pixel intensity to action values."""

    def __init__(self, n_outputs: int = N_OUTPUTS):
        super().__init__()
        self.fc = nn.Linear(1, n_outputs)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        m = x.float().mean(dim=(1, 2, 3)).unsqueeze(1) / 255.0
        return self.fc(m)


class ScriptedEnv:
    """Gymnasium-style env: fixed reward per step, ends after `length` steps."""

    def __init__(self, length=10, reward=5.0, truncate=False):
        self.length = length
        self.reward = reward
        self.truncate = truncate
        self.t = 0
        self.actions = []

    def _screen(self):
        return np.full((210, 160, 3), (self.t * 10) % 256, dtype=np.uint8)

    def reset(self, seed=None):
        self.t = 0
        return self._screen(), {}

    def step(self, action):
        self.t += 1
        self.actions.append(action)
        end = self.t >= self.length
        terminated = end and not self.truncate
        truncated = end and self.truncate
        return self._screen(), self.reward, terminated, truncated, {}

    def close(self):
        pass
