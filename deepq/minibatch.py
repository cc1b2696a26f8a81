"""Minibatch assembly and bootstrap targets.

A minibatch is three parallel arrays:

    inputs   (B, 4, 84, 84) uint8   stacked frames of each sampled state
    targets  (B, n_outputs) float32 target value in the taken action's column
    filters  (B, n_outputs) float32 1.0 in the taken action's column

Everything outside the taken action's column is 0 in both arrays, so a single
regression loss over the whole output only trains Q(s, a) for the action
that was actually played.

Target per transition:
    terminal:      r
    non-terminal:  r + gamma * max_a' Q_target(s', a')
"""

from __future__ import annotations

from typing import NamedTuple, Sequence

import numpy as np

from .policy import BatchEvaluator, select_greedily
from .transition import N_OUTPUTS, Continues, FrameStack, Frame, Transition, stack_frames


class Minibatch(NamedTuple):
    inputs: np.ndarray
    targets: np.ndarray
    filters: np.ndarray


def successor_stack(state: FrameStack, frame: Frame) -> FrameStack:
    """Drop the oldest frame and append `frame`."""
    return tuple(state[1:]) + (frame,)


def bootstrap_target(reward: float, next_value: float, gamma: float) -> float:
    return float(reward) + float(gamma) * float(next_value)


def build_minibatch(
    transitions: Sequence[Transition],
    target: BatchEvaluator,
    legal_actions: Sequence[int],
    gamma: float,
    n_outputs: int = N_OUTPUTS,
) -> Minibatch:
    if len(transitions) == 0:
        raise ValueError("cannot build a minibatch from zero transitions")
    gamma = float(gamma)
    if not 0.0 <= gamma <= 1.0:
        raise ValueError(f"gamma must be in [0, 1], got {gamma}")

    n_outputs = int(n_outputs)
    batch_size = len(transitions)
    inputs = stack_frames([t.state for t in transitions])

    # Successors of non-terminal transitions, scored in one target pass.
    rows: list[int] = []
    successors: list[FrameStack] = []
    for i, t in enumerate(transitions):
        if t.action >= n_outputs:
            raise ValueError(f"action {t.action} is outside the {n_outputs} network outputs")
        if isinstance(t.next, Continues):
            rows.append(i)
            successors.append(successor_stack(t.state, t.next.frame))
    next_values = np.zeros(batch_size, dtype=np.float64)
    for i, av in zip(rows, select_greedily(target, successors, legal_actions)):
        next_values[i] = av.value

    targets = np.zeros((batch_size, n_outputs), dtype=np.float32)
    filters = np.zeros((batch_size, n_outputs), dtype=np.float32)
    for i, t in enumerate(transitions):
        if t.is_terminal:
            value = t.reward
        else:
            value = bootstrap_target(t.reward, next_values[i], gamma)
        targets[i, t.action] = value
        filters[i, t.action] = 1.0

    return Minibatch(inputs=inputs, targets=targets, filters=filters)
