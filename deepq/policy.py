"""Action selection (greedy and epsilon-greedy).

Ties between equally valued legal actions go to the lowest action id:
legal actions are kept sorted and `argmax` returns the first maximum.
"""

from __future__ import annotations

import random
from typing import Protocol, Sequence

import numpy as np

from .transition import ActionValue, FrameStack, stack_frames


class BatchEvaluator(Protocol):
    def forward(self, inputs: np.ndarray) -> np.ndarray: ...


def best_legal(q_values: np.ndarray, legal_actions: Sequence[int]) -> list[ActionValue]:
    """Pick the best legal action per row of a (B, n_outputs) value array."""
    legal = np.asarray(legal_actions, dtype=np.int64)
    q_legal = np.asarray(q_values)[:, legal]
    best = q_legal.argmax(axis=1)
    return [ActionValue(int(legal[i]), float(q_legal[row, i])) for row, i in enumerate(best)]


def select_greedily(
    evaluator: BatchEvaluator,
    stacks: Sequence[FrameStack],
    legal_actions: Sequence[int],
) -> list[ActionValue]:
    """Score every stack in one batched forward call; output order == input order."""
    if len(stacks) == 0:
        return []
    q_values = evaluator.forward(stack_frames(stacks))
    return best_legal(q_values, legal_actions)


def select_epsilon_greedy(
    evaluator: BatchEvaluator,
    stack: FrameStack,
    legal_actions: Sequence[int],
    epsilon: float,
    rng: random.Random,
) -> int:
    """Uniform random legal action with probability `epsilon`, else greedy."""
    epsilon = float(epsilon)
    if not 0.0 <= epsilon <= 1.0:
        raise ValueError(f"epsilon must be in [0, 1], got {epsilon}")
    if rng.random() < epsilon:
        return int(rng.choice(legal_actions))
    return select_greedily(evaluator, [stack], legal_actions)[0].action
