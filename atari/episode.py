"""One episode of play.

Per agent step:
  - repeat the chosen action `skip_frames + 1` times, summing raw reward
  - preprocess the last screen into a frame
  - clip the summed reward to {-1, 0, +1} for learning
  - when learning (`update=True`): record
    (stack, action, clipped_reward, Continues(frame) | TERMINAL) and run one
    agent update once memory is past `replay_start_size`

Until the stack holds FRAME_STACK frames the agent does not act; NOOP is
played instead and nothing is recorded.

Truncation (time limit) ends the episode but is not a terminal state: the
last transition keeps its successor frame.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Callable, Union

import numpy as np

from deepq.agent import DQN
from deepq.transition import FRAME_STACK, TERMINAL, Continues, Transition

from .preprocess import preprocess_screen
from .rendering import draw_frame

EpsilonFn = Callable[[int], float]

NOOP = 0  # ALE PLAYER_A_NOOP


def clip_reward(reward: float) -> float:
    return float(np.sign(reward))


def play_one_episode(
    env,
    agent: DQN,
    epsilon: Union[float, EpsilonFn],
    *,
    update: bool,
    skip_frames: int = 3,
    replay_start_size: int = 500,
    show_frame: bool = False,
    frame_delay: float = 0.0,
    seed: int | None = None,
) -> dict:
    """Play until the game ends.

    `epsilon` is either a constant or a function of the agent's current
    solver iteration (for annealing during training).

    Returns summary dict:
      score, steps, transitions, updates, loss
    """
    obs, _ = env.reset(seed=seed)
    frames: deque = deque([preprocess_screen(obs)], maxlen=FRAME_STACK)

    score = 0.0
    steps = 0
    recorded = 0
    updates = 0
    losses: list[float] = []

    done = False
    while not done:
        stack = tuple(frames) if len(frames) == FRAME_STACK else None

        if stack is None:
            action = NOOP
        else:
            eps = epsilon(agent.current_iteration) if callable(epsilon) else epsilon
            action = agent.select_action(stack, eps)

        raw_reward = 0.0
        terminated = truncated = False
        for _ in range(int(skip_frames) + 1):
            obs, r, terminated, truncated, _ = env.step(action)
            raw_reward += float(r)
            if terminated or truncated:
                break
        score += raw_reward
        steps += 1
        done = bool(terminated or truncated)

        frame = preprocess_screen(obs)
        if show_frame:
            print(draw_frame(frame))
            if frame_delay > 0:
                time.sleep(frame_delay)

        if update and stack is not None:
            nxt = TERMINAL if terminated else Continues(frame)
            agent.add_transition(Transition(stack, action, clip_reward(raw_reward), nxt))
            recorded += 1
            if agent.memory_size > replay_start_size and agent.memory_size >= agent.minibatch_size:
                losses.append(agent.update())
                updates += 1

        frames.append(frame)

    return {
        "score": score,
        "steps": steps,
        "transitions": recorded,
        "updates": updates,
        "loss": float(np.mean(losses)) if losses else 0.0,
    }
