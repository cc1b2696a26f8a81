"""Gymnasium ALE environment factory.

The env is created with `full_action_space=True`, so an action id is the
same number for the env, the agent and the network's output columns. The
game's minimal action set is what the agent is allowed to choose from.
"""

from __future__ import annotations

import ale_py
import gymnasium as gym

gym.register_envs(ale_py)


def make_env(game: str, *, seed: int | None = None, render: bool = False) -> gym.Env:
    """Raw-screen ALE env; frame skipping is done by the episode loop."""
    env = gym.make(
        f"ALE/{game}-v5",
        obs_type="rgb",
        frameskip=1,
        repeat_action_probability=0.0,
        full_action_space=True,
        render_mode="human" if render else None,
    )
    if seed is not None:
        env.action_space.seed(seed)
    return env


def legal_actions(env: gym.Env) -> list[int]:
    return [int(a) for a in env.unwrapped.ale.getMinimalActionSet()]
