"""Atari side of the agent: preprocessing, text rendering, env and episode loop."""

from .episode import clip_reward, play_one_episode
from .preprocess import preprocess_screen
from .rendering import draw_frame

__all__ = ["clip_reward", "draw_frame", "play_one_episode", "preprocess_screen"]
