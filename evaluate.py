"""
Evaluate a trained DQN on an Atari game.
========================================

Usage:
    python evaluate.py --model checkpoints/breakout_final.pt
    python evaluate.py --model checkpoints/breakout_final.pt --episodes 10
    python evaluate.py --model checkpoints/breakout_final.pt --show-frame
"""

from __future__ import annotations

import argparse

import numpy as np

try:
    import torch
except ImportError:
    print("PyTorch is required. Install with: pip install torch")
    raise

from config import AGENT_CONFIG, ENV_CONFIG, EVAL_CONFIG

from atari.env import legal_actions, make_env
from atari.episode import play_one_episode
from deepq.agent import DQN
from deepq.value_function import SolverConfig


def evaluate(args: argparse.Namespace) -> dict:
    """Play `args.episodes` episodes with a fixed epsilon; no learning."""
    device = torch.device("cuda" if torch.cuda.is_available() and not args.cpu else "cpu")

    env = make_env(args.game, seed=args.seed, render=args.render)
    agent = DQN(
        legal_actions(env),
        SolverConfig(),
        AGENT_CONFIG["replay_size"],
        AGENT_CONFIG["discount_factor"],
        seed=args.seed,
        device=device,
    )
    agent.initialize()
    agent.load_trained_model(args.model)
    print(f"  Loaded weights from {args.model}")

    scores: list[float] = []
    for ep in range(1, int(args.episodes) + 1):
        result = play_one_episode(
            env,
            agent,
            args.epsilon,
            update=False,
            skip_frames=args.skip_frames,
            show_frame=args.show_frame,
            frame_delay=args.delay,
            seed=args.seed + ep,
        )
        scores.append(result["score"])
        print(f"  Episode {ep:>3d} │ score={result['score']:>7.1f} │ steps={result['steps']:>5d}")

    env.close()

    summary = {
        "avg_score": float(np.mean(scores)) if scores else 0.0,
        "min_score": float(min(scores)) if scores else 0.0,
        "max_score": float(max(scores)) if scores else 0.0,
    }
    print(
        f"\n  Avg={summary['avg_score']:.1f} │ "
        f"Range=[{summary['min_score']:.1f}, {summary['max_score']:.1f}]"
    )
    return summary


def build_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Evaluate a trained Atari DQN")
    p.add_argument("--model", type=str, required=True, help="Checkpoint with trained weights")
    p.add_argument("--game", type=str, default=ENV_CONFIG["game"])
    p.add_argument("--episodes", type=int, default=EVAL_CONFIG["n_episodes"])
    p.add_argument("--epsilon", type=float, default=EVAL_CONFIG["epsilon"])
    p.add_argument("--skip-frames", type=int, default=ENV_CONFIG["skip_frames"])
    p.add_argument("--show-frame", action="store_true", help="Print each preprocessed frame as text")
    p.add_argument("--delay", type=float, default=0.0, help="Delay after each shown frame")
    p.add_argument("--render", action="store_true", help="Open the emulator window")
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--cpu", action="store_true", help="Force CPU")
    return p.parse_args(argv)


if __name__ == "__main__":
    evaluate(build_args())
