"""DQN Training for Atari games.

This is a *thin* CLI entry point.

All of the "beef" lives in `deepq/` and `atari/`:
  - replay memory:     deepq/replay.py
  - action selection:  deepq/policy.py
  - minibatch targets: deepq/minibatch.py
  - target network:    deepq/target.py
  - agent / update:    deepq/agent.py
  - checkpoints:       deepq/checkpoint.py
  - preprocessing:     atari/preprocess.py
  - episode loop:      atari/episode.py

So when you read this file, you should mostly see:
  1) parse args
  2) create env + agent
  3) play episodes until the solver iteration budget is spent
"""

from __future__ import annotations

import argparse
import os
import random
import time

import numpy as np

try:
    import torch
except ImportError:
    print("PyTorch is required. Install with: pip install torch")
    raise

from config import AGENT_CONFIG, ENV_CONFIG, EVAL_CONFIG, PATHS, SOLVER_CONFIG, TRAIN_CONFIG

from atari.env import legal_actions, make_env
from atari.episode import play_one_episode
from deepq.agent import DQN
from deepq.schedules import AnnealedEpsilon
from deepq.value_function import SolverConfig


def build_agent(args: argparse.Namespace, actions: list[int], device: torch.device) -> DQN:
    solver = SolverConfig(
        optimizer=args.optimizer,
        learning_rate=args.lr,
        momentum=args.momentum,
        weight_decay=args.weight_decay,
        grad_clip=args.grad_clip,
    )
    agent = DQN(
        actions,
        solver,
        args.replay_size,
        args.gamma,
        clone_frequency=args.clone_frequency,
        minibatch_size=args.minibatch_size,
        seed=args.seed,
        device=device,
    )
    agent.initialize()
    return agent


def train(args: argparse.Namespace) -> None:
    # --- Reproducibility seeds ----------------------------------------------
    random.seed(args.seed)
    np.random.seed(args.seed)
    torch.manual_seed(args.seed)

    device = torch.device("cuda" if torch.cuda.is_available() and not args.cpu else "cpu")

    env = make_env(args.game, seed=args.seed)
    actions = legal_actions(env)
    agent = build_agent(args, actions, device)

    # --- Resume (optional) ---------------------------------------------------
    if args.resume:
        ckpt = agent.restore_solver(args.resume)
        print(f"  Resumed from {args.resume} (iteration {ckpt['iteration']})")
    elif args.model:
        agent.load_trained_model(args.model)
        print(f"  Loaded weights from {args.model}")

    os.makedirs(args.save_dir, exist_ok=True)

    # --- Pretty run header ---------------------------------------------------
    param_count = sum(p.numel() for p in agent.value_function.network.parameters())
    print("=" * 70)
    print(f"  DQN TRAINING — {args.game}")
    print("=" * 70)
    print(f"  Device:            {device}")
    print(f"  Legal actions:     {list(agent.legal_actions)}")
    print(f"  Network params:    {param_count:,}")
    print(f"  Optimizer:         {args.optimizer} (lr={args.lr})")
    print(f"  Gamma:             {args.gamma}")
    print(f"  Replay:            {args.replay_size:,} (start after {args.replay_start_size:,})")
    print(f"  Target clone:      every {args.clone_frequency:,} iterations")
    print(f"  Epsilon:           {args.eps_start} → {args.eps_end} over {args.eps_decay_iterations:,} its")
    print("=" * 70 + "\n")

    epsilon = AnnealedEpsilon(args.eps_start, args.eps_end, args.eps_decay_iterations)

    start_time = time.time()
    save_every = max(1, args.save_interval)
    last_saved = agent.current_iteration // save_every
    episode = 0

    while agent.current_iteration < args.max_iterations:
        episode += 1
        ep = play_one_episode(
            env,
            agent,
            epsilon,
            update=True,
            skip_frames=args.skip_frames,
            replay_start_size=args.replay_start_size,
        )

        # --- Logging ----------------------------------------------------------
        if args.log_interval > 0 and episode % args.log_interval == 0:
            print(
                f"  Ep {episode:>6d} │ "
                f"score={ep['score']:>7.1f} │ "
                f"steps={ep['steps']:>5d} │ "
                f"ε={epsilon(agent.current_iteration):.4f} │ "
                f"loss={ep['loss']:.4f} │ "
                f"iter={agent.current_iteration:>9,d} │ "
                f"mem={agent.memory_size:>7,d}"
            )

        # --- Evaluation -------------------------------------------------------
        if args.eval_interval > 0 and episode % args.eval_interval == 0:
            ev = play_one_episode(
                env,
                agent,
                args.eval_epsilon,
                update=False,
                skip_frames=args.skip_frames,
            )
            print(f"\n  ── EVAL @Ep {episode} ──  score={ev['score']:.1f} │ steps={ev['steps']}\n")

        # --- Periodic checkpoint ---------------------------------------------
        if agent.current_iteration // save_every > last_saved:
            last_saved = agent.current_iteration // save_every
            path = os.path.join(args.save_dir, f"{args.game.lower()}_iter_{agent.current_iteration}.pt")
            agent.save(path, episode=episode, game=args.game)
            print(f"  [Checkpoint → {path}]")

    env.close()
    elapsed = time.time() - start_time

    path = os.path.join(args.save_dir, f"{args.game.lower()}_final.pt")
    agent.save(path, episode=episode, game=args.game)

    print("\n" + "=" * 70)
    print("  TRAINING COMPLETE")
    print("=" * 70)
    print(f"  Episodes:     {episode}")
    print(f"  Iterations:   {agent.current_iteration:,}")
    print(f"  Time:         {elapsed:.1f}s ({elapsed/60:.1f} min)")
    print(f"  [Final model → {path}]")


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def build_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="DQN Training for Atari games",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python train.py                                       # Breakout, defaults
  python train.py --game Pong                           # Another game
  python train.py --resume checkpoints/breakout_final.pt  # Resume training
  python train.py --optimizer rmsprop --lr 2.5e-4       # Different solver
""",
    )

    # Environment
    env = p.add_argument_group("Environment")
    env.add_argument("--game", type=str, default=ENV_CONFIG["game"], help="ALE game name")
    env.add_argument("--skip-frames", type=int, default=ENV_CONFIG["skip_frames"], help="Frames to skip per action")

    # DQN hyperparameters
    dqn = p.add_argument_group("DQN Hyperparameters")
    dqn.add_argument("--gamma", type=float, default=AGENT_CONFIG["discount_factor"], help="Discount factor")
    dqn.add_argument("--minibatch-size", type=int, default=AGENT_CONFIG["minibatch_size"], help="Transitions per update")
    dqn.add_argument("--replay-size", type=int, default=AGENT_CONFIG["replay_size"], help="Replay memory capacity")
    dqn.add_argument(
        "--replay-start-size",
        type=int,
        default=AGENT_CONFIG["replay_start_size"],
        help="Updates start once memory holds more than this",
    )
    dqn.add_argument(
        "--clone-frequency",
        type=int,
        default=AGENT_CONFIG["clone_frequency"],
        help="Iterations between target network refreshes",
    )

    # Solver
    sol = p.add_argument_group("Solver")
    sol.add_argument(
        "--optimizer",
        type=str,
        default=SOLVER_CONFIG["optimizer"],
        choices=["adadelta", "rmsprop", "adam", "sgd"],
    )
    sol.add_argument("--lr", type=float, default=SOLVER_CONFIG["learning_rate"], help="Learning rate")
    sol.add_argument("--momentum", type=float, default=SOLVER_CONFIG["momentum"])
    sol.add_argument("--weight-decay", type=float, default=SOLVER_CONFIG["weight_decay"])
    sol.add_argument("--grad-clip", type=float, default=SOLVER_CONFIG["grad_clip"], help="Max gradient norm")

    # Exploration
    exp = p.add_argument_group("Exploration")
    exp.add_argument("--eps-start", type=float, default=TRAIN_CONFIG["eps_start"], help="Initial epsilon")
    exp.add_argument("--eps-end", type=float, default=TRAIN_CONFIG["eps_end"], help="Final epsilon")
    exp.add_argument(
        "--eps-decay-iterations",
        type=int,
        default=TRAIN_CONFIG["eps_decay_iterations"],
        help="Iterations to anneal epsilon over",
    )
    exp.add_argument("--eval-epsilon", type=float, default=EVAL_CONFIG["epsilon"], help="Epsilon during evaluation")

    # Training
    trn = p.add_argument_group("Training")
    trn.add_argument("--max-iterations", type=int, default=TRAIN_CONFIG["max_iterations"])
    trn.add_argument("--resume", type=str, default=None, help="Checkpoint to resume training from")
    trn.add_argument("--model", type=str, default=None, help="Start from trained weights only")

    # Logging & saving
    log = p.add_argument_group("Logging & Saving")
    log.add_argument("--log-interval", type=int, default=TRAIN_CONFIG["log_interval"])
    log.add_argument("--eval-interval", type=int, default=TRAIN_CONFIG["eval_interval"])
    log.add_argument("--save-interval", type=int, default=TRAIN_CONFIG["save_interval"])
    log.add_argument("--save-dir", type=str, default=PATHS["save_dir"])

    # Misc
    misc = p.add_argument_group("Misc")
    misc.add_argument("--seed", type=int, default=0)
    misc.add_argument("--cpu", action="store_true", help="Force CPU")

    return p.parse_args(argv)


if __name__ == "__main__":
    train(build_args())
