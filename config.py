"""
Configuration for Atari DQN
===========================
"""

# Environment Configuration
ENV_CONFIG = {
    "game": "Breakout",            # ALE game name (ALE/<game>-v5)
    "skip_frames": 3,              # Action is repeated skip_frames + 1 times
}

# DQN Hyperparameters
AGENT_CONFIG = {
    "discount_factor": 0.95,       # Gamma: discount factor
    "minibatch_size": 32,          # Transitions per update
    "replay_size": 500_000,        # Replay memory capacity
    "replay_start_size": 500,      # No updates until memory holds more than this
    "clone_frequency": 10_000,     # Solver iterations between target refreshes
}

# Solver (optimizer) Configuration
SOLVER_CONFIG = {
    "optimizer": "adadelta",       # adadelta | rmsprop | adam | sgd
    "learning_rate": 0.2,
    "momentum": 0.95,              # AdaDelta decay / RMSProp alpha / SGD momentum
    "weight_decay": 0.0,
    "grad_clip": None,             # Max gradient norm (None = off)
}

# Training Configuration
TRAIN_CONFIG = {
    "max_iterations": 10_000_000,  # Stop after this many solver iterations
    "eps_start": 1.0,              # Initial exploration rate
    "eps_end": 0.1,                # Final exploration rate
    "eps_decay_iterations": 1_000_000,
    "save_interval": 50_000,       # Checkpoint every N solver iterations
    "eval_interval": 100,          # Evaluate every N episodes (0 = off)
    "log_interval": 1,             # Print stats every N episodes
}

# Evaluation Configuration
EVAL_CONFIG = {
    "epsilon": 0.05,
    "n_episodes": 1,
}

# Paths
PATHS = {
    "save_dir": "./checkpoints",
}
