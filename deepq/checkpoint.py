"""Checkpoint save/load.

We save enough state to resume training:
  - online Q-network weights
  - target network weights
  - optimizer state
  - solver iteration
  - anything the caller passes as `extra` (epsilon, episode, game, ...)

A missing file raises FileNotFoundError unchanged. A file that exists but
cannot be read back raises CheckpointError. Nothing is retried here; whether
to start fresh or abort is the caller's call.
"""

from __future__ import annotations

import os
from typing import Any

try:
    import torch
except ImportError as e:  # pragma: no cover
    raise ImportError("PyTorch is required. Install with: pip install torch") from e

from .errors import CheckpointError

REQUIRED_KEYS = ("q_state_dict", "target_state_dict", "optimizer_state_dict", "iteration")


def save_checkpoint(
    filepath: str,
    *,
    q_net,
    target_net,
    optimizer,
    iteration: int,
    extra: dict[str, Any] | None = None,
) -> None:
    """Save a training checkpoint."""
    os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)

    data: dict[str, Any] = {
        "q_state_dict": q_net.state_dict(),
        "target_state_dict": target_net.state_dict(),
        "optimizer_state_dict": optimizer.state_dict(),
        "iteration": int(iteration),
    }
    if extra:
        data.update(extra)

    torch.save(data, filepath)


def load_checkpoint(filepath: str, device) -> dict[str, Any]:
    """Read a checkpoint written by `save_checkpoint`.

    Returns:
        ckpt dict (caller restores the pieces it needs)
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"checkpoint not found: {filepath}")
    try:
        ckpt = torch.load(filepath, map_location=device, weights_only=True)
    except Exception as e:
        raise CheckpointError(f"cannot read checkpoint {filepath}: {e}") from e

    if not isinstance(ckpt, dict):
        raise CheckpointError(f"{filepath} does not contain a checkpoint dict")
    missing = [k for k in REQUIRED_KEYS if k not in ckpt]
    if missing:
        raise CheckpointError(f"{filepath} is missing {', '.join(missing)}")
    return ckpt
