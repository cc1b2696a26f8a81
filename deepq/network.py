"""Default Q-network.

Keep networks in their own module so the agent never depends on a particular
architecture: `DQN` takes any factory returning an `nn.Module` that maps
(B, FRAME_STACK, 84, 84) uint8 frames to (B, n_outputs) action values.
"""

from __future__ import annotations

try:
    import torch
    import torch.nn as nn
except ImportError as e:  # pragma: no cover
    raise ImportError("PyTorch is required. Install with: pip install torch") from e

from .transition import FRAME_SIZE, FRAME_STACK, N_OUTPUTS


class QNetwork(nn.Module):
    """Convolutional Q-network from "Playing Atari with Deep RL" (2013).

    Input:  (B, 4, 84, 84) frames, uint8 or float in [0, 255]
    Output: (B, n_outputs)
    """

    def __init__(self, n_outputs: int = N_OUTPUTS, in_frames: int = FRAME_STACK):
        super().__init__()
        self.features = nn.Sequential(
            nn.Conv2d(int(in_frames), 16, kernel_size=8, stride=4),
            nn.ReLU(),
            nn.Conv2d(16, 32, kernel_size=4, stride=2),
            nn.ReLU(),
            nn.Flatten(),
        )
        with torch.no_grad():
            dummy = torch.zeros(1, int(in_frames), FRAME_SIZE, FRAME_SIZE)
            n_flat = self.features(dummy).shape[1]
        self.head = nn.Sequential(
            nn.Linear(n_flat, 256),
            nn.ReLU(),
            nn.Linear(256, int(n_outputs)),
        )

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = x.float() / 255.0
        return self.head(self.features(x))
