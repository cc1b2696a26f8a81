"""Target network snapshot.

Bootstrap targets are computed from a frozen copy of the Q-network that is
only refreshed by an explicit `synchronize()`. The copy owns its own storage:
gradient steps on the live network never show through it.
"""

from __future__ import annotations

import copy

import numpy as np

try:
    import torch
    import torch.nn as nn
except ImportError as e:  # pragma: no cover
    raise ImportError("PyTorch is required. Install with: pip install torch") from e

from .value_function import ValueFunction


class TargetSnapshot:
    def __init__(self, network: nn.Module, device: torch.device):
        self.network = copy.deepcopy(network).to(device).eval()
        self.network.requires_grad_(False)
        self.device = torch.device(device)
        self.syncs = 0

    def synchronize(self, source: ValueFunction) -> None:
        """Overwrite every parameter and buffer with the live network's values."""
        self.network.load_state_dict(source.get_parameters())
        self.syncs += 1

    @torch.no_grad()
    def forward(self, inputs: np.ndarray) -> np.ndarray:
        x = torch.as_tensor(np.asarray(inputs), dtype=torch.uint8, device=self.device)
        return self.network(x).float().cpu().numpy()

    def get_parameters(self) -> dict[str, torch.Tensor]:
        return copy.deepcopy(self.network.state_dict())

    def set_parameters(self, params: dict[str, torch.Tensor]) -> None:
        self.network.load_state_dict(params)
