"""The live value function: forward passes, gradient steps, parameters.

Everything above this module speaks numpy; everything below it is torch.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Iterable, Optional

import numpy as np

try:
    import torch
    import torch.nn as nn
    import torch.optim as optim
except ImportError as e:  # pragma: no cover
    raise ImportError("PyTorch is required. Install with: pip install torch") from e


@dataclass(frozen=True)
class SolverConfig:
    """Optimizer settings.

    The defaults are the AdaDelta settings used for the 2013 Atari runs
    (base_lr 0.2, decay 0.95).
    """

    optimizer: str = "adadelta"
    learning_rate: float = 0.2
    momentum: float = 0.95
    weight_decay: float = 0.0
    grad_clip: Optional[float] = None


def build_optimizer(params: Iterable[nn.Parameter], config: SolverConfig) -> optim.Optimizer:
    name = config.optimizer.lower()
    lr = float(config.learning_rate)
    if name == "adadelta":
        return optim.Adadelta(params, lr=lr, rho=config.momentum, weight_decay=config.weight_decay)
    if name == "rmsprop":
        return optim.RMSprop(params, lr=lr, alpha=config.momentum, weight_decay=config.weight_decay)
    if name == "adam":
        return optim.Adam(params, lr=lr, weight_decay=config.weight_decay)
    if name == "sgd":
        return optim.SGD(params, lr=lr, momentum=config.momentum, weight_decay=config.weight_decay)
    raise ValueError(f"unknown optimizer {config.optimizer!r}")


def masked_euclidean_loss(
    q_values: torch.Tensor,
    targets: torch.Tensor,
    filters: torch.Tensor,
) -> torch.Tensor:
    """0.5 * sum((Q * filter - target)^2) / B.

    The filter multiplies the prediction, so every column with filter 0 gets
    exactly zero gradient.
    """
    diff = q_values * filters - targets
    return 0.5 * diff.pow(2).sum() / q_values.shape[0]


class ValueFunction:
    """Live Q-network plus its optimizer."""

    def __init__(
        self,
        network: nn.Module,
        optimizer: optim.Optimizer,
        device: torch.device,
        *,
        grad_clip: Optional[float] = None,
    ):
        self.network = network
        self.optimizer = optimizer
        self.device = torch.device(device)
        self.grad_clip = grad_clip
        self.iteration = 0

    def _tensor(self, x: np.ndarray, dtype: torch.dtype) -> torch.Tensor:
        return torch.as_tensor(np.asarray(x), dtype=dtype, device=self.device)

    @torch.no_grad()
    def forward(self, inputs: np.ndarray) -> np.ndarray:
        """Evaluate a batch of stacked inputs; returns (B, n_outputs) float32."""
        x = self._tensor(inputs, torch.uint8)
        return self.network(x).float().cpu().numpy()

    def apply_gradient_step(
        self,
        inputs: np.ndarray,
        targets: np.ndarray,
        filters: np.ndarray,
    ) -> float:
        """Run one optimizer step on the masked regression loss."""
        x = self._tensor(inputs, torch.uint8)
        y = self._tensor(targets, torch.float32)
        m = self._tensor(filters, torch.float32)

        self.network.train()
        q = self.network(x)
        if q.shape != y.shape:
            raise ValueError(f"network output {tuple(q.shape)} does not match targets {tuple(y.shape)}")
        loss = masked_euclidean_loss(q, y, m)

        self.optimizer.zero_grad(set_to_none=True)
        loss.backward()
        if self.grad_clip is not None:
            nn.utils.clip_grad_norm_(self.network.parameters(), self.grad_clip)
        self.optimizer.step()

        self.iteration += 1
        return float(loss.item())

    def get_parameters(self) -> dict[str, torch.Tensor]:
        return copy.deepcopy(self.network.state_dict())

    def set_parameters(self, params: dict[str, torch.Tensor]) -> None:
        self.network.load_state_dict(params)

    def optimizer_state(self) -> dict[str, Any]:
        return copy.deepcopy(self.optimizer.state_dict())

    def load_optimizer_state(self, state: dict[str, Any]) -> None:
        self.optimizer.load_state_dict(state)
