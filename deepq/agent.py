"""Deep Q-Network agent.

Ties the pieces together:

    add_transition  -> replay memory
    select_action   -> epsilon-greedy over the live network
    update          -> sample, build targets with the target snapshot,
                       one optimizer step, periodic target refresh

The agent is single-threaded and owns one `random.Random(seed)` that drives
both exploration and replay sampling, so a run is reproducible from its seed
and the sequence of calls made into it. Callers must serialize calls.

Lifecycle: construct (configuration only) -> `initialize()` (networks,
optimizer, target snapshot). Everything except configuration accessors raises
NotInitializedError before `initialize()`.
"""

from __future__ import annotations

import random
from typing import Any, Callable, Iterator, Optional, Sequence

try:
    import torch
    import torch.nn as nn
except ImportError as e:  # pragma: no cover
    raise ImportError("PyTorch is required. Install with: pip install torch") from e

from .checkpoint import load_checkpoint, save_checkpoint
from .errors import InsufficientMemoryError, NotInitializedError
from .minibatch import build_minibatch
from .network import QNetwork
from .policy import select_epsilon_greedy, select_greedily
from .replay import ReplayBuffer
from .target import TargetSnapshot
from .transition import N_OUTPUTS, ActionValue, FrameStack, Transition
from .value_function import SolverConfig, ValueFunction, build_optimizer


class DQN:
    def __init__(
        self,
        legal_actions: Sequence[int],
        solver_config: SolverConfig,
        replay_capacity: int,
        gamma: float,
        *,
        clone_frequency: int = 10_000,
        minibatch_size: int = 32,
        n_outputs: int = N_OUTPUTS,
        seed: int = 0,
        device: str | torch.device = "cpu",
        network_factory: Callable[[int], nn.Module] = QNetwork,
    ):
        legal = tuple(sorted({int(a) for a in legal_actions}))
        if not legal:
            raise ValueError("legal action set is empty")
        if legal[0] < 0 or legal[-1] >= int(n_outputs):
            raise ValueError(f"legal actions must lie in [0, {n_outputs}), got {legal}")
        if not 0.0 <= float(gamma) <= 1.0:
            raise ValueError(f"gamma must be in [0, 1], got {gamma}")
        for name, value in (
            ("clone_frequency", clone_frequency),
            ("minibatch_size", minibatch_size),
        ):
            if int(value) < 1:
                raise ValueError(f"{name} must be >= 1, got {value}")

        self._legal_actions = legal
        self._solver_config = solver_config
        self._gamma = float(gamma)
        self._clone_frequency = int(clone_frequency)
        self._minibatch_size = int(minibatch_size)
        self._n_outputs = int(n_outputs)
        self._seed = int(seed)
        self._device = torch.device(device)
        self._network_factory = network_factory

        self._replay = ReplayBuffer(replay_capacity)
        self._rng = random.Random(self._seed)

        self._value_fn: Optional[ValueFunction] = None
        self._target: Optional[TargetSnapshot] = None

    # ------------------------------------------------------------------
    # Configuration (read-only)
    # ------------------------------------------------------------------

    @property
    def legal_actions(self) -> tuple[int, ...]:
        return self._legal_actions

    @property
    def gamma(self) -> float:
        return self._gamma

    @property
    def minibatch_size(self) -> int:
        return self._minibatch_size

    @property
    def clone_frequency(self) -> int:
        return self._clone_frequency

    @property
    def replay_capacity(self) -> int:
        return self._replay.capacity

    @property
    def n_outputs(self) -> int:
        return self._n_outputs

    @property
    def device(self) -> torch.device:
        return self._device

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Build the live network, optimizer and target snapshot.

        Failures propagate and leave the agent uninitialized.
        """
        if self._value_fn is not None:
            raise RuntimeError("DQN is already initialized")

        torch.manual_seed(self._seed)
        network = self._network_factory(self._n_outputs).to(self._device)
        optimizer = build_optimizer(network.parameters(), self._solver_config)
        value_fn = ValueFunction(
            network,
            optimizer,
            self._device,
            grad_clip=self._solver_config.grad_clip,
        )
        target = TargetSnapshot(network, self._device)
        target.synchronize(value_fn)

        self._value_fn = value_fn
        self._target = target

    @property
    def initialized(self) -> bool:
        return self._value_fn is not None

    @property
    def value_function(self) -> ValueFunction:
        if self._value_fn is None:
            raise NotInitializedError("call initialize() first")
        return self._value_fn

    @property
    def target(self) -> TargetSnapshot:
        if self._target is None:
            raise NotInitializedError("call initialize() first")
        return self._target

    # ------------------------------------------------------------------
    # Acting
    # ------------------------------------------------------------------

    def select_action(self, stack: FrameStack, epsilon: float) -> int:
        return select_epsilon_greedy(
            self.value_function, stack, self._legal_actions, epsilon, self._rng
        )

    def select_action_greedily(self, stack: FrameStack) -> ActionValue:
        return self.select_actions_greedily([stack])[0]

    def select_actions_greedily(self, stacks: Sequence[FrameStack]) -> list[ActionValue]:
        return select_greedily(self.value_function, stacks, self._legal_actions)

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    def add_transition(self, transition: Transition) -> None:
        if transition.action not in self._legal_actions:
            raise ValueError(
                f"action {transition.action} is not one of the legal actions {self._legal_actions}"
            )
        self._replay.push(transition)

    def transitions(self) -> Iterator[Transition]:
        """Iterate over replay memory, oldest first."""
        return iter(self._replay)

    @property
    def memory_size(self) -> int:
        return len(self._replay)

    @property
    def current_iteration(self) -> int:
        return self.value_function.iteration

    def synchronize(self) -> None:
        """Copy the live network into the target snapshot."""
        self.target.synchronize(self.value_function)

    def update(self) -> float:
        """One minibatch gradient step.

        The loss is returned for progress logging only; callers must not
        depend on it.
        """
        value_fn = self.value_function
        if len(self._replay) < self._minibatch_size:
            raise InsufficientMemoryError(self._minibatch_size, len(self._replay))

        if value_fn.iteration % self._clone_frequency == 0:
            self.synchronize()

        transitions = self._replay.sample(self._minibatch_size, self._rng)
        batch = build_minibatch(
            transitions,
            self.target,
            self._legal_actions,
            self._gamma,
            self._n_outputs,
        )
        return value_fn.apply_gradient_step(batch.inputs, batch.targets, batch.filters)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, filepath: str, **extra: Any) -> None:
        value_fn = self.value_function
        save_checkpoint(
            filepath,
            q_net=value_fn.network,
            target_net=self.target.network,
            optimizer=value_fn.optimizer,
            iteration=value_fn.iteration,
            extra=extra,
        )

    def load_trained_model(self, filepath: str) -> dict[str, Any]:
        """Load network weights only; the target is synchronized to them."""
        value_fn = self.value_function
        ckpt = load_checkpoint(filepath, self._device)
        value_fn.set_parameters(ckpt["q_state_dict"])
        self.synchronize()
        return ckpt

    def restore_solver(self, filepath: str) -> dict[str, Any]:
        """Resume training: weights, target, optimizer state and iteration."""
        value_fn = self.value_function
        ckpt = load_checkpoint(filepath, self._device)
        value_fn.set_parameters(ckpt["q_state_dict"])
        self.target.set_parameters(ckpt["target_state_dict"])
        value_fn.load_optimizer_state(ckpt["optimizer_state_dict"])
        value_fn.iteration = int(ckpt["iteration"])
        return ckpt
