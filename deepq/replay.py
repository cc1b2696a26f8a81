"""Replay memory.

Transitions are kept exactly as they were recorded (shared read-only frames,
Python scalars). Tensors are only built when a minibatch is assembled, so the
buffer does not care which device the network lives on.
"""

from __future__ import annotations

import random
from collections import deque
from typing import Iterator

from .errors import InsufficientMemoryError
from .transition import Transition


class ReplayBuffer:
    """Fixed-capacity FIFO replay memory.

    Once full, every insertion evicts the oldest transition.
    """

    def __init__(self, capacity: int):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"replay capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._buf: deque[Transition] = deque(maxlen=capacity)

    def push(self, t: Transition) -> None:
        self._buf.append(t)

    insert = push

    def size(self) -> int:
        return len(self._buf)

    def sample(self, batch_size: int, rng: random.Random) -> list[Transition]:
        """Uniform sample without replacement.

        `rng` is the caller's random source; the buffer owns none of its own.
        """
        batch_size = int(batch_size)
        if batch_size < 0:
            raise ValueError(f"batch_size must be >= 0, got {batch_size}")
        if batch_size > len(self._buf):
            raise InsufficientMemoryError(batch_size, len(self._buf))
        indices = rng.sample(range(len(self._buf)), batch_size)
        return [self._buf[i] for i in indices]

    def __len__(self) -> int:
        return len(self._buf)

    def __iter__(self) -> Iterator[Transition]:
        return iter(self._buf)
