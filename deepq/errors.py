"""Exceptions raised by the DQN core."""

from __future__ import annotations


class DQNError(Exception):
    """Base class for agent errors."""


class InsufficientMemoryError(DQNError):
    """Replay memory holds fewer transitions than a sample asks for."""

    def __init__(self, requested: int, available: int):
        super().__init__(
            f"insufficient memory: requested {requested} transitions, "
            f"replay memory holds {available}"
        )
        self.requested = int(requested)
        self.available = int(available)


class NotInitializedError(DQNError):
    """An agent operation was called before `initialize()`."""


class CheckpointError(DQNError):
    """A checkpoint file exists but cannot be read back."""
