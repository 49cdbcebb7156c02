"""Exponential reconnect delay."""

from __future__ import annotations


class Backoff:
    """Delay doubling from ``base_seconds`` up to ``max_seconds``."""

    def __init__(self, base_seconds: float = 1.0, max_seconds: float = 30.0) -> None:
        self._base_seconds = base_seconds
        self._max_seconds = max_seconds
        self._attempts = 0

    @property
    def attempts(self) -> int:
        return self._attempts

    def peek(self) -> float:
        return min(self._max_seconds, self._base_seconds * (2 ** self._attempts))

    def next_delay(self) -> float:
        """Delay for the next wait; each call doubles the following one."""
        delay = self.peek()
        self._attempts += 1
        return delay

    def reset(self) -> None:
        self._attempts = 0


__all__ = ["Backoff"]
