"""Deadline tracking for sweep runs.

The queue engine enforces one shared deadline for the whole run rather than
a per-job timeout.  It never interrupts a worker; it only asks the deadline
how much time is left and stops waiting once it has expired.

Manifesto:
    Time is injected, not read from globals.  The engine talks to a
    :class:`Clock` so tests can drive hours of simulated polling without
    sleeping, while production uses :class:`MonotonicClock`.

Architecture:
    ::

        Clock (protocol)
          ├── now()            ─ monotonic seconds
          └── sleep(seconds)   ─ suspend the poll loop

        Deadline(timeout, clock)
          ├── remaining()      ─ seconds left (negative once expired)
          ├── elapsed          ─ seconds since start
          ├── is_expired()
          └── next_wait(poll)  ─ min(poll, remaining) clamped at 0

Examples:
    >>> deadline = Deadline.start(30.0)
    >>> while not deadline.is_expired():
    ...     deadline.clock.sleep(deadline.next_wait(0.5))

Tags:
    timeout, deadline, clock, execution, sweep-core
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Protocol


class Clock(Protocol):
    """Time source used by the queue engine."""

    def now(self) -> float:
        ...

    def sleep(self, seconds: float) -> None:
        ...


class MonotonicClock:
    """Real clock backed by ``time.monotonic`` and ``time.sleep``."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        if seconds > 0:
            time.sleep(seconds)


@dataclass
class Deadline:
    """Single shared deadline for one run.

    Attributes:
        timeout_seconds: Original timeout value in seconds
        clock: Time source
        start_time: When the deadline started (clock seconds)
    """

    timeout_seconds: float
    clock: Clock = field(default_factory=MonotonicClock)
    start_time: float | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"Timeout must be positive, got {self.timeout_seconds}")
        if self.start_time is None:
            self.start_time = self.clock.now()

    @classmethod
    def start(cls, timeout_seconds: float, clock: Clock | None = None) -> Deadline:
        return cls(timeout_seconds=timeout_seconds, clock=clock or MonotonicClock())

    @property
    def deadline(self) -> float:
        """Absolute deadline on the clock's timeline."""
        return self.start_time + self.timeout_seconds

    def remaining(self) -> float:
        """Remaining time until deadline in seconds.

        Returns:
            Positive value if time remains, negative if expired.
        """
        return self.deadline - self.clock.now()

    @property
    def elapsed(self) -> float:
        """Elapsed time since start in seconds."""
        return self.clock.now() - self.start_time

    def is_expired(self) -> bool:
        """True if deadline has passed."""
        return self.clock.now() >= self.deadline

    def next_wait(self, poll_interval: float) -> float:
        """How long the poll loop should sleep before its next cycle."""
        return max(0.0, min(poll_interval, self.remaining()))
