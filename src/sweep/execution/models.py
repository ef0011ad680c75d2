"""Execution domain models.

Defines the core data structures for the queue engine:
- RunConfig: immutable limits for one run (workers, poll interval, deadline)
- Job: one target tracked through queued → running → terminal
- ResultRecord: the single outcome produced for every job

These models are shared by the queue engine, the result router and the
output sinks.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from sweep.core.errors import ConfigError


class InvalidTransitionError(ValueError):
    """Raised when an illegal job state transition is attempted."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Invalid JobState transition: {current} → {target}")


class JobState(str, Enum):
    """Lifecycle state of a job.

    Valid transition graph::

        QUEUED   → RUNNING | TERMINAL (timed out before dispatch)
        RUNNING  → TERMINAL
        TERMINAL → (terminal)
    """

    QUEUED = "queued"
    RUNNING = "running"
    TERMINAL = "terminal"


JOB_VALID_TRANSITIONS: dict[JobState, frozenset[JobState]] = {
    JobState.QUEUED: frozenset({JobState.RUNNING, JobState.TERMINAL}),
    JobState.RUNNING: frozenset({JobState.TERMINAL}),
    JobState.TERMINAL: frozenset(),
}


class RecordStatus(str, Enum):
    """Canonical outcome values written by the engine."""

    SUCCESS = "success"
    FAILURE = "failure"


BASE_FIELDS: tuple[str, ...] = ("target", "status", "message")


@dataclass(frozen=True)
class RunConfig:
    """Immutable configuration of one queue-engine run.

    Attributes:
        max_workers: Maximum jobs running at once
        poll_interval: Seconds between poll cycles
        timeout: Overall deadline in seconds, measured from the start of dispatch
    """

    max_workers: int
    poll_interval: float
    timeout: float

    def __post_init__(self) -> None:
        if isinstance(self.max_workers, bool) or not isinstance(self.max_workers, int):
            raise ConfigError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.max_workers <= 0:
            raise ConfigError(f"max_workers must be positive, got {self.max_workers}")
        if self.poll_interval <= 0:
            raise ConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")


@dataclass
class ResultRecord:
    """Outcome of one job.

    ``status`` is an open string: the engine only ever writes ``success`` or
    ``failure``, but search modules may return their own values and the
    router classifies them loosely.
    """

    target: str
    status: str
    message: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, target: str, message: str | None = None, **fields: Any) -> ResultRecord:
        return cls(target=target, status=RecordStatus.SUCCESS.value, message=message, fields=fields)

    @classmethod
    def failure(cls, target: str, message: str | None = None, **fields: Any) -> ResultRecord:
        return cls(target=target, status=RecordStatus.FAILURE.value, message=message, fields=fields)

    @classmethod
    def coerce(cls, target: str, value: Any) -> ResultRecord:
        """Turn whatever an action returned into a record for *target*.

        - ``ResultRecord``: used as-is
        - mapping: ``status``/``message`` keys become the base fields,
          everything else goes to ``fields``; a missing status means the
          action returned normally and is recorded as ``success``
        - ``None``: bare success record
        - anything else: success record with the value under ``result``

        The record's target always echoes *target*, whatever the action put
        there.
        """
        if isinstance(value, ResultRecord):
            return value if value.target == target else replace(value, target=target)
        if value is None:
            return cls.success(target)
        if isinstance(value, Mapping):
            extra = {k: v for k, v in value.items() if k not in BASE_FIELDS}
            status = value.get("status")
            message = value.get("message")
            return cls(
                target=target,
                status=str(status) if status is not None else RecordStatus.SUCCESS.value,
                message=str(message) if message is not None else None,
                fields=extra,
            )
        return cls.success(target, result=value)

    def as_dict(self) -> dict[str, Any]:
        """Flatten to ``{target, status, message, **fields}``."""
        row: dict[str, Any] = {
            "target": self.target,
            "status": self.status,
            "message": self.message,
        }
        for key, value in self.fields.items():
            if key not in row:
                row[key] = value
        return row


@dataclass
class Job:
    """One target paired with the unit-of-work action.

    Only the queue engine moves a job between states; ``transition_to``
    enforces :data:`JOB_VALID_TRANSITIONS`.
    """

    target: str
    index: int
    state: JobState = JobState.QUEUED
    dispatched_at: float | None = None
    completed_at: float | None = None
    record: ResultRecord | None = None
    timed_out: bool = False

    def transition_to(self, target: JobState) -> None:
        allowed = JOB_VALID_TRANSITIONS.get(self.state, frozenset())
        if target not in allowed:
            raise InvalidTransitionError(self.state.value, target.value)
        self.state = target

    def finish(self, record: ResultRecord, at: float) -> ResultRecord:
        """Move to TERMINAL and attach the job's single record."""
        self.transition_to(JobState.TERMINAL)
        self.record = record
        self.completed_at = at
        return record

    @property
    def duration_seconds(self) -> float | None:
        """Time between dispatch and completion, if both are known."""
        if self.dispatched_at is not None and self.completed_at is not None:
            return self.completed_at - self.dispatched_at
        return None
