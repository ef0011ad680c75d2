"""
Structured error types for sweep-core.

A sweep run fails in exactly four ways, and each one is handled at a
different level.  The hierarchy below gives each its own type so the
orchestration layer and the CLI can tell them apart without inspecting
message text.

Manifesto:
    - **Fail fast on setup:** Configuration and collaborator errors surface
      before the first job is dispatched, with no partial output
    - **Contain per-target failures:** A target's error becomes a record,
      never an exception that escapes the queue engine
    - **Rich context:** Errors carry target, scope, module and run id for
      structured logging
    - **Error chaining:** The original exception is kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                        SweepError                            │
        │               (category, context, cause)                     │
        ├─────────────────────────────────────────────────────────────┤
        │                                                              │
        │  ConfigError          CollaboratorError     JobTimeoutError  │
        │  (CONFIG)             (COLLABORATOR)        (TIMEOUT)        │
        │                             │                                │
        │                  TargetSourceError                           │
        │                  ModuleLoadError                             │
        └─────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ConfigError("timeout must be positive")
    >>> error.category
    <ErrorCategory.CONFIG: 'CONFIG'>

    >>> try:
    ...     open("/missing/prod.txt")
    ... except OSError as e:
    ...     error = TargetSourceError("cannot read scope file", cause=e)
    >>> error.with_context(scope="prod").context.scope
    'prod'

Tags:
    error-handling, exception-hierarchy, sweep-core
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and exit codes.

    Attributes:
        CONFIG: Invalid or missing run inputs
        COLLABORATOR: Target provider or search module could not be loaded
        EXECUTION: A search module action failed for one target
        TIMEOUT: The overall run deadline fired before a job finished
        INTERNAL: Bugs, unexpected state
    """

    CONFIG = "CONFIG"
    COLLABORATOR = "COLLABORATOR"
    EXECUTION = "EXECUTION"
    TIMEOUT = "TIMEOUT"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """Where an error happened: which target, scope, module and run.

    Unset fields are omitted from :meth:`to_dict`, so the result can be
    splatted straight into a structlog call.
    """

    target: str | None = None
    scope: str | None = None
    module: str | None = None
    run_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {f.name: getattr(self, f.name) for f in fields(self) if f.name != "metadata"}
        return {**{k: v for k, v in known.items() if v is not None}, **self.metadata}


class SweepError(Exception):
    """Root of every error sweep raises on purpose.

    ``category`` defaults to the subclass's ``default_category``.  A
    ``cause`` is chained as ``__cause__`` so the original traceback survives.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        self.__cause__ = cause

    def with_context(self, **values: Any) -> SweepError:
        """Fill in context fields; unknown keys land in ``metadata``.

        Usage:
            raise ModuleLoadError("ssh_banner").with_context(run_id=run_id)
        """
        known = {f.name for f in fields(self.context)} - {"metadata"}
        for key, value in values.items():
            if key in known:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Log/JSON form: type, message, category, plus context and cause when set."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SweepError):
    """Invalid or missing run inputs.

    Raised before any job starts: non-positive limits, conflicting target
    sources, unknown scopes, empty target lists.
    """

    default_category = ErrorCategory.CONFIG


# =============================================================================
# COLLABORATOR ERRORS
# =============================================================================


class CollaboratorError(SweepError):
    """A collaborator needed before dispatch is unavailable."""

    default_category = ErrorCategory.COLLABORATOR


class TargetSourceError(CollaboratorError):
    """The target list could not be produced (missing or unreadable source)."""


class ModuleLoadError(CollaboratorError):
    """A search module could not be imported or resolved."""

    def __init__(self, name: str, message: str | None = None, *, cause: Exception | None = None):
        super().__init__(
            message or f"Search module not found: {name}",
            context=ErrorContext(module=name),
            cause=cause,
        )
        self.name = name


# =============================================================================
# EXECUTION ERRORS
# =============================================================================


class JobTimeoutError(SweepError):
    """The overall run deadline fired while a job was not yet terminal.

    Never raised out of the queue engine; its text becomes the ``message``
    of the synthetic failure record so timeouts are distinguishable from
    ordinary action failures.
    """

    default_category = ErrorCategory.TIMEOUT

    def __init__(self, target: str, timeout: float, *, dispatched: bool):
        phase = "while running" if dispatched else "before dispatch"
        super().__init__(
            f"timed out after {timeout:g}s {phase}",
            context=ErrorContext(target=target),
        )
        self.timeout = timeout
        self.dispatched = dispatched


def exit_code_for(error: Exception) -> int:
    """Map an error to the CLI exit code.

    2 for configuration errors, 3 for unavailable collaborators, 1 otherwise.
    """
    if isinstance(error, ConfigError):
        return 2
    if isinstance(error, CollaboratorError):
        return 3
    return 1


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SweepError",
    "ConfigError",
    "CollaboratorError",
    "TargetSourceError",
    "ModuleLoadError",
    "JobTimeoutError",
    "exit_code_for",
]
