"""Core primitives shared by every sweep layer: errors, logging, settings."""

from .errors import (
    CollaboratorError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    JobTimeoutError,
    ModuleLoadError,
    SweepError,
    TargetSourceError,
)

__all__ = [
    "CollaboratorError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "JobTimeoutError",
    "ModuleLoadError",
    "SweepError",
    "TargetSourceError",
]
