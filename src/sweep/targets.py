"""Target enumeration.

A run's targets come from exactly one of three sources:

- an explicit list given on the command line,
- a targets file (one target per line),
- a named scope (``test``, ``dev``, ``prod``) resolved by a
  :class:`TargetProvider`.

The default provider reads ``{targets_dir}/{scope}.txt``.  Blank lines and
``#`` comments are skipped; order and duplicates are preserved, since
duplicates are processed independently by the queue engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path
from typing import Protocol

from sweep.core.errors import ConfigError, TargetSourceError
from sweep.core.logging import get_logger

logger = get_logger(__name__)


class Scope(str, Enum):
    """Named target scopes."""

    TEST = "test"
    DEV = "dev"
    PROD = "prod"

    @classmethod
    def parse(cls, value: str | Scope) -> Scope:
        if isinstance(value, Scope):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ConfigError(f"Unknown scope {value!r}; expected one of: {choices}") from None


class TargetProvider(Protocol):
    """Resolves a scope to an ordered list of targets."""

    def resolve(self, scope: Scope) -> list[str]:
        ...


def parse_targets(lines: Iterable[str]) -> list[str]:
    """Strip whitespace and drop blank lines and ``#`` comments."""
    targets = []
    for line in lines:
        entry = line.split("#", 1)[0].strip()
        if entry:
            targets.append(entry)
    return targets


def read_targets_file(path: Path | str) -> list[str]:
    """Read targets from a file.

    Raises:
        TargetSourceError: If the file is missing or unreadable
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as handle:
            return parse_targets(handle)
    except OSError as exc:
        raise TargetSourceError(f"Cannot read targets file {path}: {exc.strerror or exc}", cause=exc) from exc


class FileTargetProvider:
    """Scope provider backed by ``{targets_dir}/{scope}.txt`` files."""

    def __init__(self, targets_dir: Path | str) -> None:
        self.targets_dir = Path(targets_dir)

    def path_for(self, scope: Scope) -> Path:
        return self.targets_dir / f"{scope.value}.txt"

    def resolve(self, scope: Scope) -> list[str]:
        try:
            targets = read_targets_file(self.path_for(scope))
        except TargetSourceError as exc:
            exc.with_context(scope=scope.value)
            raise
        logger.debug("targets.resolved", scope=scope.value, count=len(targets))
        return targets


def resolve_targets(
    targets: Sequence[str] | None = None,
    *,
    scope: str | Scope | None = None,
    targets_file: Path | str | None = None,
    provider: TargetProvider | None = None,
) -> list[str]:
    """Resolve the run's target list from exactly one source.

    Raises:
        ConfigError: If zero or several sources are given, the scope is
            unknown, a scope is given without a provider, or the resolved
            list is empty
        TargetSourceError: If the source cannot be read
    """
    sources = [
        name
        for name, value in (("targets", targets), ("scope", scope), ("targets_file", targets_file))
        if value
    ]
    if not sources:
        raise ConfigError("No target source given; pass targets, a targets file or a scope")
    if len(sources) > 1:
        raise ConfigError(f"Conflicting target sources: {', '.join(sources)}; give exactly one")

    if targets:
        resolved = parse_targets(targets)
        origin = "explicit"
    elif targets_file:
        resolved = read_targets_file(targets_file)
        origin = str(targets_file)
    else:
        parsed = Scope.parse(scope)
        if provider is None:
            raise ConfigError(f"No target provider configured for scope {parsed.value!r}")
        resolved = provider.resolve(parsed)
        origin = parsed.value

    if not resolved:
        raise ConfigError(f"Target source {origin!r} produced no targets")

    logger.info("targets.loaded", source=origin, count=len(resolved))
    return resolved
