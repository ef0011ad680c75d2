"""Sink protocol and in-memory sink."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Append-only destination for normalized rows."""

    def write(self, row: Mapping[str, Any]) -> None:
        ...

    def close(self) -> None:
        ...


class MemorySink:
    """List-backed sink.

    Rows are copied on write so later changes by the caller don't leak in.
    """

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self.closed = False

    def write(self, row: Mapping[str, Any]) -> None:
        if self.closed:
            raise ValueError("write to closed sink")
        self.rows.append(dict(row))

    def close(self) -> None:
        self.closed = True

    def __len__(self) -> int:
        return len(self.rows)

    def targets(self) -> list[str]:
        return [row["target"] for row in self.rows]
