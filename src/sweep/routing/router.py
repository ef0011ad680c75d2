"""Result Router: normalize, classify and fan records out to sinks.

ARCHITECTURE
────────────
::

    records ──► ResultRouter.route() ──► records (unchanged, same order)
                      │
                      ├── schema.normalize(record) → row (copy)
                      ├── classify(status)
                      │     "success" substring → on_success.write(row)
                      │     "failure" substring → on_failure.write(row)
                      │     neither             → no sink
                      └── stats (total / succeeded / failed / unclassified)

Classification keeps the loose matching rule sweep has always used: a
case-insensitive substring test, ``success`` checked before ``failure``.
A module reporting ``"Success (cached)"`` therefore lands in the success
sink, and ``"FAILURE"`` in the failure sink.

The router never buffers; each record is written and forwarded before the
next one is pulled from the queue engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sweep.core.logging import get_logger
from sweep.execution.models import RecordStatus, ResultRecord
from sweep.sinks.base import Sink

from .schema import FieldSchema

logger = get_logger(__name__)


class Route(str, Enum):
    """Where a record goes after classification."""

    SUCCESS = "success"
    FAILURE = "failure"
    NONE = "none"


def classify(status: Any) -> Route:
    """Classify a status value by case-insensitive substring match."""
    if status is None:
        return Route.NONE
    text = str(status).lower()
    if RecordStatus.SUCCESS.value in text:
        return Route.SUCCESS
    if RecordStatus.FAILURE.value in text:
        return Route.FAILURE
    return Route.NONE


@dataclass
class RouteStats:
    """Counts of records seen by one router."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    unclassified: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "unclassified": self.unclassified,
        }


class ResultRouter:
    """Routes a record stream into success and failure sinks.

    Parameters
    ----------
    schema : FieldSchema
        Canonical field set every sunk row is normalized to.
    on_success, on_failure : Sink
        Append-only sinks for the two classes of record.
    """

    def __init__(self, schema: FieldSchema, on_success: Sink, on_failure: Sink) -> None:
        self.schema = schema
        self.on_success = on_success
        self.on_failure = on_failure
        self.stats = RouteStats()

    def route(self, records: Iterable[ResultRecord]) -> Iterator[ResultRecord]:
        """Sink each record by status and yield it through unchanged.

        Closing this iterator early also closes *records*, so an abandoned
        stream releases the queue engine's workers straight away.
        """
        try:
            for record in records:
                self.dispatch(record)
                yield record
        finally:
            close = getattr(records, "close", None)
            if close is not None:
                close()

    def dispatch(self, record: ResultRecord) -> Route:
        """Sink a single record; returns the route taken."""
        taken = classify(record.status)
        self.stats.total += 1
        if taken is Route.SUCCESS:
            self.on_success.write(self.schema.normalize(record))
            self.stats.succeeded += 1
        elif taken is Route.FAILURE:
            self.on_failure.write(self.schema.normalize(record))
            self.stats.failed += 1
        else:
            self.stats.unclassified += 1
            logger.info("router.unclassified", target=record.target, status=record.status)
        return taken


def route(
    records: Iterable[ResultRecord],
    schema: FieldSchema,
    on_success: Sink,
    on_failure: Sink,
) -> Iterator[ResultRecord]:
    """Functional front end for :class:`ResultRouter`."""
    return ResultRouter(schema, on_success, on_failure).route(records)
