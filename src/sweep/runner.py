"""Sweep runner: wires one run end to end.

::

    SweepRunner(config, module, output_dir)
      ├── .prepare_outputs()   ─ clear {module}-success.csv / -failure.csv
      ├── .execute(targets)    ─ QueueEngine → ResultRouter → CsvSinks,
      │                          yields every record for live display
      └── .summary             ─ SweepSummary counts and duration

The runner owns the bits the engine and router deliberately leave out:
clearing output from a previous run, closing sinks on every exit path, and
binding ``run_id``/``module`` to the log context.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from sweep.core.logging import LogContext, get_logger
from sweep.execution.models import ResultRecord, RunConfig
from sweep.execution.queue import QueueEngine
from sweep.execution.timeout import Clock
from sweep.modules.registry import SearchModule
from sweep.routing.router import ResultRouter
from sweep.routing.schema import FieldSchema
from sweep.sinks.csv_file import CsvSink

logger = get_logger(__name__)


@dataclass
class SweepSummary:
    """Aggregate outcome of a sweep run."""

    run_id: str
    module: str
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    unclassified: int = 0
    timed_out: int = 0
    duration_seconds: float = 0.0
    success_path: Path | None = None
    failure_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "module": self.module,
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "unclassified": self.unclassified,
            "timed_out": self.timed_out,
            "duration_seconds": round(self.duration_seconds, 3),
            "success_path": str(self.success_path) if self.success_path else None,
            "failure_path": str(self.failure_path) if self.failure_path else None,
        }


class SweepRunner:
    """Run one search module over a target list.

    Parameters
    ----------
    config : RunConfig
        Queue-engine limits.
    module : SearchModule
        Unit of work and its declared fields.
    output_dir : Path
        Directory for the success and failure CSV files.
    """

    def __init__(
        self,
        config: RunConfig,
        module: SearchModule,
        output_dir: Path | str,
        *,
        run_id: str | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config
        self.module = module
        self.output_dir = Path(output_dir)
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.schema = FieldSchema.for_fields(module.fields)
        self.success_sink = CsvSink(self.output_dir / f"{module.name}-success.csv", self.schema.columns)
        self.failure_sink = CsvSink(self.output_dir / f"{module.name}-failure.csv", self.schema.columns)
        self.engine = QueueEngine(config, clock)
        self.router = ResultRouter(self.schema, self.success_sink, self.failure_sink)
        self._summary = SweepSummary(
            run_id=self.run_id,
            module=module.name,
            success_path=self.success_sink.path,
            failure_path=self.failure_sink.path,
        )

    def prepare_outputs(self) -> None:
        """Remove output files left by a previous run of this module."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.success_sink.clear()
        self.failure_sink.clear()

    def execute(self, targets: Iterable[str]) -> Iterator[ResultRecord]:
        """Run the sweep, yielding each record as soon as it is routed."""
        targets = list(targets)
        started = time.monotonic()
        with LogContext(run_id=self.run_id, module=self.module.name):
            logger.info("sweep.start", targets=len(targets), columns=self.schema.columns)
            records = self.engine.run(targets, self.module.action)
            try:
                yield from self.router.route(records)
            finally:
                records.close()
                self.success_sink.close()
                self.failure_sink.close()
                self._summary.duration_seconds = time.monotonic() - started
                stats = self.router.stats
                self._summary.total = stats.total
                self._summary.succeeded = stats.succeeded
                self._summary.failed = stats.failed
                self._summary.unclassified = stats.unclassified
                self._summary.timed_out = sum(1 for job in self.engine.jobs if job.timed_out)
                logger.info("sweep.complete", **self._summary.to_dict())

    def run(self, targets: Iterable[str]) -> SweepSummary:
        """Prepare outputs and drain :meth:`execute`."""
        self.prepare_outputs()
        for _ in self.execute(targets):
            pass
        return self.summary

    @property
    def summary(self) -> SweepSummary:
        return self._summary

