"""Queue Engine: bounded worker-pool fan-out with a shared deadline.

WHY
───
A sweep runs the same search module against hundreds of targets.  Most
answer in milliseconds, a few never answer at all.  The engine keeps at most
``max_workers`` of them in flight, streams each record out as soon as its
worker finishes, and stops waiting once the run's single deadline passes so
that a handful of hung targets cannot hold up the run.

ARCHITECTURE
────────────
::

    QueueEngine(RunConfig(max_workers, poll_interval, timeout), clock)
      └── .run(targets, action) ─► Iterator[ResultRecord]   (lazy)

    poll cycle (single thread, owns all job state)
      1. reap    ─ done futures → TERMINAL → yield record
      2. check   ─ deadline expired? → stop dispatching
      3. dispatch─ QUEUED → RUNNING into free slots (one daemon thread each)
      4. sleep   ─ clock.sleep(min(poll_interval, remaining))

    on deadline
      running jobs  → failure "timed out after Ns while running"
      queued jobs   → failure "timed out after Ns before dispatch"

    finally (completion, timeout, error, or consumer abandoning the stream)
      running jobs are forgotten; their daemon threads never block exit

Cancellation policy: when the consumer stops iterating, queued targets are
never dispatched and actions already running are left to finish in the
background with their results discarded.  Workers are daemon threads, so an
action that never returns cannot keep the interpreter alive after the run.

Related modules:
    models.py   : Job, ResultRecord, RunConfig
    timeout.py  : Deadline and injectable Clock

Example::

    engine = QueueEngine(RunConfig(max_workers=20, poll_interval=0.5, timeout=300))
    for record in engine.run(hosts, probe):
        print(record.target, record.status)
"""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import Future
from typing import Any

from sweep.core.errors import JobTimeoutError
from sweep.core.logging import get_logger

from .models import Job, JobState, RecordStatus, ResultRecord, RunConfig
from .timeout import Clock, Deadline, MonotonicClock

logger = get_logger(__name__)

Action = Callable[[str], Any]


def _execute(action: Action, target: str) -> ResultRecord:
    """Run *action* for one target in a worker thread; never raises."""
    try:
        return ResultRecord.coerce(target, action(target))
    except Exception as exc:
        return ResultRecord.failure(target, f"{type(exc).__name__}: {exc}")


def _work(future: Future, action: Action, target: str) -> None:
    try:
        record = _execute(action, target)
    except BaseException as exc:  # noqa: BLE001
        future.set_exception(exc)
    else:
        future.set_result(record)


class QueueEngine:
    """Bounded worker-pool queue engine.

    One instance may be reused for consecutive runs, but only one run can be
    active at a time.  All job state is created per run and mutated only by
    the thread iterating the output stream.

    Parameters
    ----------
    config : RunConfig
        Worker limit, poll interval and overall deadline.
    clock : Clock, optional
        Time source; defaults to :class:`MonotonicClock`.
    """

    def __init__(
        self,
        config: RunConfig,
        clock: Clock | None = None,
        *,
        thread_name_prefix: str = "sweep-worker",
    ) -> None:
        self._config = config
        self._clock = clock or MonotonicClock()
        self._thread_name_prefix = thread_name_prefix
        self._lock = threading.Lock()
        self._active = False
        self._running_count = 0
        self._peak_running = 0
        self.jobs: list[Job] = []

    # ── Inspection ───────────────────────────────────────────────────

    @property
    def config(self) -> RunConfig:
        return self._config

    @property
    def running_count(self) -> int:
        """Jobs currently in RUNNING state."""
        with self._lock:
            return self._running_count

    @property
    def peak_running(self) -> int:
        """Highest number of simultaneously running jobs in the last run."""
        with self._lock:
            return self._peak_running

    # ── Execution ────────────────────────────────────────────────────

    def run(self, targets: Iterable[str], action: Action) -> Iterator[ResultRecord]:
        """Fan *action* out over *targets*.

        The target list is snapshotted immediately; dispatch starts on the
        first ``next()`` of the returned iterator.

        Args:
            targets: Target identifiers in dispatch-priority order.
            action: Callable ``(target) -> ResultRecord | mapping | None``.

        Returns:
            Lazy iterator of exactly one :class:`ResultRecord` per target,
            in completion order.

        Raises:
            TypeError: If *action* is not callable.
            RuntimeError: On first iteration, if this engine already has an
                active run.
        """
        if not callable(action):
            raise TypeError(f"action must be callable, got {type(action).__name__}")
        return self._drive([str(t) for t in targets], action)

    def _drive(self, targets: list[str], action: Action) -> Iterator[ResultRecord]:
        with self._lock:
            if self._active:
                raise RuntimeError("QueueEngine already has an active run")
            self._active = True
            self._running_count = 0
            self._peak_running = 0

        config = self._config
        self.jobs = [Job(target=target, index=i) for i, target in enumerate(targets)]
        jobs = list(self.jobs)
        pending: deque[Job] = deque(jobs)
        running: dict[Future, Job] = {}
        emitted = 0
        timed_out = 0
        finished = False

        deadline = Deadline.start(config.timeout, self._clock)

        logger.info(
            "queue.start",
            targets=len(jobs),
            max_workers=config.max_workers,
            poll_interval=config.poll_interval,
            timeout=config.timeout,
        )

        try:
            while pending or running:
                for record in self._reap(running):
                    emitted += 1
                    yield record

                if deadline.is_expired():
                    break

                while pending and len(running) < config.max_workers:
                    job = pending.popleft()
                    job.transition_to(JobState.RUNNING)
                    job.dispatched_at = self._clock.now()
                    running[self._start(action, job)] = job
                    self._set_running(len(running))
                    logger.debug("queue.dispatch", target=job.target, running=len(running))

                if running:
                    self._clock.sleep(deadline.next_wait(config.poll_interval))

            # Jobs that finished right at the deadline still report their own result
            for record in self._reap(running):
                emitted += 1
                yield record

            if running or pending:
                logger.warning(
                    "queue.timeout",
                    timeout=config.timeout,
                    running=len(running),
                    queued=len(pending),
                )

            while running:
                future, job = next(iter(running.items()))
                del running[future]
                self._set_running(len(running))
                timed_out += 1
                emitted += 1
                yield self._time_out(job)

            while pending:
                job = pending.popleft()
                timed_out += 1
                emitted += 1
                yield self._time_out(job)

            finished = True
            logger.info(
                "queue.complete",
                records=emitted,
                timed_out=timed_out,
                peak_running=self.peak_running,
                duration_seconds=round(deadline.elapsed, 3),
            )
        finally:
            if not finished:
                logger.warning(
                    "queue.abandoned",
                    records=emitted,
                    running=len(running),
                    queued=len(pending),
                )
            self._set_running(0)
            with self._lock:
                self._active = False

    # ── Internals ────────────────────────────────────────────────────

    def _start(self, action: Action, job: Job) -> Future:
        """Run one job on its own daemon thread; the future completes with its record."""
        future: Future = Future()
        future.set_running_or_notify_cancel()
        threading.Thread(
            target=_work,
            args=(future, action, job.target),
            name=f"{self._thread_name_prefix}-{job.index}",
            daemon=True,
        ).start()
        return future

    def _reap(self, running: dict[Future, Job]) -> list[ResultRecord]:
        """Move every finished job to TERMINAL and free its slot."""
        done = [future for future in running if future.done()]
        records = []
        now = self._clock.now()
        for future in done:
            job = running.pop(future)
            records.append(job.finish(self._outcome(job, future), now))
            if records[-1].status == RecordStatus.FAILURE.value:
                logger.warning("queue.job_failed", target=job.target, message=records[-1].message)
        if done:
            self._set_running(len(running))
        return records

    @staticmethod
    def _outcome(job: Job, future: Future) -> ResultRecord:
        exc = future.exception()
        if exc is not None:
            return ResultRecord.failure(job.target, f"{type(exc).__name__}: {exc}")
        return future.result()

    def _time_out(self, job: Job) -> ResultRecord:
        job.timed_out = True
        error = JobTimeoutError(
            job.target,
            self._config.timeout,
            dispatched=job.state is JobState.RUNNING,
        )
        return job.finish(ResultRecord.failure(job.target, error.message), self._clock.now())

    def _set_running(self, count: int) -> None:
        with self._lock:
            self._running_count = count
            if count > self._peak_running:
                self._peak_running = count


def invoke_queue(
    targets: Iterable[str],
    action: Action,
    *,
    max_workers: int,
    poll_interval: float,
    timeout: float,
    clock: Clock | None = None,
) -> Iterator[ResultRecord]:
    """Functional front end: build a :class:`QueueEngine` and run it once."""
    config = RunConfig(max_workers=max_workers, poll_interval=poll_interval, timeout=timeout)
    return QueueEngine(config, clock).run(targets, action)
