"""
Execution layer: the bounded worker-pool queue engine and its models.

    from sweep.execution import QueueEngine, RunConfig

    engine = QueueEngine(RunConfig(max_workers=10, poll_interval=0.5, timeout=120))
    for record in engine.run(["web01", "web02"], probe):
        ...
"""

from .models import (
    BASE_FIELDS,
    InvalidTransitionError,
    Job,
    JobState,
    RecordStatus,
    ResultRecord,
    RunConfig,
)
from .queue import QueueEngine, invoke_queue
from .timeout import Clock, Deadline, MonotonicClock

__all__ = [
    "BASE_FIELDS",
    "Clock",
    "Deadline",
    "InvalidTransitionError",
    "Job",
    "JobState",
    "MonotonicClock",
    "QueueEngine",
    "RecordStatus",
    "ResultRecord",
    "RunConfig",
    "invoke_queue",
]
