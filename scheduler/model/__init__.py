from scheduler.model.scheduler import (
    ALLOWED_METHODS,
    DroppedEntry,
    Job,
    ParseResult,
    SchedulerConfig,
)

__all__ = [
    "ALLOWED_METHODS",
    "DroppedEntry",
    "Job",
    "ParseResult",
    "SchedulerConfig",
]
