"""Scheduler 모듈 - 크론 스펙 파싱 및 실행 시점 관리"""

from scheduler.cron import CronSchedule
from scheduler.exception import CronParseError, EmptyScheduleError, SchedulerError
from scheduler.main import Scheduler
from scheduler.model.scheduler import DroppedEntry, Job, ParseResult, SchedulerConfig
from scheduler.parser import parse_headers, parse_jobs, split_entries

__all__ = [
    "CronSchedule",
    "CronParseError",
    "EmptyScheduleError",
    "SchedulerError",
    "Scheduler",
    "DroppedEntry",
    "Job",
    "ParseResult",
    "SchedulerConfig",
    "parse_headers",
    "parse_jobs",
    "split_entries",
]
