"""
프로세스 실행 구성

설정 로드 -> 로깅 설정 -> Job 파싱 -> Scheduler 실행 순서로 구성하며,
SIGINT/SIGTERM 수신 시 Scheduler를 중지합니다.
"""

import asyncio
import logging
import signal
import sys

from common.logging import setup_logging
from cronhook.config import Settings
from cronhook.exception import NoValidJobsError
from dispatcher.main import Dispatcher
from dispatcher.reporter import OutcomeReporter
from scheduler.main import Scheduler
from scheduler.model.scheduler import Job
from scheduler.parser import parse_jobs

logger = logging.getLogger(__name__)


def build_jobs(jobs_spec: str) -> list[Job]:
    """
    Job 스펙 파싱

    Raises:
        NoValidJobsError: 유효한 Job이 하나도 없는 경우
    """
    result = parse_jobs(jobs_spec)

    for dropped in result.dropped:
        logger.debug(f"Dropped job entry ({dropped.reason})")
    if result.dropped:
        logger.info(f"Dropped {len(result.dropped)} invalid job entries")

    if not result.jobs:
        raise NoValidJobsError()

    for job in result.jobs:
        logger.info(
            f"Scheduled {job.label} ({job.schedule.expression}), "
            f"next_fire={job.next_fire.isoformat()}"
        )
    return result.jobs


class ShutdownHandler:
    """SIGINT/SIGTERM 수신 시 Scheduler 중지 (stop 태스크 참조 유지)"""

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._pending: set[asyncio.Task] = set()

    def __call__(self) -> None:
        logger.info("Received shutdown signal")
        task = asyncio.create_task(self._scheduler.stop())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def install(self, loop: asyncio.AbstractEventLoop) -> None:
        # Windows는 add_signal_handler를 지원하지 않음
        if sys.platform == "win32":
            return
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self)

    @property
    def pending_count(self) -> int:
        return len(self._pending)


async def run(settings: Settings) -> None:
    """Scheduler 실행 (종료 시그널 수신 시까지)"""
    jobs = build_jobs(settings.jobs_spec)

    dispatcher = Dispatcher(settings.config.dispatcher, settings.secret)
    scheduler = Scheduler(jobs, dispatcher, OutcomeReporter(), settings.config.scheduler)

    ShutdownHandler(scheduler).install(asyncio.get_running_loop())

    try:
        await scheduler.start()
    finally:
        await dispatcher.aclose()


def configure_logging(settings: Settings) -> None:
    log_config = settings.config.logging
    setup_logging(
        level=log_config.level,
        json_format=log_config.json_format,
        log_file=log_config.log_file,
    )
