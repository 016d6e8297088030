"""
Scheduler: 크론 기반 HTTP 호출 스케줄러

모든 Job의 다음 실행 시점 중 가장 이른 시점까지 단일 타이머로 대기한 뒤,
지터 윈도우 안에 들어온 Job을 모두 디스패치하고 다음 실행 시점으로 갱신합니다.

디스패치는 태스크 단위로 병렬 실행되며, 스케줄 루프는 디스패치 완료를
기다리지 않고 바로 대기 상태로 돌아갑니다. 결과는 큐를 통해 리포터로 전달됩니다.
"""

import asyncio
import heapq
import logging
from contextlib import nullcontext, suppress
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable
from urllib.parse import urlsplit

from dispatcher.model.dispatcher import DispatchOutcome
from scheduler.exception import EmptyScheduleError
from scheduler.model.scheduler import Job, SchedulerConfig

if TYPE_CHECKING:
    from dispatcher.main import Dispatcher
    from dispatcher.reporter import OutcomeReporter

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(order=True)
class _Entry:
    """힙 엔트리 (next_fire, Job 목록상 위치) 순으로 정렬"""
    next_fire: datetime
    position: int
    job: Job = field(compare=False)


class Scheduler:
    """
    크론 Job 스케줄러

    Job 집합과 각 Job의 next_fire는 이 클래스만 소유/변경합니다.
    """

    def __init__(
        self,
        jobs: list[Job],
        dispatcher: "Dispatcher",
        reporter: "OutcomeReporter",
        config: SchedulerConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Args:
            jobs: 스케줄할 Job 목록 (목록 순서가 동시 실행 시 디스패치 순서)
            dispatcher: HTTP 디스패처
            reporter: 결과 리포터
            config: Scheduler 설정
            clock: 현재 UTC 시각 함수 (테스트용)
        """
        self._config = config
        self._dispatcher = dispatcher
        self._reporter = reporter
        self._clock = clock or _utcnow
        self._jitter = timedelta(milliseconds=config.jitter_window_ms)

        self._heap = [_Entry(job.next_fire, i, job) for i, job in enumerate(jobs)]
        heapq.heapify(self._heap)

        self._running = False
        self._stop_event: asyncio.Event | None = None
        self._running_tasks: set[asyncio.Task] = set()
        self._semaphore = asyncio.Semaphore(config.max_concurrent_dispatches)
        self._host_semaphores: dict[str, asyncio.Semaphore] = {}
        self._outcomes: "asyncio.Queue[DispatchOutcome]" = asyncio.Queue()
        self._reporter_task: asyncio.Task | None = None

    async def start(self) -> None:
        """Scheduler 메인 루프 시작"""
        if self._running:
            logger.warning("Scheduler is already running")
            return

        self._running = True
        self._stop_event = asyncio.Event()
        self._reporter_task = asyncio.create_task(self._report_outcomes())

        logger.info(
            f"Scheduler started (jobs={len(self._heap)}, "
            f"jitter_window={self._config.jitter_window_ms}ms, "
            f"max_concurrent={self._config.max_concurrent_dispatches})"
        )

        try:
            await self._main_loop()
        except asyncio.CancelledError:
            logger.info("Scheduler cancelled")
        except Exception as e:
            logger.error(f"Scheduler error: {e}", exc_info=True)
            raise
        finally:
            await self._wait_running_tasks()
            await self._drain_outcomes()
            self._running = False
            logger.info("Scheduler stopped")

    async def stop(self) -> None:
        """Scheduler graceful shutdown"""
        if not self._running:
            return

        logger.info("Stopping scheduler...")
        self._running = False
        if self._stop_event:
            self._stop_event.set()

    async def _main_loop(self) -> None:
        """메인 루프: 대기 -> 실행 반복"""
        while self._running:
            if not self._heap:
                logger.warning("All jobs retired, nothing left to schedule")
                break

            sleep_seconds = self._next_sleep(self._clock())
            if sleep_seconds > 0:
                await self._sleep(sleep_seconds)
                if not self._running:
                    break

            self._fire(self._clock())

    async def _sleep(self, seconds: float) -> None:
        """인터럽트 가능한 sleep"""
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    def _earliest(self) -> datetime:
        """활성 Job 중 가장 이른 next_fire"""
        if not self._heap:
            raise EmptyScheduleError()
        return self._heap[0].next_fire

    def _next_sleep(self, now: datetime) -> float:
        """가장 이른 실행 시점까지의 대기 시간 (이미 지났으면 0)"""
        return max((self._earliest() - now).total_seconds(), 0.0)

    def _fire(self, fired_at: datetime) -> list[asyncio.Task]:
        """
        깨어난 시점 기준으로 실행할 Job 디스패치

        |fired_at - next_fire| <= 지터 윈도우인 Job을 모두 Job 목록 순서대로 디스패치하고,
        직전 예정 시각 이후의 다음 실행 시점으로 갱신합니다 (현재 시각 기준 재계산 아님).

        윈도우보다 더 과거인 실행 시점(호스트 일시 정지, 루프 지연 등)은 놓친 것으로 보고
        디스패치하지 않습니다. 이 경우에만 실행 시도 없이 next_fire를 갱신하며,
        fired_at - 지터 윈도우 이후의 다음 실행 시점에서 재개합니다.
        어느 경우든 next_fire가 None이 되면 Job은 은퇴합니다.

        Returns:
            생성된 디스패치 태스크 목록
        """
        horizon = fired_at + self._jitter
        due: list[_Entry] = []
        missed: list[_Entry] = []

        while self._heap and self._heap[0].next_fire <= horizon:
            entry = heapq.heappop(self._heap)
            if fired_at - entry.next_fire > self._jitter:
                missed.append(entry)
            else:
                due.append(entry)

        tasks = []
        for entry in sorted(due, key=lambda e: e.position):
            logger.debug(f"Firing {entry.job.label} scheduled at {entry.next_fire.isoformat()}")
            tasks.append(self._submit(entry.job, entry.next_fire))
            self._reschedule(entry, entry.job.schedule.next_after(entry.next_fire))

        for entry in missed:
            logger.warning(
                f"Missed occurrence for {entry.job.label}: "
                f"scheduled_time={entry.next_fire.isoformat()}, woke_at={fired_at.isoformat()}"
            )
            self._reschedule(entry, entry.job.schedule.next_after(fired_at - self._jitter))

        return tasks

    def _reschedule(self, entry: _Entry, next_fire: datetime | None) -> None:
        """next_fire 갱신 후 힙에 재등록 (소진된 스케줄은 은퇴)"""
        job = entry.job
        if next_fire is None:
            logger.warning(f"Schedule exhausted, retiring job: {job.label} ({job.schedule.expression})")
            return

        job.next_fire = next_fire
        heapq.heappush(self._heap, _Entry(next_fire, entry.position, job))

    def _submit(self, job: Job, scheduled_time: datetime) -> asyncio.Task:
        """디스패치 태스크 생성"""
        task = asyncio.create_task(self._dispatch(job, scheduled_time))
        self._running_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    async def _dispatch(self, job: Job, scheduled_time: datetime) -> None:
        """디스패치 실행 (워커 태스크)"""
        # 호스트 슬롯을 먼저 잡아야 대기 중인 Job이 전체 슬롯을 점유하지 않음
        try:
            async with self._host_limit(job.url), self._semaphore:
                outcome = await self._dispatcher.dispatch(job, scheduled_time)
        except Exception as e:
            logger.error(f"Unexpected error dispatching {job.label}: {e}", exc_info=True)
            outcome = DispatchOutcome.failed(
                job.method, job.url, f"unexpected error: {e}", scheduled_time
            )

        await self._outcomes.put(outcome)

    def _host_limit(self, url: str):
        """호스트별 동시 디스패치 제한 (설정이 0이면 제한 없음)"""
        limit = self._config.max_dispatches_per_host
        if not limit:
            return nullcontext()

        host = urlsplit(url).netloc.lower()
        semaphore = self._host_semaphores.get(host)
        if semaphore is None:
            semaphore = self._host_semaphores[host] = asyncio.Semaphore(limit)
        return semaphore

    def _on_task_done(self, task: asyncio.Task) -> None:
        """태스크 완료 콜백"""
        self._running_tasks.discard(task)
        if not task.cancelled() and task.exception():
            logger.error(f"Task exception: {task.exception()}")

    async def _report_outcomes(self) -> None:
        """결과 큐를 소비하여 리포터로 전달"""
        while True:
            outcome = await self._outcomes.get()
            try:
                self._reporter.report(outcome)
            except Exception as e:
                logger.error(f"Failed to report outcome: {e}", exc_info=True)
            finally:
                self._outcomes.task_done()

    async def _wait_running_tasks(self) -> None:
        """실행 중인 디스패치 완료 대기 (graceful shutdown)"""
        if not self._running_tasks:
            return

        logger.info(f"Waiting for {len(self._running_tasks)} in-flight dispatches...")

        try:
            await asyncio.wait_for(
                asyncio.gather(*self._running_tasks, return_exceptions=True),
                timeout=self._config.shutdown_timeout_seconds
            )
            logger.info("All dispatches completed")
        except asyncio.TimeoutError:
            logger.warning(
                f"Shutdown timeout ({self._config.shutdown_timeout_seconds}s), "
                f"{len(self._running_tasks)} dispatches still running"
            )
            for task in self._running_tasks:
                task.cancel()

    async def _drain_outcomes(self) -> None:
        """남은 결과를 모두 리포트한 뒤 리포터 태스크 종료"""
        if self._reporter_task is None:
            return

        await self._outcomes.join()
        self._reporter_task.cancel()
        with suppress(asyncio.CancelledError):
            await self._reporter_task
        self._reporter_task = None

    @property
    def is_running(self) -> bool:
        """실행 중 여부"""
        return self._running

    @property
    def running_task_count(self) -> int:
        """실행 중인 디스패치 수"""
        return len(self._running_tasks)

    @property
    def jobs(self) -> list[Job]:
        """활성 Job 목록 (Job 목록 순서)"""
        return [entry.job for entry in sorted(self._heap, key=lambda e: e.position)]
