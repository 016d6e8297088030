"""
스케줄 Job 및 Scheduler 설정 모델 정의
"""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, Field

from scheduler.cron import CronSchedule

ALLOWED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")


@dataclass
class Job:
    """
    스케줄 Job

    프로세스 시작 시 생성되어 종료까지 유지됩니다.
    next_fire만 변경 가능하며, Scheduler만 변경합니다.
    """
    method: str
    url: str
    schedule: CronSchedule
    next_fire: datetime
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: str | None = None

    @property
    def label(self) -> str:
        return f"{self.method} {self.url}"


@dataclass
class DroppedEntry:
    """파싱 중 버려진 엔트리와 사유"""
    entry: str
    reason: str


@dataclass
class ParseResult:
    """Job 스펙 파싱 결과"""
    jobs: list[Job] = field(default_factory=list)
    dropped: list[DroppedEntry] = field(default_factory=list)


class SchedulerConfig(BaseModel):
    """Scheduler 설정"""
    jitter_window_ms: int = Field(default=500, ge=0, le=60000)
    max_concurrent_dispatches: int = Field(default=10, ge=1, le=1000)
    max_dispatches_per_host: int = Field(default=0, ge=0, description="0이면 호스트별 제한 없음")
    shutdown_timeout_seconds: float = Field(default=30, ge=0)
