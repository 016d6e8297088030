"""
HTTP 디스패치 결과 및 Dispatcher 설정 모델 정의
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

SECRET_HEADER = "X-Cron-Secret"
DEFAULT_USER_AGENT = "cronhook/0.1.0 (python httpx)"

# 본문 없이도 항상 본문 프레임을 보내는 메서드
BODY_METHODS = ("POST", "PUT", "PATCH")


class Verdict(str, Enum):
    """디스패치 판정"""
    OK = "OK"
    FAIL = "FAIL"


class ErrorCategory(str, Enum):
    """HTTP 에러 상태 분류"""
    CLIENT_ERROR = "client error"
    SERVER_ERROR = "server error"

    @classmethod
    def from_status(cls, status_code: int) -> "ErrorCategory":
        if 400 <= status_code < 500:
            return cls.CLIENT_ERROR
        return cls.SERVER_ERROR


class DispatchOutcome(BaseModel):
    """단일 디스패치 시도의 결과"""
    timestamp: datetime
    verdict: Verdict
    method: str
    url: str
    scheduled_time: datetime | None = None
    status_code: int | None = None
    category: ErrorCategory | None = None
    error: str | None = None

    @classmethod
    def failed(
        cls,
        method: str,
        url: str,
        error: str,
        scheduled_time: datetime | None = None,
    ) -> "DispatchOutcome":
        """HTTP 응답을 받지 못한 시도의 FAIL 결과"""
        return cls(
            timestamp=datetime.now(timezone.utc),
            verdict=Verdict.FAIL,
            method=method,
            url=url,
            scheduled_time=scheduled_time,
            error=error,
        )

    @property
    def detail(self) -> str:
        if self.error is not None:
            return f"transport error: {self.error}"
        if self.category is not None:
            return f"HTTP {self.status_code} ({self.category.value})"
        return str(self.status_code)

    def render(self) -> str:
        """`timestamp | OK|FAIL | METHOD URL | detail` 형식의 결과 라인"""
        return (
            f"{self.timestamp.isoformat()} | {self.verdict.value} | "
            f"{self.method} {self.url} | {self.detail}"
        )


class DispatcherConfig(BaseModel):
    """Dispatcher 설정"""
    timeout_seconds: float = Field(default=30, gt=0, le=3600)
    connect_timeout_seconds: float = Field(default=10, gt=0, le=600)
    follow_redirects: bool = True
