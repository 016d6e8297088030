"""
Dispatcher: HTTP 요청 디스패치 모듈

실행 시점에 도달한 Job 하나에 대해 HTTP 요청을 정확히 한 번 보내고
결과를 DispatchOutcome으로 분류합니다. 재시도하지 않으며, 어떤 실패도
예외로 전파하지 않습니다.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from dispatcher.model.dispatcher import (
    BODY_METHODS,
    DEFAULT_USER_AGENT,
    SECRET_HEADER,
    DispatchOutcome,
    DispatcherConfig,
    ErrorCategory,
    Verdict,
)
from scheduler.model.scheduler import Job

logger = logging.getLogger(__name__)


def build_headers(secret: str, headers: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """
    요청 헤더 병합

    - 공유 시크릿 헤더는 항상 주입되며 사용자 헤더로 덮어쓸 수 없음
    - 그 외 사용자 헤더는 중복 포함 그대로 전달
    - User-Agent가 없으면 기본값 추가
    """
    merged = [(SECRET_HEADER, secret)]
    has_user_agent = False

    for name, value in headers:
        lowered = name.lower()
        if lowered == SECRET_HEADER.lower():
            continue
        if lowered == "user-agent":
            has_user_agent = True
        merged.append((name, value))

    if not has_user_agent:
        merged.append(("User-Agent", DEFAULT_USER_AGENT))
    return merged


def build_request_kwargs(job: Job) -> dict[str, Any]:
    """
    메서드별 본문 정책

    - POST/PUT/PATCH: 본문이 없으면 명시적으로 빈 본문 전송
    - GET/HEAD/OPTIONS/DELETE: 본문이 있을 때만 강제로 전송
    """
    if job.body is not None:
        return {"content": job.body.encode("utf-8")}
    if job.method in BODY_METHODS:
        return {"content": b""}
    return {}


class Dispatcher:
    """HTTP Job 디스패처"""

    def __init__(
        self,
        config: DispatcherConfig,
        secret: str,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Dispatcher 설정
            secret: 모든 요청에 주입할 공유 시크릿
            transport: httpx 전송 계층 (테스트용)
        """
        self._config = config
        self._secret = secret
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                config.timeout_seconds,
                connect=config.connect_timeout_seconds,
            ),
            follow_redirects=config.follow_redirects,
            transport=transport,
        )

    async def dispatch(self, job: Job, scheduled_time: datetime | None = None) -> DispatchOutcome:
        """
        Job 하나에 대해 HTTP 요청 1회 수행

        Args:
            job: 실행할 Job
            scheduled_time: 이번 실행의 예정 시각

        Returns:
            DispatchOutcome: 분류된 결과 (예외를 발생시키지 않음)
        """
        outcome = dict(method=job.method, url=job.url, scheduled_time=scheduled_time)

        try:
            response = await self._client.request(
                job.method,
                job.url,
                headers=build_headers(self._secret, job.headers),
                **build_request_kwargs(job),
            )

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return DispatchOutcome.failed(error=str(e) or type(e).__name__, **outcome)

        except Exception as e:
            logger.error(f"Unexpected error dispatching {job.label}: {e}", exc_info=True)
            return DispatchOutcome.failed(error=f"unexpected error: {e}", **outcome)

        status_code = response.status_code
        if status_code >= 400:
            return DispatchOutcome(
                timestamp=datetime.now(timezone.utc),
                verdict=Verdict.FAIL,
                status_code=status_code,
                category=ErrorCategory.from_status(status_code),
                **outcome,
            )

        return DispatchOutcome(
            timestamp=datetime.now(timezone.utc),
            verdict=Verdict.OK,
            status_code=status_code,
            **outcome,
        )

    async def aclose(self) -> None:
        """HTTP 클라이언트 종료"""
        await self._client.aclose()

    async def __aenter__(self) -> "Dispatcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
