"""
Job 스펙 파서

환경 변수 등으로 전달된 Job 스펙 문자열을 Job 목록으로 변환합니다.

형식:
    METHOD|URL|CRON|[HEADERS]|[BODY]

    - 엔트리 구분: ';', 개행, CR
    - 헤더 형식: k1:v1,k2:v2

잘못된 엔트리는 예외 없이 버려지며, 사유는 ParseResult.dropped로 확인할 수 있습니다.
"""

import logging
import re
from datetime import datetime, timezone

from scheduler.cron import CronSchedule
from scheduler.exception import CronParseError
from scheduler.model.scheduler import ALLOWED_METHODS, DroppedEntry, Job, ParseResult

logger = logging.getLogger(__name__)

_ENTRY_SEPARATOR = re.compile(r"[;\n\r]")
_MAX_FIELDS = 5
_MIN_FIELDS = 3


def split_entries(spec: str) -> list[str]:
    """스펙 문자열을 엔트리 단위로 분리 (빈 엔트리 제외)"""
    entries = (entry.strip() for entry in _ENTRY_SEPARATOR.split(spec))
    return [entry for entry in entries if entry]


def parse_headers(value: str) -> list[tuple[str, str]]:
    """
    헤더 필드 파싱

    콜론이 없거나 키가 빈 쌍은 개별적으로 버립니다.
    """
    if not value.strip():
        return []

    headers = []
    for pair in value.split(","):
        key, sep, val = pair.partition(":")
        key = key.strip()
        if not sep or not key:
            continue
        headers.append((key, val.strip()))
    return headers


def parse_jobs(spec: str, now: datetime | None = None) -> ParseResult:
    """
    Job 스펙 파싱

    Args:
        spec: Job 스펙 문자열
        now: 첫 실행 시점 계산 기준 시각 (기본: 현재 UTC)

    Returns:
        ParseResult: 유효한 Job 목록(스펙 순서 유지)과 버려진 엔트리 목록
    """
    now = now or datetime.now(timezone.utc)
    result = ParseResult()

    for entry in split_entries(spec):
        job, reason = _parse_entry(entry, now)
        if job is None:
            logger.debug(f"Dropped job entry: {reason}")
            result.dropped.append(DroppedEntry(entry=entry, reason=reason))
            continue
        result.jobs.append(job)

    logger.debug(f"Parsed {len(result.jobs)} jobs, dropped {len(result.dropped)} entries")
    return result


def _parse_entry(entry: str, now: datetime) -> tuple[Job | None, str | None]:
    """단일 엔트리 파싱 (실패 시 (None, 사유) 반환)"""
    parts = entry.split("|", _MAX_FIELDS - 1)
    if len(parts) < _MIN_FIELDS:
        return None, f"expected at least {_MIN_FIELDS} fields, got {len(parts)}"

    method = parts[0].strip().upper()
    if method not in ALLOWED_METHODS:
        return None, f"unsupported method: {method or '(empty)'}"

    url = parts[1].strip()
    if not url:
        return None, "empty url"

    try:
        schedule = CronSchedule(parts[2].strip())
    except CronParseError as e:
        return None, e.message

    headers = parse_headers(parts[3]) if len(parts) >= 4 else []

    body = None
    if len(parts) == _MAX_FIELDS and parts[4]:
        body = parts[4]

    next_fire = schedule.next_after(now)
    if next_fire is None:
        return None, f"schedule has no future occurrence: {schedule.expression}"

    return Job(
        method=method,
        url=url,
        schedule=schedule,
        next_fire=next_fire,
        headers=headers,
        body=body,
    ), None
