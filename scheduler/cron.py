"""
크론 표현식 평가기

croniter를 감싸서 "주어진 UTC 시각 이후의 다음 실행 시점"을 계산합니다.

지원 형식:
    5필드: 분 시 일 월 요일 (초는 0으로 고정)
    6필드: 초 분 시 일 월 요일
    7필드: 초 분 시 일 월 요일 연도
"""

from datetime import datetime, timezone

from croniter import croniter, CroniterError

from scheduler.exception import CronParseError

UNIX_CRON_FIELDS = 5


def to_utc(instant: datetime) -> datetime:
    """naive datetime은 UTC로 간주"""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


class CronSchedule:
    """컴파일된 크론 스케줄 (불변)"""

    def __init__(self, expression: str):
        """
        Args:
            expression: 크론 표현식 (5/6/7 필드)

        Raises:
            CronParseError: 표현식이 유효하지 않은 경우
        """
        self._expression = " ".join(expression.split())
        self._second_at_beginning = len(self._expression.split()) > UNIX_CRON_FIELDS

        try:
            # 생성 시점에 필드 확장 (잘못된 표현식은 여기서 실패)
            croniter(
                self._expression,
                datetime.now(timezone.utc),
                second_at_beginning=self._second_at_beginning,
            )
        except (CroniterError, ValueError, KeyError) as e:
            raise CronParseError(expression, str(e))

    @property
    def expression(self) -> str:
        return self._expression

    def next_after(self, instant: datetime) -> datetime | None:
        """
        instant 이후(초과)의 다음 실행 시점

        Returns:
            다음 실행 시점 (UTC), 더 이상 실행 시점이 없으면 None
        """
        try:
            cron = croniter(
                self._expression,
                to_utc(instant),
                second_at_beginning=self._second_at_beginning,
            )
            return to_utc(cron.get_next(datetime))
        except CroniterError:
            # 연도 제한 등으로 실행 시점이 소진됨
            return None

    def __repr__(self) -> str:
        return f"CronSchedule({self._expression!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, CronSchedule):
            return NotImplemented
        return self._expression == other._expression

    def __hash__(self) -> int:
        return hash(self._expression)
