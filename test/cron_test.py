"""
크론 평가기 테스트

실행: python -m pytest test/cron_test.py -v
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduler.cron import CronSchedule, to_utc
from scheduler.exception import CronParseError


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestCronSchedule:
    """CronSchedule 테스트"""

    def test_minute_granularity(self):
        """5필드: 초는 0으로 고정"""
        schedule = CronSchedule("* * * * *")
        assert schedule.next_after(utc(2024, 1, 15, 10, 0, 30)) == utc(2024, 1, 15, 10, 1, 0)

    def test_seconds_field_first(self):
        """6필드: 첫 필드가 초"""
        schedule = CronSchedule("*/5 * * * * *")
        assert schedule.next_after(utc(2024, 1, 15, 10, 0, 2)) == utc(2024, 1, 15, 10, 0, 5)

    def test_strictly_after(self):
        """실행 시점과 같은 시각이면 그 다음 실행 시점"""
        schedule = CronSchedule("*/5 * * * * *")
        assert schedule.next_after(utc(2024, 1, 15, 10, 0, 5)) == utc(2024, 1, 15, 10, 0, 10)

    def test_sub_second_instant(self):
        """초 미만 시각에서도 다음 정수 초 실행 시점"""
        schedule = CronSchedule("* * * * * *")
        instant = datetime(2024, 1, 15, 10, 0, 0, 300000, tzinfo=timezone.utc)
        assert schedule.next_after(instant) == utc(2024, 1, 15, 10, 0, 1)

    def test_naive_instant_treated_as_utc(self):
        """naive datetime은 UTC로 간주하고 UTC로 반환"""
        schedule = CronSchedule("0 * * * *")
        result = schedule.next_after(datetime(2024, 1, 15, 10, 30))
        assert result == utc(2024, 1, 15, 11, 0, 0)
        assert result.utcoffset().total_seconds() == 0

    def test_year_field_exhausts(self):
        """7필드 연도 범위가 끝나면 None"""
        schedule = CronSchedule("0 0 0 1 1 * 2024-2025")
        assert schedule.next_after(utc(2024, 6, 1, 0, 0)) == utc(2025, 1, 1, 0, 0)
        assert schedule.next_after(utc(2025, 1, 1, 0, 0)) is None

    def test_expression_normalized(self):
        """공백 정규화"""
        assert CronSchedule("  */5   * * * * * ").expression == "*/5 * * * * *"

    @pytest.mark.parametrize("expression", ["invalid_cron", "61 * * * *", "* * *", ""])
    def test_invalid_expression(self, expression):
        """잘못된 표현식은 CronParseError"""
        with pytest.raises(CronParseError):
            CronSchedule(expression)

    def test_to_utc_converts_offsets(self):
        """다른 타임존은 UTC로 변환"""
        from datetime import timedelta
        kst = timezone(timedelta(hours=9))
        assert to_utc(datetime(2024, 1, 15, 19, 0, tzinfo=kst)) == utc(2024, 1, 15, 10, 0)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
