"""
Job 스펙 파서 테스트

테스트 항목:
1. 엔트리 분리 (';', 개행, CR)
2. 필드 수 부족 / 잘못된 메서드 / 잘못된 크론 / 빈 URL 엔트리 제거
3. 헤더 파싱 (쌍 단위 제거)
4. 본문 처리 (그대로 유지, 빈 값은 None)
5. 첫 실행 시점 = 파싱 시점 이후 가장 이른 실행 시점
6. 소진된 스케줄 제거

실행: python -m pytest test/parser_test.py -v
"""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from scheduler.cron import CronSchedule
from scheduler.parser import parse_headers, parse_jobs, split_entries

# 테스트용 로깅 설정
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

NOW = datetime(2024, 1, 15, 10, 0, 2, tzinfo=timezone.utc)


class TestSplitEntries:
    """엔트리 분리 테스트"""

    def test_all_separators(self):
        """';', 개행, CR 모두 구분자로 동작"""
        entries = split_entries("a;b\nc\rd\r\ne")
        assert entries == ["a", "b", "c", "d", "e"]

    def test_blank_entries_skipped(self):
        """공백 엔트리는 제외"""
        assert split_entries(" ;; \n  a  ;\n") == ["a"]
        assert split_entries("") == []


class TestParseJobs:
    """Job 파싱 테스트"""

    def test_mixed_spec_scenario(self):
        """잘못된 엔트리 하나가 섞여도 유효한 Job 2개 파싱"""
        spec = "GET|https://x/a|*/5 * * * * *|;BOGUS;POST|https://x/b|*/10 * * * * *|ct:v|hi"
        result = parse_jobs(spec, now=NOW)

        assert len(result.jobs) == 2
        first, second = result.jobs

        assert first.method == "GET"
        assert first.url == "https://x/a"
        assert first.headers == []
        assert first.body is None

        assert second.method == "POST"
        assert second.url == "https://x/b"
        assert second.headers == [("ct", "v")]
        assert second.body == "hi"

        assert len(result.dropped) == 1
        assert result.dropped[0].entry == "BOGUS"
        logger.info("Mixed spec scenario test passed")

    def test_next_fire_strictly_after_parse_time(self):
        """첫 실행 시점은 파싱 시점 이후(초과)의 가장 이른 실행 시점"""
        result = parse_jobs("GET|https://x/a|*/5 * * * * *", now=NOW)
        assert result.jobs[0].next_fire == datetime(2024, 1, 15, 10, 0, 5, tzinfo=timezone.utc)

        # 파싱 시점이 실행 시점과 정확히 일치해도 다음 실행 시점
        on_the_dot = datetime(2024, 1, 15, 10, 0, 5, tzinfo=timezone.utc)
        result = parse_jobs("GET|https://x/a|*/5 * * * * *", now=on_the_dot)
        assert result.jobs[0].next_fire == datetime(2024, 1, 15, 10, 0, 10, tzinfo=timezone.utc)

    def test_five_field_cron(self):
        """5필드 크론은 분 단위"""
        result = parse_jobs("GET|https://x/a|*/15 * * * *", now=NOW)
        assert result.jobs[0].next_fire == datetime(2024, 1, 15, 10, 15, 0, tzinfo=timezone.utc)

    def test_method_normalized(self):
        """메서드는 대문자로 정규화"""
        result = parse_jobs(" patch |https://x/a|* * * * *", now=NOW)
        assert result.jobs[0].method == "PATCH"

    @pytest.mark.parametrize("entry", [
        "GET|https://x/a",                     # 필드 부족
        "FETCH|https://x/a|* * * * *",         # 잘못된 메서드
        "|https://x/a|* * * * *",              # 빈 메서드
        "GET|https://x/a|invalid_cron",        # 잘못된 크론
        "GET|https://x/a|61 * * * *",          # 범위 밖 크론
        "GET|   |* * * * *",                   # 빈 URL
    ])
    def test_malformed_entry_dropped(self, entry):
        """잘못된 엔트리는 예외 없이 제거되고 사유가 기록됨"""
        result = parse_jobs(entry, now=NOW)
        assert result.jobs == []
        assert len(result.dropped) == 1
        assert result.dropped[0].reason

    def test_order_preserved_with_malformed_entry(self):
        """N개의 정상 엔트리 사이에 잘못된 엔트리가 있어도 정확히 N개, 순서 유지"""
        spec = "\n".join([
            "GET|https://x/1|* * * * *",
            "DELETE|https://x/2|0 * * * *",
            "NOPE|https://x/bad|* * * * *",
            "PUT|https://x/3|*/2 * * * * *",
        ])
        result = parse_jobs(spec, now=NOW)
        assert [job.url for job in result.jobs] == ["https://x/1", "https://x/2", "https://x/3"]
        assert [d.entry for d in result.dropped] == ["NOPE|https://x/bad|* * * * *"]

    def test_body_verbatim(self):
        """본문은 트림하지 않고 '|'도 그대로 유지"""
        result = parse_jobs("POST|https://x/a|* * * * *||  a | b", now=NOW)
        assert result.jobs[0].body == "  a | b"

    def test_empty_body_is_none(self):
        """빈 본문은 본문 없음으로 정규화"""
        result = parse_jobs("POST|https://x/a|* * * * *|ct:v|", now=NOW)
        assert result.jobs[0].body is None
        assert result.jobs[0].headers == [("ct", "v")]

    def test_exhausted_schedule_dropped(self, monkeypatch):
        """이후 실행 시점이 없는 스케줄은 제거"""
        monkeypatch.setattr(CronSchedule, "next_after", lambda self, instant: None)
        result = parse_jobs("GET|https://x/a|* * * * *", now=NOW)
        assert result.jobs == []
        assert "no future occurrence" in result.dropped[0].reason


class TestParseHeaders:
    """헤더 파싱 테스트"""

    def test_pairs_trimmed(self):
        """키/값은 트림됨"""
        assert parse_headers(" a : 1 , b:2") == [("a", "1"), ("b", "2")]

    def test_bad_pairs_dropped_individually(self):
        """콜론 없는 쌍, 빈 키 쌍만 개별 제거"""
        headers = parse_headers("a:1,bad,:novalue,c:x:y")
        assert headers == [("a", "1"), ("c", "x:y")]

    def test_duplicates_kept_in_order(self):
        """중복 헤더 허용, 순서 유지"""
        assert parse_headers("X-A:1,X-A:2") == [("X-A", "1"), ("X-A", "2")]

    def test_blank_field(self):
        """빈 헤더 필드는 빈 목록"""
        assert parse_headers("   ") == []


if __name__ == "__main__":
    pytest.main([__file__, "-v", "-s"])
