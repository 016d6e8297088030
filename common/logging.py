"""
로깅 설정

텍스트 포맷 또는 JSON 포맷(ELK/Loki 등 로그 수집 시스템 연동용)을 제공합니다.
"""

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(level)s %(logger)s %(message)s'

BASE_FIELDS = ('timestamp', 'level', 'logger', 'message')

# 디스패치 결과 로그(extra)의 구조화 필드
OUTCOME_FIELDS = ('verdict', 'method', 'url', 'scheduled_time', 'status_code', 'category')


class CustomJsonFormatter(JsonFormatter):
    """
    JSON 로그 포매터

    모든 로그는 timestamp, level, logger, message 순으로 시작합니다.
    디스패치 결과 로그(verdict 필드 포함)는 그 뒤에 OUTCOME_FIELDS를 항상
    같은 순서로 출력하며, 값이 없는 필드는 null입니다.
    """

    def __init__(self, fmt: str = JSON_FORMAT, *args, **kwargs):
        super().__init__(fmt, *args, **kwargs)

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name

        if 'message' not in log_record and record.getMessage():
            log_record['message'] = record.getMessage()

        if hasattr(record, 'verdict'):
            for name in OUTCOME_FIELDS:
                log_record[name] = getattr(record, name, None)

    def process_log_record(self, log_record):
        fixed = [name for name in BASE_FIELDS + OUTCOME_FIELDS if name in log_record]
        ordered = {name: log_record.pop(name) for name in fixed}
        ordered.update(log_record)
        return ordered


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None
) -> None:
    """
    로깅 설정

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON 포맷 사용 여부 (False면 기본 텍스트 포맷)
        log_file: 로그 파일 경로 (None이면 stdout만 사용)
    """
    handlers = []

    stream_handler = logging.StreamHandler(sys.stdout)

    if json_format:
        formatter = CustomJsonFormatter()
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    stream_handler.setFormatter(formatter)
    handlers.append(stream_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True  # 기존 설정 덮어쓰기
    )

    # 외부 라이브러리 로그 레벨 조정
    for name in ('asyncio', 'httpx', 'httpcore'):
        logging.getLogger(name).setLevel(logging.WARNING)
