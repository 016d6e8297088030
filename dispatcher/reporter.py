"""결과 리포터 - 디스패치 결과를 로그 스트림으로 출력"""

import logging

from dispatcher.model.dispatcher import DispatchOutcome, Verdict

OUTCOME_LOGGER = "cronhook.outcome"


class OutcomeReporter:
    """
    디스패치 결과 리포터

    OK는 INFO, FAIL은 ERROR 레벨로 기록합니다.
    JSON 로깅 사용 시 extra 필드가 구조화 필드로 출력됩니다.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or logging.getLogger(OUTCOME_LOGGER)

    def report(self, outcome: DispatchOutcome) -> None:
        level = logging.INFO if outcome.verdict == Verdict.OK else logging.ERROR
        self._logger.log(
            level,
            outcome.render(),
            extra={
                "verdict": outcome.verdict.value,
                "method": outcome.method,
                "url": outcome.url,
                "scheduled_time": outcome.scheduled_time.isoformat() if outcome.scheduled_time else None,
                "status_code": outcome.status_code,
                "category": outcome.category.value if outcome.category else None,
            },
        )
