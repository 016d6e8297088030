"""
Scheduler 관련 예외 클래스 정의
"""


class SchedulerError(Exception):
    """Scheduler 기본 예외"""
    pass


class CronParseError(SchedulerError):
    """크론 표현식 파싱 실패"""
    def __init__(self, cron_expression: str, message: str = None):
        self.cron_expression = cron_expression
        self.message = message or f"Invalid cron expression: {cron_expression}"
        super().__init__(self.message)


class EmptyScheduleError(SchedulerError):
    """활성 Job이 없는 상태에서 다음 실행 시간 계산 시도"""
    def __init__(self):
        self.message = "Internal error: empty schedule set"
        super().__init__(self.message)
