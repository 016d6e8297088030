"""
설정 관련 예외 클래스 정의

모든 설정 에러는 치명적이며 프로세스를 즉시 종료시킵니다.
"""


class CronhookError(Exception):
    """cronhook 기본 예외"""
    pass


class ConfigError(CronhookError):
    """설정 에러 (재시도 없음)"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class MissingSettingError(ConfigError):
    """필수 환경 변수 누락"""
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing required env var: {key}")


class ConfigFileError(ConfigError):
    """설정 파일을 읽을 수 없거나 내용이 유효하지 않음"""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid config file '{path}': {reason}")


class NoValidJobsError(ConfigError):
    """파싱 결과 유효한 Job이 없음"""
    def __init__(self, source: str = "CRON_JOBS"):
        self.source = source
        super().__init__(f"No valid jobs parsed from {source}")
