"""
설정 로드

- 필수 값(SECRET, CRON_JOBS)은 환경 변수에서 읽습니다.
- 튜닝 값(scheduler, dispatcher, logging)은 선택적인 YAML 파일에서 읽습니다.
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from cronhook.exception import ConfigFileError, MissingSettingError
from dispatcher.model.dispatcher import DispatcherConfig
from scheduler.model.scheduler import SchedulerConfig

SECRET_ENV = "SECRET"
JOBS_ENV = "CRON_JOBS"
CONFIG_PATH_ENV = "CRONHOOK_CONFIG"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    """로깅 설정"""
    level: str = "INFO"
    json_format: bool = False
    log_file: str | None = None

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"level must be one of {', '.join(_LOG_LEVELS)}")
        return level


class AppConfig(BaseModel):
    """YAML 설정 파일 전체 구조"""
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@dataclass
class Settings:
    """프로세스 실행 설정"""
    secret: str
    jobs_spec: str
    config: AppConfig


def require_env(key: str, environ: dict[str, str] | None = None) -> str:
    """
    필수 환경 변수 조회

    Raises:
        MissingSettingError: 없거나 빈 값인 경우
    """
    environ = os.environ if environ is None else environ
    value = environ.get(key, "")
    if not value:
        raise MissingSettingError(key)
    return value


def load_config(path: str | Path | None = None) -> AppConfig:
    """
    YAML 설정 파일 로드

    Args:
        path: 설정 파일 경로 (None이면 기본값 사용)

    Raises:
        ConfigFileError: 파일이 없거나 내용이 유효하지 않은 경우
    """
    if path is None:
        return AppConfig()

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigFileError(str(path), e.strerror or str(e))
    except yaml.YAMLError as e:
        raise ConfigFileError(str(path), str(e))

    if not isinstance(data, dict):
        raise ConfigFileError(str(path), "top-level value must be a mapping")

    try:
        return AppConfig(**data)
    except ValidationError as e:
        raise ConfigFileError(str(path), str(e))


def load_settings(
    config_path: str | Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """
    실행 설정 로드

    Args:
        config_path: 설정 파일 경로 (None이면 CRONHOOK_CONFIG 환경 변수 사용)
        environ: 환경 변수 (기본: os.environ)
    """
    environ = os.environ if environ is None else environ
    secret = require_env(SECRET_ENV, environ)
    jobs_spec = require_env(JOBS_ENV, environ)
    config = load_config(config_path or environ.get(CONFIG_PATH_ENV) or None)
    return Settings(secret=secret, jobs_spec=jobs_spec, config=config)
