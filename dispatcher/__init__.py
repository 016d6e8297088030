"""Dispatcher 모듈 - Job별 HTTP 요청 전송 및 결과 분류"""

from dispatcher.main import Dispatcher, build_headers, build_request_kwargs
from dispatcher.model.dispatcher import (
    DispatchOutcome,
    DispatcherConfig,
    ErrorCategory,
    Verdict,
)
from dispatcher.reporter import OutcomeReporter

__all__ = [
    "Dispatcher",
    "build_headers",
    "build_request_kwargs",
    "DispatchOutcome",
    "DispatcherConfig",
    "ErrorCategory",
    "Verdict",
    "OutcomeReporter",
]
