from dispatcher.model.dispatcher import (
    BODY_METHODS,
    DEFAULT_USER_AGENT,
    SECRET_HEADER,
    DispatchOutcome,
    DispatcherConfig,
    ErrorCategory,
    Verdict,
)

__all__ = [
    "BODY_METHODS",
    "DEFAULT_USER_AGENT",
    "SECRET_HEADER",
    "DispatchOutcome",
    "DispatcherConfig",
    "ErrorCategory",
    "Verdict",
]
