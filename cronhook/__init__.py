"""cronhook - 크론 스케줄 기반 HTTP 호출 스케줄러"""

__version__ = "0.1.0"
