"""
cronhook 진입점

사용법:
    python main.py                        # 스케줄러 실행
    python main.py run -c config/cronhook.yaml
    python main.py check -j "GET|https://example.com/ping|*/30 * * * * *"

필수 환경 변수:
    SECRET      모든 요청에 X-Cron-Secret 헤더로 주입할 공유 시크릿
    CRON_JOBS   Job 스펙 (METHOD|URL|CRON|[HEADERS]|[BODY], ';' 또는 개행 구분)
"""

import os
import sys

# Windows 인코딩 설정 (cp949 -> UTF-8)
if sys.platform == "win32":
    os.environ["PYTHONUTF8"] = "1"

from cronhook.cli import main

if __name__ == "__main__":
    main()
