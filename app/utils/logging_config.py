"""애플리케이션 로깅 설정 모듈.

Application logging setup. Called once from the FastAPI entry point;
request-level logs go to Axiom through the middleware, application logs
(storage failures, rejected logins, bulk deletes) go to stderr.
"""

import logging
import sys

LOG_FORMAT: str = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"


def setup_logging(level: str | int = logging.INFO) -> None:
    """루트 로거를 설정합니다. 중복 핸들러는 제거.

    Configure the root logger with a single stderr handler.
    """
    root_logger = logging.getLogger()

    # 기존 핸들러 제거 — Clear existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    # stderr 사용 — uvicorn과 호환 (stderr for uvicorn compatibility)
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(console_handler)

    # 서드파티 로그 소음 억제 — Quiet noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
