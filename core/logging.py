"""
로깅 설정 유틸리티

Web 서버와 CLI 스크립트에서 공통으로 사용하는 로깅 설정.
- 콘솔: INFO 레벨
- 파일: INFO 레벨 (TimedRotatingFileHandler, daily)

사용법:
    from core.logging import setup_logging
    setup_logging("web")  # Web 서버
    setup_logging("cli")  # 가져오기 스크립트 등
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7  # 최대 7일치 파일 유지

# 프로세스별 로그 디렉토리 (목록에 없으면 logs/ 바로 아래)
PROCESS_LOG_DIRS: dict[str, Path] = {
    "web": Paths.WEB_LOGS_DIR,
    "cli": Paths.CLI_LOGS_DIR,
}

# 로그 볼륨이 큰 로거 (WARNING으로 조정)
NOISY_LOGGERS = [
    "aiosqlite",       # DB 쿼리마다 executing/completed 로그
    "asyncio",
    "httpcore",
    "httpx",           # TestClient 요청 로그
    "uvicorn.access",  # 요청마다 access 로그
]


def get_log_file_path(process_name: str) -> Path:
    """로그 파일 경로 반환

    Args:
        process_name: 프로세스 이름 ("web" 또는 "cli")

    Returns:
        로그 파일 Path
    """
    log_dir = PROCESS_LOG_DIRS.get(process_name, Paths.LOGS_DIR)
    return log_dir / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """로깅 설정 초기화

    Daily 롤링으로 매일 자정에 새 파일 생성.

    Args:
        process_name: 프로세스 이름 ("web" 또는 "cli")
        console_level: 콘솔 로그 레벨 (기본: INFO)
        file_level: 파일 로그 레벨 (기본: INFO)
        log_file: 로그 파일 경로 (None이면 프로세스별 기본 경로)

    Returns:
        설정된 루트 Logger
    """
    if log_file is None:
        log_file = get_log_file_path(process_name)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # 핸들러에서 필터링

    # 기존 핸들러 제거 (중복 방지)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # 백업 파일 형식: web.log.2026-02-21
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"로깅 초기화 완료: {process_name}")
    root_logger.info(f"  - 파일: {log_file} ({logging.getLevelName(file_level)}, daily rotation)")

    return root_logger
