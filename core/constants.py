"""
하드코딩 상수 - 변경될 일이 거의 없는 고정값

중요: 경로는 반드시 pathlib.Path 사용 (Windows/Linux 크로스 플랫폼)
"""

from decimal import Decimal
from pathlib import Path


# 프로젝트 루트 (이 파일 기준 2단계 상위: core/constants.py → 프로젝트 루트)
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent


class Defaults:
    """기본값 상수 (settings.yaml에 값이 없을 때 사용)"""

    TENANT_ID: str = "default"

    WEB_HOST: str = "127.0.0.1"
    WEB_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    # Outstanding Summary fan-out
    SUMMARY_CONCURRENCY: int = 8
    ENTITY_TIMEOUT_SEC: float = 10.0
    REQUEST_TIMEOUT_SEC: float = 60.0

    # 매장 기준 시간대 (IST, UTC+5:30)
    UTC_OFFSET_MINUTES: int = 330

    # 판매/매입 시 결제액(amountPaid)을 별도 이벤트로 반영할지 여부
    INCLUDE_AMOUNT_PAID: bool = False


class Collections:
    """문서 저장소 컬렉션 이름 (원본 앱과 동일)"""

    ENTITIES: str = "customers"
    INVOICES: str = "sales"
    PURCHASES: str = "purchases"
    TRANSACTIONS: str = "transactions"


class LedgerThresholds:
    """잔액 관련 임계값"""

    # 이 값 미만의 잔액은 0으로 간주 (Outstanding Summary에서 제외)
    BALANCE_EPSILON: Decimal = Decimal("0.01")

    # 금액 표시 자릿수
    AMOUNT_QUANT: Decimal = Decimal("0.01")


class Paths:
    """프로젝트 경로 상수 (pathlib 사용 - OS 독립적)"""

    # 디렉토리
    CONFIG_DIR: Path = PROJECT_ROOT / "config"
    DATA_DIR: Path = PROJECT_ROOT / "data"
    LOGS_DIR: Path = PROJECT_ROOT / "logs"
    WEB_LOGS_DIR: Path = LOGS_DIR / "web"
    CLI_LOGS_DIR: Path = LOGS_DIR / "cli"

    # 설정 파일
    SETTINGS_FILE: Path = CONFIG_DIR / "settings.yaml"

    # DB 파일
    DEFAULT_DB: Path = DATA_DIR / "shop_ledger.db"
