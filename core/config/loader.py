"""
설정 로더

settings.yaml 로드 및 장부 엔진 설정 생성
"""

from dataclasses import dataclass, field
from datetime import timezone
from pathlib import Path
from typing import Any

import yaml

from core.constants import PROJECT_ROOT, Defaults, Paths
from core.utils.timezone import make_timezone

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class LedgerConfig:
    """장부 엔진 설정

    불변 데이터 구조로 설정 변경 방지
    """

    summary_concurrency: int = Defaults.SUMMARY_CONCURRENCY
    entity_timeout_sec: float = Defaults.ENTITY_TIMEOUT_SEC
    request_timeout_sec: float = Defaults.REQUEST_TIMEOUT_SEC
    include_amount_paid: bool = Defaults.INCLUDE_AMOUNT_PAID
    utc_offset_minutes: int = Defaults.UTC_OFFSET_MINUTES

    @property
    def tz(self) -> timezone:
        """매장 기준 시간대"""
        return make_timezone(self.utc_offset_minutes)


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)"""

    tenant_id: str = Defaults.TENANT_ID
    db_path: Path = Paths.DEFAULT_DB
    web_host: str = Defaults.WEB_HOST
    web_port: int = Defaults.WEB_PORT
    log_level: str = Defaults.LOG_LEVEL
    ledger: LedgerConfig = field(default_factory=LedgerConfig)


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise SettingsLoadError(f"settings.yaml의 '{name}' 섹션은 매핑이어야 합니다")
    return value


def _positive_int(section: dict[str, Any], key: str, default: int) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise SettingsLoadError(f"'{key}'는 1 이상의 정수여야 합니다: {value!r}")
    return value


def _positive_float(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise SettingsLoadError(f"'{key}'는 0보다 큰 숫자여야 합니다: {value!r}")
    return float(value)


def _parse_ledger(section: dict[str, Any]) -> LedgerConfig:
    include_amount_paid = section.get("include_amount_paid", Defaults.INCLUDE_AMOUNT_PAID)
    if not isinstance(include_amount_paid, bool):
        raise SettingsLoadError(
            f"'include_amount_paid'는 true/false여야 합니다: {include_amount_paid!r}"
        )

    utc_offset = section.get("utc_offset_minutes", Defaults.UTC_OFFSET_MINUTES)
    if isinstance(utc_offset, bool) or not isinstance(utc_offset, int) or abs(utc_offset) >= 24 * 60:
        raise SettingsLoadError(f"'utc_offset_minutes'가 유효하지 않습니다: {utc_offset!r}")

    return LedgerConfig(
        summary_concurrency=_positive_int(section, "summary_concurrency", Defaults.SUMMARY_CONCURRENCY),
        entity_timeout_sec=_positive_float(section, "entity_timeout_sec", Defaults.ENTITY_TIMEOUT_SEC),
        request_timeout_sec=_positive_float(section, "request_timeout_sec", Defaults.REQUEST_TIMEOUT_SEC),
        include_amount_paid=include_amount_paid,
        utc_offset_minutes=utc_offset,
    )


def load_settings(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    파일이 없으면 Defaults 기반 기본 설정을 반환한다.

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 형식이 잘못되었거나 값이 유효하지 않은 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        return AppConfig()

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        return AppConfig()
    if not isinstance(data, dict):
        raise SettingsLoadError("settings.yaml 최상위는 매핑이어야 합니다")

    tenant_id = str(data.get("tenant_id") or Defaults.TENANT_ID).strip()
    if not tenant_id or "/" in tenant_id:
        raise SettingsLoadError(f"유효하지 않은 tenant_id입니다: {tenant_id!r}")

    # 상대 경로는 프로젝트 루트 기준
    db_path = Path(data.get("db_path") or Paths.DEFAULT_DB)
    if not db_path.is_absolute():
        db_path = PROJECT_ROOT / db_path

    web = _section(data, "web")
    log = _section(data, "logging")

    log_level = str(log.get("level", Defaults.LOG_LEVEL)).upper()
    if log_level not in LOG_LEVELS:
        raise SettingsLoadError(f"유효하지 않은 로그 레벨입니다: {log_level!r}")

    return AppConfig(
        tenant_id=tenant_id,
        db_path=db_path,
        web_host=str(web.get("host", Defaults.WEB_HOST)),
        web_port=_positive_int(web, "port", Defaults.WEB_PORT),
        log_level=log_level,
        ledger=_parse_ledger(_section(data, "ledger")),
    )


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            self._config = load_settings(settings_path)

    @property
    def config(self) -> AppConfig:
        """전체 설정"""
        assert self._config is not None
        return self._config

    @property
    def tenant_id(self) -> str:
        """문서 저장소 테넌트 (users/{tenant_id}/...)"""
        return self.config.tenant_id

    @property
    def db_path(self) -> Path:
        """문서 저장소 DB 경로"""
        return self.config.db_path

    @property
    def ledger(self) -> LedgerConfig:
        """장부 엔진 설정"""
        return self.config.ledger

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
