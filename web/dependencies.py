"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.
"""

from typing import AsyncGenerator

from fastapi import Depends

from adapters.db.document_store import SQLiteLedgerStore
from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import ILedgerStore
from core.config.loader import LedgerConfig, Settings, get_settings
from web.services.ledger_service import LedgerService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_ledger_config(settings: Settings = Depends(get_app_settings)) -> LedgerConfig:
    """장부 엔진 설정 반환"""
    return settings.ledger


async def get_db(
    settings: Settings = Depends(get_app_settings),
) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)

    Web은 조회만 수행. 문서 적재는 scripts/import_documents.py 담당.
    """
    async with SQLiteAdapter(settings.db_path, readonly=True) as db:
        yield db


def get_ledger_store(
    db: SQLiteAdapter = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ILedgerStore:
    """테넌트 문서 저장소 반환"""
    return SQLiteLedgerStore(db, settings.tenant_id)


def get_ledger_service(
    store: ILedgerStore = Depends(get_ledger_store),
    config: LedgerConfig = Depends(get_ledger_config),
) -> LedgerService:
    """거래처 원장 서비스 반환"""
    return LedgerService(store, config)
