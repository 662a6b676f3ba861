"""
FastAPI 애플리케이션

라우터 등록 및 앱 설정.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.logging import setup_logging
from web.routes import health, ledger
from web.routes.health import API_VERSION

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """앱 생명주기 관리"""
    settings = get_settings()
    setup_logging("web", console_level=logging.getLevelName(settings.config.log_level))

    # 시작 시 - DB 스키마 자동 초기화 (읽기 전용 연결 전에 파일 생성)
    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)

    logger.info(
        f"Web: 원장 API 시작 (tenant={settings.tenant_id})",
        extra={"db_path": str(settings.db_path)},
    )

    yield

    logger.info("Web: 원장 API 종료")


app = FastAPI(
    title="Shop Ledger API",
    description="거래처 원장 (계정 명세서 / 미수·미지급 잔액 요약) API",
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS 설정 (개발용)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================================================================
# API 라우터 등록
# =========================================================================

app.include_router(health.router)
app.include_router(ledger.router)
