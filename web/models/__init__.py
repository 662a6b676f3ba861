"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.responses import (
    BalanceResponse,
    HealthResponse,
    LedgerRowResponse,
    OutstandingResponse,
    PartyListResponse,
    PartyResponse,
    StatementResponse,
    SummaryRowResponse,
    WarningResponse,
)

__all__ = [
    "BalanceResponse",
    "HealthResponse",
    "LedgerRowResponse",
    "OutstandingResponse",
    "PartyListResponse",
    "PartyResponse",
    "StatementResponse",
    "SummaryRowResponse",
    "WarningResponse",
]
