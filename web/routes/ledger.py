"""
거래처 원장 API 라우트

계정 명세서, 거래처 잔액, 미수/미지급 잔액 요약 조회 및 CSV 내보내기.

오류 매핑:
- 알 수 없는 거래처: 404
- 잘못된 기간 / 기준일 / 거래처 유형: 422
- 저장소 조회 실패: 503
- 요청 타임아웃: 504
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from core.ledger.errors import LedgerError, LedgerStoreError, LedgerValidationError, NotFoundError
from core.ledger.export import ExportView
from web.dependencies import get_ledger_service
from web.models.responses import (
    BalanceResponse,
    OutstandingResponse,
    PartyListResponse,
    StatementResponse,
)
from web.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ledger", tags=["Ledger"])


def _http_error(e: Exception) -> HTTPException:
    """장부 예외 → HTTPException"""
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, LedgerValidationError):
        return HTTPException(status_code=422, detail=str(e))
    if isinstance(e, asyncio.TimeoutError):
        logger.warning("원장 요청 타임아웃")
        return HTTPException(status_code=504, detail="Ledger request timed out")
    if isinstance(e, LedgerStoreError):
        logger.error(f"원장 저장소 조회 실패: {e}")
        return HTTPException(status_code=503, detail=str(e))
    logger.error(f"원장 요청 실패: {e}")
    return HTTPException(status_code=500, detail=str(e))


def _csv_response(filename: str, content: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/parties", response_model=PartyListResponse)
async def list_parties(
    party_type: str = Query(default="customer", description="customer 또는 vendor"),
    service: LedgerService = Depends(get_ledger_service),
) -> PartyListResponse:
    """거래처 목록"""
    try:
        return await service.list_parties(party_type)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)


@router.get("/statement/{entity_id}", response_model=StatementResponse)
async def get_statement(
    entity_id: str,
    from_date: str = Query(..., description="시작일 (YYYY-MM-DD, 포함)"),
    to_date: str = Query(..., description="종료일 (YYYY-MM-DD, 포함)"),
    service: LedgerService = Depends(get_ledger_service),
) -> StatementResponse:
    """계정 명세서 (기간 원장)

    이월 잔액은 기간 이전의 전체 이력을 정산한 값.
    """
    try:
        return await service.get_statement(entity_id, from_date, to_date)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)


@router.get("/statement/{entity_id}/export")
async def export_statement(
    entity_id: str,
    from_date: str = Query(..., description="시작일 (YYYY-MM-DD, 포함)"),
    to_date: str = Query(..., description="종료일 (YYYY-MM-DD, 포함)"),
    view: ExportView = Query(default=ExportView.STATEMENT, description="statement 또는 invoice"),
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    """계정 명세서 / 청구서 원장 CSV 다운로드"""
    try:
        filename, content = await service.export_statement(entity_id, from_date, to_date, view)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)
    return _csv_response(filename, content)


@router.get("/balance/{entity_id}", response_model=BalanceResponse)
async def get_balance(
    entity_id: str,
    as_of: str | None = Query(default=None, description="기준일 (없으면 전체 이력)"),
    service: LedgerService = Depends(get_ledger_service),
) -> BalanceResponse:
    """거래처 잔액"""
    try:
        return await service.get_balance(entity_id, as_of)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)


@router.get("/outstanding", response_model=OutstandingResponse)
async def get_outstanding(
    party_type: str = Query(default="customer", description="customer 또는 vendor"),
    as_of: str | None = Query(default=None, description="기준일 (없으면 오늘)"),
    service: LedgerService = Depends(get_ledger_service),
) -> OutstandingResponse:
    """미수/미지급 잔액 요약

    조회에 실패한 거래처는 degraded=true 행으로 포함.
    """
    try:
        return await service.get_outstanding(party_type, as_of)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)


@router.get("/outstanding/export")
async def export_outstanding(
    party_type: str = Query(default="customer", description="customer 또는 vendor"),
    as_of: str | None = Query(default=None, description="기준일 (없으면 오늘)"),
    service: LedgerService = Depends(get_ledger_service),
) -> Response:
    """잔액 요약 CSV 다운로드"""
    try:
        filename, content = await service.export_outstanding(party_type, as_of)
    except (LedgerError, asyncio.TimeoutError) as e:
        raise _http_error(e)
    return _csv_response(filename, content)
