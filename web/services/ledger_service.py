"""
거래처 원장 서비스

Range Query / Outstanding Summary 결과를 API 응답 모델과 CSV로 변환.
요청 전체에 request_timeout_sec 타임아웃 적용 (초과 시 asyncio.TimeoutError).
"""

import asyncio
from datetime import date
from decimal import Decimal
from typing import Any, Awaitable, TypeVar

from adapters.interfaces import ILedgerStore
from core.config.loader import LedgerConfig
from core.ledger.errors import InvalidAsOfDateError, InvalidPartyTypeError
from core.ledger.export import (
    PARTICULARS,
    ExportView,
    export_filename,
    format_amount,
    invoice_ledger_to_csv,
    statement_to_csv,
    summary_filename,
    summary_to_csv,
)
from core.ledger.normalizer import EventNormalizer
from core.ledger.outstanding import OutstandingSummaryService
from core.ledger.range_query import RangeQueryService
from core.ledger.reconciler import signed_effect
from core.ledger.types import LedgerRow, RangeResult, SummaryRow
from core.types import PartyType
from core.utils.timezone import DateParseFailure, format_date, parse_date, today_local
from web.models.responses import (
    BalanceResponse,
    LedgerRowResponse,
    OutstandingResponse,
    PartyListResponse,
    PartyResponse,
    StatementResponse,
    SummaryRowResponse,
    WarningResponse,
)

T = TypeVar("T")


class LedgerService:
    """거래처 원장 서비스

    RangeQueryService / OutstandingSummaryService를 조합.
    """

    def __init__(self, store: ILedgerStore, config: LedgerConfig):
        self.store = store
        self.config = config
        normalizer = EventNormalizer(
            tz=config.tz,
            include_amount_paid=config.include_amount_paid,
        )
        self.range_query = RangeQueryService(store, normalizer)
        self.outstanding = OutstandingSummaryService(
            store,
            normalizer,
            concurrency=config.summary_concurrency,
            entity_timeout=config.entity_timeout_sec,
        )

    async def _with_timeout(self, awaitable: Awaitable[T]) -> T:
        return await asyncio.wait_for(awaitable, timeout=self.config.request_timeout_sec)

    # -------------------------------------------------------------------------
    # 거래처
    # -------------------------------------------------------------------------

    async def list_parties(self, party_type: str) -> PartyListResponse:
        """거래처 목록 (이름순)"""
        kind = _parse_party_type(party_type)
        entities = await self._with_timeout(self.store.fetch_entities(kind))
        entities = sorted(entities, key=lambda e: e.display_name.lower())

        return PartyListResponse(
            parties=[
                PartyResponse(
                    entity_id=e.id,
                    display_name=e.display_name,
                    party_type=e.party_type.value,
                    opening_balance=format_amount(e.opening_balance),
                )
                for e in entities
            ],
            total_count=len(entities),
        )

    # -------------------------------------------------------------------------
    # 기간 원장
    # -------------------------------------------------------------------------

    async def get_statement(self, entity_id: str, from_date: Any, to_date: Any) -> StatementResponse:
        """계정 명세서"""
        result = await self._with_timeout(
            self.range_query.get_range_ledger(entity_id, from_date, to_date)
        )
        return _statement_response(result)

    async def export_statement(
        self,
        entity_id: str,
        from_date: Any,
        to_date: Any,
        view: ExportView = ExportView.STATEMENT,
    ) -> tuple[str, str]:
        """명세서 CSV

        Returns:
            (파일명, CSV 문자열)
        """
        result = await self._with_timeout(
            self.range_query.get_range_ledger(entity_id, from_date, to_date)
        )
        if view is ExportView.INVOICE:
            content = invoice_ledger_to_csv(result)
        else:
            content = statement_to_csv(result)
        filename = export_filename(view, result.entity.display_name, result.from_date, result.to_date)
        return filename, content

    async def get_balance(self, entity_id: str, as_of: Any = None) -> BalanceResponse:
        """거래처 잔액 (as_of 없으면 전체 이력)"""
        cutoff_day = self._parse_as_of(as_of) if as_of is not None else None
        balance = await self._with_timeout(self.range_query.get_balance(entity_id, cutoff_day))
        return BalanceResponse(
            entity_id=entity_id,
            as_of=format_date(cutoff_day) if cutoff_day else None,
            balance=format_amount(balance),
        )

    # -------------------------------------------------------------------------
    # 잔액 요약
    # -------------------------------------------------------------------------

    async def get_outstanding(self, party_type: str, as_of: Any = None) -> OutstandingResponse:
        """미수/미지급 잔액 요약 (as_of 없으면 매장 기준 오늘)"""
        kind, cutoff_day, rows = await self._summary(party_type, as_of)

        total = sum((row.balance for row in rows if not row.degraded), Decimal("0"))
        return OutstandingResponse(
            party_type=kind.value,
            as_of=format_date(cutoff_day),
            rows=[_summary_row_response(row) for row in rows],
            total_balance=format_amount(total),
            degraded_count=sum(1 for row in rows if row.degraded),
        )

    async def export_outstanding(self, party_type: str, as_of: Any = None) -> tuple[str, str]:
        """잔액 요약 CSV

        Returns:
            (파일명, CSV 문자열)
        """
        kind, cutoff_day, rows = await self._summary(party_type, as_of)
        return summary_filename(kind, cutoff_day), summary_to_csv(rows)

    async def _summary(
        self, party_type: str, as_of: Any
    ) -> tuple[PartyType, date, list[SummaryRow]]:
        kind = _parse_party_type(party_type)
        cutoff_day = self._parse_as_of(as_of) if as_of is not None else today_local(self.config.tz)
        rows = await self._with_timeout(
            self.outstanding.get_outstanding_summary(kind, cutoff_day)
        )
        return kind, cutoff_day, rows

    def _parse_as_of(self, as_of: Any) -> date:
        parsed = parse_date(as_of, self.config.tz)
        if isinstance(parsed, DateParseFailure):
            raise InvalidAsOfDateError(as_of, parsed.reason)
        return parsed


def _parse_party_type(value: str) -> PartyType:
    try:
        return PartyType.parse(value)
    except ValueError:
        raise InvalidPartyTypeError(value)


def _row_response(party_type: PartyType, row: LedgerRow) -> LedgerRowResponse:
    effect = signed_effect(party_type, row.event)
    return LedgerRowResponse(
        date=format_date(row.date),
        kind=row.kind.value,
        particulars=PARTICULARS[row.kind],
        reference=row.event.reference,
        debit=format_amount(effect) if effect >= 0 else None,
        credit=format_amount(-effect) if effect < 0 else None,
        balance=format_amount(row.running_balance),
        source_id=row.event.source_id,
    )


def _statement_response(result: RangeResult) -> StatementResponse:
    entity = result.entity
    return StatementResponse(
        entity_id=entity.id,
        display_name=entity.display_name,
        party_type=entity.party_type.value,
        from_date=format_date(result.from_date),
        to_date=format_date(result.to_date),
        opening_carry=format_amount(result.opening_carry),
        closing_balance=format_amount(result.closing_balance),
        total_debit=format_amount(result.total_debit),
        total_credit=format_amount(result.total_credit),
        rows=[_row_response(entity.party_type, row) for row in result.rows],
        warnings=[
            WarningResponse(source=w.source.value, record_id=w.record_id, reason=w.reason)
            for w in result.warnings
        ],
    )


def _summary_row_response(row: SummaryRow) -> SummaryRowResponse:
    return SummaryRowResponse(
        entity_id=row.entity_id,
        display_name=row.display_name,
        party_type=row.party_type.value,
        balance=format_amount(row.balance),
        degraded=row.degraded,
        error=row.error,
        warning_count=row.warning_count,
    )
