"""
기간 원장 조회 서비스 (Range Query Service)

거래처 하나의 전체 이력을 정산한 뒤 [from_date, to_date] 구간을 잘라낸다.
구간 앞부분은 이월 잔액(opening_carry)으로 합쳐지므로 인접한 두 구간을
이어 붙이면 전체 기간 조회와 같은 잔액 흐름이 된다.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from core.ledger.errors import EntityNotFoundError, InvalidAsOfDateError, InvalidRangeError
from core.ledger.history import load_history
from core.ledger.normalizer import EventNormalizer
from core.ledger.reconciler import (
    balance_as_of,
    balance_before,
    final_balance,
    reconcile,
    signed_effect,
)
from core.ledger.types import Entity, EventKind, RangeResult
from core.utils.timezone import DateParseFailure, parse_date

if TYPE_CHECKING:
    from adapters.interfaces import ILedgerStore

logger = logging.getLogger(__name__)


class RangeQueryService:
    """기간 원장 조회

    사용 예시:
    ```python
    service = RangeQueryService(store)
    result = await service.get_range_ledger("c1", "2024-01-01", "2024-01-31")
    result.opening_carry    # 1월 1일 이전까지 잔액
    result.rows             # 1월 행 (누적 잔액 포함)
    result.closing_balance  # 1월 말 잔액
    ```
    """

    def __init__(self, store: ILedgerStore, normalizer: EventNormalizer | None = None):
        self.store = store
        self.normalizer = normalizer or EventNormalizer()

    async def get_range_ledger(self, entity_id: str, from_date: Any, to_date: Any) -> RangeResult:
        """기간 원장 조회

        Args:
            entity_id: 거래처 ID
            from_date: 시작일 (포함, parse_date가 받는 모든 형식)
            to_date: 종료일 (포함)

        Returns:
            RangeResult

        Raises:
            InvalidRangeError: 날짜 파싱 불가 또는 from > to
            EntityNotFoundError: 알 수 없는 거래처
            LedgerStoreError: 저장소 조회 실패
        """
        start, end = self._parse_range(from_date, to_date)
        entity = await self._require_entity(entity_id)

        history = await load_history(self.store, self.normalizer, entity)
        all_rows = reconcile(entity.party_type, history.events)

        opening_carry = balance_before(all_rows, start)
        rows = [
            row for row in all_rows
            if row.kind is not EventKind.OPENING and start <= row.date <= end
        ]
        closing_balance = rows[-1].running_balance if rows else opening_carry

        total_debit = Decimal("0")
        total_credit = Decimal("0")
        for row in rows:
            effect = signed_effect(entity.party_type, row.event)
            if effect >= 0:
                total_debit += effect
            else:
                total_credit -= effect

        logger.debug(
            f"기간 원장 조회 완료: {entity_id} {start}~{end} ({len(rows)}행)",
            extra={"entity_id": entity_id, "warnings": len(history.warnings)},
        )

        return RangeResult(
            entity=entity,
            from_date=start,
            to_date=end,
            rows=rows,
            opening_carry=opening_carry,
            closing_balance=closing_balance,
            total_debit=total_debit,
            total_credit=total_credit,
            warnings=history.warnings,
        )

    async def get_balance(self, entity_id: str, as_of: Any = None) -> Decimal:
        """거래처 하나의 잔액 (기준일 당일 포함, None이면 전체 이력)

        Raises:
            InvalidAsOfDateError: 기준일 파싱 불가
            EntityNotFoundError: 알 수 없는 거래처
        """
        cutoff_day: date | None = None
        if as_of is not None:
            parsed = parse_date(as_of, self.normalizer.tz)
            if isinstance(parsed, DateParseFailure):
                raise InvalidAsOfDateError(as_of, parsed.reason)
            cutoff_day = parsed

        entity = await self._require_entity(entity_id)
        history = await load_history(self.store, self.normalizer, entity)

        if cutoff_day is None:
            return final_balance(entity.party_type, history.events)
        return balance_as_of(entity.party_type, history.events, cutoff_day)

    # -------------------------------------------------------------------------
    # 내부
    # -------------------------------------------------------------------------

    def _parse_range(self, from_date: Any, to_date: Any) -> tuple[date, date]:
        start = parse_date(from_date, self.normalizer.tz)
        if isinstance(start, DateParseFailure):
            raise InvalidRangeError(
                f"Invalid from_date {from_date!r}: {start.reason}", from_date, to_date
            )
        end = parse_date(to_date, self.normalizer.tz)
        if isinstance(end, DateParseFailure):
            raise InvalidRangeError(
                f"Invalid to_date {to_date!r}: {end.reason}", from_date, to_date
            )
        if start > end:
            raise InvalidRangeError(
                f"from_date {start} is after to_date {end}", from_date, to_date
            )
        return start, end

    async def _require_entity(self, entity_id: str) -> Entity:
        entity = await self.store.fetch_entity(entity_id)
        if entity is None:
            raise EntityNotFoundError(entity_id)
        return entity
